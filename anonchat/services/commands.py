# anonchat/services/commands.py

from enum import Enum


class ChatCommand(str, Enum):
    """Конечный набор команд, которые соединение может прислать серверу."""
    JOIN = 'join'
    MESSAGE = 'message'
    TYPING = 'typing'
    STOP_TYPING = 'stopTyping'
    NEXT = 'next'
    SKIP = 'skip'
    REPORT = 'report'
    PING = 'ping'
    DISCONNECT = 'disconnect'
