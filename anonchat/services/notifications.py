# anonchat/services/notifications.py

from typing import Dict, Any, Optional

# { 'event': str, 'payload': dict, 'room': sid }
Notification = Dict[str, Any]

EVENT_CONNECTED = 'connected'
EVENT_SEARCHING = 'searching'
EVENT_PARTNER_DISCONNECTED = 'partner-disconnected'
EVENT_MESSAGE = 'message'
EVENT_TYPING = 'typing'
EVENT_STOP_TYPING = 'stopTyping'
EVENT_ERROR = 'error'
EVENT_PONG = 'pong'


def make_notification(room: str, event: str, payload: Optional[Dict[str, Any]] = None) -> Notification:
    return {
        'event': event,
        'payload': payload if payload is not None else {},
        'room': room
    }
