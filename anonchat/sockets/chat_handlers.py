# anonchat/sockets/chat_handlers.py

from flask import request, current_app
from ..extensions import socketio
from ..services.commands import ChatCommand
from ..utils.utils import emit_notifications


def _dispatch(command, data=None):
    chat_service = current_app.chat_service
    emit_notifications(chat_service.handle(request.sid, command, data))


@socketio.on('join')
def handle_join(data=None):
    _dispatch(ChatCommand.JOIN)


@socketio.on('message')
def handle_message(data=None):
    """{'text': str, 'captcha': str}"""
    _dispatch(ChatCommand.MESSAGE, data)


@socketio.on('typing')
def handle_typing(data=None):
    _dispatch(ChatCommand.TYPING)


@socketio.on('stopTyping')
def handle_stop_typing(data=None):
    _dispatch(ChatCommand.STOP_TYPING)


@socketio.on('next')
def handle_next(data=None):
    _dispatch(ChatCommand.NEXT)


@socketio.on('skip')
def handle_skip(data=None):
    _dispatch(ChatCommand.SKIP)


@socketio.on('report')
def handle_report(data=None):
    """{'reason': str}"""
    _dispatch(ChatCommand.REPORT, data)
