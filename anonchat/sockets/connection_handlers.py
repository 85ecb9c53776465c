# anonchat/sockets/connection_handlers.py
from flask import request, current_app
from ..extensions import socketio
from ..services.commands import ChatCommand
from ..utils.utils import emit_notifications


@socketio.on('connect')
def handle_connect(auth=None):
    """Анонимное подключение: никакой аутентификации, только регистрация сессии."""
    chat_service = current_app.chat_service
    emit_notifications(chat_service.connect(request.sid))


@socketio.on('ping')
def handle_ping():
    chat_service = current_app.chat_service
    emit_notifications(chat_service.handle(request.sid, ChatCommand.PING))


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    chat_service = current_app.chat_service
    emit_notifications(chat_service.disconnect(request.sid))
