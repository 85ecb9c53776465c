# anonchat/utils/utils.py

from ..extensions import socketio


def emit_args(notification):
    """
    Аргументы события: пустая полезная нагрузка отправляется без аргументов
    ('connected', 'searching', 'typing', 'pong' ...), как ждет клиент.
    """
    payload = notification.get('payload')
    return (payload,) if payload else ()


def emit_notifications(notifications):
    """
    Рассылает уведомления, которые вернули сервисы:
    [{'event': str, 'payload': dict, 'room': sid}, ...]
    """
    for notification in notifications or []:
        socketio.emit(
            notification['event'],
            *emit_args(notification),
            room=notification['room']
        )
