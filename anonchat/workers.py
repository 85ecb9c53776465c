import logging
from .utils.utils import emit_args

logger = logging.getLogger(__name__)


def _notification_queue_consumer(socketio_instance, queue_instance):
    """
    Фоновый воркер (consumer) для обработки очереди уведомлений.
    Извлекает сообщения из `notification_queue` и отправляет их
    клиентам через SocketIO.
    """
    logger.info("[QueueConsumer] Поток-потребитель для emit'ов запущен.")
    while True:
        try:
            msg = queue_instance.get()
            if msg is None:
                logger.info("[QueueConsumer] Получен сигнал None, завершение работы.")
                break

            event = msg.get('event')
            room = msg.get('room')

            if not event or not room:
                logger.warning(f"[QueueConsumer] Пропуск невалидного сообщения: {msg}")
                continue

            socketio_instance.emit(event, *emit_args(msg), room=room)

        except Exception as e:
            logger.error(f"[QueueConsumer] КРИТИЧЕСКАЯ ОШИБКА в потоке-потребителе: {e}", exc_info=True)
            socketio_instance.sleep(1)


def _stale_waiting_sweeper(socketio_instance, chat_service, queue_instance, interval, max_age):
    """
    Периодически выселяет из очереди ожидания тех, кто ждет дольше `max_age`.
    Уведомления уходят через общую очередь.
    """
    logger.info(f"[StaleSweeper] Очистка очереди ожидания запущена (interval={interval}s, max_age={max_age}s).")
    while True:
        socketio_instance.sleep(interval)
        try:
            for notification in chat_service.sweep_stale(max_age):
                queue_instance.put(notification)
        except Exception as e:
            logger.error(f"[StaleSweeper] Ошибка во время очистки: {e}", exc_info=True)


def start_notification_consumer(socketio_instance, queue_instance):
    """
    Публичная функция для запуска воркера из create_app.
    """
    socketio_instance.start_background_task(
        target=_notification_queue_consumer,
        socketio_instance=socketio_instance,
        queue_instance=queue_instance
    )


def start_stale_sweeper(socketio_instance, chat_service, queue_instance, interval, max_age):
    socketio_instance.start_background_task(
        target=_stale_waiting_sweeper,
        socketio_instance=socketio_instance,
        chat_service=chat_service,
        queue_instance=queue_instance,
        interval=interval,
        max_age=max_age
    )
