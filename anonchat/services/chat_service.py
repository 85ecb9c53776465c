# anonchat/services/chat_service.py

import logging
from typing import Optional, Dict, Any, List
from marshmallow import ValidationError
from ..api.schemas import MessageSchema, ReportSchema
from .commands import ChatCommand
from .connection_registry import ConnectionRegistry
from .matchmaking_service import MatchmakingService
from .relay_service import RelayService
from .moderation_service import ModerationService
from .stats_service import ChatStats
from .errors import ChatError
from .notifications import Notification, make_notification, EVENT_ERROR, EVENT_PONG

logger = logging.getLogger(__name__)

SERVER_ERROR_PAYLOAD = {'type': 'server_error', 'message': 'Server error occurred'}


class ChatService:
    """
    Фасад, через который проходит каждая команда соединения.
    Не владеет состоянием, а делегирует его специализированным сервисам.
    Команды одного соединения обрабатываются строго по очереди
    (под `event_lock` его сессии).
    """

    def __init__(self,
                 registry: ConnectionRegistry,
                 matchmaker: MatchmakingService,
                 relay: RelayService,
                 moderation: ModerationService,
                 stats: ChatStats,
                 log_event_func=None):
        """
        Инициализируется через Внедрение Зависимостей (Dependency Injection).
        """
        self.registry = registry
        self.matchmaker = matchmaker
        self.relay = relay
        self.moderation = moderation
        self.stats = stats
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

        self._handlers = {
            ChatCommand.JOIN: self._handle_join,
            ChatCommand.MESSAGE: self._handle_message,
            ChatCommand.TYPING: self._handle_typing,
            ChatCommand.STOP_TYPING: self._handle_stop_typing,
            ChatCommand.NEXT: self._handle_skip,
            ChatCommand.SKIP: self._handle_skip,
            ChatCommand.REPORT: self._handle_report,
            ChatCommand.PING: self._handle_ping,
            ChatCommand.DISCONNECT: self._handle_disconnect,
        }

    ### Управление подключением ###

    def connect(self, sid: str) -> List[Notification]:
        if self.registry.get(sid) is None:
            self.registry.open(sid)
            self.stats.connection_opened()
        return []

    def disconnect(self, sid: str) -> List[Notification]:
        return self.handle(sid, ChatCommand.DISCONNECT)

    ### Единая точка входа для команд ###

    def handle(self, sid: str, command, data: Optional[Any] = None) -> List[Notification]:
        try:
            command = ChatCommand(command)
        except ValueError:
            logger.warning(f"[ChatService] Неизвестная команда '{command}' от {sid}.")
            return []

        session = self.registry.get(sid)
        if session is None:
            if command == ChatCommand.DISCONNECT:
                # Сессии уже нет, но в очереди/паре могли остаться следы
                return self._safe_dispatch(sid, command, data)
            logger.warning(f"[ChatService] Команда '{command.value}' от незарегистрированного соединения {sid}.")
            return []

        with session.event_lock:
            return self._safe_dispatch(sid, command, data)

    def _safe_dispatch(self, sid: str, command: ChatCommand, data) -> List[Notification]:
        try:
            return self._handlers[command](sid, data)
        except ChatError as e:
            return [make_notification(sid, EVENT_ERROR, e.to_payload())]
        except Exception as e:
            logger.error(f"[ChatService] Ошибка при обработке '{command.value}' для {sid}: {e}", exc_info=True)
            return [make_notification(sid, EVENT_ERROR, dict(SERVER_ERROR_PAYLOAD))]

    ### Обработчики команд ###

    def _handle_join(self, sid: str, data) -> List[Notification]:
        self.log_event("JOIN", "Joined the queue.", sid=sid)
        return self.matchmaker.request_pairing(sid)

    def _handle_message(self, sid: str, data) -> List[Notification]:
        try:
            payload = MessageSchema().load(data if data is not None else {})
        except ValidationError:
            # Порядок ошибок определяет RelayService (сначала пара, затем капча)
            payload = {'text': None, 'captcha': None}

        return self.relay.relay_message(sid, payload['text'], payload['captcha'])

    def _handle_typing(self, sid: str, data) -> List[Notification]:
        return self.relay.relay_typing(sid, True)

    def _handle_stop_typing(self, sid: str, data) -> List[Notification]:
        return self.relay.relay_typing(sid, False)

    def _handle_skip(self, sid: str, data) -> List[Notification]:
        self.log_event("SKIP", "Requested next chat.", sid=sid)
        return self.matchmaker.skip(sid)

    def _handle_report(self, sid: str, data) -> List[Notification]:
        try:
            reason = ReportSchema().load(data if data is not None else {})['reason']
        except ValidationError:
            raw = data.get('reason') if isinstance(data, dict) else None
            reason = raw if isinstance(raw, str) else "unspecified"

        reported_sid, notifications = self.matchmaker.report(sid)
        if reported_sid is None:
            logger.warning(f"[ChatService] Жалоба от {sid} проигнорирована: собеседника нет.")
        else:
            self.moderation.record_report(sid, reported_sid, reason)

        return notifications

    def _handle_ping(self, sid: str, data) -> List[Notification]:
        return [make_notification(sid, EVENT_PONG)]

    def _handle_disconnect(self, sid: str, data) -> List[Notification]:
        notifications = self.matchmaker.handle_disconnect(sid)
        if self.registry.close(sid) is not None:
            self.stats.connection_closed()
        self.log_event("DISCONNECT", "Connection closed.", sid=sid)
        return notifications

    ### Фоновые задачи и статистика ###

    def sweep_stale(self, max_age: float) -> List[Notification]:
        return self.matchmaker.evict_stale(max_age)

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.snapshot(waiting_count=self.matchmaker.waiting_count())
