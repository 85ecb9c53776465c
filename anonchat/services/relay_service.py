# anonchat/services/relay_service.py

from typing import List
from .matchmaking_service import MatchmakingService
from .connection_registry import ConnectionRegistry
from .verification_service import RecaptchaVerifier
from .stats_service import ChatStats
from .errors import (
    NoPartnerError,
    VerificationFailedError,
    InvalidMessageError,
    MessageTooLongError,
)
from .notifications import (
    Notification,
    make_notification,
    EVENT_MESSAGE,
    EVENT_TYPING,
    EVENT_STOP_TYPING,
)

DEFAULT_MAX_MESSAGE_LENGTH = 500


class RelayService:
    """
    Пересылает события чата собеседнику.
    Ошибки клиента выбрасываются как ChatError, их превращением
    в уведомления занимается ChatService.
    """

    def __init__(self,
                 matchmaker: MatchmakingService,
                 registry: ConnectionRegistry,
                 verifier: RecaptchaVerifier,
                 stats: ChatStats,
                 max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
                 log_event_func=None):
        self.matchmaker = matchmaker
        self.registry = registry
        self.verifier = verifier
        self.stats = stats
        self.max_message_length = max_message_length
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

    def _ensure_verified(self, sid: str, token) -> None:
        """Капча проверяется не более одного раза за время жизни соединения."""
        if self.registry.is_verified(sid):
            return

        if not self.verifier.verify(token):
            self.log_event("VERIFICATION_FAILED", "Human verification rejected.", sid=sid)
            raise VerificationFailedError()

        self.registry.mark_verified(sid)
        self.log_event("VERIFICATION_OK", "Connection verified for this session.", sid=sid)

    def _validate_text(self, text) -> str:
        if not isinstance(text, str):
            raise InvalidMessageError()

        trimmed = text.strip()
        if not trimmed:
            raise InvalidMessageError()
        if len(trimmed) > self.max_message_length:
            raise MessageTooLongError()
        return trimmed

    def relay_message(self, sid: str, text, verification_token=None) -> List[Notification]:
        if self.matchmaker.partner_of(sid) is None:
            raise NoPartnerError()

        self._ensure_verified(sid, verification_token)
        trimmed = self._validate_text(text)

        # Пара могла распасться, пока шла проверка капчи
        partner_sid = self.matchmaker.partner_of(sid)
        if partner_sid is None:
            raise NoPartnerError()

        self.stats.message_relayed()
        return [make_notification(partner_sid, EVENT_MESSAGE, {'text': trimmed})]

    def relay_typing(self, sid: str, is_typing: bool) -> List[Notification]:
        partner_sid = self.matchmaker.partner_of(sid)
        if partner_sid is None:
            return []

        event = EVENT_TYPING if is_typing else EVENT_STOP_TYPING
        return [make_notification(partner_sid, event)]
