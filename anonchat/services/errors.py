# anonchat/services/errors.py

from typing import Dict, Any


class ChatError(Exception):
    """
    Базовая ошибка чата. Всегда локальна для одного соединения:
    превращается в уведомление 'error' только для отправителя.
    """
    error_type = 'server_error'
    default_message = 'Server error occurred'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_payload(self) -> Dict[str, Any]:
        return {'type': self.error_type, 'message': self.message}


class NoPartnerError(ChatError):
    error_type = 'no_partner'
    default_message = 'No partner connected'


class VerificationFailedError(ChatError):
    error_type = 'captcha_failed'
    default_message = 'reCAPTCHA verification failed'


class InvalidMessageError(ChatError):
    error_type = 'invalid_message'
    default_message = 'Invalid message content'


class MessageTooLongError(ChatError):
    error_type = 'message_too_long'
    default_message = 'Message too long'


class WaitTimeoutError(ChatError):
    error_type = 'timeout'
    default_message = 'No partner found in time. Please join again.'


class PairingInvariantError(RuntimeError):
    """Нарушение инварианта очереди/таблицы пар. Это баг, а не ошибка клиента."""
