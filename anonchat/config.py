# anonchat/config.py

import os

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def _env_flag(name, default):
    return os.getenv(name, "true" if default else "false").lower() in ("1", "true", "yes", "on")


class Config:
    """Базовый класс конфигурации (безопасные значения)."""

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-SHOULD-BE-CHANGED')

    LOG_FILE = os.getenv('ANONCHAT_LOG_FILE', 'application.log')
    REPORTS_LOG_FILE = os.getenv('ANONCHAT_REPORTS_LOG_FILE', 'reports.log')

    # --- Проверка человека (reCAPTCHA) ---
    RECAPTCHA_SECRET_KEY = os.getenv('RECAPTCHA_SECRET_KEY', '')
    RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
    RECAPTCHA_TIMEOUT_SECONDS = 8
    # Без секрета: True - отклонять сообщения, False - пропускать (dev)
    REQUIRE_RECAPTCHA = _env_flag('REQUIRE_RECAPTCHA', False)

    # --- Политики жизненного цикла пары ---
    # Возвращать ли брошенного собеседника в поиск при 'next'/'skip'
    REQUEUE_PARTNER_ON_UNPAIR = _env_flag('REQUEUE_PARTNER_ON_UNPAIR', True)
    # Сразу искать нового собеседника инициатору 'next'/'skip'
    REMATCH_ON_SKIP = _env_flag('REMATCH_ON_SKIP', True)
    # Сразу искать нового собеседника автору жалобы
    REMATCH_REPORTER = _env_flag('REMATCH_REPORTER', False)

    # --- Лимиты ---
    MAX_MESSAGE_LENGTH = 500
    WAITING_TIMEOUT_SECONDS = 5 * 60
    STALE_SWEEP_INTERVAL_SECONDS = 30
    STATS_RATE_LIMIT = "60 per minute"

    # Фоновые воркеры (очередь уведомлений, очистка очереди ожидания)
    START_BACKGROUND_WORKERS = True
