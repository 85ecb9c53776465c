import os
import time
import logging
from flask import Flask
from .extensions import (
    socketio,
    limiter,
    notification_queue
)
from .globals import log_event
from .workers import start_notification_consumer, start_stale_sweeper

# Получаем логгер
logger = logging.getLogger(__name__)


def _configure_logging(app):
    """Настраивает файловый логгер (идемпотентно для повторных create_app)."""
    log_path = os.path.abspath(app.config['LOG_FILE'])
    package_logger = logging.getLogger('anonchat')
    package_logger.setLevel(logging.INFO)

    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
            break
    else:
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        package_logger.addHandler(file_handler)

    app.logger.setLevel(logging.INFO)
    logger.info("Файловый логгер настроен.")


def _register_socketio_handlers():
    """
    Импортирует обработчики SocketIO для их регистрации.
    Вызывается ДО socketio.init_app, чтобы обработчики попали
    в каждый новый сервер (важно для тестов с несколькими app).
    """
    from .sockets import connection_handlers
    from .sockets import chat_handlers
    logger.info("Обработчики SocketIO (connection, chat) зарегистрированы.")


def _init_extensions(app):
    """Инициализирует расширения Flask."""
    socketio.init_app(app)
    limiter.init_app(app)
    logger.info("Расширения Flask (SocketIO, Limiter) инициализированы.")


def _init_services(app):
    """Инициализирует и внедряет сервисы приложения."""
    from .services.connection_registry import ConnectionRegistry
    from .services.stats_service import ChatStats
    from .services.matchmaking_service import MatchmakingService
    from .services.verification_service import RecaptchaVerifier
    from .services.relay_service import RelayService
    from .services.moderation_service import ModerationService
    from .services.chat_service import ChatService

    config = app.config

    stats = ChatStats()
    registry = ConnectionRegistry(log_event_func=log_event)
    matchmaker = MatchmakingService(
        stats=stats,
        log_event_func=log_event,
        requeue_partner_on_unpair=config['REQUEUE_PARTNER_ON_UNPAIR'],
        rematch_on_skip=config['REMATCH_ON_SKIP'],
        rematch_reporter=config['REMATCH_REPORTER'],
        registry=registry
    )
    relay = RelayService(
        matchmaker=matchmaker,
        registry=registry,
        verifier=RecaptchaVerifier.from_config(config),
        stats=stats,
        max_message_length=config['MAX_MESSAGE_LENGTH'],
        log_event_func=log_event
    )
    moderation = ModerationService(
        reports_log_path=config.get('REPORTS_LOG_FILE'),
        log_event_func=log_event
    )

    # Прикрепляем главный сервис к экземпляру приложения
    app.chat_service = ChatService(
        registry=registry,
        matchmaker=matchmaker,
        relay=relay,
        moderation=moderation,
        stats=stats,
        log_event_func=log_event
    )
    logger.info("Сервисы чата (ChatService, Matchmaking, Relay...) инициализированы.")


def _register_blueprints(app):
    """Регистрирует все маршруты API (Blueprints)."""
    from .api.main_routes import bp as main_bp
    app.register_blueprint(main_bp)

    logger.info("Blueprints (маршруты API) зарегистрированы.")


def create_app(test_config=None):
    """
    Фабрика приложений (Паттерн Application Factory).
    """

    app = Flask(__name__, instance_relative_config=True)

    # 1. Загрузка конфигурации
    app.config.from_object('anonchat.config.Config')
    app.config.from_pyfile('config.py', silent=True)
    if test_config:
        app.config.from_mapping(test_config)
    app.config['STARTED_AT'] = time.time()

    # 2. Настройка логирования
    _configure_logging(app)

    # 3. Регистрация обработчиков SocketIO и инициализация расширений
    _register_socketio_handlers()
    _init_extensions(app)

    # 4. Инициализация сервисов
    _init_services(app)

    # 5. Регистрация Blueprints (маршрутов API)
    _register_blueprints(app)

    # 6. Запуск фоновых воркеров
    if app.config['START_BACKGROUND_WORKERS']:
        logger.info("Запуск фоновых воркеров (QueueConsumer, StaleSweeper)...")
        start_notification_consumer(socketio, notification_queue)
        start_stale_sweeper(
            socketio,
            app.chat_service,
            notification_queue,
            interval=app.config['STALE_SWEEP_INTERVAL_SECONDS'],
            max_age=app.config['WAITING_TIMEOUT_SECONDS']
        )

    app.logger.info("Приложение 'anonchat' создано.")
    app.logger.info(f"Путь к логам: {app.config['LOG_FILE']}")

    return app, socketio
