# anonchat/extensions.py
"""
Инициализация расширений Flask и глобальных объектов.

Этот файл централизует создание экземпляров расширений (SocketIO, Limiter),
чтобы избежать циклических импортов и упростить управление в фабрике приложений (app factory).
"""

from flask_socketio import SocketIO
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import queue

# --- Расширения Flask ---

# SocketIO для обработки WebSocket соединений
# cors_allowed_origins="*" - анонимный чат открыт для любых источников.
socketio = SocketIO(cors_allowed_origins="*", compress=True)

# Limiter для ограничения частоты запросов к REST (статистика, health)
limiter = Limiter(key_func=get_remote_address)


# --- Глобальное управление состоянием ---

# Потокобезопасная очередь для уведомлений, которые рождаются
# вне обработчиков SocketIO (например, в фоновой очистке очереди ожидания).
notification_queue: queue.Queue = queue.Queue()
