# anonchat/services/connection_registry.py

import time
import threading
from typing import Optional, Dict, Callable


class ChatSession:
    """
    Запись об одном активном соединении.
    `event_lock` сериализует события одного соединения
    (включая медленную проверку капчи), не трогая чужие.
    """
    def __init__(self, sid: str, connected_at: float):
        self.sid = sid
        self.verified: bool = False
        self.connected_at: float = connected_at
        self.joined_at: Optional[float] = None
        self.event_lock = threading.RLock()


class ConnectionRegistry:
    """
    Отвечает ИСКЛЮЧИТЕЛЬНО за хранение сессий активных соединений.
    Потокобезопасен.
    """
    def __init__(self, log_event_func=None, clock: Callable[[], float] = time.time):
        self.sessions: Dict[str, ChatSession] = {}
        self.lock = threading.RLock()
        self.clock = clock
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

    def open(self, sid: str) -> ChatSession:
        """Регистрирует соединение. Повторный open возвращает существующую сессию."""
        with self.lock:
            session = self.sessions.get(sid)
            if session:
                self.log_event("REGISTRY_WARN", "Session already registered.", sid=sid)
                return session

            session = ChatSession(sid, self.clock())
            self.sessions[sid] = session
            self.log_event("SESSION_START", f"Session opened. Active: {len(self.sessions)}", sid=sid)
            return session

    def close(self, sid: str) -> Optional[ChatSession]:
        with self.lock:
            session = self.sessions.pop(sid, None)
            if session:
                self.log_event("SESSION_END", f"Session closed. Active: {len(self.sessions)}", sid=sid)
            return session

    def get(self, sid: str) -> Optional[ChatSession]:
        with self.lock:
            return self.sessions.get(sid)

    def is_verified(self, sid: str) -> bool:
        session = self.get(sid)
        return bool(session and session.verified)

    def mark_verified(self, sid: str) -> bool:
        """Возвращает False, если сессия уже закрыта."""
        with self.lock:
            session = self.sessions.get(sid)
            if not session:
                return False
            session.verified = True
            return True

    def mark_joined(self, sid: str, joined_at: float) -> None:
        with self.lock:
            session = self.sessions.get(sid)
            if session:
                session.joined_at = joined_at

    def count(self) -> int:
        with self.lock:
            return len(self.sessions)
