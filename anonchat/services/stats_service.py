# anonchat/services/stats_service.py

import threading
from typing import Dict, Any


class ChatStats:
    """
    Агрегированные счетчики. Не являются источником истины:
    размер очереди берется у MatchmakingService в момент чтения.
    """
    def __init__(self):
        self.active_connections: int = 0
        self.total_pairings: int = 0
        self.total_messages: int = 0
        self.lock = threading.Lock()

    def connection_opened(self) -> None:
        with self.lock:
            self.active_connections += 1

    def connection_closed(self) -> None:
        with self.lock:
            if self.active_connections > 0:
                self.active_connections -= 1

    def pairing_formed(self) -> None:
        with self.lock:
            self.total_pairings += 1

    def message_relayed(self) -> None:
        with self.lock:
            self.total_messages += 1

    def snapshot(self, waiting_count: int = 0) -> Dict[str, Any]:
        with self.lock:
            return {
                'onlineUsers': self.active_connections,
                'totalChatsToday': self.total_pairings,
                'totalMessages': self.total_messages,
                'waitingInQueue': waiting_count,
            }
