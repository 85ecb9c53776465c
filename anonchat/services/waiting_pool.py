# anonchat/services/waiting_pool.py

from typing import List, Optional


class WaitingEntry:
    """Запись в очереди ожидания: SID + время постановки в очередь."""

    def __init__(self, sid: str, joined_at: float):
        self.sid = sid
        self.joined_at = joined_at

    def __repr__(self):
        return f"WaitingEntry(sid={self.sid!r}, joined_at={self.joined_at})"


class WaitingPool:
    """
    Упорядоченная (FIFO) очередь соединений, ищущих собеседника.
    Сама по себе НЕ потокобезопасна: все обращения идут
    под замком MatchmakingService.
    """

    def __init__(self):
        self._entries: List[WaitingEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, sid: str) -> bool:
        return any(entry.sid == sid for entry in self._entries)

    def sids(self) -> List[str]:
        return [entry.sid for entry in self._entries]

    def entries(self) -> List[WaitingEntry]:
        return list(self._entries)

    def add(self, sid: str, joined_at: float) -> WaitingEntry:
        """
        Идемпотентная постановка в очередь: старая запись этого SID
        удаляется, новая добавляется в конец.
        """
        self.remove(sid)
        entry = WaitingEntry(sid, joined_at)
        self._entries.append(entry)
        return entry

    def remove(self, sid: str) -> bool:
        """Удаляет SID из очереди. Возвращает True, если он там был."""
        before = len(self._entries)
        self._entries = [entry for entry in self._entries if entry.sid != sid]
        return len(self._entries) != before

    def pop_candidate(self, sid: str) -> Optional[WaitingEntry]:
        """Извлекает самого раннего кандидата, который не является самим `sid`."""
        for index, entry in enumerate(self._entries):
            if entry.sid != sid:
                return self._entries.pop(index)
        return None

    def pop_stale(self, now: float, max_age: float) -> List[WaitingEntry]:
        """Извлекает все записи, ожидающие дольше `max_age` секунд."""
        stale = [entry for entry in self._entries if now - entry.joined_at > max_age]
        if stale:
            self._entries = [entry for entry in self._entries if now - entry.joined_at <= max_age]
        return stale
