# anonchat/services/pairing_table.py

from typing import Dict, Optional, List, Tuple
from .errors import PairingInvariantError


class PairingTable:
    """
    Симметричная таблица пар: sid -> sid собеседника.
    Записи создаются и удаляются только парами.
    Как и WaitingPool, защищается замком MatchmakingService.
    """

    def __init__(self):
        self._partners: Dict[str, str] = {}

    def __len__(self) -> int:
        """Количество активных пар (не записей)."""
        return len(self._partners) // 2

    def __contains__(self, sid: str) -> bool:
        return sid in self._partners

    def partner_of(self, sid: str) -> Optional[str]:
        return self._partners.get(sid)

    def pair(self, sid_a: str, sid_b: str) -> None:
        if sid_a == sid_b:
            raise PairingInvariantError(f"Self-pair attempted for {sid_a}")
        if sid_a in self._partners or sid_b in self._partners:
            raise PairingInvariantError(f"{sid_a} or {sid_b} is already paired")

        self._partners[sid_a] = sid_b
        self._partners[sid_b] = sid_a

    def unpair(self, sid: str) -> Optional[str]:
        """
        Удаляет пару, в которой участвует `sid`.
        Возвращает SID бывшего собеседника или None.
        """
        partner_sid = self._partners.pop(sid, None)
        if partner_sid is None:
            return None

        if self._partners.get(partner_sid) == sid:
            del self._partners[partner_sid]
        return partner_sid

    def pairs(self) -> List[Tuple[str, str]]:
        """Каждая пара ровно один раз (отсортированные кортежи)."""
        return sorted({tuple(sorted(item)) for item in self._partners.items()})

    def is_consistent(self) -> bool:
        """Симметричность и отсутствие пар с самим собой."""
        for sid, partner_sid in self._partners.items():
            if sid == partner_sid or self._partners.get(partner_sid) != sid:
                return False
        return True
