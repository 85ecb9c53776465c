# anonchat/services/matchmaking_service.py

import time
import threading
from typing import List, Optional, Callable, Tuple
from .waiting_pool import WaitingPool
from .pairing_table import PairingTable
from .stats_service import ChatStats
from .errors import WaitTimeoutError
from .notifications import (
    Notification,
    make_notification,
    EVENT_CONNECTED,
    EVENT_SEARCHING,
    EVENT_PARTNER_DISCONNECTED,
    EVENT_ERROR,
)


class MatchmakingService:
    """
    Отвечает ИСКЛЮЧИТЕЛЬНО за очередь ожидания и таблицу пар.
    Ничего не знает о транспорте: каждый метод возвращает список
    уведомлений, которые должен разослать вызывающий.

    Один замок покрывает и очередь, и таблицу пар.
    Приватные методы `_...` предполагают, что замок уже захвачен.
    """

    def __init__(self,
                 stats: Optional[ChatStats] = None,
                 log_event_func=None,
                 requeue_partner_on_unpair: bool = True,
                 rematch_on_skip: bool = True,
                 rematch_reporter: bool = False,
                 registry=None,
                 waiting_pool: Optional[WaitingPool] = None,
                 pairing_table: Optional[PairingTable] = None,
                 clock: Callable[[], float] = time.time):
        self.waiting_pool = waiting_pool if waiting_pool is not None else WaitingPool()
        self.pairing_table = pairing_table if pairing_table is not None else PairingTable()
        self.stats = stats if stats is not None else ChatStats()
        self.registry = registry
        self.clock = clock
        self.lock = threading.RLock()
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

        # Политики жизненного цикла пары (см. DESIGN.md)
        self.requeue_partner_on_unpair = requeue_partner_on_unpair
        self.rematch_on_skip = rematch_on_skip
        self.rematch_reporter = rematch_reporter

    ### Приватные методы ###

    def _enqueue(self, sid: str) -> List[Notification]:
        """Идемпотентная постановка в очередь + уведомление 'searching'."""
        joined_at = self.clock()
        self.waiting_pool.add(sid, joined_at)
        if self.registry is not None:
            self.registry.mark_joined(sid, joined_at)

        self.log_event("MATCHMAKING_QUEUED", f"Added to waiting pool. Waiting: {len(self.waiting_pool)}", sid=sid)
        return [make_notification(sid, EVENT_SEARCHING)]

    def _pair_or_enqueue(self, sid: str) -> List[Notification]:
        """
        Берет самого раннего кандидата из очереди (FIFO), который не является
        самим `sid`, или ставит `sid` в очередь.
        """
        candidate = self.waiting_pool.pop_candidate(sid)

        if candidate:
            self.waiting_pool.remove(sid)
            self.pairing_table.pair(sid, candidate.sid)
            self.stats.pairing_formed()
            self.log_event("MATCHMAKING_PAIRED", "Pair formed.", sid=sid, partner_sid=candidate.sid)
            return [
                make_notification(sid, EVENT_CONNECTED),
                make_notification(candidate.sid, EVENT_CONNECTED)
            ]

        return self._enqueue(sid)

    def _unpair(self, sid: str, requeue_partner: bool) -> List[Notification]:
        """
        Собеседник, возвращенный в поиск, только встает в очередь:
        пары создает лишь request_pairing.
        """
        partner_sid = self.pairing_table.unpair(sid)
        if partner_sid is None:
            return []

        notifications = [make_notification(partner_sid, EVENT_PARTNER_DISCONNECTED)]
        self.log_event("MATCHMAKING_UNPAIRED",
                       f"Pair removed. Partner requeued: {requeue_partner}",
                       sid=sid, partner_sid=partner_sid)

        if requeue_partner:
            notifications.extend(self._enqueue(partner_sid))

        return notifications

    ### Публичный API ###

    def request_pairing(self, sid: str) -> List[Notification]:
        """
        Единственная точка создания пар.
        Повторный 'join' от уже спаренного соединения игнорируется.
        """
        with self.lock:
            if sid in self.pairing_table:
                self.log_event("MATCHMAKING_WARN", "Join ignored: connection is already paired.", sid=sid)
                return []
            return self._pair_or_enqueue(sid)

    def unpair(self, sid: str, requeue_partner: Optional[bool] = None) -> List[Notification]:
        """
        Разрывает пару `sid`. Если `requeue_partner` не задан,
        используется настроенная политика.
        """
        if requeue_partner is None:
            requeue_partner = self.requeue_partner_on_unpair
        with self.lock:
            return self._unpair(sid, requeue_partner)

    def remove_from_waiting(self, sid: str) -> bool:
        with self.lock:
            removed = self.waiting_pool.remove(sid)

        if removed:
            self.log_event("MATCHMAKING_CANCEL", "Removed from waiting pool.", sid=sid)
        return removed

    def skip(self, sid: str) -> List[Notification]:
        """
        'next' / 'skip': разрыв пары, затем (по политике) новый поиск.
        Инициатор никогда не остается одновременно в паре и в очереди.
        """
        with self.lock:
            notifications = self._unpair(sid, self.requeue_partner_on_unpair)
            self.waiting_pool.remove(sid)

            if self.rematch_on_skip:
                notifications.extend(self._pair_or_enqueue(sid))

        self.log_event("MATCHMAKING_SKIP", f"Skip handled. Rematch: {self.rematch_on_skip}", sid=sid)
        return notifications

    def report(self, sid: str) -> Tuple[Optional[str], List[Notification]]:
        """
        Разрыв пары после жалобы, атомарно вместе с определением обвиненного.
        Обвиненный собеседник НЕ возвращается в очередь автоматически;
        автор жалобы по умолчанию остается без пары.

        Возвращает (sid обвиненного или None, уведомления).
        Запись самой жалобы делает вызывающий (ModerationService).
        """
        with self.lock:
            reported_sid = self.pairing_table.partner_of(sid)
            if reported_sid is None:
                return None, []

            notifications = self._unpair(sid, requeue_partner=False)

            if self.rematch_reporter:
                notifications.extend(self._pair_or_enqueue(sid))

        return reported_sid, notifications

    def handle_disconnect(self, sid: str) -> List[Notification]:
        """
        Отключение: удаляем из очереди, собеседник всегда
        возвращается к поиску.
        """
        with self.lock:
            self.waiting_pool.remove(sid)
            return self._unpair(sid, requeue_partner=True)

    def evict_stale(self, max_age: float) -> List[Notification]:
        """
        Удаляет из очереди тех, кто ждет дольше `max_age` секунд,
        и уведомляет их ошибкой 'timeout'.
        """
        with self.lock:
            stale_entries = self.waiting_pool.pop_stale(self.clock(), max_age)

        notifications = []
        for entry in stale_entries:
            self.log_event("MATCHMAKING_STALE_EVICTED", f"Evicted after waiting > {max_age}s.", sid=entry.sid)
            notifications.append(make_notification(entry.sid, EVENT_ERROR, WaitTimeoutError().to_payload()))
        return notifications

    ### Чтение состояния ###

    def partner_of(self, sid: str) -> Optional[str]:
        with self.lock:
            return self.pairing_table.partner_of(sid)

    def is_waiting(self, sid: str) -> bool:
        with self.lock:
            return sid in self.waiting_pool

    def waiting_count(self) -> int:
        with self.lock:
            return len(self.waiting_pool)

    def check_invariants(self) -> bool:
        """
        Таблица симметрична и без пар с самим собой, очередь без дублей,
        ни один SID не находится одновременно в очереди и в паре.
        """
        with self.lock:
            waiting = self.waiting_pool.sids()
            if len(waiting) != len(set(waiting)):
                return False
            if any(sid in self.pairing_table for sid in waiting):
                return False
            return self.pairing_table.is_consistent()
