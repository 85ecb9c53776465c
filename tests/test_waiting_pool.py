import pytest

from anonchat.services.errors import PairingInvariantError
from anonchat.services.pairing_table import PairingTable
from anonchat.services.waiting_pool import WaitingPool


def test_add_is_idempotent_and_moves_entry_to_the_back() -> None:
    pool = WaitingPool()
    pool.add("a", 1.0)
    pool.add("b", 2.0)
    pool.add("a", 3.0)

    assert pool.sids() == ["b", "a"]
    assert len(pool) == 2
    assert pool.entries()[-1].joined_at == 3.0


def test_pop_candidate_is_fifo_and_skips_only_self() -> None:
    pool = WaitingPool()
    for i, sid in enumerate(["self", "b", "c"]):
        pool.add(sid, float(i))

    candidate = pool.pop_candidate("self")

    assert candidate is not None and candidate.sid == "b"
    assert pool.sids() == ["self", "c"]


def test_pop_candidate_returns_none_when_only_self_waits() -> None:
    pool = WaitingPool()
    pool.add("a", 0.0)

    assert pool.pop_candidate("a") is None
    assert "a" in pool


def test_pop_stale_removes_only_expired_entries() -> None:
    pool = WaitingPool()
    pool.add("old", 0.0)
    pool.add("fresh", 250.0)

    stale = pool.pop_stale(now=301.0, max_age=300)

    assert [entry.sid for entry in stale] == ["old"]
    assert pool.sids() == ["fresh"]


def test_pairing_table_is_symmetric_and_unpairs_both_sides() -> None:
    table = PairingTable()
    table.pair("a", "b")

    assert table.partner_of("a") == "b"
    assert table.partner_of("b") == "a"
    assert table.pairs() == [("a", "b")]

    assert table.unpair("b") == "a"
    assert "a" not in table and "b" not in table
    assert table.unpair("a") is None


def test_pairing_table_rejects_self_pairs_and_double_pairing() -> None:
    table = PairingTable()

    with pytest.raises(PairingInvariantError):
        table.pair("a", "a")

    table.pair("a", "b")
    with pytest.raises(PairingInvariantError):
        table.pair("a", "c")
    with pytest.raises(PairingInvariantError):
        table.pair("c", "b")

    assert table.is_consistent()
    assert len(table) == 1
