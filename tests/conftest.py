from __future__ import annotations

import os
import socket
from typing import Any

import pytest

from anonchat.services.chat_service import ChatService
from anonchat.services.connection_registry import ConnectionRegistry
from anonchat.services.matchmaking_service import MatchmakingService
from anonchat.services.moderation_service import ModerationService
from anonchat.services.relay_service import RelayService
from anonchat.services.stats_service import ChatStats


class NetworkBlockedError(RuntimeError):
    pass


def _blocked(*_args: Any, **_kwargs: Any) -> Any:
    raise NetworkBlockedError(
        "Network access is disabled during tests. "
        "Mark the test with @pytest.mark.network or set ALLOW_NETWORK=1."
    )


@pytest.fixture(autouse=True)
def _disable_network(monkeypatch: pytest.MonkeyPatch, request: pytest.FixtureRequest) -> None:
    """Prevent accidental outbound network calls in unit tests."""

    if os.getenv("ALLOW_NETWORK") == "1":
        return

    if request.node.get_closest_marker("network"):
        return

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket, "getaddrinfo", _blocked)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubVerifier:
    """Accepts only the configured token and counts calls."""

    def __init__(self, accepted_token: str = "good-token") -> None:
        self.accepted_token = accepted_token
        self.calls: list[Any] = []

    def verify(self, token: Any) -> bool:
        self.calls.append(token)
        return token == self.accepted_token


def build_chat(
    *,
    requeue_partner_on_unpair: bool = True,
    rematch_on_skip: bool = True,
    rematch_reporter: bool = False,
    verifier: Any = None,
    clock: FakeClock | None = None,
) -> ChatService:
    clock = clock or FakeClock()
    stats = ChatStats()
    registry = ConnectionRegistry(clock=clock)
    matchmaker = MatchmakingService(
        stats=stats,
        requeue_partner_on_unpair=requeue_partner_on_unpair,
        rematch_on_skip=rematch_on_skip,
        rematch_reporter=rematch_reporter,
        registry=registry,
        clock=clock,
    )
    relay = RelayService(
        matchmaker=matchmaker,
        registry=registry,
        verifier=verifier or StubVerifier(),
        stats=stats,
    )
    return ChatService(
        registry=registry,
        matchmaker=matchmaker,
        relay=relay,
        moderation=ModerationService(),
        stats=stats,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def matchmaker(clock: FakeClock) -> MatchmakingService:
    return MatchmakingService(clock=clock)


@pytest.fixture
def chat(clock: FakeClock) -> ChatService:
    return build_chat(clock=clock)


def events_for(notifications: list[dict], sid: str) -> list[str]:
    return [n["event"] for n in notifications if n["room"] == sid]
