from __future__ import annotations

from collections.abc import Iterator

import fakeredis
import pytest
import redis

from app.main import app
from routes.game import get_game_machine
from services.game_sessions import GameSessionMachine
from services.settings import StoreSettings
from services.store import SessionStore


class FakeClock:
    """Wall clock the tests move by hand (seconds since epoch)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DownRedis:
    """Stands in for a Redis server that refuses connections."""

    def __init__(self, message: str = "Error 111 connecting to localhost:6379. Connection refused.") -> None:
        self.message = message
        self.ping_calls = 0

    def ping(self) -> bool:
        self.ping_calls += 1
        raise redis.exceptions.ConnectionError(self.message)


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(fake_redis: fakeredis.FakeRedis, clock: FakeClock) -> SessionStore:
    return SessionStore(StoreSettings(), client_factory=lambda _settings: fake_redis, wall_clock=clock)


@pytest.fixture()
def machine(store: SessionStore, clock: FakeClock) -> GameSessionMachine:
    return GameSessionMachine(store, clock=clock)


@pytest.fixture()
def down_redis() -> DownRedis:
    return DownRedis()


@pytest.fixture()
def down_store(down_redis: DownRedis) -> SessionStore:
    return SessionStore(StoreSettings(), client_factory=lambda _settings: down_redis)


@pytest.fixture()
def use_machine() -> Iterator:
    """Point the FastAPI app at a given GameSessionMachine for the duration of a test."""

    def _use(machine: GameSessionMachine) -> None:
        app.dependency_overrides[get_game_machine] = lambda: machine

    yield _use
    app.dependency_overrides.pop(get_game_machine, None)
