from datetime import date

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from meditimer.services.alert_service import Alerter
from meditimer.services.meditation_service import MeditationApp
from meditimer.services.session_store import SessionStore

# Monday
TODAY = date(2024, 1, 8)


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._store: dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.closed = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise RedisConnectionError("connection refused")
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        if self.fail_writes:
            raise RedisConnectionError("connection refused")
        self._store[key] = str(value)

    async def delete(self, key: str) -> int:
        if self.fail_writes:
            raise RedisConnectionError("connection refused")
        return 1 if self._store.pop(key, None) is not None else 0

    async def ping(self) -> bool:
        if self.fail_reads:
            raise RedisConnectionError("connection refused")
        return True

    async def aclose(self) -> None:
        self.closed = True


class RecordingChannel:
    def __init__(self, error: Exception | None = None):
        self.calls = 0
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(fake_redis: FakeRedis) -> SessionStore:
    return SessionStore(fake_redis, key="sessions", clock=lambda: TODAY)


@pytest.fixture
def chime() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def meditation_app(store: SessionStore, chime: RecordingChannel) -> MeditationApp:
    return MeditationApp(store, alerter=Alerter([chime]), clock=lambda: TODAY, tick_seconds=0)
