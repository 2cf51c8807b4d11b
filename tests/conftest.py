"""
Shared pytest fixtures and configuration for all tests.
"""
import fnmatch
import math
import os
from typing import Any, Optional
from unittest.mock import MagicMock, AsyncMock

import pytest
from redis.asyncio import Redis
from redis.asyncio.cluster import RedisCluster

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,  # Disable deadline for async tests
    print_blob=True,  # Print failing examples for debugging
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,  # Reproducible results in CI
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],  # Skip shrinking for speed
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


class FakeRedis:
    """
    In-memory stand-in for a standalone ``redis.asyncio.Redis`` client.

    Models the commands the session store issues: GET, SET with EX, DEL,
    EXPIRE, TTL, MGET, SCAN (with MATCH/COUNT paging) and PING. Keys and
    values come back as bytes, like a client without decode_responses.
    Time only moves when ``now`` is changed, so TTLs are exact.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._data: dict[str, bytes] = {}
        self._expires: dict[str, float] = {}
        self.closed = False

    def _alive(self, name: str) -> bool:
        deadline = self._expires.get(name)
        if deadline is not None and deadline <= self.now:
            self._data.pop(name, None)
            self._expires.pop(name, None)
        return name in self._data

    @staticmethod
    def _encode(value: Any) -> bytes:
        return value if isinstance(value, bytes) else str(value).encode("utf-8")

    async def get(self, name: str) -> Optional[bytes]:
        return self._data[name] if self._alive(name) else None

    async def set(self, name: str, value: Any, ex: Optional[int] = None) -> bool:
        self._data[name] = self._encode(value)
        if ex is None:
            self._expires.pop(name, None)
        else:
            self._expires[name] = self.now + ex
        return True

    async def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self._alive(name):
                del self._data[name]
                self._expires.pop(name, None)
                removed += 1
        return removed

    async def expire(self, name: str, time: int) -> bool:
        if not self._alive(name):
            return False
        if time <= 0:
            await self.delete(name)
        else:
            self._expires[name] = self.now + time
        return True

    async def ttl(self, name: str) -> int:
        if not self._alive(name):
            return -2
        if name not in self._expires:
            return -1
        return math.ceil(self._expires[name] - self.now)

    async def mget(self, keys: list[str], *args: str) -> list[Optional[bytes]]:
        return [await self.get(key) for key in [*keys, *args]]

    async def scan(
        self,
        cursor: int = 0,
        match: Optional[str] = None,
        count: Optional[int] = None,
    ) -> tuple[int, list[bytes]]:
        names = sorted(name for name in list(self._data) if self._alive(name))
        if match is not None:
            names = [name for name in names if fnmatch.fnmatchcase(name, match)]
        count = count or 10
        page = names[cursor:cursor + count]
        next_cursor = cursor + count
        if next_cursor >= len(names):
            next_cursor = 0
        return next_cursor, [name.encode("utf-8") for name in page]

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Create an empty in-memory standalone client."""
    return FakeRedis()


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock standalone Redis client for unit tests."""
    mock = MagicMock(spec=Redis)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.expire = AsyncMock(return_value=True)
    mock.mget = AsyncMock(return_value=[])
    mock.scan = AsyncMock(return_value=(0, []))
    mock.ping = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def mock_cluster() -> MagicMock:
    """Create a mock cluster Redis client for unit tests."""
    mock = MagicMock(spec=RedisCluster)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.expire = AsyncMock(return_value=True)
    mock.mget_nonatomic = AsyncMock(return_value=[])
    mock.scan = AsyncMock(return_value=({}, []))
    mock.get_node = MagicMock(side_effect=lambda node_name=None, **kwargs: f"node<{node_name}>")
    mock.ping = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def sample_session() -> dict:
    """Sample session data without an explicit expiration."""
    return {
        "foo": "bar",
        "cookie": {"originalMaxAge": None},
    }
