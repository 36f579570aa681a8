"""
Shared Test Configuration and Fixtures

Provides a controllable clock, memory-backed caches and stand-in tiers that
fail or always miss, for exercising stores and multi-tier composition.
"""

from typing import Any, List, Optional

import pytest

from tiercache.core.cache.cache import Cache
from tiercache.stores.memory import MemoryStore


class FakeClock:
    """Monotonic clock advanced manually by tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FailingCache:
    """Tier whose every operation raises, like an unreachable remote store."""

    def __init__(self, error: Exception = None):
        self.error = error or ConnectionError("tier unavailable")
        self.calls: List[str] = []

    async def _fail(self, operation: str):
        self.calls.append(operation)
        raise self.error

    async def get(self, key):
        await self._fail("get")

    async def mget(self, *keys):
        await self._fail("mget")

    async def set(self, key, value, ttl=None):
        await self._fail("set")

    async def mset(self, entries, ttl=None):
        await self._fail("mset")

    async def delete(self, key):
        await self._fail("delete")

    async def reset(self):
        await self._fail("reset")


class EmptyCache:
    """Tier that accepts writes and never returns anything."""

    def __init__(self):
        self.writes: List[Any] = []

    async def get(self, key) -> Optional[Any]:
        return None

    async def mget(self, *keys) -> List[Optional[Any]]:
        return [None] * len(keys)

    async def set(self, key, value, ttl=None) -> None:
        self.writes.append((key, value, ttl))

    async def mset(self, entries, ttl=None) -> None:
        self.writes.extend((key, value, ttl) for key, value in entries)

    async def delete(self, key) -> None:
        pass

    async def reset(self) -> None:
        pass


@pytest.fixture
def clock():
    """Controllable clock shared by every store built through ``memory_cache``."""
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    """Memory store with default options and a fake clock."""
    return MemoryStore(timer=clock)


@pytest.fixture
def memory_cache(clock):
    """Factory building memory-backed caches on the shared fake clock."""
    def _build(**options) -> Cache:
        return Cache(MemoryStore(timer=clock, **options))
    return _build


@pytest.fixture
def failing_cache():
    return FailingCache()


@pytest.fixture
def empty_cache():
    return EmptyCache()
