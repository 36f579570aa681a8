"""
Single-store Cache

Thin wrapper around one Store adding the compute-if-absent ``wrap``
operation.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

from tiercache.stores.base import Entries, Key, KeyOrKeys, Store


logger = logging.getLogger(__name__)

Producer = Callable[[], Union[Awaitable[Any], Any]]


async def call_producer(compute: Producer) -> Any:
    """Invoke a zero-argument producer, awaiting its result if needed."""
    result = compute()
    if inspect.isawaitable(result):
        result = await result
    return result


class Cache:
    """
    Cache bound to exactly one store.

    ``get``, ``mget``, ``set``, ``mset``, ``delete``, ``reset``, ``keys`` and
    ``ttl`` delegate straight to the store.
    """

    def __init__(self, store: Store):
        self._store = store

    @property
    def store(self) -> Store:
        return self._store

    async def get(self, key: Key) -> Optional[Any]:
        return await self._store.get(key)

    async def mget(self, *keys: Key) -> List[Optional[Any]]:
        return await self._store.mget(*keys)

    async def set(self, key: Key, value: Any, ttl: Optional[float] = None) -> None:
        await self._store.set(key, value, ttl)

    async def mset(self, entries: Entries, ttl: Optional[float] = None) -> None:
        await self._store.mset(entries, ttl)

    async def delete(self, key: KeyOrKeys) -> None:
        await self._store.delete(key)

    async def reset(self) -> None:
        await self._store.reset()

    async def keys(self) -> List[Key]:
        return await self._store.keys()

    async def ttl(self, key: Key) -> Optional[float]:
        return await self._store.ttl(key)

    async def wrap(self, key: Key, compute: Producer, ttl: Optional[float] = None) -> Any:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        This is compute-if-absent, not single-flight: concurrent callers
        missing on the same key may each run ``compute``, and the last write
        wins.

        Args:
            key: Cache key
            compute: Zero-argument producer, usually a coroutine function
            ttl: Time-to-live in seconds for a computed value

        Returns:
            The cached or freshly computed value
        """
        value = await self._store.get(key)
        if value is not None:
            return value

        result = await call_producer(compute)
        await self._store.set(key, result, ttl)
        logger.debug(f"Computed and cached value for key {key!r}")
        return result

    def __repr__(self) -> str:
        return f"Cache(store={self._store.name!r})"
