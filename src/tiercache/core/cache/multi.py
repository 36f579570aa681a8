"""
Multi-tier Cache

Composes an ordered list of caches into one logical cache. Reads fall back
from tier 0 to the last tier and backfill faster tiers on a hit found in a
slower one; writes, deletes and resets fan out to every tier. A failing tier
never fails the call: its error is logged and the remaining tiers are used.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from tiercache.core.cache.cache import Cache, Producer, call_producer
from tiercache.stores.base import Entries, Key, KeyOrKeys, normalize_entries


logger = logging.getLogger(__name__)


class MultiCache:
    """
    Ordered composition of caches.

    Tier order is fixed at construction: tier 0 is read first and every tier
    receives every write. Caches are referenced, not owned, and may still be
    used directly. An empty tier list is allowed and always misses.

    Args:
        caches: Caches in read priority order
    """

    def __init__(self, caches: Sequence[Cache]):
        self._caches: Tuple[Cache, ...] = tuple(caches)

    @property
    def caches(self) -> Tuple[Cache, ...]:
        return self._caches

    def __len__(self) -> int:
        return len(self._caches)

    def _tier_failed(self, index: int, operation: str, error: BaseException) -> None:
        logger.warning(
            f"Cache tier {index} failed during {operation}: "
            f"{type(error).__name__}: {error}"
        )

    @staticmethod
    async def _attempt(call: Callable[[Cache], Awaitable[Any]], cache: Cache) -> Any:
        return await call(cache)

    async def _fan_out(
        self,
        operation: str,
        call: Callable[[Cache], Awaitable[Any]],
        tiers: Optional[Sequence[int]] = None
    ) -> None:
        """Run ``call`` on every selected tier concurrently, isolating failures."""
        indexes = list(range(len(self._caches))) if tiers is None else list(tiers)
        if not indexes:
            return

        results = await asyncio.gather(
            *(self._attempt(call, self._caches[i]) for i in indexes),
            return_exceptions=True
        )
        for index, result in zip(indexes, results):
            if isinstance(result, Exception):
                self._tier_failed(index, operation, result)

    async def _find(self, key: Key) -> Tuple[Optional[Any], int]:
        """Return the first non-absent value for ``key`` and its tier index."""
        for index, cache in enumerate(self._caches):
            try:
                value = await cache.get(key)
            except Exception as e:
                self._tier_failed(index, "get", e)
                continue
            if value is not None:
                return value, index
        return None, -1

    async def _backfill(self, key: Key, value: Any, found_at: int, ttl: Optional[float] = None) -> None:
        if found_at <= 0:
            return
        logger.debug(f"Backfilling key {key!r} from tier {found_at} into {found_at} faster tier(s)")
        await self._fan_out(
            "backfill",
            lambda cache: cache.set(key, value, ttl),
            tiers=range(found_at)
        )

    async def get(self, key: Key) -> Optional[Any]:
        """
        Return the value from the first tier holding ``key``.

        Faster tiers that missed are backfilled with their own default ttl.
        Returns ``None`` when every tier misses or fails.
        """
        value, found_at = await self._find(key)
        if value is not None:
            await self._backfill(key, value, found_at)
        return value

    async def mget(self, *keys: Key) -> List[Optional[Any]]:
        """
        Return values for ``keys`` applying the fallback rule per key.

        Each tier is only asked for keys still unresolved, so different keys
        may be served by different tiers.
        """
        values: List[Optional[Any]] = [None] * len(keys)
        found_at: List[int] = [-1] * len(keys)

        for index, cache in enumerate(self._caches):
            pending = [i for i, value in enumerate(values) if value is None]
            if not pending:
                break
            try:
                tier_values = list(await cache.mget(*(keys[i] for i in pending)))
                if len(tier_values) != len(pending):
                    raise ValueError(
                        f"expected {len(pending)} values, got {len(tier_values)}"
                    )
            except Exception as e:
                self._tier_failed(index, "mget", e)
                continue
            for i, value in zip(pending, tier_values):
                if value is not None:
                    values[i] = value
                    found_at[i] = index

        await self._backfill_many(keys, values, found_at)
        return values

    async def _backfill_many(
        self,
        keys: Sequence[Key],
        values: Sequence[Optional[Any]],
        found_at: Sequence[int]
    ) -> None:
        calls = []
        for tier in range(len(self._caches)):
            entries = [
                (keys[i], values[i]) for i in range(len(keys)) if found_at[i] > tier
            ]
            if entries:
                calls.append((tier, entries))
        if not calls:
            return

        results = await asyncio.gather(
            *(self._attempt(lambda cache, e=entries: cache.mset(e), self._caches[tier])
              for tier, entries in calls),
            return_exceptions=True
        )
        for (tier, _), result in zip(calls, results):
            if isinstance(result, Exception):
                self._tier_failed(tier, "backfill", result)

    async def set(self, key: Key, value: Any, ttl: Optional[float] = None) -> None:
        """Write ``value`` to every tier."""
        await self._fan_out("set", lambda cache: cache.set(key, value, ttl))

    async def mset(self, entries: Entries, ttl: Optional[float] = None) -> None:
        """Write every ``(key, value)`` pair to every tier, batched per tier."""
        pairs = normalize_entries(entries)
        await self._fan_out("mset", lambda cache: cache.mset(pairs, ttl))

    async def delete(self, key: KeyOrKeys) -> None:
        """Delete one key or a sequence of keys from every tier."""
        await self._fan_out("delete", lambda cache: cache.delete(key))

    async def reset(self) -> None:
        """Reset every tier."""
        await self._fan_out("reset", lambda cache: cache.reset())
        logger.info(f"Reset {len(self._caches)} cache tier(s)")

    async def wrap(self, key: Key, compute: Producer, ttl: Optional[float] = None) -> Any:
        """
        Return the value for ``key`` from the first tier holding it, or compute it.

        A value found below tier 0 is written back to every faster tier,
        with ``ttl`` when given and each tier's own default otherwise; the
        value is never recomputed while any tier still holds it. On a full
        miss ``compute`` runs once and its result is written to every tier.
        Errors raised by ``compute`` propagate to the caller.

        Args:
            key: Cache key
            compute: Zero-argument producer, usually a coroutine function
            ttl: Time-to-live in seconds for written values

        Returns:
            The cached or freshly computed value
        """
        value, found_at = await self._find(key)
        if value is not None:
            await self._backfill(key, value, found_at, ttl)
            return value

        result = await call_producer(compute)
        await self.set(key, result, ttl)
        return result

    def __repr__(self) -> str:
        return f"MultiCache(tiers={len(self._caches)})"
