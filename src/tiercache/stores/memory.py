"""
Bounded Memory Store

In-process store built on ``cachetools.TLRUCache``: entry count is bounded,
the least recently used entry is evicted on overflow and every entry carries
its own expiration time. Expired entries are treated as absent on read and
purged on writes; there is no background sweeper.
"""

import copy
import itertools
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from cachetools import TLRUCache

from tiercache.core.config.models import MemoryStoreConfig
from tiercache.core.exceptions import ErrorContext, NotCacheableError, SnapshotError
from tiercache.stores.base import (
    Entries, Key, KeyOrKeys, Store, normalize_entries, normalize_keys
)


logger = logging.getLogger(__name__)

_IMMUTABLE_TYPES = (str, bytes, int, float, bool, complex, type(None))


def _clone(value: Any) -> Any:
    """Deep-copy containers and objects; scalars are returned as is."""
    if isinstance(value, _IMMUTABLE_TYPES):
        return value
    return copy.deepcopy(value)


@dataclass
class StoreStats:
    """Store performance statistics."""
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class _Entry:
    """Stored value with its absolute expiry and last access tick."""

    __slots__ = ('value', 'expires_at', 'tick')

    def __init__(self, value: Any, expires_at: float, tick: int):
        self.value = value
        self.expires_at = expires_at
        self.tick = tick


class _BoundedTLRU(TLRUCache):
    """TLRUCache that reports capacity evictions."""

    def __init__(self, maxsize, timer, on_evict: Callable[[Key], None]):
        super().__init__(maxsize, ttu=self._time_to_use, timer=timer)
        self._on_evict = on_evict

    @staticmethod
    def _time_to_use(key: Key, entry: _Entry, now: float) -> float:
        return entry.expires_at

    def popitem(self):
        key, entry = super().popitem()
        self._on_evict(key)
        return key, entry


class MemoryStore(Store):
    """
    Size-bounded, time-aware in-process store.

    Options are resolved once at construction with the precedence
    explicit keyword argument > ``config`` > library default.

    Args:
        config: Store configuration
        max: Maximum number of entries
        ttl: Default time-to-live in seconds, ``0`` for no expiration
        is_cacheable: Predicate deciding whether a value may be stored
        clone_values: Deep-copy values on write
        timer: Monotonic clock used for expiration
    """

    name = "memory"

    def __init__(
        self,
        config: Optional[MemoryStoreConfig] = None,
        *,
        max: Optional[int] = None,
        ttl: Optional[float] = None,
        is_cacheable: Optional[Callable[[Any], bool]] = None,
        clone_values: Optional[bool] = None,
        timer: Callable[[], float] = time.monotonic
    ):
        base = config or MemoryStoreConfig()
        overrides = {
            'max': max,
            'ttl': ttl,
            'is_cacheable': is_cacheable,
            'clone_values': clone_values,
        }
        self.config = MemoryStoreConfig(**{
            **base.model_dump(),
            **{k: v for k, v in overrides.items() if v is not None}
        })

        self._predicate = self.config.is_cacheable
        self._timer = timer
        self._ticks = itertools.count()
        self._lock = threading.RLock()
        self.stats = StoreStats()
        self._lru = _BoundedTLRU(self.config.max, timer, self._record_eviction)

    @property
    def max(self) -> int:
        return self.config.max

    @property
    def default_ttl(self) -> float:
        return self.config.ttl

    def is_cacheable(self, value: Any) -> bool:
        if self._predicate is not None:
            return bool(self._predicate(value))
        return super().is_cacheable(value)

    def _record_eviction(self, key: Key) -> None:
        self.stats.evictions += 1
        logger.debug(f"Evicted least recently used key {key!r}")

    def _expires_at(self, ttl: Optional[float], now: float) -> float:
        if ttl is not None and ttl < 0:
            raise ValueError(f"ttl must not be negative, got {ttl}")
        effective = ttl if ttl else self.config.ttl
        return now + effective if effective else math.inf

    def _lookup(self, key: Key) -> Optional[Any]:
        entry = self._lru.get(key)
        if entry is None:
            self.stats.misses += 1
            return None
        entry.tick = next(self._ticks)
        self.stats.hits += 1
        return entry.value

    def _prepare(self, value: Any) -> Any:
        return _clone(value) if self.config.clone_values else value

    def _write(self, key: Key, value: Any, expires_at: float) -> None:
        self._lru[key] = _Entry(value, expires_at, next(self._ticks))

    async def get(self, key: Key) -> Optional[Any]:
        with self._lock:
            return self._lookup(key)

    async def mget(self, *keys: Key) -> List[Optional[Any]]:
        with self._lock:
            return [self._lookup(key) for key in keys]

    async def set(self, key: Key, value: Any, ttl: Optional[float] = None) -> None:
        if not self.is_cacheable(value):
            raise NotCacheableError(
                value, key=key, context=ErrorContext(operation="set", store=self.name)
            )

        value = self._prepare(value)
        with self._lock:
            self._write(key, value, self._expires_at(ttl, self._timer()))

    async def mset(self, entries: Entries, ttl: Optional[float] = None) -> None:
        pairs = normalize_entries(entries)
        for key, value in pairs:
            if not self.is_cacheable(value):
                raise NotCacheableError(
                    value, key=key, context=ErrorContext(operation="mset", store=self.name)
                )
        # clone the whole batch first so a failed copy writes nothing
        pairs = [(key, self._prepare(value)) for key, value in pairs]

        with self._lock:
            expires_at = self._expires_at(ttl, self._timer())
            for key, value in pairs:
                self._write(key, value, expires_at)

    async def delete(self, key: KeyOrKeys) -> None:
        with self._lock:
            for k in normalize_keys(key):
                self._lru.pop(k, None)

    async def keys(self) -> List[Key]:
        with self._lock:
            self._lru.expire()
            return list(self._lru)

    async def reset(self) -> None:
        with self._lock:
            self._lru.clear()
        logger.info("Memory store reset")

    async def ttl(self, key: Key) -> Optional[float]:
        with self._lock:
            entry = self._lru.get(key)
            if entry is None:
                return None
            return self._remaining(entry, self._timer())

    @staticmethod
    def _remaining(entry: _Entry, now: float) -> float:
        if math.isinf(entry.expires_at):
            return 0
        return entry.expires_at - now

    def key_count(self) -> int:
        """Number of live entries. Not part of the Store contract."""
        with self._lock:
            self._lru.expire()
            return len(self._lru)

    def dump(self) -> List[Tuple[Key, dict]]:
        """
        Export every live entry, least recently used first.

        Returns:
            List of ``(key, {"value": value, "ttl": remaining_seconds})``
            pairs; a ``ttl`` of ``0`` means the entry never expires
        """
        with self._lock:
            now = self._timer()
            self._lru.expire(now)
            # reading through the mapping touches recency; replay it in tick order
            items = [(key, self._lru.get(key)) for key in list(self._lru)]
            items = [(key, entry) for key, entry in items if entry is not None]
            items.sort(key=lambda item: item[1].tick)
            for key, _ in items:
                self._lru.get(key)
            return [
                (key, {'value': entry.value, 'ttl': self._remaining(entry, now)})
                for key, entry in items
            ]

    def load(self, snapshot: Sequence[Tuple[Key, dict]]) -> None:
        """
        Restore entries exported by ``dump``.

        Entries are inserted in snapshot order so recency is preserved.
        Existing entries with the same keys are replaced; other entries are
        kept. Entries whose remaining ttl has run out are skipped.

        Raises:
            SnapshotError: If the snapshot is malformed
        """
        try:
            records = [(key, record['value'], float(record.get('ttl') or 0))
                       for key, record in snapshot]
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise SnapshotError(f"Invalid cache snapshot: {e}", cause=e)

        loaded = 0
        with self._lock:
            now = self._timer()
            for key, value, remaining in records:
                if remaining < 0:
                    continue
                expires_at = now + remaining if remaining else math.inf
                self._lru[key] = _Entry(value, expires_at, next(self._ticks))
                loaded += 1

        logger.debug(f"Loaded {loaded} of {len(records)} snapshot entries")
