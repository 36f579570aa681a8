"""
Abstract Store Base Class

Defines the contract every cache backend implements. Stores are addressed
by string keys and hold arbitrary values; ``None`` is the "absent" value and
is never stored. All operations are coroutines so that network-backed stores
can suspend on I/O, while in-process stores complete without suspending.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union


Key = str
KeyOrKeys = Union[Key, Sequence[Key]]
Entries = Union[Mapping[Key, Any], Iterable[Tuple[Key, Any]]]


def normalize_keys(key: KeyOrKeys) -> List[Key]:
    """Return a list of keys for a single key or a sequence of keys."""
    if isinstance(key, (list, tuple, set, frozenset)):
        return list(key)
    return [key]


def normalize_entries(entries: Entries) -> List[Tuple[Key, Any]]:
    """Return ``(key, value)`` pairs for a mapping or an iterable of pairs."""
    if isinstance(entries, Mapping):
        return list(entries.items())
    return [(key, value) for key, value in entries]


class Store(ABC):
    """
    Capability contract shared by every cache backend.

    Implementations must honour the same semantics:

    - reads return ``None`` for keys that were never set, were deleted or
      have expired;
    - writes reject values refused by the store's cacheability predicate
      with ``NotCacheableError`` and leave the store unchanged;
    - durations are seconds as ``float``; callers holding millisecond
      values must divide by 1000;
    - a ``ttl`` of ``None`` or ``0`` means "use the store default", and a
      store default of ``0`` means entries never expire;
    - deleting a missing key is a no-op.
    """

    name: str = "store"

    @abstractmethod
    async def get(self, key: Key) -> Optional[Any]:
        """Return the value stored under ``key`` or ``None``."""

    @abstractmethod
    async def mget(self, *keys: Key) -> List[Optional[Any]]:
        """Return values for ``keys``, positionally aligned, ``None`` for misses."""

    @abstractmethod
    async def set(self, key: Key, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""

    @abstractmethod
    async def mset(self, entries: Entries, ttl: Optional[float] = None) -> None:
        """Store every ``(key, value)`` pair, or none of them."""

    @abstractmethod
    async def delete(self, key: KeyOrKeys) -> None:
        """Remove one key or a sequence of keys."""

    @abstractmethod
    async def keys(self) -> List[Key]:
        """Return every live key."""

    @abstractmethod
    async def reset(self) -> None:
        """Remove every entry."""

    @abstractmethod
    async def ttl(self, key: Key) -> Optional[float]:
        """
        Return the remaining time-to-live of ``key`` in seconds.

        Returns:
            Remaining seconds, ``0`` if the entry never expires, or ``None``
            if the key does not exist
        """

    def is_cacheable(self, value: Any) -> bool:
        """Whether ``value`` may be stored. By default only ``None`` is refused."""
        return value is not None
