"""
tiercache

Uniform caching abstraction: a common Store contract for cache backends, a
bounded in-process store, and multi-tier composition with read fallback,
backfill and compute-if-absent.
"""

from tiercache.core.cache import Cache, MultiCache, caching, multi_caching
from tiercache.core.config import CacheTierConfig, ConfigManager, MemoryStoreConfig, TierConfig
from tiercache.core.exceptions import (
    CacheError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    NotCacheableError,
    SnapshotError
)
from tiercache.stores import MemoryStore, Store, StoreStats, create_store, register_store

__version__ = "0.1.0"

__all__ = [
    # Caches
    'Cache',
    'MultiCache',
    'caching',
    'multi_caching',

    # Stores
    'Store',
    'MemoryStore',
    'StoreStats',
    'create_store',
    'register_store',

    # Configuration
    'CacheTierConfig',
    'ConfigManager',
    'MemoryStoreConfig',
    'TierConfig',

    # Exceptions
    'CacheError',
    'ConfigurationError',
    'ErrorCode',
    'ErrorContext',
    'NotCacheableError',
    'SnapshotError',
]
