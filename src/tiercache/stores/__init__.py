"""
Cache Stores

Backends implementing the Store contract.
"""

from tiercache.stores.base import Store
from tiercache.stores.memory import MemoryStore, StoreStats
from tiercache.stores.factory import available_stores, create_store, register_store

__all__ = [
    'Store',
    'MemoryStore',
    'StoreStats',
    'available_stores',
    'create_store',
    'register_store',
]
