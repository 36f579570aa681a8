"""
Cache construction helpers.

``caching`` builds a Cache from a registered store name, an existing Store
or a store factory; ``multi_caching`` composes caches into a MultiCache.
"""

import inspect
import logging
from typing import Any, Callable, Sequence, Union

from tiercache.core.cache.cache import Cache
from tiercache.core.cache.multi import MultiCache
from tiercache.core.exceptions import ConfigurationError, ErrorCode
from tiercache.stores.base import Store
from tiercache.stores.factory import create_store


logger = logging.getLogger(__name__)

StoreSource = Union[str, Store, Callable[..., Any]]


async def caching(factory: StoreSource = "memory", **options: Any) -> Cache:
    """
    Create a Cache backed by a single store.

    Args:
        factory: Registered store name, a Store instance, or a callable
            (sync or async) returning a Store when called with ``options``
        **options: Store options, e.g. ``max`` and ``ttl`` for memory stores

    Returns:
        Cache wrapping the store

    Raises:
        ConfigurationError: If the store cannot be created
    """
    if isinstance(factory, Store):
        if options:
            logger.warning("Ignoring store options passed with an existing Store instance")
        store = factory
    elif isinstance(factory, str):
        store = create_store(factory, **options)
    elif callable(factory):
        store = factory(**options)
        if inspect.isawaitable(store):
            store = await store
    else:
        raise ConfigurationError(
            f"Cannot build a cache from {factory!r}",
            error_code=ErrorCode.STORE_FACTORY_FAILED,
            config_key='factory',
            config_value=factory
        )

    if not isinstance(store, Store):
        raise ConfigurationError(
            f"Store factory returned {type(store).__name__}, expected a Store",
            error_code=ErrorCode.STORE_FACTORY_FAILED,
            config_key='factory',
            config_value=factory
        )

    return Cache(store)


def multi_caching(caches: Sequence[Cache]) -> MultiCache:
    """Compose caches, fastest first, into one MultiCache."""
    return MultiCache(caches)
