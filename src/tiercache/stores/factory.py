"""
Store Factory for creating store instances from configuration.

Keeps a registry of store names so that external backends (for example a
network key-value store adapter) can be plugged in next to the built-in
memory store and referenced from configuration files.
"""

import logging
from typing import Any, Callable, Dict, List

from tiercache.core.exceptions import ConfigurationError, ErrorCode
from tiercache.stores.base import Store
from tiercache.stores.memory import MemoryStore


logger = logging.getLogger(__name__)

StoreFactory = Callable[..., Store]

# Registry of available store types
STORE_REGISTRY: Dict[str, StoreFactory] = {
    'memory': MemoryStore,
}


def register_store(name: str, factory: StoreFactory) -> None:
    """
    Register a store factory under ``name``.

    Args:
        name: Name used in configuration to select the store
        factory: Callable accepting store options as keyword arguments
    """
    key = name.strip().lower()
    if key in STORE_REGISTRY:
        logger.warning(f"Replacing registered store factory '{key}'")
    STORE_REGISTRY[key] = factory


def available_stores() -> List[str]:
    """Return the registered store names."""
    return sorted(STORE_REGISTRY)


def create_store(name: str, **options: Any) -> Store:
    """
    Create a store instance from the registry.

    Args:
        name: Registered store name
        **options: Options passed to the store factory

    Returns:
        Store instance

    Raises:
        ConfigurationError: If the store name is unknown or the options are invalid
    """
    key = name.strip().lower()
    if key not in STORE_REGISTRY:
        available = ', '.join(available_stores())
        raise ConfigurationError(
            f"Unknown store type '{name}'. Available types: {available}",
            error_code=ErrorCode.CONFIG_UNKNOWN_STORE,
            config_key='store',
            config_value=name
        )

    try:
        return STORE_REGISTRY[key](**options)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid options for store '{key}': {e}",
            config_key='options',
            config_value=options,
            cause=e
        )
