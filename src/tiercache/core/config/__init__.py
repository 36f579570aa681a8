"""
Configuration Management Package

Provides Pydantic-based configuration models and management for cache tiers.
"""

from tiercache.core.config.models import CacheTierConfig, MemoryStoreConfig, TierConfig
from tiercache.core.config.manager import ConfigManager

__all__ = [
    "CacheTierConfig",
    "MemoryStoreConfig",
    "TierConfig",
    "ConfigManager",
]
