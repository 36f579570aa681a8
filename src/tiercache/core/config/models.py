"""
Configuration Models

Pydantic models for type-safe cache configuration with validation and
defaults. Models are built once at construction time; stores never consult
global state afterwards.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MemoryStoreConfig(BaseModel):
    """Configuration for the bounded in-process store."""

    model_config = ConfigDict(extra='forbid', arbitrary_types_allowed=True)

    max: int = Field(
        default=500,
        ge=1,
        description="Maximum number of entries held before LRU eviction"
    )
    ttl: float = Field(
        default=0.0,
        ge=0.0,
        description="Default time-to-live in seconds (0 disables expiration)"
    )
    clone_values: bool = Field(
        default=True,
        description="Deep-copy values on write so later mutation cannot leak into the cache"
    )
    is_cacheable: Optional[Callable[[Any], bool]] = Field(
        default=None,
        description="Predicate deciding whether a value may be stored (default: reject None)"
    )


class TierConfig(BaseModel):
    """Configuration for one tier of a multi-tier cache."""

    store: str = Field(
        default="memory",
        description="Registered store name used to build this tier"
    )
    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Options passed to the store factory"
    )

    @field_validator('store')
    @classmethod
    def validate_store(cls, v: str) -> str:
        """Normalize store names."""
        v = v.strip().lower()
        if not v:
            raise ValueError("Store name must not be empty")
        return v

    def memory_config(self) -> MemoryStoreConfig:
        """Validate ``options`` as a memory store configuration."""
        return MemoryStoreConfig(**self.options)


class CacheTierConfig(BaseModel):
    """Root configuration describing an ordered list of cache tiers."""

    tiers: List[TierConfig] = Field(
        default_factory=lambda: [TierConfig()],
        min_length=1,
        description="Tiers in read priority order (tier 0 is read first)"
    )

    @field_validator('tiers')
    @classmethod
    def validate_memory_tiers(cls, v: List[TierConfig]) -> List[TierConfig]:
        """Reject invalid memory tier options at load time."""
        for tier in v:
            if tier.store == "memory":
                tier.memory_config()
        return v

    def memory_tiers(self) -> List[TierConfig]:
        """Return the tiers backed by the in-process store."""
        return [tier for tier in self.tiers if tier.store == "memory"]
