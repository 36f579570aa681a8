"""
Core Cache Module

Provides the single-store Cache and the multi-tier MultiCache:
- Read fallback from fastest to slowest tier
- Backfill of faster tiers on a slower-tier hit
- Write, delete and reset fan-out
- Compute-if-absent via wrap()
"""

from .cache import Cache
from .multi import MultiCache
from .factory import caching, multi_caching

__all__ = [
    'Cache',
    'MultiCache',
    'caching',
    'multi_caching'
]
