"""
Posts gateway caching package.

Provides the in-process TTL store used to avoid refetching the upstream
collections on every request.
"""

from .ttl_cache import CacheEntry, TTLCache, DEFAULT_TTL_SECONDS, DEFAULT_SWEEP_INTERVAL_SECONDS

__all__ = [
    "CacheEntry",
    "TTLCache",
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_SWEEP_INTERVAL_SECONDS",
]
