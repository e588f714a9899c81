"""
Cache Infrastructure

Provides adapter-private caching of upstream responses.
"""

from __future__ import annotations

from token_search.infrastructure.cache.response_cache import CacheStats, ResponseCache

__all__ = [
    "CacheStats",
    "ResponseCache",
]
