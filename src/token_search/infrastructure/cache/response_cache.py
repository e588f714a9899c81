"""
Response Cache

In-memory cache with TTL for upstream responses, owned privately by one adapter.
Uses cachetools.TTLCache for LRU eviction and TTL expiration.

Features:
- Time-based expiration (TTL) via cachetools
- LRU eviction when max size reached
- Per-key asyncio locks: concurrent misses for one key trigger one fetch
- Fetch errors propagate to the caller and are never cached
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from cachetools import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResponseCache:
    """
    In-memory cache for adapter responses.

    Values are stored whole, after a fetch completes, so a reader never
    observes partial data for a key.

    Example:
        cache = ResponseCache(max_size=256, ttl=30)

        pairs = await cache.get_or_fetch(
            "search:weth",
            lambda: client.search_pairs("weth"),
        )
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl: float = 30.0,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries
            ttl: Time-to-live in seconds
        """
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)
        self._locks: dict[str, asyncio.Lock] = {}
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def _normalize_key(self, key: str) -> str:
        """Normalize cache key."""
        return key.lower().strip()

    def get(self, key: str) -> Any | None:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found/expired
        """
        nkey = self._normalize_key(key)
        try:
            value = self._cache[nkey]
            self._stats.hits += 1
            return value
        except KeyError:
            self._stats.misses += 1
            return None

    def set(self, key: str, value: Any) -> None:
        """Set value in cache."""
        self._cache[self._normalize_key(key)] = value

    async def get_or_fetch(
        self,
        key: str,
        fetch_func: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Get from cache or fetch and cache result.

        Only one fetch per key runs at a time; waiters re-check the cache
        once the lock is released. Exceptions raised by ``fetch_func``
        propagate and leave the cache untouched.

        Args:
            key: Cache key
            fetch_func: Async function to fetch value if not cached

        Returns:
            Cached or freshly fetched value
        """
        value = self.get(key)
        if value is not None:
            logger.debug(f"Cache hit: {key}")
            return value

        nkey = self._normalize_key(key)
        lock = self._locks.setdefault(nkey, asyncio.Lock())
        try:
            async with lock:
                value = self.get(key)
                if value is not None:
                    return value

                value = await fetch_func()
                if value is not None:
                    self.set(key, value)
                return value
        finally:
            if not lock.locked() and self._locks.get(nkey) is lock:
                del self._locks[nkey]

    def __len__(self) -> int:
        """Get number of cached entries."""
        return len(self._cache)


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0

    @property
    def total_requests(self) -> int:
        """Total cache requests."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def summary(self) -> str:
        return f"{self.total_requests} lookups, {self.hit_rate:.0%} hits"
