"""
Search Cache

Time-bounded memoization of federated searches.
Uses cachetools.TTLCache for lazy TTL expiration and LRU eviction.

Features:
- Key = SHA-256 of the canonical query + options
- Deep copies in both directions
- Async-safe with a lock around map access
- Any cache failure degrades to a miss
"""

from __future__ import annotations

import asyncio
import copy
import hashlib
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cachetools import TTLCache

from academic_search.config import DEFAULT_CACHE_SIZE, DEFAULT_CACHE_TTL
from academic_search.core.exceptions import CacheError
from academic_search.domain.entities import SearchQuery, SearchResponse

if TYPE_CHECKING:
    from academic_search.application.search.aggregator import SearchAggregator

logger = logging.getLogger(__name__)


def make_cache_key(query: SearchQuery) -> str:
    """
    Build the cache key for a query.

    Raises:
        CacheError: if the query options cannot be canonicalized
    """
    try:
        canonical = json.dumps(query.cache_material(), sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise CacheError(f"Cannot build cache key: {e}") from e
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class SearchCache:
    """
    Cache-aside wrapper around the SearchAggregator.

    Example:
        cache = SearchCache(aggregator, ttl=300)
        response = await cache.get_or_compute(query)   # miss: runs aggregator
        response = await cache.get_or_compute(query)   # hit: no provider calls
    """

    def __init__(
        self,
        aggregator: SearchAggregator,
        max_size: int = DEFAULT_CACHE_SIZE,
        ttl: float = DEFAULT_CACHE_TTL,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            aggregator: Computes responses on a miss
            max_size: Maximum number of cached searches
            ttl: Time-to-live in seconds
            timer: Clock used for expiry (injectable for tests)
        """
        self._aggregator = aggregator
        self._ttl = ttl
        self._cache: TTLCache[str, SearchResponse] = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    @property
    def ttl(self) -> float:
        return self._ttl

    async def _lookup(self, key: str) -> SearchResponse | None:
        async with self._lock:
            try:
                return self._cache[key]
            except KeyError:
                return None
            except Exception as e:
                raise CacheError(f"Cache lookup failed: {e}") from e

    async def _store(self, key: str, response: SearchResponse) -> None:
        async with self._lock:
            try:
                self._cache[key] = copy.deepcopy(response)
            except Exception as e:
                raise CacheError(f"Cache store failed: {e}") from e

    async def get_or_compute(self, query: SearchQuery) -> SearchResponse:
        """
        Return the cached response for ``query`` or compute and cache it.

        Args:
            query: Validated search query

        Returns:
            A private copy of the response (``from_cache`` set on hits)
        """
        key: str | None = None
        cached: SearchResponse | None = None
        try:
            key = make_cache_key(query)
            cached = await self._lookup(key)
        except CacheError as e:
            logger.warning(f"{e}; treating as cache miss")

        if cached is not None:
            self._stats.hits += 1
            logger.debug(f'Cache hit for query: "{query.text}"')
            response = copy.deepcopy(cached)
            response.from_cache = True
            return response

        self._stats.misses += 1
        response = await self._aggregator.run(query)

        if key is not None:
            try:
                await self._store(key, response)
            except CacheError as e:
                logger.warning(f"{e}; result not cached")

        return copy.deepcopy(response)

    def invalidate(self, query: SearchQuery) -> bool:
        """
        Invalidate the entry for ``query``.

        Returns:
            True if an entry was removed
        """
        try:
            del self._cache[make_cache_key(query)]
            return True
        except (KeyError, CacheError):
            return False

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        count = len(self._cache)
        self._cache.clear()
        return count

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries.

        TTLCache expires lazily on access; this forces a sweep.

        Returns:
            Number of entries removed
        """
        removed = len(self._cache.expire())
        self._stats.expirations += removed
        return removed

    def __len__(self) -> int:
        """Get number of cached entries."""
        return len(self._cache)


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0

    @property
    def total_requests(self) -> int:
        """Total cache requests."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "hit_rate": round(self.hit_rate, 3),
        }

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.expirations = 0
