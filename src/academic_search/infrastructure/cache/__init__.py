"""
Cache Infrastructure

Provides the time-bounded search cache.
"""

from __future__ import annotations

from academic_search.infrastructure.cache.search_cache import (
    CacheStats,
    SearchCache,
    make_cache_key,
)

__all__ = [
    "CacheStats",
    "SearchCache",
    "make_cache_key",
]
