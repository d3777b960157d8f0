"""
Domain Entities

Core business objects for federated academic search.
"""

from __future__ import annotations

from .paper import (
    Paper,
    Provider,
    ProviderResult,
    ProviderStatus,
    SearchQuery,
    SearchResponse,
    SortKey,
    SourceType,
    SourceTypeFilter,
)

__all__ = [
    "Paper",
    "Provider",
    "ProviderResult",
    "ProviderStatus",
    "SearchQuery",
    "SearchResponse",
    "SortKey",
    "SourceType",
    "SourceTypeFilter",
]
