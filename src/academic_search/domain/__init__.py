"""
Domain Layer - Core Business Objects

Contains:
- entities: Paper, SearchQuery, ProviderResult, SearchResponse
"""

from .entities import (
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
