"""
Academic Search - Federated search over academic sources

Concurrently queries PubMed, arXiv, CrossRef and Semantic Scholar, normalizes
every result into one ``Paper`` shape, merges cross-provider duplicates,
ranks the merged set and caches the outcome for five minutes.

Usage:
    from academic_search import create_service

    service = create_service()
    response = await service.search("crispr off-target", providers=["pubmed", "crossref"])

    for paper in response.results:
        print(f"{paper.origin_provider.value}: {paper.title}")
    print(response.diagnostics)   # {"pubmed": "ok", "crossref": "ok"}

Surfaces:
    - MCP server: python -m academic_search.presentation.mcp_server
    - HTTP API: academic_search.api.create_api_server()
"""

from .application.search import AcademicSearchService, SearchAggregator
from .config import Settings
from .container import ApplicationContainer, create_container, create_service
from .core.exceptions import (
    AcademicSearchError,
    CacheError,
    ConfigurationError,
    InvalidParameterError,
    InvalidQueryError,
    ProviderError,
    ProviderErrorKind,
    ValidationError,
)
from .domain.entities import (
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

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "AcademicSearchService",
    "ApplicationContainer",
    "SearchAggregator",
    "Settings",
    "create_container",
    "create_service",
    # Models
    "Paper",
    "Provider",
    "ProviderResult",
    "ProviderStatus",
    "SearchQuery",
    "SearchResponse",
    "SortKey",
    "SourceType",
    "SourceTypeFilter",
    # Errors
    "AcademicSearchError",
    "CacheError",
    "ConfigurationError",
    "InvalidParameterError",
    "InvalidQueryError",
    "ProviderError",
    "ProviderErrorKind",
    "ValidationError",
]
