"""
AcademicSearchService - Single entry point for federated academic search.

Validates the request into a SearchQuery (raising before any provider is
contacted), then serves it through the SearchCache. Also exposes the
operational helpers used by the MCP tools and HTTP API:
connection probing, status, full-text availability and cleanup.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.domain.entities import (
    Paper,
    Provider,
    SearchQuery,
    SearchResponse,
    SortKey,
    SourceTypeFilter,
)

from .aggregator import SearchAggregator
from .fulltext import full_text_availability

if TYPE_CHECKING:
    from academic_search.infrastructure.cache import SearchCache
    from academic_search.infrastructure.sources.base_client import ProviderAdapter

logger = logging.getLogger(__name__)

# One-result probe query per provider
CONNECTION_PROBES: dict[Provider, str] = {
    Provider.PUBMED: "covid",
    Provider.ARXIV: "machine learning",
    Provider.CROSSREF: "artificial intelligence",
    Provider.SEMANTIC_SCHOLAR: "deep learning",
}


class AcademicSearchService:
    """
    Federated academic search facade.

    Usage:
        service = create_service()
        response = await service.search("crispr", providers=["pubmed", "crossref"], max_results=10)
        for paper in response.results:
            print(paper.title, paper.origin_provider.value)
        await service.close()
    """

    def __init__(
        self,
        cache: SearchCache,
        aggregator: SearchAggregator,
        adapters: Mapping[Provider, ProviderAdapter],
        rate_limiter: ProviderRateLimiter,
    ):
        self._cache = cache
        self._aggregator = aggregator
        self._adapters = dict(adapters)
        self._rate_limiter = rate_limiter

    @property
    def providers(self) -> list[Provider]:
        return list(self._adapters)

    @property
    def cache(self) -> SearchCache:
        return self._cache

    async def search(
        self,
        query: str,
        *,
        providers: Iterable[Provider | str] | None = None,
        max_results: int = 20,
        year_from: int | None = None,
        year_to: int | None = None,
        source_type: SourceTypeFilter | str = SourceTypeFilter.ALL,
        sort_by: SortKey | str = SortKey.RELEVANCE,
        include_abstracts: bool = True,
    ) -> SearchResponse:
        """
        Search the selected providers concurrently.

        Args:
            query: Free-text query (non-empty)
            providers: Provider subset (default: all four)
            max_results: Maximum merged results (default 20)
            year_from: Earliest publication year
            year_to: Latest publication year
            source_type: journal, preprint, conference or all
            sort_by: relevance, year, citations or credibility
            include_abstracts: Keep abstracts in the results

        Returns:
            SearchResponse with ranked results and per-provider diagnostics

        Raises:
            ValidationError: if any argument is invalid (no provider is contacted)
        """
        search_query = SearchQuery(
            query=query,
            providers=list(Provider) if providers is None else list(providers),
            max_results=max_results,
            year_from=year_from,
            year_to=year_to,
            source_type=source_type,
            sort_by=sort_by,
            include_abstracts=include_abstracts,
        )
        return await self._cache.get_or_compute(search_query)

    async def check_connections(self) -> dict[str, bool]:
        """
        Probe every provider with a one-result query, bypassing the cache.

        Returns:
            {provider: True if it returned at least one paper}
        """

        async def probe(provider: Provider, adapter: ProviderAdapter) -> tuple[str, bool]:
            query = SearchQuery(query=CONNECTION_PROBES.get(provider, "science"), providers=[provider], max_results=1)
            result = await self._aggregator.run(query)
            reachable = bool(result.results)
            if not reachable:
                logger.warning(f"{provider.value} connection test failed: {result.errors.get(provider.value)}")
            return provider.value, reachable

        outcomes = await asyncio.gather(*(probe(p, a) for p, a in self._adapters.items()))
        return dict(outcomes)

    def full_text_availability(self, papers: Iterable[Paper | dict[str, Any]]) -> list[dict[str, Any]]:
        """Annotate papers with where their full text can be found."""
        return full_text_availability(papers)

    def status(self) -> dict[str, Any]:
        """Report configured providers, cache state and rate-limit headroom."""
        return {
            "providers": [provider.value for provider in self._adapters],
            "cache_size": len(self._cache),
            "cache_ttl_seconds": self._cache.ttl,
            "cache_stats": self._cache.stats.to_dict(),
            "rate_limits": {
                name: {
                    "max_requests": self._rate_limiter.limit_for(name).max_requests,
                    "window_seconds": self._rate_limiter.limit_for(name).window,
                    "remaining": self._rate_limiter.remaining(name),
                }
                for name in self._rate_limiter.providers
            },
        }

    async def close(self) -> None:
        """Close HTTP clients and drop cached state."""
        for adapter in self._adapters.values():
            await adapter.close()
        self._cache.clear()
        self._rate_limiter.reset()
        logger.info("Academic search service closed")
