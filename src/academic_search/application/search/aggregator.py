"""
SearchAggregator - Concurrent multi-provider search with failure isolation.

Pipeline:
    SearchQuery
        │
        ▼
    fan-out: one asyncio task per provider (TaskGroup), each time-bounded
        │        failures / timeouts -> empty list + "failed" diagnostic
        ▼
    join (provider completion order)
        │
        ▼
    filter (source type, year range) -> Deduplicator -> Ranker -> truncate

No exception crosses the fan-out/join boundary: each provider task always
produces a ProviderResult. A total outage yields an empty result list with
every provider marked failed.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING

from academic_search.config import DEFAULT_PROVIDER_TIMEOUT
from academic_search.core.async_utils import timeout_with_fallback
from academic_search.core.exceptions import ErrorContext, ProviderError, ProviderErrorKind
from academic_search.domain.entities import (
    Paper,
    Provider,
    ProviderResult,
    ProviderStatus,
    SearchQuery,
    SearchResponse,
    SourceTypeFilter,
)

from .deduplicator import Deduplicator
from .ranking import Ranker

if TYPE_CHECKING:
    from academic_search.infrastructure.sources.base_client import ProviderAdapter

logger = logging.getLogger(__name__)


def per_provider_limit(max_results: int, provider_count: int) -> int:
    """Results requested from each provider: ceil(max_results / providers)."""
    return math.ceil(max_results / max(provider_count, 1))


class SearchAggregator:
    """
    Run a search across providers concurrently and merge the results.

    Usage:
        aggregator = SearchAggregator(adapters)
        response = await aggregator.run(SearchQuery(query="crispr", providers=["pubmed", "crossref"]))
        response.diagnostics  # {"pubmed": "ok", "crossref": "failed"}
    """

    def __init__(
        self,
        adapters: Mapping[Provider, ProviderAdapter],
        *,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        timeouts: Mapping[Provider, float] | None = None,
        deduplicator: Deduplicator | None = None,
        ranker: Ranker | None = None,
    ):
        """
        Args:
            adapters: One adapter per provider
            timeout: Default per-provider timeout (covers rate-limit waits)
            timeouts: Per-provider overrides
            deduplicator: Duplicate remover (default: Deduplicator())
            ranker: Result sorter (default: Ranker())
        """
        self._adapters = dict(adapters)
        self._timeout = timeout
        self._timeouts = dict(timeouts or {})
        self._deduplicator = deduplicator or Deduplicator()
        self._ranker = ranker or Ranker()

    @property
    def providers(self) -> list[Provider]:
        return list(self._adapters)

    def timeout_for(self, provider: Provider) -> float:
        return self._timeouts.get(provider, self._timeout)

    async def run(self, query: SearchQuery) -> SearchResponse:
        """
        Execute ``query`` against its providers and merge the results.

        Returns:
            SearchResponse with at most ``query.max_results`` papers
        """
        limit = per_provider_limit(query.max_results, len(query.providers))
        completed: list[ProviderResult] = []

        async def run_one(provider: Provider) -> None:
            completed.append(await self._run_provider(provider, query, limit))

        async with asyncio.TaskGroup() as tg:
            for provider in query.providers:
                tg.create_task(run_one(provider))

        by_provider = {result.provider: result for result in completed}
        diagnostics: dict[str, ProviderStatus] = {}
        errors = {}
        for provider in query.providers:
            result = by_provider[provider]
            diagnostics[provider.value] = ProviderStatus.OK if result.ok else ProviderStatus.FAILED
            if result.error is not None:
                errors[provider.value] = result.error.to_dict()

        candidates = [paper for result in completed if result.ok for paper in result.papers]
        filtered = [paper for paper in candidates if self._passes_filters(paper, query)]
        unique = self._deduplicator.deduplicate(filtered)
        ranked = self._ranker.rank(unique, query.sort_by)
        results = ranked[: query.max_results]

        logger.info(
            f'Academic search completed: {len(results)} results for "{query.text}" '
            f"({len(candidates)} candidates, {len(errors)} failed providers)"
        )
        return SearchResponse(results=results, diagnostics=diagnostics, errors=errors)

    async def _run_provider(self, provider: Provider, query: SearchQuery, limit: int) -> ProviderResult:
        """Run one provider; always returns a ProviderResult."""
        adapter = self._adapters.get(provider)
        if adapter is None:
            logger.warning(f"No adapter configured for provider {provider.value}")
            return ProviderResult.failure(
                provider,
                ProviderError(provider.value, ProviderErrorKind.ERROR, "provider not configured"),
            )

        timeout = self.timeout_for(provider)

        def on_timeout() -> ProviderResult:
            logger.warning(f"{provider.value} search timed out after {timeout:.1f}s")
            return ProviderResult.failure(
                provider,
                ProviderError(
                    provider.value,
                    ProviderErrorKind.TIMEOUT,
                    f"no response within {timeout:.1f}s",
                    context=ErrorContext(operation="search"),
                ),
            )

        try:
            result = await timeout_with_fallback(adapter.search(query, limit), timeout, on_timeout)
        except ProviderError as e:
            logger.warning(f"{provider.value} search failed: {e}")
            return ProviderResult.failure(provider, e)
        except Exception as e:
            logger.exception(f"{provider.value} search raised unexpectedly: {e}")
            return ProviderResult.failure(
                provider,
                ProviderError(provider.value, ProviderErrorKind.ERROR, f"{type(e).__name__}: {e}"),
            )

        # Diagnostics are keyed by the requested provider
        result.provider = provider
        return result

    @staticmethod
    def _passes_filters(paper: Paper, query: SearchQuery) -> bool:
        if query.source_type is not SourceTypeFilter.ALL and paper.source_type.value != query.source_type.value:
            return False
        year = paper.year_as_int
        if year is not None:
            if query.year_from is not None and year < query.year_from:
                return False
            if query.year_to is not None and year > query.year_to:
                return False
        return True
