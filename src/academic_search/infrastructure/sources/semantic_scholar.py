"""
Semantic Scholar Adapter - AI-indexed paper graph

API Documentation: https://api.semanticscholar.org/api-docs/

No fixed provider prior: credibility comes from CredibilityScorer
(citation count, recency, venue).

Rate Limits:
- Unauthenticated: 100 requests / 5 minutes
"""

from __future__ import annotations

import logging
from typing import Any

from academic_search.application.search.credibility import CredibilityScorer
from academic_search.config import DEFAULT_REQUEST_TIMEOUT
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.core.exceptions import ProviderErrorKind
from academic_search.domain.entities import Paper, Provider, SearchQuery, SourceType
from academic_search.infrastructure.sources.base_client import ProviderAdapter

logger = logging.getLogger(__name__)

S2_API_BASE = "https://api.semanticscholar.org/graph/v1"
S2_SEARCH_URL = f"{S2_API_BASE}/paper/search"
S2_PAPER_PAGE = "https://www.semanticscholar.org/paper/{paper_id}"

SEARCH_FIELDS = [
    "paperId",
    "title",
    "authors",
    "year",
    "abstract",
    "citationCount",
    "url",
    "venue",
    "publicationDate",
    "externalIds",  # Contains DOI, PubMed ID, etc.
    "publicationTypes",
]


class SemanticScholarAdapter(ProviderAdapter):
    """
    Semantic Scholar paper search adapter.

    Usage:
        adapter = SemanticScholarAdapter(api_key="...")
        result = await adapter.search(SearchQuery(query="deep learning", providers=["semanticScholar"]))
    """

    provider = Provider.SEMANTIC_SCHOLAR
    _service_name = "Semantic Scholar"

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter | None = None,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        scorer: CredibilityScorer | None = None,
    ):
        """
        Args:
            rate_limiter: Shared per-provider limiter
            api_key: Optional S2 API key (sent as x-api-key)
            timeout: Per request timeout in seconds
            scorer: Credibility scorer (default: current-year scorer)
        """
        self._api_key = api_key
        self._scorer = scorer or CredibilityScorer()
        headers = {"Accept": "application/json", "User-Agent": "academic-search/1.0"}
        if api_key:
            headers["x-api-key"] = api_key
        super().__init__(rate_limiter=rate_limiter, base_url=S2_API_BASE, timeout=timeout, headers=headers)

    @staticmethod
    def build_year_filter(query: SearchQuery) -> str | None:
        if query.year_from and query.year_to:
            return f"{query.year_from}-{query.year_to}"
        if query.year_from:
            return f"{query.year_from}-"
        if query.year_to:
            return f"-{query.year_to}"
        return None

    async def _search(self, query: SearchQuery, limit: int) -> list[Paper]:
        params: dict[str, Any] = {
            "query": query.text,
            "limit": str(min(limit, 100)),
            "fields": ",".join(SEARCH_FIELDS),
        }
        year_filter = self.build_year_filter(query)
        if year_filter:
            params["year"] = year_filter

        data = await self._make_request(S2_SEARCH_URL, params=params)
        if not isinstance(data, dict):
            raise self._error(ProviderErrorKind.PARSE, "response is not a JSON object")
        items = data.get("data")
        if items is None:
            return []
        if not isinstance(items, list):
            raise self._error(ProviderErrorKind.PARSE, "'data' is not a list")
        return self.parse_papers(items)

    def parse_papers(self, papers: list[dict[str, Any]]) -> list[Paper]:
        results: list[Paper] = []
        for item in papers:
            if not isinstance(item, dict):
                continue
            paper_id = item.get("paperId") or ""
            external_ids = item.get("externalIds") or {}
            venue = item.get("venue") or "Unknown"
            year = item.get("year")
            citation_count = item.get("citationCount")
            if not isinstance(citation_count, int):
                citation_count = 0

            paper = self._make_paper(
                id=paper_id,
                title=item.get("title"),
                authors=[a.get("name", "") for a in item.get("authors") or [] if isinstance(a, dict)],
                source=venue,
                url=item.get("url") or S2_PAPER_PAGE.format(paper_id=paper_id),
                source_type=_source_type(item.get("publicationTypes")),
                credibility_score=self._scorer.score(
                    citation_count=citation_count,
                    year=year,
                    venue=item.get("venue"),
                ),
                peer_reviewed=True,
                year=str(year) if year else None,
                abstract=item.get("abstract"),
                doi=external_ids.get("DOI"),
                citation_count=citation_count,
            )
            if paper is None:
                logger.debug(f"Semantic Scholar: dropping paper {paper_id or '?'} without title or authors")
                continue
            results.append(paper)
        return results


def _source_type(publication_types: Any) -> SourceType:
    if isinstance(publication_types, list) and "Conference" in publication_types:
        return SourceType.CONFERENCE
    return SourceType.JOURNAL
