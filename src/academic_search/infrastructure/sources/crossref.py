"""
CrossRef Adapter - Scholarly metadata registry

CrossRef is the official DOI registration agency for scholarly publications.

API Documentation: https://api.crossref.org/swagger-ui/index.html

Rate Limits:
- Polite pool (with email): ~50 req/sec
- Anonymous: ~1 req/sec (strongly discouraged)

Best Practices:
- Always include email in User-Agent (polite pool)
- Use mailto: parameter for higher rate limits
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from academic_search.application.search.credibility import CROSSREF_BASE_CREDIBILITY
from academic_search.config import DEFAULT_CROSSREF_EMAIL, DEFAULT_REQUEST_TIMEOUT
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.core.exceptions import ProviderErrorKind
from academic_search.domain.entities import Paper, Provider, SearchQuery, SourceType
from academic_search.infrastructure.sources.base_client import ProviderAdapter

logger = logging.getLogger(__name__)

CROSSREF_API_BASE = "https://api.crossref.org"

# CrossRef work types that are not journal articles
WORK_SOURCE_TYPES: dict[str, SourceType] = {
    "proceedings-article": SourceType.CONFERENCE,
    "posted-content": SourceType.PREPRINT,
}


class CrossRefAdapter(ProviderAdapter):
    """
    CrossRef works search adapter.

    Note:
        Always provide your email for access to the "polite pool" with
        higher rate limits. Without email, requests are severely throttled.
    """

    provider = Provider.CROSSREF
    _service_name = "CrossRef"

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter | None = None,
        email: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self._email = email or DEFAULT_CROSSREF_EMAIL
        super().__init__(
            rate_limiter=rate_limiter,
            base_url=CROSSREF_API_BASE,
            timeout=timeout,
            headers={
                "User-Agent": f"academic-search/1.0 (mailto:{self._email})",
                "Accept": "application/json",
            },
        )

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> Any:
        """Extract 'message' key from CrossRef JSON responses."""
        data = super()._parse_response(response, expect_json)
        if isinstance(data, dict):
            return data.get("message", data)
        return data

    @staticmethod
    def build_filter(query: SearchQuery) -> str | None:
        parts = []
        if query.year_from:
            parts.append(f"from-pub-date:{query.year_from}")
        if query.year_to:
            parts.append(f"until-pub-date:{query.year_to}")
        return ",".join(parts) or None

    async def _search(self, query: SearchQuery, limit: int) -> list[Paper]:
        params: dict[str, Any] = {
            "query": query.text,
            "rows": str(min(limit, 1000)),
            "mailto": self._email,
        }
        filter_value = self.build_filter(query)
        if filter_value:
            params["filter"] = filter_value

        data = await self._make_request("/works", params=params)
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise self._error(ProviderErrorKind.PARSE, "response has no 'items' list")
        return self.parse_items(data["items"])

    def parse_items(self, items: list[dict[str, Any]]) -> list[Paper]:
        papers: list[Paper] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            doi = item.get("DOI") or None
            citation_count = item.get("is-referenced-by-count")

            paper = self._make_paper(
                id=doi or item.get("URL", ""),
                title=_first(item.get("title")),
                authors=[
                    f"{author.get('given') or ''} {author.get('family') or ''}".strip()
                    for author in item.get("author") or []
                    if isinstance(author, dict)
                ],
                source=_first(item.get("container-title")),
                url=f"https://doi.org/{doi}" if doi else item.get("URL", ""),
                source_type=WORK_SOURCE_TYPES.get(item.get("type", ""), SourceType.JOURNAL),
                credibility_score=CROSSREF_BASE_CREDIBILITY,
                peer_reviewed=True,
                year=_year(item),
                abstract=item.get("abstract"),
                doi=doi,
                citation_count=citation_count if isinstance(citation_count, int) else None,
            )
            if paper is None:
                logger.debug(f"CrossRef: dropping work {doi or '?'} without title or authors")
                continue
            papers.append(paper)
        return papers


def _first(values: Any) -> str:
    if isinstance(values, list) and values:
        return str(values[0])
    return ""


def _year(item: dict[str, Any]) -> str | None:
    for key in ("published", "issued"):
        try:
            year = item[key]["date-parts"][0][0]
        except (KeyError, IndexError, TypeError):
            continue
        if year:
            return str(year)
    return None
