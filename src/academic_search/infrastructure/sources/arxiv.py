"""
arXiv Adapter - Preprint archive (Atom API)

API Documentation: https://info.arxiv.org/help/api/user-manual.html

arXiv has no server-side date filter on its search endpoint, so
year_from / year_to are applied to the parsed entries.

Rate Limits:
- 1 request every 3 seconds
"""

from __future__ import annotations

import logging
from typing import Any

import defusedxml.ElementTree as ET  # Security: prevent XML attacks
from defusedxml import DefusedXmlException

from academic_search.application.search.credibility import ARXIV_BASE_CREDIBILITY
from academic_search.config import DEFAULT_REQUEST_TIMEOUT
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.core.exceptions import ProviderErrorKind
from academic_search.domain.entities import Paper, Provider, SearchQuery, SourceType
from academic_search.infrastructure.sources.base_client import ProviderAdapter

logger = logging.getLogger(__name__)

ARXIV_API_URL = "http://export.arxiv.org/api/query"

NAMESPACES = {
    "atom": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}


class ArXivAdapter(ProviderAdapter):
    """Adapter for the arXiv preprint archive."""

    provider = Provider.ARXIV
    _service_name = "arXiv"

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        super().__init__(rate_limiter=rate_limiter, timeout=timeout)

    async def _search(self, query: SearchQuery, limit: int) -> list[Paper]:
        params = {
            "search_query": f"all:{query.text}",
            "start": 0,
            "max_results": min(limit, 100),
            "sortBy": "relevance",
            "sortOrder": "descending",
        }
        xml_text = await self._make_request(ARXIV_API_URL, params=params, expect_json=False)
        return self.parse_feed(xml_text, year_from=query.year_from, year_to=query.year_to)

    def parse_feed(
        self,
        xml_text: str,
        year_from: int | None = None,
        year_to: int | None = None,
    ) -> list[Paper]:
        """Parse an Atom feed into Papers, applying the year range."""
        try:
            root = ET.fromstring(xml_text)
        except (ET.ParseError, DefusedXmlException) as e:
            raise self._error(ProviderErrorKind.PARSE, f"invalid Atom feed: {e}") from e

        papers: list[Paper] = []
        for entry in root.findall("atom:entry", NAMESPACES):
            entry_id = _text(entry, "atom:id")
            published = _text(entry, "atom:published")
            year = published[:4] if published[:4].isdigit() else None

            if year is not None:
                if year_from and int(year) < year_from:
                    continue
                if year_to and int(year) > year_to:
                    continue

            paper = self._make_paper(
                id=entry_id.rstrip("/").split("/")[-1],
                title=_text(entry, "atom:title"),
                authors=[
                    _text(author, "atom:name") for author in entry.findall("atom:author", NAMESPACES)
                ],
                source="arXiv",
                url=entry_id,
                source_type=SourceType.PREPRINT,
                credibility_score=ARXIV_BASE_CREDIBILITY,
                peer_reviewed=False,
                year=year,
                abstract=_text(entry, "atom:summary"),
                doi=_text(entry, "arxiv:doi") or None,
                categories=[
                    term
                    for term in (cat.get("term") for cat in entry.findall("atom:category", NAMESPACES))
                    if term
                ],
            )
            if paper is None:
                logger.debug(f"arXiv: dropping entry {entry_id or '?'} without title or authors")
                continue
            papers.append(paper)
        return papers


def _text(element: Any, path: str) -> str:
    found = element.find(path, NAMESPACES)
    if found is None or not found.text:
        return ""
    return " ".join(found.text.split())
