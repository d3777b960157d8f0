"""
Academic Search Tools - Federated search over PubMed, arXiv, CrossRef and Semantic Scholar.

Tools:
- search_academic_sources: Concurrent multi-provider search with dedup + ranking
- check_full_text_availability: Where to read the full text of found papers
- academic_search_status: Providers, cache and rate-limit headroom
- test_provider_connections: One-result probe per provider
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Literal, Union

from academic_search.core.exceptions import InvalidParameterError, ValidationError

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from academic_search.application.search import AcademicSearchService

logger = logging.getLogger(__name__)


def _to_int(value: Union[int, str, None], name: str) -> int | None:
    """Accept ints or numeric strings (agents often send strings)."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidParameterError(name, value, "an integer") from None


def _to_bool(value: Union[bool, str]) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off", "")
    return bool(value)


def _to_providers(value: Union[str, list[str], None]) -> list[str] | None:
    """Comma-separated string or list; None means all providers, empty is rejected downstream."""
    if value is None:
        return None
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part).strip() for part in value if str(part).strip()]


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def register_academic_tools(mcp: FastMCP, service: AcademicSearchService):
    """Register federated academic search tools."""

    @mcp.tool()
    async def search_academic_sources(
        query: str,
        providers: Union[str, list[str], None] = None,
        max_results: Union[int, str] = 20,
        year_from: Union[int, str, None] = None,
        year_to: Union[int, str, None] = None,
        source_type: Literal["all", "journal", "preprint", "conference"] = "all",
        sort_by: Literal["relevance", "year", "citations", "credibility"] = "relevance",
        include_abstracts: Union[bool, str] = True,
    ) -> str:
        """
        Search PubMed, arXiv, CrossRef and Semantic Scholar concurrently.

        Results from all providers are normalized, duplicates (same DOI or same
        normalized title) are merged keeping the most credible record, then
        sorted and truncated. A provider that fails or times out is reported
        as "failed" in diagnostics; the others still return results.

        Args:
            query: Free-text search query (required)
            providers: Comma-separated subset of pubmed, arxiv, crossref,
                       semanticScholar (default: all four)
            max_results: Maximum merged results (default 20)
            year_from: Earliest publication year
            year_to: Latest publication year
            source_type: all, journal, preprint or conference
            sort_by: relevance, year, citations or credibility
            include_abstracts: Include abstracts in results (default True)

        Returns:
            JSON with results, diagnostics ({provider: "ok" | "failed"}),
            errors for failed providers, and from_cache
        """
        logger.info(f'Academic search: "{query}" providers={providers}')
        try:
            response = await service.search(
                query,
                providers=_to_providers(providers),
                max_results=_to_int(max_results, "max_results"),
                year_from=_to_int(year_from, "year_from"),
                year_to=_to_int(year_to, "year_to"),
                source_type=source_type,
                sort_by=sort_by,
                include_abstracts=_to_bool(include_abstracts),
            )
        except ValidationError as e:
            return e.to_agent_message()

        return _dumps(response.to_dict())

    @mcp.tool()
    def check_full_text_availability(papers_json: str) -> str:
        """
        Report where the full text of papers can be read.

        Pass the "results" array (or part of it) from search_academic_sources.

        Args:
            papers_json: JSON array of paper objects

        Returns:
            JSON array: each paper plus full_text_sources
            (publisher via DOI, arXiv, or PubMed Central)
        """
        try:
            papers = json.loads(papers_json)
        except json.JSONDecodeError as e:
            return InvalidParameterError("papers_json", papers_json[:80], f"a JSON array ({e})").to_agent_message()
        if not isinstance(papers, list) or not all(isinstance(p, dict) for p in papers):
            return InvalidParameterError("papers_json", papers_json[:80], "a JSON array of objects").to_agent_message()

        return _dumps(service.full_text_availability(papers))

    @mcp.tool()
    def academic_search_status() -> str:
        """
        Show configured providers, cache size/TTL/stats and rate-limit headroom.

        Returns:
            JSON status object
        """
        return _dumps(service.status())

    @mcp.tool()
    async def test_provider_connections() -> str:
        """
        Probe each provider with a one-result query (bypasses the cache).

        Returns:
            JSON object {provider: true | false}
        """
        logger.info("Testing academic provider connections")
        return _dumps(await service.check_connections())
