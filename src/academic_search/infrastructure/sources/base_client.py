"""
Base Provider Adapter - Common HTTP request pattern with rate limiting and error tagging.

Every provider adapter shares:
- httpx.AsyncClient management
- Sliding-window rate limiting (one reservation per HTTP request)
- Conversion of transport/status/body failures into tagged ProviderErrors
- The ``search`` contract: always return a ProviderResult, never raise for
  timeouts, HTTP errors or malformed responses

Subclasses set ``provider`` / ``_service_name`` and implement ``_search()``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from typing_extensions import Self

from academic_search.config import DEFAULT_RATE_LIMITS, DEFAULT_REQUEST_TIMEOUT
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.core.exceptions import ErrorContext, ProviderError, ProviderErrorKind
from academic_search.domain.entities import (
    Paper,
    Provider,
    ProviderResult,
    SearchQuery,
    SourceType,
)

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base class for external search providers.

    Provides common infrastructure:
    - httpx.AsyncClient management
    - Rate limit reservation before every request
    - Timeout / HTTP / parse error tagging

    Example:
        class MyAdapter(BaseAPIClient):
            provider = Provider.CROSSREF
            _service_name = "MyAPI"

            async def _search(self, query, limit):
                data = await self._make_request("/works", params={"query": query.text})
                return [...]
    """

    provider: Provider
    _service_name: str = "API"

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter | None = None,
        base_url: str = "",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            rate_limiter: Shared per-provider limiter. If None, a private one
                          with this provider's default budget is created.
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Per request timeout in seconds
            headers: Default headers for all requests
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._rate_limiter = rate_limiter or ProviderRateLimiter(
            {self.provider.value: DEFAULT_RATE_LIMITS[self.provider]}
        )
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers=headers or {},
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    @property
    def name(self) -> str:
        return self.provider.value

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    def _error(
        self,
        kind: ProviderErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
    ) -> ProviderError:
        return ProviderError(
            self.name,
            kind,
            message,
            status_code=status_code,
            context=ErrorContext(operation="search", retry_after=retry_after),
        )

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Reserve a rate-limit slot and make an HTTP GET request.

        Args:
            url: Full URL or path (appended to base_url)
            params: Query string parameters
            headers: Additional headers for this request
            expect_json: If True, parse response as JSON; otherwise return text

        Returns:
            Parsed JSON or response text

        Raises:
            ProviderError: tagged timeout / http / parse
        """
        full_url = self._build_url(url)
        await self._rate_limiter.reserve(self.name)

        try:
            response = await self._client.get(full_url, params=params, headers=headers or {})
        except httpx.TimeoutException as e:
            raise self._error(ProviderErrorKind.TIMEOUT, f"request timed out ({e})") from e
        except httpx.RequestError as e:
            raise self._error(ProviderErrorKind.HTTP, f"request failed: {e}") from e

        if response.status_code == 429:
            raise self._error(
                ProviderErrorKind.HTTP,
                "rate limited by provider (429)",
                status_code=429,
                retry_after=self._get_retry_after(response),
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._error(
                ProviderErrorKind.HTTP,
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e

        return self._parse_response(response, expect_json)

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> Any:
        """Parse response body. Override for custom extraction logic."""
        if not expect_json:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise self._error(ProviderErrorKind.PARSE, f"invalid JSON: {e}") from e

    @staticmethod
    def _get_retry_after(response: httpx.Response) -> float | None:
        try:
            return float(response.headers.get("Retry-After"))
        except (ValueError, TypeError):
            return None

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


class ProviderAdapter(BaseAPIClient, ABC):
    """
    One external search provider behind the common ``search`` contract.

    ``search`` returns a ProviderResult: the normalized papers, or an empty
    list plus the ProviderError that stopped the call.
    """

    async def search(self, query: SearchQuery, limit: int | None = None) -> ProviderResult:
        """
        Search this provider and normalize the results.

        Args:
            query: Validated search query
            limit: Results to request from the provider (default: query.max_results)

        Returns:
            ProviderResult with papers or a tagged error
        """
        limit = limit or query.max_results
        try:
            papers = await self._search(query, limit)
        except ProviderError as e:
            logger.warning(f"{self._service_name} search failed: {e}")
            return ProviderResult.failure(self.provider, e)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            error = self._error(ProviderErrorKind.PARSE, f"malformed response: {type(e).__name__}: {e}")
            logger.warning(f"{self._service_name} search failed: {error}")
            return ProviderResult.failure(self.provider, error)

        if not query.include_abstracts:
            for paper in papers:
                paper.abstract = None

        logger.info(f'{self._service_name} search: {len(papers)} results for "{query.text}"')
        return ProviderResult.success(self.provider, papers)

    @abstractmethod
    async def _search(self, query: SearchQuery, limit: int) -> list[Paper]:
        """Query the provider and return normalized papers; raise ProviderError on failure."""

    def _make_paper(
        self,
        *,
        id: str,
        title: str | None,
        authors: list[str],
        source: str,
        url: str,
        source_type: SourceType,
        credibility_score: float,
        peer_reviewed: bool,
        year: str | None = None,
        abstract: str | None = None,
        doi: str | None = None,
        citation_count: int | None = None,
        categories: list[str] | None = None,
    ) -> Paper | None:
        """Build a Paper, or None when the candidate has no title or authors."""
        title = (title or "").strip()
        authors = [a.strip() for a in authors if a and a.strip()]
        if not title or not authors:
            return None
        if citation_count is not None and citation_count < 0:
            citation_count = None
        return Paper(
            id=id,
            title=title,
            authors=authors,
            source=source,
            url=url,
            source_type=source_type,
            origin_provider=self.provider,
            credibility_score=credibility_score,
            peer_reviewed=peer_reviewed,
            year=year or None,
            abstract=abstract or None,
            doi=doi or None,
            citation_count=citation_count,
            categories=categories or [],
        )
