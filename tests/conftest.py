"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from academic_search.application.search import SearchAggregator
from academic_search.core.exceptions import ProviderError, ProviderErrorKind
from academic_search.domain.entities import (
    Paper,
    Provider,
    ProviderResult,
    SearchQuery,
    SourceType,
)

# ============================================================
# Paper Factories
# ============================================================


def build_paper(**overrides) -> Paper:
    """Build a valid Paper; override any field."""
    fields = {
        "id": "p1",
        "title": "Deep Learning for Protein Folding",
        "authors": ["Jane Doe", "John Smith"],
        "source": "Nature",
        "url": "https://example.org/p1",
        "source_type": SourceType.JOURNAL,
        "origin_provider": Provider.CROSSREF,
        "credibility_score": 0.85,
        "peer_reviewed": True,
        "year": "2022",
    }
    fields.update(overrides)
    return Paper(**fields)


@pytest.fixture
def make_paper():
    """Factory fixture for Paper objects."""
    return build_paper


# ============================================================
# Fake Provider Adapters
# ============================================================


class FakeAdapter:
    """
    Stand-in for a ProviderAdapter.

    Returns ``papers`` (or a failure for ``error``), optionally after
    ``delay`` seconds, and records every call.
    """

    def __init__(
        self,
        provider: Provider,
        papers: list[Paper] | None = None,
        *,
        error: ProviderErrorKind | None = None,
        raises: Exception | None = None,
        delay: float = 0.0,
    ):
        self.provider = provider
        self.papers = papers or []
        self.error = error
        self.raises = raises
        self.delay = delay
        self.calls: list[tuple[SearchQuery, int | None]] = []
        self.closed = False

    async def search(self, query: SearchQuery, limit: int | None = None) -> ProviderResult:
        self.calls.append((query, limit))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            return ProviderResult.failure(
                self.provider,
                ProviderError(self.provider.value, self.error, "simulated failure"),
            )
        return ProviderResult.success(self.provider, [paper for paper in self.papers][: limit or None])

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_adapter():
    """Factory fixture for FakeAdapter."""
    return FakeAdapter


@pytest.fixture
def fake_adapters(make_paper):
    """One healthy fake adapter per provider, each returning two distinct papers."""
    adapters = {}
    for provider in Provider:
        adapters[provider] = FakeAdapter(
            provider,
            [
                make_paper(
                    id=f"{provider.value}-{i}",
                    title=f"{provider.value} paper {i}",
                    origin_provider=provider,
                    url=f"https://example.org/{provider.value}/{i}",
                )
                for i in range(2)
            ],
        )
    return adapters


@pytest.fixture
def aggregator(fake_adapters):
    """SearchAggregator over the healthy fake adapters."""
    return SearchAggregator(fake_adapters, timeout=1.0)


# ============================================================
# Fake Clock
# ============================================================


class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


# ============================================================
# Mock HTTP Responses
# ============================================================


def mock_response(status_code: int = 200, *, json_data=None, text: str = "", headers=None) -> MagicMock:
    """httpx.Response stand-in for ``client._client.get`` mocks."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.reason_phrase = "OK" if status_code < 400 else "Error"
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"HTTP {status_code}", request=MagicMock(), response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def make_response():
    return mock_response


@pytest.fixture
def rate_limiter(fake_clock):
    """Provider rate limiter with default budgets, driven by the fake clock."""
    from academic_search.config import Settings
    from academic_search.core.async_utils import ProviderRateLimiter

    return ProviderRateLimiter(Settings().rate_limits(), clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def search_service(fake_adapters, fake_clock, rate_limiter):
    """AcademicSearchService over the healthy fake adapters."""
    from academic_search.application.search import AcademicSearchService
    from academic_search.infrastructure.cache import SearchCache

    aggregator = SearchAggregator(fake_adapters, timeout=1.0)
    cache = SearchCache(aggregator, ttl=300, timer=fake_clock)
    return AcademicSearchService(cache, aggregator, fake_adapters, rate_limiter)
