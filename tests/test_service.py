"""Tests for application/search/service.py: the search entry point."""

import pytest

from academic_search.application.search import CONNECTION_PROBES, AcademicSearchService, SearchAggregator
from academic_search.config import Settings
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.core.exceptions import InvalidParameterError, InvalidQueryError, ProviderErrorKind, ValidationError
from academic_search.domain.entities import Provider, ProviderStatus, SortKey
from academic_search.infrastructure.cache import SearchCache


def _calls(adapters) -> int:
    return sum(len(adapter.calls) for adapter in adapters.values())


def _service(adapters, clock) -> AcademicSearchService:
    aggregator = SearchAggregator(adapters, timeout=1.0)
    cache = SearchCache(aggregator, ttl=300, timer=clock)
    limiter = ProviderRateLimiter(Settings().rate_limits(), clock=clock, sleep=clock.sleep)
    return AcademicSearchService(cache, aggregator, adapters, limiter)


@pytest.fixture
def service(fake_adapters, fake_clock):
    return _service(fake_adapters, fake_clock)


# ============================================================
# search
# ============================================================


class TestSearch:
    async def test_defaults_to_all_providers(self, service):
        response = await service.search("protein folding")
        assert list(response.diagnostics) == [p.value for p in Provider]
        assert len(response.results) == 8

    async def test_passes_options(self, service, fake_adapters):
        response = await service.search(
            "x",
            providers=["crossref"],
            max_results=1,
            sort_by="credibility",
            include_abstracts=False,
        )
        query, limit = fake_adapters[Provider.CROSSREF].calls[0]
        assert query.sort_by is SortKey.CREDIBILITY
        assert query.include_abstracts is False
        assert limit == 1
        assert len(response.results) == 1

    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_query_raises_before_provider_calls(self, service, fake_adapters, text):
        with pytest.raises(InvalidQueryError):
            await service.search(text)
        assert _calls(fake_adapters) == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"providers": []},
            {"providers": ["scopus"]},
            {"max_results": 0},
            {"sort_by": "popularity"},
            {"source_type": "book"},
            {"year_from": 2024, "year_to": 2000},
        ],
    )
    async def test_invalid_options_raise(self, service, fake_adapters, kwargs):
        with pytest.raises(ValidationError):
            await service.search("x", **kwargs)
        assert _calls(fake_adapters) == 0

    async def test_second_call_served_from_cache(self, service, fake_adapters):
        first = await service.search("machine learning", providers=["arxiv"], max_results=5)
        second = await service.search("machine learning", providers=["arxiv"], max_results=5)

        assert len(fake_adapters[Provider.ARXIV].calls) == 1
        assert second.from_cache
        assert [p.to_dict() for p in first.results] == [p.to_dict() for p in second.results]

    async def test_arxiv_only(self, service):
        response = await service.search("machine learning", providers=["arxiv"], max_results=5)
        assert len(response.results) <= 5
        assert all(p.origin_provider is Provider.ARXIV for p in response.results)

    async def test_total_outage(self, fake_adapter, fake_clock):
        adapters = {p: fake_adapter(p, error=ProviderErrorKind.TIMEOUT) for p in Provider}
        service = _service(adapters, fake_clock)

        response = await service.search("x")

        assert response.results == []
        assert set(response.diagnostics.values()) == {ProviderStatus.FAILED}


# ============================================================
# check_connections
# ============================================================


class TestCheckConnections:
    async def test_all_reachable(self, service, fake_adapters):
        result = await service.check_connections()

        assert result == {p.value: True for p in Provider}
        for provider, adapter in fake_adapters.items():
            query, limit = adapter.calls[0]
            assert query.text == CONNECTION_PROBES[provider]
            assert query.max_results == 1
            assert limit == 1

    async def test_bypasses_cache(self, service, fake_adapters):
        await service.check_connections()
        await service.check_connections()
        assert len(fake_adapters[Provider.PUBMED].calls) == 2
        assert len(service.cache) == 0

    async def test_failed_provider_reported(self, fake_adapters, fake_adapter, fake_clock):
        fake_adapters[Provider.CROSSREF] = fake_adapter(Provider.CROSSREF, error=ProviderErrorKind.HTTP)
        fake_adapters[Provider.ARXIV] = fake_adapter(Provider.ARXIV, papers=[])
        service = _service(fake_adapters, fake_clock)

        result = await service.check_connections()

        assert result["crossref"] is False
        assert result["arxiv"] is False
        assert result["pubmed"] is True


# ============================================================
# status / full text / close
# ============================================================


class TestStatusAndLifecycle:
    async def test_status(self, service):
        await service.search("x", providers=["pubmed"])
        status = service.status()

        assert status["providers"] == [p.value for p in Provider]
        assert status["cache_size"] == 1
        assert status["cache_ttl_seconds"] == 300
        assert status["cache_stats"]["misses"] == 1
        assert status["rate_limits"]["arxiv"] == {"max_requests": 1, "window_seconds": 3.0, "remaining": 1}
        assert status["rate_limits"]["semanticScholar"]["window_seconds"] == 300.0

    def test_full_text_availability(self, service, make_paper):
        result = service.full_text_availability([make_paper(doi="10.1/x")])
        assert result[0]["full_text_sources"][0]["url"] == "https://doi.org/10.1/x"

    async def test_close(self, service, fake_adapters):
        await service.search("x")
        await service.close()

        assert all(adapter.closed for adapter in fake_adapters.values())
        assert len(service.cache) == 0


class TestInvalidParameterDetails:
    async def test_param_name_reported(self, service):
        with pytest.raises(InvalidParameterError) as exc_info:
            await service.search("x", max_results=-1)
        assert exc_info.value.param_name == "max_results"
