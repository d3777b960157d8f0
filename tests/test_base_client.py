"""Tests for infrastructure/sources/base_client.py: request pattern and error tagging."""

from unittest.mock import AsyncMock

import httpx
import pytest

from academic_search.core.exceptions import ProviderError, ProviderErrorKind
from academic_search.domain.entities import Provider, SearchQuery, SourceType
from academic_search.infrastructure.sources.base_client import BaseAPIClient, ProviderAdapter


class DummyAdapter(ProviderAdapter):
    provider = Provider.CROSSREF
    _service_name = "Dummy"

    def __init__(self, papers=None, **kwargs):
        super().__init__(base_url="https://api.example.org/", **kwargs)
        self._papers = papers or []
        self.limits_seen = []

    async def _search(self, query, limit):
        self.limits_seen.append(limit)
        if isinstance(self._papers, Exception):
            raise self._papers
        return self._papers


# ============================================================
# BaseAPIClient
# ============================================================


class TestBaseAPIClient:
    async def test_build_url(self, rate_limiter):
        client = DummyAdapter(rate_limiter=rate_limiter)
        assert client._build_url("/works") == "https://api.example.org/works"
        assert client._build_url("https://other.org/x") == "https://other.org/x"
        assert client.name == "crossref"

    async def test_default_private_rate_limiter(self):
        client = DummyAdapter()
        assert client._rate_limiter.limit_for("crossref").max_requests == 50

    async def test_json_request(self, rate_limiter, make_response):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(json_data={"ok": True}))

        result = await client._make_request("/works", params={"q": "x"})

        assert result == {"ok": True}
        client._client.get.assert_called_once_with(
            "https://api.example.org/works", params={"q": "x"}, headers={}
        )

    async def test_reserves_rate_limit_slot(self, rate_limiter, make_response):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(json_data={}))

        await client._make_request("/works")

        assert rate_limiter.remaining("crossref") == 49

    async def test_text_request(self, rate_limiter, make_response):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(text="<xml/>"))

        assert await client._make_request("/feed", expect_json=False) == "<xml/>"

    async def test_invalid_json_is_parse_error(self, rate_limiter, make_response):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(text="not json"))

        with pytest.raises(ProviderError) as exc_info:
            await client._make_request("/works")
        assert exc_info.value.kind is ProviderErrorKind.PARSE

    async def test_timeout_tagged(self, rate_limiter):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(ProviderError) as exc_info:
            await client._make_request("/works")
        assert exc_info.value.kind is ProviderErrorKind.TIMEOUT
        assert exc_info.value.provider == "crossref"

    async def test_connection_error_tagged_http(self, rate_limiter):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ProviderError) as exc_info:
            await client._make_request("/works")
        assert exc_info.value.kind is ProviderErrorKind.HTTP

    async def test_status_error_tagged_http(self, rate_limiter, make_response):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(503, json_data={}))

        with pytest.raises(ProviderError) as exc_info:
            await client._make_request("/works")
        assert exc_info.value.kind is ProviderErrorKind.HTTP
        assert exc_info.value.status_code == 503

    async def test_429_carries_retry_after(self, rate_limiter, make_response):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=make_response(429, headers={"Retry-After": "12"}))

        with pytest.raises(ProviderError) as exc_info:
            await client._make_request("/works")
        assert exc_info.value.status_code == 429
        assert exc_info.value.context.retry_after == 12.0
        client._client.get.assert_called_once()

    async def test_retry_after_missing(self, make_response):
        assert BaseAPIClient._get_retry_after(make_response(429)) is None

    async def test_close(self, rate_limiter):
        client = DummyAdapter(rate_limiter=rate_limiter)
        client._client = AsyncMock()
        async with client:
            pass
        client._client.aclose.assert_called_once()


# ============================================================
# ProviderAdapter.search
# ============================================================


class TestProviderAdapterSearch:
    async def test_success(self, rate_limiter, make_paper):
        adapter = DummyAdapter([make_paper(abstract="text")], rate_limiter=rate_limiter)
        result = await adapter.search(SearchQuery(query="x"), 7)

        assert result.ok
        assert result.provider is Provider.CROSSREF
        assert result.papers[0].abstract == "text"
        assert adapter.limits_seen == [7]

    async def test_default_limit_is_max_results(self, rate_limiter):
        adapter = DummyAdapter(rate_limiter=rate_limiter)
        await adapter.search(SearchQuery(query="x", max_results=12))
        assert adapter.limits_seen == [12]

    async def test_strips_abstracts(self, rate_limiter, make_paper):
        adapter = DummyAdapter([make_paper(abstract="text")], rate_limiter=rate_limiter)
        result = await adapter.search(SearchQuery(query="x", include_abstracts=False))
        assert result.papers[0].abstract is None

    async def test_provider_error_becomes_failure(self, rate_limiter):
        error = ProviderError("crossref", ProviderErrorKind.PARSE, "bad")
        adapter = DummyAdapter(error, rate_limiter=rate_limiter)

        result = await adapter.search(SearchQuery(query="x"))

        assert not result.ok
        assert result.papers == []
        assert result.error is error

    async def test_malformed_field_becomes_parse_failure(self, rate_limiter):
        adapter = DummyAdapter(AttributeError("'int' object has no attribute 'strip'"), rate_limiter=rate_limiter)

        result = await adapter.search(SearchQuery(query="x"))

        assert not result.ok
        assert result.papers == []
        assert result.error.kind is ProviderErrorKind.PARSE
        assert result.error.provider == "crossref"
        assert "AttributeError" in str(result.error)

    def test_search_hook_is_abstract(self, rate_limiter):
        class Bare(ProviderAdapter):
            provider = Provider.ARXIV

        with pytest.raises(TypeError):
            Bare(rate_limiter=rate_limiter)


class TestMakePaper:
    def _adapter(self, rate_limiter):
        return DummyAdapter(rate_limiter=rate_limiter)

    def _fields(self, **overrides):
        fields = {
            "id": "1",
            "title": "A title",
            "authors": ["Ada Lovelace"],
            "source": "Journal",
            "url": "https://example.org/1",
            "source_type": SourceType.JOURNAL,
            "credibility_score": 0.85,
            "peer_reviewed": True,
        }
        fields.update(overrides)
        return fields

    def test_builds_paper(self, rate_limiter):
        paper = self._adapter(rate_limiter)._make_paper(**self._fields(year="", doi=""))
        assert paper.origin_provider is Provider.CROSSREF
        assert paper.year is None
        assert paper.doi is None

    @pytest.mark.parametrize("overrides", [{"title": "  "}, {"title": None}, {"authors": []}, {"authors": [" ", ""]}])
    def test_drops_invalid_candidates(self, rate_limiter, overrides):
        assert self._adapter(rate_limiter)._make_paper(**self._fields(**overrides)) is None

    def test_negative_citations_discarded(self, rate_limiter):
        paper = self._adapter(rate_limiter)._make_paper(**self._fields(citation_count=-4))
        assert paper.citation_count is None
