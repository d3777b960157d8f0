"""Tests for application/search/aggregator.py: fan-out, failure isolation, merge."""

import pytest

from academic_search.application.search import SearchAggregator, per_provider_limit
from academic_search.core.exceptions import ProviderErrorKind
from academic_search.domain.entities import (
    Provider,
    ProviderStatus,
    SearchQuery,
    SourceType,
)


# ============================================================
# Per-provider budget
# ============================================================


class TestPerProviderLimit:
    @pytest.mark.parametrize(
        "max_results,count,expected",
        [(20, 4, 5), (5, 1, 5), (10, 3, 4), (1, 4, 1)],
    )
    def test_ceil_division(self, max_results, count, expected):
        assert per_provider_limit(max_results, count) == expected


# ============================================================
# Happy path
# ============================================================


class TestAggregatorRun:
    async def test_all_providers_ok(self, aggregator):
        response = await aggregator.run(SearchQuery(query="protein folding"))

        assert response.diagnostics == {p.value: ProviderStatus.OK for p in Provider}
        assert response.errors == {}
        assert len(response.results) == 8
        assert not response.from_cache

    async def test_diagnostics_follow_requested_order(self, aggregator):
        query = SearchQuery(query="x", providers=["semanticScholar", "arxiv"])
        response = await aggregator.run(query)
        assert list(response.diagnostics) == ["semanticScholar", "arxiv"]

    async def test_only_selected_providers_called(self, aggregator, fake_adapters):
        await aggregator.run(SearchQuery(query="x", providers=["arxiv"]))
        assert len(fake_adapters[Provider.ARXIV].calls) == 1
        assert fake_adapters[Provider.PUBMED].calls == []

    async def test_limit_passed_to_adapters(self, aggregator, fake_adapters):
        await aggregator.run(SearchQuery(query="x", providers=["pubmed", "crossref", "arxiv"], max_results=10))
        assert fake_adapters[Provider.PUBMED].calls[0][1] == 4

    async def test_truncated_to_max_results(self, aggregator):
        response = await aggregator.run(SearchQuery(query="x", max_results=3))
        assert len(response.results) <= 3

    async def test_single_provider_results(self, fake_adapter, make_paper):
        papers = [
            make_paper(id=f"a{i}", title=f"ML paper {i}", origin_provider=Provider.ARXIV) for i in range(8)
        ]
        aggregator = SearchAggregator({Provider.ARXIV: fake_adapter(Provider.ARXIV, papers)})

        response = await aggregator.run(SearchQuery(query="machine learning", providers=["arxiv"], max_results=5))

        assert len(response.results) <= 5
        assert all(p.origin_provider is Provider.ARXIV for p in response.results)

    async def test_credibility_in_range(self, aggregator):
        response = await aggregator.run(SearchQuery(query="x"))
        assert all(0.0 <= p.credibility_score <= 1.0 for p in response.results)


# ============================================================
# Failure isolation
# ============================================================


class TestAggregatorFailures:
    async def test_partial_failure(self, fake_adapters, fake_adapter):
        fake_adapters[Provider.ARXIV] = fake_adapter(Provider.ARXIV, error=ProviderErrorKind.HTTP)
        aggregator = SearchAggregator(fake_adapters)

        response = await aggregator.run(SearchQuery(query="x", providers=["pubmed", "arxiv"]))

        assert response.diagnostics == {"pubmed": ProviderStatus.OK, "arxiv": ProviderStatus.FAILED}
        assert response.errors["arxiv"]["kind"] == "http"
        assert {p.origin_provider for p in response.results} == {Provider.PUBMED}
        assert len(response.results) == 2

    async def test_total_failure_returns_empty(self, fake_adapter):
        adapters = {p: fake_adapter(p, error=ProviderErrorKind.PARSE) for p in Provider}
        aggregator = SearchAggregator(adapters)

        response = await aggregator.run(SearchQuery(query="x"))

        assert response.results == []
        assert response.all_failed
        assert set(response.errors) == {p.value for p in Provider}

    async def test_timeout_marks_failed(self, fake_adapters, fake_adapter):
        fake_adapters[Provider.SEMANTIC_SCHOLAR] = fake_adapter(Provider.SEMANTIC_SCHOLAR, delay=5.0)
        aggregator = SearchAggregator(fake_adapters, timeout=0.05)

        response = await aggregator.run(SearchQuery(query="x", providers=["crossref", "semanticScholar"]))

        assert response.diagnostics["semanticScholar"] is ProviderStatus.FAILED
        assert response.errors["semanticScholar"]["kind"] == "timeout"
        assert response.diagnostics["crossref"] is ProviderStatus.OK
        assert len(response.results) == 2

    async def test_per_provider_timeout_override(self, fake_adapters, fake_adapter):
        fake_adapters[Provider.ARXIV] = fake_adapter(Provider.ARXIV, delay=0.1)
        aggregator = SearchAggregator(fake_adapters, timeout=0.01, timeouts={Provider.ARXIV: 2.0})
        assert aggregator.timeout_for(Provider.ARXIV) == 2.0

        response = await aggregator.run(SearchQuery(query="x", providers=["arxiv"]))
        assert response.diagnostics["arxiv"] is ProviderStatus.OK

    async def test_unexpected_exception_contained(self, fake_adapters, fake_adapter):
        fake_adapters[Provider.CROSSREF] = fake_adapter(Provider.CROSSREF, raises=RuntimeError("boom"))
        aggregator = SearchAggregator(fake_adapters)

        response = await aggregator.run(SearchQuery(query="x", providers=["crossref", "pubmed"]))

        assert response.diagnostics["crossref"] is ProviderStatus.FAILED
        assert response.errors["crossref"]["kind"] == "error"
        assert "boom" in response.errors["crossref"]["error"]
        assert response.diagnostics["pubmed"] is ProviderStatus.OK

    async def test_missing_adapter(self, fake_adapters):
        del fake_adapters[Provider.PUBMED]
        aggregator = SearchAggregator(fake_adapters)

        response = await aggregator.run(SearchQuery(query="x", providers=["pubmed", "arxiv"]))

        assert response.diagnostics["pubmed"] is ProviderStatus.FAILED
        assert response.diagnostics["arxiv"] is ProviderStatus.OK


# ============================================================
# Filters, dedup and ranking
# ============================================================


class TestAggregatorMerge:
    async def test_cross_provider_duplicates_merged(self, fake_adapter, make_paper):
        adapters = {
            Provider.ARXIV: fake_adapter(
                Provider.ARXIV,
                [make_paper(id="2101.1", doi="10.1/x", origin_provider=Provider.ARXIV, credibility_score=0.7)],
            ),
            Provider.PUBMED: fake_adapter(
                Provider.PUBMED,
                [make_paper(id="123", doi="10.1/x", origin_provider=Provider.PUBMED, credibility_score=0.9)],
            ),
        }
        response = await SearchAggregator(adapters).run(SearchQuery(query="x", providers=["arxiv", "pubmed"]))

        assert len(response.results) == 1
        assert response.results[0].origin_provider is Provider.PUBMED

    async def test_source_type_filter(self, fake_adapter, make_paper):
        adapters = {
            Provider.CROSSREF: fake_adapter(
                Provider.CROSSREF,
                [
                    make_paper(id="j", title="Journal paper", source_type=SourceType.JOURNAL),
                    make_paper(id="c", title="Conference paper", source_type=SourceType.CONFERENCE),
                ],
            )
        }
        query = SearchQuery(query="x", providers=["crossref"], source_type="conference")
        response = await SearchAggregator(adapters).run(query)
        assert [p.id for p in response.results] == ["c"]

    async def test_year_filter_keeps_undated(self, fake_adapter, make_paper):
        adapters = {
            Provider.CROSSREF: fake_adapter(
                Provider.CROSSREF,
                [
                    make_paper(id="old", title="Old", year="2001"),
                    make_paper(id="new", title="New", year="2022"),
                    make_paper(id="undated", title="Undated", year=None),
                ],
            )
        }
        query = SearchQuery(query="x", providers=["crossref"], year_from=2020)
        response = await SearchAggregator(adapters).run(query)
        assert {p.id for p in response.results} == {"new", "undated"}

    async def test_sorted_by_year(self, fake_adapter, make_paper):
        adapters = {
            Provider.CROSSREF: fake_adapter(
                Provider.CROSSREF,
                [make_paper(id=y, title=f"Paper {y}", year=y) for y in ["2015", "2023", "2019"]],
            )
        }
        query = SearchQuery(query="x", providers=["crossref"], sort_by="year")
        response = await SearchAggregator(adapters).run(query)
        assert [p.id for p in response.results] == ["2023", "2019", "2015"]
