"""Tests for application/search/deduplicator.py."""

import pytest

from academic_search.application.search.deduplicator import (
    Deduplicator,
    identity_key,
    normalize_title,
)
from academic_search.domain.entities import Provider


class TestNormalizeTitle:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Deep Learning: A Review.", "deep learning a review"),
            ("  COVID-19 Vaccines  ", "covid19 vaccines"),
            ("What's new?", "whats new"),
        ],
    )
    def test_normalize(self, title, expected):
        assert normalize_title(title) == expected


class TestIdentityKey:
    def test_doi_preferred(self, make_paper):
        assert identity_key(make_paper(doi="10.1/x", title="Anything")) == "10.1/x"

    def test_title_fallback(self, make_paper):
        assert identity_key(make_paper(doi=None, title="Hello, World")) == "hello world"


class TestDeduplicator:
    def test_doi_duplicates_keep_higher_credibility(self, make_paper):
        low = make_paper(id="a", doi="10.1/x", credibility_score=0.7, origin_provider=Provider.ARXIV)
        high = make_paper(id="b", doi="10.1/x", credibility_score=0.9, origin_provider=Provider.PUBMED)

        unique = Deduplicator().deduplicate([low, high])

        assert len(unique) == 1
        assert unique[0].credibility_score == 0.9
        assert unique[0].id == "b"

    def test_title_duplicates_merge(self, make_paper):
        a = make_paper(id="a", title="Attention Is All You Need", credibility_score=0.7)
        b = make_paper(id="b", title="attention is all you need.", credibility_score=0.85)

        unique = Deduplicator().deduplicate([a, b])

        assert [p.id for p in unique] == ["b"]

    def test_tie_keeps_first_seen(self, make_paper):
        a = make_paper(id="a", doi="10.1/x", credibility_score=0.8)
        b = make_paper(id="b", doi="10.1/x", credibility_score=0.8)
        assert [p.id for p in Deduplicator().deduplicate([a, b])] == ["a"]

    def test_order_of_first_appearance(self, make_paper):
        papers = [
            make_paper(id="1", title="First"),
            make_paper(id="2", title="Second"),
            make_paper(id="3", title="first", credibility_score=0.95),
            make_paper(id="4", title="Third"),
        ]
        unique = Deduplicator().deduplicate(papers)
        # Winner for "first" replaces the original in its original slot
        assert [p.id for p in unique] == ["3", "2", "4"]

    def test_doi_and_title_keys_do_not_cross(self, make_paper):
        # Same title, but one has a DOI: keys differ, so both survive
        a = make_paper(id="a", title="Same Title", doi="10.1/x")
        b = make_paper(id="b", title="Same Title", doi=None)
        assert len(Deduplicator().deduplicate([a, b])) == 2

    def test_distinct_titles_without_doi_are_kept(self, make_paper):
        preprint = make_paper(id="a", title="Scaling laws for language models (preprint)")
        journal = make_paper(id="b", title="Scaling laws for neural language models")
        assert len(Deduplicator().deduplicate([preprint, journal])) == 2

    def test_empty(self):
        assert Deduplicator().deduplicate([]) == []
