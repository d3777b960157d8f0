"""
CredibilityScorer - Heuristic trust score for search results.

Used by the Semantic Scholar adapter, where no fixed provider prior applies.
Pure function of paper metadata: no I/O.

Scoring:
    base 0.7
    + 0.20 if citations > 100 / + 0.15 if > 50 / + 0.10 if > 10
    + 0.05 if published within the last 3 years
    + 0.15 if the venue is a curated top-tier venue
    clamped to [0, 1]
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

# Provider priors (adapters with fixed baselines)
PUBMED_BASE_CREDIBILITY = 0.9
ARXIV_BASE_CREDIBILITY = 0.7
CROSSREF_BASE_CREDIBILITY = 0.85

BASE_SCORE = 0.7
RECENT_YEARS = 3
RECENCY_BOOST = 0.05
VENUE_BOOST = 0.15

# (threshold, boost) - first matching tier wins
CITATION_TIERS: tuple[tuple[int, float], ...] = (
    (100, 0.2),
    (50, 0.15),
    (10, 0.1),
)

TOP_TIER_VENUES: tuple[str, ...] = ("Nature", "Science", "Cell", "NEJM", "Lancet")


def clamp_score(score: float) -> float:
    return min(1.0, max(0.0, score))


class CredibilityScorer:
    """
    Compute a [0, 1] credibility score from citation count, recency and venue.

    Example:
        scorer = CredibilityScorer(current_year=2024)
        scorer.score(citation_count=120, year=2023, venue="Nature Medicine")  # 1.0
    """

    def __init__(
        self,
        current_year: int | None = None,
        top_venues: Sequence[str] = TOP_TIER_VENUES,
    ) -> None:
        self._current_year = current_year
        self._top_venues = tuple(top_venues)

    @property
    def current_year(self) -> int:
        return self._current_year or datetime.now(timezone.utc).year

    def score(
        self,
        *,
        citation_count: int | None = None,
        year: int | str | None = None,
        venue: str | None = None,
    ) -> float:
        score = BASE_SCORE

        citations = citation_count or 0
        for threshold, boost in CITATION_TIERS:
            if citations > threshold:
                score += boost
                break

        numeric_year = _to_year(year)
        if numeric_year is not None and self.current_year - numeric_year <= RECENT_YEARS:
            score += RECENCY_BOOST

        if venue and any(top in venue for top in self._top_venues):
            score += VENUE_BOOST

        return clamp_score(score)


def _to_year(value: int | str | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()[:4]
    return int(text) if text.isdigit() else None
