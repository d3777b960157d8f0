"""
Ranker - Stable ordering of the merged result set.

Sort keys:
    relevance   - keep provider order (no-op)
    year        - newest first, missing years last
    citations   - most cited first, missing counts as 0
    credibility - highest credibility first

``sorted`` is stable, so papers tied on the key keep their incoming order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from academic_search.domain.entities import Paper, SortKey


def _year_key(paper: Paper) -> tuple[int, int]:
    year = paper.year_as_int
    if year is None:
        return (1, 0)
    return (0, -year)


def _citation_key(paper: Paper) -> int:
    return -(paper.citation_count or 0)


def _credibility_key(paper: Paper) -> float:
    return -paper.credibility_score


SORT_KEYS: dict[SortKey, Callable[[Paper], Any]] = {
    SortKey.YEAR: _year_key,
    SortKey.CITATIONS: _citation_key,
    SortKey.CREDIBILITY: _credibility_key,
}


class Ranker:
    """Sort papers by a ``SortKey``."""

    def rank(self, papers: Iterable[Paper], sort_by: SortKey | str = SortKey.RELEVANCE) -> list[Paper]:
        key = SORT_KEYS.get(SortKey(sort_by))
        if key is None:
            return list(papers)
        return sorted(papers, key=key)
