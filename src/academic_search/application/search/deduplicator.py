"""
Deduplicator - Cross-provider duplicate removal.

Identity key:
    1. DOI, verbatim, when present
    2. Otherwise the title lowercased, stripped of punctuation and trimmed

When several candidates share a key, the one with the higher credibility
score survives (ties go to the first seen). Output keeps the order in which
keys were first seen.

Records that share neither a DOI nor a normalized title are never merged,
so a preprint and its later journal version with a reworded title stay
separate.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from academic_search.domain.entities import Paper

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_title(title: str) -> str:
    """Lowercase, drop punctuation, trim."""
    return _PUNCTUATION.sub("", title.lower()).strip()


def identity_key(paper: Paper) -> str:
    if paper.doi:
        return paper.doi
    return normalize_title(paper.title)


class Deduplicator:
    """
    Merge records that represent the same work.

    Example:
        unique = Deduplicator().deduplicate(pubmed_papers + crossref_papers)
    """

    def deduplicate(self, papers: Iterable[Paper]) -> list[Paper]:
        survivors: dict[str, Paper] = {}
        seen = 0

        for paper in papers:
            seen += 1
            key = identity_key(paper)
            current = survivors.get(key)
            if current is None:
                survivors[key] = paper
            elif paper.credibility_score > current.credibility_score:
                # Dict keeps the key's first-seen position
                survivors[key] = paper

        unique = list(survivors.values())
        if seen != len(unique):
            logger.debug(f"Deduplicated {seen} papers to {len(unique)} ({seen - len(unique)} duplicates)")
        return unique
