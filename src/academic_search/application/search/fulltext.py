"""
Full-text availability lookup.

Derives, without any network call, where the full text of each paper can be
found: the publisher landing page (via DOI), the arXiv abstract page, or the
PubMed Central repository.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from academic_search.domain.entities import Paper, Provider

DOI_URL = "https://doi.org/{doi}"
PMC_ARTICLE_URL = "https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{id}/"


def full_text_sources(paper: dict[str, Any]) -> list[dict[str, Any]]:
    """
    List full-text locations for one paper (in its dict form).

    Each source has ``type`` ("publisher", "preprint" or "repository"),
    ``url`` and ``accessType`` ("open" or "subscription"); repository links
    may carry a ``note``.
    """
    sources: list[dict[str, Any]] = []

    doi = paper.get("doi")
    if doi:
        sources.append(
            {
                "type": "publisher",
                "url": DOI_URL.format(doi=doi),
                "accessType": "subscription",
            }
        )

    provider = paper.get("origin_provider")
    if provider == Provider.ARXIV.value and paper.get("url"):
        sources.append({"type": "preprint", "url": paper["url"], "accessType": "open"})
    elif provider == Provider.PUBMED.value and paper.get("id"):
        sources.append(
            {
                "type": "repository",
                "url": PMC_ARTICLE_URL.format(id=paper["id"]),
                "accessType": "open",
                "note": "Check PMC for availability",
            }
        )

    return sources


def full_text_availability(papers: Iterable[Paper | dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Annotate papers with their full-text sources.

    Args:
        papers: Paper objects or their ``to_dict()`` form

    Returns:
        One dict per paper: the paper fields plus ``full_text_sources``
    """
    annotated: list[dict[str, Any]] = []
    for paper in papers:
        data = paper.to_dict() if isinstance(paper, Paper) else dict(paper)
        data["full_text_sources"] = full_text_sources(data)
        annotated.append(data)
    return annotated
