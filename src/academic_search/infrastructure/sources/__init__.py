"""
Provider Adapters

One adapter per external search provider, all behind the ProviderAdapter
``search`` contract:
- PubMed (XML, E-utilities)
- arXiv (XML, Atom)
- CrossRef (JSON)
- Semantic Scholar (JSON)
"""

from __future__ import annotations

from academic_search.config import Settings
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.domain.entities import Provider

from .arxiv import ArXivAdapter
from .base_client import BaseAPIClient, ProviderAdapter
from .crossref import CrossRefAdapter
from .pubmed import PubMedAdapter
from .semantic_scholar import SemanticScholarAdapter


def build_adapters(
    settings: Settings,
    rate_limiter: ProviderRateLimiter,
) -> dict[Provider, ProviderAdapter]:
    """Create one adapter per provider sharing ``rate_limiter``."""
    timeout = settings.request_timeout
    return {
        Provider.PUBMED: PubMedAdapter(
            rate_limiter=rate_limiter,
            api_key=settings.ncbi_api_key,
            email=settings.ncbi_email,
            timeout=timeout,
        ),
        Provider.ARXIV: ArXivAdapter(rate_limiter=rate_limiter, timeout=timeout),
        Provider.CROSSREF: CrossRefAdapter(
            rate_limiter=rate_limiter,
            email=settings.crossref_email,
            timeout=timeout,
        ),
        Provider.SEMANTIC_SCHOLAR: SemanticScholarAdapter(
            rate_limiter=rate_limiter,
            api_key=settings.semantic_scholar_api_key,
            timeout=timeout,
        ),
    }


__all__ = [
    "ArXivAdapter",
    "BaseAPIClient",
    "CrossRefAdapter",
    "ProviderAdapter",
    "PubMedAdapter",
    "SemanticScholarAdapter",
    "build_adapters",
]
