"""
Configuration for Academic Search.

Settings come from environment variables and are fed into the DI
container's ``providers.Configuration`` via ``as_dict()``.

Environment Variables:
    NCBI_API_KEY: Optional NCBI key (raises PubMed limit from 3 to 10 req/s)
    NCBI_EMAIL: Contact email sent to NCBI E-utilities
    CROSSREF_EMAIL: Contact email for the CrossRef polite pool
    SEMANTIC_SCHOLAR_API_KEY: Optional Semantic Scholar key
    ACADEMIC_SEARCH_REQUEST_TIMEOUT: Per HTTP request timeout in seconds (default: 10)
    ACADEMIC_SEARCH_PROVIDER_TIMEOUT: Per provider search timeout in seconds (default: 15)
    ACADEMIC_SEARCH_CACHE_TTL: Search cache TTL in seconds (default: 300)
    ACADEMIC_SEARCH_CACHE_SIZE: Maximum cached searches (default: 256)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from academic_search.core.async_utils import RateLimit
from academic_search.core.exceptions import ConfigurationError
from academic_search.domain.entities import Provider

DEFAULT_NCBI_EMAIL = "academic-search@example.com"
DEFAULT_CROSSREF_EMAIL = "research@example.com"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_PROVIDER_TIMEOUT = 15.0
DEFAULT_CACHE_TTL = 5 * 60.0
DEFAULT_CACHE_SIZE = 256

# Provider-fixed request budgets
DEFAULT_RATE_LIMITS: dict[Provider, RateLimit] = {
    Provider.PUBMED: RateLimit(max_requests=3, window=1.0),
    Provider.ARXIV: RateLimit(max_requests=1, window=3.0),
    Provider.CROSSREF: RateLimit(max_requests=50, window=1.0),
    Provider.SEMANTIC_SCHOLAR: RateLimit(max_requests=100, window=300.0),
}
PUBMED_API_KEY_RATE_LIMIT = RateLimit(max_requests=10, window=1.0)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the search service."""
    ncbi_email: str = DEFAULT_NCBI_EMAIL
    ncbi_api_key: str | None = None
    crossref_email: str = DEFAULT_CROSSREF_EMAIL
    semantic_scholar_api_key: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    cache_ttl: float = DEFAULT_CACHE_TTL
    cache_size: int = DEFAULT_CACHE_SIZE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            ncbi_email=_text(env, "NCBI_EMAIL") or DEFAULT_NCBI_EMAIL,
            ncbi_api_key=_text(env, "NCBI_API_KEY"),
            crossref_email=_text(env, "CROSSREF_EMAIL") or DEFAULT_CROSSREF_EMAIL,
            semantic_scholar_api_key=_text(env, "SEMANTIC_SCHOLAR_API_KEY"),
            request_timeout=_number(env, "ACADEMIC_SEARCH_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            provider_timeout=_number(env, "ACADEMIC_SEARCH_PROVIDER_TIMEOUT", DEFAULT_PROVIDER_TIMEOUT),
            cache_ttl=_number(env, "ACADEMIC_SEARCH_CACHE_TTL", DEFAULT_CACHE_TTL),
            cache_size=int(_number(env, "ACADEMIC_SEARCH_CACHE_SIZE", DEFAULT_CACHE_SIZE)),
        )

    def rate_limits(self) -> dict[str, RateLimit]:
        """Rate limits keyed by provider name."""
        limits = {provider.value: limit for provider, limit in DEFAULT_RATE_LIMITS.items()}
        if self.ncbi_api_key:
            limits[Provider.PUBMED.value] = PUBMED_API_KEY_RATE_LIMIT
        return limits

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _text(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name, "").strip()
    return value or None


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value
