"""
Paper - Normalized Search Result Model for Federated Academic Search

Every provider adapter emits ``Paper`` records; nothing provider-native
crosses this boundary.

Architecture Decision:
    We use dataclasses instead of Pydantic for the domain model:
    1. Lightweight - no validation framework in the hot path
    2. Performance - faster instantiation
    3. Simplicity - easy to deep-copy for cache hits

Supported Providers:
    - PubMed (NCBI E-utilities)
    - arXiv (Atom API)
    - CrossRef (DOI metadata)
    - Semantic Scholar (AI-indexed paper graph)

Example:
    >>> query = SearchQuery(query="machine learning", providers=["arxiv"], max_results=5)
    >>> query.providers
    [<Provider.ARXIV: 'arxiv'>]
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TypeVar
from typing import Any

from academic_search.core.exceptions import (
    InvalidParameterError,
    InvalidQueryError,
    ProviderError,
)

_YEAR_PATTERN = re.compile(r"\d{4}")


class Provider(str, Enum):
    """External search providers."""
    PUBMED = "pubmed"
    ARXIV = "arxiv"
    CROSSREF = "crossref"
    SEMANTIC_SCHOLAR = "semanticScholar"

    @classmethod
    def parse(cls, value: Provider | str) -> Provider:
        """Accept enum members, their values, or snake_case aliases."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().replace("_", "").replace("-", "").lower()
            for member in cls:
                if member.value.lower() == key:
                    return member
        raise InvalidParameterError(
            "providers",
            value,
            "one of " + ", ".join(p.value for p in cls),
        )


class SourceType(str, Enum):
    """Kind of publication a paper is."""
    JOURNAL = "journal"
    PREPRINT = "preprint"
    CONFERENCE = "conference"


class SourceTypeFilter(str, Enum):
    """Source type filter for a search (``all`` disables filtering)."""
    JOURNAL = "journal"
    PREPRINT = "preprint"
    CONFERENCE = "conference"
    ALL = "all"


class SortKey(str, Enum):
    """Ordering applied to the merged result set."""
    RELEVANCE = "relevance"
    YEAR = "year"
    CITATIONS = "citations"
    CREDIBILITY = "credibility"


class ProviderStatus(str, Enum):
    """Per-provider outcome reported in search diagnostics."""
    OK = "ok"
    FAILED = "failed"


E = TypeVar("E", bound=Enum)


def _parse_enum(enum_cls: type[E], value: E | str, param_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise InvalidParameterError(
            param_name,
            value,
            "one of " + ", ".join(str(m.value) for m in enum_cls),
        ) from None


@dataclass
class Paper:
    """
    Normalized academic search result.

    Invariants:
    - ``title`` is non-empty
    - ``authors`` is a non-empty ordered list of display names
    - ``0 <= credibility_score <= 1``
    - ``citation_count`` is ``None`` or non-negative

    Adapters drop candidates that would violate the title/author invariant
    before constructing a ``Paper``; constructing one anyway raises ValueError.
    """
    id: str
    title: str
    authors: list[str]
    source: str
    url: str
    source_type: SourceType
    origin_provider: Provider
    credibility_score: float
    peer_reviewed: bool
    year: str | None = None
    abstract: str | None = None
    doi: str | None = None
    citation_count: int | None = None
    categories: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("Paper title must be non-empty")
        if not self.authors or not any(a and a.strip() for a in self.authors):
            raise ValueError("Paper authors must be a non-empty list")
        if not 0.0 <= self.credibility_score <= 1.0:
            raise ValueError(f"credibility_score out of range: {self.credibility_score}")
        if self.citation_count is not None and self.citation_count < 0:
            raise ValueError(f"citation_count must be non-negative: {self.citation_count}")

    @property
    def year_as_int(self) -> int | None:
        """Numeric publication year, or None if missing/unparseable."""
        if not self.year:
            return None
        match = _YEAR_PATTERN.search(str(self.year))
        return int(match.group(0)) if match else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["source_type"] = self.source_type.value
        data["origin_provider"] = self.origin_provider.value
        return data


@dataclass
class SearchQuery:
    """
    A validated search request.

    Construction normalizes string options into enums and raises a
    ``ValidationError`` subclass for anything invalid, so no provider is
    ever contacted with a bad query.
    """
    query: str
    providers: list[Provider] = field(default_factory=lambda: list(Provider))
    max_results: int = 20
    year_from: int | None = None
    year_to: int | None = None
    source_type: SourceTypeFilter = SourceTypeFilter.ALL
    sort_by: SortKey = SortKey.RELEVANCE
    include_abstracts: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.query, str) or not self.query.strip():
            raise InvalidQueryError(self.query if isinstance(self.query, str) else None)

        if isinstance(self.providers, (str, Provider)):
            self.providers = [self.providers]
        providers: list[Provider] = []
        for value in self.providers or []:
            provider = Provider.parse(value)
            if provider not in providers:
                providers.append(provider)
        if not providers:
            raise InvalidParameterError("providers", self.providers, "a non-empty subset of providers")
        self.providers = providers

        if isinstance(self.max_results, bool) or not isinstance(self.max_results, int) or self.max_results < 1:
            raise InvalidParameterError("max_results", self.max_results, "a positive integer")

        for name in ("year_from", "year_to"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise InvalidParameterError(name, value, "an integer year")
        if self.year_from is not None and self.year_to is not None and self.year_from > self.year_to:
            raise InvalidParameterError(
                "year_from", self.year_from, f"a year not after year_to ({self.year_to})"
            )

        self.source_type = _parse_enum(SourceTypeFilter, self.source_type, "source_type")
        self.sort_by = _parse_enum(SortKey, self.sort_by, "sort_by")
        self.include_abstracts = bool(self.include_abstracts)

    @property
    def text(self) -> str:
        return self.query.strip()

    def cache_material(self) -> dict[str, Any]:
        """Canonical form used to build cache keys."""
        return {
            "query": self.query.strip().lower(),
            "providers": sorted(p.value for p in self.providers),
            "max_results": self.max_results,
            "year_from": self.year_from,
            "year_to": self.year_to,
            "source_type": self.source_type.value,
            "sort_by": self.sort_by.value,
            "include_abstracts": self.include_abstracts,
        }


@dataclass
class ProviderResult:
    """Outcome of one provider call: papers on success, an error on failure."""
    provider: Provider
    papers: list[Paper] = field(default_factory=list)
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, provider: Provider, papers: Iterable[Paper]) -> ProviderResult:
        return cls(provider=provider, papers=list(papers))

    @classmethod
    def failure(cls, provider: Provider, error: ProviderError) -> ProviderResult:
        return cls(provider=provider, papers=[], error=error)


@dataclass
class SearchResponse:
    """
    Result of a federated search.

    ``diagnostics`` maps every requested provider to ``ok`` or ``failed``;
    ``errors`` holds serialized ``ProviderError`` details for failed ones.
    """
    results: list[Paper] = field(default_factory=list)
    diagnostics: dict[str, ProviderStatus] = field(default_factory=dict)
    errors: dict[str, dict[str, Any]] = field(default_factory=dict)
    from_cache: bool = False

    @property
    def all_failed(self) -> bool:
        return bool(self.diagnostics) and all(
            status is ProviderStatus.FAILED for status in self.diagnostics.values()
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "results": [paper.to_dict() for paper in self.results],
            "diagnostics": {name: status.value for name, status in self.diagnostics.items()},
            "errors": self.errors,
            "from_cache": self.from_cache,
        }
