"""
Search use cases.

- credibility: heuristic trust score per paper
- deduplicator: merge records of the same work across providers
- ranking: stable multi-key sort
- aggregator: concurrent fan-out / join over provider adapters
- fulltext: full-text availability lookup
- service: the search entry point
"""

from .aggregator import SearchAggregator, per_provider_limit
from .credibility import CredibilityScorer, clamp_score
from .deduplicator import Deduplicator, identity_key, normalize_title
from .fulltext import full_text_availability, full_text_sources
from .ranking import Ranker
from .service import CONNECTION_PROBES, AcademicSearchService

__all__ = [
    "AcademicSearchService",
    "CONNECTION_PROBES",
    "CredibilityScorer",
    "Deduplicator",
    "Ranker",
    "SearchAggregator",
    "clamp_score",
    "full_text_availability",
    "full_text_sources",
    "identity_key",
    "normalize_title",
    "per_provider_limit",
]
