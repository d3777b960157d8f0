"""
Application Layer - Use Cases and Search Orchestration

Contains:
- search: federated search (aggregation, deduplication, ranking, service)
"""

from .search import (
    AcademicSearchService,
    CredibilityScorer,
    Deduplicator,
    Ranker,
    SearchAggregator,
)

__all__ = [
    "AcademicSearchService",
    "CredibilityScorer",
    "Deduplicator",
    "Ranker",
    "SearchAggregator",
]
