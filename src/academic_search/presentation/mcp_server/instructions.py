"""
MCP Server Instructions - Usage guide for AI agents.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
Academic Search MCP Server - federated literature search for AI agents

Providers: PubMed (biomedical), arXiv (preprints), CrossRef (DOI registry),
Semantic Scholar (citation graph). All are queried concurrently.

## Quick search
search_academic_sources(query="remimazolam sedation", max_results=10)

## Narrow the search
- providers="pubmed,crossref" to pick a subset
- year_from=2020, year_to=2024 for a publication window
- source_type="preprint" | "journal" | "conference"
- sort_by="year" | "citations" | "credibility" (default: relevance)

## Reading the response
- results: merged papers, duplicates (same DOI or title) removed
- credibility_score: 0..1 heuristic (provider prior, citations, recency, venue)
- diagnostics: {provider: "ok" | "failed"}; a failed provider never blocks the others
- errors: why a provider failed (timeout, http, parse)
- from_cache: identical searches within 5 minutes are served from cache

## Next steps
- check_full_text_availability(papers_json=<results array>) for reading links
- academic_search_status() for cache and rate-limit state
- test_provider_connections() when every provider reports "failed"
"""
