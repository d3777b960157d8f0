"""
Infrastructure Layer - External Integrations

Contains:
- sources: Provider adapters (PubMed, arXiv, CrossRef, Semantic Scholar)
- cache: Search result cache
"""
