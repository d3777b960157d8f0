"""
Application DI Container (dependency-injector).

Builds exactly one rate limiter registry, one adapter per provider, one
aggregator, one search cache and one service per container.

Usage::

    from academic_search.config import Settings
    from academic_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().as_dict())

    service = container.service()

    # In tests: override any provider:
    container.adapters.override(providers.Object({Provider.ARXIV: fake_adapter}))
"""

from __future__ import annotations

import logging
from typing import Any

from dependency_injector import containers, providers

from academic_search.config import Settings

logger = logging.getLogger(__name__)


def _create_settings(**values: Any) -> Settings:
    return Settings(**values)


def _create_rate_limiter(settings: Settings) -> object:
    """Lazy factory for ProviderRateLimiter."""
    from academic_search.core.async_utils import ProviderRateLimiter

    return ProviderRateLimiter(settings.rate_limits())


def _create_adapters(settings: Settings, rate_limiter: Any) -> object:
    """Lazy factory for the provider adapters."""
    from academic_search.infrastructure.sources import build_adapters

    return build_adapters(settings, rate_limiter)


def _create_aggregator(adapters: Any, timeout: float) -> object:
    """Lazy factory for SearchAggregator."""
    from academic_search.application.search import SearchAggregator

    return SearchAggregator(adapters, timeout=timeout)


def _create_search_cache(aggregator: Any, max_size: int, ttl: float) -> object:
    """Lazy factory for SearchCache."""
    from academic_search.infrastructure.cache import SearchCache

    return SearchCache(aggregator, max_size=int(max_size), ttl=ttl)


def _create_service(cache: Any, aggregator: Any, adapters: Any, rate_limiter: Any) -> object:
    """Lazy factory for AcademicSearchService."""
    from academic_search.application.search import AcademicSearchService

    return AcademicSearchService(cache, aggregator, adapters, rate_limiter)


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for Academic Search.

    Manages creation and lifecycle of all core services:
    - ``rate_limiter``: per-provider sliding-window limiter registry
    - ``adapters``: PubMed / arXiv / CrossRef / Semantic Scholar adapters
    - ``aggregator``: concurrent fan-out / join
    - ``search_cache``: TTL memoization around the aggregator
    - ``service``: the search entry point
    """

    config = providers.Configuration()

    settings = providers.Singleton(
        _create_settings,
        ncbi_email=config.ncbi_email,
        ncbi_api_key=config.ncbi_api_key,
        crossref_email=config.crossref_email,
        semantic_scholar_api_key=config.semantic_scholar_api_key,
        request_timeout=config.request_timeout,
        provider_timeout=config.provider_timeout,
        cache_ttl=config.cache_ttl,
        cache_size=config.cache_size,
    )

    rate_limiter = providers.Singleton(_create_rate_limiter, settings=settings)

    adapters = providers.Singleton(
        _create_adapters,
        settings=settings,
        rate_limiter=rate_limiter,
    )

    aggregator = providers.Singleton(
        _create_aggregator,
        adapters=adapters,
        timeout=config.provider_timeout,
    )

    search_cache = providers.Singleton(
        _create_search_cache,
        aggregator=aggregator,
        max_size=config.cache_size,
        ttl=config.cache_ttl,
    )

    service = providers.Singleton(
        _create_service,
        cache=search_cache,
        aggregator=aggregator,
        adapters=adapters,
        rate_limiter=rate_limiter,
    )


def create_container(settings: Settings | None = None) -> ApplicationContainer:
    """Create a container configured from ``settings`` (default: environment)."""
    settings = settings or Settings.from_env()
    container = ApplicationContainer()
    container.config.from_dict(settings.as_dict())
    logger.info(f"Academic search configured for providers: {', '.join(settings.rate_limits())}")
    return container


def create_service(settings: Settings | None = None) -> Any:
    """Shortcut: build a container and return its AcademicSearchService."""
    return create_container(settings).service()


__all__ = ["ApplicationContainer", "create_container", "create_service"]
