"""
Application DI Container (dependency-injector).

Centralizes service creation and lifecycle management.

Usage::

    from token_search.container import ApplicationContainer

    container = ApplicationContainer()
    service = container.search_service()

    # In tests, override any provider:
    container.settings.override(providers.Object(SearchSettings(max_results=5)))
    container.registry.override(providers.Object(AdapterRegistry([fake_adapter])))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from token_search.adapters.registry import build_registry
from token_search.application.search.fanout import FanOutCoordinator
from token_search.application.search.service import TokenSearchService
from token_search.config import SearchSettings
from token_search.unified.result_aggregator import RankingConfig, ResultAggregator

logger = logging.getLogger(__name__)


def _create_coordinator(registry, settings: SearchSettings) -> FanOutCoordinator:
    return FanOutCoordinator(
        registry,
        deadline=settings.global_deadline,
        grace=settings.grace_margin,
    )


def _create_aggregator(settings: SearchSettings) -> ResultAggregator:
    return ResultAggregator(RankingConfig(max_results=settings.max_results))


def _create_search_service(
    coordinator: FanOutCoordinator,
    aggregator: ResultAggregator,
    settings: SearchSettings,
) -> TokenSearchService:
    return TokenSearchService(
        coordinator,
        aggregator,
        default_chains=settings.default_chains,
        max_results=settings.max_results,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the token search service.

    Manages creation of all core services:
    - ``settings``: SearchSettings loaded from the environment
    - ``registry``: enabled adapters in precedence order
    - ``coordinator``: concurrent adapter fan-out
    - ``aggregator``: merge, dedup and ranking
    - ``search_service``: the full search pipeline
    """

    settings = providers.Singleton(SearchSettings.from_env)

    registry = providers.Singleton(build_registry, settings=settings)

    coordinator = providers.Singleton(
        _create_coordinator,
        registry=registry,
        settings=settings,
    )

    aggregator = providers.Singleton(_create_aggregator, settings=settings)

    search_service = providers.Singleton(
        _create_search_service,
        coordinator=coordinator,
        aggregator=aggregator,
        settings=settings,
    )


__all__ = ["ApplicationContainer"]
