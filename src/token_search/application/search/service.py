"""
TokenSearchService - the search pipeline.

raw query + raw chains
    -> normalize_query / resolve_chains
    -> FanOutCoordinator.search
    -> ResultAggregator.aggregate (merge, dedup, filter)
    -> ResultAggregator.rank (tier, liquidity, budget)
    -> SearchOutcome
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from token_search.application.search.fanout import AdapterReport, FanOutCoordinator, all_consulted_failed
from token_search.models.chains import resolve_chains
from token_search.models.token import MergedToken
from token_search.unified.query_analyzer import SearchQuery, normalize_query
from token_search.unified.result_aggregator import AggregationStats, ResultAggregator

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    """Ranked tokens plus everything the caller needs to interpret them."""

    query: str
    chains: tuple[str, ...]
    tokens: list[MergedToken] = field(default_factory=list)
    reports: dict[str, AdapterReport] = field(default_factory=dict)
    stats: AggregationStats = field(default_factory=AggregationStats)

    @property
    def all_failed(self) -> bool:
        """Every consulted adapter failed (as opposed to "no matches")."""
        return all_consulted_failed(self.reports)

    def to_dict(self) -> dict[str, Any]:
        """Response body of ``GET /search``."""
        return {
            "success": True,
            "data": [token.to_dict() for token in self.tokens],
            "query": self.query,
            "chains": list(self.chains),
            "resultsCount": len(self.tokens),
            "sources": {name: report.to_dict() for name, report in self.reports.items()},
            "allSourcesFailed": self.all_failed,
        }


class TokenSearchService:
    """Runs one search end to end."""

    def __init__(
        self,
        coordinator: FanOutCoordinator,
        aggregator: ResultAggregator | None = None,
        default_chains: Iterable[str] = ("ethereum", "bsc", "polygon"),
        max_results: int = 20,
    ) -> None:
        self._coordinator = coordinator
        self._aggregator = aggregator or ResultAggregator()
        self._default_chains = tuple(default_chains)
        self._max_results = max_results

    @property
    def default_chains(self) -> tuple[str, ...]:
        return self._default_chains

    def resolve_chains(self, raw_chains: Iterable[str] | None) -> tuple[str, ...]:
        """
        Requested chains, or the defaults when none were given.

        Unknown identifiers and chains no registered adapter serves are
        dropped, so the result may be empty.
        """
        chains = self._default_chains if raw_chains is None else resolve_chains(raw_chains)
        registry = self._coordinator.registry
        return tuple(chain for chain in chains if registry.adapters_for(chain))

    async def search(self, raw_query: str | None, raw_chains: Iterable[str] | None = None) -> SearchOutcome:
        """
        Search tokens.

        Args:
            raw_query: User query; validated here
            raw_chains: Chain ids or aliases; None means the default set

        Returns:
            SearchOutcome (possibly empty)

        Raises:
            InvalidQueryError: Query missing or too short; no adapter is called
        """
        query = normalize_query(raw_query)
        chains = self.resolve_chains(raw_chains)
        return await self.run(query, chains)

    async def run(self, query: SearchQuery, chains: tuple[str, ...]) -> SearchOutcome:
        """Run the pipeline for an already validated query and resolved chains."""
        outcome = SearchOutcome(query=query.text, chains=chains)
        if not chains:
            logger.info(f"Search '{query.text}': no recognized chains")
            return outcome

        fanout = await self._coordinator.search(query, chains)
        outcome.tokens, outcome.stats = self._aggregator.aggregate_and_rank(
            fanout.candidate_lists(), query, self._max_results
        )
        outcome.reports = fanout.reports

        if outcome.all_failed:
            logger.warning(f"Search '{query.text}': all sources failed")
        else:
            logger.info(
                f"Search '{query.text}' on {list(chains)}: {len(outcome.tokens)} results, "
                f"aggregation {outcome.stats.to_dict()}"
            )
        return outcome
