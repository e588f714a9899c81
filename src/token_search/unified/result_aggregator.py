"""
ResultAggregator - Multi-Source Token Merging and Ranking

This module turns per-adapter candidate lists into one ranked result list:
1. Deduplication by (chain_id, normalized address)
2. Field merging in adapter precedence order (earlier adapters win)
3. Query filtering and tiered ranking (match tier, then liquidity)

Architecture Decision:
    ResultAggregator operates on CandidateToken / MergedToken objects.
    It does NOT make API calls - purely processes existing results, so it
    is deterministic for a given input.

Example:
    >>> from token_search.unified import ResultAggregator, normalize_query
    >>>
    >>> aggregator = ResultAggregator()
    >>> query = normalize_query("usdc")
    >>> tokens, stats = aggregator.aggregate([
    ...     token_list_candidates,
    ...     geckoterminal_candidates,
    ...     dexscreener_candidates,
    ... ], query)
    >>> ranked = aggregator.rank(tokens, query)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from token_search.models.token import CandidateToken, MergedToken
from token_search.unified.query_analyzer import MatchTier, SearchQuery, classify_match

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class RankingConfig:
    """
    Configuration for result ranking.

    max_results: Result budget after sorting
    filter_unmatched: Drop merged tokens that no longer match the query
        (an upstream may return loosely related rows, e.g. pair partners)
    """

    max_results: int = 20
    filter_unmatched: bool = True


@dataclass
class AggregationStats:
    """Statistics from aggregation process."""

    total_input: int = 0
    unique_tokens: int = 0
    duplicates_merged: int = 0
    filtered_out: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_input": self.total_input,
            "unique_tokens": self.unique_tokens,
            "duplicates_merged": self.duplicates_merged,
            "filtered_out": self.filtered_out,
            "by_source": self.by_source,
        }


# =============================================================================
# Aggregator
# =============================================================================


class ResultAggregator:
    """
    Aggregates and ranks results from multiple adapters.

    Responsibilities:
    1. Group candidates describing the same on-chain asset
    2. Merge their fields, higher-precedence adapters first
    3. Filter to tokens matching the query
    4. Sort by match tier and liquidity, then truncate

    Usage:
        aggregator = ResultAggregator(RankingConfig(max_results=10))
        tokens, stats = aggregator.aggregate(candidate_lists, query)
        ranked = aggregator.rank(tokens, query)
    """

    def __init__(self, config: RankingConfig | None = None):
        """
        Initialize ResultAggregator.

        Args:
            config: Default ranking configuration (budget can be overridden per call)
        """
        self._config = config or RankingConfig()

    @property
    def config(self) -> RankingConfig:
        return self._config

    def aggregate(
        self,
        candidate_lists: Sequence[Sequence[CandidateToken]],
        query: SearchQuery | None = None,
    ) -> tuple[list[MergedToken], AggregationStats]:
        """
        Merge candidates from several adapters.

        Args:
            candidate_lists: One list per adapter, in precedence order
            query: When given (and filtering is enabled), drop non-matching tokens

        Returns:
            Tuple of (merged tokens in first-seen order, aggregation statistics)
        """
        stats = AggregationStats()
        merged: dict[tuple[str, str], MergedToken] = {}

        for candidates in candidate_lists:
            for candidate in candidates:
                stats.total_input += 1
                stats.by_source[candidate.source] = stats.by_source.get(candidate.source, 0) + 1

                existing = merged.get(candidate.key)
                if existing is None:
                    merged[candidate.key] = MergedToken.from_candidate(candidate)
                else:
                    existing.merge_from(candidate)
                    stats.duplicates_merged += 1

        tokens = list(merged.values())
        if query is not None and self._config.filter_unmatched:
            kept = [t for t in tokens if classify_match(query, t.symbol, t.name, t.address) is not None]
            stats.filtered_out = len(tokens) - len(kept)
            tokens = kept

        stats.unique_tokens = len(tokens)
        logger.debug(
            f"Aggregated {stats.total_input} candidates into {stats.unique_tokens} tokens "
            f"({stats.duplicates_merged} merged, {stats.filtered_out} filtered)"
        )
        return tokens, stats

    def rank(
        self,
        tokens: list[MergedToken],
        query: SearchQuery,
        max_results: int | None = None,
    ) -> list[MergedToken]:
        """
        Sort tokens by relevance and truncate to the result budget.

        Order:
        1. Match tier (exact < prefix < contains)
        2. Liquidity descending, tokens without liquidity last
        3. (chain_id, address) ascending, for a stable total order

        Args:
            tokens: Merged tokens to rank
            query: Normalized query
            max_results: Override the configured budget

        Returns:
            New sorted list; each token's ``match_tier`` is set
        """
        budget = max_results if max_results is not None else self._config.max_results

        def sort_key(token: MergedToken) -> tuple[int, int, float, str, str]:
            tier = classify_match(query, token.symbol, token.name, token.address) or MatchTier.CONTAINS
            token.match_tier = tier.label
            liquidity = token.liquidity_usd
            return (
                tier.value,
                0 if liquidity is not None else 1,
                -(liquidity or 0.0),
                token.chain_id,
                token.address,
            )

        ranked = sorted(tokens, key=sort_key)
        return ranked[:budget] if budget else ranked

    def aggregate_and_rank(
        self,
        candidate_lists: Sequence[Sequence[CandidateToken]],
        query: SearchQuery,
        max_results: int | None = None,
    ) -> tuple[list[MergedToken], AggregationStats]:
        """Convenience method: aggregate and rank in one call."""
        tokens, stats = self.aggregate(candidate_lists, query)
        return self.rank(tokens, query, max_results), stats
