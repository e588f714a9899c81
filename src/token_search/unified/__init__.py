"""
Unified search processing: query analysis, merging and ranking.

Pure, synchronous code shared by the adapters and the search pipeline.
"""

from .query_analyzer import (
    MIN_QUERY_LENGTH,
    MatchTier,
    SearchQuery,
    classify_match,
    matches,
    normalize_query,
)
from .result_aggregator import AggregationStats, RankingConfig, ResultAggregator

__all__ = [
    "MIN_QUERY_LENGTH",
    "AggregationStats",
    "MatchTier",
    "RankingConfig",
    "ResultAggregator",
    "SearchQuery",
    "classify_match",
    "matches",
    "normalize_query",
]
