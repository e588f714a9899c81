"""Tests for ResultAggregator merging and ranking."""

import pytest

from conftest import ETHGLOBAL_ETH, USDC_ETH, USDC_POLYGON, WETH_ETH, make_candidate

from token_search.unified.query_analyzer import normalize_query
from token_search.unified.result_aggregator import (
    AggregationStats,
    RankingConfig,
    ResultAggregator,
)


@pytest.fixture
def aggregator():
    return ResultAggregator()


# ============================================================
# Aggregation
# ============================================================


class TestAggregate:
    def test_same_asset_merged(self, aggregator):
        token_list = [
            make_candidate("USDC", USDC_ETH, name="USD Coin", source="token_list", decimals=6, logo_url="https://lists/usdc.png"),
        ]
        dex = [
            make_candidate(
                "USDC", USDC_ETH.lower(), name="USD Coin", source="dexscreener",
                liquidity_usd=50_000_000.0, logo_url="https://dex/usdc.png",
            ),
        ]

        tokens, stats = aggregator.aggregate([token_list, dex])

        assert len(tokens) == 1
        token = tokens[0]
        assert token.logo_url == "https://lists/usdc.png"
        assert token.liquidity_usd == 50_000_000.0
        assert token.decimals == 6
        assert token.sources == ["token_list", "dexscreener"]
        assert stats.duplicates_merged == 1

    def test_precedence_deterministic(self, aggregator):
        first = [make_candidate("USDC", USDC_ETH, source="a", logo_url="https://a.png")]
        second = [make_candidate("USDC", USDC_ETH, source="b", logo_url="https://b.png")]

        for _ in range(5):
            tokens, _ = aggregator.aggregate([first, second])
            assert tokens[0].logo_url == "https://a.png"

        tokens, _ = aggregator.aggregate([second, first])
        assert tokens[0].logo_url == "https://b.png"

    def test_same_address_on_two_chains_not_merged(self, aggregator):
        candidates = [
            make_candidate("USDC", USDC_ETH, chain_id="ethereum"),
            make_candidate("USDC", USDC_ETH, chain_id="polygon"),
        ]
        tokens, stats = aggregator.aggregate([candidates])

        assert {t.chain_id for t in tokens} == {"ethereum", "polygon"}
        assert stats.duplicates_merged == 0

    def test_filters_unmatched(self, aggregator):
        candidates = [
            make_candidate("WETH", WETH_ETH, name="Wrapped Ether"),
            make_candidate("USDC", USDC_ETH, name="USD Coin"),
        ]
        tokens, stats = aggregator.aggregate([candidates], normalize_query("eth"))

        assert [t.symbol for t in tokens] == ["WETH"]
        assert stats.filtered_out == 1
        assert stats.unique_tokens == 1

    def test_no_filtering_when_disabled(self):
        aggregator = ResultAggregator(RankingConfig(filter_unmatched=False))
        candidates = [make_candidate("USDC", USDC_ETH)]
        tokens, _ = aggregator.aggregate([candidates], normalize_query("eth"))
        assert len(tokens) == 1

    def test_stats(self, aggregator):
        lists = [
            [make_candidate("USDC", USDC_ETH, source="token_list")],
            [
                make_candidate("USDC", USDC_ETH, source="dexscreener"),
                make_candidate("USDC", USDC_POLYGON, chain_id="polygon", source="dexscreener"),
            ],
        ]
        _, stats = aggregator.aggregate(lists)

        assert stats.to_dict() == {
            "total_input": 3,
            "unique_tokens": 2,
            "duplicates_merged": 1,
            "filtered_out": 0,
            "by_source": {"token_list": 1, "dexscreener": 2},
        }

    def test_empty(self, aggregator):
        tokens, stats = aggregator.aggregate([[], []])
        assert tokens == []
        assert stats == AggregationStats()


# ============================================================
# Ranking
# ============================================================


class TestRank:
    def test_eth_ranking(self, aggregator):
        candidates = [
            make_candidate("EGLB", ETHGLOBAL_ETH, name="ETHGlobal", liquidity_usd=1_000.0),
            make_candidate("WETH", WETH_ETH, name="Wrapped Ether", liquidity_usd=900_000_000.0),
        ]
        query = normalize_query("ETH")
        ranked, _ = aggregator.aggregate_and_rank([candidates], query)

        assert [t.symbol for t in ranked] == ["WETH", "EGLB"]
        assert all(t.match_tier == "contains" for t in ranked)

    def test_symbol_prefix_outranks_deeper_contains(self, aggregator):
        # Tier is decided by the symbol alone; liquidity only orders within a tier
        candidates = [
            make_candidate("WETH", WETH_ETH, name="Wrapped Ether", liquidity_usd=900_000_000.0),
            make_candidate("ETHG", ETHGLOBAL_ETH, name="ETHGlobal", liquidity_usd=1_000.0),
        ]
        ranked, _ = aggregator.aggregate_and_rank([candidates], normalize_query("ETH"))

        assert [t.symbol for t in ranked] == ["ETHG", "WETH"]
        assert [t.match_tier for t in ranked] == ["prefix", "contains"]

    def test_tier_before_liquidity(self, aggregator):
        candidates = [
            make_candidate("WETH", WETH_ETH, liquidity_usd=900_000_000.0),
            make_candidate("ETHFI", "0x" + "2" * 40, liquidity_usd=5.0),
            make_candidate("ETH", "0x" + "3" * 40),
        ]
        tokens, _ = aggregator.aggregate([candidates], normalize_query("eth"))
        ranked = aggregator.rank(tokens, normalize_query("eth"))

        assert [t.symbol for t in ranked] == ["ETH", "ETHFI", "WETH"]
        assert [t.match_tier for t in ranked] == ["exact", "prefix", "contains"]

    def test_missing_liquidity_last(self, aggregator):
        candidates = [
            make_candidate("USDC", USDC_ETH),
            make_candidate("USDC", USDC_POLYGON, chain_id="polygon", liquidity_usd=0.0),
        ]
        tokens, _ = aggregator.aggregate([candidates])
        ranked = aggregator.rank(tokens, normalize_query("usdc"))
        assert [t.chain_id for t in ranked] == ["polygon", "ethereum"]

    def test_tie_break_by_chain_then_address(self, aggregator):
        candidates = [
            make_candidate("USDC", USDC_POLYGON, chain_id="polygon", liquidity_usd=1.0),
            make_candidate("USDC", "0x" + "b" * 40, liquidity_usd=1.0),
            make_candidate("USDC", "0x" + "a" * 40, liquidity_usd=1.0),
        ]
        tokens, _ = aggregator.aggregate([candidates])
        ranked = aggregator.rank(tokens, normalize_query("usdc"))

        assert [(t.chain_id, t.address) for t in ranked] == [
            ("ethereum", "0x" + "a" * 40),
            ("ethereum", "0x" + "b" * 40),
            ("polygon", USDC_POLYGON.lower()),
        ]

    def test_budget(self):
        aggregator = ResultAggregator(RankingConfig(max_results=2))
        candidates = [make_candidate("USDC", f"0x{i:040x}", liquidity_usd=float(i)) for i in range(1, 6)]
        tokens, _ = aggregator.aggregate([candidates])

        assert len(aggregator.rank(tokens, normalize_query("usdc"))) == 2
        assert len(aggregator.rank(tokens, normalize_query("usdc"), max_results=4)) == 4

    def test_rank_does_not_mutate_input_order(self, aggregator):
        candidates = [
            make_candidate("USDC", "0x" + "b" * 40, liquidity_usd=1.0),
            make_candidate("USDC", "0x" + "a" * 40, liquidity_usd=2.0),
        ]
        tokens, _ = aggregator.aggregate([candidates])
        before = [t.address for t in tokens]
        aggregator.rank(tokens, normalize_query("usdc"))
        assert [t.address for t in tokens] == before
