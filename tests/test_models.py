"""Tests for token and chain models."""

import dataclasses

import pytest

from conftest import USDC_ETH, make_candidate

from token_search.models import (
    CHAINS,
    CandidateToken,
    MergedToken,
    canonical_chain,
    is_evm_address,
    normalize_address,
    parse_chain_param,
    resolve_chains,
    to_float,
)

# ============================================================
# Address / number helpers
# ============================================================


class TestHelpers:
    def test_normalize_address(self):
        assert normalize_address(f"  {USDC_ETH} ") == USDC_ETH.lower()
        assert normalize_address("0XABC") == "0xabc"
        # Non-EVM formats keep their case
        assert normalize_address(" So11111111111111111111111111111111111111112 ") == (
            "So11111111111111111111111111111111111111112"
        )

    def test_is_evm_address(self):
        assert is_evm_address(USDC_ETH)
        assert not is_evm_address("0x123")
        assert not is_evm_address("usdc")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1.5", 1.5), (2, 2.0), (None, None), ("", None), ("abc", None), (float("nan"), None)],
    )
    def test_to_float(self, value, expected):
        assert to_float(value) == expected


# ============================================================
# CandidateToken / MergedToken
# ============================================================


class TestCandidateToken:
    def test_normalizes_identity(self):
        token = CandidateToken(chain_id=" Ethereum ", address=USDC_ETH, symbol="USDC", name="USD Coin", source="x")
        assert token.key == ("ethereum", USDC_ETH.lower())

    def test_frozen(self):
        token = make_candidate("USDC", USDC_ETH)
        with pytest.raises(dataclasses.FrozenInstanceError):
            token.symbol = "X"

    def test_with_updates(self):
        token = make_candidate("USDC", USDC_ETH)
        updated = token.with_updates(liquidity_usd=5.0)
        assert updated.liquidity_usd == 5.0
        assert token.liquidity_usd is None


class TestMergedToken:
    def test_merge_fills_missing_only(self):
        merged = MergedToken.from_candidate(
            make_candidate("USDC", USDC_ETH, source="token_list", decimals=6, logo_url="https://a.png")
        )
        merged.merge_from(
            make_candidate(
                "usdc.e", USDC_ETH, source="dexscreener", decimals=18,
                logo_url="https://b.png", liquidity_usd=10.0,
            )
        )

        assert merged.symbol == "USDC"
        assert merged.decimals == 6
        assert merged.logo_url == "https://a.png"
        assert merged.liquidity_usd == 10.0
        assert merged.sources == ["token_list", "dexscreener"]

    def test_merge_treats_empty_string_as_missing(self):
        merged = MergedToken.from_candidate(make_candidate("USDC", USDC_ETH, name="", source="a"))
        merged.name = ""
        merged.merge_from(make_candidate("USDC", USDC_ETH, name="USD Coin", source="b"))
        assert merged.name == "USD Coin"

    def test_merge_rejects_other_asset(self):
        merged = MergedToken.from_candidate(make_candidate("USDC", USDC_ETH))
        with pytest.raises(ValueError):
            merged.merge_from(make_candidate("USDC", USDC_ETH, chain_id="polygon"))

    def test_source_listed_once(self):
        merged = MergedToken.from_candidate(make_candidate("USDC", USDC_ETH, source="a"))
        merged.merge_from(make_candidate("USDC", USDC_ETH, source="a"))
        assert merged.sources == ["a"]

    def test_to_dict_keys(self):
        merged = MergedToken.from_candidate(make_candidate("USDC", USDC_ETH, dex_id="uniswap"))
        data = merged.to_dict()
        assert data["chainId"] == "ethereum"
        assert data["address"] == USDC_ETH.lower()
        assert data["dex"] == "uniswap"
        assert set(data) >= {"logoUrl", "liquidityUsd", "priceUsd", "sources", "matchTier"}


# ============================================================
# Chains
# ============================================================


class TestChains:
    def test_aliases(self):
        assert canonical_chain("ETH") == "ethereum"
        assert canonical_chain("56") == "bsc"
        assert canonical_chain("matic") == "polygon"
        assert canonical_chain("solana") is None

    def test_resolve_drops_unknown_and_duplicates(self):
        assert resolve_chains(["eth", "solana", "ethereum", "bnb"]) == ("ethereum", "bsc")

    def test_resolve_unknown_only(self):
        assert resolve_chains(["solana", "tron"]) == ()

    def test_parse_chain_param(self):
        assert parse_chain_param(None) is None
        assert parse_chain_param(" , ") is None
        assert parse_chain_param("ethereum, base,") == ["ethereum", "base"]

    def test_geckoterminal_networks(self):
        assert CHAINS["polygon"].geckoterminal_network == "polygon_pos"
        assert CHAINS["ethereum"].geckoterminal_network == "eth"
