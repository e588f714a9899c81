"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio

import pytest

from token_search.adapters.base import TokenAdapter
from token_search.adapters.registry import AdapterRegistry
from token_search.models.chains import CHAINS
from token_search.models.token import CandidateToken
from token_search.unified.query_analyzer import SearchQuery

# ============================================================
# Fake adapters
# ============================================================


class FakeAdapter(TokenAdapter):
    """
    In-memory adapter.

    Returns its configured candidates for the requested chain, optionally
    after a delay or by raising an error. Records every call.
    """

    def __init__(
        self,
        name: str,
        candidates: list[CandidateToken] | None = None,
        chains=tuple(CHAINS),
        timeout: float = 1.0,
        delay: float = 0.0,
        error: BaseException | None = None,
    ):
        super().__init__(chains=chains, timeout=timeout)
        self.name = name
        self.candidates = list(candidates or [])
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def _fetch(self, query: SearchQuery, chain_id: str) -> list[CandidateToken]:
        self.calls.append((query.text, chain_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [c for c in self.candidates if c.chain_id == chain_id]

    async def close(self) -> None:
        self.closed = True


def make_candidate(
    symbol: str,
    address: str,
    *,
    chain_id: str = "ethereum",
    name: str | None = None,
    source: str = "test",
    **extra,
) -> CandidateToken:
    return CandidateToken(
        chain_id=chain_id,
        address=address,
        symbol=symbol,
        name=name or symbol,
        source=source,
        **extra,
    )


# ============================================================
# Well-known addresses
# ============================================================

USDC_ETH = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
USDC_POLYGON = "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359"
WETH_ETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
ETHGLOBAL_ETH = "0x1111111111111111111111111111111111111111"


# ============================================================
# Fixtures
# ============================================================


@pytest.fixture
def candidate():
    """Factory for CandidateToken with sensible defaults."""
    return make_candidate


@pytest.fixture
def fake_adapter():
    """Factory for FakeAdapter."""
    return FakeAdapter


@pytest.fixture
def usdc_query() -> SearchQuery:
    return SearchQuery(text="usdc", raw="USDC")


@pytest.fixture
def eth_query() -> SearchQuery:
    return SearchQuery(text="eth", raw="eth")


@pytest.fixture
def token_list_adapter():
    """Token-list style adapter: metadata and logos, no liquidity."""
    return FakeAdapter(
        "token_list",
        [
            make_candidate("USDC", USDC_ETH, name="USD Coin", source="token_list", decimals=6, logo_url="https://lists/usdc.png"),
            make_candidate("USDC", USDC_POLYGON, chain_id="polygon", name="USD Coin", source="token_list", decimals=6),
            make_candidate("WETH", WETH_ETH, name="Wrapped Ether", source="token_list", decimals=18),
        ],
    )


@pytest.fixture
def dex_adapter():
    """DEX style adapter: liquidity and prices, its own logos."""
    return FakeAdapter(
        "dexscreener",
        [
            make_candidate(
                "USDC", USDC_ETH.lower(), name="USD Coin", source="dexscreener",
                liquidity_usd=50_000_000.0, price_usd=1.0, logo_url="https://dex/usdc.png",
            ),
            make_candidate(
                "USDC", USDC_POLYGON, chain_id="polygon", name="USD Coin", source="dexscreener",
                liquidity_usd=8_000_000.0, price_usd=1.0,
            ),
            make_candidate(
                "WETH", WETH_ETH, name="Wrapped Ether", source="dexscreener",
                liquidity_usd=900_000_000.0, price_usd=3000.0,
            ),
            make_candidate(
                "EGLB", ETHGLOBAL_ETH, name="ETHGlobal", source="dexscreener",
                liquidity_usd=1_000.0,
            ),
        ],
    )


@pytest.fixture
def registry(token_list_adapter, dex_adapter) -> AdapterRegistry:
    return AdapterRegistry([token_list_adapter, dex_adapter])
