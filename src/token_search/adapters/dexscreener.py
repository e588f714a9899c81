"""
DexScreener adapter.

Free-text queries use the chain-agnostic search endpoint: one upstream call
per query, shared by every chain requested in the same window through the
response cache. Address queries use the per-chain token lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from token_search.adapters.base import TokenAdapter, collapse_pools
from token_search.infrastructure.cache import ResponseCache
from token_search.infrastructure.sources import DexScreenerClient
from token_search.models.chains import CHAINS
from token_search.models.token import CandidateToken, normalize_address, to_float
from token_search.unified.query_analyzer import SearchQuery, matches

logger = logging.getLogger(__name__)


class DexScreenerAdapter(TokenAdapter):
    """Adapter over DexScreener pair search."""

    name = "dexscreener"

    def __init__(
        self,
        client: DexScreenerClient | None = None,
        chains: Iterable[str] | None = None,
        timeout: float = 3.0,
        cache_ttl: float = 30.0,
        dex_allowlist: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        super().__init__(
            chains=chains if chains is not None else CHAINS.keys(),
            timeout=timeout,
            dex_allowlist=dex_allowlist,
        )
        self._client = client or DexScreenerClient(timeout=timeout)
        self._cache = ResponseCache(max_size=256, ttl=cache_ttl)

    async def _fetch(self, query: SearchQuery, chain_id: str) -> list[CandidateToken]:
        if query.is_address:
            pairs = await self._cache.get_or_fetch(
                f"token:{chain_id}:{query.text}",
                lambda: self._client.token_pairs(chain_id, query.text),
            )
        else:
            pairs = await self._cache.get_or_fetch(
                f"search:{query.text}",
                lambda: self._client.search_pairs(query.text),
            )

        candidates = []
        for pair in pairs:
            if pair.get("chainId") != chain_id:
                continue
            if not self.allows_dex(chain_id, pair.get("dexId")):
                continue
            candidate = self._to_candidate(pair, chain_id, query)
            if candidate:
                candidates.append(candidate)

        return collapse_pools(candidates)

    def _to_candidate(self, pair: dict[str, Any], chain_id: str, query: SearchQuery) -> CandidateToken | None:
        liquidity = (pair.get("liquidity") or {}).get("usd")
        volume = (pair.get("volume") or {}).get("h24")

        base = pair.get("baseToken") or {}
        if isinstance(base.get("address"), str) and matches(query, base.get("symbol"), base.get("name"), base["address"]):
            return CandidateToken(
                chain_id=chain_id,
                address=normalize_address(base["address"]),
                symbol=base.get("symbol") or "",
                name=base.get("name") or base.get("symbol") or "",
                source=self.name,
                logo_url=(pair.get("info") or {}).get("imageUrl"),
                liquidity_usd=to_float(liquidity),
                price_usd=to_float(pair.get("priceUsd")),
                price_change_24h=to_float((pair.get("priceChange") or {}).get("h24")),
                volume_24h_usd=to_float(volume),
                market_cap_usd=to_float(pair.get("marketCap") or pair.get("fdv")),
                pair_address=pair.get("pairAddress"),
                dex_id=pair.get("dexId"),
            )

        # Quote side: pair metrics only, the price fields describe the base token
        quote = pair.get("quoteToken") or {}
        if isinstance(quote.get("address"), str) and matches(query, quote.get("symbol"), quote.get("name"), quote["address"]):
            return CandidateToken(
                chain_id=chain_id,
                address=normalize_address(quote["address"]),
                symbol=quote.get("symbol") or "",
                name=quote.get("name") or quote.get("symbol") or "",
                source=self.name,
                liquidity_usd=to_float(liquidity),
                volume_24h_usd=to_float(volume),
                pair_address=pair.get("pairAddress"),
                dex_id=pair.get("dexId"),
            )
        return None

    async def close(self) -> None:
        logger.debug(f"{self.name} cache: {self._cache.stats.summary()}")
        await self._client.close()
