"""
GeckoTerminal adapter.

One pool search per (query, network). Pools are mapped to the token side
that matches the query (normally the base token); token metadata comes
from the ``included`` section of the response.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from token_search.adapters.base import TokenAdapter, collapse_pools
from token_search.infrastructure.cache import ResponseCache
from token_search.infrastructure.sources import GeckoTerminalClient
from token_search.models.chains import CHAINS
from token_search.models.token import CandidateToken, normalize_address, to_float
from token_search.unified.query_analyzer import SearchQuery, matches

logger = logging.getLogger(__name__)

# GeckoTerminal's placeholder for tokens without an image
_MISSING_IMAGE = "missing.png"


def _relationship_id(pool: dict[str, Any], name: str) -> str | None:
    data = (pool.get("relationships") or {}).get(name, {}).get("data") or {}
    return data.get("id")


def _image_url(attributes: dict[str, Any]) -> str | None:
    url = attributes.get("image_url")
    if not isinstance(url, str) or not url or url.endswith(_MISSING_IMAGE):
        return None
    return url


class GeckoTerminalAdapter(TokenAdapter):
    """Adapter over GeckoTerminal pool search."""

    name = "geckoterminal"

    def __init__(
        self,
        client: GeckoTerminalClient | None = None,
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
        self._client = client or GeckoTerminalClient(timeout=timeout)
        self._cache = ResponseCache(max_size=256, ttl=cache_ttl)

    async def _fetch(self, query: SearchQuery, chain_id: str) -> list[CandidateToken]:
        network = CHAINS[chain_id].geckoterminal_network
        payload = await self._cache.get_or_fetch(
            f"{network}:{query.text}",
            lambda: self._client.search_pools(query.text, network),
        )

        tokens = {
            item["id"]: item.get("attributes") or {}
            for item in payload["included"]
            if isinstance(item, dict) and item.get("type") == "token" and "id" in item
        }

        candidates = []
        for pool in payload["data"]:
            if not isinstance(pool, dict):
                continue
            dex_id = _relationship_id(pool, "dex")
            if not self.allows_dex(chain_id, dex_id):
                continue
            candidate = self._to_candidate(pool, tokens, chain_id, dex_id, query)
            if candidate:
                candidates.append(candidate)

        return collapse_pools(candidates)

    def _to_candidate(
        self,
        pool: dict[str, Any],
        tokens: dict[str, dict[str, Any]],
        chain_id: str,
        dex_id: str | None,
        query: SearchQuery,
    ) -> CandidateToken | None:
        pool_attrs = pool.get("attributes") or {}

        # Prefer the base token; fall back to the quote token when only it matches
        for side, price_field in (("base_token", "base_token_price_usd"), ("quote_token", "quote_token_price_usd")):
            token = tokens.get(_relationship_id(pool, side) or "")
            if not token or not isinstance(token.get("address"), str):
                continue
            symbol = token.get("symbol") or ""
            name = token.get("name") or symbol
            if not matches(query, symbol, name, token["address"]):
                continue

            decimals = token.get("decimals")
            volume = pool_attrs.get("volume_usd") or {}
            change = pool_attrs.get("price_change_percentage") or {}
            return CandidateToken(
                chain_id=chain_id,
                address=normalize_address(token["address"]),
                symbol=symbol,
                name=name,
                source=self.name,
                decimals=decimals if isinstance(decimals, int) else None,
                logo_url=_image_url(token),
                liquidity_usd=to_float(pool_attrs.get("reserve_in_usd")),
                price_usd=to_float(pool_attrs.get(price_field)),
                price_change_24h=to_float(change.get("h24")) if side == "base_token" else None,
                volume_24h_usd=to_float(volume.get("h24")),
                market_cap_usd=to_float(pool_attrs.get("market_cap_usd")) if side == "base_token" else None,
                pair_address=pool_attrs.get("address"),
                dex_id=dex_id,
            )
        return None

    async def close(self) -> None:
        logger.debug(f"{self.name} cache: {self._cache.stats.summary()}")
        await self._client.close()
