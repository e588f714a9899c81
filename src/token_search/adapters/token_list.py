"""
Token list adapter.

Searches curated token lists (Uniswap token-list format). Lists are
downloaded once per TTL and filtered locally, so this adapter is fast and
has no market data: it contributes authoritative symbol, name, decimals
and logo.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from token_search.adapters.base import TokenAdapter
from token_search.infrastructure.cache import ResponseCache
from token_search.infrastructure.sources import TokenListClient
from token_search.models.chains import CHAINS
from token_search.models.token import CandidateToken, normalize_address
from token_search.unified.query_analyzer import SearchQuery, matches

logger = logging.getLogger(__name__)

IPFS_GATEWAY = "https://ipfs.io/ipfs/"


def resolve_logo_uri(uri: str | None) -> str | None:
    """Rewrite ``ipfs://`` logo URIs to an HTTP gateway."""
    if not uri:
        return None
    if uri.startswith("ipfs://"):
        return IPFS_GATEWAY + uri.removeprefix("ipfs://")
    return uri


class TokenListAdapter(TokenAdapter):
    """Adapter over one token list URL per chain."""

    name = "token_list"

    def __init__(
        self,
        list_urls: Mapping[str, str],
        client: TokenListClient | None = None,
        timeout: float = 3.0,
        list_ttl: float = 3600.0,
    ) -> None:
        super().__init__(chains=list_urls.keys(), timeout=timeout)
        self._list_urls = dict(list_urls)
        self._client = client or TokenListClient(timeout=timeout)
        self._cache = ResponseCache(max_size=16, ttl=list_ttl)

    async def _fetch(self, query: SearchQuery, chain_id: str) -> list[CandidateToken]:
        url = self._list_urls[chain_id]
        entries = await self._cache.get_or_fetch(url, lambda: self._client.fetch_list(url))

        evm_chain_id = CHAINS[chain_id].evm_chain_id
        candidates = []
        for entry in entries:
            if entry.get("chainId") != evm_chain_id:
                continue
            candidate = self._to_candidate(entry, chain_id)
            if candidate and matches(query, candidate.symbol, candidate.name, candidate.address):
                candidates.append(candidate)
        return candidates

    def _to_candidate(self, entry: dict[str, Any], chain_id: str) -> CandidateToken | None:
        address = entry.get("address")
        symbol = entry.get("symbol")
        if not isinstance(address, str) or not isinstance(symbol, str):
            return None

        decimals = entry.get("decimals")
        return CandidateToken(
            chain_id=chain_id,
            address=normalize_address(address),
            symbol=symbol,
            name=str(entry.get("name") or symbol),
            source=self.name,
            decimals=decimals if isinstance(decimals, int) else None,
            logo_url=resolve_logo_uri(entry.get("logoURI")),
        )

    async def close(self) -> None:
        logger.debug(f"{self.name} cache: {self._cache.stats.summary()}")
        await self._client.close()
