"""
DexScreener Integration

Pair search and token lookup via the public DexScreener API.

API Documentation: https://docs.dexscreener.com/api/reference

Features:
- No API key required
- Free-text search across all chains (symbol, name, address)
- Token lookup by chain and address
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import httpx

from token_search.core.exceptions import ParseError
from token_search.infrastructure.sources.base_client import BaseAPIClient

logger = logging.getLogger(__name__)

DEXSCREENER_API_BASE = "https://api.dexscreener.com"
DS_SEARCH_URL = f"{DEXSCREENER_API_BASE}/latest/dex/search"
DS_TOKENS_URL = f"{DEXSCREENER_API_BASE}/tokens/v1"


class DexScreenerClient(BaseAPIClient):
    """
    DexScreener API client.

    Usage:
        async with DexScreenerClient() as client:
            pairs = await client.search_pairs("weth")
    """

    _service_name = "DexScreener"

    def __init__(self, timeout: float = 10.0, **kwargs: Any):
        super().__init__(
            base_url=DEXSCREENER_API_BASE,
            timeout=timeout,
            headers={"Accept": "*/*"},
            **kwargs,
        )

    async def search_pairs(self, query: str) -> list[dict[str, Any]]:
        """
        Search pairs matching a free-text query, on every chain.

        Returns:
            Raw pair objects (``chainId``, ``dexId``, ``pairAddress``,
            ``baseToken``, ``liquidity`` ...)

        Raises:
            ParseError: Response is not ``{"pairs": [...]}``
        """
        data = await self._make_request(DS_SEARCH_URL, params={"q": query})
        if not isinstance(data, dict):
            raise ParseError("search response is not an object", source=self._service_name)

        pairs = data.get("pairs")
        if pairs is None:
            return []
        if not isinstance(pairs, list):
            raise ParseError("'pairs' is not a list", source=self._service_name)
        return [p for p in pairs if isinstance(p, dict)]

    async def token_pairs(self, chain_id: str, address: str) -> list[dict[str, Any]]:
        """
        Get pools for one token on one chain.

        Args:
            chain_id: DexScreener chain id (e.g. "ethereum", "base")
            address: Token contract address

        Returns:
            Raw pair objects
        """
        url = f"{DS_TOKENS_URL}/{urllib.parse.quote(chain_id)}/{urllib.parse.quote(address)}"
        data = await self._make_request(url)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ParseError("token response is not a list", source=self._service_name)
        return [p for p in data if isinstance(p, dict)]

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        # Unknown token addresses come back as 404
        if response.status_code == 404:
            logger.debug(f"DexScreener: not found {url}")
            return []
        return super()._handle_expected_status(response, url)
