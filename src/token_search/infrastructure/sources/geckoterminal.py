"""
GeckoTerminal Integration

Pool search via the GeckoTerminal API (optionally the CoinGecko Pro on-chain API).

API Documentation: https://www.geckoterminal.com/dex-api

Features:
- Public API, no key required (30 calls/minute)
- With a CoinGecko Pro key, requests go to the Pro on-chain endpoint
- ``include=base_token`` returns token metadata (decimals, image) inline
"""

from __future__ import annotations

import logging
from typing import Any

from token_search.core.exceptions import ParseError
from token_search.infrastructure.sources.base_client import BaseAPIClient

logger = logging.getLogger(__name__)

GT_API_BASE = "https://api.geckoterminal.com/api/v2"
CG_PRO_ONCHAIN_BASE = "https://pro-api.coingecko.com/api/v3/onchain"
GT_ACCEPT = "application/json;version=20230302"


class GeckoTerminalClient(BaseAPIClient):
    """
    GeckoTerminal API client.

    Usage:
        client = GeckoTerminalClient()
        payload = await client.search_pools("usdc", network="eth")
    """

    _service_name = "GeckoTerminal"

    def __init__(self, api_key: str | None = None, timeout: float = 10.0, **kwargs: Any):
        """
        Initialize client.

        Args:
            api_key: Optional CoinGecko Pro API key
            timeout: Request timeout in seconds
        """
        headers = {"Accept": GT_ACCEPT}
        if api_key:
            headers["x-cg-pro-api-key"] = api_key
        self._uses_pro = bool(api_key)
        super().__init__(
            base_url=CG_PRO_ONCHAIN_BASE if api_key else GT_API_BASE,
            timeout=timeout,
            headers=headers,
            **kwargs,
        )

    @property
    def uses_pro(self) -> bool:
        return self._uses_pro

    async def search_pools(self, query: str, network: str) -> dict[str, Any]:
        """
        Search pools on one network.

        Args:
            query: Symbol, name or address
            network: GeckoTerminal network slug (e.g. "eth", "polygon_pos")

        Returns:
            ``{"data": [pool, ...], "included": [token|dex, ...]}``

        Raises:
            ParseError: Response lacks a ``data`` list
        """
        data = await self._make_request(
            "/search/pools",
            params={
                "query": query,
                "network": network,
                "include": "base_token,quote_token,dex",
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ParseError("search response lacks a 'data' list", source=self._service_name)

        included = data.get("included") or []
        if not isinstance(included, list):
            raise ParseError("'included' is not a list", source=self._service_name)
        return {"data": data["data"], "included": included}
