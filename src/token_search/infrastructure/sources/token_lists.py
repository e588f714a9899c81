"""
Token List Integration

Downloads token lists in the Uniswap token-list format
(https://tokenlists.org): ``{"name": ..., "tokens": [{chainId, address,
symbol, name, decimals, logoURI}, ...]}``.
"""

from __future__ import annotations

import logging
from typing import Any

from token_search.core.exceptions import ParseError
from token_search.infrastructure.sources.base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class TokenListClient(BaseAPIClient):
    """Fetches token list documents from arbitrary hosts."""

    _service_name = "TokenList"

    def __init__(self, timeout: float = 10.0, **kwargs: Any):
        super().__init__(timeout=timeout, **kwargs)

    async def fetch_list(self, url: str) -> list[dict[str, Any]]:
        """
        Download one token list.

        Returns:
            The raw ``tokens`` entries

        Raises:
            ParseError: Document has no ``tokens`` list
        """
        data = await self._make_request(url)
        if not isinstance(data, dict) or not isinstance(data.get("tokens"), list):
            raise ParseError(f"{url} is not a token list", source=self._service_name)

        tokens = [t for t in data["tokens"] if isinstance(t, dict)]
        logger.info(f"Loaded token list {data.get('name', url)!r}: {len(tokens)} tokens")
        return tokens
