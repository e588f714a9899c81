"""
Upstream source clients.

Each client wraps one HTTP API and returns raw JSON; mapping into
CandidateToken happens in ``token_search.adapters``.
"""

from .base_client import BaseAPIClient
from .dexscreener import DexScreenerClient
from .geckoterminal import GeckoTerminalClient
from .token_lists import TokenListClient

__all__ = [
    "BaseAPIClient",
    "DexScreenerClient",
    "GeckoTerminalClient",
    "TokenListClient",
]
