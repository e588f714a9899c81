"""
Token source adapters.

Each adapter turns one upstream into CandidateTokens for one chain, within
a deadline, and reports its outcome as an AdapterResult.
"""

from .base import AdapterResult, TokenAdapter, collapse_pools, is_supported_dex
from .dexscreener import DexScreenerAdapter
from .geckoterminal import GeckoTerminalAdapter
from .registry import AdapterRegistry, build_registry
from .token_list import TokenListAdapter

__all__ = [
    "AdapterRegistry",
    "AdapterResult",
    "DexScreenerAdapter",
    "GeckoTerminalAdapter",
    "TokenAdapter",
    "TokenListAdapter",
    "build_registry",
    "collapse_pools",
    "is_supported_dex",
]
