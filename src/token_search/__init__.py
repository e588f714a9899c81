"""
Token Search - cross-chain token search aggregated from several upstream sources.

Queries token lists, GeckoTerminal and DexScreener concurrently, merges
entries describing the same on-chain asset and ranks them by relevance.
"""

__version__ = "0.1.0"
