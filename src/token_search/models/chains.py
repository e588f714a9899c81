"""
Supported chains and their identifiers on each upstream.

Canonical ids are the DexScreener chain ids; GeckoTerminal uses its own
network slugs and token lists key tokens by numeric EVM chain id.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ChainInfo:
    """Identifiers of one chain across upstreams."""

    chain_id: str
    evm_chain_id: int
    geckoterminal_network: str
    aliases: tuple[str, ...] = ()


CHAINS: dict[str, ChainInfo] = {
    "ethereum": ChainInfo("ethereum", 1, "eth", ("eth", "mainnet", "1")),
    "bsc": ChainInfo("bsc", 56, "bsc", ("bnb", "binance", "56")),
    "polygon": ChainInfo("polygon", 137, "polygon_pos", ("matic", "polygon_pos", "137")),
    "base": ChainInfo("base", 8453, "base", ("8453",)),
    "arbitrum": ChainInfo("arbitrum", 42161, "arbitrum", ("arb", "arbitrum_one", "42161")),
}

DEFAULT_CHAINS: tuple[str, ...] = ("ethereum", "bsc", "polygon")

_ALIASES: dict[str, str] = {}
for _info in CHAINS.values():
    _ALIASES[_info.chain_id] = _info.chain_id
    for _alias in _info.aliases:
        _ALIASES[_alias] = _info.chain_id


def canonical_chain(identifier: str) -> str | None:
    """Resolve a chain id or alias to its canonical id, None if unknown."""
    return _ALIASES.get(identifier.strip().lower())


def resolve_chains(identifiers: Iterable[str]) -> tuple[str, ...]:
    """
    Resolve identifiers to canonical chain ids.

    Unknown identifiers are dropped silently; order is preserved and
    duplicates (including aliases of the same chain) are removed.
    """
    resolved: list[str] = []
    for identifier in identifiers:
        chain = canonical_chain(identifier)
        if chain and chain not in resolved:
            resolved.append(chain)
    return tuple(resolved)


def parse_chain_param(raw: str | None) -> list[str] | None:
    """Split the comma-separated ``chains`` query parameter; None when absent or blank."""
    if raw is None:
        return None
    parts = [part.strip() for part in raw.split(",") if part.strip()]
    return parts or None
