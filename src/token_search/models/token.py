"""
Token models - Standardized result shape for multi-source token search.

Every adapter maps its upstream payload into a CandidateToken; the aggregator
collapses candidates describing the same on-chain asset into one MergedToken.

Architecture Decision:
    Dataclasses rather than Pydantic models: these objects are created in
    bulk per request and never validated from untrusted input directly, the
    API layer converts them with ``to_dict()``.

Example:
    >>> token = CandidateToken(
    ...     chain_id="ethereum",
    ...     address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    ...     symbol="USDC",
    ...     name="USD Coin",
    ...     source="token_list",
    ... )
    >>> token.key
    ('ethereum', '0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48')
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any

_HEX_ADDRESS = re.compile(r"^0x[0-9a-f]{40}$")

# Scalar fields that take part in merging (everything except identity and provenance)
MERGEABLE_FIELDS: tuple[str, ...] = (
    "symbol",
    "name",
    "decimals",
    "logo_url",
    "liquidity_usd",
    "price_usd",
    "price_change_24h",
    "volume_24h_usd",
    "market_cap_usd",
    "pair_address",
    "dex_id",
)


def normalize_address(address: str) -> str:
    """
    Normalize a contract address for grouping.

    EVM addresses are case-insensitive (mixed case only encodes the EIP-55
    checksum), so they are lower-cased. Surrounding whitespace is stripped
    for every format.
    """
    cleaned = address.strip()
    lowered = cleaned.lower()
    if lowered.startswith("0x"):
        return lowered
    return cleaned


def is_evm_address(value: str) -> bool:
    """True for a 0x-prefixed 20-byte hex address."""
    return bool(_HEX_ADDRESS.match(value.strip().lower()))


def to_float(value: Any) -> float | None:
    """Parse upstream numeric fields (often strings) into floats."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return number


@dataclass(frozen=True)
class CandidateToken:
    """One asset as reported by a single adapter."""

    chain_id: str
    address: str
    symbol: str
    name: str
    source: str
    decimals: int | None = None
    logo_url: str | None = None
    liquidity_usd: float | None = None
    price_usd: float | None = None
    price_change_24h: float | None = None
    volume_24h_usd: float | None = None
    market_cap_usd: float | None = None
    pair_address: str | None = None
    dex_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))
        object.__setattr__(self, "chain_id", self.chain_id.strip().lower())

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the asset: (chain id, normalized address)."""
        return (self.chain_id, self.address)

    def with_updates(self, **changes: Any) -> CandidateToken:
        return replace(self, **changes)


@dataclass
class MergedToken:
    """
    A token enriched with data from every adapter that reported it.

    ``sources`` lists contributing adapters in precedence order; the first
    entry is the adapter whose scalar values won.
    """

    chain_id: str
    address: str
    symbol: str
    name: str
    sources: list[str] = field(default_factory=list)
    decimals: int | None = None
    logo_url: str | None = None
    liquidity_usd: float | None = None
    price_usd: float | None = None
    price_change_24h: float | None = None
    volume_24h_usd: float | None = None
    market_cap_usd: float | None = None
    pair_address: str | None = None
    dex_id: str | None = None

    # Set by the ranker
    match_tier: str | None = None

    @classmethod
    def from_candidate(cls, candidate: CandidateToken) -> MergedToken:
        values = {name: getattr(candidate, name) for name in MERGEABLE_FIELDS}
        return cls(
            chain_id=candidate.chain_id,
            address=candidate.address,
            sources=[candidate.source],
            **values,
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.chain_id, self.address)

    def merge_from(self, other: CandidateToken) -> None:
        """
        Merge a lower-precedence candidate into this token.

        Strategy:
        - Fill in missing fields (None or empty string)
        - Never overwrite a value already present
        - Keep track of all sources
        """
        if other.key != self.key:
            raise ValueError(f"cannot merge {other.key} into {self.key}")

        for name in MERGEABLE_FIELDS:
            current = getattr(self, name)
            incoming = getattr(other, name)
            if (current is None or current == "") and incoming not in (None, ""):
                setattr(self, name, incoming)

        if other.source not in self.sources:
            self.sources.append(other.source)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys of the HTTP response."""
        return {
            "chainId": self.chain_id,
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "logoUrl": self.logo_url,
            "liquidityUsd": self.liquidity_usd,
            "priceUsd": self.price_usd,
            "priceChange24h": self.price_change_24h,
            "volume24hUsd": self.volume_24h_usd,
            "marketCapUsd": self.market_cap_usd,
            "pairAddress": self.pair_address,
            "dex": self.dex_id,
            "sources": list(self.sources),
            "matchTier": self.match_tier,
        }

