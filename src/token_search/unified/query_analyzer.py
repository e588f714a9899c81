"""
QueryAnalyzer - Query normalization and match classification for token search.

This module decides:
1. Whether a raw query is acceptable (trimmed length >= 2)
2. Whether it is a contract address lookup or a free-text symbol/name search
3. How well a token matches it (exact / prefix / contains)

Architecture Decision:
    Pure local processing, no I/O. Adapters use ``classify_match`` to drop
    irrelevant upstream rows early; the aggregator and ranker use it for
    filtering and for the primary sort key.

Example:
    >>> query = normalize_query("  ETH ")
    >>> query.text
    'eth'
    >>> classify_match(query, symbol="WETH", name="Wrapped Ether")
    <MatchTier.CONTAINS: 2>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from token_search.core.exceptions import InvalidQueryError
from token_search.models.token import is_evm_address, normalize_address

MIN_QUERY_LENGTH = 2


class MatchTier(Enum):
    """
    How a token matches the query; lower values rank first.

    EXACT: Symbol equals the query, or the query is the token's address
        Example: "usdc" vs USDC
    PREFIX: Symbol starts with the query
        Example: "usd" vs USDC
    CONTAINS: Query appears inside the symbol, or anywhere in the name
        Example: "eth" vs WETH, "eth" vs "ETHGlobal"
    """
    EXACT = 0
    PREFIX = 1
    CONTAINS = 2

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class SearchQuery:
    """A validated query: lower-cased, trimmed text plus its kind."""

    text: str
    raw: str
    is_address: bool = False


def normalize_query(raw: str | None) -> SearchQuery:
    """
    Validate and normalize a user query.

    Raises:
        InvalidQueryError: Query missing or shorter than MIN_QUERY_LENGTH
    """
    if raw is None:
        raise InvalidQueryError(raw, "Query parameter 'q' is required")

    trimmed = raw.strip()
    if not trimmed:
        raise InvalidQueryError(raw, "Query parameter 'q' is required")
    if len(trimmed) < MIN_QUERY_LENGTH:
        raise InvalidQueryError(raw, f"Query must be at least {MIN_QUERY_LENGTH} characters long")

    if is_evm_address(trimmed):
        return SearchQuery(text=normalize_address(trimmed), raw=raw, is_address=True)
    return SearchQuery(text=trimmed.lower(), raw=raw)


def classify_match(
    query: SearchQuery,
    symbol: str | None,
    name: str | None = None,
    address: str | None = None,
) -> MatchTier | None:
    """
    Classify how a token matches the query.

    Returns:
        The best MatchTier, or None when the token does not match at all
    """
    if query.is_address:
        if address and normalize_address(address) == query.text:
            return MatchTier.EXACT
        return None

    text = query.text
    symbol_lower = (symbol or "").strip().lower()
    name_lower = (name or "").strip().lower()

    if symbol_lower == text:
        return MatchTier.EXACT
    if symbol_lower.startswith(text):
        return MatchTier.PREFIX
    if text in symbol_lower or text in name_lower:
        return MatchTier.CONTAINS
    return None


def matches(
    query: SearchQuery,
    symbol: str | None,
    name: str | None = None,
    address: str | None = None,
) -> bool:
    """True when the token matches the query at any tier."""
    return classify_match(query, symbol, name, address) is not None
