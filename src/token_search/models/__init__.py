"""Token Search result models."""

from .chains import (
    CHAINS,
    DEFAULT_CHAINS,
    ChainInfo,
    canonical_chain,
    parse_chain_param,
    resolve_chains,
)
from .token import (
    MERGEABLE_FIELDS,
    CandidateToken,
    MergedToken,
    is_evm_address,
    normalize_address,
    to_float,
)

__all__ = [
    "CHAINS",
    "DEFAULT_CHAINS",
    "MERGEABLE_FIELDS",
    "CandidateToken",
    "ChainInfo",
    "MergedToken",
    "canonical_chain",
    "is_evm_address",
    "normalize_address",
    "parse_chain_param",
    "resolve_chains",
    "to_float",
]
