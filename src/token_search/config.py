"""
Service configuration.

All recognized settings live on ``SearchSettings``; anything not listed here
is not configurable. Values come from keyword arguments or, through
``SearchSettings.from_env()``, from environment variables:

    TOKEN_SEARCH_DEFAULT_CHAINS     comma-separated chain ids (ethereum,bsc,polygon)
    TOKEN_SEARCH_ADAPTERS           adapter precedence order (token_list,geckoterminal,dexscreener)
    TOKEN_SEARCH_ADAPTER_TIMEOUT    per-adapter timeout in seconds (3.0)
    TOKEN_SEARCH_DEADLINE           global fan-out deadline in seconds (5.0)
    TOKEN_SEARCH_GRACE              grace margin past the deadline in seconds (0.25)
    TOKEN_SEARCH_MAX_RESULTS        result budget (20)
    TOKEN_SEARCH_CACHE_TTL          adapter response cache TTL in seconds (30)
    TOKEN_SEARCH_TOKEN_LIST_TTL     token list cache TTL in seconds (3600)
    TOKEN_SEARCH_TOKEN_LIST_<CHAIN> token list URL for one chain, "" disables it
    COINGECKO_API_KEY               optional CoinGecko Pro key for GeckoTerminal
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from token_search.core.exceptions import ConfigurationError
from token_search.models.chains import CHAINS, DEFAULT_CHAINS, canonical_chain

logger = logging.getLogger(__name__)

KNOWN_ADAPTERS: tuple[str, ...] = ("token_list", "geckoterminal", "dexscreener")

UNISWAP_TOKEN_LIST = "https://tokens.uniswap.org"
PANCAKESWAP_TOKEN_LIST = "https://tokens.pancakeswap.finance/pancakeswap-extended.json"

DEFAULT_TOKEN_LISTS: dict[str, str] = {
    "ethereum": UNISWAP_TOKEN_LIST,
    "polygon": UNISWAP_TOKEN_LIST,
    "base": UNISWAP_TOKEN_LIST,
    "arbitrum": UNISWAP_TOKEN_LIST,
    "bsc": PANCAKESWAP_TOKEN_LIST,
}

# Only pools on these DEXes are returned for the chain
DEFAULT_DEX_ALLOWLIST: dict[str, tuple[str, ...]] = {
    "base": (
        "baseswap",
        "rocketswap",
        "swapbased",
        "dackieswap",
        "horizondex",
        "sushiswap_v3",
        "uniswap_v2",
        "uniswap_v3",
        "uniswap_v4",
        "velocimeter_v2",
        "aerodrome",
        "slipstream",
    ),
}


@dataclass(frozen=True)
class SearchSettings:
    """Validated configuration for the search service."""

    default_chains: tuple[str, ...] = DEFAULT_CHAINS
    enabled_adapters: tuple[str, ...] = KNOWN_ADAPTERS
    adapter_timeout: float = 3.0
    global_deadline: float = 5.0
    grace_margin: float = 0.25
    max_results: int = 20
    cache_ttl: float = 30.0
    token_list_ttl: float = 3600.0
    token_list_urls: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_TOKEN_LISTS))
    dex_allowlist: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_DEX_ALLOWLIST))
    coingecko_api_key: str | None = None

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        if not self.default_chains:
            raise ConfigurationError("default_chains must not be empty")
        for chain in self.default_chains:
            if chain not in CHAINS:
                raise ConfigurationError(f"Unknown default chain: {chain!r}")

        if not self.enabled_adapters:
            raise ConfigurationError("At least one adapter must be enabled")
        for name in self.enabled_adapters:
            if name not in KNOWN_ADAPTERS:
                raise ConfigurationError(
                    f"Unknown adapter: {name!r} (known: {', '.join(KNOWN_ADAPTERS)})"
                )
        if len(set(self.enabled_adapters)) != len(self.enabled_adapters):
            raise ConfigurationError("enabled_adapters contains duplicates")

        for name in ("adapter_timeout", "global_deadline", "cache_ttl", "token_list_ttl"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        if self.grace_margin < 0:
            raise ConfigurationError("grace_margin must not be negative")
        if self.adapter_timeout > self.global_deadline:
            raise ConfigurationError(
                f"adapter_timeout ({self.adapter_timeout}s) must not exceed "
                f"global_deadline ({self.global_deadline}s)"
            )
        if self.max_results < 1:
            raise ConfigurationError("max_results must be at least 1")

        for chain in (*self.token_list_urls, *self.dex_allowlist):
            if chain not in CHAINS:
                raise ConfigurationError(f"Unknown chain in configuration: {chain!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SearchSettings:
        """Build settings from environment variables (see module docstring)."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        if chains := env.get("TOKEN_SEARCH_DEFAULT_CHAINS"):
            kwargs["default_chains"] = tuple(_parse_chain_list(chains))
        if adapters := env.get("TOKEN_SEARCH_ADAPTERS"):
            kwargs["enabled_adapters"] = tuple(
                part.strip().lower() for part in adapters.split(",") if part.strip()
            )

        for var, name, cast in (
            ("TOKEN_SEARCH_ADAPTER_TIMEOUT", "adapter_timeout", float),
            ("TOKEN_SEARCH_DEADLINE", "global_deadline", float),
            ("TOKEN_SEARCH_GRACE", "grace_margin", float),
            ("TOKEN_SEARCH_MAX_RESULTS", "max_results", int),
            ("TOKEN_SEARCH_CACHE_TTL", "cache_ttl", float),
            ("TOKEN_SEARCH_TOKEN_LIST_TTL", "token_list_ttl", float),
        ):
            raw = env.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                kwargs[name] = cast(raw)
            except ValueError as e:
                raise ConfigurationError(f"{var} must be a number, got {raw!r}") from e

        token_lists = dict(DEFAULT_TOKEN_LISTS)
        for chain in CHAINS:
            var = f"TOKEN_SEARCH_TOKEN_LIST_{chain.upper()}"
            if var in env:
                url = env[var].strip()
                if url:
                    token_lists[chain] = url
                else:
                    token_lists.pop(chain, None)
        kwargs["token_list_urls"] = token_lists

        api_key = env.get("COINGECKO_API_KEY", "").strip()
        kwargs["coingecko_api_key"] = api_key or None

        settings = cls(**kwargs)
        logger.debug(f"Loaded settings: {settings.summary()}")
        return settings

    def summary(self) -> dict[str, Any]:
        """Loggable view of the settings (no secrets)."""
        return {
            "default_chains": list(self.default_chains),
            "enabled_adapters": list(self.enabled_adapters),
            "adapter_timeout": self.adapter_timeout,
            "global_deadline": self.global_deadline,
            "grace_margin": self.grace_margin,
            "max_results": self.max_results,
            "token_list_chains": sorted(self.token_list_urls),
            "coingecko_pro": self.coingecko_api_key is not None,
        }


def _parse_chain_list(raw: str) -> list[str]:
    chains = []
    for part in raw.split(","):
        if not part.strip():
            continue
        chain = canonical_chain(part)
        if chain is None:
            raise ConfigurationError(f"Unknown chain in TOKEN_SEARCH_DEFAULT_CHAINS: {part.strip()!r}")
        chains.append(chain)
    return chains
