"""
Adapter registry.

Holds the enabled adapters in precedence order (earlier adapters win field
conflicts during merging) and remembers why configured adapters were left
out, so ``/health`` can report it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from token_search.adapters.base import TokenAdapter
from token_search.adapters.dexscreener import DexScreenerAdapter
from token_search.adapters.geckoterminal import GeckoTerminalAdapter
from token_search.adapters.token_list import TokenListAdapter
from token_search.config import SearchSettings
from token_search.core.exceptions import ConfigurationError
from token_search.infrastructure.sources import GeckoTerminalClient

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Ordered collection of adapters."""

    def __init__(self, adapters: list[TokenAdapter] | None = None) -> None:
        self._adapters: dict[str, TokenAdapter] = {}
        self._disabled: dict[str, str] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: TokenAdapter) -> None:
        if adapter.name in self._adapters:
            raise ConfigurationError(f"Adapter already registered: {adapter.name!r}")
        self._adapters[adapter.name] = adapter
        self._disabled.pop(adapter.name, None)

    def disable(self, name: str, reason: str) -> None:
        """Record an adapter that was configured but could not be enabled."""
        self._disabled[name] = reason
        logger.info(f"Adapter {name!r} disabled: {reason}")

    def has(self, name: str) -> bool:
        return name in self._adapters

    def get(self, name: str) -> TokenAdapter:
        return self._adapters[name]

    @property
    def names(self) -> list[str]:
        """Adapter names in precedence order."""
        return list(self._adapters)

    @property
    def disabled(self) -> dict[str, str]:
        return dict(self._disabled)

    def adapters_for(self, chain_id: str) -> list[TokenAdapter]:
        """Adapters able to serve ``chain_id``, in precedence order."""
        return [a for a in self._adapters.values() if a.supports(chain_id)]

    def capabilities(self) -> dict[str, list[str]]:
        return {name: sorted(a.supported_chains) for name, a in self._adapters.items()}

    async def close(self) -> None:
        for adapter in self._adapters.values():
            await adapter.close()

    def __iter__(self) -> Iterator[TokenAdapter]:
        return iter(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)


def build_registry(settings: SearchSettings) -> AdapterRegistry:
    """Create the adapters named in ``settings.enabled_adapters``, in that order."""
    registry = AdapterRegistry()

    for name in settings.enabled_adapters:
        if name == "token_list":
            if not settings.token_list_urls:
                registry.disable(name, "no token list URLs configured")
                continue
            registry.register(
                TokenListAdapter(
                    list_urls=settings.token_list_urls,
                    timeout=settings.adapter_timeout,
                    list_ttl=settings.token_list_ttl,
                )
            )
        elif name == "geckoterminal":
            client = GeckoTerminalClient(
                api_key=settings.coingecko_api_key,
                timeout=settings.adapter_timeout,
            )
            logger.info(f"GeckoTerminal via {'CoinGecko Pro API' if client.uses_pro else 'public API'}")
            registry.register(
                GeckoTerminalAdapter(
                    client=client,
                    timeout=settings.adapter_timeout,
                    cache_ttl=settings.cache_ttl,
                    dex_allowlist=settings.dex_allowlist,
                )
            )
        elif name == "dexscreener":
            registry.register(
                DexScreenerAdapter(
                    timeout=settings.adapter_timeout,
                    cache_ttl=settings.cache_ttl,
                    dex_allowlist=settings.dex_allowlist,
                )
            )

    logger.info(f"Adapters enabled: {', '.join(registry.names) or 'none'}")
    return registry
