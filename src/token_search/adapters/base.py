"""
Adapter contract - one upstream, one chain, bounded time.

Every adapter exposes ``fetch_candidates(query, chain_id, deadline)``:
- Never raises; every failure becomes an AdapterResult with a status
- Returns within min(adapter timeout, time left before the deadline)
- Only returns candidates on the requested chain, with normalized addresses
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from token_search.core.async_utils import loop_time, time_left
from token_search.core.exceptions import AdapterStatus, TokenSearchError, status_for_error
from token_search.models.token import CandidateToken
from token_search.unified.query_analyzer import SearchQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdapterResult:
    """Outcome of one adapter call for one chain."""

    adapter: str
    chain_id: str
    status: AdapterStatus
    candidates: tuple[CandidateToken, ...] = ()
    error: str | None = None
    elapsed_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status is AdapterStatus.SUCCEEDED


def normalize_dex_id(dex_id: str) -> str:
    """Lower-case and drop separators so "Uniswap V3" matches "uniswap_v3"."""
    return "".join(ch for ch in dex_id.lower() if ch.isalnum())


def is_supported_dex(dex_id: str | None, allowed: Iterable[str] | None) -> bool:
    """
    Check a DEX id against a chain's allow-list.

    No allow-list means every DEX is accepted. Matching is by substring on
    normalized ids, so "uniswap" pools reported as "uniswapv3" still pass.
    """
    if allowed is None:
        return True
    if not dex_id:
        return False
    normalized = normalize_dex_id(dex_id)
    for entry in allowed:
        wanted = normalize_dex_id(entry)
        if wanted and (wanted in normalized or normalized in wanted):
            return True
    return False


def collapse_pools(candidates: Iterable[CandidateToken]) -> list[CandidateToken]:
    """
    Collapse several pools of the same token into one candidate.

    The deepest pool provides price, pair and DEX; liquidity and 24h volume
    are summed across pools. First-seen order is kept.
    """
    grouped: dict[tuple[str, str], list[CandidateToken]] = {}
    for candidate in candidates:
        grouped.setdefault(candidate.key, []).append(candidate)

    collapsed: list[CandidateToken] = []
    for pools in grouped.values():
        if len(pools) == 1:
            collapsed.append(pools[0])
            continue

        deepest = max(pools, key=lambda c: c.liquidity_usd or 0.0)
        liquidity = [c.liquidity_usd for c in pools if c.liquidity_usd is not None]
        volume = [c.volume_24h_usd for c in pools if c.volume_24h_usd is not None]
        collapsed.append(
            deepest.with_updates(
                liquidity_usd=sum(liquidity) if liquidity else None,
                volume_24h_usd=sum(volume) if volume else None,
                decimals=deepest.decimals if deepest.decimals is not None else _first(pools, "decimals"),
                logo_url=deepest.logo_url or _first(pools, "logo_url"),
            )
        )
    return collapsed


def _first(pools: list[CandidateToken], name: str):
    for pool in pools:
        value = getattr(pool, name)
        if value not in (None, ""):
            return value
    return None


class TokenAdapter(ABC):
    """
    Base class for token sources.

    Subclasses set ``name`` and implement ``_fetch``; the public
    ``fetch_candidates`` adds the time bound, chain filtering and error
    mapping.
    """

    name: str = "adapter"

    def __init__(
        self,
        chains: Iterable[str],
        timeout: float = 3.0,
        dex_allowlist: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._chains = frozenset(chains)
        self._timeout = timeout
        self._dex_allowlist = {chain: tuple(dexes) for chain, dexes in (dex_allowlist or {}).items()}

    @property
    def supported_chains(self) -> frozenset[str]:
        return self._chains

    @property
    def timeout(self) -> float:
        return self._timeout

    def supports(self, chain_id: str) -> bool:
        return chain_id in self._chains

    def allows_dex(self, chain_id: str, dex_id: str | None) -> bool:
        return is_supported_dex(dex_id, self._dex_allowlist.get(chain_id))

    async def fetch_candidates(
        self,
        query: SearchQuery,
        chain_id: str,
        deadline: float,
    ) -> AdapterResult:
        """
        Fetch candidates for one chain before ``deadline`` (event loop time).

        Returns:
            AdapterResult; ``status`` is SUCCEEDED only when the upstream
            answered and the answer was understood
        """
        started = loop_time()

        if not self.supports(chain_id):
            return self._result(chain_id, AdapterStatus.UPSTREAM_REJECTED, started, error="chain not supported")

        budget = min(self._timeout, time_left(deadline))
        if budget <= 0:
            return self._result(chain_id, AdapterStatus.TIMEOUT, started, error="deadline already passed")

        try:
            async with asyncio.timeout(budget):
                raw = await self._fetch(query, chain_id)
        except TimeoutError:
            logger.warning(f"{self.name}[{chain_id}]: timed out after {budget:.2f}s")
            return self._result(chain_id, AdapterStatus.TIMEOUT, started, error=f"no response within {budget:.2f}s")
        except TokenSearchError as e:
            status = status_for_error(e)
            logger.warning(f"{self.name}[{chain_id}]: {status.value}: {e}")
            return self._result(chain_id, status, started, error=str(e))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"{self.name}[{chain_id}]: unexpected payload: {e!r}")
            return self._result(chain_id, AdapterStatus.PARSE_ERROR, started, error=f"unexpected payload: {e!r}")
        except Exception as e:
            logger.exception(f"{self.name}[{chain_id}]: unexpected failure")
            return self._result(chain_id, AdapterStatus.UPSTREAM_UNAVAILABLE, started, error=repr(e))

        candidates = tuple(c for c in raw if c.chain_id == chain_id and c.address)
        result = self._result(chain_id, AdapterStatus.SUCCEEDED, started, candidates=candidates)
        logger.debug(f"{self.name}[{chain_id}]: {len(candidates)} candidates in {result.elapsed_ms:.0f}ms")
        return result

    def _result(
        self,
        chain_id: str,
        status: AdapterStatus,
        started: float,
        *,
        candidates: tuple[CandidateToken, ...] = (),
        error: str | None = None,
    ) -> AdapterResult:
        return AdapterResult(
            adapter=self.name,
            chain_id=chain_id,
            status=status,
            candidates=candidates,
            error=error,
            elapsed_ms=(loop_time() - started) * 1000,
        )

    @abstractmethod
    async def _fetch(self, query: SearchQuery, chain_id: str) -> list[CandidateToken]:
        """Query the upstream; may raise, callers map errors to statuses."""

    async def close(self) -> None:
        """Release upstream clients."""
