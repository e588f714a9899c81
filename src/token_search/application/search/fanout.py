"""
FanOutCoordinator - concurrent adapter invocation under a global deadline.

Executes one search by:
1. Planning which adapters serve which of the requested chains
2. Running one task per adapter in a TaskGroup, each adapter's chains concurrently
3. Cancelling whatever is still running at the deadline (plus grace)
4. Rolling per-chain outcomes up into one AdapterReport per adapter
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from token_search.adapters.base import AdapterResult, TokenAdapter
from token_search.adapters.registry import AdapterRegistry
from token_search.core.async_utils import deadline_after, loop_time
from token_search.core.exceptions import AdapterStatus
from token_search.models.token import CandidateToken
from token_search.unified.query_analyzer import SearchQuery

logger = logging.getLogger(__name__)


@dataclass
class AdapterReport:
    """Outcome of one adapter across all chains it was asked about."""

    adapter: str
    status: AdapterStatus
    chains: dict[str, AdapterStatus] = field(default_factory=dict)
    result_count: int = 0
    elapsed_ms: float = 0.0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status.is_failure

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "chains": {chain: status.value for chain, status in self.chains.items()},
            "resultCount": self.result_count,
            "elapsedMs": round(self.elapsed_ms, 1),
            "error": self.error,
        }


@dataclass
class FanOutResult:
    """Candidates and reports keyed by adapter name, in precedence order."""

    candidates: dict[str, list[CandidateToken]] = field(default_factory=dict)
    reports: dict[str, AdapterReport] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        """True when at least one adapter ran and every one of them failed."""
        return all_consulted_failed(self.reports)

    def candidate_lists(self) -> list[list[CandidateToken]]:
        return list(self.candidates.values())


def all_consulted_failed(reports: dict[str, AdapterReport]) -> bool:
    """True when some adapter was consulted (not skipped) and all consulted ones failed."""
    consulted = [r for r in reports.values() if r.status is not AdapterStatus.SKIPPED]
    return bool(consulted) and all(r.failed for r in consulted)


def rollup(adapter: str, chains: Sequence[str], results: dict[str, AdapterResult], elapsed_ms: float) -> AdapterReport:
    """
    Combine per-chain results of one adapter.

    The adapter succeeded only if every chain succeeded; otherwise it takes
    the status and error of the first failing chain in requested order.
    """
    report = AdapterReport(adapter=adapter, status=AdapterStatus.SUCCEEDED, elapsed_ms=elapsed_ms)
    for chain in chains:
        result = results[chain]
        report.chains[chain] = result.status
        report.result_count += len(result.candidates)
        if result.status is not AdapterStatus.SUCCEEDED and report.status is AdapterStatus.SUCCEEDED:
            report.status = result.status
            report.error = result.error
    return report


class FanOutCoordinator:
    """
    Invokes every applicable adapter concurrently.

    A failing or slow adapter never fails the search: late calls are
    cancelled at the deadline and reported as ``timeout``.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        deadline: float = 5.0,
        grace: float = 0.25,
    ) -> None:
        self._registry = registry
        self._deadline = deadline
        self._grace = grace

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    def plan(self, chains: Sequence[str]) -> dict[str, tuple[TokenAdapter, list[str]]]:
        """Map adapter name -> (adapter, requested chains it serves), in precedence order."""
        plan: dict[str, tuple[TokenAdapter, list[str]]] = {}
        for adapter in self._registry:
            served = [chain for chain in chains if adapter.supports(chain)]
            if served:
                plan[adapter.name] = (adapter, served)
        return plan

    async def search(self, query: SearchQuery, chains: Sequence[str]) -> FanOutResult:
        """
        Query all adapters serving ``chains``.

        Args:
            query: Normalized query
            chains: Canonical chain ids

        Returns:
            FanOutResult with one report per registered adapter; adapters
            serving none of ``chains`` are reported as skipped and not called
        """
        plan = self.plan(chains)
        if not plan:
            logger.info(f"No adapter serves chains {list(chains)}; skipping fan-out")
            return self._skipped_only()

        started = loop_time()
        deadline = deadline_after(self._deadline)
        collected: dict[str, dict[str, AdapterResult]] = {name: {} for name in plan}

        async def run_adapter(adapter: TokenAdapter, served: list[str]) -> None:
            slots = collected[adapter.name]

            async def run_chain(chain: str) -> None:
                slots[chain] = await adapter.fetch_candidates(query, chain, deadline)

            await asyncio.gather(*(run_chain(chain) for chain in served))

        try:
            async with asyncio.timeout_at(deadline + self._grace):
                async with asyncio.TaskGroup() as tg:
                    for adapter, served in plan.values():
                        tg.create_task(run_adapter(adapter, served), name=f"fanout:{adapter.name}")
        except TimeoutError:
            missing = [name for name, (_, served) in plan.items() if len(collected[name]) < len(served)]
            logger.warning(f"Fan-out deadline of {self._deadline:.2f}s reached; cancelled: {', '.join(missing)}")

        elapsed_ms = (loop_time() - started) * 1000
        result = FanOutResult()
        for adapter in self._registry:
            name = adapter.name
            if name not in plan:
                result.reports[name] = AdapterReport(adapter=name, status=AdapterStatus.SKIPPED)
                continue

            served = plan[name][1]
            results = collected[name]
            for chain in served:
                if chain not in results:
                    results[chain] = AdapterResult(
                        adapter=name,
                        chain_id=chain,
                        status=AdapterStatus.TIMEOUT,
                        error="cancelled at search deadline",
                        elapsed_ms=elapsed_ms,
                    )

            chain_elapsed = max(r.elapsed_ms for r in results.values())
            result.reports[name] = rollup(name, served, results, chain_elapsed)
            result.candidates[name] = [c for chain in served for c in results[chain].candidates]

        failed = [name for name, report in result.reports.items() if report.failed]
        logger.info(
            f"Fan-out '{query.text}' over {list(chains)}: {len(plan)} adapters, "
            f"failed: {failed or 'none'}, {elapsed_ms:.0f}ms"
        )
        return result

    def _skipped_only(self) -> FanOutResult:
        result = FanOutResult()
        for adapter in self._registry:
            result.reports[adapter.name] = AdapterReport(adapter=adapter.name, status=AdapterStatus.SKIPPED)
        return result
