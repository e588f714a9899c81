"""
Search application layer.

- FanOutCoordinator: concurrent adapter calls under a deadline
- TokenSearchService: validation, fan-out, merge and ranking
"""

from .fanout import AdapterReport, FanOutCoordinator, FanOutResult, all_consulted_failed, rollup
from .service import SearchOutcome, TokenSearchService

__all__ = [
    "AdapterReport",
    "FanOutCoordinator",
    "FanOutResult",
    "SearchOutcome",
    "TokenSearchService",
    "all_consulted_failed",
    "rollup",
]
