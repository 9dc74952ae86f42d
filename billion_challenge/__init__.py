"""
1 Billion Challenge - micro-benchmark suite for summing the integers 0..N-1.

This package measures and ranks different Python strategies for the same
computation, including:

- Closed-form formulas (exact integer and float64 variants)
- Unrolled, simulated-vectorised and cache-friendly loops
- numpy typed-array batching
- Multi-process parallel summation
- Recursion (small N only)

Every suite run verifies that all successful strategies agree on the result.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from billion_challenge.config import Settings, get_settings
from billion_challenge.domain.models import BenchmarkResult, NumericKind, NumericResult, SuiteReport
from billion_challenge.orchestrator import (
    BenchmarkRunner,
    RunConfig,
    available_strategies,
    run_strategies,
    strategy_registry,
)
from billion_challenge.ranking import rank_results, verify_results
from billion_challenge.strategies.abstract import Strategy
from billion_challenge.strategies.parallel import ParallelWorkerSum, WorkRange, split_work_ranges
from billion_challenge.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Orchestration
    "BenchmarkRunner",
    "RunConfig",
    "available_strategies",
    "run_strategies",
    "strategy_registry",
    # Ranking and verification
    "rank_results",
    "verify_results",
    # Domain
    "BenchmarkResult",
    "NumericKind",
    "NumericResult",
    "Strategy",
    "SuiteReport",
    # Parallel partitioner
    "ParallelWorkerSum",
    "WorkRange",
    "split_work_ranges",
    # Logging
    "configure_logging",
    "get_logger",
]
