"""
Error taxonomy for the Billion Challenge.

Strategy- and worker-level errors are always converted into failed benchmark
results by the orchestrator; only `FatalProcessError` ends the process.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from billion_challenge.strategies.parallel import WorkRange


class BenchmarkError(Exception):
    """Base class for all benchmark harness errors."""


class StrategyComputationError(BenchmarkError):
    """A strategy raised during warmup or measurement."""

    def __init__(self, strategy: str, phase: str, message: str) -> None:
        super().__init__(f"{strategy} failed during {phase}: {message}")
        self.strategy = strategy
        self.phase = phase


class WorkerFailureCause(str, Enum):
    SPAWN = "spawn"
    ERROR = "error"
    TIMEOUT = "timeout"
    EXIT = "exit"


class WorkerFailure(BenchmarkError):
    """
    A parallel worker could not deliver its partial sum.

    The whole parallel strategy fails with this error; the originating
    exception (if any) is chained as ``__cause__``.
    """

    def __init__(
        self,
        cause: WorkerFailureCause,
        work_range: Optional["WorkRange"] = None,
        detail: str = "",
    ) -> None:
        where = f" on [{work_range.start}, {work_range.end})" if work_range is not None else ""
        suffix = f": {detail}" if detail else ""
        super().__init__(f"parallel strategy failed: worker {cause.value}{where}{suffix}")
        self.cause = cause
        self.work_range = work_range
        self.detail = detail


class RecursionLimitExceeded(BenchmarkError, RecursionError):
    """Recursive summation requested above its safe depth threshold."""

    def __init__(self, size: int, threshold: int) -> None:
        super().__init__(
            f"recursive summation of {size} elements exceeds the safe depth of {threshold}"
        )
        self.size = size
        self.threshold = threshold


class FatalProcessError(BenchmarkError):
    """Unexpected top-level fault; the process exits with a non-zero status."""


__all__ = [
    "BenchmarkError",
    "FatalProcessError",
    "RecursionLimitExceeded",
    "StrategyComputationError",
    "WorkerFailure",
    "WorkerFailureCause",
]
