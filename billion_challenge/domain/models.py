"""
Domain models for the Billion Challenge.

Defines the measured outcome of one strategy (`BenchmarkResult`), the tagged
numeric value it produced (`NumericResult`), and the terminal ranked artifact
of a suite execution (`SuiteReport`). All models are frozen: they are created
once and only read by ranking and reporting.
"""
from __future__ import annotations

import math
from enum import Enum
from numbers import Integral, Real
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field, computed_field

FROZEN = {"frozen": True, "populate_by_name": True}


class NumericKind(str, Enum):
    """Representation a strategy computes in."""

    FIXED = "fixed"
    ARBITRARY = "arbitrary"


class NumericResult(BaseModel):
    """
    Tagged union of a fixed-width or arbitrary-precision result.

    Values from different kinds are compared through `canonical`, the plain
    decimal string of the number.
    """

    kind: NumericKind
    value: Union[int, float]

    model_config = FROZEN

    @classmethod
    def from_value(cls, value: object, kind: NumericKind) -> "NumericResult":
        # numpy scalars register with the numbers ABCs
        if isinstance(value, bool) or not isinstance(value, Real):
            raise TypeError(f"strategy returned a non-numeric value: {value!r}")
        if isinstance(value, Integral):
            return cls(kind=kind, value=int(value))
        return cls(kind=kind, value=float(value))

    @property
    def canonical(self) -> str:
        value = self.value
        if isinstance(value, float):
            if math.isfinite(value) and value.is_integer():
                return str(int(value))
            return repr(value)
        return str(value)


class BenchmarkResult(BaseModel):
    """
    Measured outcome of one strategy for one suite run.
    """

    name: str = Field(..., description="Display name of the strategy.")
    key: str = Field(..., description="Registry key of the strategy.")
    size: int = Field(..., ge=0, description="Problem size N.")
    mean_time_seconds: float = Field(math.inf, description="Mean of measured runs.")
    min_time_seconds: float = Field(math.inf)
    max_time_seconds: float = Field(math.inf)
    stddev_time_seconds: float = Field(0.0)
    run_times_seconds: Tuple[float, ...] = Field(default_factory=tuple)
    result: Optional[NumericResult] = None
    memory_delta_bytes: int = Field(0, description="RSS after minus before measurement.")
    peak_rss_bytes: Optional[int] = None
    ops_per_second: float = 0.0
    error: Optional[str] = None
    error_type: Optional[str] = None
    failed_phase: Optional[str] = None

    model_config = FROZEN

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(
        cls,
        name: str,
        key: str,
        size: int,
        error: str,
        error_type: Optional[str] = None,
        failed_phase: Optional[str] = None,
    ) -> "BenchmarkResult":
        """Failed result: infinite time, no throughput, no numeric value."""
        return cls(
            name=name,
            key=key,
            size=size,
            error=error,
            error_type=error_type,
            failed_phase=failed_phase,
        )


class RankedResult(BaseModel):
    rank: int = Field(..., ge=1)
    result: BenchmarkResult
    speedup: float

    model_config = FROZEN


class SuiteReport(BaseModel):
    """
    Ranked and verified outcome of one suite execution.

    `verified` is None when no strategy succeeded.
    """

    size: int = Field(0, ge=0)
    ranked: Tuple[RankedResult, ...] = Field(default_factory=tuple)
    failed: Tuple[BenchmarkResult, ...] = Field(default_factory=tuple)
    verified: Optional[bool] = None
    distinct_values: Tuple[str, ...] = Field(default_factory=tuple)
    total_seconds: float = 0.0

    model_config = FROZEN

    @property
    def has_successes(self) -> bool:
        return bool(self.ranked)

    @property
    def fastest(self) -> Optional[BenchmarkResult]:
        return self.ranked[0].result if self.ranked else None

    def results(self) -> List[BenchmarkResult]:
        """All results, ranked first then failed."""
        return [entry.result for entry in self.ranked] + list(self.failed)


__all__ = [
    "BenchmarkResult",
    "NumericKind",
    "NumericResult",
    "RankedResult",
    "SuiteReport",
]
