"""
Ranking and cross-strategy verification of benchmark results.

Succeeded results are ordered by mean time (fastest first). Each gets a
speedup factor telling how many times faster the winner is than it, so the
winner itself scores 1.0. Verification compares the canonical decimal form of
every succeeded result: a single distinct value passes, anything else points
at an algorithmic bug in at least one strategy.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from billion_challenge.domain.models import BenchmarkResult, RankedResult, SuiteReport
from billion_challenge.utils.logging import get_logger

log = get_logger(__name__)


def _speedup(fastest_time: float, time: float) -> float:
    if fastest_time > 0:
        return time / fastest_time
    return 1.0 if time == fastest_time else math.inf


def verify_results(results: Iterable[BenchmarkResult]) -> Tuple[bool, List[str]]:
    """
    Check that all succeeded results agree on the computed value.

    Returns the verdict and the sorted distinct canonical values.
    """
    distinct = {r.result.canonical for r in results if not r.failed and r.result is not None}
    return len(distinct) == 1, sorted(distinct)


def rank_results(
    results: Sequence[BenchmarkResult],
    size: int = 0,
    total_seconds: float = 0.0,
) -> SuiteReport:
    """
    Build the terminal `SuiteReport` for a list of results.

    Parameters
    ----------
    results : sequence of BenchmarkResult
        Results in execution order, failed ones included.
    size : int
        Problem size N of the suite.
    total_seconds : float
        Wall-clock duration of the whole suite.
    """
    succeeded = [r for r in results if not r.failed]
    failed = tuple(r for r in results if r.failed)

    if not succeeded:
        log.warning("[RANKING] No successful benchmarks", extra={"failed": len(failed)})
        return SuiteReport(size=size, failed=failed, total_seconds=total_seconds)

    ordered = sorted(succeeded, key=lambda r: r.mean_time_seconds)
    fastest_time = ordered[0].mean_time_seconds
    ranked = tuple(
        RankedResult(rank=index, result=result, speedup=_speedup(fastest_time, result.mean_time_seconds))
        for index, result in enumerate(ordered, start=1)
    )

    verified, distinct = verify_results(succeeded)
    if verified:
        log.info("[VERIFICATION] All results agree", extra={"value": distinct[0]})
    else:
        log.warning(
            "[VERIFICATION] Strategies produced different results",
            extra={"distinct_values": distinct},
        )

    return SuiteReport(
        size=size,
        ranked=ranked,
        failed=failed,
        verified=verified,
        distinct_values=tuple(distinct),
        total_seconds=total_seconds,
    )


__all__ = ["rank_results", "verify_results"]
