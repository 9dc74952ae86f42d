"""
Orchestrator for running summation strategies through the benchmark protocol.

Usage (example from CLI):
    from billion_challenge.orchestrator import RunConfig, run_strategies

    config = RunConfig(size=1_000_000, strategy_keys=("exact_formula", "simple_loop"))
    report = run_strategies(config)
    print(report.fastest)

Strategies run strictly one after another. For each one the runner performs a
warmup phase on a reduced input, then the timed measurement runs at full size,
and converts any exception into a failed `BenchmarkResult` so the remaining
strategies still run.
"""

from __future__ import annotations

import contextlib
import gc
import statistics
import time
from dataclasses import dataclass
from functools import partial
from typing import (
    Callable,
    ContextManager,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
)

from billion_challenge.config import Settings, get_settings
from billion_challenge.domain.models import BenchmarkResult, NumericKind, NumericResult, SuiteReport
from billion_challenge.errors import StrategyComputationError
from billion_challenge.ranking import rank_results
from billion_challenge.strategies.abstract import ProgressCallback, Strategy
from billion_challenge.strategies.formula import exact_formula, float_formula
from billion_challenge.strategies.loops import (
    builtin_sum,
    cache_friendly,
    simple_loop,
    tail_recursive,
    unrolled_loop,
    vectorized_loop,
)
from billion_challenge.strategies.parallel import ParallelWorkerSum
from billion_challenge.strategies.typed_array import typed_array
from billion_challenge.utils.logging import get_logger
from billion_challenge.utils.profiler import profile_block

log = get_logger(__name__)

PEAK_SAMPLE_INTERVAL_MS = 50

ProgressFactory = Callable[[str], ContextManager[ProgressCallback]]


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable configuration of one suite execution.

    Attributes
    ----------
    size : int
        Problem size N used for measured runs.
    strategy_keys : tuple[str, ...]
        Strategies to run; empty or ``("all",)`` selects every strategy.
    warmup_runs, test_runs : int
        Number of discarded warmup calls and timed calls per strategy.
    development : bool
        Skip warmup and manual garbage collection, shorter cooldown.
    verbose : bool
        Enable progress reporting (warmup only, unless
        ``progress_during_measurement`` is also set).
    """

    size: int
    strategy_keys: Tuple[str, ...] = ()
    warmup_runs: int = 3
    test_runs: int = 5
    development: bool = False
    verbose: bool = False
    progress_during_measurement: bool = False
    warmup_size_cap: int = 1_000_000
    warmup_divisor: int = 100
    cooldown_seconds: float = 1.0
    track_peak_memory: bool = False

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"size must be non-negative, got {self.size}")
        if self.test_runs < 1:
            raise ValueError(f"test_runs must be at least 1, got {self.test_runs}")
        if self.warmup_runs < 0:
            raise ValueError(f"warmup_runs must be non-negative, got {self.warmup_runs}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        full: bool = False,
        size: Optional[int] = None,
        strategy_keys: Iterable[str] = (),
        development: bool = False,
        verbose: bool = False,
        progress_during_measurement: bool = False,
        warmup_runs: Optional[int] = None,
        test_runs: Optional[int] = None,
    ) -> "RunConfig":
        """Build a config from settings plus CLI flags; explicit arguments win."""
        if size is None:
            size = settings.benchmark_full_size if full else settings.benchmark_size
        return cls(
            size=size,
            strategy_keys=tuple(strategy_keys),
            warmup_runs=settings.warmup_runs if warmup_runs is None else warmup_runs,
            test_runs=settings.test_runs if test_runs is None else test_runs,
            development=development,
            verbose=verbose,
            progress_during_measurement=progress_during_measurement,
            warmup_size_cap=settings.warmup_size_cap,
            warmup_divisor=settings.warmup_divisor,
            cooldown_seconds=(
                settings.dev_cooldown_seconds if development else settings.cooldown_seconds
            ),
            track_peak_memory=settings.track_peak_memory,
        )

    @property
    def warmup_size(self) -> int:
        return min(self.size // self.warmup_divisor, self.warmup_size_cap)

    @property
    def warmup_enabled(self) -> bool:
        return not self.development and self.warmup_runs > 0


def strategy_registry(settings: Optional[Settings] = None) -> Dict[str, Strategy]:
    """Registry of available strategies, in execution order."""
    settings = settings or get_settings()
    interval = settings.progress_interval
    max_recursive = settings.max_recursive_size

    strategies = [
        Strategy(
            key="float_formula",
            name="Float Formula",
            func=float_formula,
            numeric_kind=NumericKind.FIXED,
            description="N*(N-1)/2 in float64; may round once the product passes 2**53.",
        ),
        Strategy(
            key="exact_formula",
            name="Exact Formula",
            func=exact_formula,
            description="N*(N-1)//2 with Python ints; the exact reference.",
        ),
        Strategy(
            key="unrolled_loop",
            name="Unrolled Loop",
            func=partial(unrolled_loop, progress_interval=interval),
            description="Sixteen additions per iteration plus a scalar remainder loop.",
        ),
        Strategy(
            key="vectorized_loop",
            name="Vectorized Loop",
            func=partial(
                vectorized_loop,
                vector_width=settings.vector_width,
                progress_interval=interval,
            ),
            description="Simulated SIMD lanes: base*width + lane offsets per block.",
        ),
        Strategy(
            key="simple_loop",
            name="Simple Loop",
            func=partial(simple_loop, progress_interval=interval),
            description="One addition per iteration.",
        ),
        Strategy(
            key="cache_friendly",
            name="Cache Friendly",
            func=partial(
                cache_friendly,
                chunk_size=settings.cache_chunk_size,
                progress_interval=interval,
            ),
            description="Sequential fixed-size chunks sized to whole cache lines.",
        ),
        Strategy(
            key="builtin_sum",
            name="Builtin Sum",
            func=partial(builtin_sum, progress_interval=interval),
            description="sum(range(...)) evaluated in C.",
        ),
        Strategy(
            key="typed_array",
            name="Typed Array",
            func=partial(typed_array, batch_size=settings.batch_size),
            numeric_kind=NumericKind.FIXED,
            description="numpy int64 batches summed into a fixed-width accumulator.",
        ),
        Strategy(
            key="parallel_workers",
            name="Parallel Workers",
            func=ParallelWorkerSum(
                workers=settings.workers,
                timeout_seconds=settings.worker_timeout_seconds,
            ),
            description="One spawned process per CPU over contiguous ranges.",
        ),
        Strategy(
            key="tail_recursive",
            name="Tail Recursive",
            func=partial(tail_recursive, max_size=max_recursive),
            description=f"Accumulator recursion; only for N <= {max_recursive}.",
            applies_to=lambda n: n <= max_recursive,
        ),
    ]
    return {strategy.key: strategy for strategy in strategies}


def available_strategies(settings: Optional[Settings] = None) -> List[str]:
    """List available strategy keys."""
    return sorted(strategy_registry(settings))


def resolve_strategies(
    keys: Iterable[str], settings: Optional[Settings] = None
) -> List[Strategy]:
    """Resolve strategy keys in registry order; no keys or ``all`` selects everything."""
    registry = strategy_registry(settings)
    names = list(keys)
    if not names or names == ["all"]:
        return list(registry.values())

    unknown = [name for name in names if name not in registry]
    if unknown:
        raise ValueError(
            f"Unknown strategy '{', '.join(unknown)}'. Available: {', '.join(registry)}"
        )
    selected = set(names)
    return [strategy for key, strategy in registry.items() if key in selected]


class BenchmarkRunner:
    """
    Measures strategies one at a time with the warmup/measurement protocol.

    Parameters
    ----------
    config : RunConfig
        Immutable run configuration.
    progress_factory : callable | None
        Returns a context manager yielding a progress callback for a label.
        Only used when ``config.verbose`` is set.
    """

    def __init__(self, config: RunConfig, progress_factory: Optional[ProgressFactory] = None) -> None:
        self.config = config
        self._progress_factory = progress_factory

    @contextlib.contextmanager
    def _progress(self, label: str, enabled: bool) -> Iterator[Optional[ProgressCallback]]:
        if not enabled or self._progress_factory is None:
            yield None
            return
        with self._progress_factory(label) as callback:
            yield callback

    def _invoke(
        self,
        strategy: Strategy,
        n: int,
        phase: str,
        progress: Optional[ProgressCallback],
    ) -> object:
        try:
            return strategy(n, progress)
        except Exception as exc:  # noqa: BLE001 - isolated per strategy
            raise StrategyComputationError(strategy.name, phase, str(exc)) from exc

    def _warmup(self, strategy: Strategy) -> None:
        size = self.config.warmup_size
        log.info(
            f"[WARMUP] {strategy.name}",
            extra={"strategy": strategy.key, "runs": self.config.warmup_runs, "warmup_size": size},
        )
        with self._progress(f"{strategy.name} (warmup)", self.config.verbose) as progress:
            for _ in range(self.config.warmup_runs):
                self._invoke(strategy, size, "warmup", progress)

    def _measure(self, strategy: Strategy) -> BenchmarkResult:
        config = self.config
        times: List[float] = []
        value: object = None
        sample_interval = PEAK_SAMPLE_INTERVAL_MS if config.track_peak_memory else None
        timed_progress = config.verbose and config.progress_during_measurement

        with self._progress(strategy.name, timed_progress) as progress, profile_block(
            strategy.key, sample_interval_ms=sample_interval
        ) as stats:
            for run in range(1, config.test_runs + 1):
                if not config.development:
                    # twice: the first pass may only release objects with finalizers
                    gc.collect()
                    gc.collect()
                start = time.perf_counter()
                value = self._invoke(strategy, config.size, "measurement", progress)
                elapsed = time.perf_counter() - start
                times.append(elapsed)
                log.info(
                    f"[RUN {run}/{config.test_runs}] {strategy.name}",
                    extra={"strategy": strategy.key, "run": run, "seconds": round(elapsed, 6)},
                )

        try:
            numeric = NumericResult.from_value(value, strategy.numeric_kind)
        except TypeError as exc:
            raise StrategyComputationError(strategy.name, "measurement", str(exc)) from exc

        mean = statistics.mean(times)
        return BenchmarkResult(
            name=strategy.name,
            key=strategy.key,
            size=config.size,
            mean_time_seconds=mean,
            min_time_seconds=min(times),
            max_time_seconds=max(times),
            stddev_time_seconds=statistics.stdev(times) if len(times) > 1 else 0.0,
            run_times_seconds=tuple(times),
            result=numeric,
            memory_delta_bytes=stats.memory_delta_bytes,
            peak_rss_bytes=stats.peak_rss_bytes,
            ops_per_second=config.size / mean if mean > 0 else 0.0,
        )

    def run_strategy(self, strategy: Strategy) -> BenchmarkResult:
        """Warm up and measure one strategy; failures become a failed result."""
        log.info(
            f"[STRATEGY START] {strategy.name}",
            extra={"strategy": strategy.key, "size": self.config.size},
        )
        try:
            if self.config.warmup_enabled:
                self._warmup(strategy)
            result = self._measure(strategy)
        except StrategyComputationError as exc:
            cause = exc.__cause__ or exc
            log.error(
                f"[STRATEGY FAILED] {strategy.name}",
                exc_info=cause,
                extra={"strategy": strategy.key, "phase": exc.phase},
            )
            return BenchmarkResult.failure(
                name=strategy.name,
                key=strategy.key,
                size=self.config.size,
                error=str(cause),
                error_type=type(cause).__name__,
                failed_phase=exc.phase,
            )

        log.info(
            f"[STRATEGY SUCCESS] {strategy.name}",
            extra={
                "strategy": strategy.key,
                "mean_seconds": round(result.mean_time_seconds, 6),
                "ops_per_second": round(result.ops_per_second, 2),
            },
        )
        return result

    def run_suite(self, strategies: Sequence[Strategy]) -> List[BenchmarkResult]:
        """Run applicable strategies sequentially with a cooldown between them."""
        config = self.config
        applicable = []
        for strategy in strategies:
            if strategy.applies_to(config.size):
                applicable.append(strategy)
            else:
                log.info(
                    f"[SKIPPED] {strategy.name} does not apply to N={config.size:,}",
                    extra={"strategy": strategy.key},
                )

        results: List[BenchmarkResult] = []
        for index, strategy in enumerate(applicable, start=1):
            log.info(f"{'=' * 60}")
            log.info(f"[{index}/{len(applicable)}] {strategy.name}", extra={"strategy": strategy.key})
            results.append(self.run_strategy(strategy))

            if not config.development:
                gc.collect()
            if index < len(applicable) and config.cooldown_seconds > 0:
                time.sleep(config.cooldown_seconds)

        return results


def run_strategies(
    config: RunConfig,
    settings: Optional[Settings] = None,
    progress_factory: Optional[ProgressFactory] = None,
) -> SuiteReport:
    """
    Run the configured strategies and rank the results.

    Parameters
    ----------
    config : RunConfig
        Run configuration (size, strategy selection, protocol knobs).
    settings : Settings | None
        Settings used to build the strategy registry. Defaults to get_settings().
    progress_factory : callable | None
        Progress bar provider for verbose runs.

    Returns
    -------
    SuiteReport
        Ranked, verified results of the suite.
    """
    strategies = resolve_strategies(config.strategy_keys, settings)
    log.info(
        f"[ORCHESTRATOR START] {len(strategies)} strategy/strategies for N={config.size:,}",
        extra={"strategies": [s.key for s in strategies], "size": config.size},
    )

    started = time.perf_counter()
    results = BenchmarkRunner(config, progress_factory).run_suite(strategies)
    report = rank_results(results, size=config.size, total_seconds=time.perf_counter() - started)

    log.info(
        "[ORCHESTRATOR COMPLETE]",
        extra={
            "succeeded": len(report.ranked),
            "failed": len(report.failed),
            "verified": report.verified,
        },
    )
    return report


__all__ = [
    "BenchmarkRunner",
    "RunConfig",
    "available_strategies",
    "resolve_strategies",
    "run_strategies",
    "strategy_registry",
]
