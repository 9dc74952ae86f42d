"""
Pytest configuration for the Billion Challenge.

Provides fixtures for:
- Settings tuned for fast runs (small sizes, no cooldown)
- Run configurations built from those settings
- Ready-made benchmark results for ranking and reporting tests
"""

from __future__ import annotations

from typing import Callable, Optional, Union

import pytest

from billion_challenge.config import Settings
from billion_challenge.domain.models import BenchmarkResult, NumericKind, NumericResult
from billion_challenge.orchestrator import RunConfig

TEST_SIZE = 1_000


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Tuning knobs are deliberately small and odd so every loop exercises its
    remainder path.
    """
    return Settings(
        benchmark_size=TEST_SIZE,
        benchmark_full_size=10 * TEST_SIZE,
        warmup_runs=1,
        test_runs=2,
        progress_interval=97,
        batch_size=33,
        vector_width=3,
        cache_chunk_size=7,
        max_recursive_size=200,
        workers=2,
        worker_timeout_seconds=60.0,
        cooldown_seconds=0.0,
        dev_cooldown_seconds=0.0,
        log_level="DEBUG",
    )


@pytest.fixture
def fast_config() -> Callable[..., RunConfig]:
    """Factory for run configs without cooldown pauses."""

    def _make(size: int = TEST_SIZE, **overrides) -> RunConfig:
        values = {"warmup_runs": 1, "test_runs": 2, "cooldown_seconds": 0.0}
        values.update(overrides)
        return RunConfig(size=size, **values)

    return _make


@pytest.fixture
def make_result() -> Callable[..., BenchmarkResult]:
    """Factory for succeeded (or failed, when ``error`` is given) results."""

    def _make(
        name: str,
        seconds: float = 0.01,
        value: Union[int, float] = 499_500,
        kind: NumericKind = NumericKind.ARBITRARY,
        error: Optional[str] = None,
        size: int = TEST_SIZE,
    ) -> BenchmarkResult:
        key = name.lower().replace(" ", "_")
        if error is not None:
            return BenchmarkResult.failure(name=name, key=key, size=size, error=error)
        return BenchmarkResult(
            name=name,
            key=key,
            size=size,
            mean_time_seconds=seconds,
            min_time_seconds=seconds,
            max_time_seconds=seconds,
            run_times_seconds=(seconds,),
            result=NumericResult(kind=kind, value=value),
            ops_per_second=size / seconds,
        )

    return _make
