from __future__ import annotations

import io
import math

import pytest
from rich.console import Console

from billion_challenge.domain.models import NumericKind, NumericResult
from billion_challenge.orchestrator import RunConfig
from billion_challenge.ranking import rank_results
from billion_challenge.reporter import (
    format_bytes,
    format_time,
    format_value,
    get_container_resources,
    print_header,
    print_report,
    progress_bar,
)


def _console() -> Console:
    return Console(record=True, width=160, file=io.StringIO())


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0.0123, "12.30ms"), (1.5, "1.50s"), (90.0, "1.50m"), (math.inf, "n/a")],
)
def test_format_time(seconds: float, expected: str) -> None:
    assert format_time(seconds) == expected


def test_format_bytes() -> None:
    assert format_bytes(None) == "N/A"
    assert format_bytes(3 * 1024 * 1024) == "3.0MB"


def test_format_value_groups_digits_and_shows_kind() -> None:
    value = NumericResult(kind=NumericKind.FIXED, value=499_999_999_500_000_000.0)
    assert format_value(value) == "499,999,999,500,000,000 (fixed)"
    assert format_value(None) == "-"


def test_print_report_renders_ranking_and_verification(make_result) -> None:
    report = rank_results(
        [make_result("Simple Loop", seconds=0.05), make_result("Exact Formula", seconds=0.001)],
        size=1_000,
        total_seconds=1.25,
    )
    console = _console()

    print_report(report, console)

    text = console.export_text()
    assert "Performance Ranking" in text
    assert "🏆 Exact Formula" in text
    assert "50.00x" in text
    assert "Winner: Exact Formula" in text
    assert "All results verified as correct!" in text
    assert "Total benchmark time: 1.25s" in text


def test_print_report_flags_verification_failure(make_result) -> None:
    report = rank_results(
        [make_result("Good", value=499_500), make_result("Bad", value=499_501, seconds=0.02)]
    )
    console = _console()

    print_report(report, console)

    text = console.export_text()
    assert "Results verification failed" in text
    assert "499500, 499501" in text


def test_print_report_lists_failures_without_markup_injection(make_result) -> None:
    report = rank_results(
        [make_result("Exact Formula"), make_result("Parallel Workers", error="worker [exit] on [0, 10)")]
    )
    console = _console()

    print_report(report, console)

    text = console.export_text()
    assert "Failed benchmarks:" in text
    assert "Parallel Workers: worker [exit] on [0, 10)" in text


def test_print_report_without_successes(make_result) -> None:
    report = rank_results([make_result("Broken", error="boom")])
    console = _console()

    print_report(report, console)

    text = console.export_text()
    assert "No successful benchmarks to display." in text
    assert "Broken: boom" in text


def test_print_report_of_empty_suite_stops_before_summary() -> None:
    console = _console()

    print_report(rank_results([]), console)

    text = console.export_text()
    assert "No successful benchmarks to display." in text
    assert "Summary" not in text
    assert "Winner" not in text


def test_print_header_describes_run(fast_config) -> None:
    environment = {
        "python": "CPython 3.12.1",
        "platform": "linux x86_64",
        "cpus": "8",
        "cpu_model": "Test CPU",
        "memory": "16.00GB total",
        "container_cpus": "2.0",
        "container_memory": None,
    }
    config: RunConfig = fast_config(size=1_000_000, development=True)
    console = _console()

    print_header(environment, config, console)

    text = console.export_text()
    assert "Testing with 1,000,000 numbers" in text
    assert "Mode: DEVELOPMENT" in text
    assert "Warmup runs: 0, Test runs: 2" in text
    assert "Container limits: CPU 2.0" in text


def test_container_resources_prefer_environment(monkeypatch) -> None:
    monkeypatch.setenv("BENCHMARK_CPU_LIMIT", "1.5")
    monkeypatch.setenv("BENCHMARK_MEMORY_LIMIT", "512MB")

    assert get_container_resources() == {"cpus": "1.5", "memory": "512MB"}


def test_progress_bar_yields_callback() -> None:
    with progress_bar("Simple Loop", _console()) as update:
        update(50, 100)
        update(100, 100)
