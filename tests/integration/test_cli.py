"""
End-to-end tests for the command line interface.

The CLI is driven through typer's CliRunner with fast settings so the whole
suite (configuration, orchestration, ranking, rendering) runs in-process.
"""

from __future__ import annotations

import json
import sys
import threading

import pytest
from typer.testing import CliRunner

from billion_challenge import main
from billion_challenge.errors import FatalProcessError

pytestmark = pytest.mark.integration

SIZE_SUM = "499500"


@pytest.fixture
def cli(monkeypatch, test_settings) -> CliRunner:
    monkeypatch.setattr(main, "get_settings", lambda: test_settings)
    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)
    return CliRunner()


def test_run_json_report(cli) -> None:
    result = cli.invoke(
        main.app,
        ["run", "--size", "1000", "--dev", "--runs", "2", "-s", "exact_formula", "-s", "simple_loop", "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["size"] == 1000
    assert payload["verified"] is True
    assert payload["distinct_values"] == [SIZE_SUM]
    assert {entry["result"]["key"] for entry in payload["ranked"]} == {"exact_formula", "simple_loop"}
    assert all(len(entry["result"]["run_times_seconds"]) == 2 for entry in payload["ranked"])
    assert payload["failed"] == []


def test_run_table_report(cli) -> None:
    result = cli.invoke(main.app, ["run", "--size", "1000", "--dev", "--runs", "1", "-s", "builtin_sum"])

    assert result.exit_code == 0, result.output
    assert "Testing with 1,000 numbers" in result.stdout
    assert "All results verified as correct!" in result.stdout
    assert "run --full" in result.stdout


def test_run_full_omits_full_challenge_hint(cli) -> None:
    result = cli.invoke(main.app, ["run", "--full", "--dev", "--runs", "1", "-s", "exact_formula"])

    assert result.exit_code == 0, result.output
    assert "Testing with 10,000 numbers" in result.stdout
    assert "run --full" not in result.stdout


def test_run_parallel_workers_with_worker_override(cli) -> None:
    result = cli.invoke(
        main.app,
        ["run", "--size", "1000", "--dev", "--runs", "1", "--workers", "3", "-s", "parallel_workers", "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["ranked"][0]["result"]["result"]["value"] == int(SIZE_SUM)


def test_unknown_strategy_is_a_usage_error(cli) -> None:
    result = cli.invoke(main.app, ["run", "--size", "10", "-s", "quantum_sum"])

    assert result.exit_code == 2
    assert "Unknown strategy" in result.output


def test_list_shows_every_strategy(cli) -> None:
    result = cli.invoke(main.app, ["list"])

    assert result.exit_code == 0
    for key in ("exact_formula", "float_formula", "parallel_workers", "tail_recursive", "typed_array"):
        assert key in result.stdout


def test_info_shows_effective_settings(cli) -> None:
    result = cli.invoke(main.app, ["info"])

    assert result.exit_code == 0
    assert "size=1000" in result.stdout
    assert "workers=2" in result.stdout


def test_interrupt_exits_cleanly(cli, monkeypatch) -> None:
    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(main, "run_strategies", interrupted)

    result = cli.invoke(main.app, ["run", "--size", "10", "--json"])

    assert result.exit_code == 0
    assert "Benchmark interrupted by user." in result.output


def test_interrupt_while_rendering_report_exits_cleanly(cli, monkeypatch) -> None:
    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(main, "print_report", interrupted)

    result = cli.invoke(main.app, ["run", "--size", "10", "--dev", "--runs", "1", "-s", "exact_formula"])

    assert result.exit_code == 0
    assert "Benchmark interrupted by user." in result.output


def test_unexpected_error_is_fatal(cli, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise RuntimeError("registry corrupted")

    monkeypatch.setattr(main, "run_strategies", broken)

    result = cli.invoke(main.app, ["run", "--size", "10", "--json"])

    assert result.exit_code == 1
    assert isinstance(result.exception, FatalProcessError)
    assert isinstance(result.exception.__cause__, RuntimeError)


def test_main_exits_non_zero_on_fatal_error(cli, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise RuntimeError("registry corrupted")

    monkeypatch.setattr(main, "run_strategies", broken)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(sys, "argv", ["billion-challenge", "run", "--size", "10", "--json"])

    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 1
