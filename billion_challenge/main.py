from __future__ import annotations

import os
import sys
import threading
from typing import List, Optional

import typer
from rich.console import Console

from billion_challenge.config import Settings, get_settings
from billion_challenge.errors import FatalProcessError
from billion_challenge.orchestrator import (
    RunConfig,
    resolve_strategies,
    run_strategies,
    strategy_registry,
)
from billion_challenge.reporter import describe_environment, print_header, print_report, progress_bar
from billion_challenge.utils.logging import configure_logging, get_logger

app = typer.Typer(help="1 Billion Challenge: benchmark strategies for summing 0..N-1.")
log = get_logger(__name__)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"size={settings.benchmark_size} full_size={settings.benchmark_full_size} "
        f"warmup={settings.warmup_runs} runs={settings.test_runs} "
        f"workers={settings.workers or os.cpu_count()} "
        f"worker_timeout={settings.worker_timeout_seconds:g}s batch={settings.batch_size}"
    )


@app.command("list")
def list_strategies() -> None:
    """
    List available strategies.
    """
    for key, strategy in strategy_registry().items():
        typer.echo(f"{key:<18} {strategy.description}")


@app.command()
def run(
    full: bool = typer.Option(False, "--full", help="Run the full challenge (1,000,000,000 numbers)."),
    size: Optional[int] = typer.Option(
        None, "--size", "-n", min=0, help="Explicit problem size N (overrides --full)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress and debug logs."),
    dev: bool = typer.Option(
        False, "--dev", help="Development mode: no warmup, no manual GC, short pauses."
    ),
    strategy: Optional[List[str]] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Strategy key to run (repeatable; default all). See `list`.",
    ),
    runs: Optional[int] = typer.Option(None, "--runs", min=1, help="Measured runs per strategy."),
    warmup_runs: Optional[int] = typer.Option(
        None, "--warmup-runs", min=0, help="Warmup runs per strategy."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Worker processes for the parallel strategy."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    progress_timed: bool = typer.Option(
        False, "--progress-timed", help="Also show progress during timed runs."
    ),
) -> None:
    """
    Run the benchmark suite and print the ranking.
    """
    settings = get_settings()
    configure_logging(level="DEBUG" if verbose else settings.log_level, json_logs=settings.log_json)
    if workers is not None:
        settings = settings.model_copy(update={"workers": workers})

    strategy_keys = strategy or []
    try:
        resolve_strategies(strategy_keys, settings)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--strategy") from exc

    config = RunConfig.from_settings(
        settings,
        full=full,
        size=size,
        strategy_keys=strategy_keys,
        development=dev,
        verbose=verbose,
        progress_during_measurement=progress_timed,
        warmup_runs=warmup_runs,
        test_runs=runs,
    )

    try:
        _run_suite(config, settings, json_output=json_output, show_full_hint=not full)
    except KeyboardInterrupt:
        typer.echo("\nBenchmark interrupted by user.", err=True)
        raise typer.Exit(code=0)


def _run_suite(config: RunConfig, settings: Settings, json_output: bool, show_full_hint: bool) -> None:
    console = Console()
    if not json_output:
        print_header(describe_environment(), config, console)

    try:
        report = run_strategies(
            config,
            settings=settings,
            progress_factory=None if json_output else (lambda label: progress_bar(label, console)),
        )
    except Exception as exc:
        log.critical("[FATAL] Benchmark suite aborted", exc_info=exc)
        raise FatalProcessError(f"benchmark suite aborted: {exc}") from exc

    if json_output:
        typer.echo(report.model_dump_json(indent=2))
    else:
        print_report(report, console)
        if show_full_hint:
            console.print("\nReady for the full challenge? Run: billion-challenge run --full")


def _exit_on_thread_exception(args: threading.ExceptHookArgs) -> None:
    if issubclass(args.exc_type, SystemExit):
        return
    thread_name = args.thread.name if args.thread is not None else "unknown"
    log.critical(
        f"[FATAL] Uncaught exception in thread {thread_name}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )
    os._exit(1)


def main() -> None:
    threading.excepthook = _exit_on_thread_exception
    try:
        app()
    except FatalProcessError:
        sys.exit(1)


if __name__ == "__main__":
    main()
