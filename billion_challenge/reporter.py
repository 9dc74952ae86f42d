from __future__ import annotations

import contextlib
import math
import os
import platform
import sys
from typing import Dict, Iterator, Optional

import psutil
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from billion_challenge.domain.models import NumericResult, SuiteReport
from billion_challenge.orchestrator import RunConfig
from billion_challenge.strategies.abstract import ProgressCallback


def format_time(seconds: float) -> str:
    if not math.isfinite(seconds):
        return "n/a"
    ms = seconds * 1000
    if ms < 1000:
        return f"{ms:.2f}ms"
    if ms < 60_000:
        return f"{seconds:.2f}s"
    return f"{seconds / 60:.2f}m"


def format_bytes(num_bytes: Optional[int]) -> str:
    if num_bytes is None:
        return "N/A"
    return f"{num_bytes / (1024 * 1024):.1f}MB"


def format_value(result: Optional[NumericResult]) -> str:
    if result is None:
        return "-"
    canonical = result.canonical
    if canonical.lstrip("-").isdigit():
        canonical = f"{int(canonical):,}"
    return f"{canonical} ({result.kind.value})"


def _read_first_line(path: str) -> Optional[str]:
    try:
        with open(path, "r") as f:
            return f.read().strip()
    except (FileNotFoundError, PermissionError):
        return None


def _format_memory_limit(mem_bytes: int) -> str:
    mem_gb = mem_bytes / (1024**3)
    if mem_gb >= 1:
        return f"{mem_gb:.1f}GB"
    return f"{mem_bytes / (1024**2):.0f}MB"


def get_container_resources() -> Dict[str, Optional[str]]:
    """
    Get container resource constraints.

    Reads from environment variables or cgroup files when running in a container.
    Returns dict with 'cpus' and 'memory' keys.
    """
    resources: Dict[str, Optional[str]] = {
        "cpus": os.environ.get("BENCHMARK_CPU_LIMIT"),
        "memory": os.environ.get("BENCHMARK_MEMORY_LIMIT"),
    }

    # cgroup v2, then v1
    if resources["cpus"] is None:
        content = _read_first_line("/sys/fs/cgroup/cpu.max")
        parts = content.split() if content else []
        if len(parts) == 2 and parts[0] != "max":
            with contextlib.suppress(ValueError):
                resources["cpus"] = f"{int(parts[0]) / int(parts[1]):.1f}"
    if resources["cpus"] is None:
        quota = _read_first_line("/sys/fs/cgroup/cpu/cpu.cfs_quota_us")
        period = _read_first_line("/sys/fs/cgroup/cpu/cpu.cfs_period_us")
        with contextlib.suppress(TypeError, ValueError):
            if int(quota) > 0:
                resources["cpus"] = f"{int(quota) / int(period):.1f}"

    if resources["memory"] is None:
        content = _read_first_line("/sys/fs/cgroup/memory.max")
        if content and content != "max":
            with contextlib.suppress(ValueError):
                resources["memory"] = _format_memory_limit(int(content))
    if resources["memory"] is None:
        content = _read_first_line("/sys/fs/cgroup/memory/memory.limit_in_bytes")
        with contextlib.suppress(TypeError, ValueError):
            mem_bytes = int(content)
            # cgroup v1 reports "unlimited" as a huge page-aligned value
            if mem_bytes < 9223372036854771712:
                resources["memory"] = _format_memory_limit(mem_bytes)

    return resources


def describe_environment() -> Dict[str, Optional[str]]:
    """Interpreter, platform and hardware details for the report header."""
    resources = get_container_resources()
    return {
        "python": f"{platform.python_implementation()} {platform.python_version()}",
        "platform": f"{sys.platform} {platform.machine()}",
        "cpus": str(os.cpu_count() or 1),
        "cpu_model": platform.processor() or "Unknown",
        "memory": f"{psutil.virtual_memory().total / (1024**3):.2f}GB total",
        "container_cpus": resources["cpus"],
        "container_memory": resources["memory"],
    }


def print_header(
    environment: Dict[str, Optional[str]], config: RunConfig, console: Optional[Console] = None
) -> None:
    console = console or Console()
    console.rule("[bold]1 BILLION CHALLENGE - PYTHON PERFORMANCE SUITE")
    console.print(f"Python: {environment['python']}")
    console.print(f"Platform: {environment['platform']}")
    console.print(f"CPUs: {environment['cpus']} ({environment['cpu_model']})")
    console.print(f"Memory: {environment['memory']}")
    if environment.get("container_cpus") or environment.get("container_memory"):
        console.print(
            f"[dim]Container limits: CPU {environment.get('container_cpus') or '-'} │ "
            f"Memory {environment.get('container_memory') or '-'}[/dim]"
        )
    console.rule()
    console.print(f"Testing with [bold]{config.size:,}[/bold] numbers")
    console.print(f"Mode: {'DEVELOPMENT' if config.development else 'PRODUCTION'}")
    warmup = config.warmup_runs if config.warmup_enabled else 0
    console.print(f"Warmup runs: {warmup}, Test runs: {config.test_runs}")


@contextlib.contextmanager
def progress_bar(label: str, console: Optional[Console] = None) -> Iterator[ProgressCallback]:
    """Rich progress bar exposed as a ``progress(done, total)`` callback."""
    progress = Progress(
        TextColumn("  {task.description}"),
        BarColumn(bar_width=40),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    with progress:
        task_id = progress.add_task(label, total=None)

        def _update(done: int, total: int) -> None:
            progress.update(task_id, completed=done, total=total)

        yield _update


def print_report(report: SuiteReport, console: Optional[Console] = None) -> None:
    """
    Render the ranked suite report as a rich table followed by a summary.
    """
    console = console or Console()

    fastest = report.fastest
    if fastest is None:
        console.print("[red]No successful benchmarks to display.[/red]")
        _print_failures(report, console)
        return

    table = Table(
        title="Performance Ranking",
        box=box.ROUNDED,
        caption="Sorted by mean time (ascending)",
    )
    table.add_column("Rank", justify="right", style="blue")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Time", justify="right", style="green")
    table.add_column("Ops/Second", justify="right", style="bold green")
    table.add_column("Memory", justify="right", style="yellow")
    table.add_column("Speedup", justify="right", style="red")
    table.add_column("Result", justify="right", style="magenta")

    for entry in report.ranked:
        res = entry.result
        method = f"🏆 {res.name}" if entry.rank == 1 else res.name
        table.add_row(
            str(entry.rank),
            method,
            format_time(res.mean_time_seconds),
            f"{res.ops_per_second:.2e}",
            format_bytes(res.memory_delta_bytes),
            f"{entry.speedup:.2f}x",
            format_value(res.result),
        )

    console.print(table)
    _print_failures(report, console)

    console.print("\n[bold]Summary[/bold]")
    console.print(f"   Winner: {fastest.name}")
    console.print(f"   Best Time: {format_time(fastest.mean_time_seconds)}")
    console.print(f"   Operations/sec: {fastest.ops_per_second:.2e}")
    console.print(f"   Memory Usage: {format_bytes(fastest.memory_delta_bytes)}")

    if report.verified:
        console.print("[green]✅ All results verified as correct![/green]")
    else:
        console.print(
            "[bold red]⚠️  Results verification failed - algorithms produced different "
            f"results: {', '.join(report.distinct_values)}[/bold red]"
        )

    console.print(f"\nTotal benchmark time: {format_time(report.total_seconds)}")


def _print_failures(report: SuiteReport, console: Console) -> None:
    if not report.failed:
        return
    console.print("\n[bold red]Failed benchmarks:[/bold red]")
    for res in report.failed:
        phase = f" ({res.failed_phase})" if res.failed_phase else ""
        console.print(f"  • {escape(res.name)}{phase}: {escape(res.error or '')}")
