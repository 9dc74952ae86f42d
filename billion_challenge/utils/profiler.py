"""
Resource probes wrapped around a measurement phase.

`profile_block` records, for the code run inside it, the resident set size
before and after (hence the memory delta of the phase) and optionally the peak
RSS, sampled by a background thread that also counts the RSS of child
processes (the parallel strategy's workers). Timing stays with the caller.

Peak sampling takes the GIL every interval and therefore perturbs the timing
it surrounds, so it only runs when asked for.

    with profile_block("simple_loop", sample_interval_ms=50) as stats:
        simple_loop(n)
    stats.memory_delta_bytes, stats.peak_rss_bytes
"""

from __future__ import annotations

import contextlib
import threading
from dataclasses import dataclass
from typing import Iterator, Optional

import psutil


@dataclass
class ProfileStats:
    label: str
    rss_before_bytes: int = 0
    rss_after_bytes: int = 0
    peak_rss_bytes: Optional[int] = None

    @property
    def memory_delta_bytes(self) -> int:
        return self.rss_after_bytes - self.rss_before_bytes


def _tree_rss(process: psutil.Process) -> int:
    total = process.memory_info().rss
    for child in process.children(recursive=True):
        # workers may exit between listing and reading
        with contextlib.suppress(psutil.NoSuchProcess, psutil.AccessDenied):
            total += child.memory_info().rss
    return total


class _PeakRssSampler:
    """Daemon thread keeping the highest RSS seen for a process tree."""

    def __init__(self, process: psutil.Process, interval_ms: int, label: str) -> None:
        self.peak = process.memory_info().rss
        self._process = process
        self._interval = interval_ms / 1000.0
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name=f"rss-{label}", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> int:
        self._stop.set()
        self._thread.join(timeout=1.0)
        return self.peak

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.peak = max(self.peak, _tree_rss(self._process))
            except psutil.Error:
                return


@contextlib.contextmanager
def profile_block(label: str, sample_interval_ms: Optional[int] = None) -> Iterator[ProfileStats]:
    """
    Profile the enclosed block.

    Parameters
    ----------
    label : str
        Name of the measured phase (the strategy key).
    sample_interval_ms : int | None
        Peak RSS sampling interval. ``None`` disables sampling and the peak
        is reported as ``max(before, after)``.
    """
    process = psutil.Process()
    stats = ProfileStats(label=label, rss_before_bytes=process.memory_info().rss)
    sampler = (
        _PeakRssSampler(process, sample_interval_ms, label) if sample_interval_ms is not None else None
    )
    if sampler is not None:
        sampler.start()

    try:
        yield stats
    finally:
        peak = sampler.stop() if sampler is not None else stats.rss_before_bytes
        stats.rss_after_bytes = process.memory_info().rss
        stats.peak_rss_bytes = max(peak, stats.rss_after_bytes)


__all__ = ["ProfileStats", "profile_block"]
