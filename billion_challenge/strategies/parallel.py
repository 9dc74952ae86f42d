"""
Parallel worker strategy: fan the summation out across processes.

Intent:
- Split ``[0, N)`` into contiguous WorkRanges, one per available CPU.
- Give each range to a freshly spawned process with its own one-way pipe;
  the pipe is the only thing a worker shares with the parent and it carries
  exactly one message back (a partial sum or an error).
- Join all workers against a single wall-clock deadline and sum the partial
  results in ascending range order.

Any worker problem (failed start, reported error, timeout, abnormal exit)
fails the whole strategy with `WorkerFailure`; a partial sum is never
returned.
"""

from __future__ import annotations

import multiprocessing as mp
import os
import time
from dataclasses import dataclass
from multiprocessing.connection import wait
from typing import Any, Callable, Dict, List, Optional

from billion_challenge.errors import WorkerFailure, WorkerFailureCause
from billion_challenge.strategies.abstract import ProgressCallback, check_size
from billion_challenge.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0
TERMINATE_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class WorkRange:
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start


def split_work_ranges(n: int, workers: int) -> List[WorkRange]:
    """
    Partition ``[0, n)`` into at most ``workers`` contiguous ranges.

    The first ``n % count`` ranges take one extra element, so lengths differ
    by at most one. Empty ranges are never produced: ``n < workers`` yields
    ``n`` single-element ranges and ``n == 0`` yields none.
    """
    check_size(n)
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    count = min(workers, n)
    if count == 0:
        return []

    base, remainder = divmod(n, count)
    ranges: List[WorkRange] = []
    start = 0
    for index in range(count):
        end = start + base + (1 if index < remainder else 0)
        ranges.append(WorkRange(start=start, end=end))
        start = end
    return ranges


def _sum_range(start: int, end: int) -> int:
    total = 0
    for i in range(start, end):
        total += i
    return total


def _range_worker(work: WorkRange, channel: Any) -> None:
    """
    Worker process entry point: send one partial result and exit.

    Errors are reported over the channel as ``("error", "Type: message")``.
    """
    try:
        channel.send(("result", _sum_range(work.start, work.end)))
    except Exception as exc:  # noqa: BLE001 - reported to the parent process
        channel.send(("error", f"{type(exc).__name__}: {exc}"))
    finally:
        channel.close()


@dataclass
class _WorkerHandle:
    work: WorkRange
    process: Any
    channel: Any

    def stop(self) -> None:
        """Ask a still running process to terminate (SIGTERM)."""
        if self.process.is_alive():
            log.warning(
                "Terminating parallel worker",
                extra={"start": self.work.start, "end": self.work.end},
            )
            self.process.terminate()

    def reap(self, deadline: float) -> None:
        """Join the process, killing it if it outlives ``deadline``, and release the channel."""
        self.process.join(max(deadline - time.monotonic(), 0))
        if self.process.is_alive():
            log.warning(
                "Killing parallel worker that ignored terminate",
                extra={"start": self.work.start, "end": self.work.end},
            )
            self.process.kill()
            self.process.join()
        self.channel.close()


class ParallelWorkerSum:
    """
    Sum ``0..N-1`` with one process per CPU.

    Processes are started per call from a local multiprocessing context (the
    global start method is never changed), so repeated calls are independent.
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        start_method: str = "spawn",
        target: Callable[[WorkRange, Any], None] = _range_worker,
    ) -> None:
        self.workers = workers or max(os.cpu_count() or 1, 1)
        self.timeout_seconds = timeout_seconds
        self.start_method = start_method
        self.target = target

    def __call__(self, n: int, progress: Optional[ProgressCallback] = None) -> int:
        ranges = split_work_ranges(n, self.workers)
        if not ranges:
            return 0

        ctx = mp.get_context(self.start_method)
        handles: List[_WorkerHandle] = []
        try:
            for work in ranges:
                handles.append(self._spawn(ctx, work))
            partials = self._join(handles, n, progress)
        finally:
            # one shared grace period for all workers
            for handle in handles:
                handle.stop()
            grace_deadline = time.monotonic() + TERMINATE_GRACE_SECONDS
            for handle in handles:
                handle.reap(grace_deadline)

        log.debug(
            "Parallel workers joined",
            extra={"workers": len(ranges), "start_method": self.start_method},
        )
        return sum(partials[work.start] for work in ranges)

    def _spawn(self, ctx: Any, work: WorkRange) -> _WorkerHandle:
        reader, writer = ctx.Pipe(duplex=False)
        process = ctx.Process(
            target=self.target,
            args=(work, writer),
            name=f"sum-worker-{work.start}",
            daemon=True,
        )
        try:
            process.start()
        except Exception as exc:
            reader.close()
            raise WorkerFailure(WorkerFailureCause.SPAWN, work, str(exc)) from exc
        finally:
            # The parent keeps only the read end so a dead worker shows up as EOF.
            writer.close()
        return _WorkerHandle(work=work, process=process, channel=reader)

    def _join(
        self,
        handles: List[_WorkerHandle],
        n: int,
        progress: Optional[ProgressCallback],
    ) -> Dict[int, int]:
        deadline = time.monotonic() + self.timeout_seconds
        pending = {handle.channel: handle for handle in handles}
        partials: Dict[int, int] = {}
        done = 0

        while pending:
            remaining = deadline - time.monotonic()
            ready = wait(list(pending), timeout=remaining) if remaining > 0 else []
            if not ready:
                stalled = next(iter(pending.values()))
                raise WorkerFailure(
                    WorkerFailureCause.TIMEOUT,
                    stalled.work,
                    f"no result within {self.timeout_seconds:g}s "
                    f"({len(pending)} worker(s) outstanding)",
                )
            for channel in ready:
                handle = pending.pop(channel)
                partials[handle.work.start] = self._collect(handle, deadline)
                done += handle.work.size
                if progress is not None:
                    progress(done, n)

        return partials

    def _collect(self, handle: _WorkerHandle, deadline: float) -> int:
        try:
            kind, payload = handle.channel.recv()
        except (EOFError, OSError) as exc:
            handle.process.join(max(deadline - time.monotonic(), 0))
            raise WorkerFailure(
                WorkerFailureCause.EXIT,
                handle.work,
                f"exited with code {handle.process.exitcode} before reporting a result",
            ) from exc

        if kind == "error":
            raise WorkerFailure(WorkerFailureCause.ERROR, handle.work, str(payload))

        handle.process.join(max(deadline - time.monotonic(), 0))
        exitcode = handle.process.exitcode
        if exitcode is None:
            raise WorkerFailure(
                WorkerFailureCause.TIMEOUT, handle.work, "worker did not exit after reporting"
            )
        if exitcode != 0:
            raise WorkerFailure(WorkerFailureCause.EXIT, handle.work, f"exited with code {exitcode}")
        return int(payload)


__all__ = ["ParallelWorkerSum", "WorkRange", "split_work_ranges"]
