"""
Iterative and recursive summation strategies.

Every loop walks the domain in progress segments of ``progress_interval``
elements and reports between segments, so the inner loops carry no progress
checks. Segmenting never changes the result: each helper below sums an
arbitrary half-open range ``[start, end)`` including its remainder.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Tuple

from billion_challenge.errors import RecursionLimitExceeded
from billion_challenge.strategies.abstract import ProgressCallback, check_size

UNROLL_FACTOR = 16
DEFAULT_PROGRESS_INTERVAL = 50_000_000
DEFAULT_VECTOR_WIDTH = 8
# 16 int32 per 64-byte cache line, 1000 lines per chunk
DEFAULT_CACHE_CHUNK_SIZE = 16 * 1000
DEFAULT_MAX_RECURSIVE_SIZE = 500


def _segments(n: int, interval: int) -> Iterator[Tuple[int, int]]:
    for start in range(0, n, interval):
        yield start, min(start + interval, n)


def _walk(
    n: int,
    progress: Optional[ProgressCallback],
    interval: int,
    summer: Callable[[int, int], int],
) -> int:
    total = 0
    for start, end in _segments(n, interval):
        total += summer(start, end)
        if progress is not None:
            progress(end, n)
    return total


def _plain_range(start: int, end: int) -> int:
    total = 0
    for i in range(start, end):
        total += i
    return total


def _unrolled_range(start: int, end: int) -> int:
    total = 0
    limit = start + (end - start) // UNROLL_FACTOR * UNROLL_FACTOR
    for i in range(start, limit, UNROLL_FACTOR):
        total += (
            i
            + (i + 1)
            + (i + 2)
            + (i + 3)
            + (i + 4)
            + (i + 5)
            + (i + 6)
            + (i + 7)
            + (i + 8)
            + (i + 9)
            + (i + 10)
            + (i + 11)
            + (i + 12)
            + (i + 13)
            + (i + 14)
            + (i + 15)
        )
    for i in range(limit, end):
        total += i
    return total


def simple_loop(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> int:
    """One addition per iteration."""
    check_size(n)
    return _walk(n, progress, progress_interval, _plain_range)


def unrolled_loop(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> int:
    """Sixteen additions per iteration, scalar loop for the remainder."""
    check_size(n)
    return _walk(n, progress, progress_interval, _unrolled_range)


def vectorized_loop(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    vector_width: int = DEFAULT_VECTOR_WIDTH,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> int:
    """
    Simulated SIMD: each block of ``vector_width`` consecutive integers
    starting at ``base`` contributes ``base * width + (0 + 1 + ... + width-1)``.
    """
    check_size(n)
    lane_sum = vector_width * (vector_width - 1) // 2

    def _vector_range(start: int, end: int) -> int:
        total = 0
        limit = start + (end - start) // vector_width * vector_width
        for base in range(start, limit, vector_width):
            total += base * vector_width + lane_sum
        for i in range(limit, end):
            total += i
        return total

    return _walk(n, progress, progress_interval, _vector_range)


def cache_friendly(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    chunk_size: int = DEFAULT_CACHE_CHUNK_SIZE,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> int:
    """Sequential fixed-size chunks, each fully accumulated before the next."""
    check_size(n)

    def _chunked_range(start: int, end: int) -> int:
        total = 0
        for chunk in range(start, end, chunk_size):
            chunk_total = 0
            for i in range(chunk, min(chunk + chunk_size, end)):
                chunk_total += i
            total += chunk_total
        return total

    return _walk(n, progress, progress_interval, _chunked_range)


def builtin_sum(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
) -> int:
    """``sum(range(...))`` per segment; the loop runs in C."""
    check_size(n)
    return _walk(n, progress, progress_interval, lambda start, end: sum(range(start, end)))


def _recurse(n: int, acc: int, current: int) -> int:
    if current >= n:
        return acc
    return _recurse(n, acc + current, current + 1)


def tail_recursive(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    max_size: int = DEFAULT_MAX_RECURSIVE_SIZE,
) -> int:
    """
    Accumulator-passing recursion, one frame per element.

    CPython does not eliminate tail calls, so ``n`` is bounded by
    ``max_size``; larger inputs raise `RecursionLimitExceeded`.
    """
    del progress
    check_size(n)
    if n > max_size:
        raise RecursionLimitExceeded(n, max_size)
    return _recurse(n, 0, 0)


__all__ = [
    "UNROLL_FACTOR",
    "builtin_sum",
    "cache_friendly",
    "simple_loop",
    "tail_recursive",
    "unrolled_loop",
    "vectorized_loop",
]
