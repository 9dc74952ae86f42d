"""
Typed array strategy: fixed-width batches with numpy.

Each batch is materialised as an ``int64`` array filled with consecutive
values, summed in C, and folded into a fixed-width ``int64`` accumulator.
The accumulator is safe up to 2**63-1, which covers N of a few billion.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from billion_challenge.strategies.abstract import ProgressCallback, check_size

DEFAULT_BATCH_SIZE = 10_000_000


def typed_array(
    n: int,
    progress: Optional[ProgressCallback] = None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    check_size(n)
    total = np.int64(0)
    for start in range(0, n, batch_size):
        end = min(start + batch_size, n)
        batch = np.arange(start, end, dtype=np.int64)
        total += batch.sum(dtype=np.int64)
        if progress is not None:
            progress(end, n)
    return int(total)


__all__ = ["typed_array"]
