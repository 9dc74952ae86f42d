"""
Closed-form strategies: O(1) Gauss summation.

`exact_formula` evaluates ``N*(N-1)/2`` with Python integers and is the
reference every other strategy must match. `float_formula` evaluates the same
expression in IEEE-754 double precision; above 2**53 it may round and is
reported as a fixed-width result.
"""

from __future__ import annotations

from typing import Optional

from billion_challenge.strategies.abstract import ProgressCallback, check_size


def exact_formula(n: int, progress: Optional[ProgressCallback] = None) -> int:
    """Arbitrary-precision reference result."""
    check_size(n)
    if progress is not None:
        progress(n, n)
    return n * (n - 1) // 2


def float_formula(n: int, progress: Optional[ProgressCallback] = None) -> float:
    """Fixed-width float64 evaluation; precision-lossy for very large N."""
    check_size(n)
    fn = float(n)
    if progress is not None:
        progress(n, n)
    # n == 0 would otherwise yield -0.0
    return fn * (fn - 1.0) / 2.0 if n else 0.0


__all__ = ["exact_formula", "float_formula"]
