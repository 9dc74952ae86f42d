"""
Strategy interfaces and the strategy record for the Billion Challenge.

A strategy is a plain callable mapping a problem size N to the sum of
``0..N-1``. The orchestrator never inspects how a strategy works; it only
evaluates the `Strategy` records uniformly (name, callable, numeric kind and
applicability predicate).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from billion_challenge.domain.models import NumericKind

ProgressCallback = Callable[[int, int], None]
"""Advisory progress hook called as ``progress(done, total)``."""

Number = Union[int, float]


@runtime_checkable
class SummationFunction(Protocol):
    """
    Common call signature all summation strategies implement.

    Implementations must be stateless: every call owns its accumulator, so
    the same function may be called from several contexts at once.
    """

    def __call__(self, n: int, progress: Optional[ProgressCallback] = None) -> Number:
        """
        Return the sum of the integers ``0..n-1``.

        Parameters
        ----------
        n : int
            Problem size (non-negative).
        progress : callable | None
            Optional progress hook; must not affect the returned value.
        """
        ...


def always_applicable(n: int) -> bool:
    del n
    return True


@dataclass(frozen=True)
class Strategy:
    """
    Tagged strategy record evaluated by the benchmark runner.

    Attributes
    ----------
    key : str
        Short machine-friendly identifier (used by the CLI).
    name : str
        Human-friendly display name.
    func : SummationFunction
        The summation callable.
    numeric_kind : NumericKind
        Whether the result is fixed-width or arbitrary precision.
    description : str
        One-line summary of the approach.
    applies_to : callable
        Predicate deciding whether the strategy may run for a given N.
    """

    key: str
    name: str
    func: SummationFunction
    numeric_kind: NumericKind = NumericKind.ARBITRARY
    description: str = ""
    applies_to: Callable[[int], bool] = field(default=always_applicable)

    def __call__(self, n: int, progress: Optional[ProgressCallback] = None) -> Number:
        return self.func(n, progress)


def check_size(n: int) -> None:
    if n < 0:
        raise ValueError(f"problem size must be non-negative, got {n}")


__all__ = [
    "Number",
    "ProgressCallback",
    "Strategy",
    "SummationFunction",
    "always_applicable",
    "check_size",
]
