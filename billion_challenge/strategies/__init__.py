"""
Strategies package for the Billion Challenge.

This module re-exports the strategy record, the summation functions and the
parallel partitioner so downstream code can import from
`billion_challenge.strategies` directly.
"""

from billion_challenge.strategies.abstract import (
    ProgressCallback,
    Strategy,
    SummationFunction,
    always_applicable,
)
from billion_challenge.strategies.formula import exact_formula, float_formula
from billion_challenge.strategies.loops import (
    builtin_sum,
    cache_friendly,
    simple_loop,
    tail_recursive,
    unrolled_loop,
    vectorized_loop,
)
from billion_challenge.strategies.parallel import (
    ParallelWorkerSum,
    WorkRange,
    split_work_ranges,
)
from billion_challenge.strategies.typed_array import typed_array

__all__ = [
    # Abstracts
    "ProgressCallback",
    "Strategy",
    "SummationFunction",
    "always_applicable",
    # Summation functions
    "builtin_sum",
    "cache_friendly",
    "exact_formula",
    "float_formula",
    "simple_loop",
    "tail_recursive",
    "typed_array",
    "unrolled_loop",
    "vectorized_loop",
    # Parallel partitioner
    "ParallelWorkerSum",
    "WorkRange",
    "split_work_ranges",
]
