"""
Domain package for the Billion Challenge.

Exports the result models shared by the orchestrator, ranking and reporting.
Keep this package focused on data definitions and validation concerns.
"""

from billion_challenge.domain.models import (
    BenchmarkResult,
    NumericKind,
    NumericResult,
    RankedResult,
    SuiteReport,
)

__all__ = [
    "BenchmarkResult",
    "NumericKind",
    "NumericResult",
    "RankedResult",
    "SuiteReport",
]
