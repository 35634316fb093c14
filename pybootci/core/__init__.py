"""
Core infrastructure for pybootci.

This module provides shared abstractions and utilities used by the
bootstrap domain package.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing and the worker pool
"""

from pybootci.core.result import Result
from pybootci.core.exceptions import (
    PyBootCIError,
    ValidationError,
    InvalidArgumentError,
    DimensionError,
    StatisticUndefined,
    InsufficientDataError,
    NumericalError,
    DegenerateIntervalError,
    MissingVarianceError,
    BootstrapTimeoutError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyBootCIError",
    "ValidationError",
    "InvalidArgumentError",
    "DimensionError",
    "StatisticUndefined",
    "InsufficientDataError",
    "NumericalError",
    "DegenerateIntervalError",
    "MissingVarianceError",
    "BootstrapTimeoutError",
]
