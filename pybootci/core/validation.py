"""
Input validation utilities for pybootci.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numbers
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pybootci.core.exceptions import (
    DimensionError,
    InvalidArgumentError,
    ValidationError,
)


def check_array(array: ArrayLike, name: str) -> NDArray[Any]:
    """
    Validate and convert a sample to a numpy array.

    Numeric input is converted to float64. Non-numeric records (strings,
    mixed tuples) are kept as an object array: the statistic function is
    the only consumer of individual observations.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray, 1D or 2D, owned by the caller of this function

    Raises:
        ValidationError: If input cannot be converted to an array
        DimensionError: If the result is 0D or more than 2D
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.ndim == 0:
        raise DimensionError(
            f"{name}: expected a sequence of observations, got a scalar"
        )
    if result.ndim > 2:
        raise DimensionError(
            f"{name}: expected 1D or 2D array, got {result.ndim}D "
            f"with shape {result.shape}"
        )

    if np.issubdtype(result.dtype, np.number) or result.dtype == np.bool_:
        result = result.astype(np.float64)
    else:
        result = result.astype(object)

    return result.copy()


def check_min_samples(array: NDArray[Any], min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of samples.

    Args:
        array: Array to check
        min_samples: Minimum required samples (first dimension)
        name: Parameter name for error messages

    Raises:
        InvalidArgumentError: If array has fewer than min_samples
    """
    n = array.shape[0]
    if n < min_samples:
        raise InvalidArgumentError(
            f"{name}: requires at least {min_samples} observations, got {n}"
        )


def check_int(value: Any, minimum: int, name: str) -> int:
    """
    Verify value is an integer no smaller than minimum.

    Booleans are rejected even though they subclass int.

    Returns:
        The value as a plain int

    Raises:
        InvalidArgumentError: If value is not an integer or too small
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidArgumentError(
            f"{name}: expected an integer, got {type(value).__name__} {value!r}"
        )
    if value < minimum:
        raise InvalidArgumentError(f"{name} must be >= {minimum}, got {value}")
    return int(value)


def check_probability(value: Any, name: str) -> float:
    """
    Verify value lies strictly inside (0, 1).

    Returns:
        The value as a float

    Raises:
        InvalidArgumentError: If value is not a real number in (0, 1)
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(
            f"{name}: expected a real number, got {type(value).__name__}"
        )
    value = float(value)
    if not (0.0 < value < 1.0):
        raise InvalidArgumentError(f"{name} must be in (0, 1), got {value}")
    return value


def check_callable(fn: Any, name: str) -> Callable:
    """
    Verify fn is callable.

    Raises:
        InvalidArgumentError: If fn is not callable
    """
    if not callable(fn):
        raise InvalidArgumentError(
            f"{name}: expected a callable, got {type(fn).__name__}"
        )
    return fn


def check_timeout(value: Any, name: str) -> float | None:
    """
    Verify an optional timeout is a positive number of seconds.

    Raises:
        InvalidArgumentError: If value is not None and not positive
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(
            f"{name}: expected seconds as a number, got {type(value).__name__}"
        )
    if not value > 0:
        raise InvalidArgumentError(f"{name} must be > 0, got {value}")
    return float(value)
