"""
Empirical quantiles of bootstrap replicates.

All rank-based intervals (basic, percentile, BCa, and the studentized
pivot quantiles) share one convention: linear interpolation between
order statistics at rank position r = (B + 1) * p, with r clamped to
[1, B]. This is Hyndman & Fan (1996) type 6.

Reference:
    Hyndman, R.J. and Fan, Y. (1996) "Sample Quantiles in Statistical
    Packages", The American Statistician, 50(4), 361-365.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pybootci.core.exceptions import InsufficientDataError, InvalidArgumentError

# Fuzz factor: 4 * machine epsilon
_FUZZ = 4.0 * np.finfo(np.float64).eps


def rank_position(B: int, p: float) -> float:
    """Unclamped 1-based rank position (B + 1) * p."""
    return (B + 1.0) * p


def is_extreme(B: int, p: float) -> bool:
    """True when the rank for p falls outside [1, B] and gets clamped."""
    r = rank_position(B, p)
    return r < 1.0 - _FUZZ or r > B + _FUZZ


def sorted_quantile(x: NDArray, p: float) -> float:
    """
    Type-6 quantile of an already sorted, finite 1D array.

    Parameters
    ----------
    x : NDArray
        Sorted values, length B >= 1.
    p : float
        Probability in [0, 1].
    """
    B = len(x)
    r = rank_position(B, p)
    j = int(math.floor(r + _FUZZ))
    h = r - j

    # Small negative h from floating point -> clamp to 0
    if abs(h) < _FUZZ:
        h = 0.0
    elif abs(h - 1.0) < _FUZZ:
        h = 1.0

    # j is 1-based: order statistic j lives at x[j - 1]
    if j < 1:
        return float(x[0])
    if j >= B:
        return float(x[B - 1])
    if h == 0.0:
        return float(x[j - 1])
    return float((1.0 - h) * x[j - 1] + h * x[j])


def quantile(values: ArrayLike, p: float | ArrayLike) -> float | NDArray:
    """
    Type-6 empirical quantile(s) of values.

    Non-finite values are ignored. Returns a float for scalar p and an
    array for array-like p.

    Raises:
        InvalidArgumentError: If any p lies outside [0, 1].
        InsufficientDataError: If no finite values remain.
    """
    x = np.asarray(values, dtype=np.float64).ravel()
    x = np.sort(x[np.isfinite(x)])
    if len(x) == 0:
        raise InsufficientDataError(
            "quantile of an empty set of values", n=0, required=1,
        )

    probs = np.asarray(p, dtype=np.float64)
    if np.any(~((probs >= 0.0) & (probs <= 1.0))):
        raise InvalidArgumentError(
            f"probabilities must be in [0, 1], got {p!r}"
        )

    if probs.ndim == 0:
        return sorted_quantile(x, float(probs))
    return np.array([sorted_quantile(x, float(q)) for q in probs.ravel()])
