"""
Wrapper around the caller's statistic function.

The statistic contract is fn(data, indices) returning either a scalar
or a (value, variance) pair. Parameters the statistic needs beyond that
are bound by the caller with a closure or functools.partial.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from pybootci.core.exceptions import InvalidArgumentError, StatisticUndefined


@dataclass(frozen=True)
class Replicate:
    """One statistic evaluation."""
    value: float
    variance: float | None = None


class StatisticEvaluator:
    """
    Evaluates a statistic on index subsets of a shared, read-only sample.

    Accepted return shapes:
        scalar, 0-d array, size-1 array     -> value
        tuple/list of 2, size-2 1D array    -> (value, variance)

    A statistic is undefined on a resample when it raises
    StatisticUndefined or returns a non-finite value. try_evaluate()
    reports that as None; every other exception propagates.
    """

    def __init__(self, data: NDArray[Any], statistic: Callable):
        self.data = data
        self.statistic = statistic

    @property
    def n(self) -> int:
        return self.data.shape[0]

    def evaluate(self, indices: NDArray[np.intp]) -> Replicate:
        """
        Evaluate on data[indices].

        Raises:
            StatisticUndefined: If the statistic is undefined here.
            InvalidArgumentError: If the return value has the wrong shape.
        """
        out = self.statistic(self.data, indices)
        rep = _to_replicate(out)
        if not np.isfinite(rep.value):
            raise StatisticUndefined(f"statistic returned {rep.value}")
        return rep

    def try_evaluate(self, indices: NDArray[np.intp]) -> Replicate | None:
        """Evaluate, returning None where the statistic is undefined."""
        try:
            return self.evaluate(indices)
        except StatisticUndefined:
            return None

    def identity_indices(self) -> NDArray[np.intp]:
        return np.arange(self.n, dtype=np.intp)

    def leave_one_out(self, i: int) -> NDArray[np.intp]:
        """All indices except i, shape (n - 1,)."""
        return np.concatenate([
            np.arange(i, dtype=np.intp),
            np.arange(i + 1, self.n, dtype=np.intp),
        ])


def _to_replicate(out: Any) -> Replicate:
    if isinstance(out, (tuple, list)):
        if len(out) != 2:
            raise InvalidArgumentError(
                f"statistic must return a scalar or a (value, variance) "
                f"pair, got a sequence of length {len(out)}"
            )
        return Replicate(_scalar(out[0], "value"), _scalar(out[1], "variance"))

    try:
        arr = np.asarray(out, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"statistic returned a non-numeric value: {out!r}"
        ) from e

    if arr.size == 1:
        return Replicate(float(arr.reshape(-1)[0]))
    if arr.ndim == 1 and arr.size == 2:
        return Replicate(float(arr[0]), float(arr[1]))

    raise InvalidArgumentError(
        f"statistic must return a scalar or a (value, variance) pair, "
        f"got shape {arr.shape}"
    )


def _scalar(x: Any, what: str) -> float:
    try:
        arr = np.asarray(x, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"statistic {what} is not numeric: {x!r}"
        ) from e
    if arr.size != 1:
        raise InvalidArgumentError(
            f"statistic {what} must be a scalar, got shape {arr.shape}"
        )
    return float(arr.reshape(-1)[0])
