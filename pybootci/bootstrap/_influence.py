"""
Jackknife values and the BCa acceleration parameter.

The delete-1 jackknife re-evaluates the statistic n times, each time
with one observation removed. Its spread gives the acceleration term of
BCa intervals, plus jackknife bias and standard-error estimates.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pybootci.core.compute.pool import parallel_map
from pybootci.core.exceptions import InsufficientDataError
from pybootci.bootstrap._common import JackknifeParams
from pybootci.bootstrap._statistic import StatisticEvaluator


def jackknife_values(
    evaluator: StatisticEvaluator,
    n_jobs: int = 1,
    deadline: float | None = None,
    timeout: float | None = None,
) -> NDArray:
    """
    Leave-one-out statistic values theta_(i), shape (n,).

    Raises:
        InsufficientDataError: If n < 2, or if the statistic is undefined
            on any leave-one-out subset.
        BootstrapTimeoutError: If deadline passes first.
    """
    n = evaluator.n
    if n < 2:
        raise InsufficientDataError(
            f"jackknife requires at least 2 observations, got {n}",
            n=n, required=2,
        )

    def _loo(i: int) -> float:
        rep = evaluator.try_evaluate(evaluator.leave_one_out(i))
        return np.nan if rep is None else rep.value

    rows = parallel_map(
        _loo, range(n), n_jobs=n_jobs, deadline=deadline, timeout=timeout,
    )
    values = np.asarray(rows, dtype=np.float64)

    n_undefined = int(np.sum(~np.isfinite(values)))
    if n_undefined:
        raise InsufficientDataError(
            f"statistic undefined on {n_undefined} of {n} leave-one-out "
            f"subsets",
            n=n - n_undefined, required=n,
        )
    return values


def influence_values(values: NDArray) -> NDArray:
    """
    Jackknife influence values L_i = (n - 1) * (theta_bar - theta_(i)).

    For the sample mean these are exactly x_i - x_bar.
    """
    n = len(values)
    return (n - 1) * (np.mean(values) - values)


def acceleration(values: NDArray) -> float:
    """
    BCa acceleration from jackknife values.

        a = sum(d^3) / (6 * sum(d^2)^1.5),  d_i = theta_bar - theta_(i)

    Zero when all jackknife values coincide.
    """
    d = np.mean(values) - values
    ss = np.sum(d ** 2)
    if ss <= 0.0:
        return 0.0
    return float(np.sum(d ** 3) / (6.0 * ss ** 1.5))


def jackknife_params(values: NDArray, t0: float) -> JackknifeParams:
    """Summarize leave-one-out values into a JackknifeParams payload."""
    n = len(values)
    mean = float(np.mean(values))
    return JackknifeParams(
        values=values,
        mean=mean,
        influence=influence_values(values),
        acceleration=acceleration(values),
        t0=t0,
        bias=(n - 1) * (mean - t0),
        se=float(np.sqrt((n - 1) / n * np.sum((values - mean) ** 2))),
    )
