"""
Nested bootstrap variance estimates for studentized intervals.

For an outer resample with indices idx, the inner bootstrap draws
B_inner resamples from data[idx]. Drawing inner positions j and using
idx[j] as indices into the original data gives the same resample
without materializing data[idx], so the same Resampler and
StatisticEvaluator serve both levels.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pybootci.core.compute.pool import check_deadline
from pybootci.bootstrap._resample import Resampler
from pybootci.bootstrap._statistic import StatisticEvaluator


def nested_variance(
    evaluator: StatisticEvaluator,
    outer_indices: NDArray[np.intp],
    resampler: Resampler,
    B_inner: int,
    deadline: float | None = None,
    timeout: float | None = None,
) -> tuple[float, int]:
    """
    Variance of the statistic over B_inner resamples of data[outer_indices].

    Args:
        evaluator: Statistic evaluator on the original data.
        outer_indices: Indices defining the resample to bootstrap again.
        resampler: Resampler on this replicate's own inner stream.
        B_inner: Number of inner resamples.
        deadline: Absolute time.perf_counter() limit of the enclosing
            run, checked before every inner draw and after the last.
        timeout: The run's timeout in seconds, reported on expiry.

    Returns:
        (variance, n_undefined). variance is NaN when fewer than two
        inner values are defined.

    Raises:
        BootstrapTimeoutError: If the deadline passes.
    """
    values = np.empty(B_inner, dtype=np.float64)
    for j in range(B_inner):
        check_deadline(deadline, timeout, j, B_inner)
        rep = evaluator.try_evaluate(outer_indices[resampler.indices(j)])
        values[j] = np.nan if rep is None else rep.value
    check_deadline(deadline, timeout, B_inner, B_inner)

    ok = np.isfinite(values)
    n_ok = int(np.count_nonzero(ok))
    if n_ok < 2:
        return np.nan, B_inner - n_ok
    return float(np.var(values[ok], ddof=1)), B_inner - n_ok
