"""
Shared data and helpers for bootstrap tests.
"""

import numpy as np
import pytest

from pybootci.core.exceptions import StatisticUndefined
from pybootci.core.result import Result
from pybootci.bootstrap._common import ReplicateParams
from pybootci.bootstrap.design import BootstrapDesign
from pybootci.bootstrap.solution import ReplicateSet


# Efron & Tibshirani (1993), Table 3.1: the 15 law schools
LSAT = np.array([576, 635, 558, 578, 666, 580, 555, 661,
                 651, 605, 653, 575, 545, 572, 594], dtype=np.float64)
GPA = np.array([3.39, 3.30, 2.81, 3.03, 3.44, 3.07, 3.00, 3.43,
                3.36, 3.13, 3.12, 2.74, 2.76, 2.88, 2.96])


def _correlation(data, indices):
    """Pearson correlation of the two columns; undefined for constant columns."""
    d = data[indices]
    x, y = d[:, 0], d[:, 1]
    sx, sy = np.std(x), np.std(y)
    if sx == 0.0 or sy == 0.0:
        raise StatisticUndefined("constant column in resample")
    return float(np.mean((x - x.mean()) * (y - y.mean())) / (sx * sy))


@pytest.fixture
def law_school():
    """LSAT / GPA pairs, shape (15, 2)."""
    return np.column_stack([LSAT, GPA])


@pytest.fixture
def make_replicate_set():
    """
    Factory for ReplicateSets with hand-picked replicate values.

    Lets interval tests pin t exactly instead of going through a run.
    NaN entries in t are marked undefined.
    """
    def _make(t, t0, variances=None, t0_variance=None, data=None, statistic=None):
        t = np.asarray(t, dtype=np.float64)
        valid = np.isfinite(t)
        if data is None:
            data = np.arange(10.0)
        if statistic is None:
            statistic = lambda d, i: float(np.mean(d[i]))  # noqa: E731
        design = BootstrapDesign.for_bootstrap(data, statistic, len(t), seed=0)
        t_ok = t[valid]
        params = ReplicateParams(
            t0=float(t0),
            t=t,
            valid=valid,
            B=len(t),
            seed=0,
            bias=float(np.mean(t_ok) - t0) if len(t_ok) else np.nan,
            se=float(np.std(t_ok, ddof=1)) if len(t_ok) > 1 else np.nan,
            variances=None if variances is None else np.asarray(variances, dtype=np.float64),
            t0_variance=t0_variance,
        )
        result = Result(params=params, info={}, timing=None, backend_name='test')
        return ReplicateSet(_result=result, _design=design)

    return _make


@pytest.fixture
def correlation_stat():
    """Statistic: Pearson correlation of a two-column sample."""
    return _correlation
