"""
pybootci bootstrap methods.

Provides nonparametric bootstrap resampling, the delete-1 jackknife,
nested bootstrap variance estimates, and the five confidence interval
methods of R's boot.ci(): normal, basic, percentile, BCa, studentized.

Usage:
    from pybootci.bootstrap import run_bootstrap, interval

    rs = run_bootstrap(data, statistic, B=2000, seed=42)
    ci = interval("bca", rs.t0, rs, alpha=0.05)
    if ci.ok:
        print(ci.lo, ci.hi)
"""

from pybootci.bootstrap._common import (
    ConfidenceInterval,
    DegenerateInterval,
    FailedInterval,
    IntervalStatus,
)
from pybootci.bootstrap._quantile import quantile
from pybootci.bootstrap._transform import (
    Transform,
    fisher_z,
    identity,
    log_transform,
    logit_transform,
)
from pybootci.bootstrap.solution import JackknifeSet, ReplicateSet
from pybootci.bootstrap.solvers import (
    interval,
    intervals,
    jackknife,
    run_bootstrap,
    run_bootstrap_with_variance,
)

__all__ = [
    # Runs
    "run_bootstrap",
    "run_bootstrap_with_variance",
    "jackknife",
    # Intervals
    "interval",
    "intervals",
    "ConfidenceInterval",
    "DegenerateInterval",
    "FailedInterval",
    "IntervalStatus",
    # Results
    "ReplicateSet",
    "JackknifeSet",
    # Utilities
    "quantile",
    "Transform",
    "identity",
    "log_transform",
    "fisher_z",
    "logit_transform",
]
