"""
pybootci: bootstrap confidence intervals for Python.

Estimates the sampling distribution of an arbitrary statistic by
resampling and builds normal, basic, percentile, BCa and studentized
confidence intervals, matching the definitions of R's boot package.

Submodules:
    bootstrap: Resampling, jackknife, nested variance, intervals
    core: Exceptions, result envelope, validation, worker pool
"""

__version__ = "0.1.0"

from pybootci.core.exceptions import (
    PyBootCIError,
    InvalidArgumentError,
    StatisticUndefined,
    InsufficientDataError,
    DegenerateIntervalError,
    MissingVarianceError,
    BootstrapTimeoutError,
)
from pybootci.bootstrap import (
    ConfidenceInterval,
    DegenerateInterval,
    FailedInterval,
    IntervalStatus,
    JackknifeSet,
    ReplicateSet,
    Transform,
    fisher_z,
    identity,
    interval,
    intervals,
    jackknife,
    log_transform,
    logit_transform,
    quantile,
    run_bootstrap,
    run_bootstrap_with_variance,
)

__all__ = [
    "__version__",
    # API
    "run_bootstrap",
    "run_bootstrap_with_variance",
    "jackknife",
    "interval",
    "intervals",
    "quantile",
    # Types
    "ReplicateSet",
    "JackknifeSet",
    "ConfidenceInterval",
    "DegenerateInterval",
    "FailedInterval",
    "IntervalStatus",
    "Transform",
    "identity",
    "log_transform",
    "fisher_z",
    "logit_transform",
    # Exceptions
    "PyBootCIError",
    "InvalidArgumentError",
    "StatisticUndefined",
    "InsufficientDataError",
    "DegenerateIntervalError",
    "MissingVarianceError",
    "BootstrapTimeoutError",
]
