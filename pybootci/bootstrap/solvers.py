"""
Public API for bootstrap confidence intervals.

    run_bootstrap(sample, statistic, B, seed) -> ReplicateSet
    run_bootstrap_with_variance(sample, statistic, B, B_inner, seed) -> ReplicateSet
    jackknife(sample, statistic) -> JackknifeSet
    interval(method, t0, replicate_set, alpha, ...) -> ConfidenceInterval
        | DegenerateInterval | FailedInterval
    intervals(replicate_set, methods, alpha, ...) -> dict of the above

Each function validates inputs, creates a design, dispatches to the CPU
backend, and wraps the Result in a solution object.
"""

from __future__ import annotations

from typing import Callable, Iterable

from pybootci.bootstrap._ci import compute_interval
from pybootci.bootstrap._common import (
    DEFAULT_ALPHA,
    METHODS,
    IntervalOutcome,
)
from pybootci.bootstrap._transform import Transform
from pybootci.bootstrap.backends.cpu import CPUBootstrapBackend, CPUJackknifeBackend
from pybootci.bootstrap.design import (
    BootstrapDesign,
    IntervalDesign,
    JackknifeDesign,
    canonical_method,
)
from pybootci.bootstrap.solution import JackknifeSet, ReplicateSet


def run_bootstrap(
    sample,
    statistic: Callable,
    B: int,
    seed: int | None,
    *,
    n_jobs: int = 1,
    timeout: float | None = None,
) -> ReplicateSet:
    """
    Ordinary nonparametric bootstrap.

    Parameters
    ----------
    sample : array-like
        n observations; 1D, or 2D with one row per observation.
    statistic : callable
        fn(sample, indices) -> value, or -> (value, variance). Statistics
        that return a variance make studentized intervals available
        without a nested bootstrap.
    B : int
        Number of bootstrap replicates (>= 1).
    seed : int or None
        Seed for the per-replicate random substreams. None draws fresh
        entropy; the value used is recorded on the result.
    n_jobs : int
        1 runs sequentially; k > 1 uses k threads; -1 uses all CPUs.
        Results are identical for every choice.
    timeout : float or None
        Abort with BootstrapTimeoutError after this many seconds.

    Returns
    -------
    ReplicateSet
    """
    design = BootstrapDesign.for_bootstrap(
        sample, statistic, B, seed, n_jobs=n_jobs, timeout=timeout,
    )
    result = CPUBootstrapBackend().solve(design)
    return ReplicateSet(_result=result, _design=design)


def run_bootstrap_with_variance(
    sample,
    statistic: Callable,
    B: int,
    B_inner: int,
    seed: int | None,
    *,
    n_jobs: int = 1,
    timeout: float | None = None,
) -> ReplicateSet:
    """
    Bootstrap with nested variance estimates for studentized intervals.

    Every outer replicate is itself bootstrapped B_inner times and the
    sample variance of those inner values becomes its variance estimate.
    The original sample gets the same treatment for the variance of t0.
    Costs about B * B_inner statistic evaluations; B_inner of 50-300 is
    usually enough.

    Parameters
    ----------
    sample, statistic, B, seed, n_jobs, timeout
        As for run_bootstrap().
    B_inner : int
        Nested replicates per outer replicate (>= 0). B_inner=0 records
        no variances, so studentized intervals fail with
        MissingVarianceError.

    Returns
    -------
    ReplicateSet with variances and t0_variance populated.
    """
    design = BootstrapDesign.for_bootstrap(
        sample, statistic, B, seed,
        B_inner=B_inner, n_jobs=n_jobs, timeout=timeout,
    )
    result = CPUBootstrapBackend().solve(design)
    return ReplicateSet(_result=result, _design=design)


def jackknife(
    sample,
    statistic: Callable,
    *,
    n_jobs: int = 1,
    timeout: float | None = None,
) -> JackknifeSet:
    """
    Delete-1 jackknife.

    Parameters
    ----------
    sample, statistic, n_jobs
        As for run_bootstrap().
    timeout : float or None
        Abort with BootstrapTimeoutError after this many seconds.

    Returns
    -------
    JackknifeSet with one leave-one-out value per observation.

    Raises
    ------
    InsufficientDataError
        If the sample has fewer than 2 observations.
    BootstrapTimeoutError
        If the timeout expires first.
    """
    design = JackknifeDesign.for_jackknife(
        sample, statistic, n_jobs=n_jobs, timeout=timeout,
    )
    result = CPUJackknifeBackend().solve(design)
    return JackknifeSet(_result=result, _design=design)


def interval(
    method: str,
    t0: float | None,
    replicate_set: ReplicateSet,
    alpha: float = DEFAULT_ALPHA,
    jackknife_set: JackknifeSet | None = None,
    transform: Transform | None = None,
    *,
    acceleration: float | None = None,
    jackknife_fallback: bool = True,
) -> IntervalOutcome:
    """
    Bootstrap confidence interval.

    Parameters
    ----------
    method : str
        'normal', 'basic', 'percentile', 'bca' or 'studentized'. R's
        'norm', 'perc' and 'stud' are accepted as aliases.
    t0 : float or None
        Point estimate; None uses replicate_set.t0.
    replicate_set : ReplicateSet
        Output of run_bootstrap() or run_bootstrap_with_variance().
    alpha : float
        Miss rate in (0, 1); the interval has level 1 - alpha.
    jackknife_set : JackknifeSet or None
        BCa only. Computed from replicate_set when omitted.
    transform : Transform or None
        Monotone reparametrization applied before, and inverted after,
        interval construction.
    acceleration : float or None
        BCa only. Overrides the jackknife acceleration; 0.0 gives a
        bias-corrected percentile interval.
    jackknife_fallback : bool
        BCa only. When the jackknife cannot be computed (n < 2), use
        a = 0 instead of failing.

    Returns
    -------
    ConfidenceInterval, or DegenerateInterval when the computation is
    numerically unstable, or FailedInterval when a precondition such as
    available variances is not met. Check ``.ok`` before using endpoints.

    Raises
    ------
    InvalidArgumentError
        For an unknown method, alpha outside (0, 1), or a non-finite t0.
    BootstrapTimeoutError
        If the jackknife computed for BCa outlives the run's timeout.
    """
    design = IntervalDesign.for_interval(
        method, t0, replicate_set, alpha, jackknife_set, transform,
        acceleration=acceleration, jackknife_fallback=jackknife_fallback,
    )
    return compute_interval(design)


def intervals(
    replicate_set: ReplicateSet,
    methods: str | Iterable[str] = "all",
    alpha: float = DEFAULT_ALPHA,
    jackknife_set: JackknifeSet | None = None,
    transform: Transform | None = None,
    *,
    t0: float | None = None,
    acceleration: float | None = None,
    jackknife_fallback: bool = True,
) -> dict[str, IntervalOutcome]:
    """
    Several confidence intervals from one replicate set.

    methods='all' computes normal, basic, percentile and bca, plus
    studentized when the replicate set carries variances (the same
    rule as R's boot.ci(type="all")).

    Returns
    -------
    dict mapping canonical method name to its outcome, in request order.
    """
    if isinstance(methods, str) and methods.lower() == "all":
        selected = [m for m in METHODS if m != "studentized"]
        if replicate_set.has_variances:
            selected.append("studentized")
    elif isinstance(methods, str):
        selected = [canonical_method(methods)]
    else:
        selected = [canonical_method(m) for m in methods]

    return {
        m: interval(
            m, t0, replicate_set, alpha, jackknife_set, transform,
            acceleration=acceleration, jackknife_fallback=jackknife_fallback,
        )
        for m in selected
    }
