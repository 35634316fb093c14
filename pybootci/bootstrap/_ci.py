"""
Bootstrap confidence interval computation.

Implements the five methods of R's boot.ci():
- normal: bias-corrected normal approximation
- basic: basic (pivotal) bootstrap interval
- percentile: percentile method
- bca: bias-corrected and accelerated
- studentized: bootstrap-t

The _ci_* kernels work on plain arrays and raise DegenerateIntervalError
or MissingVarianceError. compute_interval() applies the optional
transform around them and turns those errors into DegenerateInterval /
FailedInterval values.
"""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pybootci.core.exceptions import (
    DegenerateIntervalError,
    InsufficientDataError,
    InvalidArgumentError,
    MissingVarianceError,
)
from pybootci.bootstrap._common import (
    ConfidenceInterval,
    DegenerateInterval,
    FailedInterval,
    IntervalOutcome,
)
from pybootci.bootstrap._influence import acceleration as jackknife_acceleration
from pybootci.bootstrap._quantile import is_extreme, sorted_quantile

if TYPE_CHECKING:
    from pybootci.bootstrap.design import IntervalDesign

logger = logging.getLogger(__name__)

# 1 - a * (z0 + z) at or below this is treated as a vanishing denominator
_BCA_DENOM_TOL = 1e-8


def _ci_normal(
    t0: float,
    t: NDArray,
    alpha: float,
    se: float | None = None,
) -> tuple[float, float]:
    """
    Normal approximation CI with bias correction.

    CI = [t0 - bias - z * se, t0 - bias + z * se],  bias = mean(t) - t0

    se defaults to sd(t); the delta method passes it in explicitly.
    """
    if len(t) < 2:
        raise DegenerateIntervalError(
            f"normal interval needs at least 2 replicates, got {len(t)}",
            method="normal", reason="too_few_replicates",
        )
    bias = np.mean(t) - t0
    if se is None:
        se = np.std(t, ddof=1)
    z = sp_stats.norm.ppf(1.0 - alpha / 2.0)
    center = t0 - bias
    return float(center - z * se), float(center + z * se)


def _ci_percentile(t_sorted: NDArray, alpha: float) -> tuple[float, float]:
    """
    Percentile bootstrap CI.

    CI = [Q(alpha/2), Q(1-alpha/2)]
    """
    return (
        sorted_quantile(t_sorted, alpha / 2.0),
        sorted_quantile(t_sorted, 1.0 - alpha / 2.0),
    )


def _ci_basic(t0: float, t_sorted: NDArray, alpha: float) -> tuple[float, float]:
    """
    Basic (pivotal) bootstrap CI.

    CI = [2*t0 - Q(1-alpha/2), 2*t0 - Q(alpha/2)]

    Note: upper quantile of bootstrap gives lower bound.
    """
    q_lo, q_hi = _ci_percentile(t_sorted, alpha)
    return 2.0 * t0 - q_hi, 2.0 * t0 - q_lo


def bca_levels(t0: float, t: NDArray, alpha: float, a: float) -> tuple[float, float, float]:
    """
    Adjusted quantile levels for BCa.

    Returns:
        (alpha1, alpha2, z0)

    Raises:
        DegenerateIntervalError: If z0 is infinite, a denominator
            vanishes, or the levels leave (0, 1) or invert.
    """
    B = len(t)
    prop_below = np.count_nonzero(t < t0) / B
    if prop_below <= 0.0 or prop_below >= 1.0:
        raise DegenerateIntervalError(
            f"all {B} replicates lie on one side of t0; bias correction "
            f"z0 is infinite",
            method="bca", reason="infinite_bias_correction",
        )
    z0 = 0.0 if prop_below == 0.5 else float(sp_stats.norm.ppf(prop_below))

    if z0 == 0.0 and a == 0.0:
        return alpha / 2.0, 1.0 - alpha / 2.0, z0

    levels = []
    for p in (alpha / 2.0, 1.0 - alpha / 2.0):
        z_p = sp_stats.norm.ppf(p)
        numer = z0 + z_p
        denom = 1.0 - a * numer
        if denom <= _BCA_DENOM_TOL:
            raise DegenerateIntervalError(
                f"BCa denominator 1 - a*(z0 + z) = {denom:.3g} is not "
                f"positive (a={a:.4g}, z0={z0:.4g})",
                method="bca", reason="vanishing_denominator",
            )
        levels.append(float(sp_stats.norm.cdf(z0 + numer / denom)))

    alpha1, alpha2 = levels
    if not (0.0 < alpha1 < 1.0 and 0.0 < alpha2 < 1.0):
        raise DegenerateIntervalError(
            f"BCa adjusted levels ({alpha1:.4g}, {alpha2:.4g}) are "
            f"outside (0, 1)",
            method="bca", reason="level_out_of_range",
        )
    if alpha1 >= alpha2:
        raise DegenerateIntervalError(
            f"BCa adjusted levels are inverted ({alpha1:.4g} >= {alpha2:.4g})",
            method="bca", reason="inverted_levels",
        )
    return alpha1, alpha2, z0


def _ci_bca(
    t0: float,
    t_sorted: NDArray,
    alpha: float,
    a: float,
) -> tuple[float, float, float, float, float]:
    """
    BCa (bias-corrected and accelerated) CI.

    Steps:
    1. z0 = Phi^{-1}(proportion of t* < t0)
    2. a from the jackknife (passed in)
    3. Adjusted quantile levels
    4. CI from adjusted percentiles

    Returns:
        (lo, hi, alpha1, alpha2, z0)
    """
    alpha1, alpha2, z0 = bca_levels(t0, t_sorted, alpha, a)
    lo = sorted_quantile(t_sorted, alpha1)
    hi = sorted_quantile(t_sorted, alpha2)
    return lo, hi, alpha1, alpha2, z0


def _ci_studentized(
    t0: float,
    t: NDArray,
    alpha: float,
    var_t0: float | None,
    var_t: NDArray | None,
) -> tuple[float, float, int]:
    """
    Studentized (bootstrap-t) CI.

    For each replicate: z* = (t* - t0) / se*
    CI = [t0 - q*(1-alpha/2) * se0, t0 - q*(alpha/2) * se0]

    Returns:
        (lo, hi, n_excluded) where n_excluded counts non-finite z*.
    """
    if var_t is None:
        raise MissingVarianceError(
            "studentized interval requires per-replicate variances; use "
            "run_bootstrap_with_variance() or a statistic returning "
            "(value, variance)"
        )

    usable = np.isfinite(var_t) & (var_t > 0)
    n_usable = int(np.count_nonzero(usable))
    if n_usable == 0:
        raise MissingVarianceError(
            f"none of the {len(var_t)} replicate variances is finite and "
            f"positive",
            n_usable=0,
        )
    if var_t0 is None or not np.isfinite(var_t0) or var_t0 <= 0:
        raise MissingVarianceError(
            f"variance estimate of t0 is unusable ({var_t0})",
            n_usable=n_usable,
        )

    with np.errstate(divide="ignore", invalid="ignore"):
        z_star = (t - t0) / np.sqrt(var_t)
    finite = np.isfinite(z_star)
    n_excluded = int(len(z_star) - np.count_nonzero(finite))
    z_sorted = np.sort(z_star[finite])
    if len(z_sorted) == 0:
        raise MissingVarianceError(
            "no finite studentized replicates remain", n_usable=0,
        )

    q_lo = sorted_quantile(z_sorted, alpha / 2.0)
    q_hi = sorted_quantile(z_sorted, 1.0 - alpha / 2.0)
    se0 = np.sqrt(var_t0)

    # Note the reversal: upper quantile gives lower bound
    return float(t0 - q_hi * se0), float(t0 - q_lo * se0), n_excluded


def compute_interval(design: 'IntervalDesign') -> IntervalOutcome:
    """
    Compute one confidence interval.

    Returns ConfidenceInterval on success, DegenerateInterval on detected
    numerical instability, FailedInterval on a violated precondition.
    """
    method = design.method
    level = 1.0 - design.alpha
    try:
        return _compute(design)
    except DegenerateIntervalError as e:
        logger.info("%s interval degenerate: %s", method, e)
        return DegenerateInterval(
            method=method, level=level,
            reason=e.reason or "degenerate", message=str(e),
        )
    except (MissingVarianceError, InsufficientDataError, InvalidArgumentError) as e:
        logger.info("%s interval failed: %s", method, e)
        return FailedInterval(
            method=method, level=level, error=type(e), message=str(e),
        )


def _compute(design: 'IntervalDesign') -> ConfidenceInterval:
    method = design.method
    alpha = design.alpha
    rs = design.replicate_set
    tr = design.transform
    t0 = design.t0

    valid = rs.valid
    t_raw = rs.t[valid]
    if len(t_raw) == 0:
        raise InsufficientDataError(
            f"all {rs.B} replicates are undefined", n=0, required=1,
        )

    notes: list[str] = []
    info: dict = {"B_used": len(t_raw)}

    if tr is not None:
        t0_h = float(tr.forward(t0))
        if not np.isfinite(t0_h):
            raise InvalidArgumentError(
                f"t0={t0} is outside the domain of transform {tr.name!r}"
            )
        t_h = tr.forward(t_raw)
        in_domain = np.isfinite(t_h)
        n_out = int(len(t_h) - np.count_nonzero(in_domain))
        if n_out:
            notes.append(
                f"{n_out} replicates outside the domain of transform "
                f"{tr.name!r} excluded"
            )
        t_h = t_h[in_domain]
        t_raw = t_raw[in_domain]
        info["transform"] = tr.name
        info["B_used"] = len(t_h)
        if len(t_h) == 0:
            raise InsufficientDataError(
                "no replicates inside the transform's domain", n=0, required=1,
            )
    else:
        t0_h, t_h = t0, t_raw

    if method == "normal":
        se = None
        if tr is not None and tr.hdot is not None and len(t_raw) >= 2:
            se = abs(float(tr.derivative(t0))) * np.std(t_raw, ddof=1)
        lo, hi = _ci_normal(t0_h, t_h, alpha, se)

    elif method == "percentile":
        t_sorted = np.sort(t_h)
        _note_extreme(notes, len(t_sorted), (alpha / 2.0, 1.0 - alpha / 2.0))
        lo, hi = _ci_percentile(t_sorted, alpha)

    elif method == "basic":
        t_sorted = np.sort(t_h)
        _note_extreme(notes, len(t_sorted), (alpha / 2.0, 1.0 - alpha / 2.0))
        lo, hi = _ci_basic(t0_h, t_sorted, alpha)

    elif method == "bca":
        a = _resolve_acceleration(design, notes)
        t_sorted = np.sort(t_h)
        lo, hi, alpha1, alpha2, z0 = _ci_bca(t0_h, t_sorted, alpha, a)
        _note_extreme(notes, len(t_sorted), (alpha1, alpha2))
        info.update({"z0": z0, "acceleration": a, "levels": (alpha1, alpha2)})

    elif method == "studentized":
        var_t = rs.variances
        var_t0 = rs.t0_variance
        if var_t is not None:
            var_t = var_t[valid]
            if tr is not None:
                var_t = var_t[in_domain] * tr.derivative(t_raw) ** 2
                if var_t0 is not None:
                    var_t0 = var_t0 * float(tr.derivative(t0)) ** 2
        lo, hi, n_excluded = _ci_studentized(t0_h, t_h, alpha, var_t0, var_t)
        if n_excluded:
            notes.append(
                f"{n_excluded} studentized replicates with non-finite "
                f"z excluded"
            )
        info["n_excluded"] = n_excluded

    else:
        raise InvalidArgumentError(f"Unknown interval method: {method!r}")

    if tr is not None:
        lo, hi = (float(v) for v in tr.inverse(np.array([lo, hi])))
        if not (np.isfinite(lo) and np.isfinite(hi)):
            raise DegenerateIntervalError(
                f"endpoints fall outside the range of transform {tr.name!r}",
                method=method, reason="endpoint_outside_range",
            )

    if not lo <= hi:
        raise DegenerateIntervalError(
            f"{method} interval endpoints are inverted ({lo:.6g} > {hi:.6g})",
            method=method, reason="inverted_endpoints",
        )

    for note in notes:
        warnings.warn(note, RuntimeWarning, stacklevel=4)

    return ConfidenceInterval(
        method=method,
        level=1.0 - alpha,
        lo=float(lo),
        hi=float(hi),
        t0=t0,
        warnings=tuple(notes),
        info=info,
    )


def _resolve_acceleration(design: 'IntervalDesign', notes: list[str]) -> float:
    """Acceleration from an override, a supplied jackknife, or a fresh one."""
    if design.acceleration is not None:
        return design.acceleration

    tr = design.transform
    if design.jackknife_set is not None:
        values = design.jackknife_set.values
    else:
        try:
            values = design.replicate_set.jackknife().values
        except InsufficientDataError as e:
            if not design.jackknife_fallback:
                raise
            notes.append(f"acceleration set to 0 (bias correction only): {e}")
            return 0.0

    if tr is not None:
        values = tr.forward(values)
    return jackknife_acceleration(values)


def _note_extreme(notes: list[str], B: int, probs) -> None:
    if any(is_extreme(B, p) for p in probs):
        notes.append("extreme order statistics used as endpoints")
