"""
Common data structures for bootstrap methods.

ReplicateParams and JackknifeParams are the parameter payloads wrapped
by Result[P] and exposed through ReplicateSet / JackknifeSet.
ConfidenceInterval, DegenerateInterval and FailedInterval are the three
possible outcomes of an interval computation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray


DEFAULT_ALPHA = 0.05

METHODS = ("normal", "basic", "percentile", "bca", "studentized")

# R boot.ci() spellings accepted as aliases
METHOD_ALIASES = {
    "norm": "normal",
    "perc": "percentile",
    "stud": "studentized",
}


@dataclass(frozen=True)
class ReplicateParams:
    """
    Parameter payload for a bootstrap run.

    - t0: statistic on the original sample
    - t: B replicate values, NaN where the statistic was undefined
    - valid: mask of defined replicates
    - variances: per-replicate variance estimates, or None
    - t0_variance: variance estimate of t0, or None
    - bias: mean(t[valid]) - t0
    - se: sd(t[valid]), ddof=1
    """
    t0: float
    t: NDArray[np.floating[Any]]               # shape (B,)
    valid: NDArray[np.bool_]                   # shape (B,)
    B: int
    seed: int
    bias: float
    se: float
    variances: NDArray[np.floating[Any]] | None = None   # shape (B,)
    t0_variance: float | None = None
    B_inner: int | None = None

    @property
    def n_undefined(self) -> int:
        return int(self.B - np.count_nonzero(self.valid))


@dataclass(frozen=True)
class JackknifeParams:
    """
    Parameter payload for a leave-one-out jackknife.

    - values: theta_(i), statistic with observation i removed, shape (n,)
    - mean: theta_bar, mean of values
    - influence: L_i = (n - 1) * (theta_bar - theta_(i))
    - acceleration: BCa acceleration a
    - bias: (n - 1) * (theta_bar - t0)
    - se: sqrt((n - 1) / n * sum((theta_(i) - theta_bar)^2))
    """
    values: NDArray[np.floating[Any]]
    mean: float
    influence: NDArray[np.floating[Any]]
    acceleration: float
    t0: float
    bias: float
    se: float


class IntervalStatus(enum.Enum):
    """
    Terminal state of a confidence interval computation.

    An interval is pending only while interval() runs; every returned
    outcome carries one of these.
    """
    COMPUTED = "computed"
    DEGENERATE = "degenerate"
    FAILED = "failed"


@dataclass(frozen=True)
class ConfidenceInterval:
    """
    A computed confidence interval.

    lo <= hi always holds; lo <= t0 <= hi does not have to.
    """
    method: str
    level: float
    lo: float
    hi: float
    t0: float
    warnings: tuple[str, ...] = field(default_factory=tuple)
    info: dict[str, Any] = field(default_factory=dict)

    status = IntervalStatus.COMPUTED
    ok = True

    @property
    def alpha(self) -> float:
        return 1.0 - self.level

    @property
    def width(self) -> float:
        return self.hi - self.lo

    def contains(self, value: float) -> bool:
        return self.lo <= value <= self.hi

    def as_tuple(self) -> tuple[float, float]:
        return (self.lo, self.hi)

    def summary(self) -> str:
        pct = f"{self.level * 100:g}%"
        lines = [f"{pct} {self.method} CI: ({self.lo:.5f}, {self.hi:.5f})"]
        for w in self.warnings:
            lines.append(f"  Warning: {w}")
        return "\n".join(lines)


@dataclass(frozen=True)
class DegenerateInterval:
    """
    Interval computation detected numerical instability.

    Carries no endpoints so it cannot be mistaken for a valid interval.
    """
    method: str
    level: float
    reason: str
    message: str

    status = IntervalStatus.DEGENERATE
    ok = False

    def summary(self) -> str:
        return f"{self.level * 100:g}% {self.method} CI: degenerate ({self.message})"


@dataclass(frozen=True)
class FailedInterval:
    """
    Interval could not be computed because a precondition was violated.

    error is the exception class describing the violation, e.g.
    MissingVarianceError or InsufficientDataError.
    """
    method: str
    level: float
    error: type[Exception]
    message: str

    status = IntervalStatus.FAILED
    ok = False

    def summary(self) -> str:
        return (
            f"{self.level * 100:g}% {self.method} CI: failed "
            f"({self.error.__name__}: {self.message})"
        )


IntervalOutcome = ConfidenceInterval | DegenerateInterval | FailedInterval
