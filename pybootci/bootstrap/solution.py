"""
Solution wrappers for bootstrap results.

ReplicateSet and JackknifeSet wrap Result[P] and provide convenient
accessors and R-style summary output.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pybootci.core.result import Result
from pybootci.bootstrap._common import JackknifeParams, ReplicateParams

if TYPE_CHECKING:
    from pybootci.bootstrap.design import BootstrapDesign, JackknifeDesign


@dataclass(frozen=True)
class ReplicateSet:
    """
    User-facing bootstrap results.

    Matches R's boot object output: t0, t, bias, SE, plus the seed needed
    to regenerate the run and, when requested, per-replicate variances.
    summary() produces R's print.boot format.

    Immutable once built. The one exception is the jackknife cache,
    filled once under a lock by the first call to jackknife().
    """
    _result: Result[ReplicateParams]
    _design: 'BootstrapDesign'
    _jackknife: 'JackknifeSet | None' = field(default=None, repr=False, compare=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False,
    )

    # --- Core boot fields ---

    @property
    def t0(self) -> float:
        """Observed statistic on the original sample."""
        return self._result.params.t0

    @property
    def t(self) -> NDArray[np.floating[Any]]:
        """Bootstrap replicates, shape (B,); NaN where undefined."""
        return self._result.params.t

    @property
    def valid(self) -> NDArray[np.bool_]:
        """Mask of replicates on which the statistic was defined."""
        return self._result.params.valid

    @property
    def values(self) -> NDArray[np.floating[Any]]:
        """Defined replicate values only."""
        return self.t[self.valid]

    @property
    def B(self) -> int:
        """Number of bootstrap replicates requested."""
        return self._result.params.B

    @property
    def B_valid(self) -> int:
        """Number of defined replicates."""
        return int(np.count_nonzero(self.valid))

    @property
    def n_undefined(self) -> int:
        return self._result.params.n_undefined

    @property
    def bias(self) -> float:
        """Bootstrap bias estimate: mean(t) - t0."""
        return self._result.params.bias

    @property
    def se(self) -> float:
        """Bootstrap standard error: sd(t)."""
        return self._result.params.se

    @property
    def variances(self) -> NDArray[np.floating[Any]] | None:
        """Per-replicate variance estimates, shape (B,), or None."""
        return self._result.params.variances

    @property
    def t0_variance(self) -> float | None:
        """Variance estimate of t0 on the original sample, or None."""
        return self._result.params.t0_variance

    @property
    def has_variances(self) -> bool:
        return self.variances is not None

    @property
    def B_inner(self) -> int | None:
        return self._result.params.B_inner

    @property
    def seed(self) -> int:
        """Random seed used."""
        return self._result.params.seed

    # --- Metadata ---

    @property
    def data(self) -> NDArray:
        """Original sample."""
        return self._design.data

    @property
    def statistic(self) -> Callable:
        return self._design.statistic

    @property
    def n(self) -> int:
        return self._design.n

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def has_warning(self, substring: str) -> bool:
        return self._result.has_warning(substring)

    # --- Derived ---

    def jackknife(self) -> 'JackknifeSet':
        """
        Jackknife of the same statistic on the same sample.

        Computed on first use and reused by later BCa intervals. Runs
        with the same n_jobs and gets the same timeout as the bootstrap.

        Raises:
            InsufficientDataError: If n < 2 or the statistic is undefined
                on a leave-one-out subset.
            BootstrapTimeoutError: If the jackknife exceeds the timeout.
        """
        with self._lock:
            if self._jackknife is None:
                from pybootci.bootstrap.solvers import jackknife
                js = jackknife(
                    self.data, self.statistic,
                    n_jobs=self._design.n_jobs, timeout=self._design.timeout,
                )
                object.__setattr__(self, '_jackknife', js)
        return self._jackknife

    # --- Display ---

    def summary(self) -> str:
        """
        R-style print.boot output.

        Produces:
            ORDINARY NONPARAMETRIC BOOTSTRAP

            Bootstrap Statistics :
                   original       bias    std. error
            t1*     0.77637   -0.00643       0.13376
        """
        lines = ["\nORDINARY NONPARAMETRIC BOOTSTRAP\n"]

        call = f"Call: run_bootstrap(sample, statistic, B={self.B}, seed={self.seed}"
        if self.B_inner is not None:
            call += f", B_inner={self.B_inner}"
        lines.append(call + ")")
        lines.append("")

        lines.append("Bootstrap Statistics :")
        header = f"{'':>8s} {'original':>14s} {'bias':>14s} {'std. error':>14s}"
        lines.append(header)
        lines.append(
            f"{'t1*':>8s} {self.t0:14.5f} {self.bias:14.5f} {self.se:14.5f}"
        )

        if self.n_undefined:
            lines.append("")
            lines.append(
                f"{self.n_undefined} of {self.B} replicates undefined "
                f"(excluded)"
            )

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ReplicateSet(B={self.B}, n={self.n}, seed={self.seed}, "
            f"variances={self.has_variances}, backend={self.backend_name!r})"
        )


@dataclass(frozen=True)
class JackknifeSet:
    """
    User-facing jackknife results.

    Exactly one leave-one-out value per observation, plus the derived
    influence values, BCa acceleration, and jackknife bias and SE.
    """
    _result: Result[JackknifeParams]
    _design: 'JackknifeDesign'

    @property
    def values(self) -> NDArray[np.floating[Any]]:
        """Leave-one-out values theta_(i), shape (n,)."""
        return self._result.params.values

    @property
    def n(self) -> int:
        return len(self.values)

    @property
    def mean(self) -> float:
        return self._result.params.mean

    @property
    def influence(self) -> NDArray[np.floating[Any]]:
        """Influence values (n - 1) * (theta_bar - theta_(i))."""
        return self._result.params.influence

    @property
    def acceleration(self) -> float:
        """BCa acceleration a."""
        return self._result.params.acceleration

    @property
    def t0(self) -> float:
        return self._result.params.t0

    @property
    def bias(self) -> float:
        """Jackknife bias estimate."""
        return self._result.params.bias

    @property
    def se(self) -> float:
        """Jackknife standard error."""
        return self._result.params.se

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    def __len__(self) -> int:
        return self.n

    def summary(self) -> str:
        lines = [
            "\nJACKKNIFE",
            "",
            f"Number of observations: {self.n}",
            f"Original statistic: {self.t0:.6g}",
            f"Jackknife bias: {self.bias:.6g}",
            f"Jackknife std. error: {self.se:.6g}",
            f"Acceleration: {self.acceleration:.6g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"JackknifeSet(n={self.n}, "
            f"acceleration={self.acceleration:.4g})"
        )
