"""
Design classes for bootstrap methods.

BootstrapDesign, JackknifeDesign and IntervalDesign encapsulate all
inputs needed by backends and interval kernels. Immutable, validated at
construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pybootci.core.exceptions import InvalidArgumentError
from pybootci.core.validation import (
    check_array,
    check_callable,
    check_int,
    check_min_samples,
    check_probability,
    check_timeout,
)
from pybootci.core.compute.pool import resolve_n_jobs
from pybootci.bootstrap._common import DEFAULT_ALPHA, METHOD_ALIASES, METHODS
from pybootci.bootstrap._resample import resolve_seed
from pybootci.bootstrap._transform import Transform

if TYPE_CHECKING:
    from pybootci.bootstrap.solution import JackknifeSet, ReplicateSet


def _frozen_sample(data) -> NDArray[Any]:
    """Validated private copy of the sample, flagged read-only."""
    data_arr = check_array(data, "sample")
    check_min_samples(data_arr, 1, "sample")
    data_arr.setflags(write=False)
    return data_arr


@dataclass(frozen=True)
class BootstrapDesign:
    """
    Frozen design for bootstrap resampling.

    Attributes:
        data: Original sample, shape (n,) or (n, p), read-only.
        statistic: User function fn(data, indices) -> value or
            (value, variance).
        B: Number of outer bootstrap replicates.
        B_inner: Nested replicates per outer replicate, or None for no
            nested variance estimation.
        seed: Random seed; all draws derive from it.
        n_jobs: Worker count for replicate evaluation.
        timeout: Wall-clock limit in seconds for the whole run, or None.
    """
    data: NDArray[Any]
    statistic: Callable
    B: int
    B_inner: int | None
    seed: int
    n_jobs: int
    timeout: float | None

    @property
    def n(self) -> int:
        return self.data.shape[0]

    @classmethod
    def for_bootstrap(
        cls,
        data,
        statistic: Callable,
        B: int,
        seed: int | None = None,
        *,
        B_inner: int | None = None,
        n_jobs: int = 1,
        timeout: float | None = None,
    ) -> BootstrapDesign:
        """
        Create a bootstrap design with validation.

        Args:
            data: Input sample, 1D or 2D array-like with n >= 1 rows.
            statistic: Function of (data, indices).
            B: Number of bootstrap replicates. Must be >= 1.
            seed: Non-negative integer seed, or None for fresh entropy.
            B_inner: Nested replicate count (>= 0) or None.
            n_jobs: 1 for sequential, k > 1 threads, -1 for all CPUs.
            timeout: Seconds before the run is abandoned.

        Returns:
            Validated BootstrapDesign.

        Raises:
            InvalidArgumentError: If inputs are invalid.
        """
        data_arr = _frozen_sample(data)
        check_callable(statistic, "statistic")

        return cls(
            data=data_arr,
            statistic=statistic,
            B=check_int(B, 1, "B"),
            B_inner=None if B_inner is None else check_int(B_inner, 0, "B_inner"),
            seed=resolve_seed(seed),
            n_jobs=resolve_n_jobs(n_jobs),
            timeout=check_timeout(timeout, "timeout"),
        )


@dataclass(frozen=True)
class JackknifeDesign:
    """
    Frozen design for the leave-one-out jackknife.

    Attributes:
        data: Original sample, read-only.
        statistic: User function fn(data, indices).
        n_jobs: Worker count for leave-one-out evaluations.
        timeout: Wall-clock limit in seconds, or None.
    """
    data: NDArray[Any]
    statistic: Callable
    n_jobs: int
    timeout: float | None = None

    @classmethod
    def for_jackknife(
        cls,
        data,
        statistic: Callable,
        *,
        n_jobs: int = 1,
        timeout: float | None = None,
    ) -> JackknifeDesign:
        return cls(
            data=_frozen_sample(data),
            statistic=check_callable(statistic, "statistic"),
            n_jobs=resolve_n_jobs(n_jobs),
            timeout=check_timeout(timeout, "timeout"),
        )


def canonical_method(method: str) -> str:
    """Normalize a method name, accepting R's boot.ci() spellings."""
    if not isinstance(method, str):
        raise InvalidArgumentError(
            f"method must be a string, got {type(method).__name__}"
        )
    key = method.lower()
    key = METHOD_ALIASES.get(key, key)
    if key not in METHODS:
        raise InvalidArgumentError(
            f"Unknown interval method: {method!r}. Must be one of "
            f"{', '.join(METHODS)}."
        )
    return key


@dataclass(frozen=True)
class IntervalDesign:
    """
    Frozen design for one confidence interval.

    Attributes:
        method: Canonical method name.
        t0: Point estimate the interval is built around.
        replicate_set: Bootstrap replicates.
        alpha: Miss rate; the interval has level 1 - alpha.
        jackknife_set: Precomputed jackknife for BCa, or None.
        transform: Optional monotone reparametrization.
        acceleration: Explicit BCa acceleration overriding the jackknife.
        jackknife_fallback: For BCa, use a = 0 when the jackknife cannot
            be computed instead of failing.
    """
    method: str
    t0: float
    replicate_set: 'ReplicateSet'
    alpha: float
    jackknife_set: 'JackknifeSet | None'
    transform: Transform | None
    acceleration: float | None
    jackknife_fallback: bool

    @classmethod
    def for_interval(
        cls,
        method: str,
        t0: float | None,
        replicate_set: 'ReplicateSet',
        alpha: float = DEFAULT_ALPHA,
        jackknife_set: 'JackknifeSet | None' = None,
        transform: Transform | None = None,
        *,
        acceleration: float | None = None,
        jackknife_fallback: bool = True,
    ) -> IntervalDesign:
        from pybootci.bootstrap.solution import JackknifeSet, ReplicateSet

        method = canonical_method(method)

        if not isinstance(replicate_set, ReplicateSet):
            raise InvalidArgumentError(
                f"replicate_set must be a ReplicateSet, got "
                f"{type(replicate_set).__name__}"
            )
        if jackknife_set is not None and not isinstance(jackknife_set, JackknifeSet):
            raise InvalidArgumentError(
                f"jackknife_set must be a JackknifeSet, got "
                f"{type(jackknife_set).__name__}"
            )
        if transform is not None and not isinstance(transform, Transform):
            raise InvalidArgumentError(
                f"transform must be a Transform, got {type(transform).__name__}"
            )

        if t0 is None:
            t0 = replicate_set.t0
        try:
            t0 = float(t0)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"t0 must be a real number, got {t0!r}") from e
        if not np.isfinite(t0):
            raise InvalidArgumentError(f"t0 must be finite, got {t0}")

        if acceleration is not None:
            acceleration = float(acceleration)
            if not np.isfinite(acceleration):
                raise InvalidArgumentError(
                    f"acceleration must be finite, got {acceleration}"
                )

        return cls(
            method=method,
            t0=t0,
            replicate_set=replicate_set,
            alpha=check_probability(alpha, "alpha"),
            jackknife_set=jackknife_set,
            transform=transform,
            acceleration=acceleration,
            jackknife_fallback=bool(jackknife_fallback),
        )
