"""
CPU backends for bootstrap and jackknife.

CPUBootstrapBackend: Ordinary nonparametric bootstrap, optionally with
    nested variance estimates for studentized intervals.
CPUJackknifeBackend: Delete-1 jackknife.

Replicate b is a pure function of (seed, b), so the worker count only
changes how fast results arrive, never what they are.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np

from pybootci.core.result import Result
from pybootci.core.compute.timing import Timer
from pybootci.core.compute.pool import (
    check_deadline,
    deadline_from_timeout,
    parallel_map,
)
from pybootci.bootstrap._common import JackknifeParams, ReplicateParams
from pybootci.bootstrap._influence import jackknife_params, jackknife_values
from pybootci.bootstrap._nested import nested_variance
from pybootci.bootstrap._resample import (
    INNER_STREAM,
    ORIGINAL_STREAM,
    OUTER_STREAM,
    Resampler,
)
from pybootci.bootstrap._statistic import StatisticEvaluator
from pybootci.bootstrap.design import BootstrapDesign, JackknifeDesign

logger = logging.getLogger(__name__)


class CPUBootstrapBackend:
    """
    CPU backend for bootstrap resampling.

    Each task draws one outer resample, evaluates the statistic on it
    and, when B_inner > 0, runs that replicate's nested bootstrap.
    """

    @property
    def name(self) -> str:
        return 'cpu_bootstrap'

    def solve(self, design: BootstrapDesign) -> Result[ReplicateParams]:
        """Run bootstrap and return Result[ReplicateParams]."""
        timer = Timer()
        timer.start()

        deadline = deadline_from_timeout(design.timeout)
        evaluator = StatisticEvaluator(design.data, design.statistic)
        n = design.n
        B = design.B
        B_inner = design.B_inner
        seed = design.seed
        nested = B_inner is not None and B_inner > 0

        # Compute t0: statistic on original data
        with timer.section('t0_computation'):
            rep0 = evaluator.evaluate(evaluator.identity_indices())

        outer = Resampler(n, seed, (OUTER_STREAM,))

        def _replicate(b: int) -> tuple[float, float, int]:
            idx = outer.indices(b)
            rep = evaluator.try_evaluate(idx)
            if rep is None:
                return np.nan, np.nan, 0
            if nested:
                inner = Resampler(n, seed, (INNER_STREAM, b))
                var, n_inner_undefined = nested_variance(
                    evaluator, idx, inner, B_inner,
                    deadline=deadline, timeout=design.timeout,
                )
                return rep.value, var, n_inner_undefined
            var = np.nan if rep.variance is None else rep.variance
            return rep.value, var, 0

        with timer.section('bootstrap_replicates'):
            rows = parallel_map(
                _replicate, range(B),
                n_jobs=design.n_jobs, deadline=deadline, timeout=design.timeout,
            )

        check_deadline(deadline, design.timeout, B, B)

        t = np.array([r[0] for r in rows], dtype=np.float64)
        valid = np.isfinite(t)
        n_undefined = int(B - np.count_nonzero(valid))
        n_inner_undefined = sum(r[2] for r in rows)

        variances = None
        t0_variance = None
        warnings_list: list[str] = []

        if nested:
            with timer.section('nested_variance'):
                t0_variance, n_t0_undefined = nested_variance(
                    evaluator,
                    evaluator.identity_indices(),
                    Resampler(n, seed, (ORIGINAL_STREAM,)),
                    B_inner,
                    deadline=deadline,
                    timeout=design.timeout,
                )
            n_inner_undefined += n_t0_undefined
            variances = np.array([r[1] for r in rows], dtype=np.float64)
        elif B_inner == 0:
            warnings_list.append(
                "B_inner=0: no variance estimates, studentized intervals "
                "are unavailable"
            )
        elif rep0.variance is not None:
            variances = np.array([r[1] for r in rows], dtype=np.float64)
            t0_variance = rep0.variance

        if n_undefined:
            warnings_list.append(
                f"statistic undefined on {n_undefined} of {B} bootstrap "
                f"replicates; excluded from intervals"
            )
        if n_inner_undefined:
            warnings_list.append(
                f"statistic undefined on {n_inner_undefined} nested "
                f"resamples; excluded from variance estimates"
            )
        for w in warnings_list:
            warnings.warn(w, RuntimeWarning, stacklevel=3)

        # Compute bias and SE over defined replicates
        with timer.section('summary_statistics'):
            t_ok = t[valid]
            bias = float(np.mean(t_ok) - rep0.value) if len(t_ok) else np.nan
            se = float(np.std(t_ok, ddof=1)) if len(t_ok) > 1 else np.nan

        if variances is not None:
            variances.setflags(write=False)
        t.setflags(write=False)
        valid.setflags(write=False)

        timer.stop()

        logger.info(
            "bootstrap: n=%d B=%d B_inner=%s seed=%d undefined=%d in %.3fs",
            n, B, B_inner, seed, n_undefined, timer.result()['total_seconds'],
        )

        params = ReplicateParams(
            t0=rep0.value,
            t=t,
            valid=valid,
            B=B,
            seed=seed,
            bias=bias,
            se=se,
            variances=variances,
            t0_variance=t0_variance,
            B_inner=B_inner,
        )

        return Result(
            params=params,
            info={
                'n': n,
                'B': B,
                'B_inner': B_inner,
                'seed': seed,
                'n_jobs': design.n_jobs,
                'n_undefined': n_undefined,
                'n_inner_undefined': n_inner_undefined,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


class CPUJackknifeBackend:
    """CPU backend for the delete-1 jackknife."""

    @property
    def name(self) -> str:
        return 'cpu_jackknife'

    def solve(self, design: JackknifeDesign) -> Result[JackknifeParams]:
        """Run the jackknife and return Result[JackknifeParams]."""
        timer = Timer()
        timer.start()

        deadline = deadline_from_timeout(design.timeout)
        evaluator = StatisticEvaluator(design.data, design.statistic)

        with timer.section('t0_computation'):
            t0 = evaluator.evaluate(evaluator.identity_indices()).value

        with timer.section('jackknife'):
            values = jackknife_values(
                evaluator, n_jobs=design.n_jobs,
                deadline=deadline, timeout=design.timeout,
            )

        params = jackknife_params(values, t0)
        values.setflags(write=False)

        timer.stop()

        return Result(
            params=params,
            info={'n': evaluator.n, 'n_jobs': design.n_jobs},
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
