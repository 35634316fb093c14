"""
Tests for bootstrap confidence intervals.

Tests all 5 CI methods: normal, basic, percentile, BCa, studentized.
Validates formulas against direct computation on known replicate sets,
plus the degenerate and failed outcomes.
"""

import numpy as np
import pytest
from scipy import stats as sp_stats

from pybootci import (
    ConfidenceInterval,
    DegenerateInterval,
    FailedInterval,
    IntervalStatus,
    interval,
    intervals,
    jackknife,
    quantile,
    run_bootstrap,
    run_bootstrap_with_variance,
)
from pybootci.core.exceptions import (
    InsufficientDataError,
    InvalidArgumentError,
    MissingVarianceError,
    StatisticUndefined,
)
from pybootci.bootstrap._ci import _ci_studentized


def mean_stat(data, indices):
    """Bootstrap statistic: sample mean."""
    return float(np.mean(data[indices]))


def mean_var_stat(data, indices):
    """Bootstrap statistic returning mean and its variance estimate."""
    d = data[indices]
    return float(np.mean(d)), float(np.var(d, ddof=1) / len(d))


def full_sample_only(data, indices):
    """Defined on resamples of size n, undefined on leave-one-out subsets."""
    if len(indices) != len(data):
        raise StatisticUndefined("needs n observations")
    return float(np.mean(data[indices]))


@pytest.fixture
def mean_replicates(skewed_sample):
    return run_bootstrap(skewed_sample, mean_stat, B=1999, seed=42)


# ---------------------------------------------------------------------------
# Tests: Individual CI types
# ---------------------------------------------------------------------------

class TestPercentileCI:

    def test_percentile_formula(self, mean_replicates):
        ci = interval("percentile", None, mean_replicates, alpha=0.1)
        assert ci.lo == quantile(mean_replicates.values, 0.05)
        assert ci.hi == quantile(mean_replicates.values, 0.95)

    @pytest.mark.parametrize("alpha", [0.01, 0.05, 0.1, 0.2, 0.5, 0.9])
    def test_within_replicate_range(self, mean_replicates, alpha):
        ci = interval("percentile", None, mean_replicates, alpha=alpha)
        assert mean_replicates.values.min() <= ci.lo <= ci.hi <= mean_replicates.values.max()

    def test_narrower_at_lower_level(self, mean_replicates):
        wide = interval("percentile", None, mean_replicates, alpha=0.01)
        narrow = interval("percentile", None, mean_replicates, alpha=0.2)
        assert narrow.width < wide.width

    def test_ignores_t0(self, mean_replicates):
        a = interval("percentile", None, mean_replicates)
        b = interval("percentile", mean_replicates.t0 + 5.0, mean_replicates)
        assert a.as_tuple() == b.as_tuple()


class TestBasicCI:

    def test_basic_formula(self, mean_replicates):
        """Basic CI = [2*t0 - Q(0.975), 2*t0 - Q(0.025)]."""
        t0 = mean_replicates.t0
        ci = interval("basic", None, mean_replicates)
        q_lo, q_hi = quantile(mean_replicates.values, [0.025, 0.975])
        assert ci.lo == pytest.approx(2 * t0 - q_hi, rel=1e-12)
        assert ci.hi == pytest.approx(2 * t0 - q_lo, rel=1e-12)

    def test_reflection_of_percentile(self, mean_replicates):
        t0 = mean_replicates.t0
        basic = interval("basic", None, mean_replicates)
        perc = interval("percentile", None, mean_replicates)
        assert basic.lo == pytest.approx(2 * t0 - perc.hi, rel=1e-12)
        assert basic.hi == pytest.approx(2 * t0 - perc.lo, rel=1e-12)

    def test_explicit_t0_shifts(self, mean_replicates):
        base = interval("basic", None, mean_replicates)
        shifted = interval("basic", mean_replicates.t0 + 1.0, mean_replicates)
        assert shifted.lo == pytest.approx(base.lo + 2.0)
        assert shifted.hi == pytest.approx(base.hi + 2.0)
        assert shifted.t0 == pytest.approx(mean_replicates.t0 + 1.0)


class TestNormalCI:

    def test_normal_formula(self, mean_replicates):
        """Normal CI = t0 - bias -/+ z * se."""
        t = mean_replicates.values
        t0 = mean_replicates.t0
        z = sp_stats.norm.ppf(0.975)
        bias = np.mean(t) - t0
        se = np.std(t, ddof=1)

        ci = interval("normal", None, mean_replicates)
        assert ci.lo == pytest.approx(t0 - bias - z * se, rel=1e-12)
        assert ci.hi == pytest.approx(t0 - bias + z * se, rel=1e-12)

    def test_symmetric_about_corrected_center(self, mean_replicates):
        ci = interval("normal", None, mean_replicates)
        center = mean_replicates.t0 - mean_replicates.bias
        assert (ci.lo + ci.hi) / 2 == pytest.approx(center, rel=1e-12)

    def test_single_replicate_degenerate(self, make_replicate_set):
        ci = interval("normal", None, make_replicate_set([1.0], 1.0))
        assert isinstance(ci, DegenerateInterval)
        assert ci.reason == "too_few_replicates"


class TestBCaCI:

    def test_equals_percentile_without_correction(self, make_replicate_set):
        """z0 = 0 and a = 0 reproduce the percentile interval exactly."""
        t = np.random.default_rng(0).permutation(np.arange(1000.0))
        rs = make_replicate_set(t, t0=499.5)

        bca = interval("bca", None, rs, acceleration=0.0)
        perc = interval("percentile", None, rs)
        assert bca.lo == perc.lo
        assert bca.hi == perc.hi
        assert bca.info["z0"] == 0.0
        assert bca.info["levels"] == pytest.approx((0.025, 0.975))

    def test_bias_correction_only(self, make_replicate_set):
        t = np.arange(1000.0)
        rs = make_replicate_set(t, t0=599.5)
        alpha = 0.1

        ci = interval("bca", None, rs, alpha=alpha, acceleration=0.0)

        z0 = sp_stats.norm.ppf(0.6)
        alpha1 = sp_stats.norm.cdf(2 * z0 + sp_stats.norm.ppf(alpha / 2))
        alpha2 = sp_stats.norm.cdf(2 * z0 + sp_stats.norm.ppf(1 - alpha / 2))
        assert ci.info["z0"] == pytest.approx(z0, rel=1e-12)
        assert ci.info["levels"][0] == pytest.approx(alpha1, rel=1e-12)
        assert ci.info["levels"][1] == pytest.approx(alpha2, rel=1e-12)
        assert ci.lo == pytest.approx(quantile(t, alpha1), rel=1e-12)
        assert ci.hi == pytest.approx(quantile(t, alpha2), rel=1e-12)

    def test_acceleration_from_jackknife(self, skewed_sample, mean_replicates):
        ci = interval("bca", None, mean_replicates)
        js = jackknife(skewed_sample, mean_stat)
        assert ci.ok
        assert ci.info["acceleration"] == pytest.approx(js.acceleration, rel=1e-12)
        assert ci.info["acceleration"] > 0

    def test_supplied_jackknife_matches(self, skewed_sample, mean_replicates):
        js = jackknife(skewed_sample, mean_stat)
        auto = interval("bca", None, mean_replicates)
        given = interval("bca", None, mean_replicates, jackknife_set=js)
        assert auto.as_tuple() == given.as_tuple()

    def test_shifted_right_for_skewed_mean(self, mean_replicates):
        """Positive acceleration moves BCa above the percentile interval."""
        bca = interval("bca", None, mean_replicates)
        perc = interval("percentile", None, mean_replicates)
        assert bca.hi > perc.hi

    @pytest.mark.parametrize("t0", [-1.0, 1000.0])
    def test_infinite_bias_correction(self, make_replicate_set, t0):
        rs = make_replicate_set(np.arange(1000.0), t0=t0)
        ci = interval("bca", None, rs, acceleration=0.0)
        assert isinstance(ci, DegenerateInterval)
        assert ci.reason == "infinite_bias_correction"
        assert not ci.ok
        assert ci.status is IntervalStatus.DEGENERATE
        assert not hasattr(ci, "lo")

    def test_vanishing_denominator(self, make_replicate_set):
        rs = make_replicate_set(np.arange(1000.0), t0=499.5)
        ci = interval("bca", None, rs, acceleration=1.0)
        assert isinstance(ci, DegenerateInterval)
        assert ci.reason == "vanishing_denominator"

    def test_jackknife_fallback(self, normal_sample):
        rs = run_bootstrap(normal_sample, full_sample_only, B=999, seed=1)
        with pytest.warns(RuntimeWarning, match="acceleration set to 0"):
            ci = interval("bca", None, rs)
        assert ci.ok
        assert ci.info["acceleration"] == 0.0
        assert any("bias correction only" in w for w in ci.warnings)

    def test_jackknife_fallback_disabled(self, normal_sample):
        rs = run_bootstrap(normal_sample, full_sample_only, B=999, seed=1)
        ci = interval("bca", None, rs, jackknife_fallback=False)
        assert isinstance(ci, FailedInterval)
        assert ci.error is InsufficientDataError


class TestStudentizedCI:

    def test_studentized_formula(self, normal_sample):
        rs = run_bootstrap(normal_sample, mean_var_stat, B=999, seed=5)
        t0 = rs.t0
        z = (rs.t - t0) / np.sqrt(rs.variances)
        q_lo, q_hi = quantile(z, [0.025, 0.975])
        se0 = np.sqrt(rs.t0_variance)

        ci = interval("studentized", None, rs)
        assert ci.lo == pytest.approx(t0 - q_hi * se0, rel=1e-12)
        assert ci.hi == pytest.approx(t0 - q_lo * se0, rel=1e-12)
        assert ci.info["n_excluded"] == 0

    def test_nested_variances(self, normal_sample):
        rs = run_bootstrap_with_variance(normal_sample, mean_stat, B=200, B_inner=50, seed=5)
        ci = interval("stud", None, rs)
        assert ci.ok
        assert ci.method == "studentized"
        assert ci.contains(rs.t0)

    def test_no_variances(self, mean_replicates):
        ci = interval("studentized", None, mean_replicates)
        assert isinstance(ci, FailedInterval)
        assert ci.error is MissingVarianceError
        assert ci.status is IntervalStatus.FAILED

    def test_all_zero_variances(self, normal_sample):
        rs = run_bootstrap(normal_sample, lambda d, i: (float(np.mean(d[i])), 0.0), B=50, seed=0)
        ci = interval("studentized", None, rs)
        assert isinstance(ci, FailedInterval)
        assert ci.error is MissingVarianceError
        assert "finite and positive" in ci.message

    def test_unusable_t0_variance(self, make_replicate_set):
        rs = make_replicate_set(
            np.arange(100.0), 50.0, variances=np.ones(100), t0_variance=0.0,
        )
        ci = interval("studentized", None, rs)
        assert isinstance(ci, FailedInterval)
        assert ci.error is MissingVarianceError

    def test_non_finite_pivots_excluded(self, make_replicate_set):
        variances = np.ones(100)
        variances[[3, 7]] = 0.0
        rs = make_replicate_set(
            np.arange(100.0), 49.5, variances=variances, t0_variance=1.0,
        )
        with pytest.warns(RuntimeWarning, match="non-finite z"):
            ci = interval("studentized", None, rs)
        assert ci.ok
        assert ci.info["n_excluded"] == 2

    def test_kernel_counts_exclusions(self):
        lo, hi, n_excluded = _ci_studentized(
            0.0, np.array([1.0, 2.0, 3.0, 4.0]), 0.1, 1.0, np.array([1.0, 1.0, 0.0, 1.0]),
        )
        assert n_excluded == 1
        assert lo <= hi


# ---------------------------------------------------------------------------
# Tests: Outcome types
# ---------------------------------------------------------------------------

class TestOutcomes:

    def test_confidence_interval_fields(self, mean_replicates):
        ci = interval("percentile", None, mean_replicates)
        assert isinstance(ci, ConfidenceInterval)
        assert ci.ok
        assert ci.status is IntervalStatus.COMPUTED
        assert ci.level == pytest.approx(0.95)
        assert ci.alpha == pytest.approx(0.05)
        assert ci.width == pytest.approx(ci.hi - ci.lo)
        assert ci.contains(mean_replicates.t0)
        assert ci.warnings == ()

    def test_summaries(self, mean_replicates, make_replicate_set):
        ok = interval("percentile", None, mean_replicates)
        assert ok.summary().startswith("95% percentile CI: (")

        degenerate = interval("bca", None, make_replicate_set(np.arange(10.0), -1.0), acceleration=0.0)
        assert "degenerate" in degenerate.summary()

        failed = interval("studentized", None, mean_replicates)
        assert "MissingVarianceError" in failed.summary()

    def test_all_replicates_undefined(self, make_replicate_set):
        ci = interval("percentile", None, make_replicate_set([np.nan] * 5, 1.0))
        assert isinstance(ci, FailedInterval)
        assert ci.error is InsufficientDataError

    def test_undefined_replicates_skipped(self, make_replicate_set):
        t = np.concatenate([np.arange(999.0), [np.nan] * 10])
        ci = interval("percentile", None, make_replicate_set(t, 500.0), alpha=0.1)
        assert ci.info["B_used"] == 999
        assert ci.as_tuple() == (49.0, 949.0)

    @pytest.mark.parametrize("method", ["percentile", "basic"])
    def test_extreme_order_statistics(self, method):
        rs = run_bootstrap(np.arange(10.0), mean_stat, B=10, seed=0)
        with pytest.warns(RuntimeWarning, match="extreme order statistics"):
            ci = interval(method, None, rs)
        assert "extreme order statistics used as endpoints" in ci.warnings


# ---------------------------------------------------------------------------
# Tests: Argument handling
# ---------------------------------------------------------------------------

class TestArguments:

    @pytest.mark.parametrize("alpha", [0.0, 1.0, -0.05, 1.5])
    def test_invalid_alpha(self, mean_replicates, alpha):
        with pytest.raises(InvalidArgumentError, match="alpha"):
            interval("percentile", None, mean_replicates, alpha=alpha)

    def test_unknown_method(self, mean_replicates):
        with pytest.raises(InvalidArgumentError, match="Unknown interval method"):
            interval("jackknife-after-bootstrap", None, mean_replicates)

    @pytest.mark.parametrize("alias, canonical", [
        ("norm", "normal"),
        ("perc", "percentile"),
        ("BCa", "bca"),
        ("Basic", "basic"),
    ])
    def test_aliases(self, mean_replicates, alias, canonical):
        assert interval(alias, None, mean_replicates).method == canonical

    @pytest.mark.parametrize("t0", [np.nan, np.inf, "x"])
    def test_invalid_t0(self, mean_replicates, t0):
        with pytest.raises(InvalidArgumentError, match="t0"):
            interval("basic", t0, mean_replicates)

    def test_wrong_replicate_set_type(self):
        with pytest.raises(InvalidArgumentError, match="ReplicateSet"):
            interval("percentile", 0.0, np.arange(10.0))

    def test_wrong_jackknife_type(self, mean_replicates):
        with pytest.raises(InvalidArgumentError, match="JackknifeSet"):
            interval("bca", None, mean_replicates, jackknife_set=[0.1, 0.2])

    def test_wrong_transform_type(self, mean_replicates):
        with pytest.raises(InvalidArgumentError, match="Transform"):
            interval("normal", None, mean_replicates, transform=np.log)

    def test_non_finite_acceleration(self, mean_replicates):
        with pytest.raises(InvalidArgumentError, match="acceleration"):
            interval("bca", None, mean_replicates, acceleration=np.nan)


# ---------------------------------------------------------------------------
# Tests: Several intervals at once
# ---------------------------------------------------------------------------

class TestIntervals:

    def test_all_without_variances(self, mean_replicates):
        out = intervals(mean_replicates)
        assert list(out) == ["normal", "basic", "percentile", "bca"]
        assert all(ci.ok for ci in out.values())

    def test_all_with_variances(self, normal_sample):
        rs = run_bootstrap(normal_sample, mean_var_stat, B=500, seed=1)
        out = intervals(rs, "all")
        assert list(out) == ["normal", "basic", "percentile", "bca", "studentized"]
        assert all(ci.ok for ci in out.values())

    def test_selected_in_request_order(self, mean_replicates):
        out = intervals(mean_replicates, ["perc", "norm"], alpha=0.1)
        assert list(out) == ["percentile", "normal"]
        assert out["percentile"].level == pytest.approx(0.9)

    def test_single_method_string(self, mean_replicates):
        assert list(intervals(mean_replicates, "bca")) == ["bca"]

    def test_matches_individual_calls(self, mean_replicates):
        out = intervals(mean_replicates)
        for method, ci in out.items():
            assert ci.as_tuple() == interval(method, None, mean_replicates).as_tuple()
