import math

import numpy as np
import pytest

from ateprobe import ConfigurationError, ObservedSample, confidence_interval, covers, estimate


RNG = np.random.default_rng(42)
N = 400
N_TREAT = 150


def make_sample(treated_sd=3.0, control_sd=1.0, effect=0.5):
    """
    Two arms with very different outcome variances, so robust and
    homoskedastic variances disagree.
    """
    treated = np.zeros(N, dtype=bool)
    treated[RNG.permutation(N)[:N_TREAT]] = True
    y = np.where(
        treated,
        effect + treated_sd * RNG.normal(size=N),
        control_sd * RNG.normal(size=N),
    )
    return ObservedSample(y=y, treated=treated)


def hc1_by_hand(sample):
    y, t = sample.y, sample.treated
    n, n1, n0 = len(y), t.sum(), (~t).sum()
    e1 = y[t] - y[t].mean()
    e0 = y[~t] - y[~t].mean()
    return n / (n - 2) * ((e1 ** 2).sum() / n1 ** 2 + (e0 ** 2).sum() / n0 ** 2)


class TestEstimate:
    def test_slope_is_difference_in_means(self):
        sample = make_sample()
        b, _ = estimate(sample)
        expected = sample.y[sample.treated].mean() - sample.y[~sample.treated].mean()
        assert b == pytest.approx(expected, rel=1e-10)

    def test_hc1_matches_closed_form(self):
        sample = make_sample()
        _, v_hat = estimate(sample)
        assert v_hat == pytest.approx(hc1_by_hand(sample), rel=1e-8)

    def test_hc1_is_scaled_hc0(self):
        sample = make_sample()
        _, v0 = estimate(sample, cov_type="HC0")
        _, v1 = estimate(sample, cov_type="HC1")
        assert v1 == pytest.approx(v0 * N / (N - 2), rel=1e-10)

    def test_robust_differs_from_homoskedastic(self):
        """With unequal arm variances and unequal arm sizes the pooled variance is wrong."""
        sample = make_sample(treated_sd=3.0, control_sd=1.0)
        _, robust = estimate(sample)
        _, pooled = estimate(sample, cov_type="nonrobust")
        assert abs(robust - pooled) / robust > 0.1

    def test_unknown_cov_type_raises(self):
        with pytest.raises(ConfigurationError, match="covariance type"):
            estimate(make_sample(), cov_type="HC9")

    def test_single_arm_raises(self):
        sample = ObservedSample(y=RNG.normal(size=10), treated=np.ones(10, dtype=bool))
        with pytest.raises(ConfigurationError, match="non-empty"):
            estimate(sample)

    def test_constant_outcome_gives_zero_variance(self):
        treated = np.array([True, False] * 5)
        sample = ObservedSample(y=np.ones(10), treated=treated)
        b, v_hat = estimate(sample)
        assert b == pytest.approx(0.0, abs=1e-12)
        assert v_hat == pytest.approx(0.0, abs=1e-12)


class TestConfidenceInterval:
    def test_wald_interval(self):
        lo, hi = confidence_interval(0.5, 0.04)
        assert lo == pytest.approx(0.5 - 1.96 * 0.2)
        assert hi == pytest.approx(0.5 + 1.96 * 0.2)

    def test_custom_critical_value(self):
        lo, hi = confidence_interval(0.0, 1.0, z=2.576)
        assert (lo, hi) == (pytest.approx(-2.576), pytest.approx(2.576))

    def test_nan_variance_gives_nan_bounds(self):
        lo, hi = confidence_interval(0.1, math.nan)
        assert math.isnan(lo) and math.isnan(hi)

    def test_negative_variance_gives_nan_bounds(self):
        lo, hi = confidence_interval(0.1, -1.0)
        assert math.isnan(lo) and math.isnan(hi)

    def test_infinite_variance_gives_nan_bounds(self):
        lo, hi = confidence_interval(0.1, math.inf)
        assert math.isnan(lo) and math.isnan(hi)
        assert not covers(0.1, lo, hi)


class TestCovers:
    def test_inside_and_outside(self):
        assert covers(0.2, 0.1, 0.3)
        assert not covers(0.4, 0.1, 0.3)

    def test_bounds_are_inclusive(self):
        assert covers(0.1, 0.1, 0.3)
        assert covers(0.3, 0.1, 0.3)

    def test_nan_never_covers(self):
        assert not covers(0.2, math.nan, math.nan)
        assert not covers(math.nan, 0.1, 0.3)

    def test_unbounded_interval_never_covers(self):
        assert not covers(0.2, -math.inf, math.inf)
        assert not covers(0.2, 0.1, math.inf)
        assert not covers(math.inf, 0.1, math.inf)
