"""
Tests for the single-sided timing densities and quantiles.

Checks each log density against scipy.stats, the quantiles against the
exact inverses, and the generalized normal's reduction to the normal at
beta = 2.
"""

import numpy as np
import pytest
from scipy import stats as sp_stats

from phenomix.distributions import (
    dgnorm, dnorm, dt, gnorm_alpha_ratio, qgnorm, qnorm, qt,
)


X_GRID = np.linspace(80.0, 220.0, 57)


# =====================================================================
# Normal
# =====================================================================

class TestNormal:

    def test_density_matches_scipy(self):
        np.testing.assert_allclose(
            dnorm(X_GRID, 150.0, 12.0),
            sp_stats.norm.logpdf(X_GRID, 150.0, 12.0), rtol=1e-12)

    def test_quantile(self):
        assert qnorm(0.75, 150.0, 12.0) == pytest.approx(
            150.0 + 12.0 * 0.6744897501960817, rel=1e-12)

    def test_median(self):
        assert qnorm(0.5, 150.0, 12.0) == 150.0

    def test_broadcasts_over_groups(self):
        mu = np.array([100.0, 150.0])
        sigma = np.array([5.0, 10.0])
        out = dnorm(np.array([100.0, 150.0]), mu, sigma)
        np.testing.assert_allclose(out, sp_stats.norm.logpdf(0.0) - np.log(sigma))

    def test_negative_scale_is_nan(self):
        with np.errstate(all="ignore"):
            assert np.isnan(dnorm(0.0, 0.0, -1.0))


# =====================================================================
# Student-t
# =====================================================================

class TestStudentT:

    @pytest.mark.parametrize("df", [2.5, 4.0, 30.0])
    def test_density_matches_scipy(self, df):
        np.testing.assert_allclose(
            dt(X_GRID, 150.0, 12.0, df),
            sp_stats.t.logpdf(X_GRID, df, loc=150.0, scale=12.0), rtol=1e-10)

    def test_density_integrates_to_one(self):
        x = np.linspace(-3000.0, 3000.0, 600001)
        dens = np.exp(dt(x, 0.0, 2.0, 5.0))
        assert np.sum(dens) * (x[1] - x[0]) == pytest.approx(1.0, abs=1e-4)

    def test_quantile_close_to_exact(self):
        np.testing.assert_allclose(
            qt(0.75, 150.0, 12.0, 6.0),
            sp_stats.t.ppf(0.75, 6.0, loc=150.0, scale=12.0), rtol=1e-4)

    def test_median(self):
        assert qt(0.5, 150.0, 12.0, 6.0) == pytest.approx(150.0, abs=1e-12)

    def test_large_df_close_to_normal(self):
        np.testing.assert_allclose(
            dt(X_GRID, 150.0, 12.0, 1e6), dnorm(X_GRID, 150.0, 12.0), atol=1e-3)


# =====================================================================
# Generalized normal
# =====================================================================

class TestGeneralizedNormal:

    @pytest.mark.parametrize("beta", [0.8, 1.0, 1.5, 2.0, 4.0])
    def test_density_matches_gennorm(self, beta):
        np.testing.assert_allclose(
            dgnorm(X_GRID, 150.0, 9.0, beta),
            sp_stats.gennorm.logpdf(X_GRID, beta, loc=150.0, scale=9.0),
            rtol=1e-10)

    @pytest.mark.parametrize("beta", [1.0, 1.5, 2.0, 4.0])
    @pytest.mark.parametrize("p", [0.05, 0.25, 0.75, 0.95])
    def test_quantile_matches_gennorm(self, p, beta):
        np.testing.assert_allclose(
            qgnorm(p, 150.0, 9.0, beta),
            sp_stats.gennorm.ppf(p, beta, loc=150.0, scale=9.0), rtol=1e-8)

    def test_quartiles_straddle_location(self):
        lower = qgnorm(0.25, 150.0, 9.0, 3.0)
        upper = qgnorm(0.75, 150.0, 9.0, 3.0)
        assert lower < 150.0 < upper
        assert upper - 150.0 == pytest.approx(150.0 - lower, rel=1e-10)

    def test_median(self):
        assert qgnorm(0.5, 150.0, 9.0, 3.0) == 150.0

    @pytest.mark.parametrize("mu,sigma", [(150.0, 12.0), (100.0, 3.0),
                                          (200.0, 25.0), (0.0, 1.0)])
    def test_beta_two_density_is_normal(self, mu, sigma):
        alpha = sigma * gnorm_alpha_ratio(2.0)
        np.testing.assert_allclose(
            dgnorm(X_GRID, mu, alpha, 2.0),
            sp_stats.norm.logpdf(X_GRID, mu, sigma), rtol=1e-10)

    @pytest.mark.parametrize("mu,sigma", [(150.0, 12.0), (100.0, 3.0),
                                          (200.0, 25.0), (0.0, 1.0)])
    @pytest.mark.parametrize("p", [0.1, 0.25, 0.75, 0.9])
    def test_beta_two_quantile_is_normal(self, p, mu, sigma):
        alpha = sigma * gnorm_alpha_ratio(2.0)
        np.testing.assert_allclose(
            qgnorm(p, mu, alpha, 2.0),
            sp_stats.norm.ppf(p, mu, sigma), rtol=1e-8, atol=1e-10)

    def test_ratio_at_two(self):
        assert gnorm_alpha_ratio(2.0) == pytest.approx(np.sqrt(2.0), rel=1e-12)

    @pytest.mark.parametrize("beta", [0.7, 1.0, 2.0, 5.0])
    def test_ratio_gives_unit_variance(self, beta):
        ratio = gnorm_alpha_ratio(beta)
        assert sp_stats.gennorm.var(beta, scale=ratio) == pytest.approx(1.0, rel=1e-8)

    def test_zero_shape_does_not_raise(self):
        with np.errstate(all="ignore"):
            ratio = gnorm_alpha_ratio(0.0)
            out = dgnorm(1.0, 0.0, 1.0, 0.0)
        assert np.isnan(ratio)
        assert not np.isfinite(out)
