"""
Tests for parameter assembly: shape back-transforms, group parameters,
shape priors and random-effect penalties.
"""

import numpy as np
import pytest
from scipy import stats as sp_stats

from phenomix.distributions import gnorm_alpha_ratio
from phenomix.model import KernelParams, ModelConfig, PhenologyDesign
from phenomix.model._assembly import (
    MIN_TDF,
    assemble_groups,
    build_curve,
    derive_shapes,
    random_effect_penalty,
    shape_prior,
)


@pytest.fixture
def trend_design():
    """Three groups, location trend over groups, one scale covariate."""
    return PhenologyDesign.from_arrays(
        y=[1.0, 2.0, 3.0],
        x=[140.0, 150.0, 160.0],
        groups=[1, 2, 3],
        mu_mat=[[1.0, -1.0], [1.0, 0.0], [1.0, 1.0]],
        sig_mat=[[1.0], [1.0], [1.0]],
    )


@pytest.fixture
def trend_params():
    return KernelParams(
        b_mu=[150.0, 5.0],
        b_sig1=[8.0],
        b_sig2=[12.0],
        theta=[1.0, 2.0, 3.0],
        mu_devs=[0.5, -0.5, 1.0],
        sigma1_devs=[1.0, 0.0, -1.0],
        sigma2_devs=[-2.0, 0.0, 2.0],
        log_sigma_mu_devs=np.log(2.0),
        log_sigma1_sd=np.log(0.5),
        log_sigma2_sd=np.log(3.0),
        log_tdf_1=np.log(3.0),
        log_tdf_2=np.log(8.0),
        log_beta_1=np.log(1.5),
        log_beta_2=np.log(4.0),
        log_obs_sigma=np.log(0.2),
    )


# =====================================================================
# Shapes
# =====================================================================

class TestDeriveShapes:

    def test_back_transforms(self, trend_params):
        cfg = ModelConfig(tail_model="student_t", asymmetric=True, share_shape=False)
        s = derive_shapes(trend_params, cfg)
        assert s.tdf_1 == pytest.approx(3.0 + MIN_TDF)
        assert s.tdf_2 == pytest.approx(8.0 + MIN_TDF)
        assert s.obs_sigma == pytest.approx(0.2)

    def test_share_shape_overwrites_side_two(self, trend_params):
        cfg = ModelConfig(tail_model="gnorm", asymmetric=True, share_shape=True)
        s = derive_shapes(trend_params, cfg)
        assert s.beta_2 == s.beta_1 == pytest.approx(1.5)
        assert s.tdf_2 == s.tdf_1

    def test_gnorm_ratios(self, trend_params):
        cfg = ModelConfig(tail_model="gnorm", asymmetric=True, share_shape=False)
        s = derive_shapes(trend_params, cfg)
        assert s.beta_ratio_1 == pytest.approx(gnorm_alpha_ratio(1.5))
        assert s.beta_ratio_2 == pytest.approx(gnorm_alpha_ratio(4.0))

    def test_ratio_two_only_when_asymmetric(self, trend_params):
        s = derive_shapes(trend_params, ModelConfig(tail_model="gnorm"))
        assert s.beta_ratio_1 is not None
        assert s.beta_ratio_2 is None

    def test_no_ratios_outside_gnorm(self, trend_params):
        s = derive_shapes(trend_params, ModelConfig(tail_model="student_t"))
        assert s.beta_ratio_1 is None
        assert s.beta_ratio_2 is None


# =====================================================================
# Group parameters
# =====================================================================

class TestAssembleGroups:

    def test_linear_trends(self, trend_design, trend_params):
        cfg = ModelConfig()
        g = assemble_groups(trend_design, trend_params, cfg, derive_shapes(trend_params, cfg))
        np.testing.assert_allclose(g.mu, [145.0, 150.0, 155.0])
        np.testing.assert_allclose(g.sigma1, [8.0, 8.0, 8.0])
        assert g.sigma2 is None
        assert g.alpha1 is None

    def test_random_deviations(self, trend_design, trend_params):
        cfg = ModelConfig(asymmetric=True, est_mu_re=True, est_sigma_re=True)
        g = assemble_groups(trend_design, trend_params, cfg, derive_shapes(trend_params, cfg))
        np.testing.assert_allclose(g.mu, [145.5, 149.5, 156.0])
        np.testing.assert_allclose(g.sigma1, [9.0, 8.0, 7.0])
        np.testing.assert_allclose(g.sigma2, [10.0, 12.0, 14.0])

    def test_deviations_ignored_when_disabled(self, trend_design, trend_params):
        cfg = ModelConfig(asymmetric=True)
        g = assemble_groups(trend_design, trend_params, cfg, derive_shapes(trend_params, cfg))
        np.testing.assert_allclose(g.mu, [145.0, 150.0, 155.0])
        np.testing.assert_allclose(g.sigma2, [12.0, 12.0, 12.0])

    def test_gnorm_alphas(self, trend_design, trend_params):
        cfg = ModelConfig(tail_model="gnorm", asymmetric=True, share_shape=False)
        shapes = derive_shapes(trend_params, cfg)
        g = assemble_groups(trend_design, trend_params, cfg, shapes)
        np.testing.assert_allclose(g.alpha1, 8.0 * gnorm_alpha_ratio(1.5) * np.ones(3))
        np.testing.assert_allclose(g.alpha2, 12.0 * gnorm_alpha_ratio(4.0) * np.ones(3))

    def test_each_group_uses_its_own_sigma(self, trend_params):
        design = PhenologyDesign.from_arrays(
            [1.0, 1.0], [100.0, 200.0], [1, 2], sig_mat=[[1.0, 0.0], [0.0, 1.0]])
        params = trend_params.replace(b_mu=[100.0, 200.0], b_sig1=[4.0, 9.0])
        cfg = ModelConfig()
        g = assemble_groups(design, params, cfg, derive_shapes(params, cfg))
        np.testing.assert_allclose(g.sigma1, [4.0, 9.0])

    def test_build_curve_matches_config(self, trend_design, trend_params):
        cfg = ModelConfig(tail_model="student_t", asymmetric=True)
        shapes = derive_shapes(trend_params, cfg)
        curve = build_curve(
            assemble_groups(trend_design, trend_params, cfg, shapes), shapes, cfg)
        assert curve.tail_model == "student_t"
        assert curve.asymmetric
        # mass left of mu is 8 / (8 + 12)
        assert curve.quantile(0.4, 1) == pytest.approx(150.0, abs=1e-8)


# =====================================================================
# Priors and penalties
# =====================================================================

class TestShapePrior:

    def test_disabled_is_zero(self, trend_params):
        cfg = ModelConfig(tail_model="student_t")
        assert shape_prior(derive_shapes(trend_params, cfg), cfg) == 0.0

    def test_t_prior(self, trend_params):
        cfg = ModelConfig(tail_model="student_t", use_t_prior=True)
        expected = sp_stats.gamma.logpdf(5.0, 2.0, scale=10.0)
        assert shape_prior(derive_shapes(trend_params, cfg), cfg) == pytest.approx(expected)

    def test_t_prior_asymmetric_counts_both_sides(self, trend_params):
        cfg = ModelConfig(tail_model="student_t", asymmetric=True, share_shape=False,
                          use_t_prior=True, nu_prior=(3.0, 4.0))
        expected = (sp_stats.gamma.logpdf(5.0, 3.0, scale=4.0)
                    + sp_stats.gamma.logpdf(10.0, 3.0, scale=4.0))
        assert shape_prior(derive_shapes(trend_params, cfg), cfg) == pytest.approx(expected)

    def test_beta_prior(self, trend_params):
        cfg = ModelConfig(tail_model="gnorm", use_beta_prior=True)
        expected = sp_stats.gamma.logpdf(1.5, 2.0, scale=1.0)
        assert shape_prior(derive_shapes(trend_params, cfg), cfg) == pytest.approx(expected)

    def test_prior_ignored_for_other_tail(self, trend_params):
        cfg = ModelConfig(tail_model="gaussian", use_t_prior=True, use_beta_prior=True)
        assert shape_prior(derive_shapes(trend_params, cfg), cfg) == 0.0


class TestRandomEffectPenalty:

    def test_disabled_is_zero(self, trend_params):
        assert random_effect_penalty(trend_params, ModelConfig(asymmetric=True)) == 0.0

    def test_location_penalty(self, trend_params):
        cfg = ModelConfig(est_mu_re=True)
        expected = np.sum(sp_stats.norm.logpdf([0.5, -0.5, 1.0], 0.0, 2.0))
        assert random_effect_penalty(trend_params, cfg) == pytest.approx(expected)

    def test_scale_penalty_symmetric(self, trend_params):
        cfg = ModelConfig(est_sigma_re=True)
        expected = np.sum(sp_stats.norm.logpdf([1.0, 0.0, -1.0], 0.0, 0.5))
        assert random_effect_penalty(trend_params, cfg) == pytest.approx(expected)

    def test_scale_penalty_asymmetric(self, trend_params):
        cfg = ModelConfig(est_sigma_re=True, asymmetric=True)
        expected = (np.sum(sp_stats.norm.logpdf([1.0, 0.0, -1.0], 0.0, 0.5))
                    + np.sum(sp_stats.norm.logpdf([-2.0, 0.0, 2.0], 0.0, 3.0)))
        assert random_effect_penalty(trend_params, cfg) == pytest.approx(expected)
