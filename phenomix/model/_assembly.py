"""
Parameter assembly for one kernel evaluation.

Turns raw KernelParams into the derived shape scalars and per-group curve
parameters, and computes the two non-data terms of the log-likelihood:
gamma priors on the tail shapes and the normal penalties on random
deviations.

The location and scales are linear in their covariates (no log link):
sigma = sig_mat @ b_sig (+ devs) is only positive where the caller keeps it
positive. Nothing here clamps.
"""

from __future__ import annotations

import numpy as np
from scipy import stats as sp_stats

from phenomix.distributions.single import gnorm_alpha_ratio
from phenomix.distributions.tails import SeasonalCurve, resolve_curve
from phenomix.model._common import GroupParams, KernelParams, ModelConfig, ShapeParams
from phenomix.model.design import PhenologyDesign


# Floor on Student-t degrees of freedom: df = exp(log_tdf) + 2.
MIN_TDF = 2.0


def derive_shapes(params: KernelParams, config: ModelConfig) -> ShapeParams:
    """Back-transform the scalar shape parameters.

    With ``share_shape`` the side-2 df and shape are overwritten from side
    1 in this single step, so no later code needs to know about the toggle.
    """
    tdf_1 = np.exp(params.log_tdf_1) + MIN_TDF
    tdf_2 = np.exp(params.log_tdf_2) + MIN_TDF
    beta_1 = np.exp(params.log_beta_1)
    beta_2 = np.exp(params.log_beta_2)
    if config.share_shape:
        tdf_2 = tdf_1
        beta_2 = beta_1

    ratio_1 = ratio_2 = None
    if config.tail_model == 'gnorm':
        ratio_1 = gnorm_alpha_ratio(beta_1)
        if config.asymmetric:
            ratio_2 = gnorm_alpha_ratio(beta_2)

    return ShapeParams(
        obs_sigma=float(np.exp(params.log_obs_sigma)),
        tdf_1=float(tdf_1),
        tdf_2=float(tdf_2),
        beta_1=float(beta_1),
        beta_2=float(beta_2),
        beta_ratio_1=ratio_1,
        beta_ratio_2=ratio_2,
    )


def assemble_groups(
    design: PhenologyDesign,
    params: KernelParams,
    config: ModelConfig,
    shapes: ShapeParams,
) -> GroupParams:
    """Per-group location and scale(s) from covariates and deviations."""
    mu = design.mu_mat @ params.b_mu
    sigma1 = design.sig_mat @ params.b_sig1
    sigma2 = design.sig_mat @ params.b_sig2 if config.asymmetric else None

    if config.est_sigma_re:
        sigma1 = sigma1 + params.sigma1_devs
        if config.asymmetric:
            sigma2 = sigma2 + params.sigma2_devs

    if config.est_mu_re:
        mu = mu + params.mu_devs

    alpha1 = alpha2 = None
    if config.tail_model == 'gnorm':
        alpha1 = sigma1 * shapes.beta_ratio_1
        if config.asymmetric:
            alpha2 = sigma2 * shapes.beta_ratio_2

    return GroupParams(mu=mu, sigma1=sigma1, sigma2=sigma2,
                       alpha1=alpha1, alpha2=alpha2)


def build_curve(
    groups: GroupParams,
    shapes: ShapeParams,
    config: ModelConfig,
) -> SeasonalCurve:
    """Resolve the configured curve over the assembled group parameters."""
    return resolve_curve(
        config.tail_model,
        config.asymmetric,
        mu=groups.mu,
        sigma1=groups.sigma1,
        sigma2=groups.sigma2,
        alpha1=groups.alpha1,
        alpha2=groups.alpha2,
        df1=shapes.tdf_1,
        df2=shapes.tdf_2,
        beta1=shapes.beta_1,
        beta2=shapes.beta_2,
    )


def shape_prior(shapes: ShapeParams, config: ModelConfig) -> float:
    """Gamma log prior on the tail df or shape, when enabled.

    Side 2 contributes only for asymmetric models (with ``share_shape`` it
    is the same value counted twice, as a second side would be).
    """
    total = 0.0
    if config.use_t_prior and config.tail_model == 'student_t':
        a, scale = config.nu_prior
        total += sp_stats.gamma.logpdf(shapes.tdf_1, a, scale=scale)
        if config.asymmetric:
            total += sp_stats.gamma.logpdf(shapes.tdf_2, a, scale=scale)
    if config.use_beta_prior and config.tail_model == 'gnorm':
        a, scale = config.beta_prior
        total += sp_stats.gamma.logpdf(shapes.beta_1, a, scale=scale)
        if config.asymmetric:
            total += sp_stats.gamma.logpdf(shapes.beta_2, a, scale=scale)
    return float(total)


def random_effect_penalty(params: KernelParams, config: ModelConfig) -> float:
    """Zero-mean normal log densities of the enabled random deviations."""
    total = 0.0
    if config.est_mu_re:
        total += np.sum(sp_stats.norm.logpdf(
            params.mu_devs, 0.0, np.exp(params.log_sigma_mu_devs)))
    if config.est_sigma_re:
        total += np.sum(sp_stats.norm.logpdf(
            params.sigma1_devs, 0.0, np.exp(params.log_sigma1_sd)))
        if config.asymmetric:
            total += np.sum(sp_stats.norm.logpdf(
                params.sigma2_devs, 0.0, np.exp(params.log_sigma2_sd)))
    return float(total)
