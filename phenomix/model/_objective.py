"""
Objective assembly for the seasonal timing kernel.

    nll = -(shape prior + random-effect penalty + sum_i loglik_i)

where loglik_i is the observation family's log-likelihood of y_i given
pred_i = log_dens(x_i; group g_i) + theta[g_i].

The kernel is a pure function of (design, config, params): no state is kept
between calls, so concurrent evaluations with different parameters are
safe. Floating-point warnings are silenced for the duration of a call;
invalid parameter regions show up as NaN/Inf in the result instead.
"""

from __future__ import annotations

from contextlib import nullcontext

import numpy as np

from phenomix.core.compute.timing import Timer
from phenomix.distributions.tails import SeasonalCurve
from phenomix.model._assembly import (
    assemble_groups,
    build_curve,
    derive_shapes,
    random_effect_penalty,
    shape_prior,
)
from phenomix.model._common import KernelParams, ModelConfig, ShapeParams
from phenomix.model._summaries import annual_totals, quartiles
from phenomix.model.design import PhenologyDesign
from phenomix.model.solution import KernelReport


def _section(timer: Timer | None, name: str):
    return timer.section(name) if timer is not None else nullcontext()


def _data_terms(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
    curve: SeasonalCurve,
):
    """Per-observation log density, prediction and log-likelihood."""
    log_dens = curve.log_density(design.x, design.groups)
    pred = log_dens + params.theta[design.groups]
    loglik = config.observation_family.log_likelihood(
        design.y, pred, params.log_obs_sigma)
    return log_dens, pred, loglik


def compute_report(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
    timer: Timer | None = None,
) -> KernelReport:
    """Evaluate the objective and every derived quantity.

    Args:
        design: Observations and per-group covariates.
        config: Fixed model switches.
        params: Raw parameters, already sized for ``design``.
        timer: Optional timer receiving 'assembly', 'summaries' and
            'likelihood' sections.

    Returns:
        KernelReport with conditionally present fields set per ``config``.
    """
    with np.errstate(all='ignore'):
        with _section(timer, 'assembly'):
            shapes = derive_shapes(params, config)
            groups = assemble_groups(design, params, config, shapes)
            curve = build_curve(groups, shapes, config)
            prior = shape_prior(shapes, config)
            penalty = random_effect_penalty(params, config)

        with _section(timer, 'summaries'):
            q = quartiles(curve, design.n_levels)
            totals = annual_totals(curve, params.theta)

        with _section(timer, 'likelihood'):
            log_dens, pred, loglik = _data_terms(design, config, params, curve)
            nll = -(prior + penalty + float(np.sum(loglik)))

    return KernelReport(
        nll=nll,
        prior=prior,
        penalty=penalty,
        log_dens=log_dens,
        pred=pred,
        loglik=loglik,
        theta=params.theta.copy(),
        mu=groups.mu,
        sigma1=groups.sigma1,
        b_mu=params.b_mu.copy(),
        b_sig1=params.b_sig1.copy(),
        lower25=q.lower25,
        upper75=q.upper75,
        range=q.range,
        year_tot=totals.year_tot,
        year_log_tot=totals.year_log_tot,
        **_optional_quantities(config, shapes, params, groups.sigma2),
    )


def _optional_quantities(config, shapes: ShapeParams, params, sigma2) -> dict:
    out = {}
    if config.observation_family.reports_dispersion:
        out['obs_sigma'] = shapes.obs_sigma
    if config.tail_model == 'student_t':
        out['tdf_1'] = shapes.tdf_1
    if config.tail_model == 'gnorm':
        out['beta_1'] = shapes.beta_1
    if config.asymmetric:
        out['b_sig2'] = params.b_sig2.copy()
        out['sigma2'] = sigma2
        if config.tail_model == 'student_t':
            out['tdf_2'] = shapes.tdf_2
        if config.tail_model == 'gnorm':
            out['beta_2'] = shapes.beta_2
    return out


def negative_log_likelihood(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
) -> float:
    """Objective only; skips the quartile and annual-total summaries."""
    with np.errstate(all='ignore'):
        shapes = derive_shapes(params, config)
        groups = assemble_groups(design, params, config, shapes)
        curve = build_curve(groups, shapes, config)
        _, _, loglik = _data_terms(design, config, params, curve)
        return -(shape_prior(shapes, config)
                 + random_effect_penalty(params, config)
                 + float(np.sum(loglik)))
