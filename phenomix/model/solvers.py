"""
Entry points for the seasonal timing kernel.

Public API:
    evaluate(design, params, ...) -> KernelSolution
    make_objective(design, config, ...) -> callable for an optimizer
"""

from __future__ import annotations

import warnings
from typing import Any, Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from phenomix.core.compute.timing import Timer
from phenomix.core.exceptions import ValidationError
from phenomix.core.result import Result
from phenomix.core.validation import check_1d, check_length
from phenomix.model._common import KernelParams, ModelConfig, VECTOR_PARAMS
from phenomix.model._layout import ParameterLayout, active_parameters
from phenomix.model._objective import compute_report, negative_log_likelihood
from phenomix.model.design import PhenologyDesign
from phenomix.model.solution import KernelSolution


BACKEND_NAME = 'cpu_numpy'


def _resolve_config(config: ModelConfig | None, config_kwargs: dict[str, Any]) -> ModelConfig:
    if config is None:
        return ModelConfig(**config_kwargs)
    if config_kwargs:
        raise ValidationError(
            "Pass either a ModelConfig or keyword switches, not both "
            f"(got config and {sorted(config_kwargs)})"
        )
    return config


def check_params(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
) -> None:
    """
    Verify every parameter the configuration reads is sized for the design.

    Inactive vectors (e.g. ``sigma2_devs`` of a symmetric model) are not
    checked. Values are never checked: out-of-range scales are the
    caller's responsibility and produce NaN, not errors.

    Raises:
        DimensionError: If an active parameter has the wrong length.
    """
    sizes = {
        'n_levels': design.n_levels,
        'n_mu_cov': design.n_mu_cov,
        'n_sig_cov': design.n_sig_cov,
    }
    active = set(active_parameters(config))
    for name, size_key in VECTOR_PARAMS.items():
        if name not in active:
            continue
        value = getattr(params, name)
        check_1d(value, name)
        check_length(value, sizes[size_key], name)


def evaluate(
    design: PhenologyDesign,
    params: KernelParams,
    config: ModelConfig | None = None,
    **config_kwargs: Any,
) -> KernelSolution:
    """
    Evaluate the negative log-likelihood and all derived quantities.

    Parameters
    ----------
    design : PhenologyDesign
        Observations and per-group covariates.
    params : KernelParams
        Raw parameters.
    config : ModelConfig, optional
        Model switches. Alternatively pass them as keywords, e.g.
        ``evaluate(design, params, tail_model='student_t', asymmetric=True)``.

    Returns
    -------
    KernelSolution

    Examples
    --------
    >>> design = PhenologyDesign.from_arrays(y, day, year_index)
    >>> params = KernelParams.zeros(design.n_levels, design.n_mu_cov,
    ...                             design.n_sig_cov).replace(
    ...     b_mu=np.full(design.n_levels, 150.0), b_sig1=[10.0])
    >>> sol = evaluate(design, params, family='poisson')
    >>> sol.nll, sol.range
    """
    config = _resolve_config(config, config_kwargs)
    check_params(design, config, params)

    timer = Timer()
    timer.start()
    report = compute_report(design, config, params, timer=timer)
    timer.stop()

    warn_list: list[str] = []
    if not np.isfinite(report.nll):
        message = "non-finite objective; check that every scale and shape is positive"
        warnings.warn(message, RuntimeWarning, stacklevel=2)
        warn_list.append(message)

    info = {
        'tail_model': config.tail_model,
        'asymmetric': config.asymmetric,
        'family': config.family,
        'est_mu_re': config.est_mu_re,
        'est_sigma_re': config.est_sigma_re,
        'share_shape': config.share_shape,
        'n': design.n,
        'n_levels': design.n_levels,
    }
    result = Result(
        params=report,
        info=info,
        timing=timer.result(),
        backend_name=BACKEND_NAME,
        warnings=tuple(warn_list),
    )
    return KernelSolution(_result=result, _design=design)


def make_objective(
    design: PhenologyDesign,
    config: ModelConfig,
    base: KernelParams | None = None,
) -> tuple[Callable[[ArrayLike], float], ParameterLayout]:
    """
    Objective over the flat vector of free parameters.

    Returns the objective and the layout that maps vectors to parameters.
    The objective keeps no state between calls and can be shared between
    threads.

    Examples
    --------
    >>> from scipy.optimize import minimize
    >>> f, layout = make_objective(design, config, base=start)
    >>> opt = minimize(f, layout.pack(start), method='BFGS')
    >>> fitted = layout.unpack(opt.x)
    """
    layout = ParameterLayout(design, config, base=base)

    def objective(vector: ArrayLike) -> float:
        return negative_log_likelihood(design, config, layout.unpack(vector))

    return objective, layout


def report_vector(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
    quantity: str,
) -> NDArray:
    """A single reported quantity as a 1D array."""
    report = compute_report(design, config, params)
    value = report.reported().get(quantity)
    if value is None:
        raise ValidationError(
            f"{quantity!r} is not reported for this configuration; "
            f"available: {sorted(report.reported())}"
        )
    return np.atleast_1d(np.asarray(value, dtype=np.float64))
