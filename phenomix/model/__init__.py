"""
Seasonal timing model kernel.

Public API:
    PhenologyDesign.from_arrays(y, x, groups, ...) -> design
    ModelConfig(...) / ModelConfig.from_codes(...) -> config
    KernelParams(...) -> raw parameters
    evaluate(design, params, config) -> KernelSolution
    make_objective(design, config, base) -> (objective, ParameterLayout)
    delta_method_se(design, config, params, covariance) -> standard errors
"""

from phenomix.model._common import GroupParams, KernelParams, ModelConfig, ShapeParams
from phenomix.model._layout import ParameterLayout, active_parameters
from phenomix.model._objective import compute_report, negative_log_likelihood
from phenomix.model._sensitivity import delta_method_se, derived_jacobian, objective_hessian
from phenomix.model._summaries import DAY_GRID
from phenomix.model.design import PhenologyDesign, index_groups
from phenomix.model.families import (
    ObservationFamily,
    Gaussian,
    Poisson,
    NegativeBinomial,
    Binomial,
    Lognormal,
    resolve_family,
)
from phenomix.model.solution import KernelReport, KernelSolution
from phenomix.model.solvers import check_params, evaluate, make_objective

__all__ = [
    "PhenologyDesign",
    "index_groups",
    "ModelConfig",
    "KernelParams",
    "ShapeParams",
    "GroupParams",
    "ObservationFamily",
    "Gaussian",
    "Poisson",
    "NegativeBinomial",
    "Binomial",
    "Lognormal",
    "resolve_family",
    "KernelReport",
    "KernelSolution",
    "ParameterLayout",
    "active_parameters",
    "DAY_GRID",
    "compute_report",
    "negative_log_likelihood",
    "check_params",
    "evaluate",
    "make_objective",
    "derived_jacobian",
    "objective_hessian",
    "delta_method_se",
]
