"""
phenomix: seasonal timing models for count data.

Fits the timing of a seasonal event (e.g. daily counts of migrating fish
across years) with a per-year curve whose tails are normal, Student-t or
generalized normal, optionally two-piece, under Gaussian, Poisson,
negative binomial, binomial or lognormal observation error.

Submodules:
    distributions: Single-sided and two-piece timing densities/quantiles
    model: Design, configuration, likelihood kernel and derived summaries
"""

__version__ = "0.1.0"

from phenomix import distributions
from phenomix import model
from phenomix.model import (
    KernelParams,
    ModelConfig,
    PhenologyDesign,
    evaluate,
    make_objective,
)

__all__ = [
    "__version__",
    "distributions",
    "model",
    "PhenologyDesign",
    "ModelConfig",
    "KernelParams",
    "evaluate",
    "make_objective",
]
