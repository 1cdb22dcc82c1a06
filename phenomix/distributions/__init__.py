"""
Timing distributions for seasonal curves.

Single-sided (symmetric) and two-piece log densities and quantiles for the
normal, Student-t and generalized normal families, plus the dispatch that
binds a tail model to per-group parameters.

Naming follows R: ``dX`` is a log density, ``qX`` a quantile, and a
leading ``d`` in ``ddX``/``qdX`` marks the two-piece variant.
"""

from phenomix.distributions._hill import qthill
from phenomix.distributions.single import (
    dnorm, qnorm,
    dt, qt,
    dgnorm, qgnorm,
    gnorm_alpha_ratio,
)
from phenomix.distributions.double import (
    ddnorm, qdnorm,
    ddt, qdt,
    ddgnorm, qdgnorm,
)
from phenomix.distributions.tails import (
    TAIL_MODELS,
    SeasonalCurve,
    resolve_curve,
    resolve_tail_model,
)

__all__ = [
    "qthill",
    "dnorm", "qnorm",
    "dt", "qt",
    "dgnorm", "qgnorm",
    "gnorm_alpha_ratio",
    "ddnorm", "qdnorm",
    "ddt", "qdt",
    "ddgnorm", "qdgnorm",
    "TAIL_MODELS",
    "SeasonalCurve",
    "resolve_curve",
    "resolve_tail_model",
]
