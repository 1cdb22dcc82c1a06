"""
Tail-model dispatch.

A seasonal curve is determined by two configuration switches: the tail
family (gaussian, student_t, gnorm) and whether the curve is two-piece.
``resolve_curve`` resolves that combination once per evaluation into a pair
of closures over the per-group parameter vectors, so the hot loops
(observations, the 365-day grid) never branch on configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from phenomix.distributions.single import dnorm, qnorm, dt, qt, dgnorm, qgnorm
from phenomix.distributions.double import ddnorm, qdnorm, ddt, qdt, ddgnorm, qdgnorm


# Position in this tuple is the integer tail code.
TAIL_MODELS = ("gaussian", "student_t", "gnorm")

_TAIL_ALIASES = {
    "gaussian": "gaussian",
    "normal": "gaussian",
    "student_t": "student_t",
    "t": "student_t",
    "gnorm": "gnorm",
    "generalized_normal": "gnorm",
}


def resolve_tail_model(tail_model: str | int) -> str:
    """Resolve a tail-model name or integer code to its canonical name.

    Raises:
        ValueError: If the name or code is not recognized.
        TypeError: If the argument is neither str nor int.
    """
    if isinstance(tail_model, bool):
        raise TypeError("tail_model must be str or int, got bool")
    if isinstance(tail_model, (int, np.integer)):
        if not 0 <= int(tail_model) < len(TAIL_MODELS):
            raise ValueError(
                f"Unknown tail_model code: {tail_model!r}. "
                f"Valid codes: 0 (gaussian), 1 (student_t), 2 (gnorm)"
            )
        return TAIL_MODELS[int(tail_model)]
    if isinstance(tail_model, str):
        name = _TAIL_ALIASES.get(tail_model.lower())
        if name is None:
            valid = ', '.join(TAIL_MODELS)
            raise ValueError(f"Unknown tail_model: {tail_model!r}. Valid models: {valid}")
        return name
    raise TypeError(f"tail_model must be str or int, got {type(tail_model).__name__}")


@dataclass(frozen=True)
class SeasonalCurve:
    """
    Per-evaluation timing curve for every group.

    Attributes:
        tail_model: Canonical tail-model name.
        asymmetric: Whether the curve is two-piece.
        log_density: ``f(x, g)`` -> log density at x for 0-based groups g
            (arrays broadcast together).
        quantile: ``q(p, g)`` -> quantile of group g at probability p.
    """
    tail_model: str
    asymmetric: bool
    log_density: Callable[[NDArray, NDArray], NDArray]
    quantile: Callable[[float, int], float]


def resolve_curve(
    tail_model: str,
    asymmetric: bool,
    *,
    mu: NDArray,
    sigma1: NDArray,
    sigma2: NDArray | None = None,
    alpha1: NDArray | None = None,
    alpha2: NDArray | None = None,
    df1: float | None = None,
    df2: float | None = None,
    beta1: float | None = None,
    beta2: float | None = None,
) -> SeasonalCurve:
    """Bind the (tail model, asymmetry) combination to group parameters.

    Args:
        tail_model: 'gaussian', 'student_t' or 'gnorm'.
        asymmetric: Use the two-piece densities.
        mu, sigma1, sigma2: Per-group location and side scales.
        alpha1, alpha2: Per-group generalized-normal scales (gnorm only).
        df1, df2: Student-t degrees of freedom (student_t only).
        beta1, beta2: Generalized-normal shapes (gnorm only).

    Side-2 arguments are only read when ``asymmetric`` is True.
    """
    key = (resolve_tail_model(tail_model), bool(asymmetric))

    if key == ("gaussian", False):
        def log_density(x, g):
            return dnorm(x, mu[g], sigma1[g])

        def quantile(p, g):
            return qnorm(p, mu[g], sigma1[g])

    elif key == ("gaussian", True):
        def log_density(x, g):
            return ddnorm(x, mu[g], sigma1[g], sigma2[g])

        def quantile(p, g):
            return qdnorm(p, mu[g], sigma1[g], sigma2[g])

    elif key == ("student_t", False):
        def log_density(x, g):
            return dt(x, mu[g], sigma1[g], df1)

        def quantile(p, g):
            return qt(p, mu[g], sigma1[g], df1)

    elif key == ("student_t", True):
        def log_density(x, g):
            return ddt(x, mu[g], sigma1[g], sigma2[g], df1, df2)

        def quantile(p, g):
            return qdt(p, mu[g], sigma1[g], sigma2[g], df1, df2)

    elif key == ("gnorm", False):
        def log_density(x, g):
            return dgnorm(x, mu[g], alpha1[g], beta1)

        def quantile(p, g):
            return qgnorm(p, mu[g], alpha1[g], beta1)

    else:
        def log_density(x, g):
            return ddgnorm(x, mu[g], sigma1[g], sigma2[g],
                           alpha1[g], alpha2[g], beta1, beta2)

        def quantile(p, g):
            return qdgnorm(p, mu[g], sigma1[g], sigma2[g],
                           alpha1[g], alpha2[g], beta1, beta2)

    return SeasonalCurve(
        tail_model=key[0],
        asymmetric=key[1],
        log_density=log_density,
        quantile=quantile,
    )
