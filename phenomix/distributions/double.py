"""
Two-piece ("double") timing densities and quantiles.

A double distribution shares one location mu but uses an independent scale
(and shape) on each side of it: the left piece governs x < mu, the right
piece x >= mu. Each piece is the density of the standardized residual
(x - mu) / sigma_k under its side's family, and both are renormalized by
2 / (sigma1 + sigma2) so that the whole curve integrates to one. The mass
left of mu is r = sigma1 / (sigma1 + sigma2).

With sigma1 == sigma2 and equal shapes, every ``ddX``/``qdX`` reduces to the
single-sided ``dX``/``qX``.

References:
    Rubio, F. J. & Steel, M. F. J. (2014). Inference in two-piece
    location-scale models with Jeffreys priors. Bayesian Analysis, 9(1).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats

from phenomix.distributions.single import dgnorm, qgnorm, qnorm, qt


def _log_norm_const(sigma1: ArrayLike, sigma2: ArrayLike) -> NDArray:
    """log(2 / (sigma1 + sigma2))."""
    return np.log(2.0) - np.log(np.add(sigma1, sigma2))


def _left_probability(p: float, sigma1: float, sigma2: float) -> float:
    """Probability within the left piece's own distribution for p < r."""
    return 0.5 * p * (sigma1 + sigma2) / sigma1


def _right_probability(p: float, sigma1: float, sigma2: float) -> float:
    """Probability within the right piece's own distribution for p >= r."""
    return 0.5 * ((sigma1 + sigma2) * (1 + p) - 2 * sigma1) / sigma2


# =====================================================================
# Double normal
# =====================================================================

def ddnorm(x: ArrayLike, mu: ArrayLike, sigma1: ArrayLike, sigma2: ArrayLike) -> NDArray:
    """Two-piece normal log density."""
    x = np.asarray(x, dtype=np.float64)
    left = sp_stats.norm.logpdf((x - mu) / sigma1, 0.0, 1.0)
    right = sp_stats.norm.logpdf((x - mu) / sigma2, 0.0, 1.0)
    return _log_norm_const(sigma1, sigma2) + np.where(x < mu, left, right)


def qdnorm(p: float, mu: float, sigma1: float, sigma2: float) -> float:
    """Two-piece normal quantile."""
    sigma1, sigma2 = np.float64(sigma1), np.float64(sigma2)
    r = sigma1 / (sigma1 + sigma2)
    if p < r:
        return float(mu + sigma1 * qnorm(_left_probability(p, sigma1, sigma2), 0.0, 1.0))
    return float(mu + sigma2 * qnorm(_right_probability(p, sigma1, sigma2), 0.0, 1.0))


# =====================================================================
# Double Student-t
# =====================================================================

def ddt(
    x: ArrayLike,
    mu: ArrayLike,
    sigma1: ArrayLike,
    sigma2: ArrayLike,
    df1: ArrayLike,
    df2: ArrayLike,
) -> NDArray:
    """Two-piece Student-t log density, one df per side."""
    x = np.asarray(x, dtype=np.float64)
    left = sp_stats.t.logpdf((x - mu) / sigma1, df1)
    right = sp_stats.t.logpdf((x - mu) / sigma2, df2)
    return _log_norm_const(sigma1, sigma2) + np.where(x < mu, left, right)


def qdt(
    p: float,
    mu: float,
    sigma1: float,
    sigma2: float,
    df1: float,
    df2: float,
) -> float:
    """Two-piece Student-t quantile (Hill's approximation on each side)."""
    sigma1, sigma2 = np.float64(sigma1), np.float64(sigma2)
    r = sigma1 / (sigma1 + sigma2)
    if p < r:
        return float(mu + sigma1 * qt(_left_probability(p, sigma1, sigma2), 0.0, 1.0, df1))
    return float(mu + sigma2 * qt(_right_probability(p, sigma1, sigma2), 0.0, 1.0, df2))


# =====================================================================
# Double generalized normal
# =====================================================================

def ddgnorm(
    x: ArrayLike,
    mu: ArrayLike,
    sigma1: ArrayLike,
    sigma2: ArrayLike,
    alpha1: ArrayLike,
    alpha2: ArrayLike,
    beta1: ArrayLike,
    beta2: ArrayLike,
) -> NDArray:
    """Two-piece generalized normal log density.

    ``alpha_k`` is side k's generalized-normal scale (``sigma_k`` times the
    shape ratio). Adding ``log(sigma_k)`` turns each side's density into
    the density of the standardized residual before renormalization.
    """
    x = np.asarray(x, dtype=np.float64)
    left = dgnorm(x, mu, alpha1, beta1) + np.log(sigma1)
    right = dgnorm(x, mu, alpha2, beta2) + np.log(sigma2)
    return _log_norm_const(sigma1, sigma2) + np.where(x < mu, left, right)


def qdgnorm(
    p: float,
    mu: float,
    sigma1: float,
    sigma2: float,
    alpha1: float,
    alpha2: float,
    beta1: float,
    beta2: float,
) -> float:
    """Two-piece generalized normal quantile."""
    sigma1, sigma2 = np.float64(sigma1), np.float64(sigma2)
    r = sigma1 / (sigma1 + sigma2)
    if p < r:
        return qgnorm(_left_probability(p, sigma1, sigma2), mu, alpha1, beta1)
    return qgnorm(_right_probability(p, sigma1, sigma2), mu, alpha2, beta2)
