"""
Single-sided (symmetric) timing densities and quantiles.

Every density returns a LOG density and broadcasts over numpy arrays;
quantiles are evaluated at a scalar probability. All three families share
the ``(x, location, scale[, shape])`` argument order.

Generalized normal uses the (alpha, beta) parameterization of
Nadarajah (2005): alpha is the scale of |x - mu|^beta, not the standard
deviation. ``gnorm_alpha_ratio`` converts between the two.

No argument is validated: a non-positive scale or shape yields NaN/Inf
from the underlying primitives and is left for the caller to detect.

References:
    Nadarajah, S. (2005). A generalized normal distribution.
    Journal of Applied Statistics, 32(7), 685-694.
    Griffin, M. (2018). gnorm: Generalized Normal/Exponential Power
    Distribution. R package.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats
from scipy.special import gammaln

from phenomix.distributions._hill import qthill


# =====================================================================
# Normal
# =====================================================================

def dnorm(x: ArrayLike, mu: ArrayLike, sigma: ArrayLike) -> NDArray:
    """Normal log density."""
    return sp_stats.norm.logpdf(x, mu, sigma)


def qnorm(p: float, mu: float, sigma: float) -> float:
    """Normal quantile."""
    return float(sp_stats.norm.ppf(p, mu, sigma))


# =====================================================================
# Student-t
# =====================================================================

def dt(x: ArrayLike, mu: ArrayLike, sigma: ArrayLike, df: ArrayLike) -> NDArray:
    """Location-scale Student-t log density.

    The standardized residual is evaluated under the unit t density and
    the log scale subtracted, i.e. log(f((x - mu) / sigma) / sigma).
    """
    return sp_stats.t.logpdf((np.asarray(x) - mu) / sigma, df) - np.log(sigma)


def qt(p: float, mu: float, sigma: float, df: float) -> float:
    """Location-scale Student-t quantile (Hill's approximation)."""
    return qthill(p, df, mu, sigma)


# =====================================================================
# Generalized normal
# =====================================================================

def dgnorm(x: ArrayLike, mu: ArrayLike, alpha: ArrayLike, beta: ArrayLike) -> NDArray:
    """Generalized normal log density.

    log f(x) = -(|x - mu| / alpha)^beta + log(beta)
               - (log(2) + log(alpha) + log Gamma(1/beta))
    """
    x = np.asarray(x, dtype=np.float64)
    beta = np.asarray(beta, dtype=np.float64)
    return (-np.power(np.abs(x - mu) / alpha, beta) + np.log(beta)
            - (np.log(2.0) + np.log(alpha) + gammaln(1.0 / beta)))


def qgnorm(p: float, mu: float, alpha: float, beta: float) -> float:
    """Generalized normal quantile.

    |X - mu|^beta is Gamma(shape=1/beta, scale=alpha^beta), so the quantile
    is obtained by reflecting p about 0.5, taking the gamma quantile of the
    central mass 2|p - 0.5| and mapping back with the tracked sign.
    """
    alpha, beta = np.float64(alpha), np.float64(beta)
    if p - 0.5 > 0.0:
        sign = 1.0
    elif p - 0.5 < 0.0:
        sign = -1.0
    else:
        sign = 0.0
    shape = 1.0 / beta
    scale = 1.0 / (1.0 / alpha) ** beta
    g = sp_stats.gamma.ppf(abs(p - 0.5) * 2, shape, scale=scale)
    return float(sign * g ** (1.0 / beta) + mu)


def gnorm_alpha_ratio(beta: float) -> float:
    """Ratio alpha / sigma giving a generalized normal of variance sigma^2.

    Var = alpha^2 Gamma(3/beta) / Gamma(1/beta), hence
    alpha = sigma * sqrt(Gamma(1/beta) / Gamma(3/beta)). Depends only on the
    shape, so it is computed once per side per evaluation.
    """
    beta = np.float64(beta)
    return float(np.sqrt(np.exp(gammaln(1.0 / beta)) / np.exp(gammaln(3.0 / beta))))
