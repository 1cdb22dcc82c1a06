"""
Observation families for seasonal count data.

Each family turns the predicted log-intensity ``pred`` (timing log density
plus the group offset theta) and the log observation dispersion into a
per-observation log-likelihood. Families are identified by name or by the
integer code used by the compiled model interface:

    1 gaussian           y ~ Normal(pred, obs_sigma)
    2 poisson            y ~ Poisson(exp(min(pred, 20)))
    3 nbinom             y ~ NegBin(mean exp(pred), size obs_sigma)
    4 binomial           y ~ Bernoulli(logit^-1(pred))
    5 lognormal          log(y) ~ Normal(pred, obs_sigma)

Only the Poisson family clamps its linear predictor; the others receive
``pred`` unchanged and may overflow to Inf for extreme parameters.

References:
    Kristensen, K. et al. (2016). TMB: Automatic Differentiation and
    Laplace Approximation. Journal of Statistical Software, 70(5).
    (dnbinom_robust / dbinom_robust parameterizations)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats
from scipy.special import gammaln


# Largest log-intensity passed to exp() by the Poisson family.
POISSON_PRED_CAP = 20.0


class ObservationFamily(ABC):
    """
    Observation-error family.

    Subclasses implement ``log_likelihood`` on the log-intensity scale.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def code(self) -> int:
        ...

    @property
    def reports_dispersion(self) -> bool:
        """Whether ``obs_sigma`` enters the likelihood (and is reported)."""
        return True

    @abstractmethod
    def log_likelihood(
        self, y: NDArray, pred: NDArray, log_obs_sigma: float
    ) -> NDArray:
        """Per-observation log-likelihood of y given log-intensity pred."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Gaussian(ObservationFamily):
    """Normal errors on the log-intensity scale."""

    @property
    def name(self) -> str:
        return 'gaussian'

    @property
    def code(self) -> int:
        return 1

    def log_likelihood(self, y, pred, log_obs_sigma):
        return sp_stats.norm.logpdf(y, pred, np.exp(log_obs_sigma))


class Poisson(ObservationFamily):
    """Poisson counts with mean exp(pred).

    ``pred`` is capped at 20 before exponentiation. The cap is local to the
    likelihood; reported predictions are not modified.
    """

    @property
    def name(self) -> str:
        return 'poisson'

    @property
    def code(self) -> int:
        return 2

    @property
    def reports_dispersion(self) -> bool:
        return False

    def log_likelihood(self, y, pred, log_obs_sigma):
        capped = np.minimum(pred, POISSON_PRED_CAP)
        # log(lam) is the capped pred itself; exp(capped) underflows to 0
        # far from the peak. Real-valued y allowed, as with dpois.
        return y * capped - np.exp(capped) - gammaln(y + 1)


class NegativeBinomial(ObservationFamily):
    """Negative binomial in the robust mean/excess-variance form.

    The mean is exp(pred) and log(var - mean) = 2 * pred - log_obs_sigma,
    which makes obs_sigma the size (inverse overdispersion) parameter:
    var = mu + mu^2 / obs_sigma.
    """

    @property
    def name(self) -> str:
        return 'nbinom'

    @property
    def code(self) -> int:
        return 3

    def log_likelihood(self, y, pred, log_obs_sigma):
        return dnbinom_robust(y, pred, 2.0 * pred - log_obs_sigma)


class Binomial(ObservationFamily):
    """Presence/absence (0/1) data, one trial, logit link on pred."""

    @property
    def name(self) -> str:
        return 'binomial'

    @property
    def code(self) -> int:
        return 4

    @property
    def reports_dispersion(self) -> bool:
        return False

    def log_likelihood(self, y, pred, log_obs_sigma):
        return dbinom_robust(y, 1.0, pred)


class Lognormal(ObservationFamily):
    """Normal errors on log(y)."""

    @property
    def name(self) -> str:
        return 'lognormal'

    @property
    def code(self) -> int:
        return 5

    def log_likelihood(self, y, pred, log_obs_sigma):
        return sp_stats.norm.logpdf(np.log(y), pred, np.exp(log_obs_sigma))


# =====================================================================
# Robust log densities
# =====================================================================

def dnbinom_robust(
    x: NDArray, log_mu: NDArray, log_var_minus_mu: NDArray
) -> NDArray:
    """Negative binomial log density parameterized on the log scale.

    Computes size n = mu^2 / (var - mu) and p = mu / var entirely from
    logs so that neither mu nor var - mu is ever exponentiated alone.
    """
    x = np.asarray(x, dtype=np.float64)
    log_mu = np.asarray(log_mu, dtype=np.float64)
    log_var_minus_mu = np.asarray(log_var_minus_mu, dtype=np.float64)

    log_var = np.logaddexp(log_mu, log_var_minus_mu)
    log_n = 2.0 * log_mu - log_var_minus_mu
    log_p = log_mu - log_var
    log_1mp = log_var_minus_mu - log_var
    n = np.exp(log_n)

    res = n * log_p
    # the x == 0 term vanishes; skip it so 0 * log_1mp can't become NaN
    tail = gammaln(x + n) - gammaln(n) - gammaln(x + 1) + x * log_1mp
    return res + np.where(x != 0, tail, 0.0)


def dbinom_robust(k: NDArray, size: float, logit_p: NDArray) -> NDArray:
    """Binomial log density with the success probability on the logit scale.

    Uses log(p) = -log1p(exp(-eta)) and log(1 - p) = -log1p(exp(eta)) so
    neither tail underflows. The binomial coefficient is added only for
    more than one trial.
    """
    k = np.asarray(k, dtype=np.float64)
    logit_p = np.asarray(logit_p, dtype=np.float64)
    log_p = -np.logaddexp(0.0, -logit_p)
    log_1mp = -np.logaddexp(0.0, logit_p)
    ans = k * log_p + (size - k) * log_1mp
    if size > 1:
        ans = ans + gammaln(size + 1.0) - gammaln(k + 1.0) - gammaln(size - k + 1.0)
    return ans


# =====================================================================
# Family name / code -> class mapping + resolver
# =====================================================================

_FAMILY_CLASSES: dict[str, type[ObservationFamily]] = {
    'gaussian': Gaussian,
    'normal': Gaussian,
    'poisson': Poisson,
    'nbinom': NegativeBinomial,
    'negative_binomial': NegativeBinomial,
    'binomial': Binomial,
    'lognormal': Lognormal,
}

_FAMILY_CODES: dict[int, type[ObservationFamily]] = {
    1: Gaussian,
    2: Poisson,
    3: NegativeBinomial,
    4: Binomial,
    5: Lognormal,
}


def resolve_family(family: str | int | ObservationFamily) -> ObservationFamily:
    """Resolve a family argument to an ObservationFamily instance.

    Args:
        family: A name ('gaussian', 'poisson', 'nbinom', 'binomial',
                'lognormal'), an integer code 1-5, or an instance
                (passed through).

    Raises:
        ValueError: If the name or code is not recognized.
        TypeError: If the argument has an unsupported type.
    """
    if isinstance(family, ObservationFamily):
        return family
    if isinstance(family, bool):
        raise TypeError("family must be str, int or ObservationFamily, got bool")
    if isinstance(family, (int, np.integer)):
        cls = _FAMILY_CODES.get(int(family))
        if cls is None:
            raise ValueError(
                f"Unknown family code: {family!r}. Valid codes: 1-5"
            )
        return cls()
    if isinstance(family, str):
        cls = _FAMILY_CLASSES.get(family.lower())
        if cls is None:
            valid = ', '.join(
                sorted(k for k in _FAMILY_CLASSES
                       if k not in ('normal', 'negative_binomial'))
            )
            raise ValueError(
                f"Unknown family: {family!r}. Valid families: {valid}"
            )
        return cls()
    raise TypeError(
        f"family must be str, int or ObservationFamily, got {type(family).__name__}"
    )
