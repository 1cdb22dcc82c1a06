"""
Common data types for the seasonal timing model.

ModelConfig holds the fixed switches of one evaluation, KernelParams the
raw (optimizer-facing) parameters, and ShapeParams/GroupParams the
quantities derived from them inside one evaluation. All are frozen; none
outlives the evaluation that created it except the caller's own copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace as _replace
from typing import Any

import numpy as np
from numpy.typing import NDArray

from phenomix.core.exceptions import ValidationError
from phenomix.distributions.tails import TAIL_MODELS, resolve_tail_model
from phenomix.model.families import ObservationFamily, resolve_family


@dataclass(frozen=True)
class ModelConfig:
    """
    Fixed configuration of one kernel evaluation.

    Attributes
    ----------
    asymmetric : bool
        Estimate separate scales (and shapes) before and after the peak.
    family : str
        Observation family: 'gaussian', 'poisson', 'nbinom', 'binomial'
        or 'lognormal'.
    tail_model : str
        Tail family of the timing curve: 'gaussian', 'student_t' or 'gnorm'.
    est_mu_re : bool
        Add per-group random deviations to the location.
    est_sigma_re : bool
        Add per-group random deviations to the scale(s).
    share_shape : bool
        Force side-2 df/shape to equal side 1 in asymmetric models.
    use_t_prior : bool
        Gamma prior on the Student-t degrees of freedom.
    use_beta_prior : bool
        Gamma prior on the generalized-normal shape.
    nu_prior : tuple of float
        (shape, scale) of the gamma prior on df. The default follows
        Juarez & Steel (2010).
    beta_prior : tuple of float
        (shape, scale) of the gamma prior on the gnorm shape.
    """
    asymmetric: bool = False
    family: str = 'gaussian'
    tail_model: str = 'gaussian'
    est_mu_re: bool = False
    est_sigma_re: bool = False
    share_shape: bool = True
    use_t_prior: bool = False
    use_beta_prior: bool = False
    nu_prior: tuple[float, float] = (2.0, 10.0)
    beta_prior: tuple[float, float] = (2.0, 1.0)

    def __post_init__(self):
        try:
            fam = resolve_family(self.family)
            tail = resolve_tail_model(self.tail_model)
        except (ValueError, TypeError) as e:
            raise ValidationError(str(e)) from e
        object.__setattr__(self, 'family', fam.name)
        object.__setattr__(self, 'tail_model', tail)
        for name in ('asymmetric', 'est_mu_re', 'est_sigma_re', 'share_shape',
                     'use_t_prior', 'use_beta_prior'):
            object.__setattr__(self, name, bool(getattr(self, name)))
        for name in ('nu_prior', 'beta_prior'):
            pair = tuple(float(v) for v in getattr(self, name))
            if len(pair) != 2:
                raise ValidationError(
                    f"{name}: expected (shape, scale), got {len(pair)} values"
                )
            object.__setattr__(self, name, pair)

    @classmethod
    def from_codes(
        cls,
        *,
        asymmetric: int = 0,
        family: int = 1,
        tail_model: int = 0,
        est_mu_re: int = 0,
        est_sigma_re: int = 0,
        share_shape: int = 1,
        use_t_prior: int = 0,
        use_beta_prior: int = 0,
        nu_prior=(2.0, 10.0),
        beta_prior=(2.0, 1.0),
    ) -> ModelConfig:
        """Build from the integer switches of the compiled model interface.

        ``family`` is 1 gaussian, 2 poisson, 3 nbinom, 4 binomial,
        5 lognormal; ``tail_model`` is 0 gaussian, 1 student_t, 2 gnorm;
        toggles are 0/1.
        """
        for name, value in (('asymmetric', asymmetric), ('est_mu_re', est_mu_re),
                            ('est_sigma_re', est_sigma_re),
                            ('share_shape', share_shape),
                            ('use_t_prior', use_t_prior),
                            ('use_beta_prior', use_beta_prior)):
            if value not in (0, 1):
                raise ValidationError(f"{name}: expected 0 or 1, got {value!r}")
        return cls(
            asymmetric=asymmetric == 1,
            family=int(family),
            tail_model=int(tail_model),
            est_mu_re=est_mu_re == 1,
            est_sigma_re=est_sigma_re == 1,
            share_shape=share_shape == 1,
            use_t_prior=use_t_prior == 1,
            use_beta_prior=use_beta_prior == 1,
            nu_prior=nu_prior,
            beta_prior=beta_prior,
        )

    @property
    def observation_family(self) -> ObservationFamily:
        return resolve_family(self.family)

    def to_codes(self) -> dict[str, int]:
        """Integer switches matching ``from_codes``."""
        return {
            'asymmetric': int(self.asymmetric),
            'family': self.observation_family.code,
            'tail_model': TAIL_MODELS.index(self.tail_model),
            'est_mu_re': int(self.est_mu_re),
            'est_sigma_re': int(self.est_sigma_re),
            'share_shape': int(self.share_shape),
            'use_t_prior': int(self.use_t_prior),
            'use_beta_prior': int(self.use_beta_prior),
        }


# Vector-valued parameters and what their length is tied to.
VECTOR_PARAMS = {
    'b_mu': 'n_mu_cov',
    'b_sig1': 'n_sig_cov',
    'b_sig2': 'n_sig_cov',
    'theta': 'n_levels',
    'mu_devs': 'n_levels',
    'sigma1_devs': 'n_levels',
    'sigma2_devs': 'n_levels',
}

SCALAR_PARAMS = (
    'log_sigma_mu_devs',
    'log_sigma1_sd',
    'log_sigma2_sd',
    'log_tdf_1',
    'log_tdf_2',
    'log_beta_1',
    'log_beta_2',
    'log_obs_sigma',
)


def _vec(value) -> NDArray:
    return np.atleast_1d(np.asarray(value, dtype=np.float64))


@dataclass(frozen=True)
class KernelParams:
    """
    Raw model parameters, as seen by an optimizer.

    Scales and shapes enter on the log scale (degrees of freedom as
    log(df - 2)); coefficients for location and scale enter on the natural
    scale through the design matrices.
    """
    b_mu: NDArray
    b_sig1: NDArray
    theta: NDArray
    b_sig2: NDArray = field(default_factory=lambda: np.zeros(0))
    mu_devs: NDArray = field(default_factory=lambda: np.zeros(0))
    sigma1_devs: NDArray = field(default_factory=lambda: np.zeros(0))
    sigma2_devs: NDArray = field(default_factory=lambda: np.zeros(0))
    log_sigma_mu_devs: float = 0.0
    log_sigma1_sd: float = 0.0
    log_sigma2_sd: float = 0.0
    log_tdf_1: float = 0.0
    log_tdf_2: float = 0.0
    log_beta_1: float = np.log(2.0)
    log_beta_2: float = np.log(2.0)
    log_obs_sigma: float = 0.0

    def __post_init__(self):
        for name in VECTOR_PARAMS:
            object.__setattr__(self, name, _vec(getattr(self, name)))
        for name in SCALAR_PARAMS:
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def zeros(cls, n_levels: int, n_mu_cov: int, n_sig_cov: int) -> KernelParams:
        """All-zero vectors sized for a design; scalars at their defaults."""
        return cls(
            b_mu=np.zeros(n_mu_cov),
            b_sig1=np.zeros(n_sig_cov),
            b_sig2=np.zeros(n_sig_cov),
            theta=np.zeros(n_levels),
            mu_devs=np.zeros(n_levels),
            sigma1_devs=np.zeros(n_levels),
            sigma2_devs=np.zeros(n_levels),
        )

    def replace(self, **changes: Any) -> KernelParams:
        """Copy with some parameters changed."""
        return _replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.tolist() if isinstance(value, np.ndarray) else value
        return out


@dataclass(frozen=True)
class ShapeParams:
    """
    Scalars derived from KernelParams once per evaluation.

    ``tdf_2``/``beta_2`` already reflect ``share_shape``. The gnorm ratios
    are None unless the tail model is gnorm; ``beta_ratio_2`` is also None
    for symmetric models.
    """
    obs_sigma: float
    tdf_1: float
    tdf_2: float
    beta_1: float
    beta_2: float
    beta_ratio_1: float | None = None
    beta_ratio_2: float | None = None


@dataclass(frozen=True)
class GroupParams:
    """
    Per-group curve parameters assembled from covariates and deviations.

    Side-2 vectors are None for symmetric models; alphas are None unless
    the tail model is gnorm.
    """
    mu: NDArray
    sigma1: NDArray
    sigma2: NDArray | None = None
    alpha1: NDArray | None = None
    alpha2: NDArray | None = None
