"""
Flat parameter vectors for external optimizers.

An optimizer sees one float vector; the kernel sees KernelParams. The
layout decides which parameters are free for a configuration and in what
order they appear. Parameters that the configuration never reads (the
deviations of a disabled random effect, side-2 scales of a symmetric
model, the df of a non-t tail, ...) are left out of the vector and held at
their values in a base KernelParams.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from phenomix.core.exceptions import DimensionError
from phenomix.model._common import KernelParams, ModelConfig, VECTOR_PARAMS
from phenomix.model.design import PhenologyDesign


# Block order of the packed vector.
PARAM_ORDER = (
    'log_sigma1_sd',
    'sigma1_devs',
    'log_sigma2_sd',
    'sigma2_devs',
    'theta',
    'mu_devs',
    'log_sigma_mu_devs',
    'log_tdf_1',
    'log_tdf_2',
    'log_beta_1',
    'log_beta_2',
    'log_obs_sigma',
    'b_mu',
    'b_sig1',
    'b_sig2',
)


def active_parameters(config: ModelConfig) -> tuple[str, ...]:
    """Names of the parameters the configuration reads, in PARAM_ORDER."""
    asym = config.asymmetric
    second_shape = asym and not config.share_shape
    used = {
        'theta': True,
        'b_mu': True,
        'b_sig1': True,
        'b_sig2': asym,
        'mu_devs': config.est_mu_re,
        'log_sigma_mu_devs': config.est_mu_re,
        'sigma1_devs': config.est_sigma_re,
        'log_sigma1_sd': config.est_sigma_re,
        'sigma2_devs': config.est_sigma_re and asym,
        'log_sigma2_sd': config.est_sigma_re and asym,
        'log_tdf_1': config.tail_model == 'student_t',
        'log_tdf_2': config.tail_model == 'student_t' and second_shape,
        'log_beta_1': config.tail_model == 'gnorm',
        'log_beta_2': config.tail_model == 'gnorm' and second_shape,
        'log_obs_sigma': config.observation_family.reports_dispersion,
    }
    return tuple(name for name in PARAM_ORDER if used[name])


class ParameterLayout:
    """
    Mapping between KernelParams and a flat vector of free parameters.

    Parameters
    ----------
    design : PhenologyDesign
        Fixes the length of every vector-valued parameter.
    config : ModelConfig
        Decides which parameters are free.
    base : KernelParams, optional
        Values of the fixed (inactive) parameters. Defaults to
        ``KernelParams.zeros`` for the design.
    """

    def __init__(
        self,
        design: PhenologyDesign,
        config: ModelConfig,
        base: KernelParams | None = None,
    ):
        self._sizes = {
            'n_levels': design.n_levels,
            'n_mu_cov': design.n_mu_cov,
            'n_sig_cov': design.n_sig_cov,
        }
        self._names = active_parameters(config)
        if base is None:
            base = KernelParams.zeros(design.n_levels, design.n_mu_cov, design.n_sig_cov)
        self._base = base

        self._slices: dict[str, slice] = {}
        start = 0
        for name in self._names:
            length = self._block_length(name)
            self._slices[name] = slice(start, start + length)
            start += length
        self._size = start

    def _block_length(self, name: str) -> int:
        if name in VECTOR_PARAMS:
            return self._sizes[VECTOR_PARAMS[name]]
        return 1

    @property
    def names(self) -> tuple[str, ...]:
        """Active parameter blocks in vector order."""
        return self._names

    @property
    def size(self) -> int:
        """Length of the packed vector."""
        return self._size

    @property
    def base(self) -> KernelParams:
        return self._base

    @property
    def labels(self) -> list[str]:
        """One label per vector element, e.g. 'theta[2]' or 'log_obs_sigma'."""
        out = []
        for name in self._names:
            if name in VECTOR_PARAMS:
                n = self._block_length(name)
                out.extend(f"{name}[{i}]" for i in range(n))
            else:
                out.append(name)
        return out

    def slice(self, name: str) -> slice:
        """Position of a parameter block in the vector."""
        return self._slices[name]

    def pack(self, params: KernelParams) -> NDArray:
        """Flatten the active parameters of ``params``."""
        vec = np.empty(self._size)
        for name in self._names:
            value = np.atleast_1d(getattr(params, name))
            sl = self._slices[name]
            if value.shape[0] != sl.stop - sl.start:
                raise DimensionError(
                    f"{name}: expected length {sl.stop - sl.start}, got {value.shape[0]}"
                )
            vec[sl] = value
        return vec

    def unpack(self, vector: ArrayLike) -> KernelParams:
        """KernelParams with active entries from ``vector``, the rest from base."""
        vec = np.asarray(vector, dtype=np.float64)
        if vec.ndim != 1 or vec.shape[0] != self._size:
            raise DimensionError(
                f"vector: expected shape ({self._size},), got {vec.shape}"
            )
        changes = {}
        for name in self._names:
            block = vec[self._slices[name]]
            changes[name] = block.copy() if name in VECTOR_PARAMS else float(block[0])
        return self._base.replace(**changes)

    def __repr__(self) -> str:
        return f"ParameterLayout(size={self._size}, names={list(self._names)})"
