"""
Finite-difference sensitivities of reported quantities.

The kernel only promises that every reported quantity is built from
smooth operations of the parameters. These helpers differentiate it
numerically over the free-parameter vector of a ParameterLayout, which is
enough for delta-method standard errors of derived quantities such as
the quartiles or the annual totals:

    Var(g(phi)) ~= J A J',   J = dg/dphi,   A = Var(phi_hat)

where A is usually the inverse Hessian of the objective at the optimum.

Step sizes follow the usual relative rule h_j = eps * max(|phi_j|, 1) with
central differences throughout.
"""

from __future__ import annotations

import warnings
from typing import Callable, Iterable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from phenomix.core.exceptions import DimensionError, NumericalError
from phenomix.model._common import KernelParams, ModelConfig
from phenomix.model._layout import ParameterLayout
from phenomix.model._objective import negative_log_likelihood
from phenomix.model.design import PhenologyDesign
from phenomix.model.solvers import report_vector


def _steps(phi: NDArray, eps: float) -> NDArray:
    return eps * np.maximum(np.abs(phi), 1.0)


def _jacobian(fun: Callable[[NDArray], NDArray], phi: NDArray, eps: float) -> NDArray:
    """Central-difference Jacobian of a vector function."""
    h = _steps(phi, eps)
    columns = []
    for j in range(phi.shape[0]):
        plus = phi.copy()
        minus = phi.copy()
        plus[j] += h[j]
        minus[j] -= h[j]
        columns.append((fun(plus) - fun(minus)) / (2.0 * h[j]))
    return np.column_stack(columns) if columns else np.zeros((fun(phi).shape[0], 0))


def derived_jacobian(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
    quantity: str,
    eps: float = 1e-5,
) -> tuple[NDArray, ParameterLayout]:
    """
    Jacobian of a reported quantity w.r.t. the free parameters.

    Args:
        design, config, params: Evaluation point.
        quantity: Name of a reported quantity ('lower25', 'year_tot', ...).
        eps: Relative step size.

    Returns:
        (J, layout): J has one row per element of the quantity and one
        column per element of ``layout.labels``.
    """
    layout = ParameterLayout(design, config, base=params)
    phi = layout.pack(params)

    def fun(vec: NDArray) -> NDArray:
        return report_vector(design, config, layout.unpack(vec), quantity)

    return _jacobian(fun, phi, eps), layout


def objective_hessian(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
    eps: float = 1e-4,
) -> tuple[NDArray, ParameterLayout]:
    """
    Hessian of the negative log-likelihood w.r.t. the free parameters.

    Computed as the symmetrized central-difference Jacobian of a
    central-difference gradient.
    """
    layout = ParameterLayout(design, config, base=params)
    phi = layout.pack(params)

    def objective(vec: NDArray) -> float:
        return negative_log_likelihood(design, config, layout.unpack(vec))

    def gradient(vec: NDArray) -> NDArray:
        h = _steps(vec, eps)
        grad = np.empty(vec.shape[0])
        for j in range(vec.shape[0]):
            plus = vec.copy()
            minus = vec.copy()
            plus[j] += h[j]
            minus[j] -= h[j]
            grad[j] = (objective(plus) - objective(minus)) / (2.0 * h[j])
        return grad

    H = _jacobian(gradient, phi, eps)
    return 0.5 * (H + H.T), layout


def delta_method_se(
    design: PhenologyDesign,
    config: ModelConfig,
    params: KernelParams,
    covariance: ArrayLike | None = None,
    quantities: Iterable[str] = ('mu', 'lower25', 'upper75', 'range', 'year_tot'),
    eps: float = 1e-5,
) -> dict[str, NDArray]:
    """
    Delta-method standard errors of reported quantities.

    Args:
        design, config, params: Estimates (normally the optimum).
        covariance: Covariance of the free-parameter vector, ordered as
            ``ParameterLayout(design, config).labels``. Defaults to the
            inverse of ``objective_hessian``.
        quantities: Names of reported quantities.
        eps: Relative step size for the Jacobians.

    Returns:
        Mapping quantity -> standard errors (same shape as the quantity).

    Raises:
        NumericalError: If the default Hessian cannot be inverted.
        DimensionError: If ``covariance`` does not match the layout.
    """
    if covariance is None:
        H, _ = objective_hessian(design, config, params)
        try:
            A = np.linalg.inv(H)
        except np.linalg.LinAlgError as e:
            raise NumericalError(
                f"Hessian of the objective is singular: {e}", quantity='hessian'
            ) from e
    else:
        A = np.asarray(covariance, dtype=np.float64)

    out: dict[str, NDArray] = {}
    for name in quantities:
        J, layout = derived_jacobian(design, config, params, name, eps=eps)
        if A.shape != (layout.size, layout.size):
            raise DimensionError(
                f"covariance: expected shape ({layout.size}, {layout.size}), got {A.shape}"
            )
        var = np.einsum('ij,jk,ik->i', J, A, J)
        if np.any(var < 0):
            warnings.warn(
                f"{name}: negative delta-method variance clipped to 0; "
                "the covariance is not positive semi-definite",
                RuntimeWarning,
                stacklevel=2,
            )
        out[name] = np.sqrt(np.maximum(var, 0.0))
    return out
