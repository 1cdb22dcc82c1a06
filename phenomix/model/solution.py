"""
Kernel evaluation result types.

Contains the report payload (objective plus every derived vector) and the
user-facing solution wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from phenomix.core.result import Result

if TYPE_CHECKING:
    from phenomix.model.design import PhenologyDesign


# Reported quantities in reporting order. Always present unless listed in
# OPTIONAL_QUANTITIES.
REPORT_ORDER = (
    'theta',
    'sigma1',
    'mu',
    'b_mu',
    'b_sig1',
    'year_tot',
    'year_log_tot',
    'obs_sigma',
    'pred',
    'lower25',
    'upper75',
    'range',
    'tdf_1',
    'beta_1',
    'b_sig2',
    'sigma2',
    'tdf_2',
    'beta_2',
)

OPTIONAL_QUANTITIES = frozenset({
    'obs_sigma', 'tdf_1', 'beta_1', 'b_sig2', 'sigma2', 'tdf_2', 'beta_2',
})


@dataclass(frozen=True)
class KernelReport:
    """
    Objective and derived quantities of one kernel evaluation.

    Conditionally present quantities are None when the configuration does
    not define them:

    - ``obs_sigma``: families with a dispersion (gaussian, nbinom, lognormal)
    - ``tdf_1`` / ``beta_1``: student_t / gnorm tail models
    - ``sigma2``, ``b_sig2``: asymmetric models
    - ``tdf_2`` / ``beta_2``: asymmetric student_t / gnorm models

    ``log_dens``, ``pred`` and ``loglik`` are per observation; ``mu``,
    ``sigma1``/``sigma2``, quartiles and annual totals are per group.
    """
    nll: float
    prior: float
    penalty: float
    log_dens: NDArray
    pred: NDArray
    loglik: NDArray
    theta: NDArray
    mu: NDArray
    sigma1: NDArray
    b_mu: NDArray
    b_sig1: NDArray
    lower25: NDArray
    upper75: NDArray
    range: NDArray
    year_tot: NDArray
    year_log_tot: NDArray
    obs_sigma: float | None = None
    tdf_1: float | None = None
    beta_1: float | None = None
    sigma2: NDArray | None = None
    b_sig2: NDArray | None = None
    tdf_2: float | None = None
    beta_2: float | None = None

    def reported(self) -> dict[str, Any]:
        """Present reported quantities, in reporting order."""
        out = {}
        for name in REPORT_ORDER:
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out


@dataclass
class KernelSolution:
    """
    User-facing kernel evaluation results.

    Wraps the Result envelope and provides convenient accessors for the
    objective and derived vectors.
    """
    _result: Result[KernelReport]
    _design: 'PhenologyDesign'

    @property
    def report(self) -> KernelReport:
        return self._result.params

    @property
    def nll(self) -> float:
        """Negative log-likelihood (objective to minimize)."""
        return self._result.params.nll

    @property
    def log_posterior(self) -> float:
        """Negated objective: data log-likelihood plus priors and penalties.

        The per-observation log-likelihood is ``report.loglik``.
        """
        return -self._result.params.nll

    @property
    def mu(self) -> NDArray:
        """Location (peak day) of each group."""
        return self._result.params.mu

    @property
    def sigma1(self) -> NDArray:
        """Scale of each group (left side for asymmetric models)."""
        return self._result.params.sigma1

    @property
    def sigma2(self) -> NDArray | None:
        """Right-side scale of each group, asymmetric models only."""
        return self._result.params.sigma2

    @property
    def theta(self) -> NDArray:
        return self._result.params.theta

    @property
    def pred(self) -> NDArray:
        """Predicted log-intensity of each observation."""
        return self._result.params.pred

    @property
    def log_dens(self) -> NDArray:
        """Curve log density at each observation's day."""
        return self._result.params.log_dens

    @property
    def lower25(self) -> NDArray:
        return self._result.params.lower25

    @property
    def upper75(self) -> NDArray:
        return self._result.params.upper75

    @property
    def range(self) -> NDArray:
        """Interquartile range of each group's curve."""
        return self._result.params.range

    @property
    def year_tot(self) -> NDArray:
        return self._result.params.year_tot

    @property
    def year_log_tot(self) -> NDArray:
        return self._result.params.year_log_tot

    @property
    def is_finite(self) -> bool:
        return bool(np.isfinite(self.nll))

    @property
    def info(self) -> dict[str, Any]:
        """Configuration and size metadata."""
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        """Execution timing breakdown."""
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        """Non-fatal warnings from computation."""
        return self._result.warnings

    def reported(self) -> dict[str, Any]:
        """Present reported quantities, in reporting order."""
        return self._result.params.reported()

    def summary(self) -> str:
        """Generate summary output."""
        info = self.info
        lines = [
            "Seasonal Timing Kernel",
            "=" * 60,
            f"Observations: {self._design.n}",
            f"Groups: {self._design.n_levels}",
            f"Tail model: {info.get('tail_model')}"
            f"{' (asymmetric)' if info.get('asymmetric') else ''}",
            f"Family: {info.get('family')}",
            f"Negative log-likelihood: {self.nll:.6f}",
            f"  priors: {self.report.prior:.6f}",
            f"  random effects: {self.report.penalty:.6f}",
            "",
            f"{'group':>8} {'mu':>10} {'sigma1':>10} {'lower25':>10} "
            f"{'upper75':>10} {'year_tot':>12}",
            "-" * 60,
        ]
        for g, label in enumerate(self._design.labels):
            lines.append(
                f"{str(label):>8} {self.mu[g]:10.3f} {self.sigma1[g]:10.3f} "
                f"{self.lower25[g]:10.3f} {self.upper75[g]:10.3f} "
                f"{self.year_tot[g]:12.4g}"
            )
        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        if self.warnings:
            lines.append(f"Warnings: {len(self.warnings)}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        out: dict[str, Any] = {'nll': self.nll}
        for name, value in self.reported().items():
            out[name] = value.tolist() if isinstance(value, np.ndarray) else value
        out['n'] = self._design.n
        out['n_levels'] = self._design.n_levels
        out['backend'] = self.backend_name
        return out

    def __repr__(self) -> str:
        return (
            f"KernelSolution(n={self._design.n}, n_levels={self._design.n_levels}, "
            f"nll={self.nll:.4f})"
        )
