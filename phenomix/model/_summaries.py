"""
Derived per-group summaries of a fitted seasonal curve.

Quartiles come from the curve's own quantile function (closed form or
Hill's approximation, never root finding). Annual totals are discrete sums
over a fixed day-of-year grid; every grid day is evaluated so the totals
stay smooth functions of the parameters.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from phenomix.distributions.tails import SeasonalCurve


# Days 1..365 inclusive.
DAY_GRID = np.arange(1, 366, dtype=np.float64)

LOWER_P = 0.25
UPPER_P = 0.75


class Quartiles(NamedTuple):
    lower25: NDArray
    upper75: NDArray
    range: NDArray


class AnnualTotals(NamedTuple):
    year_tot: NDArray
    year_log_tot: NDArray


def quartiles(curve: SeasonalCurve, n_levels: int) -> Quartiles:
    """25th and 75th percentiles of every group's curve and their spread."""
    lower = np.empty(n_levels)
    upper = np.empty(n_levels)
    for g in range(n_levels):
        lower[g] = curve.quantile(LOWER_P, g)
        upper[g] = curve.quantile(UPPER_P, g)
    return Quartiles(lower25=lower, upper75=upper, range=upper - lower)


def annual_totals(curve: SeasonalCurve, theta: NDArray) -> AnnualTotals:
    """Expected annual total and summed log-intensity per group.

    ``year_tot`` is sum_t exp(dens(t) + theta); ``year_log_tot`` is
    sum_t (dens(t) + theta), a sum of logs rather than the log of
    ``year_tot``.
    """
    n_levels = theta.shape[0]
    # (n_levels, 365) grid: row g holds group g at every day
    days = np.broadcast_to(DAY_GRID, (n_levels, DAY_GRID.size))
    g = np.broadcast_to(np.arange(n_levels)[:, None], days.shape)
    log_intensity = curve.log_density(days, g) + theta[:, None]
    return AnnualTotals(
        year_tot=np.sum(np.exp(log_intensity), axis=1),
        year_log_tot=np.sum(log_intensity, axis=1),
    )
