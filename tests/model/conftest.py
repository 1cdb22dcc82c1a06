"""
Shared fixtures for the seasonal timing model tests.

``seasonal_design`` simulates three years of daily-ish counts (every
second day from day 100 to day 200) from a Poisson process whose intensity
follows a normal curve per year.
"""

import numpy as np
import pytest
from scipy import stats as sp_stats

from phenomix.model import KernelParams, PhenologyDesign


TRUE_MU = np.array([140.0, 150.0, 160.0])
TRUE_SIGMA = 10.0
TRUE_TOTAL = 2000.0


@pytest.fixture
def seasonal_design(rng):
    days = np.arange(100.0, 201.0, 2.0)
    x = np.tile(days, TRUE_MU.size)
    groups = np.repeat(np.arange(1, TRUE_MU.size + 1), days.size)
    lam = TRUE_TOTAL * sp_stats.norm.pdf(x, TRUE_MU[groups - 1], TRUE_SIGMA)
    y = rng.poisson(lam).astype(np.float64)
    return PhenologyDesign.from_arrays(y, x, groups, labels=[2001, 2002, 2003])


@pytest.fixture
def true_params(seasonal_design):
    d = seasonal_design
    return KernelParams.zeros(d.n_levels, d.n_mu_cov, d.n_sig_cov).replace(
        b_mu=TRUE_MU.copy(),
        b_sig1=[TRUE_SIGMA],
        b_sig2=[TRUE_SIGMA],
        theta=np.full(d.n_levels, np.log(TRUE_TOTAL)),
    )


@pytest.fixture
def peak_design():
    """One group observed at days 95, 100 and 105."""
    return PhenologyDesign.from_arrays([1.0, 5.0, 2.0], [95.0, 100.0, 105.0], [1, 1, 1])


@pytest.fixture
def peak_params():
    return KernelParams(b_mu=[100.0], b_sig1=[1.0], theta=[0.0])
