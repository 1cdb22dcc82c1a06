"""
Tests for KernelReport and the KernelSolution wrapper.
"""

import json

import numpy as np
import pytest

from phenomix.model import ModelConfig, evaluate
from phenomix.model.solution import OPTIONAL_QUANTITIES, REPORT_ORDER


class TestReportOrder:

    def test_optional_subset(self):
        assert OPTIONAL_QUANTITIES <= set(REPORT_ORDER)

    def test_always_present(self, seasonal_design, true_params):
        sol = evaluate(seasonal_design, true_params, family="poisson")
        required = [name for name in REPORT_ORDER if name not in OPTIONAL_QUANTITIES]
        assert list(sol.reported()) == required


class TestKernelSolution:

    def test_accessors(self, seasonal_design, true_params):
        sol = evaluate(seasonal_design, true_params, family="poisson")
        r = sol.report
        assert sol.nll == r.nll
        assert sol.log_posterior == -r.nll
        assert sol.log_posterior == pytest.approx(r.prior + r.penalty + np.sum(r.loglik))
        assert not hasattr(sol, "loglik")
        assert sol.mu is r.mu
        assert sol.theta is r.theta
        assert sol.year_log_tot is r.year_log_tot
        assert sol.pred.shape == (seasonal_design.n,)
        assert sol.log_dens.shape == (seasonal_design.n,)
        assert sol.sigma1.shape == (3,)

    def test_summary(self, seasonal_design, true_params):
        sol = evaluate(seasonal_design, true_params, family="nbinom",
                       tail_model="student_t", asymmetric=True)
        text = sol.summary()
        assert "Seasonal Timing Kernel" in text
        assert "student_t (asymmetric)" in text
        assert "Family: nbinom" in text
        for year in ("2001", "2002", "2003"):
            assert year in text
        assert "Backend: cpu_numpy" in text

    def test_summary_counts_warnings(self, seasonal_design, true_params):
        with pytest.warns(RuntimeWarning):
            sol = evaluate(seasonal_design, true_params.replace(b_sig1=[-1.0]),
                           family="poisson")
        assert "Warnings: 1" in sol.summary()

    def test_to_dict_serializable(self, seasonal_design, true_params):
        sol = evaluate(seasonal_design, true_params, ModelConfig(tail_model="gnorm"))
        d = sol.to_dict()
        assert d["n"] == seasonal_design.n
        assert d["n_levels"] == 3
        assert d["backend"] == "cpu_numpy"
        assert len(d["pred"]) == seasonal_design.n
        assert "beta_1" in d and "obs_sigma" in d
        json.dumps(d)

    def test_repr(self, seasonal_design, true_params):
        sol = evaluate(seasonal_design, true_params, family="poisson")
        assert repr(sol).startswith("KernelSolution(n=153, n_levels=3, nll=")

    def test_report_fields_are_arrays(self, seasonal_design, true_params):
        sol = evaluate(seasonal_design, true_params, family="poisson", asymmetric=True)
        for name, value in sol.reported().items():
            assert isinstance(value, np.ndarray), name
