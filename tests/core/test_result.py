"""
Tests for the Result[P] envelope.

Validates:
    - Generic payloads (including the kernel report)
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
"""

from dataclasses import FrozenInstanceError, dataclass

import numpy as np
import pytest

from phenomix import __version__
from phenomix.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


def _result(**kwargs):
    defaults = dict(
        params=FakeParams(value=1.0),
        info={},
        timing=None,
        backend_name="cpu_numpy",
    )
    defaults.update(kwargs)
    return Result(**defaults)


# ═══════════════════════════════════════════════════════════════════════
# Construction and field access
# ═══════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_fields(self):
        result = _result(info={"tail_model": "gaussian", "n": 3},
                         timing={"total_seconds": 0.01})
        assert result.params.value == 1.0
        assert result.info["tail_model"] == "gaussian"
        assert result.timing["total_seconds"] == 0.01
        assert result.backend_name == "cpu_numpy"

    def test_array_payload(self):
        result = _result(params=np.arange(3.0))
        np.testing.assert_array_equal(result.params, [0.0, 1.0, 2.0])

    def test_timing_none(self):
        assert _result().timing is None


# ═══════════════════════════════════════════════════════════════════════
# Default factories
# ═══════════════════════════════════════════════════════════════════════


class TestDefaults:

    def test_warnings_default_empty(self):
        result = _result()
        assert result.warnings == ()
        assert isinstance(result.warnings, tuple)

    def test_provenance_auto_generated(self):
        prov = _result().provenance
        assert prov["phenomix_version"] == __version__
        assert "numpy_version" in prov
        assert "scipy_version" in prov

    def test_default_provenance_function(self):
        assert set(_default_provenance()) == {
            "phenomix_version", "numpy_version", "scipy_version",
        }

    def test_provenance_explicit_override(self):
        result = _result(provenance={"custom": "metadata"})
        assert result.provenance == {"custom": "metadata"}


# ═══════════════════════════════════════════════════════════════════════
# has_warning
# ═══════════════════════════════════════════════════════════════════════


class TestHasWarning:

    def test_substring_match(self):
        result = _result(warnings=("non-finite objective; check scales",))
        assert result.has_warning("non-finite")
        assert not result.has_warning("converged")

    def test_no_warnings(self):
        assert not _result().has_warning("anything")


# ═══════════════════════════════════════════════════════════════════════
# Immutability
# ═══════════════════════════════════════════════════════════════════════


class TestImmutability:

    def test_cannot_set_params(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.params = FakeParams(value=2.0)

    def test_cannot_set_warnings(self):
        result = _result()
        with pytest.raises(FrozenInstanceError):
            result.warnings = ("new warning",)
