"""
Core infrastructure for phenomix.

Shared abstractions used by the distribution library and the model kernel.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing utilities
"""

from phenomix.core.result import Result
from phenomix.core.exceptions import (
    PhenomixError,
    ValidationError,
    DimensionError,
    NumericalError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PhenomixError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
]
