"""
Exception hierarchy for phenomix.

All exceptions inherit from PhenomixError so callers can catch any
library-specific error. Exceptions are raised only at the input boundary
(design, configuration and parameter-shape checks). The likelihood kernel
itself never raises on numeric-domain problems: invalid scales or shapes
propagate as NaN/Inf for the optimizer to react to.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PhenomixError(Exception):
    """Base exception for all phenomix errors."""
    pass


class ValidationError(PhenomixError):
    """
    Input validation failed.

    Raised when user-provided data, configuration selectors or parameter
    vectors fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions, e.g. a
    parameter vector whose length disagrees with the number of groups or
    covariate columns.
    """
    pass


class NumericalError(PhenomixError):
    """
    Numerical computation failed.

    Raised by helpers outside the kernel (e.g. the delta-method utilities)
    when a derived matrix cannot be used.

    Attributes:
        quantity: Name of the quantity being computed, if known
    """

    def __init__(self, message: str, quantity: str | None = None):
        super().__init__(message)
        self.quantity = quantity
