"""
Generic result container for phenomix computations.

The Result class provides a standardized envelope around a domain payload
(here the kernel report). This keeps timing, provenance and non-fatal
diagnostics out of the numeric payload itself.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (configuration, sizes)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Library versions that produced a result."""
    import numpy
    import scipy

    from phenomix import __version__

    return {
        'phenomix_version': __version__,
        'numpy_version': numpy.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for kernel evaluations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (objective and derived vectors)
        info: Structured metadata (tail model, family, sizes)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used for the computation

    Examples:
        >>> Result(
        ...     params=report,
        ...     info={'tail_model': 'gaussian', 'family': 'poisson'},
        ...     timing={'total_seconds': 0.002},
        ...     backend_name='cpu_numpy'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
