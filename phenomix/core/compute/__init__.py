"""
Shared compute infrastructure for phenomix.

Submodules:
    timing: Execution timing utilities
"""

from phenomix.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
