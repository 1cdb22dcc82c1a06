"""
Input validation utilities for phenomix.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent. They guard the boundary of the
kernel only; nothing inside the likelihood evaluation calls them.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from phenomix.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like (including pandas objects) and converts to a
    numpy array. Rejects inputs that result in object or non-numeric dtype.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    if hasattr(array, 'values'):
        array = array.values
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number) and result.dtype != np.bool_:
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_length(array: NDArray[np.floating[Any]], length: int, name: str) -> None:
    """
    Verify a 1D array has exactly `length` elements.

    Used for parameter vectors whose size is fixed by the design
    (one entry per group or per covariate column).

    Raises:
        DimensionError: If the length differs
    """
    if array.shape[0] != length:
        raise DimensionError(
            f"{name}: expected length {length}, got {array.shape[0]}"
        )


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Args:
        *arrays: Arrays to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_integer_valued(
    array: NDArray[np.floating[Any]],
    name: str,
) -> NDArray[np.integer[Any]]:
    """
    Verify array holds whole numbers and return it as int64.

    Group indices arrive as floats from many data sources (e.g. a pandas
    column with a NaN-capable dtype); they are accepted as long as every
    value is integral.

    Raises:
        ValidationError: If any value is not a whole number
    """
    check_finite(array, name)
    rounded = np.round(array)
    if not np.all(rounded == array):
        bad = array[rounded != array]
        raise ValidationError(
            f"{name}: expected integer values, got {bad[:5].tolist()}"
        )
    return rounded.astype(np.int64)


def check_in_range(
    array: NDArray[np.integer[Any]],
    low: int,
    high: int,
    name: str,
) -> None:
    """
    Verify every value lies in the closed interval [low, high].

    Raises:
        ValidationError: If any value falls outside the interval
    """
    if array.size == 0:
        return
    lo, hi = int(array.min()), int(array.max())
    if lo < low or hi > high:
        raise ValidationError(
            f"{name}: values must lie in [{low}, {high}], got range [{lo}, {hi}]"
        )
