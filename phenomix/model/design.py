"""
PhenologyDesign: data wrapper for the seasonal timing kernel.

Wraps observed counts, their day-of-year covariate, the 1-based group
(year) index of every observation and the per-group design matrices for the
location and scale trends. Validation happens once here so the kernel can
assume consistent shapes on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from phenomix.core.exceptions import ValidationError, DimensionError
from phenomix.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_2d,
    check_consistent_length,
    check_integer_valued,
    check_in_range,
)


def index_groups(labels: ArrayLike) -> tuple[NDArray[np.int64], NDArray]:
    """
    Map raw group labels (e.g. years) to 1-based indices.

    Parameters
    ----------
    labels : array-like
        One label per observation.

    Returns
    -------
    groups : ndarray of int64
        1-based index of each observation's label in ``unique``.
    unique : ndarray
        Sorted unique labels.

    Examples
    --------
    >>> index_groups([2003, 2001, 2003])
    (array([2, 1, 2]), array([2001, 2003]))
    """
    if hasattr(labels, 'values'):
        labels = labels.values
    unique, inverse = np.unique(np.asarray(labels), return_inverse=True)
    return inverse.astype(np.int64).ravel() + 1, unique


@dataclass(frozen=True)
class PhenologyDesign:
    """
    Design for the seasonal timing model.

    Observations are (count, day, group); groups are stored 0-based.
    ``mu_mat`` and ``sig_mat`` have one row per group. Immutable after
    construction.

    Construction:
        PhenologyDesign.from_arrays(y, x, groups)
        PhenologyDesign.from_arrays(y, x, groups, mu_mat=M, sig_mat=S)
    """
    _y: NDArray[np.floating[Any]]
    _x: NDArray[np.floating[Any]]
    _groups: NDArray[np.int64]
    _mu_mat: NDArray[np.floating[Any]]
    _sig_mat: NDArray[np.floating[Any]]
    _labels: NDArray

    @classmethod
    def from_arrays(
        cls,
        y: ArrayLike,
        x: ArrayLike,
        groups: ArrayLike,
        *,
        n_levels: int | None = None,
        mu_mat: ArrayLike | None = None,
        sig_mat: ArrayLike | None = None,
        labels: ArrayLike | None = None,
    ) -> PhenologyDesign:
        """
        Build a PhenologyDesign from array-likes.

        Parameters
        ----------
        y : array-like
            Observed counts (or 0/1 presence, or positive values for the
            lognormal family). May contain any real values; the family
            decides what is meaningful.
        x : array-like
            Day of year of each observation.
        groups : array-like of int
            1-based group (year) index of each observation.
        n_levels : int, optional
            Number of groups. Defaults to max(groups).
        mu_mat : array-like, optional
            (n_levels, k) covariates of the location. Defaults to the
            identity, i.e. one free location per group.
        sig_mat : array-like, optional
            (n_levels, m) covariates of the scale(s). Defaults to a single
            intercept column, i.e. a scale shared by all groups.
        labels : array-like, optional
            Names of the groups (e.g. the years), length n_levels.
        """
        y_arr = check_array(y, 'y')
        x_arr = check_array(x, 'x')
        g_arr = check_array(groups, 'groups')
        check_1d(y_arr, 'y')
        check_1d(x_arr, 'x')
        check_1d(g_arr, 'groups')
        check_consistent_length(y_arr, x_arr, g_arr, names=('y', 'x', 'groups'))
        check_finite(x_arr, 'x')

        if y_arr.shape[0] < 1:
            raise ValidationError("Need at least 1 observation, got 0")

        g_int = check_integer_valued(g_arr, 'groups')
        if n_levels is None:
            n_levels = int(g_int.max())
        if n_levels < 1:
            raise ValidationError(f"n_levels: must be at least 1, got {n_levels}")
        check_in_range(g_int, 1, n_levels, 'groups')

        if mu_mat is None:
            mu_arr = np.eye(n_levels)
        else:
            mu_arr = cls._check_matrix(mu_mat, 'mu_mat', n_levels)
        if sig_mat is None:
            sig_arr = np.ones((n_levels, 1))
        else:
            sig_arr = cls._check_matrix(sig_mat, 'sig_mat', n_levels)

        if labels is None:
            label_arr = np.arange(1, n_levels + 1)
        else:
            label_arr = np.asarray(labels.values if hasattr(labels, 'values') else labels)
            if label_arr.ndim != 1 or label_arr.shape[0] != n_levels:
                raise DimensionError(
                    f"labels: expected {n_levels} labels, got shape {label_arr.shape}"
                )

        return cls(
            _y=y_arr.astype(np.float64),
            _x=x_arr.astype(np.float64),
            _groups=g_int - 1,
            _mu_mat=mu_arr,
            _sig_mat=sig_arr,
            _labels=label_arr,
        )

    @classmethod
    def from_labels(
        cls,
        y: ArrayLike,
        x: ArrayLike,
        labels: ArrayLike,
        *,
        mu_mat: ArrayLike | None = None,
        sig_mat: ArrayLike | None = None,
    ) -> PhenologyDesign:
        """Build from raw group labels (e.g. calendar years) per observation."""
        groups, unique = index_groups(labels)
        return cls.from_arrays(
            y, x, groups,
            n_levels=len(unique), mu_mat=mu_mat, sig_mat=sig_mat, labels=unique,
        )

    @staticmethod
    def _check_matrix(mat: ArrayLike, name: str, n_levels: int) -> NDArray:
        arr = check_array(mat, name)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        check_2d(arr, name)
        if arr.shape[0] != n_levels:
            raise DimensionError(
                f"{name}: expected {n_levels} rows (one per group), got {arr.shape[0]}"
            )
        if arr.shape[1] < 1:
            raise DimensionError(f"{name}: needs at least one column")
        check_finite(arr, name)
        return arr.astype(np.float64)

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Observed values (n,)."""
        return self._y

    @property
    def x(self) -> NDArray[np.floating[Any]]:
        """Day of year of each observation (n,)."""
        return self._x

    @property
    def groups(self) -> NDArray[np.int64]:
        """0-based group index of each observation (n,)."""
        return self._groups

    @property
    def mu_mat(self) -> NDArray[np.floating[Any]]:
        """Location covariates (n_levels, n_mu_cov)."""
        return self._mu_mat

    @property
    def sig_mat(self) -> NDArray[np.floating[Any]]:
        """Scale covariates (n_levels, n_sig_cov)."""
        return self._sig_mat

    @property
    def labels(self) -> NDArray:
        """Group names, in group-index order."""
        return self._labels

    @property
    def n(self) -> int:
        """Number of observations."""
        return int(self._y.shape[0])

    @property
    def n_levels(self) -> int:
        """Number of groups."""
        return int(self._mu_mat.shape[0])

    @property
    def n_mu_cov(self) -> int:
        return int(self._mu_mat.shape[1])

    @property
    def n_sig_cov(self) -> int:
        return int(self._sig_mat.shape[1])

    @property
    def group_sizes(self) -> NDArray[np.int64]:
        """Number of observations in each group (n_levels,)."""
        return np.bincount(self._groups, minlength=self.n_levels)

    def __repr__(self) -> str:
        return (
            f"PhenologyDesign(n={self.n}, n_levels={self.n_levels}, "
            f"n_mu_cov={self.n_mu_cov}, n_sig_cov={self.n_sig_cov})"
        )
