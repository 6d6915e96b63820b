"""
Regression Design.

Design holds the validated feature matrix X and response y. It is built
once at the API boundary; backends trust it and never re-validate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyestimators.core.validation import (
    check_array, check_finite, check_2d, check_1d,
    check_consistent_length, check_min_samples, check_min_features,
)


@dataclass(frozen=True)
class RegressionDesign:
    """
    Validated regression design.

    Immutable after construction. X and y are private float64 copies,
    so the caller's arrays are never touched.

    Construction:
        RegressionDesign.from_arrays(X, y)
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _n: int
    _p: int

    @classmethod
    def from_arrays(cls, X: ArrayLike, y: ArrayLike) -> RegressionDesign:
        """
        Build a design from array-likes.

        1-D X is treated as a single feature; an (n, 1) y is raveled.

        Raises:
            ValidationError: Non-numeric, NaN or Inf values, or n < 1
            DimensionError: Wrong number of dimensions or len(y) != n
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')

        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        check_2d(X_arr, 'X')
        check_1d(y_arr, 'y')
        check_finite(X_arr, 'X')
        check_finite(y_arr, 'y')
        check_consistent_length(X_arr, y_arr, names=('X', 'y'))
        check_min_samples(X_arr, 1, 'X')
        check_min_features(X_arr, 1, 'X')

        n, p = X_arr.shape
        return cls(_X=X_arr, _y=y_arr, _n=n, _p=p)

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Feature matrix (n x p)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of features."""
        return self._p

    def centered(self) -> tuple[NDArray, NDArray, NDArray, float]:
        """
        Center X and y on their column means.

        Returns:
            (X_centered, y_centered, x_mean, y_mean)
        """
        x_mean = self._X.mean(axis=0)
        y_mean = float(self._y.mean())
        return self._X - x_mean, self._y - y_mean, x_mean, y_mean
