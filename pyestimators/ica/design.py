"""
ICA Design.

Holds the validated observation matrix X (n samples x p mixed signals).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyestimators.core.validation import (
    as_feature_matrix, check_min_samples, check_min_features,
)


@dataclass(frozen=True)
class ICADesign:
    """
    Validated ICA input.

    Immutable after construction; X is a private float64 copy.

    Construction:
        ICADesign.from_array(X)
    """
    _X: NDArray[np.floating[Any]]
    _n: int
    _p: int

    @classmethod
    def from_array(cls, X: ArrayLike) -> ICADesign:
        """
        Build a design from an array-like.

        A 1-D X is a single signal.

        Raises:
            ValidationError: Non-numeric, NaN or Inf values, or no samples
            DimensionError: More than two dimensions, or no columns
        """
        X_arr = as_feature_matrix(X, 'X')
        check_min_samples(X_arr, 1, 'X')
        check_min_features(X_arr, 1, 'X')
        n, p = X_arr.shape
        return cls(_X=X_arr, _n=n, _p=p)

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Observation matrix (n x p)."""
        return self._X

    @property
    def n(self) -> int:
        """Number of samples."""
        return self._n

    @property
    def p(self) -> int:
        """Number of observed signals."""
        return self._p
