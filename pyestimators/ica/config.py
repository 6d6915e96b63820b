"""
FastICA configuration.

FastICAConfig gathers every fit option in one immutable value, validated
on construction so a bad option fails before any data is touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import numpy as np

from pyestimators.core.exceptions import ValidationError
from pyestimators.ica.contrasts import Contrast, resolve_contrast


class Strategy(str, Enum):
    """How the unmixing rows are kept apart."""
    SYMMETRIC = 'symmetric'   # all rows updated together, then decorrelated
    DEFLATION = 'deflation'   # one row at a time, Gram-Schmidt against earlier rows

    @classmethod
    def resolve(cls, value: str | Strategy) -> Strategy:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                valid = ', '.join(s.value for s in cls)
                raise ValueError(
                    f"Unknown strategy: {value!r}. Valid strategies: {valid}"
                ) from None
        raise TypeError(
            f"strategy must be str or Strategy, got {type(value).__name__}"
        )


@dataclass(frozen=True)
class FastICAConfig:
    """
    FastICA options.

    Attributes:
        n_components: Number of components k (1 <= k <= p); None means p
        contrast: 'logcosh', 'exp', 'cube' or a Contrast instance
        alpha: logcosh scale, 1 <= alpha <= 2
        strategy: 'symmetric' or 'deflation'
        tol: Convergence threshold on max |1 - |<w_old, w_new>||
        max_iter: Iteration cap (per component for deflation)
        random_state: Seed for the initial unmixing matrix; None draws
            fresh OS entropy
        eigenvalue_threshold: Retained covariance eigenvalues must exceed
            eigenvalue_threshold * λ_max

    String options are normalized on construction: strategy becomes a
    Strategy member and contrast a Contrast instance.
    """
    n_components: int | None = None
    contrast: str | Contrast = 'logcosh'
    alpha: float = 1.0
    strategy: str | Strategy = Strategy.SYMMETRIC
    tol: float = 1e-4
    max_iter: int = 200
    random_state: int | None = None
    eigenvalue_threshold: float = 1e-10

    def __post_init__(self) -> None:
        if self.n_components is not None:
            if isinstance(self.n_components, bool) or int(self.n_components) != self.n_components:
                raise ValidationError(
                    f"n_components: must be an integer, got {self.n_components!r}"
                )
            if self.n_components < 1:
                raise ValidationError(
                    f"n_components: must be >= 1, got {self.n_components}"
                )
            object.__setattr__(self, 'n_components', int(self.n_components))

        if not np.isfinite(self.tol) or self.tol <= 0:
            raise ValidationError(f"tol: must be positive, got {self.tol}")
        if isinstance(self.max_iter, bool) or int(self.max_iter) != self.max_iter or self.max_iter < 1:
            raise ValidationError(
                f"max_iter: must be a positive integer, got {self.max_iter!r}"
            )
        if not np.isfinite(self.eigenvalue_threshold) or self.eigenvalue_threshold < 0:
            raise ValidationError(
                f"eigenvalue_threshold: must be non-negative, got {self.eigenvalue_threshold}"
            )
        if self.random_state is not None and (
            isinstance(self.random_state, bool) or int(self.random_state) != self.random_state
        ):
            raise ValidationError(
                f"random_state: must be an integer seed or None, got {self.random_state!r}"
            )

        object.__setattr__(self, 'max_iter', int(self.max_iter))
        object.__setattr__(self, 'strategy', Strategy.resolve(self.strategy))
        object.__setattr__(self, 'contrast', resolve_contrast(self.contrast, self.alpha))

    def resolve_n_components(self, n_features: int) -> int:
        """k for data with n_features columns.

        Raises:
            ValidationError: If the configured k exceeds n_features
        """
        if self.n_components is None:
            return n_features
        if self.n_components > n_features:
            raise ValidationError(
                f"n_components: must be <= number of features ({n_features}), "
                f"got {self.n_components}"
            )
        return self.n_components

