"""
ICA solution types.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyestimators.core.result import Result
from pyestimators.core.validation import as_feature_matrix, check_n_features

if TYPE_CHECKING:
    from pyestimators.ica.design import ICADesign


@dataclass(frozen=True)
class ICAParams:
    """
    Parameter payload for FastICA.

    Attributes:
        whitening: K (k x p), maps centered data to unit covariance
        unmixing: W (k x k), orthonormal rotation of the whitened data
        mean: Per-feature training mean (p,)
        eigenvalues: Retained covariance eigenvalues, descending (k,)
        n_iter: Iterations used (max over components for deflation)
        component_iterations: Iterations per component (deflation only)
        converged: Always True for a returned fit
        strategy: 'symmetric' or 'deflation'
        contrast_name: Name of the contrast function
    """
    whitening: NDArray[np.floating[Any]]
    unmixing: NDArray[np.floating[Any]]
    mean: NDArray[np.floating[Any]]
    eigenvalues: NDArray[np.floating[Any]]
    n_iter: int
    component_iterations: tuple[int, ...]
    converged: bool
    strategy: str
    contrast_name: str


@dataclass
class ICASolution:
    """
    User-facing FastICA results.

    The fitted model is the triple (whitening, unmixing, mean); everything
    else is derived from it.
    """
    _result: Result[ICAParams]
    _design: 'ICADesign'

    # Cached computations
    _mixing: NDArray[np.floating[Any]] | None = None

    @property
    def whitening(self) -> NDArray[np.floating[Any]]:
        return self._result.params.whitening

    @property
    def unmixing(self) -> NDArray[np.floating[Any]]:
        return self._result.params.unmixing

    @property
    def mean(self) -> NDArray[np.floating[Any]]:
        return self._result.params.mean

    @property
    def eigenvalues(self) -> NDArray[np.floating[Any]]:
        return self._result.params.eigenvalues

    @property
    def components(self) -> NDArray[np.floating[Any]]:
        """Full unmixing map W K (k x p) applied to centered data."""
        return self.unmixing @ self.whitening

    @property
    def mixing(self) -> NDArray[np.floating[Any]]:
        """Pseudo-inverse of components (p x k): estimated mixing matrix."""
        if self._mixing is None:
            self._mixing = np.linalg.pinv(self.components)
        return self._mixing

    @property
    def n_components(self) -> int:
        return self.unmixing.shape[0]

    @property
    def n_features(self) -> int:
        return self.whitening.shape[1]

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def strategy(self) -> str:
        return self._result.params.strategy

    @property
    def sources(self) -> NDArray[np.floating[Any]]:
        """Estimated sources of the training data (n x k)."""
        return (self._design.X - self.mean) @ self.components.T

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def transform(self, X_new: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Estimate sources for new observations: (X_new - mean) (W K)ᵀ.

        Returns:
            Sources (n x k)

        Raises:
            DimensionError: If X_new does not have n_features columns
        """
        X_arr = as_feature_matrix(X_new, 'X_new')
        check_n_features(X_arr, self.n_features, 'X_new')
        return (X_arr - self.mean) @ self.components.T

    def inverse_transform(self, S: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Map sources back to observation space: S Aᵀ + mean.

        Exact when n_components == n_features; otherwise the projection
        onto the retained subspace.

        Raises:
            DimensionError: If S does not have n_components columns
        """
        S_arr = as_feature_matrix(S, 'S')
        check_n_features(S_arr, self.n_components, 'S')
        return S_arr @ self.mixing.T + self.mean

    def summary(self) -> str:
        p = self._result.params
        lines = [
            "FastICA Results",
            "=" * 60,
            f"Samples: {self._design.n}",
            f"Features: {self.n_features}",
            f"Components: {self.n_components}",
            f"Strategy: {p.strategy}",
            f"Contrast: {p.contrast_name}",
            f"Iterations: {p.n_iter}",
            "",
            "Retained covariance eigenvalues:",
        ]
        for i, ev in enumerate(p.eigenvalues):
            lines.append(f"  λ[{i}]: {ev:14.6g}")
        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ICASolution(n={self._design.n}, p={self.n_features}, "
            f"k={self.n_components}, strategy={self.strategy!r}, "
            f"n_iter={self.n_iter})"
        )
