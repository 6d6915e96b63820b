"""
Symmetric eigendecomposition kernels.

Used by FastICA for whitening (top-k eigenpairs of a covariance matrix)
and for symmetric decorrelation ((W Wᵀ)^(-1/2) W).
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class EigenResult:
    """
    Eigenpairs of a symmetric matrix, largest eigenvalue first.
    
    Attributes:
        eigenvalues: (k,) descending
        eigenvectors: (p, k), column j pairs with eigenvalues[j]
    """
    eigenvalues: NDArray[np.floating[Any]]
    eigenvectors: NDArray[np.floating[Any]]


def top_eigenpairs(
    C: NDArray[np.floating[Any]],
    k: int | None = None,
) -> EigenResult:
    """
    Largest-k eigenpairs of symmetric C.
    
    numpy.linalg.eigh returns ascending eigenvalues; this reverses them so
    callers can slice the leading components directly.
    """
    eigvals, eigvecs = np.linalg.eigh(C)
    order = np.argsort(eigvals)[::-1]
    if k is not None:
        order = order[:k]
    return EigenResult(eigenvalues=eigvals[order], eigenvectors=eigvecs[:, order])


def inverse_sqrt(S: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """
    S^(-1/2) for symmetric positive definite S.
    
    Eigenvalues are floored at the smallest positive normal float so that
    a (numerically) rank-deficient S yields large but finite entries.
    """
    eigvals, eigvecs = np.linalg.eigh(S)
    eigvals = np.maximum(eigvals, np.finfo(S.dtype).tiny)
    return (eigvecs * (1.0 / np.sqrt(eigvals))) @ eigvecs.T
