"""
Symmetric positive (semi-)definite solves.

Solves the normal equations A β = b with A = X'X (+ λI), detecting
numerical rank deficiency up front so that a singular system is reported
as SingularMatrixError instead of silently producing garbage.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import linalg

from pyestimators.core.exceptions import SingularMatrixError


@dataclass(frozen=True)
class RankInfo:
    """
    Numerical rank of a symmetric PSD matrix.
    
    Attributes:
        rank: Number of eigenvalues above the tolerance
        tol: Absolute eigenvalue tolerance that was applied
        condition_number: λ_max / λ_min (inf when λ_min <= 0)
    """
    rank: int
    tol: float
    condition_number: float


def symmetric_rank(
    A: NDArray[np.floating[Any]],
    rcond: float | None = None,
    n_samples: int | None = None,
) -> RankInfo:
    """
    Numerical rank of symmetric PSD A from its eigenvalues.
    
    An eigenvalue counts toward the rank when it exceeds rcond * λ_max.
    The default rcond is max(n, p) * eps, where n is the number of rows
    of the X that A = X'X was built from (p if unknown).
    """
    eigvals = np.linalg.eigvalsh(A)
    lam_max = float(eigvals[-1]) if eigvals.size else 0.0
    lam_min = float(eigvals[0]) if eigvals.size else 0.0
    
    if rcond is None:
        rcond = max(n_samples or 0, A.shape[0]) * np.finfo(np.float64).eps
    
    if lam_max <= 0.0:
        return RankInfo(rank=0, tol=0.0, condition_number=np.inf)
    
    tol = rcond * lam_max
    rank = int(np.sum(eigvals > tol))
    cond = lam_max / lam_min if lam_min > 0 else np.inf
    return RankInfo(rank=rank, tol=tol, condition_number=float(cond))


def solve_normal_equations(
    XtX: NDArray[np.floating[Any]],
    Xty: NDArray[np.floating[Any]],
    *,
    ridge: float = 0.0,
    rcond: float | None = None,
    n_samples: int | None = None,
    matrix_name: str = "X'X",
) -> NDArray[np.floating[Any]]:
    """
    Solve (X'X + ridge·I) β = X'y.
    
    Args:
        XtX: Gram matrix (p x p), symmetric PSD
        Xty: Right-hand side (p,)
        ridge: Non-negative diagonal penalty λ
        rcond: Relative eigenvalue cutoff for the rank check (unpenalized only)
        n_samples: Rows of X, used for the default rcond
        matrix_name: Name used in error messages
        
    Returns:
        Coefficient vector β (p,)
        
    Raises:
        SingularMatrixError: If ridge == 0 and X'X is numerically rank-deficient,
            or if the factorization fails
    """
    if ridge < 0:
        raise ValueError(f"ridge must be non-negative, got {ridge}")
    
    p = XtX.shape[0]
    A = XtX + ridge * np.eye(p) if ridge > 0 else XtX
    
    # With λ > 0 the system is positive definite, so only the plain
    # normal equations need the rank check.
    if ridge == 0:
        info = symmetric_rank(A, rcond=rcond, n_samples=n_samples)
        if info.rank < p:
            raise SingularMatrixError(
                f"{matrix_name} is singular: rank={info.rank}, expected={p}. "
                f"Features are collinear; drop redundant columns or add "
                f"regularization (alpha > 0).",
                matrix_name=matrix_name,
                condition_number=info.condition_number,
                rank=info.rank,
                expected_rank=p,
            )
    
    try:
        return linalg.solve(A, Xty, assume_a='pos')
    except linalg.LinAlgError as e:
        raise SingularMatrixError(
            f"{matrix_name} factorization failed: {e}",
            matrix_name=matrix_name,
            expected_rank=p,
        ) from e
