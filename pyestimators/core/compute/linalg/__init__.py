"""
Linear algebra kernels for pyestimators.

All functions follow these conventions:
    - NumPy/SciPy (LAPACK under the hood), double precision
    - Structured result dataclasses where more than one value is returned
    - Failures are raised immediately as pyestimators exceptions

Submodules:
    solve: Normal-equation solves with rank detection
    eigen: Symmetric eigendecomposition, inverse square root
"""

from pyestimators.core.compute.linalg.solve import (
    RankInfo,
    symmetric_rank,
    solve_normal_equations,
)
from pyestimators.core.compute.linalg.eigen import (
    EigenResult,
    top_eigenpairs,
    inverse_sqrt,
)

__all__ = [
    "RankInfo",
    "symmetric_rank",
    "solve_normal_equations",
    "EigenResult",
    "top_eigenpairs",
    "inverse_sqrt",
]
