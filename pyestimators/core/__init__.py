"""
Core infrastructure for pyestimators.

This module provides shared abstractions, utilities, and compute
infrastructure used by the estimator submodules (regression, ica).

Key components:
    protocols: Backend, Objective, Optimizer protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, linear algebra kernels, optimizer adapters
"""

from pyestimators.core.protocols import Backend, Objective, Optimizer
from pyestimators.core.result import Result
from pyestimators.core.exceptions import (
    PyEstimatorsError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    SingularCovarianceError,
    ConvergenceError,
)

__all__ = [
    # Protocols
    "Backend",
    "Objective",
    "Optimizer",
    # Result
    "Result",
    # Exceptions
    "PyEstimatorsError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "SingularCovarianceError",
    "ConvergenceError",
]
