"""
Exception hierarchy for pyestimators.

All exceptions inherit from PyEstimatorsError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyEstimatorsError(Exception):
    """Base exception for all pyestimators errors."""
    pass


class ValidationError(PyEstimatorsError):
    """
    Input validation failed.
    
    Raised when user-provided inputs or configuration fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    
    Raised when array shapes don't match expected dimensions, when multiple
    arrays have inconsistent shapes, or when new data handed to a fitted
    model has a different number of features than the training data.
    """
    pass


class NumericalError(PyEstimatorsError):
    """
    Numerical computation failed.
    
    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.
    
    Raised when a matrix operation requires invertibility but the matrix
    is singular or numerically rank-deficient.
    
    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """
    
    def __init__(
        self, 
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class SingularCovarianceError(SingularMatrixError):
    """
    Covariance matrix cannot be whitened.
    
    Raised when one of the retained eigenvalues of a sample covariance
    matrix is at or below the numerical threshold, i.e. the requested
    number of components spans a degenerate direction.
    
    Attributes:
        eigenvalues: The retained eigenvalues (descending), if computed
        threshold: Absolute eigenvalue cutoff that was applied
    """
    
    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
        eigenvalues=None,
        threshold: float | None = None,
    ):
        super().__init__(
            message,
            matrix_name=matrix_name,
            rank=rank,
            expected_rank=expected_rank,
        )
        self.eigenvalues = eigenvalues
        self.threshold = threshold


class ConvergenceError(PyEstimatorsError):
    """
    Iterative algorithm failed to converge.
    
    Raised when an iterative method (quasi-Newton optimization, FastICA
    fixed-point iteration) fails to meet its convergence criterion within
    the maximum number of iterations. Callers may retry with a relaxed
    tolerance, more iterations or a different seed.
    
    Attributes:
        iterations: Number of iterations completed
        final_change: Final parameter or objective change
        reason: Why convergence failed (e.g., 'max_iterations', 'line_search')
        threshold: The convergence threshold that was not met
    """
    
    def __init__(
        self, 
        message: str, 
        iterations: int, 
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
