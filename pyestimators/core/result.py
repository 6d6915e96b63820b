"""
Generic result container for all pyestimators computations.

The Result class provides a standardized envelope that every estimator
backend returns. This enables shared tooling for timing, diagnostics and
reproducibility while allowing each estimator to define its own parameter
structure.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (converged, iterations, diagnostics)
    - timing is optional (don't burden unit tests)
    - provenance for reproducibility (package and library versions)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, Any]:
    """Generate minimal provenance metadata."""
    import numpy as np
    import scipy
    import pyestimators
    return {
        'pyestimators_version': pyestimators.__version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for estimator fits.
    
    Type Parameters:
        P: The estimator-specific parameter payload type
        
    Attributes:
        params: Estimator-specific parameters (coefficients, unmixing matrix, ...)
        info: Structured metadata (method, convergence, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Versions of the libraries that produced the result
        
    Examples:
        >>> # Direct method (no convergence notion)
        >>> Result(
        ...     params=LinearParams(coefficients=beta, ...),
        ...     info={'method': 'normal_equations', 'rank': 5},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_normal_eq'
        ... )
        
        >>> # Iterative method
        >>> Result(
        ...     params=ICAParams(whitening=K, unmixing=W, mean=m, ...),
        ...     info={'strategy': 'symmetric', 'iterations': 23},
        ...     timing={'total_seconds': 0.5, 'whitening': 0.1},
        ...     backend_name='cpu_fastica'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, Any] = field(default_factory=_default_provenance)
    
    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
