"""
Core protocols for pyestimators.

These define structural interfaces that estimator backends and numerical
collaborators must satisfy. We use Protocol (structural typing) rather than
ABC (nominal typing) so that any object with the right shape plugs in,
including optimizers from other libraries.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Type-safe: use generics to preserve type information through pipelines
"""

from typing import Protocol, TypeVar, Any, TYPE_CHECKING, runtime_checkable

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from pyestimators.core.result import Result
    from pyestimators.core.compute.optimization import OptimizeOutcome

# Type variables for generic payloads
P = TypeVar('P', covariant=True)  # Parameter payload type


@runtime_checkable
class Backend(Protocol[P]):
    """
    Protocol for computational backends.
    
    Each backend knows how to take an estimator-specific design (validated
    data) plus keyword configuration and produce a parameter payload wrapped
    in a Result.
    
    Backends are stateless: all configuration is passed at solve() time.
    This makes them easy to test and swap.
    """
    
    @property
    def name(self) -> str:
        """
        Backend identifier.
        
        Convention: '{device}_{algorithm}'
        Examples: 'cpu_normal_eq', 'cpu_glm_scipy_lbfgsb', 'cpu_fastica'
        """
        ...
    
    def solve(self, design: Any, **kwargs: Any) -> 'Result[P]':
        """
        Execute the estimation.
        
        Raises:
            ConvergenceError: If iterative method fails to converge
            NumericalError: If numerical issues prevent solution (singularity, etc.)
            ValidationError: If design is invalid for this backend
        """
        ...


@runtime_checkable
class Objective(Protocol):
    """
    A differentiable scalar objective.
    
    value_and_gradient(x) returns the objective value and its gradient at
    x in a single pass, since both usually share the expensive work.
    """
    
    def value_and_gradient(
        self, x: NDArray[np.floating[Any]]
    ) -> tuple[float, NDArray[np.floating[Any]]]:
        ...


@runtime_checkable
class Optimizer(Protocol):
    """
    Minimal minimizer interface: objective in, optimum out.
    
    Implementations must not raise on non-convergence; they report it via
    OptimizeOutcome.converged along with the best point found, and the
    caller decides what to do.
    """
    
    @property
    def name(self) -> str:
        ...
    
    def minimize(
        self,
        objective: Objective,
        x0: NDArray[np.floating[Any]],
        *,
        tol: float,
        max_iter: int,
    ) -> 'OptimizeOutcome':
        ...

