"""
Optimizer adapter over scipy.optimize.minimize.

Uses a quasi-Newton method (L-BFGS-B by default) on an objective that
returns its value and gradient together.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize

from pyestimators.core.protocols import Objective


# Per-method names of the iteration-cap and tolerance options.
# TNC has no iteration cap, so max_iter bounds its function evaluations.
_METHOD_OPTIONS: dict[str, tuple[str, str]] = {
    'L-BFGS-B': ('maxiter', 'gtol'),
    'BFGS': ('maxiter', 'gtol'),
    'CG': ('maxiter', 'gtol'),
    'TNC': ('maxfun', 'gtol'),
    'Newton-CG': ('maxiter', 'xtol'),
    'SLSQP': ('maxiter', 'ftol'),
}


@dataclass(frozen=True)
class OptimizeOutcome:
    """
    What a minimizer reports back.
    
    Attributes:
        x: Best point found (the optimum when converged)
        fun: Objective value at x
        converged: Whether the minimizer met its own convergence criterion
        n_iter: Iterations performed
        message: Minimizer's termination message
        gradient_norm: max |∇f(x)| at the returned point, if available
    """
    x: NDArray[np.floating[Any]]
    fun: float
    converged: bool
    n_iter: int
    message: str
    gradient_norm: float | None = None


class ScipyOptimizer:
    """
    Quasi-Newton minimizer backed by scipy.optimize.minimize.
    
    Convergence is scipy's own, with tol passed as the method's native
    tolerance (gtol, xtol or ftol). Hitting the cap, or a failed line
    search, is reported as converged=False.
    """
    
    def __init__(self, method: str = 'L-BFGS-B'):
        if method not in _METHOD_OPTIONS:
            valid = ', '.join(sorted(_METHOD_OPTIONS))
            raise ValueError(
                f"Unknown optimization method: {method!r}. "
                f"Gradient-based methods: {valid}"
            )
        self._method = method
    
    @property
    def name(self) -> str:
        return f"scipy_{self._method.lower().replace('-', '')}"
    
    @property
    def method(self) -> str:
        return self._method
    
    def minimize(
        self,
        objective: Objective,
        x0: NDArray[np.floating[Any]],
        *,
        tol: float,
        max_iter: int,
    ) -> OptimizeOutcome:
        """Minimize objective from x0."""
        cap_option, tol_option = _METHOD_OPTIONS[self._method]
        options: dict[str, Any] = {cap_option: max_iter, tol_option: tol}
        
        opt_result = minimize(
            objective.value_and_gradient,
            np.asarray(x0, dtype=np.float64),
            jac=True,
            method=self._method,
            options=options,
        )
        
        grad_norm = None
        if getattr(opt_result, 'jac', None) is not None:
            grad_norm = float(np.max(np.abs(opt_result.jac)))
        
        message = opt_result.message
        if isinstance(message, bytes):
            message = message.decode()
        
        return OptimizeOutcome(
            x=np.asarray(opt_result.x, dtype=np.float64),
            fun=float(opt_result.fun),
            converged=bool(opt_result.success),
            n_iter=int(getattr(opt_result, 'nit', 0)),
            message=str(message),
            gradient_norm=grad_norm,
        )
