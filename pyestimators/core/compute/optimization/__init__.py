"""
Optimization utilities for pyestimators.

Wraps general-purpose minimizers behind the Optimizer protocol so that
estimators depend only on "objective in, optimum out". The default
implementation delegates to scipy.optimize.minimize.
"""

from pyestimators.core.compute.optimization.scipy_optimizer import (
    OptimizeOutcome,
    ScipyOptimizer,
)

__all__ = [
    "OptimizeOutcome",
    "ScipyOptimizer",
]
