"""
Shared compute infrastructure for pyestimators.

This module provides timing utilities, linear algebra kernels and the
optimizer adapter shared across the estimator backends.

IMPORTANT: This is NOT where estimator backends live. Those go in
{estimator}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    linalg: Linear algebra kernels (normal equations, symmetric eigen)
    optimization: Optimizer adapters (scipy.optimize)
"""

from pyestimators.core.compute.timing import Timer

__all__ = [
    "Timer",
]
