"""
Regression backends.

Available backends:
    CPUNormalEquationsBackend: OLS / ridge via the centered normal equations
    CPUGLMBackend: penalized-likelihood GLM via a quasi-Newton optimizer
"""

from pyestimators.regression.backends.cpu import CPUNormalEquationsBackend
from pyestimators.regression.backends.cpu_glm import CPUGLMBackend, GLMObjective

__all__ = [
    "CPUNormalEquationsBackend",
    "CPUGLMBackend",
    "GLMObjective",
]
