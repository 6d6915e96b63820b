"""
Linear, ridge and generalized linear models.

Public API:
    fit(X, y, ...) -> LinearSolution | GLMSolution
    predict(model, X_new) -> NDArray

The fit() function handles:
    - Input validation
    - Design construction
    - Choice between the closed-form and optimizer paths
    - Result wrapping

Example:
    >>> from pyestimators.regression import fit
    >>> result = fit(X, y, family='poisson', alpha=0.1)
    >>> print(result.coefficients)
    >>> print(result.predict(X_new))
"""

from pyestimators.regression.design import RegressionDesign
from pyestimators.regression.families import (
    Link, IdentityLink, LogitLink, LogLink, ProbitLink,
    Family, Gaussian, Binomial, Poisson, Tweedie, Gamma,
    resolve_family, resolve_link,
)
from pyestimators.regression.solution import (
    LinearSolution, LinearParams, GLMSolution, GLMParams,
)
from pyestimators.regression.solvers import fit, predict

__all__ = [
    "fit",
    "predict",
    "RegressionDesign",
    "LinearSolution",
    "LinearParams",
    "GLMSolution",
    "GLMParams",
    "Link",
    "IdentityLink",
    "LogitLink",
    "LogLink",
    "ProbitLink",
    "Family",
    "Gaussian",
    "Binomial",
    "Poisson",
    "Tweedie",
    "Gamma",
    "resolve_family",
    "resolve_link",
]
