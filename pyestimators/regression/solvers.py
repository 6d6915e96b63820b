"""
Solver dispatch for regression.

This module provides the fit() and predict() functions (public API)
and backend selection.
"""

from typing import Literal
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyestimators.core.exceptions import ValidationError
from pyestimators.core.protocols import Optimizer
from pyestimators.regression.design import RegressionDesign
from pyestimators.regression.families import Family, resolve_family
from pyestimators.regression.solution import LinearSolution, GLMSolution
from pyestimators.regression.backends.cpu import CPUNormalEquationsBackend
from pyestimators.regression.backends.cpu_glm import CPUGLMBackend


BackendChoice = Literal['auto', 'cpu']
FamilyChoice = Literal['gaussian', 'normal', 'binomial', 'poisson', 'gamma', 'tweedie']


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    family: FamilyChoice | Family | None = None,
    alpha: float = 0.0,
    fit_intercept: bool = True,
    tol: float = 1e-4,
    max_iter: int = 100,
    optimizer: Optimizer | None = None,
    backend: BackendChoice = 'auto',
    verbose: bool = False,
) -> LinearSolution | GLMSolution:
    """
    Fit a linear or generalized linear model.

    Gaussian family with identity link (the default) is solved in closed
    form:
        alpha == 0:  min_β ||ỹ - X̃β||²                  (OLS)
        alpha > 0:   min_β ||ỹ - X̃β||² + alpha ||β||²    (ridge)

    Any other family or link minimizes the penalized mean negative
    log-likelihood with a quasi-Newton optimizer. The same alpha scale
    is used on both paths, and the intercept is never penalized.

    Args:
        X: Feature matrix (n x p). 1-D input is a single feature.
        y: Response vector (n,).
        family: None (Gaussian), family name or Family instance.
        alpha: Non-negative L2 penalty on the coefficients.
        fit_intercept: Estimate an intercept. When False the model
            passes through the origin.
        tol: Gradient tolerance for the optimizer path.
        max_iter: Iteration cap for the optimizer path.
        optimizer: Object implementing the Optimizer protocol. Defaults
            to ScipyOptimizer (L-BFGS-B). Optimizer path only.
        backend: 'auto' or 'cpu'.
        verbose: Print progress information.

    Returns:
        LinearSolution for the closed-form path, GLMSolution otherwise.

    Raises:
        ValidationError: If inputs or hyperparameters are invalid, or y is
            outside the family's support
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If alpha == 0 and the centered X is rank-deficient
            (closed-form path)
        ConvergenceError: If the optimizer fails (GLM path)

    Example:
        >>> import numpy as np
        >>> from pyestimators.regression import fit
        >>>
        >>> X = np.random.randn(100, 2)
        >>> y = 1.0 + X @ [2, 3] + np.random.randn(100) * 0.1
        >>>
        >>> result = fit(X, y)
        >>> print(result.coefficients, result.intercept)
        >>> print(result.summary())
    """
    _check_hyperparameters(alpha, tol, max_iter)
    fam = resolve_family(family)

    # === Construct Design ===
    # This is the boundary - validate here, trust everywhere else
    design = RegressionDesign.from_arrays(X, y)
    fam.validate_response(design.y)

    if verbose:
        print(f"Regression: {design.n} observations, {design.p} features, "
              f"family={fam.name}, link={fam.link.name}, alpha={alpha:g}")

    # === Closed form ===
    if fam.is_ordinary_least_squares:
        backend_impl = _get_backend(backend)
        if verbose:
            print(f"Backend: {backend_impl.name}")
        result = backend_impl.solve(
            design, alpha=float(alpha), fit_intercept=fit_intercept,
        )
        return LinearSolution(_result=result, _design=design)

    # === Optimizer ===
    backend_impl = _get_glm_backend(backend, optimizer)
    if verbose:
        print(f"Backend: {backend_impl.name}")
    result = backend_impl.solve(
        design,
        fam,
        alpha=float(alpha),
        fit_intercept=fit_intercept,
        tol=tol,
        max_iter=max_iter,
    )

    if verbose:
        print(f"Converged in {result.params.n_iter} iterations "
              f"(deviance: {result.params.deviance:.6f})")

    return GLMSolution(_result=result, _design=design, _family=fam)


def predict(
    model: LinearSolution | GLMSolution,
    X_new: ArrayLike,
) -> NDArray[np.floating]:
    """
    Apply a fitted model to new observations.

    Returns X_new β + intercept for least-squares models, and the mean
    response g⁻¹(X_new β + intercept) for GLMs.

    Raises:
        DimensionError: If X_new's column count differs from the training data
        TypeError: If model is not a fitted regression solution
    """
    if not isinstance(model, (LinearSolution, GLMSolution)):
        raise TypeError(
            f"model must be a LinearSolution or GLMSolution, "
            f"got {type(model).__name__}"
        )
    return model.predict(X_new)


def _check_hyperparameters(alpha: float, tol: float, max_iter: int) -> None:
    if not np.isfinite(alpha) or alpha < 0:
        raise ValidationError(f"alpha: must be a finite non-negative number, got {alpha}")
    if not np.isfinite(tol) or tol <= 0:
        raise ValidationError(f"tol: must be positive, got {tol}")
    if int(max_iter) != max_iter or max_iter < 1:
        raise ValidationError(f"max_iter: must be a positive integer, got {max_iter}")


def _get_backend(choice: BackendChoice) -> CPUNormalEquationsBackend:
    """
    Select the closed-form backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu'):
        return CPUNormalEquationsBackend()
    raise ValueError(f"Unknown backend: {choice!r}")


def _get_glm_backend(
    choice: BackendChoice, optimizer: Optimizer | None
) -> CPUGLMBackend:
    """Select the GLM backend, wired to the caller's optimizer if given."""
    if choice in ('auto', 'cpu'):
        return CPUGLMBackend(optimizer=optimizer)
    raise ValueError(f"Unknown backend: {choice!r}")
