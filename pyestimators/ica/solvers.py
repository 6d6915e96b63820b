"""
Solver dispatch for FastICA.

Public API:
    fit(X, ...) -> ICASolution
    transform(model, X_new) -> NDArray
"""

from typing import Literal
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyestimators.ica.config import FastICAConfig, Strategy
from pyestimators.ica.contrasts import Contrast
from pyestimators.ica.design import ICADesign
from pyestimators.ica.solution import ICASolution
from pyestimators.ica.backends.cpu import CPUFastICABackend


BackendChoice = Literal['auto', 'cpu']
ContrastChoice = Literal['logcosh', 'exp', 'cube']
StrategyChoice = Literal['symmetric', 'deflation']


def fit(
    X: ArrayLike,
    *,
    n_components: int | None = None,
    contrast: ContrastChoice | Contrast = 'logcosh',
    alpha: float = 1.0,
    strategy: StrategyChoice | Strategy = 'symmetric',
    tol: float = 1e-4,
    max_iter: int = 200,
    random_state: int | None = None,
    eigenvalue_threshold: float = 1e-10,
    config: FastICAConfig | None = None,
    backend: BackendChoice = 'auto',
    verbose: bool = False,
) -> ICASolution:
    """
    Independent Component Analysis by FastICA.

    Finds k directions in which the whitened data is maximally
    non-Gaussian. Each row of the returned model unmixes one source,
    up to sign, scale and order.

    Parameters
    ----------
    X : array-like, shape (n_samples, n_features)
        Observed mixed signals.
    n_components : int or None
        Number of sources k (1 <= k <= n_features). None keeps all.
    contrast : str or Contrast
        'logcosh' (default), 'exp' or 'cube'.
    alpha : float
        logcosh scale, 1 <= alpha <= 2.
    strategy : str
        'symmetric' (all components together) or 'deflation' (one by one).
    tol : float
        Convergence threshold on max |1 - |<w_old, w_new>||.
    max_iter : int
        Iteration cap (per component for deflation).
    random_state : int or None
        Seed for the initial unmixing matrix. Equal seeds give identical
        models on identical data.
    eigenvalue_threshold : float
        Relative cutoff for degenerate covariance directions.
    config : FastICAConfig or None
        Pre-built options. When given, the individual keyword options
        above are ignored.
    backend : str
        'auto' or 'cpu'.
    verbose : bool
        Print progress information.

    Returns
    -------
    ICASolution

    Raises
    ------
    ValidationError
        Invalid input or options, or n_components > n_features.
    SingularCovarianceError
        The requested components span a degenerate covariance direction.
    ConvergenceError
        The iteration cap was reached.

    Examples
    --------
    >>> from pyestimators.ica import fit
    >>> model = fit(X, n_components=2, random_state=0)
    >>> S = model.transform(X)
    """
    if config is None:
        config = FastICAConfig(
            n_components=n_components,
            contrast=contrast,
            alpha=alpha,
            strategy=strategy,
            tol=tol,
            max_iter=max_iter,
            random_state=random_state,
            eigenvalue_threshold=eigenvalue_threshold,
        )

    design = ICADesign.from_array(X)
    backend_impl = _get_backend(backend)

    if verbose:
        print(f"FastICA: {design.n} samples, {design.p} features, "
              f"strategy={config.strategy.value}, contrast={config.contrast.name}")
        print(f"Backend: {backend_impl.name}")

    result = backend_impl.solve(design, config, verbose=verbose)

    if verbose:
        print(f"Converged in {result.params.n_iter} iterations "
              f"(distance: {result.info['final_distance']:.3e})")

    return ICASolution(_result=result, _design=design)


def transform(model: ICASolution, X_new: ArrayLike) -> NDArray[np.floating]:
    """
    Estimate sources for new observations with a fitted model.

    Raises:
        DimensionError: If X_new's column count differs from the training data
        TypeError: If model is not an ICASolution
    """
    if not isinstance(model, ICASolution):
        raise TypeError(f"model must be an ICASolution, got {type(model).__name__}")
    return model.transform(X_new)


def _get_backend(choice: BackendChoice) -> CPUFastICABackend:
    """Select backend."""
    if choice in ('auto', 'cpu'):
        return CPUFastICABackend()
    raise ValueError(f"Unknown backend: {choice!r}")
