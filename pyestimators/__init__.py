"""
PyEstimators: linear models and independent component analysis on NumPy.

Every fit is a pure function from (data, options) to an immutable
fitted model; fitted models are applied to new data with predict() or
transform().

Submodules:
    regression: OLS, ridge and generalized linear models
    ica: FastICA

Caller-facing API:
    fit_linear(X, y, ...)  -> LinearSolution | GLMSolution
    predict(model, X_new)  -> NDArray
    fit_ica(X, ...)        -> ICASolution
    transform(model, X_new) -> NDArray
"""

__version__ = "0.1.0"

from pyestimators import regression
from pyestimators import ica
from pyestimators.regression import fit as fit_linear, predict
from pyestimators.ica import fit as fit_ica, transform

__all__ = [
    "__version__",
    "regression",
    "ica",
    "fit_linear",
    "predict",
    "fit_ica",
    "transform",
]
