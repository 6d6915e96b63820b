"""
Independent Component Analysis.

Public API:
    fit(X, ...) -> ICASolution
    transform(model, X_new) -> NDArray

Example:
    >>> from pyestimators.ica import fit
    >>> model = fit(X, contrast='exp', strategy='deflation', random_state=0)
    >>> S = model.transform(X)
    >>> X_back = model.inverse_transform(S)
"""

from pyestimators.ica.config import FastICAConfig, Strategy
from pyestimators.ica.contrasts import Contrast, LogCosh, Exp, Cube, resolve_contrast
from pyestimators.ica.design import ICADesign
from pyestimators.ica.solution import ICASolution, ICAParams
from pyestimators.ica.solvers import fit, transform

__all__ = [
    "fit",
    "transform",
    "FastICAConfig",
    "Strategy",
    "Contrast",
    "LogCosh",
    "Exp",
    "Cube",
    "resolve_contrast",
    "ICADesign",
    "ICASolution",
    "ICAParams",
]
