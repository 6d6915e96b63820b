"""
ICA backends.

Available backends:
    CPUFastICABackend: whitening + fixed-point iteration on NumPy
"""

from pyestimators.ica.backends.cpu import CPUFastICABackend, whiten, sym_decorrelation

__all__ = [
    "CPUFastICABackend",
    "whiten",
    "sym_decorrelation",
]
