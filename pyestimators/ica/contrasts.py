"""
FastICA contrast functions.

A contrast is the non-quadratic G whose expectation FastICA drives away
from its Gaussian value. The fixed-point update only needs its first and
second derivatives, called g and g′ here:

    logcosh:  G(u) = log cosh(αu) / α   g(u) = tanh(αu)          g′(u) = α(1 - tanh²(αu))
    exp:      G(u) = -exp(-u²/2)        g(u) = u exp(-u²/2)      g′(u) = (1 - u²) exp(-u²/2)
    cube:     G(u) = u⁴/4               g(u) = u³                g′(u) = 3u²

logcosh is the general-purpose choice, exp is more robust when the
sources are super-Gaussian, cube (kurtosis) is fast but outlier-prone.

References:
    Hyvärinen, A. (1999). Fast and robust fixed-point algorithms for
    independent component analysis. IEEE Trans. Neural Networks, 10(3).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import numpy as np
from numpy.typing import NDArray

from pyestimators.core.exceptions import ValidationError


class Contrast(ABC):
    """Abstract contrast: g and g′ evaluated together."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def evaluate(self, u: NDArray) -> tuple[NDArray, NDArray]:
        """Return (g(u), g′(u)) elementwise."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class LogCosh(Contrast):
    """G(u) = log cosh(αu) / α with 1 <= α <= 2."""

    def __init__(self, alpha: float = 1.0):
        alpha = float(alpha)
        if not 1.0 <= alpha <= 2.0:
            raise ValidationError(
                f"alpha: logcosh contrast requires 1 <= alpha <= 2, got {alpha}"
            )
        self._alpha = alpha

    @property
    def name(self) -> str:
        return 'logcosh'

    @property
    def alpha(self) -> float:
        return self._alpha

    def evaluate(self, u: NDArray) -> tuple[NDArray, NDArray]:
        gu = np.tanh(self._alpha * u)
        return gu, self._alpha * (1.0 - gu ** 2)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(alpha={self._alpha:g})"


class Exp(Contrast):
    """G(u) = -exp(-u²/2)."""

    @property
    def name(self) -> str:
        return 'exp'

    def evaluate(self, u: NDArray) -> tuple[NDArray, NDArray]:
        u2 = u ** 2
        e = np.exp(-0.5 * u2)
        return u * e, (1.0 - u2) * e


class Cube(Contrast):
    """G(u) = u⁴/4."""

    @property
    def name(self) -> str:
        return 'cube'

    def evaluate(self, u: NDArray) -> tuple[NDArray, NDArray]:
        return u ** 3, 3.0 * u ** 2


_CONTRAST_CLASSES: dict[str, type[Contrast]] = {
    'logcosh': LogCosh,
    'exp': Exp,
    'cube': Cube,
}


def resolve_contrast(contrast: str | Contrast, alpha: float = 1.0) -> Contrast:
    """Resolve a contrast argument to a Contrast instance.

    Args:
        contrast: 'logcosh', 'exp', 'cube' or a Contrast instance
                  (passed through).
        alpha: Scale for logcosh; ignored for the others.

    Raises:
        ValueError: If string name is not recognized.
        TypeError: If argument is neither string nor Contrast.
    """
    if isinstance(contrast, Contrast):
        return contrast
    if isinstance(contrast, str):
        key = contrast.lower()
        if key == 'logcosh':
            return LogCosh(alpha)
        cls = _CONTRAST_CLASSES.get(key)
        if cls is None:
            valid = ', '.join(sorted(_CONTRAST_CLASSES.keys()))
            raise ValueError(
                f"Unknown contrast: {contrast!r}. Valid contrasts: {valid}"
            )
        return cls()
    raise TypeError(
        f"contrast must be str or Contrast, got {type(contrast).__name__}"
    )
