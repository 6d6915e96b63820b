"""
GLM families and link functions.

Each Family defines:
- A variance function V(μ) relating variance to the mean
- A default link function g(μ) mapping the mean to the linear predictor
- A unit deviance d(y, μ), whose half-sum is the negative log-likelihood
  up to terms that do not depend on μ
- The valid range of the response

Each Link defines:
- g(μ) → η  (link)
- g⁻¹(η) → μ  (inverse link)
- dμ/dη  (derivative of inverse link, for the likelihood gradient)

Families are tagged variants dispatched through this small interface;
the fitting code never branches on the concrete family.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
    Jørgensen, B. (1997). The Theory of Dispersion Models.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import numpy as np
from numpy.typing import NDArray

from pyestimators.core.exceptions import ValidationError


# =====================================================================
# Link functions
# =====================================================================

class Link(ABC):
    """Abstract link function g(μ) mapping mean to linear predictor."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def link(self, mu: NDArray) -> NDArray:
        """g(μ) → η."""
        ...

    @abstractmethod
    def linkinv(self, eta: NDArray) -> NDArray:
        """g⁻¹(η) → μ."""
        ...

    @abstractmethod
    def mu_eta(self, eta: NDArray) -> NDArray:
        """dμ/dη = (g⁻¹)'(η)."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class IdentityLink(Link):
    """Identity link: g(μ) = μ. Default for Gaussian family."""

    @property
    def name(self) -> str:
        return 'identity'

    def link(self, mu: NDArray) -> NDArray:
        return np.array(mu, dtype=np.float64, copy=True)

    def linkinv(self, eta: NDArray) -> NDArray:
        return np.array(eta, dtype=np.float64, copy=True)

    def mu_eta(self, eta: NDArray) -> NDArray:
        return np.ones_like(eta, dtype=np.float64)


class LogitLink(Link):
    """Logit link: g(μ) = log(μ/(1-μ)). Default for Binomial family."""

    @property
    def name(self) -> str:
        return 'logit'

    def link(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-10, 1 - 1e-10)
        return np.log(mu / (1 - mu))

    def linkinv(self, eta: NDArray) -> NDArray:
        # Clip to prevent overflow in exp
        eta = np.clip(eta, -500, 500)
        return 1.0 / (1.0 + np.exp(-eta))

    def mu_eta(self, eta: NDArray) -> NDArray:
        eta = np.clip(eta, -500, 500)
        p = 1.0 / (1.0 + np.exp(-eta))
        return np.maximum(p * (1.0 - p), 1e-10)


class LogLink(Link):
    """Log link: g(μ) = log(μ). Default for Poisson, Gamma and Tweedie families."""

    @property
    def name(self) -> str:
        return 'log'

    def link(self, mu: NDArray) -> NDArray:
        return np.log(np.maximum(mu, 1e-10))

    def linkinv(self, eta: NDArray) -> NDArray:
        # Clip to prevent overflow
        eta = np.clip(eta, -500, 500)
        return np.exp(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        eta = np.clip(eta, -500, 500)
        return np.exp(eta)


class ProbitLink(Link):
    """Probit link: g(μ) = Φ⁻¹(μ). Alternative for Binomial family."""

    @property
    def name(self) -> str:
        return 'probit'

    def link(self, mu: NDArray) -> NDArray:
        from scipy.stats import norm
        mu = np.clip(mu, 1e-10, 1 - 1e-10)
        return norm.ppf(mu)

    def linkinv(self, eta: NDArray) -> NDArray:
        from scipy.stats import norm
        return norm.cdf(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        from scipy.stats import norm
        return np.maximum(norm.pdf(eta), 1e-10)


# =====================================================================
# Link name → class mapping
# =====================================================================

_LINK_CLASSES: dict[str, type[Link]] = {
    'identity': IdentityLink,
    'logit': LogitLink,
    'log': LogLink,
    'probit': ProbitLink,
}


def resolve_link(link: str | Link | None, default: Link) -> Link:
    """Resolve a link argument to a Link instance."""
    if link is None:
        return default
    if isinstance(link, Link):
        return link
    if isinstance(link, str):
        cls = _LINK_CLASSES.get(link.lower())
        if cls is None:
            valid = ', '.join(sorted(_LINK_CLASSES.keys()))
            raise ValueError(f"Unknown link: {link!r}. Valid links: {valid}")
        return cls()
    raise TypeError(f"link must be str or Link, got {type(link).__name__}")


# =====================================================================
# Family base class
# =====================================================================

class Family(ABC):
    """
    Exponential-family response distribution with a link.

    Defines the relationship between the mean and variance of the
    response distribution, along with a link function.
    """

    def __init__(self, link: str | Link | None = None):
        self._link = resolve_link(link, self._default_link())

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def _default_link(self) -> Link:
        ...

    @property
    def link(self) -> Link:
        return self._link

    @abstractmethod
    def variance(self, mu: NDArray) -> NDArray:
        """Variance function V(μ)."""
        ...

    @abstractmethod
    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        """Per-observation deviance d(y_i, μ_i) >= 0, zero when μ_i = y_i.

        Satisfies ∂d/∂μ = -2 (y - μ) / V(μ), which is what the GLM
        gradient relies on.
        """
        ...

    @abstractmethod
    def validate_response(self, y: NDArray) -> None:
        """Raise ValidationError if y lies outside the family's support."""
        ...

    def deviance(self, y: NDArray, mu: NDArray, wt: NDArray) -> float:
        """Compute total deviance: Σ wt_i * d(y_i, μ_i).

        The deviance is twice the difference between the saturated
        log-likelihood and the model log-likelihood.
        """
        return float(np.sum(wt * self.unit_deviance(y, mu)))

    @property
    def is_ordinary_least_squares(self) -> bool:
        """True when the fit has a closed form (Gaussian with identity link)."""
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(link={self._link.name!r})"


# =====================================================================
# Concrete families
# =====================================================================

class Gaussian(Family):
    """Gaussian (Normal) family. Default link: identity.

    V(μ) = 1
    Deviance = Σ wt_i * (y_i - μ_i)²  (= RSS for identity link)
    """

    @property
    def name(self) -> str:
        return 'gaussian'

    def _default_link(self) -> Link:
        return IdentityLink()

    def variance(self, mu: NDArray) -> NDArray:
        return np.ones_like(mu)

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        return (y - mu) ** 2

    def validate_response(self, y: NDArray) -> None:
        pass

    @property
    def is_ordinary_least_squares(self) -> bool:
        return isinstance(self._link, IdentityLink)


class Binomial(Family):
    """Binomial family. Default link: logit.

    V(μ) = μ(1-μ)
    Deviance = 2 * Σ wt_i * [y_i log(y_i/μ_i) + (1-y_i) log((1-y_i)/(1-μ_i))]

    y holds proportions in [0, 1] (0/1 for binary outcomes).
    """

    @property
    def name(self) -> str:
        return 'binomial'

    def _default_link(self) -> Link:
        return LogitLink()

    def variance(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-10, 1 - 1e-10)
        return mu * (1.0 - mu)

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        mu = np.clip(mu, 1e-10, 1 - 1e-10)
        # 0*log(0) = 0. np.where evaluates both branches, so
        # suppress harmless warnings from the unused branch.
        with np.errstate(divide='ignore', invalid='ignore'):
            term1 = np.where(y > 0, y * np.log(y / mu), 0.0)
            term2 = np.where(y < 1, (1 - y) * np.log((1 - y) / (1 - mu)), 0.0)
        return 2.0 * (term1 + term2)

    def validate_response(self, y: NDArray) -> None:
        if np.any(y < 0) or np.any(y > 1):
            raise ValidationError(
                f"y: binomial response must lie in [0, 1], "
                f"got range [{y.min():g}, {y.max():g}]"
            )


class Poisson(Family):
    """Poisson family. Default link: log.

    V(μ) = μ
    Deviance = 2 * Σ wt_i * [y_i log(y_i/μ_i) - (y_i - μ_i)]
    """

    @property
    def name(self) -> str:
        return 'poisson'

    def _default_link(self) -> Link:
        return LogLink()

    def variance(self, mu: NDArray) -> NDArray:
        return np.maximum(mu, 1e-10)

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        mu = np.maximum(mu, 1e-10)
        with np.errstate(divide='ignore', invalid='ignore'):
            term = np.where(y > 0, y * np.log(y / mu), 0.0)
        return 2.0 * (term - (y - mu))

    def validate_response(self, y: NDArray) -> None:
        if np.any(y < 0):
            raise ValidationError(
                f"y: poisson response must be non-negative, got min {y.min():g}"
            )


class Tweedie(Family):
    """Tweedie family with power variance V(μ) = μ^power.

    power = 0   Normal
    power = 1   Poisson
    1 < power < 2  compound Poisson-Gamma
    power = 2   Gamma
    power = 3   inverse Gaussian

    Powers in (0, 1) do not correspond to a distribution and are rejected.
    Default link: identity for power == 0, log otherwise.
    """

    def __init__(self, power: float = 0.0, link: str | Link | None = None):
        power = float(power)
        if 0 < power < 1:
            raise ValueError(
                f"Tweedie power must be 0 or >= 1 (no distribution exists "
                f"for 0 < power < 1), got {power}"
            )
        if power < 0:
            raise ValueError(f"Tweedie power must be non-negative, got {power}")
        self._power = power
        super().__init__(link)

    @property
    def name(self) -> str:
        return 'tweedie'

    @property
    def power(self) -> float:
        return self._power

    def _default_link(self) -> Link:
        return IdentityLink() if self._power == 0 else LogLink()

    def variance(self, mu: NDArray) -> NDArray:
        if self._power == 0:
            return np.ones_like(mu)
        return np.power(np.maximum(mu, 1e-10), self._power)

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        p = self._power
        if p == 0:
            return (y - mu) ** 2

        mu = np.maximum(mu, 1e-10)
        if p == 1:
            with np.errstate(divide='ignore', invalid='ignore'):
                term = np.where(y > 0, y * np.log(y / mu), 0.0)
            return 2.0 * (term - (y - mu))
        if p == 2:
            return 2.0 * (np.log(mu / y) + y / mu - 1.0)

        y_pos = np.maximum(y, 0.0)
        return 2.0 * (
            np.power(y_pos, 2 - p) / ((1 - p) * (2 - p))
            - y * np.power(mu, 1 - p) / (1 - p)
            + np.power(mu, 2 - p) / (2 - p)
        )

    def validate_response(self, y: NDArray) -> None:
        p = self._power
        if 1 <= p < 2 and np.any(y < 0):
            raise ValidationError(
                f"y: tweedie response with power={p:g} must be non-negative, "
                f"got min {y.min():g}"
            )
        if p >= 2 and np.any(y <= 0):
            raise ValidationError(
                f"y: tweedie response with power={p:g} must be strictly positive, "
                f"got min {y.min():g}"
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(power={self._power:g}, link={self._link.name!r})"


class Gamma(Tweedie):
    """Gamma family: Tweedie with power 2. Default link: log.

    V(μ) = μ²
    Deviance = 2 * Σ wt_i * [log(μ_i/y_i) + y_i/μ_i - 1]
    """

    def __init__(self, link: str | Link | None = None):
        super().__init__(power=2.0, link=link)

    @property
    def name(self) -> str:
        return 'gamma'

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(link={self._link.name!r})"


# =====================================================================
# Family name → class mapping + resolver
# =====================================================================

_FAMILY_CLASSES: dict[str, type[Family]] = {
    'gaussian': Gaussian,
    'normal': Gaussian,
    'binomial': Binomial,
    'poisson': Poisson,
    'gamma': Gamma,
    'tweedie': Tweedie,
}


def resolve_family(family: str | Family | None) -> Family:
    """Resolve a family argument to a Family instance.

    Args:
        family: None (Gaussian), a string name ('gaussian', 'binomial',
                'poisson', 'gamma', 'tweedie') or a Family instance
                (passed through). A bare 'tweedie' means power 0.

    Returns:
        Family instance.

    Raises:
        ValueError: If string name is not recognized.
        TypeError: If argument is neither string nor Family.
    """
    if family is None:
        return Gaussian()
    if isinstance(family, Family):
        return family
    if isinstance(family, str):
        cls = _FAMILY_CLASSES.get(family.lower())
        if cls is None:
            valid = ', '.join(
                sorted(k for k in _FAMILY_CLASSES.keys() if k != 'normal')
            )
            raise ValueError(
                f"Unknown family: {family!r}. Valid families: {valid}"
            )
        return cls()
    raise TypeError(f"family must be str or Family, got {type(family).__name__}")
