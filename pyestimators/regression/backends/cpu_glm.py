"""
CPU backend for Generalized Linear Models via penalized likelihood.

Minimizes the L2-penalized mean negative log-likelihood

    f(β, b) = [½ Σ d(y_i, μ_i) + ½ α ||β||²] / n,    μ = g⁻¹(Xβ + b)

with a quasi-Newton optimizer, d being the family's unit deviance.
The intercept b is never penalized. Gradient:

    ∂f/∂β = [-X'r + αβ] / n,    ∂f/∂b = -Σ r_i / n
    r = (y - μ) · (dμ/dη) / V(μ)

For canonical links (dμ/dη = V(μ)) r reduces to y - μ, giving the
familiar X'(μ - y)/n.

Initialization: β = 0, b = g(ȳ), i.e. the intercept-only model.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyestimators.core.exceptions import ConvergenceError
from pyestimators.core.protocols import Optimizer
from pyestimators.core.result import Result
from pyestimators.core.compute.timing import Timer
from pyestimators.core.compute.optimization import ScipyOptimizer
from pyestimators.regression.design import RegressionDesign
from pyestimators.regression.families import Family
from pyestimators.regression.solution import GLMParams


class GLMObjective:
    """
    Penalized GLM objective over the packed vector x = [β, b].

    The intercept slot is present only when fit_intercept is True.
    Implements the Objective protocol.
    """

    def __init__(
        self,
        X: NDArray,
        y: NDArray,
        family: Family,
        alpha: float,
        fit_intercept: bool,
    ):
        self._X = X
        self._y = y
        self._family = family
        self._alpha = alpha
        self._fit_intercept = fit_intercept
        self._n, self._p = X.shape

    @property
    def n_params(self) -> int:
        return self._p + (1 if self._fit_intercept else 0)

    def unpack(self, x: NDArray) -> tuple[NDArray, float]:
        """Split x into (β, intercept)."""
        beta = x[:self._p]
        intercept = float(x[self._p]) if self._fit_intercept else 0.0
        return beta, intercept

    def linear_predictor(self, x: NDArray) -> NDArray:
        beta, intercept = self.unpack(x)
        return self._X @ beta + intercept

    def initial_point(self) -> NDArray:
        """β = 0 and the intercept at the link of the mean response."""
        x0 = np.zeros(self.n_params, dtype=np.float64)
        if self._fit_intercept:
            y_bar = np.atleast_1d(np.mean(self._y))
            x0[self._p] = float(self._family.link.link(y_bar)[0])
        return x0

    def value_and_gradient(self, x: NDArray) -> tuple[float, NDArray]:
        beta, _ = self.unpack(x)
        link = self._family.link

        eta = self.linear_predictor(x)
        mu = link.linkinv(eta)

        dev = float(np.sum(self._family.unit_deviance(self._y, mu)))
        value = (0.5 * dev + 0.5 * self._alpha * float(beta @ beta)) / self._n

        r = (self._y - mu) * link.mu_eta(eta) / self._family.variance(mu)

        grad = np.empty(self.n_params, dtype=np.float64)
        grad[:self._p] = (-(self._X.T @ r) + self._alpha * beta) / self._n
        if self._fit_intercept:
            grad[self._p] = -np.sum(r) / self._n

        return value, grad


class CPUGLMBackend:
    """
    CPU backend fitting GLMs by handing GLMObjective to an Optimizer.

    Implements the Backend protocol for RegressionDesign -> GLMParams.
    A minimizer that reports failure is surfaced as ConvergenceError;
    there is no retry.
    """

    def __init__(self, optimizer: Optimizer | None = None):
        self._optimizer = optimizer if optimizer is not None else ScipyOptimizer()

    @property
    def name(self) -> str:
        return f'cpu_glm_{self._optimizer.name}'

    def solve(
        self,
        design: RegressionDesign,
        family: Family,
        alpha: float = 0.0,
        fit_intercept: bool = True,
        tol: float = 1e-4,
        max_iter: int = 100,
    ) -> Result[GLMParams]:
        """Fit the penalized GLM.

        Args:
            design: Design object with X and y
            family: GLM family (response already validated)
            alpha: L2 penalty on β
            fit_intercept: Estimate an unpenalized intercept
            tol: Gradient tolerance handed to the optimizer
            max_iter: Maximum optimizer iterations

        Returns:
            Result[GLMParams]

        Raises:
            ConvergenceError: If the optimizer does not report success
        """
        timer = Timer()
        timer.start()

        X, y = design.X, design.y
        n = design.n
        link = family.link
        wt = np.ones(n, dtype=np.float64)

        objective = GLMObjective(X, y, family, alpha, fit_intercept)

        with timer.section('initialize'):
            x0 = objective.initial_point()

        with timer.section('optimize'):
            outcome = self._optimizer.minimize(
                objective, x0, tol=tol, max_iter=max_iter,
            )

        if not outcome.converged:
            reason = 'max_iterations' if outcome.n_iter >= max_iter else 'optimizer'
            raise ConvergenceError(
                f"GLM optimizer ({self._optimizer.name}) failed after "
                f"{outcome.n_iter} iterations: {outcome.message}",
                iterations=outcome.n_iter,
                final_change=outcome.gradient_norm,
                reason=reason,
                threshold=tol,
            )

        # ------------------------------------------------------------------
        # Fitted quantities
        # ------------------------------------------------------------------
        with timer.section('deviance'):
            coefficients, intercept = objective.unpack(outcome.x)
            coefficients = np.array(coefficients, copy=True)
            eta = objective.linear_predictor(outcome.x)
            mu = link.linkinv(eta)
            dev = family.deviance(y, mu, wt)
            null_deviance = self._null_deviance(y, wt, family, fit_intercept)

        timer.stop()

        params = GLMParams(
            coefficients=coefficients,
            intercept=intercept,
            fitted_values=mu,
            linear_predictor=eta,
            deviance=dev,
            null_deviance=null_deviance,
            objective=outcome.fun,
            n_iter=outcome.n_iter,
            converged=True,
            gradient_norm=outcome.gradient_norm,
            alpha=float(alpha),
            fit_intercept=fit_intercept,
            family_name=family.name,
            link_name=link.name,
        )

        return Result(
            params=params,
            info={
                'method': 'penalized_likelihood',
                'optimizer': self._optimizer.name,
                'iterations': outcome.n_iter,
                'message': outcome.message,
                'gradient_norm': outcome.gradient_norm,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )

    @staticmethod
    def _null_deviance(
        y: NDArray, wt: NDArray, family: Family, fit_intercept: bool
    ) -> float:
        """Deviance of the model without features.

        With an intercept the maximum-likelihood constant mean is ȳ for
        every family here, whatever the link. Without one the null model
        is η = 0, i.e. μ = g⁻¹(0).
        """
        if fit_intercept:
            mu_null = np.full_like(y, np.mean(y))
        else:
            mu_null = family.link.linkinv(np.zeros_like(y))
        return family.deviance(y, mu_null, wt)
