"""
Regression solution types.

Contains the parameter payloads and user-facing solution wrappers for
the closed-form (OLS / ridge) and optimizer (GLM) paths.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from pyestimators.core.result import Result
from pyestimators.core.validation import (
    as_feature_matrix, check_array, check_n_features, check_1d,
    check_finite, check_consistent_length,
)

if TYPE_CHECKING:
    from pyestimators.regression.design import RegressionDesign
    from pyestimators.regression.families import Family


def _as_new_features(X_new: ArrayLike, n_features: int) -> NDArray[np.floating[Any]]:
    X_arr = as_feature_matrix(X_new, 'X_new')
    check_n_features(X_arr, n_features, 'X_new')
    return X_arr


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for least-squares regression.

    This is the immutable data computed by backends.
    """
    coefficients: NDArray[np.floating[Any]]
    intercept: float
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int
    alpha: float
    fit_intercept: bool


@dataclass
class LinearSolution:
    """
    User-facing least-squares results.

    Wraps the backend Result and provides accessors for coefficients,
    goodness of fit and (for unpenalized fits) coefficient inference.
    """
    _result: Result[LinearParams]
    _design: 'RegressionDesign'

    # Cached computations
    _standard_errors: NDArray[np.floating[Any]] | None = None

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def intercept(self) -> float:
        return self._result.params.intercept

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

    @property
    def fit_intercept(self) -> bool:
        return self._result.params.fit_intercept

    @property
    def n_features(self) -> int:
        return self._design.p

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        n = self._design.n
        df_total = n - 1 if self.fit_intercept else n
        if self.df_residual <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * df_total / self.df_residual

    @property
    def residual_std_error(self) -> float:
        df = self._result.params.df_residual
        if df <= 0:
            return 0.0
        return float(np.sqrt(self.rss / df))

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of the coefficients (intercept excluded).

        Computed as SE(β) = sqrt(diag(σ² (X̃'X̃)⁻¹)), X̃ the centered design
        when an intercept is fit. Ridge estimates are biased, so for
        alpha > 0 every entry is NaN; likewise when no residual degrees
        of freedom remain.
        """
        if self._standard_errors is not None:
            return self._standard_errors

        p = self._design.p
        df = self.df_residual
        if self.alpha > 0 or df <= 0:
            self._standard_errors = np.full(p, np.nan, dtype=np.float64)
            return self._standard_errors

        X = self._design.X
        if self.fit_intercept:
            X = X - X.mean(axis=0)

        sigma_sq = self.rss / df
        try:
            XtX_inv = np.linalg.inv(X.T @ X)
            self._standard_errors = np.sqrt(sigma_sq * np.diag(XtX_inv))
        except np.linalg.LinAlgError:
            # The fit already checked rank; this is a numerical corner
            self._standard_errors = np.full(p, np.nan, dtype=np.float64)

        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """t-statistics for coefficients."""
        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
            t = np.where(np.isfinite(t), t, np.nan)
        return t

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values from the t distribution on df_residual."""
        t = self.t_statistics
        if self.df_residual <= 0:
            return np.full_like(t, np.nan)
        return 2.0 * stats.t.sf(np.abs(t), self.df_residual)

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def predict(self, X_new: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Predict responses for new observations: X_new β + intercept.

        Raises:
            DimensionError: If X_new does not have n_features columns
        """
        X_arr = _as_new_features(X_new, self.n_features)
        return X_arr @ self.coefficients + self.intercept

    def score(self, X: ArrayLike, y: ArrayLike) -> float:
        """Coefficient of determination R² of the predictions on (X, y)."""
        y_arr = check_array(y, 'y')
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()
        check_1d(y_arr, 'y')
        check_finite(y_arr, 'y')
        y_hat = self.predict(X)
        check_consistent_length(y_hat, y_arr, names=('X', 'y'))

        ss_res = float(np.sum((y_arr - y_hat) ** 2))
        ss_tot = float(np.sum((y_arr - y_arr.mean()) ** 2))
        if ss_tot == 0:
            return 1.0 if ss_res == 0 else 0.0
        return 1.0 - ss_res / ss_tot

    def summary(self) -> str:
        """Generate R-style summary output."""
        title = "Ridge Regression Results" if self.alpha > 0 else "Linear Regression Results"
        lines = [
            title,
            "=" * 60,
            f"Observations: {self._design.n}",
            f"Features: {self._design.p}",
        ]
        if self.alpha > 0:
            lines.append(f"Penalty (alpha): {self.alpha:g}")
        lines.extend([
            f"R-squared: {self.r_squared:.6f}",
            f"Adj. R-squared: {self.adjusted_r_squared:.6f}",
            f"Residual Std. Error: {self.residual_std_error:.6f} on {self.df_residual} DF",
            "",
            "Coefficients:",
            "-" * 60,
            f"{'':<12} {'Estimate':>14} {'Std.Error':>12} {'t value':>10}",
            "-" * 60,
        ])
        if self.fit_intercept:
            lines.append(f"  {'intercept':<10} {self.intercept:14.6f}")

        for i, (coef, se, t) in enumerate(zip(
            self.coefficients, self.standard_errors, self.t_statistics
        )):
            se_str = f"{se:12.6f}" if not np.isnan(se) else "          NA"
            t_str = f"{t:10.3f}" if not np.isnan(t) else "        NA"
            lines.append(f"  β[{i}]{'':<6} {coef:14.6f} {se_str} {t_str}")

        lines.append("-" * 60)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"alpha={self.alpha:g}, r_squared={self.r_squared:.4f})"
        )


@dataclass(frozen=True)
class GLMParams:
    """
    Parameter payload for penalized-likelihood GLM fits.

    Attributes:
        coefficients: β (p,)
        intercept: Unpenalized intercept (0.0 when not fit)
        fitted_values: μ = g⁻¹(η) on the training data
        linear_predictor: η = Xβ + intercept
        deviance: Σ d(y_i, μ_i) at the optimum
        null_deviance: Deviance of the intercept-only (or η = 0) model
        objective: Final penalized objective value
        n_iter: Optimizer iterations
        converged: Always True for a returned fit
        gradient_norm: max |∇f| at the optimum, if reported
    """
    coefficients: NDArray[np.floating[Any]]
    intercept: float
    fitted_values: NDArray[np.floating[Any]]
    linear_predictor: NDArray[np.floating[Any]]
    deviance: float
    null_deviance: float
    objective: float
    n_iter: int
    converged: bool
    gradient_norm: float | None
    alpha: float
    fit_intercept: bool
    family_name: str
    link_name: str


@dataclass
class GLMSolution:
    """User-facing GLM results."""
    _result: Result[GLMParams]
    _design: 'RegressionDesign'
    _family: 'Family'

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def intercept(self) -> float:
        return self._result.params.intercept

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def linear_predictor(self) -> NDArray[np.floating[Any]]:
        return self._result.params.linear_predictor

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        """Response residuals y - μ."""
        return self._design.y - self.fitted_values

    @property
    def deviance(self) -> float:
        return self._result.params.deviance

    @property
    def null_deviance(self) -> float:
        return self._result.params.null_deviance

    @property
    def deviance_explained(self) -> float:
        """D² = 1 - deviance / null_deviance."""
        if self.null_deviance == 0:
            return 1.0 if self.deviance == 0 else 0.0
        return 1.0 - self.deviance / self.null_deviance

    @property
    def objective(self) -> float:
        return self._result.params.objective

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def gradient_norm(self) -> float | None:
        return self._result.params.gradient_norm

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

    @property
    def fit_intercept(self) -> bool:
        return self._result.params.fit_intercept

    @property
    def family(self) -> 'Family':
        return self._family

    @property
    def n_features(self) -> int:
        return self._design.p

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def predict(self, X_new: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Predict the mean response: g⁻¹(X_new β + intercept).

        Raises:
            DimensionError: If X_new does not have n_features columns
        """
        X_arr = _as_new_features(X_new, self.n_features)
        eta = X_arr @ self.coefficients + self.intercept
        return self._family.link.linkinv(eta)

    def summary(self) -> str:
        """Generate summary output."""
        p = self._result.params
        lines = [
            "Generalized Linear Model Results",
            "=" * 60,
            f"Family: {p.family_name}",
            f"Link: {p.link_name}",
            f"Observations: {self._design.n}",
            f"Features: {self._design.p}",
            f"Penalty (alpha): {p.alpha:g}",
            "",
            "Coefficients:",
            "-" * 60,
        ]
        if p.fit_intercept:
            lines.append(f"  {'intercept':<10} {p.intercept:14.6f}")
        for i, coef in enumerate(p.coefficients):
            lines.append(f"  β[{i}]{'':<6} {coef:14.6f}")
        lines.extend([
            "-" * 60,
            f"Null deviance: {p.null_deviance:.4f}",
            f"Residual deviance: {p.deviance:.4f}",
            f"Deviance explained: {self.deviance_explained:.4f}",
            f"Iterations: {p.n_iter}",
            f"Backend: {self.backend_name}",
        ])
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        return "\n".join(lines)

    def __repr__(self) -> str:
        p = self._result.params
        return (
            f"GLMSolution(family={p.family_name!r}, link={p.link_name!r}, "
            f"n={self._design.n}, p={self._design.p}, deviance={p.deviance:.4f})"
        )
