"""
CPU backend for least-squares regression.

Solves the (optionally ridge-penalized) normal equations on the centered
design. Centering removes the intercept from the linear system, so the
penalty never touches it:

    (X̃'X̃ + λI) β = X̃'ỹ,    intercept = ȳ - x̄·β
"""

from typing import Any
import numpy as np

from pyestimators.core.result import Result
from pyestimators.core.compute.timing import Timer
from pyestimators.core.compute.linalg import solve_normal_equations, symmetric_rank
from pyestimators.regression.design import RegressionDesign
from pyestimators.regression.solution import LinearParams


class CPUNormalEquationsBackend:
    """
    CPU backend for OLS and ridge via a Cholesky solve of the normal equations.

    Implements the Backend protocol for RegressionDesign -> LinearParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_normal_eq'

    def solve(
        self,
        design: RegressionDesign,
        alpha: float = 0.0,
        fit_intercept: bool = True,
    ) -> Result[LinearParams]:
        """
        Solve least squares, ridge-penalized when alpha > 0.

        Args:
            design: Validated regression design
            alpha: Ridge penalty λ >= 0 (intercept unpenalized)
            fit_intercept: Center X and y and estimate an intercept

        Returns:
            Result containing LinearParams

        Raises:
            SingularMatrixError: If alpha == 0 and X̃'X̃ is rank-deficient
        """
        timer = Timer()
        timer.start()

        X, y = design.X, design.y
        n, p = design.n, design.p
        warnings_list: list[str] = []

        # === Centering ===
        with timer.section('centering'):
            if fit_intercept:
                Xc, yc, x_mean, y_mean = design.centered()
            else:
                Xc, yc = X, y
                x_mean, y_mean = np.zeros(p), 0.0

        # === Normal equations ===
        with timer.section('gram'):
            XtX = Xc.T @ Xc
            Xty = Xc.T @ yc

        with timer.section('solve'):
            coefficients = solve_normal_equations(
                XtX, Xty, ridge=alpha, n_samples=n, matrix_name="X'X",
            )
            intercept = float(y_mean - x_mean @ coefficients) if fit_intercept else 0.0

        # === Residuals and Fitted Values ===
        with timer.section('residuals'):
            fitted_values = X @ coefficients + intercept
            residuals = y - fitted_values

        # === Summary Statistics ===
        with timer.section('statistics'):
            rss = float(residuals @ residuals)
            if fit_intercept:
                tss = float(np.sum((y - y_mean) ** 2))
            else:
                tss = float(y @ y)
            rank_info = symmetric_rank(XtX, n_samples=n)

        timer.stop()

        n_params = p + (1 if fit_intercept else 0)
        df_residual = n - n_params
        if df_residual <= 0:
            warnings_list.append(
                f"No residual degrees of freedom: {n} observations for "
                f"{n_params} parameters"
            )
        if alpha > 0 and rank_info.rank < p:
            warnings_list.append(
                f"X'X has rank {rank_info.rank} < {p}; the ridge penalty "
                f"determines the aliased directions"
            )

        params = LinearParams(
            coefficients=coefficients,
            intercept=intercept,
            residuals=residuals,
            fitted_values=fitted_values,
            rss=rss,
            tss=tss,
            rank=rank_info.rank + (1 if fit_intercept else 0),
            df_residual=df_residual,
            alpha=float(alpha),
            fit_intercept=fit_intercept,
        )

        info: dict[str, Any] = {
            'method': 'ridge' if alpha > 0 else 'ols',
            'solver': 'normal_equations',
            'rank': rank_info.rank,
            'condition_number': rank_info.condition_number,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
