"""
CPU backend for FastICA.

Algorithm:
    1. Center:   X̃ = X - mean(X)
    2. Whiten:   C = X̃'X̃ / n = E D Eᵀ (top-k eigenpairs, descending)
                 K = D^(-1/2) Eᵀ,  Z = K X̃ᵀ  (k x n, unit covariance)
    3. Iterate:  w⁺ = E[Z g(wᵀZ)] - E[g′(wᵀZ)] w
                 symmetric: W⁺ = (W⁺W⁺ᵀ)^(-1/2) W⁺ after each update
                 deflation: Gram-Schmidt each row against finished rows,
                            then normalize
    4. Stop when max over rows of |1 - |<w_old, w_new>|| < tol.

The sign of each row is arbitrary, hence the absolute value in the
convergence distance.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyestimators.core.exceptions import ConvergenceError, SingularCovarianceError
from pyestimators.core.result import Result
from pyestimators.core.compute.timing import Timer
from pyestimators.core.compute.linalg import top_eigenpairs, inverse_sqrt
from pyestimators.ica.config import FastICAConfig, Strategy
from pyestimators.ica.contrasts import Contrast
from pyestimators.ica.design import ICADesign
from pyestimators.ica.solution import ICAParams


def whiten(
    Xc: NDArray,
    n_components: int,
    eigenvalue_threshold: float,
) -> tuple[NDArray, NDArray]:
    """
    Whitening matrix for centered data.

    Args:
        Xc: Centered data (n x p)
        n_components: Number of leading eigen-directions k to keep
        eigenvalue_threshold: Relative cutoff; retained eigenvalues must
            exceed eigenvalue_threshold * λ_max

    Returns:
        (K, eigenvalues): K is (k x p), eigenvalues (k,) descending

    Raises:
        SingularCovarianceError: If λ_max <= 0 or a retained eigenvalue is
            at or below the cutoff
    """
    n, p = Xc.shape
    C = (Xc.T @ Xc) / n
    eig = top_eigenpairs(C)

    lam_max = float(eig.eigenvalues[0])
    threshold = eigenvalue_threshold * lam_max if lam_max > 0 else 0.0
    rank = int(np.sum(eig.eigenvalues > threshold)) if lam_max > 0 else 0
    kept = eig.eigenvalues[:n_components]

    if lam_max <= 0 or np.any(kept <= threshold):
        raise SingularCovarianceError(
            f"Covariance matrix has numerical rank {rank}, cannot whiten "
            f"{n_components} component(s). Reduce n_components to at most "
            f"{rank} or remove redundant columns.",
            matrix_name='covariance',
            rank=rank,
            expected_rank=n_components,
            eigenvalues=kept.copy(),
            threshold=threshold,
        )

    E = eig.eigenvectors[:, :n_components]
    K = (E / np.sqrt(kept)).T
    return K, kept.copy()


def sym_decorrelation(W: NDArray) -> NDArray:
    """(W Wᵀ)^(-1/2) W: the orthonormal matrix closest to W."""
    return inverse_sqrt(W @ W.T) @ W


def _gram_schmidt(w: NDArray, W: NDArray, j: int) -> NDArray:
    """Remove from w its projection onto the first j rows of W."""
    if j == 0:
        return w
    return w - (w @ W[:j].T) @ W[:j]


class CPUFastICABackend:
    """
    CPU FastICA.

    Implements the Backend protocol for ICADesign -> ICAParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_fastica'

    def solve(
        self,
        design: ICADesign,
        config: FastICAConfig,
        verbose: bool = False,
    ) -> Result[ICAParams]:
        """Fit FastICA.

        Args:
            design: Validated observations
            config: Validated options
            verbose: Print per-component progress (deflation)

        Returns:
            Result[ICAParams]

        Raises:
            ValidationError: If n_components exceeds the number of features
            SingularCovarianceError: If the data cannot be whitened
            ConvergenceError: If the iteration cap is reached
        """
        timer = Timer()
        timer.start()

        X = design.X
        n = design.n
        k = config.resolve_n_components(design.p)
        contrast = config.contrast
        rng = np.random.default_rng(config.random_state)

        with timer.section('centering'):
            mean = X.mean(axis=0)
            Xc = X - mean

        with timer.section('whitening'):
            K, eigenvalues = whiten(Xc, k, config.eigenvalue_threshold)
            Z = K @ Xc.T

        W0 = rng.standard_normal((k, k))

        with timer.section('iteration'):
            if config.strategy is Strategy.SYMMETRIC:
                W, n_iter, distance = self._symmetric(
                    Z, W0, contrast, config.tol, config.max_iter,
                )
                component_iterations: tuple[int, ...] = ()
            else:
                W, component_iterations, distance = self._deflation(
                    Z, W0, contrast, config.tol, config.max_iter, verbose,
                )
                n_iter = max(component_iterations)

        timer.stop()

        params = ICAParams(
            whitening=K,
            unmixing=W,
            mean=mean,
            eigenvalues=eigenvalues,
            n_iter=n_iter,
            component_iterations=component_iterations,
            converged=True,
            strategy=config.strategy.value,
            contrast_name=contrast.name,
        )

        info: dict[str, Any] = {
            'method': 'fastica',
            'strategy': config.strategy.value,
            'contrast': contrast.name,
            'iterations': n_iter,
            'final_distance': distance,
            'n_samples': n,
            'n_components': k,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )

    @staticmethod
    def _symmetric(
        Z: NDArray,
        W0: NDArray,
        contrast: Contrast,
        tol: float,
        max_iter: int,
    ) -> tuple[NDArray, int, float]:
        """Parallel fixed-point iteration with symmetric decorrelation."""
        n = Z.shape[1]
        W = sym_decorrelation(W0)
        distance = np.inf

        for iteration in range(1, max_iter + 1):
            gwz, g_prime = contrast.evaluate(W @ Z)
            W_new = (gwz @ Z.T) / n - g_prime.mean(axis=1)[:, np.newaxis] * W
            W_new = sym_decorrelation(W_new)

            distance = float(np.max(np.abs(1.0 - np.abs(np.sum(W_new * W, axis=1)))))
            W = W_new
            if distance < tol:
                return W, iteration, distance

        raise ConvergenceError(
            f"FastICA (symmetric) did not converge in {max_iter} iterations "
            f"(distance={distance:.3e}, tol={tol:g}). Increase max_iter or tol.",
            iterations=max_iter,
            final_change=distance,
            reason='max_iterations',
            threshold=tol,
        )

    @staticmethod
    def _deflation(
        Z: NDArray,
        W0: NDArray,
        contrast: Contrast,
        tol: float,
        max_iter: int,
        verbose: bool = False,
    ) -> tuple[NDArray, tuple[int, ...], float]:
        """One-unit fixed-point iteration, one component at a time."""
        k, n = Z.shape
        W = np.zeros((k, k), dtype=np.float64)
        iterations: list[int] = []
        worst = 0.0

        for j in range(k):
            w = _gram_schmidt(W0[j].copy(), W, j)
            w /= np.linalg.norm(w)
            distance = np.inf

            for iteration in range(1, max_iter + 1):
                gwz, g_prime = contrast.evaluate(w @ Z)
                w_new = (Z @ gwz) / n - g_prime.mean() * w
                w_new = _gram_schmidt(w_new, W, j)
                w_new /= np.linalg.norm(w_new)

                distance = float(abs(1.0 - abs(w_new @ w)))
                w = w_new
                if distance < tol:
                    break
            else:
                raise ConvergenceError(
                    f"FastICA (deflation) component {j} did not converge in "
                    f"{max_iter} iterations (distance={distance:.3e}, "
                    f"tol={tol:g}). Increase max_iter or tol.",
                    iterations=max_iter,
                    final_change=distance,
                    reason='max_iterations',
                    threshold=tol,
                )

            if verbose:
                print(f"  component {j}: converged in {iteration} iterations")

            W[j] = w
            iterations.append(iteration)
            worst = max(worst, distance)

        return W, tuple(iterations), worst
