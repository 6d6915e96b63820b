"""
Tests for the dense linear algebra kernels.
"""

import numpy as np
import pytest

from pyestimators.core.exceptions import SingularMatrixError
from pyestimators.core.compute.linalg import (
    inverse_sqrt,
    solve_normal_equations,
    symmetric_rank,
    top_eigenpairs,
)


class TestSymmetricRank:

    def test_full_rank(self, rng):
        X = rng.standard_normal((50, 4))
        info = symmetric_rank(X.T @ X, n_samples=50)
        assert info.rank == 4
        assert np.isfinite(info.condition_number)

    def test_duplicated_column(self, rng):
        x = rng.standard_normal(50)
        X = np.column_stack([x, x, rng.standard_normal(50)])
        info = symmetric_rank(X.T @ X, n_samples=50)
        assert info.rank == 2

    def test_zero_matrix(self):
        info = symmetric_rank(np.zeros((3, 3)))
        assert info.rank == 0
        assert info.condition_number == np.inf


class TestSolveNormalEquations:

    def test_matches_direct_solve(self, rng):
        X = rng.standard_normal((80, 3))
        y = rng.standard_normal(80)
        beta = solve_normal_equations(X.T @ X, X.T @ y, n_samples=80)
        np.testing.assert_allclose(beta, np.linalg.lstsq(X, y, rcond=None)[0], rtol=1e-10)

    def test_singular_raises(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(SingularMatrixError, match="alpha > 0") as exc_info:
            solve_normal_equations(X.T @ X, X.T @ y, n_samples=len(y))
        assert exc_info.value.rank == 2
        assert exc_info.value.expected_rank == 3
        assert exc_info.value.matrix_name == "X'X"

    def test_ridge_handles_singular(self, collinear_data):
        X, y = collinear_data
        beta = solve_normal_equations(X.T @ X, X.T @ y, ridge=1.0)
        expected = np.linalg.solve(X.T @ X + np.eye(3), X.T @ y)
        np.testing.assert_allclose(beta, expected, rtol=1e-8)

    def test_negative_ridge_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            solve_normal_equations(np.eye(2), np.ones(2), ridge=-1.0)


class TestEigen:

    def test_top_eigenpairs_descending(self, rng):
        A = rng.standard_normal((30, 4))
        C = A.T @ A
        eig = top_eigenpairs(C)
        assert np.all(np.diff(eig.eigenvalues) <= 0)
        np.testing.assert_allclose(
            C @ eig.eigenvectors, eig.eigenvectors * eig.eigenvalues, atol=1e-8
        )

    def test_top_k(self, rng):
        A = rng.standard_normal((30, 4))
        C = A.T @ A
        full = top_eigenpairs(C)
        top2 = top_eigenpairs(C, k=2)
        assert top2.eigenvectors.shape == (4, 2)
        np.testing.assert_allclose(top2.eigenvalues, full.eigenvalues[:2])

    def test_inverse_sqrt(self, rng):
        A = rng.standard_normal((30, 3))
        S = A.T @ A
        R = inverse_sqrt(S)
        np.testing.assert_allclose(R @ S @ R, np.eye(3), atol=1e-10)
        np.testing.assert_allclose(R, R.T, atol=1e-12)
