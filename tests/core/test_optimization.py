"""
Tests for the scipy optimizer adapter.
"""

import numpy as np
import pytest

from pyestimators.core.protocols import Objective, Optimizer
from pyestimators.core.compute.optimization import OptimizeOutcome, ScipyOptimizer


class Quadratic:
    """f(x) = ½ (x - c)ᵀ A (x - c)."""

    def __init__(self, A, c):
        self.A = A
        self.c = c

    def value_and_gradient(self, x):
        d = x - self.c
        g = self.A @ d
        return 0.5 * float(d @ g), g


class Rosenbrock:

    def value_and_gradient(self, x):
        a, b = x
        value = (1 - a) ** 2 + 100 * (b - a ** 2) ** 2
        grad = np.array([
            -2 * (1 - a) - 400 * a * (b - a ** 2),
            200 * (b - a ** 2),
        ])
        return value, grad


class TestScipyOptimizer:

    def test_satisfies_protocols(self):
        assert isinstance(ScipyOptimizer(), Optimizer)
        assert isinstance(Quadratic(np.eye(2), np.zeros(2)), Objective)

    def test_minimizes_quadratic(self):
        A = np.array([[3.0, 0.5], [0.5, 1.0]])
        c = np.array([1.0, -2.0])
        outcome = ScipyOptimizer().minimize(Quadratic(A, c), np.zeros(2), tol=1e-10, max_iter=100)
        assert isinstance(outcome, OptimizeOutcome)
        assert outcome.converged
        np.testing.assert_allclose(outcome.x, c, atol=1e-6)
        assert outcome.fun < 1e-10
        assert outcome.gradient_norm < 1e-6

    def test_iteration_cap_reports_failure(self):
        outcome = ScipyOptimizer().minimize(
            Rosenbrock(), np.array([-1.5, 2.0]), tol=1e-12, max_iter=2,
        )
        assert not outcome.converged
        assert outcome.n_iter <= 2
        assert isinstance(outcome.message, str)

    def test_bfgs_method(self):
        opt = ScipyOptimizer(method='BFGS')
        assert opt.name == 'scipy_bfgs'
        outcome = opt.minimize(Quadratic(np.eye(3), np.ones(3)), np.zeros(3), tol=1e-8, max_iter=50)
        np.testing.assert_allclose(outcome.x, np.ones(3), atol=1e-6)

    def test_default_name(self):
        assert ScipyOptimizer().name == 'scipy_lbfgsb'

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown optimization method"):
            ScipyOptimizer(method='Nelder-Mead')

    def test_tnc_respects_cap(self):
        outcome = ScipyOptimizer(method='TNC').minimize(
            Rosenbrock(), np.array([-1.5, 2.0]), tol=1e-12, max_iter=2,
        )
        assert not outcome.converged

    @pytest.mark.parametrize("method", ['TNC', 'Newton-CG', 'SLSQP'])
    def test_other_methods_minimize_quadratic(self, method):
        A = np.array([[2.0, 0.3], [0.3, 1.0]])
        c = np.array([-1.0, 0.5])
        outcome = ScipyOptimizer(method=method).minimize(
            Quadratic(A, c), np.zeros(2), tol=1e-8, max_iter=200,
        )
        assert outcome.converged
        np.testing.assert_allclose(outcome.x, c, atol=1e-4)

    @pytest.mark.parametrize("method", ['L-BFGS-B', 'TNC', 'Newton-CG', 'SLSQP'])
    def test_no_unknown_option_warning(self, method, recwarn):
        ScipyOptimizer(method=method).minimize(
            Quadratic(np.eye(2), np.ones(2)), np.zeros(2), tol=1e-8, max_iter=50,
        )
        messages = [str(w.message) for w in recwarn]
        assert not any("Unknown solver options" in m for m in messages)
        assert not any("deprecated" in m for m in messages)
