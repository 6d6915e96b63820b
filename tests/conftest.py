"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Noisy linear data with an intercept of 1.5."""
    n, p = 100, 3
    X = rng.standard_normal((n, p))
    beta_true = np.array([1.0, -2.0, 0.5])
    y = 1.5 + X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (should fail for OLS)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def mixed_sources():
    """Two non-Gaussian sources and their linear mixture.

    Returns (X, S, A) with X = S Aᵀ.
    """
    t = np.linspace(0, 2 * np.pi, 2000, endpoint=False)
    s1 = np.sin(3 * t)
    s2 = np.sign(np.sin(5 * t))
    S = np.column_stack([s1, s2])
    A = np.array([[1.0, 1.0], [0.5, 2.0]])
    return S @ A.T, S, A
