"""
FastICA tests.

Source recovery for both strategies, whitening and orthogonality
properties, determinism, model application and failure modes.
"""

import numpy as np
import pytest

from pyestimators import fit_ica, transform
from pyestimators.core.exceptions import (
    ConvergenceError, DimensionError, SingularCovarianceError, ValidationError,
)
from pyestimators.ica import fit, FastICAConfig, ICASolution, Strategy
from pyestimators.ica.backends.cpu import sym_decorrelation, whiten


def _max_abs_corr(S_est, S_true):
    """For each true source, the best |corr| with any estimated source."""
    k = S_true.shape[1]
    C = np.corrcoef(S_true.T, S_est.T)[:k, k:]
    return np.abs(C).max(axis=1)


class TestSourceRecovery:

    @pytest.mark.parametrize("strategy", ['symmetric', 'deflation'])
    @pytest.mark.parametrize("contrast", ['logcosh', 'exp', 'cube'])
    def test_recovers_two_sources(self, mixed_sources, strategy, contrast):
        X, S, _ = mixed_sources
        model = fit(X, strategy=strategy, contrast=contrast, random_state=0, max_iter=400)
        assert isinstance(model, ICASolution)
        corr = _max_abs_corr(model.transform(X), S)
        assert np.all(corr > 0.95)

    def test_mixing_matches_up_to_permutation_and_scale(self, mixed_sources):
        X, _, A = mixed_sources
        model = fit(X, random_state=0)
        # Each estimated mixing column is parallel to one true column
        A_hat = model.mixing
        cos = np.abs(
            (A / np.linalg.norm(A, axis=0)).T @ (A_hat / np.linalg.norm(A_hat, axis=0))
        )
        np.testing.assert_allclose(np.sort(cos.max(axis=1)), [1.0, 1.0], atol=0.02)

    def test_logcosh_alpha(self, mixed_sources):
        X, S, _ = mixed_sources
        model = fit(X, alpha=1.5, random_state=1)
        assert np.all(_max_abs_corr(model.sources, S) > 0.95)


class TestModelProperties:

    @pytest.mark.parametrize("strategy", ['symmetric', 'deflation'])
    def test_unmixing_orthonormal(self, mixed_sources, strategy):
        X, _, _ = mixed_sources
        W = fit(X, strategy=strategy, random_state=3).unmixing
        np.testing.assert_allclose(W @ W.T, np.eye(2), atol=1e-8)

    def test_whitened_data_has_unit_covariance(self, rng):
        X = rng.laplace(size=(500, 4)) @ rng.standard_normal((4, 4))
        model = fit(X, random_state=0)
        Z = (X - model.mean) @ model.whitening.T
        np.testing.assert_allclose(Z.T @ Z / len(X), np.eye(4), atol=1e-8)

    def test_sources_uncorrelated(self, mixed_sources):
        X, _, _ = mixed_sources
        S_hat = fit(X, random_state=0).sources
        np.testing.assert_allclose(S_hat.T @ S_hat / len(X), np.eye(2), atol=1e-8)

    def test_mean_is_retained(self, mixed_sources):
        X, _, _ = mixed_sources
        shifted = X + np.array([10.0, -3.0])
        model = fit(shifted, random_state=0)
        np.testing.assert_allclose(model.mean, shifted.mean(axis=0))

    def test_shapes(self, rng):
        X = rng.laplace(size=(400, 3)) @ rng.standard_normal((3, 5))
        model = fit(X, n_components=3, random_state=0)
        assert model.whitening.shape == (3, 5)
        assert model.unmixing.shape == (3, 3)
        assert model.components.shape == (3, 5)
        assert model.mixing.shape == (5, 3)
        assert model.eigenvalues.shape == (3,)
        assert model.transform(X).shape == (400, 3)

    def test_inverse_transform_roundtrip(self, mixed_sources):
        X, _, _ = mixed_sources
        model = fit(X, random_state=0)
        np.testing.assert_allclose(model.inverse_transform(model.transform(X)), X, atol=1e-8)

    def test_deterministic_with_seed(self, mixed_sources):
        X, _, _ = mixed_sources
        a = fit(X, random_state=7)
        b = fit(X, random_state=7)
        np.testing.assert_array_equal(a.unmixing, b.unmixing)
        np.testing.assert_array_equal(a.whitening, b.whitening)
        assert a.n_iter == b.n_iter

    def test_deflation_records_component_iterations(self, mixed_sources):
        X, _, _ = mixed_sources
        model = fit(X, strategy='deflation', random_state=0)
        iters = model._result.params.component_iterations
        assert len(iters) == 2
        assert model.n_iter == max(iters)

    def test_result_metadata(self, mixed_sources):
        X, _, _ = mixed_sources
        model = fit(X, random_state=0)
        assert model.backend_name == 'cpu_fastica'
        assert model.converged
        assert model.info['final_distance'] < 1e-4
        assert 'whitening' in model.timing
        assert "FastICA Results" in model.summary()
        assert repr(model).startswith("ICASolution(n=2000, p=2, k=2")


class TestTransform:

    def test_top_level_transform(self, mixed_sources):
        X, _, _ = mixed_sources
        model = fit_ica(X, random_state=0)
        np.testing.assert_allclose(transform(model, X[:10]), model.sources[:10])

    def test_column_mismatch(self, mixed_sources):
        X, _, _ = mixed_sources
        model = fit(X, random_state=0)
        with pytest.raises(DimensionError, match="has 3 features, but the model was fit with 2"):
            model.transform(np.zeros((5, 3)))

    def test_inverse_transform_column_mismatch(self, mixed_sources):
        X, _, _ = mixed_sources
        model = fit(X, random_state=0)
        with pytest.raises(DimensionError):
            model.inverse_transform(np.zeros((5, 3)))

    def test_transform_rejects_non_model(self):
        with pytest.raises(TypeError):
            transform(object(), np.zeros((2, 2)))


class TestFailures:

    def test_duplicated_column_all_components(self, rng):
        x = rng.laplace(size=300)
        X = np.column_stack([x, x, rng.laplace(size=300)])
        with pytest.raises(SingularCovarianceError) as exc_info:
            fit(X, random_state=0)
        assert exc_info.value.rank == 2
        assert exc_info.value.expected_rank == 3

    def test_duplicated_column_fewer_components(self, rng):
        x = rng.laplace(size=300)
        X = np.column_stack([x, x, rng.laplace(size=300)])
        model = fit(X, n_components=2, random_state=0)
        assert model.n_components == 2

    def test_constant_data(self):
        with pytest.raises(SingularCovarianceError):
            fit(np.ones((20, 2)), random_state=0)

    def test_too_many_components(self, mixed_sources):
        X, _, _ = mixed_sources
        with pytest.raises(ValidationError, match="n_components"):
            fit(X, n_components=3)

    def test_iteration_cap(self, mixed_sources):
        X, _, _ = mixed_sources
        with pytest.raises(ConvergenceError) as exc_info:
            fit(X, max_iter=1, tol=1e-12, random_state=0)
        assert exc_info.value.iterations == 1
        assert exc_info.value.reason == 'max_iterations'

    def test_iteration_cap_deflation(self, mixed_sources):
        X, _, _ = mixed_sources
        with pytest.raises(ConvergenceError, match="component 0"):
            fit(X, strategy='deflation', max_iter=1, tol=1e-12, random_state=0)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            fit(np.array([[1.0, np.nan], [2.0, 3.0]]))


class TestConfig:

    def test_defaults(self):
        cfg = FastICAConfig()
        assert cfg.strategy is Strategy.SYMMETRIC
        assert cfg.contrast.name == 'logcosh'
        assert cfg.tol == 1e-4
        assert cfg.max_iter == 200
        assert cfg.eigenvalue_threshold == 1e-10

    def test_config_object(self, mixed_sources):
        X, _, _ = mixed_sources
        cfg = FastICAConfig(strategy='deflation', contrast='exp', random_state=5)
        a = fit(X, config=cfg)
        b = fit(X, strategy='deflation', contrast='exp', random_state=5)
        np.testing.assert_array_equal(a.unmixing, b.unmixing)
        assert a.strategy == 'deflation'

    @pytest.mark.parametrize("kwargs", [
        {'n_components': 0},
        {'n_components': 1.5},
        {'tol': 0.0},
        {'max_iter': 0},
        {'alpha': 3.0},
        {'eigenvalue_threshold': -1.0},
        {'random_state': 1.5},
    ])
    def test_invalid_options(self, kwargs):
        with pytest.raises(ValidationError):
            FastICAConfig(**kwargs)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            FastICAConfig(strategy='parallel')

    def test_unknown_contrast(self):
        with pytest.raises(ValueError, match="Unknown contrast"):
            FastICAConfig(contrast='tanh')

    def test_frozen(self):
        cfg = FastICAConfig()
        with pytest.raises(AttributeError):
            cfg.tol = 1.0


class TestKernels:

    def test_whiten_threshold_is_relative(self, rng):
        X = rng.standard_normal((200, 2)) * np.array([1.0, 1e-4])
        Xc = X - X.mean(axis=0)
        K, eigenvalues = whiten(Xc, 2, 1e-10)
        assert K.shape == (2, 2)
        with pytest.raises(SingularCovarianceError):
            whiten(Xc, 2, 1e-6)

    def test_sym_decorrelation_orthonormal(self, rng):
        W = sym_decorrelation(rng.standard_normal((4, 4)))
        np.testing.assert_allclose(W @ W.T, np.eye(4), atol=1e-10)
