"""
Tests for regression fit().

The complete pipeline: validation, backend selection, IWLS convergence,
error propagation and the closed-form checks available for a geometric
response.
"""

import dataclasses
import warnings

import numpy as np
import pytest

from geomglm.core.exceptions import (
    ConvergenceError,
    DimensionError,
    InvalidDomainError,
    SingularMatrixError,
)
from geomglm.regression import Design, GeometricSolution, fit
from geomglm.regression import solvers
from geomglm.regression.backends.cpu import CPUIWLSBackend


class TestFitBasic:

    def test_returns_solution(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        result = fit(y, X, backend='cpu')
        assert isinstance(result, GeometricSolution)
        assert result.coefficients.shape == (3,)

    def test_fit_from_design(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        result = fit(Design.from_arrays(y, X), backend='cpu')
        assert isinstance(result, GeometricSolution)

    def test_design_plus_arrays_rejected(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        with pytest.raises(ValueError, match="either a Design"):
            fit(Design.from_arrays(y, X), X)

    def test_converges_below_tolerance(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        result = fit(y, X, backend='cpu')
        assert result.converged
        assert result.score <= 1e-6
        assert result.n_iter >= 1

    def test_coefficients_close_to_truth(self, simple_geometric_data):
        X, y, beta_true = simple_geometric_data
        result = fit(y, X, backend='cpu')
        np.testing.assert_allclose(result.coefficients, beta_true, atol=0.4)

    def test_backend_name_and_timing(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        result = fit(y, X, backend='cpu')
        assert result.backend_name == 'cpu_iwls'
        assert result.timing['total_seconds'] > 0
        assert 'iwls' in result.timing
        assert 'derivations' in result.timing
        assert result.info['iterations'] == result.n_iter


class TestClosedForm:
    """Designs whose MLE is known analytically."""

    def test_intercept_only_matches_log_mean_minus_one(self, intercept_only_data):
        X, y = intercept_only_data
        result = fit(y, X, backend='cpu')
        np.testing.assert_allclose(
            result.coefficients[0], np.log(np.mean(y) - 1.0), rtol=1e-6
        )

    def test_intercept_only_fitted_is_sample_mean(self, intercept_only_data):
        X, y = intercept_only_data
        result = fit(y, X, backend='cpu')
        np.testing.assert_allclose(result.fitted_values, np.mean(y), rtol=1e-6)

    def test_intercept_only_deviance_equals_null(self, intercept_only_data):
        X, y = intercept_only_data
        result = fit(y, X, backend='cpu')
        np.testing.assert_allclose(result.deviance, result.null_deviance, rtol=1e-8)

    def test_two_group_design(self, rng):
        """Group indicator model: each group's fitted mean is its sample mean."""
        g = np.repeat([0.0, 1.0], 150)
        y = np.concatenate([
            rng.geometric(0.5, 150),
            rng.geometric(0.25, 150),
        ]).astype(np.float64)
        X = np.column_stack([np.ones(300), g])
        result = fit(y, X, backend='cpu')
        m0, m1 = y[g == 0].mean(), y[g == 1].mean()
        b0 = np.log(m0 - 1.0)
        np.testing.assert_allclose(
            result.coefficients, [b0, np.log(m1 - 1.0) - b0], rtol=1e-6
        )


class TestFitInvariants:

    def test_idempotent(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        a = fit(y, X, backend='cpu')
        b = fit(y, X, backend='cpu')
        np.testing.assert_array_equal(a.coefficients, b.coefficients)
        np.testing.assert_array_equal(a.residuals_deviance, b.residuals_deviance)
        assert a.deviance == b.deviance

    def test_default_start_equals_explicit_zeros(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        a = fit(y, X, backend='cpu')
        b = fit(y, X, np.zeros(X.shape[1]), backend='cpu')
        np.testing.assert_array_equal(a.coefficients, b.coefficients)
        assert a.n_iter == b.n_iter

    def test_nonzero_start_reaches_same_estimate(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        a = fit(y, X, backend='cpu')
        b = fit(y, X, [0.5, 0.0, 0.0], backend='cpu')
        np.testing.assert_allclose(a.coefficients, b.coefficients, rtol=1e-5, atol=1e-7)

    def test_degrees_of_freedom(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        result = fit(y, X, backend='cpu')
        assert result.rank == X.shape[1]
        assert result.df_residual == len(y) - X.shape[1]
        assert result.df_null == len(y) - 1

    def test_inputs_not_mutated(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        X0, y0 = X.copy(), y.copy()
        start = np.zeros(3)
        fit(y, X, start, backend='cpu')
        np.testing.assert_array_equal(X, X0)
        np.testing.assert_array_equal(y, y0)
        np.testing.assert_array_equal(start, np.zeros(3))


class TestFitErrors:

    def test_non_integer_response(self):
        with pytest.raises(InvalidDomainError):
            fit([1.5, 2, 3], np.ones((3, 1)))

    def test_length_mismatch(self):
        with pytest.raises(DimensionError):
            fit([1, 2, 3, 4, 5], np.ones((4, 1)))

    def test_collinear_design(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(SingularMatrixError) as exc_info:
            fit(y, X, backend='cpu')
        assert exc_info.value.iteration == 1
        assert exc_info.value.expected_rank == 4

    def test_max_iter_exhausted(self, simple_geometric_data):
        X, y, _ = simple_geometric_data
        with pytest.raises(ConvergenceError) as exc_info:
            fit(y, X, max_iter=1, backend='cpu')
        err = exc_info.value
        assert err.iterations == 1
        assert err.reason == 'max_iterations'
        assert err.threshold == 1e-6
        assert err.final_change > 1e-6

    def test_divergent_start_is_non_finite(self):
        y = np.array([1.0, 2.0, 3.0])
        X = np.ones((3, 1))
        with pytest.raises(ConvergenceError) as exc_info:
            fit(y, X, start=[1000.0], backend='cpu')
        assert exc_info.value.reason == 'non_finite'

    def test_divergent_start_raises_without_numpy_warnings(self):
        y = np.array([1.0, 2.0, 3.0])
        X = np.ones((3, 1))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            with pytest.raises(ConvergenceError):
                fit(y, X, start=[1000.0], backend='cpu')

    @pytest.mark.parametrize("kwargs,match", [
        ({'tol': 0.0}, "tol"),
        ({'tol': float('nan')}, "tol"),
        ({'tol': float('inf')}, "tol"),
        ({'max_iter': float('nan')}, "max_iter"),
        ({'max_iter': 0}, "max_iter"),
        ({'backend': 'tpu'}, "Unknown backend"),
    ])
    def test_bad_options(self, simple_geometric_data, kwargs, match):
        X, y, _ = simple_geometric_data
        with pytest.raises(ValueError, match=match):
            fit(y, X, **kwargs)


class TestWarningPropagation:

    def test_result_warnings_are_emitted(self, simple_geometric_data, monkeypatch):
        X, y, _ = simple_geometric_data

        class NoisyBackend(CPUIWLSBackend):
            def solve(self, design, family=None, tol=1e-6, max_iter=100):
                result = super().solve(design, family, tol=tol, max_iter=max_iter)
                return dataclasses.replace(
                    result, warnings=("cooks_distance: 1 non-finite value(s)",)
                )

        monkeypatch.setattr(solvers, '_get_backend', lambda choice: NoisyBackend())
        with pytest.warns(RuntimeWarning, match="cooks_distance"):
            result = fit(y, X)
        assert result.warnings == ("cooks_distance: 1 non-finite value(s)",)
