"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


def _geometric_response(rng, eta):
    """Draw y ∈ {1, 2, ...} with mean exp(eta) + 1."""
    mu = np.exp(eta) + 1.0
    return rng.geometric(1.0 / mu).astype(np.float64)


@pytest.fixture
def intercept_only_data(rng):
    """Intercept-only geometric sample with mean 3."""
    n = 400
    X = np.ones((n, 1))
    y = _geometric_response(rng, np.full(n, np.log(2.0)))
    return X, y


@pytest.fixture
def simple_geometric_data(rng):
    """Intercept plus two covariates, known coefficients."""
    n = 300
    X = np.column_stack([
        np.ones(n),
        rng.standard_normal(n),
        rng.uniform(-1.0, 1.0, n),
    ])
    beta_true = np.array([0.8, 0.4, -0.6])
    y = _geometric_response(rng, X @ beta_true)
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Design with perfectly collinear columns (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    X = np.column_stack([np.ones(n), x1, x2, x1 + x2])
    y = rng.geometric(0.4, n).astype(np.float64)
    return X, y
