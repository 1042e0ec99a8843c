"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np
import scipy.sparse as sp


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def dense_data(rng):
    """Well-conditioned dense design with an intercept and two responses."""
    n, p, k = 100, 4, 2
    X = np.column_stack([np.ones(n), rng.standard_normal((n, p - 1))])
    Y = X @ rng.standard_normal((p, k)) + rng.standard_normal((n, k)) * 0.5
    return X, Y


@pytest.fixture
def random_sparse(rng):
    """Factory for random CSC matrices with normal entries."""
    def make(n, p, density):
        mask = rng.random((n, p)) < density
        return sp.csc_matrix(np.where(mask, rng.standard_normal((n, p)), 0.0))
    return make


@pytest.fixture
def sparse_data(rng, random_sparse):
    """Full column rank sparse design (random block stacked on identity)."""
    p, k = 20, 3
    block = random_sparse(200, p, 0.1)
    X = sp.vstack([block, sp.eye(p)]).tocsc()
    Y = rng.standard_normal((X.shape[0], k))
    return X, Y


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (x3 = x1 + x2)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([x1, x2, x3])
    Y = rng.standard_normal((n, 2))
    return X, Y
