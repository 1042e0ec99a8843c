"""
Tests for residualize() and residuals().

Covers the properties every variant must satisfy:
    - R orthogonal to the columns of X (full rank X)
    - p = 0 gives R = Y exactly
    - Idempotence: residuals of R are R
    - Fill-reducing and natural orderings agree
    - float32 and float64 agree at single-precision tolerance
    - No mutation of inputs, no aliasing of the result
"""

import numpy as np
import pytest
import scipy.sparse as sp

from pyresidual.kernel import residualize, residuals, ResidualSolution
from pyresidual.core.compute.tolerances import FP32


# ═══════════════════════════════════════════════════════════════════════
# Worked examples
# ═══════════════════════════════════════════════════════════════════════


class TestWorkedExamples:
    """X = ones(3, 1), Y = [1, 2, 3]: B = 2, R = [-1, 0, 1]."""

    def test_dense(self):
        result = residualize(np.ones((3, 1)), np.array([[1.0], [2.0], [3.0]]))
        np.testing.assert_allclose(result.coefficients, [[2.0]], atol=1e-14)
        np.testing.assert_allclose(result.residuals, [[-1.0], [0.0], [1.0]], atol=1e-14)
        assert abs(result.residuals.sum()) < 1e-14

    def test_sparse(self):
        X = sp.csc_matrix(np.ones((3, 1)))
        R = residuals(X, np.array([[1.0], [2.0], [3.0]]))
        np.testing.assert_allclose(R, [[-1.0], [0.0], [1.0]], atol=1e-14)

    def test_float32(self):
        X = np.ones((3, 1), dtype=np.float32)
        Y = np.array([[1.0], [2.0], [3.0]], dtype=np.float32)
        R = residuals(X, Y)
        assert R.dtype == np.float32
        np.testing.assert_allclose(R, [[-1.0], [0.0], [1.0]], atol=1e-6)

    def test_1d_response(self):
        R = residuals(np.ones((3, 1)), np.array([1.0, 2.0, 3.0]))
        assert R.shape == (3,)
        np.testing.assert_allclose(R, [-1.0, 0.0, 1.0], atol=1e-14)

    @pytest.mark.parametrize("sparse", [False, True])
    def test_no_columns(self, sparse):
        X = sp.csc_matrix((3, 0)) if sparse else np.zeros((3, 0))
        Y = np.array([[1.0], [2.0], [3.0]])
        result = residualize(X, Y)
        np.testing.assert_array_equal(result.residuals, Y)
        assert result.residuals is not Y
        assert result.rank == 0
        assert result.coefficients.shape == (0, 1)


# ═══════════════════════════════════════════════════════════════════════
# Projection properties
# ═══════════════════════════════════════════════════════════════════════


class TestOrthogonality:

    def test_dense(self, dense_data):
        X, Y = dense_data
        result = residualize(X, Y)
        assert result.is_orthogonal()
        np.testing.assert_allclose(X.T @ result.residuals, 0.0, atol=1e-10)

    @pytest.mark.parametrize("ordering", ['fill_reducing', 'natural'])
    def test_sparse(self, sparse_data, ordering):
        X, Y = sparse_data
        result = residualize(X, Y, ordering=ordering)
        assert result.is_orthogonal()
        np.testing.assert_allclose(X.T @ result.residuals, 0.0, atol=1e-10)

    def test_fitted_plus_residuals_equals_y(self, dense_data):
        X, Y = dense_data
        result = residualize(X, Y)
        np.testing.assert_allclose(result.fitted_values + result.residuals, Y, atol=1e-12)

    def test_matches_lstsq(self, dense_data):
        X, Y = dense_data
        expected = Y - X @ np.linalg.lstsq(X, Y, rcond=None)[0]
        np.testing.assert_allclose(residuals(X, Y), expected, atol=1e-10)


class TestIdempotence:

    def test_dense(self, dense_data):
        X, Y = dense_data
        R = residuals(X, Y)
        np.testing.assert_allclose(residuals(X, R), R, atol=1e-10)

    def test_sparse(self, sparse_data):
        X, Y = sparse_data
        R = residuals(X, Y)
        np.testing.assert_allclose(residuals(X, R), R, atol=1e-10)


class TestOrderingInvariance:

    def test_orderings_agree(self, sparse_data):
        X, Y = sparse_data
        natural = residuals(X, Y, ordering='natural')
        reordered = residuals(X, Y, ordering='fill_reducing')
        np.testing.assert_allclose(natural, reordered, atol=1e-10)

    def test_sparse_matches_dense(self, sparse_data):
        X, Y = sparse_data
        np.testing.assert_allclose(
            residuals(X, Y), residuals(X.toarray(), Y), atol=1e-10
        )

    def test_coefficients_in_original_order(self, sparse_data):
        X, Y = sparse_data
        result = residualize(X, Y, ordering='fill_reducing')
        expected = np.linalg.lstsq(X.toarray(), Y, rcond=None)[0]
        np.testing.assert_allclose(result.coefficients, expected, atol=1e-10)


class TestPrecisionScaling:

    def test_float32_close_to_float64(self, dense_data):
        X, Y = dense_data
        R64 = residuals(X, Y)
        R32 = residuals(X.astype(np.float32), Y.astype(np.float32))
        assert R32.dtype == np.float32
        scale = np.linalg.norm(Y)
        np.testing.assert_allclose(R32, R64, atol=FP32.rtol * scale)

    def test_float32_orthogonal_at_fp32_tier(self, dense_data):
        X, Y = dense_data
        result = residualize(X.astype(np.float32), Y.astype(np.float32))
        assert result.precision == 'fp32'
        assert result.is_orthogonal()


# ═══════════════════════════════════════════════════════════════════════
# Sparse response
# ═══════════════════════════════════════════════════════════════════════


class TestSparseResponse:

    def test_returns_csc(self, sparse_data):
        X, Y = sparse_data
        R = residuals(X, sp.csc_matrix(Y))
        assert sp.issparse(R)
        assert R.format == 'csc'
        np.testing.assert_allclose(R.toarray(), residuals(X, Y), atol=1e-10)

    def test_residuals_of_column_space_vanish(self, sparse_data):
        X, _ = sparse_data
        Y = sp.csc_matrix(X[:, :2])
        R = residuals(X, Y)
        assert np.max(np.abs(R.toarray())) < 1e-10

    def test_matches_dense_response(self, sparse_data):
        X, Y = sparse_data
        dense = residualize(X, Y)
        sparse = residualize(X, sp.csc_matrix(Y))
        np.testing.assert_allclose(sparse.coefficients, dense.coefficients, atol=1e-12)
        assert sp.issparse(sparse.fitted_values)
        np.testing.assert_allclose(
            sparse.fitted_values.toarray(), dense.fitted_values, atol=1e-10
        )
        assert sparse.info['rank'] == dense.info['rank']


# ═══════════════════════════════════════════════════════════════════════
# Side effects
# ═══════════════════════════════════════════════════════════════════════


class TestNoSideEffects:

    def test_dense_inputs_not_mutated(self, dense_data):
        X, Y = dense_data
        X_copy, Y_copy = X.copy(), Y.copy()
        R = residuals(X, Y)
        np.testing.assert_array_equal(X, X_copy)
        np.testing.assert_array_equal(Y, Y_copy)
        assert not np.shares_memory(R, Y)
        assert not np.shares_memory(R, X)

    def test_sparse_inputs_not_mutated(self, sparse_data):
        X, Y = sparse_data
        X_data, Y_copy = X.data.copy(), Y.copy()
        residuals(X, Y)
        residuals(X, sp.csc_matrix(Y))
        np.testing.assert_array_equal(X.data, X_data)
        np.testing.assert_array_equal(Y, Y_copy)

    def test_writing_result_leaves_y_alone(self, dense_data):
        X, Y = dense_data
        Y_copy = Y.copy()
        R = residuals(X, Y)
        R[:] = 0.0
        np.testing.assert_array_equal(Y, Y_copy)


# ═══════════════════════════════════════════════════════════════════════
# Shapes
# ═══════════════════════════════════════════════════════════════════════


class TestShapes:

    def test_wide_dense(self, rng):
        X = rng.standard_normal((3, 5))
        Y = rng.standard_normal((3, 2))
        result = residualize(X, Y)
        np.testing.assert_allclose(result.residuals, 0.0, atol=1e-12)
        np.testing.assert_array_equal(result.coefficients[3:], 0.0)
        assert result.rank == 3
        assert result.is_full_rank

    def test_wide_sparse(self, rng):
        X = sp.csc_matrix(rng.standard_normal((3, 5)))
        Y = rng.standard_normal((3, 2))
        np.testing.assert_allclose(residuals(X, Y), 0.0, atol=1e-12)

    def test_no_responses(self, dense_data):
        X, _ = dense_data
        result = residualize(X, np.zeros((100, 0)))
        assert result.residuals.shape == (100, 0)
        assert result.orthogonality_error() == 0.0

    def test_returns_solution(self, dense_data):
        X, Y = dense_data
        assert isinstance(residualize(X, Y), ResidualSolution)
