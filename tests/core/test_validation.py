"""
Tests for input validators.

Validates:
    - Dense conversion keeps float32/float64 and promotes integers
    - Rejection of non-numeric, complex and non-finite input
    - Sparse normalization to CSC without touching the caller's matrix
    - Row-count and precision consistency checks
"""

import numpy as np
import pytest
import scipy.sparse as sp

from pyresidual.core.exceptions import DimensionError, PrecisionError, ValidationError
from pyresidual.core.validation import (
    check_2d,
    check_array,
    check_consistent_length,
    check_finite,
    check_matching_precision,
    check_min_samples,
    check_ndim,
    check_sparse,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:

    def test_list_to_float_array(self):
        result = check_array([1.0, 2.0, 3.0], 'x')
        assert result.dtype == np.float64

    def test_int_array_promoted_to_float(self):
        result = check_array(np.array([1, 2, 3]), 'x')
        assert result.dtype == np.float64

    def test_float64_not_copied(self):
        arr = np.ones((3, 2))
        assert check_array(arr, 'x') is arr

    def test_float32_preserved(self):
        result = check_array(np.ones(3, dtype=np.float32), 'x')
        assert result.dtype == np.float32

    def test_float16_passes_through(self):
        # Precision support is checked separately
        result = check_array(np.ones(3, dtype=np.float16), 'x')
        assert result.dtype == np.float16

    def test_rejects_mixed_types(self):
        with pytest.raises(ValidationError, match="object dtype"):
            check_array([1, "a", None], 'x')

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(np.array(["a", "b"]), 'x')

    def test_rejects_complex(self):
        with pytest.raises(ValidationError, match="complex"):
            check_array(np.array([1 + 2j]), 'x')

    def test_error_message_includes_name(self):
        with pytest.raises(ValidationError, match="my_param"):
            check_array(np.array(["a"]), 'my_param')


# ═══════════════════════════════════════════════════════════════════════
# check_sparse
# ═══════════════════════════════════════════════════════════════════════


class TestCheckSparse:

    def test_csr_converted_to_csc(self):
        result = check_sparse(sp.csr_matrix(np.eye(3)), 'X')
        assert result.format == 'csc'

    def test_int_promoted_to_float(self):
        result = check_sparse(sp.csc_matrix(np.eye(3, dtype=np.int32)), 'X')
        assert result.dtype == np.float64

    def test_float32_kept(self):
        result = check_sparse(sp.csc_matrix(np.eye(3, dtype=np.float32)), 'X')
        assert result.dtype == np.float32

    def test_rejects_dense(self):
        with pytest.raises(ValidationError, match="scipy.sparse"):
            check_sparse(np.eye(3), 'X')

    def test_rejects_complex(self):
        with pytest.raises(ValidationError, match="real numeric"):
            check_sparse(sp.csc_matrix(np.eye(3, dtype=np.complex128)), 'X')

    def test_duplicates_summed_without_mutating_input(self):
        # Two entries at (0, 0) in a CSC built directly from its arrays
        data = np.array([1.0, 2.0, 5.0])
        indices = np.array([0, 0, 1])
        indptr = np.array([0, 2, 3])
        X = sp.csc_matrix((data, indices, indptr), shape=(2, 2))
        result = check_sparse(X, 'X')
        assert result.toarray()[0, 0] == 3.0
        assert X.nnz == 3
        np.testing.assert_array_equal(X.data, [1.0, 2.0, 5.0])


# ═══════════════════════════════════════════════════════════════════════
# check_finite
# ═══════════════════════════════════════════════════════════════════════


class TestCheckFinite:

    def test_finite_passes(self):
        check_finite(np.array([1.0, 2.0]), 'x')

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="1 NaN"):
            check_finite(np.array([1.0, np.nan]), 'x')

    def test_inf_rejected(self):
        with pytest.raises(ValidationError, match="1 Inf"):
            check_finite(np.array([np.inf, 1.0]), 'x')

    def test_sparse_nan_rejected(self):
        X = sp.csc_matrix(np.array([[1.0, 0.0], [0.0, np.nan]]))
        with pytest.raises(ValidationError, match="X"):
            check_finite(X, 'X')

    def test_sparse_finite_passes(self):
        check_finite(sp.eye(3, format='csc'), 'X')


# ═══════════════════════════════════════════════════════════════════════
# Dimensions
# ═══════════════════════════════════════════════════════════════════════


class TestCheckNdim:

    def test_2d_passes(self):
        check_2d(np.ones((3, 2)), 'x')

    def test_wrong_ndim_raises(self):
        with pytest.raises(DimensionError, match="expected 2D"):
            check_ndim(np.ones((2, 2, 2)), 2, 'x')

    def test_error_includes_shape(self):
        with pytest.raises(DimensionError, match=r"\(3,\)"):
            check_2d(np.ones(3), 'x')


class TestCheckConsistentLength:

    def test_same_length_passes(self):
        check_consistent_length(np.ones((5, 2)), np.ones((5, 1)), names=('X', 'Y'))

    def test_different_length_raises(self):
        with pytest.raises(DimensionError, match="X=5, Y=4"):
            check_consistent_length(np.ones((5, 2)), np.ones((4, 1)), names=('X', 'Y'))

    def test_sparse_and_dense(self):
        with pytest.raises(DimensionError):
            check_consistent_length(sp.eye(5, format='csc'), np.ones((3, 1)), names=('X', 'Y'))

    def test_wrong_number_of_names(self):
        with pytest.raises(ValueError, match="must match"):
            check_consistent_length(np.ones(3), np.ones(3), names=('X',))


class TestCheckMinSamples:

    def test_exact_minimum_passes(self):
        check_min_samples(np.ones((1, 2)), 1, 'X')

    def test_empty_array_raises(self):
        with pytest.raises(DimensionError, match="at least 1 rows, got 0"):
            check_min_samples(np.ones((0, 2)), 1, 'X')


# ═══════════════════════════════════════════════════════════════════════
# Precision
# ═══════════════════════════════════════════════════════════════════════


class TestCheckMatchingPrecision:

    def test_float64_pair(self):
        assert check_matching_precision(np.ones(2), np.ones(2), names=('X', 'Y')) == 'fp64'

    def test_float32_pair(self):
        a = np.ones(2, dtype=np.float32)
        assert check_matching_precision(a, a, names=('X', 'Y')) == 'fp32'

    def test_mixed_raises(self):
        with pytest.raises(PrecisionError, match="Mixed precision") as exc_info:
            check_matching_precision(
                np.ones(2), np.ones(2, dtype=np.float32), names=('X', 'Y')
            )
        assert exc_info.value.dtypes == ('float64', 'float32')

    def test_float16_unsupported(self):
        with pytest.raises(PrecisionError, match="float16"):
            check_matching_precision(
                np.ones(2, dtype=np.float16), np.ones(2, dtype=np.float16),
                names=('X', 'Y'),
            )

    def test_sparse_dtype_read(self):
        X = sp.eye(3, format='csc', dtype=np.float32)
        with pytest.raises(PrecisionError):
            check_matching_precision(X, np.ones(3), names=('X', 'Y'))
