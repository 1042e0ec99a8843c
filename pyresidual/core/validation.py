"""
Input validation utilities for PyResidual.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except integer -> float64 promotion)
    - No silent precision changes: float32 stays float32
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any
import scipy.sparse as sp

from pyresidual.core.exceptions import ValidationError, DimensionError, PrecisionError
from pyresidual.core.compute.precision import precision_of


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert dense input to a numpy array.

    Accepts any array-like and converts to numpy array without copying
    floating-point input. Rejects inputs that result in object dtype
    (mixed types or non-numeric data) and complex input.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to a real numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    # Reject non-numeric dtypes (strings, bytes, datetime, etc.)
    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        raise ValidationError(
            f"{name}: complex dtype {result.dtype}, expected real-valued data"
        )

    # Integers carry no precision of their own
    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_sparse(matrix: Any, name: str) -> sp.csc_matrix:
    """
    Validate a scipy.sparse input and normalize it to compressed sparse column.

    Args:
        matrix: Any scipy.sparse matrix or array
        name: Parameter name for error messages

    Returns:
        csc_matrix with sorted indices and floating dtype

    Raises:
        ValidationError: If input is not sparse or not real numeric
    """
    if not sp.issparse(matrix):
        raise ValidationError(
            f"{name}: expected a scipy.sparse matrix, got {type(matrix).__name__}"
        )

    dtype = matrix.dtype
    if not np.issubdtype(dtype, np.number) or np.issubdtype(dtype, np.complexfloating):
        raise ValidationError(
            f"{name}: sparse dtype {dtype}, expected real numeric data"
        )

    result = sp.csc_matrix(matrix)
    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)
    if not result.has_canonical_format:
        # sum_duplicates works in place; never touch the caller's buffers
        result = result.copy()
        result.sum_duplicates()
    return result


def check_finite(array: Any, name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Sparse matrices are checked on their stored entries only.

    Args:
        array: Dense array or scipy.sparse matrix to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    values = array.data if sp.issparse(array) else array
    if not np.all(np.isfinite(values)):
        n_nan = int(np.sum(np.isnan(values)))
        n_inf = int(np.sum(np.isinf(values)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_consistent_length(
    *arrays: Any,
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Args:
        *arrays: Arrays (dense or sparse) to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent row counts: {details}")


def check_min_samples(array: Any, min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of rows.

    Args:
        array: Array to check
        min_samples: Minimum required rows (first dimension)
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has fewer than min_samples rows
    """
    n = array.shape[0]
    if n < min_samples:
        raise DimensionError(
            f"{name}: requires at least {min_samples} rows, got {n}"
        )


def check_matching_precision(
    *arrays: Any,
    names: tuple[str, ...]
) -> str:
    """
    Verify all arrays share one supported floating precision.

    Args:
        *arrays: Arrays (dense or sparse) to check
        names: Parameter names for error messages

    Returns:
        The shared precision name ('fp32' or 'fp64')

    Raises:
        PrecisionError: If any dtype is unsupported or the dtypes differ
    """
    precisions = [precision_of(arr.dtype, name) for arr, name in zip(arrays, names)]
    if len(set(precisions)) > 1:
        details = ", ".join(f"{name}={arr.dtype}" for name, arr in zip(names, arrays))
        raise PrecisionError(
            f"Mixed precision is not supported: {details}. "
            f"Cast both matrices to the same floating type.",
            dtypes=tuple(str(arr.dtype) for arr in arrays),
        )
    return precisions[0]
