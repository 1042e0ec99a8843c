"""
Numerical precision constants and utilities.

Provides machine epsilon, the supported precision names and the default
rank tolerances used by the QR factorizations.
"""

from typing import Any, Literal

import numpy as np

from pyresidual.core.exceptions import PrecisionError


Precision = Literal['fp32', 'fp64']

# Machine epsilon for float64
EPSILON_64: float = np.finfo(np.float64).eps  # ~2.22e-16

# Machine epsilon for float32
EPSILON_32: float = np.finfo(np.float32).eps  # ~1.19e-7


def machine_epsilon(dtype: np.dtype | type = np.float64) -> float:
    """
    Get machine epsilon for a given dtype.

    Args:
        dtype: NumPy dtype or type

    Returns:
        Machine epsilon for the dtype
    """
    return float(np.finfo(dtype).eps)


def precision_of(dtype: Any, name: str = 'array') -> Precision:
    """
    Map a floating dtype onto its precision name.

    Args:
        dtype: NumPy dtype (or anything np.dtype() accepts)
        name: Parameter name for error messages

    Returns:
        'fp32' or 'fp64'

    Raises:
        PrecisionError: For float16, long double and every non-float dtype
    """
    dtype = np.dtype(dtype)
    if dtype == np.float64:
        return 'fp64'
    if dtype == np.float32:
        return 'fp32'
    raise PrecisionError(
        f"{name}: unsupported dtype {dtype}, expected float32 or float64",
        dtypes=(str(dtype),),
    )


def dense_rank_tolerance(
    diag: np.ndarray,
    shape: tuple[int, int],
    dtype: Any,
) -> float:
    """
    Default threshold below which a diagonal entry of R counts as zero.

    max(n, p) * eps * max|R_ii|, the usual LAPACK-style cutoff.
    """
    if diag.size == 0:
        return 0.0
    return max(shape) * machine_epsilon(dtype) * float(np.max(np.abs(diag)))


def sparse_rank_tolerance(
    column_norms: np.ndarray,
    shape: tuple[int, int],
) -> float:
    """
    Default pivot threshold for sparse QR.

    20 * (n + p) * max_j ||X[:, j]|| * eps, the convention shared by the
    common sparse QR libraries.
    """
    if column_norms.size == 0:
        return 0.0
    n, p = shape
    return 20.0 * (n + p) * float(np.max(column_norms)) * EPSILON_64
