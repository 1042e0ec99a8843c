"""
Steps of the residual pipeline shared by every backend.

Factorization and solve differ per backend; the rank policy checks and the
final projection R = Y - X B do not.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import scipy.sparse as sp

from pyresidual.core.exceptions import SingularMatrixError


def require_full_rank(rank: int, p: int) -> None:
    """
    Raise when X is numerically rank-deficient.

    Raises:
        SingularMatrixError: If rank < p
    """
    if rank < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={rank}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name='X',
            rank=rank,
            expected_rank=p,
        )


def rank_warnings(rank: int, full_size: int, truncated: bool) -> tuple[str, ...]:
    """
    Describe rank deficiency, if any, as Result warnings.

    Args:
        rank: Numerical rank used by the factorization
        full_size: min(n, p)
        truncated: True when the factorization dropped dependent columns
            (pivoted or sparse QR), False for plain Householder QR
    """
    if rank >= full_size:
        return ()
    if truncated:
        return (
            f"Design matrix is rank-deficient (rank={rank}, min(n, p)={full_size}). "
            f"Dependent columns received zero coefficients.",
        )
    return (
        f"Design matrix is numerically rank-deficient (rank={rank}, "
        f"min(n, p)={full_size}). Unpivoted QR does not truncate; "
        f"coefficients are unreliable. Use pivoting=True.",
    )


def project_out(X: Any, Y: Any, coefficients: np.ndarray) -> tuple[Any, Any]:
    """
    Fitted values F = X B and residuals R = Y - F.

    Dense Y gives dense F and R. Sparse Y (with sparse X) keeps the whole
    computation in sparse arithmetic and returns CSC matrices.

    Returns:
        (fitted_values, residuals), both newly allocated
    """
    if sp.issparse(Y):
        fitted = sp.csc_matrix(X @ sp.csc_matrix(coefficients))
        residuals = sp.csc_matrix(Y - fitted)
        residuals.eliminate_zeros()
        return fitted, residuals

    fitted = np.asarray(X @ coefficients)
    residuals = Y - fitted
    return fitted, residuals
