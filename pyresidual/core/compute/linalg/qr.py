"""
Dense QR decomposition implementations.

Provides a consistent Householder QR interface across CPU (LAPACK via
SciPy) and GPU (PyTorch). SciPy is used rather than numpy.linalg on the
CPU because it dispatches to the single-precision LAPACK routines
(sgeqrf/strtrs) for float32 input instead of promoting to float64.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import linalg as sla

from pyresidual.core.exceptions import SingularMatrixError
from pyresidual.core.compute.precision import dense_rank_tolerance

if TYPE_CHECKING:
    import torch


@dataclass(frozen=True)
class QRResult:
    """
    Result of an economy QR decomposition X[:, pivot] = Q R.

    Attributes:
        Q: Orthonormal columns (n x m where m = min(n, p)). NumPy array
           for CPU results, torch tensor for GPU results.
        R: Upper triangular / trapezoidal factor (m x p)
        rank: Numerical rank determined from the R diagonal
        tolerance: Threshold used to determine the rank
        pivot: Column permutation, or None for unpivoted QR
    """
    Q: Any
    R: Any
    rank: int
    tolerance: float
    pivot: NDArray[np.intp] | None = None


def qr_cpu(
    X: NDArray[np.floating[Any]],
    *,
    pivoting: bool = False,
    tolerance: float | None = None,
) -> QRResult:
    """
    Householder QR decomposition using LAPACK (via SciPy).

    Computes X = QR (geqrf), or X P = QR with column pivoting (geqp3).
    Arithmetic runs in the dtype of X. X is not modified.

    Args:
        X: Matrix to decompose (n x p), float32 or float64
        pivoting: If True, use column-pivoted QR
        tolerance: Diagonal magnitude at or below which R_ii counts as
            zero. Defaults to max(n, p) * eps * max|R_ii|.

    Returns:
        QRResult with Q, R, numerical rank and pivot
    """
    n, p = X.shape
    if p == 0:
        return QRResult(
            Q=np.zeros((n, 0), dtype=X.dtype),
            R=np.zeros((0, 0), dtype=X.dtype),
            rank=0,
            tolerance=0.0,
            pivot=np.zeros(0, dtype=np.intp) if pivoting else None,
        )

    if pivoting:
        Q, R, pivot = sla.qr(X, mode='economic', pivoting=True, check_finite=False)
    else:
        Q, R = sla.qr(X, mode='economic', check_finite=False)
        pivot = None

    diag_R = np.abs(np.diag(R))
    if tolerance is None:
        tolerance = dense_rank_tolerance(diag_R, X.shape, X.dtype)
    rank = int(np.sum(diag_R > tolerance))

    return QRResult(Q=Q, R=R, rank=rank, tolerance=float(tolerance), pivot=pivot)


def qr_solve_cpu(
    qr_result: QRResult,
    Y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Solve least squares from a CPU QR decomposition.

    Solves min_B ||Y - XB|| column by column as
        X = QR
        B = R⁻¹ Q'Y

    Unpivoted: the leading min(n, p) triangle is used as is and trailing
    coefficients of a wide X are zero. Pivoted: the triangle is truncated
    at the numerical rank (basic solution) and the permutation undone.

    Args:
        qr_result: Decomposition of X (from qr_cpu)
        Y: Right-hand sides (n x k), same dtype as X

    Returns:
        Coefficient matrix B (p x k) in the original column order

    Raises:
        SingularMatrixError: If the triangle has an exact zero on its diagonal
    """
    Q, R = qr_result.Q, qr_result.R
    m = Q.shape[1]
    p = R.shape[1]
    k = Y.shape[1]

    r = m if qr_result.pivot is None else qr_result.rank
    B = np.zeros((p, k), dtype=R.dtype)
    if r == 0 or k == 0:
        return B

    # Q'Y first, then back substitution on the r x r triangle
    QtY = Q[:, :r].T @ Y
    try:
        head = sla.solve_triangular(R[:r, :r], QtY, lower=False, check_finite=False)
    except np.linalg.LinAlgError as e:
        raise SingularMatrixError(
            f"Triangular factor of X is exactly singular: {e}. "
            f"Use pivoting=True for rank-deficient designs.",
            matrix_name='R',
            rank=qr_result.rank,
            expected_rank=r,
        ) from e

    if qr_result.pivot is None:
        B[:r] = head
    else:
        B[qr_result.pivot[:r]] = head
    return B


class DenseQR:
    """
    Householder QR of a dense design matrix.

    Transient: built from X by a backend, used for one solve, discarded.
    Satisfies the Factorization protocol.
    """

    def __init__(
        self,
        X: NDArray[np.floating[Any]],
        *,
        pivoting: bool = False,
        tolerance: float | None = None,
    ):
        self._qr = qr_cpu(X, pivoting=pivoting, tolerance=tolerance)

    @property
    def rank(self) -> int:
        return self._qr.rank

    @property
    def tolerance(self) -> float:
        return self._qr.tolerance

    @property
    def pivot(self) -> NDArray[np.intp] | None:
        return self._qr.pivot

    @property
    def full_size(self) -> int:
        """min(n, p): the rank of a non-degenerate X."""
        return self._qr.Q.shape[1]

    def solve(self, Y: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        return qr_solve_cpu(self._qr, Y)


def qr_gpu(
    X: 'torch.Tensor',
    tolerance: float | None = None,
) -> QRResult:
    """
    Householder QR decomposition using PyTorch (GPU-accelerated).

    Args:
        X: Tensor to decompose (n x p), already on the desired device
        tolerance: Rank threshold, as for qr_cpu

    Returns:
        QRResult with Q, R as tensors on the device of X
    """
    import torch

    n, p = X.shape
    if p == 0:
        return QRResult(
            Q=X.new_zeros((n, 0)),
            R=X.new_zeros((0, 0)),
            rank=0,
            tolerance=0.0,
        )

    Q, R = torch.linalg.qr(X, mode='reduced')

    diag_R = torch.abs(torch.diagonal(R))
    if tolerance is None:
        max_diag = float(diag_R.max().item()) if diag_R.numel() > 0 else 0.0
        tolerance = max(n, p) * torch.finfo(X.dtype).eps * max_diag
    rank = int(torch.sum(diag_R > tolerance).item())

    return QRResult(Q=Q, R=R, rank=rank, tolerance=float(tolerance))


def qr_solve_gpu(
    qr_result: QRResult,
    Y: 'torch.Tensor',
) -> 'torch.Tensor':
    """
    Solve least squares from a GPU QR decomposition.

    Same contract as qr_solve_cpu for the unpivoted case. The result
    stays on the device.

    Raises:
        SingularMatrixError: If the triangle has an exact zero on its diagonal
    """
    import torch

    Q, R = qr_result.Q, qr_result.R
    m = Q.shape[1]
    p = R.shape[1]
    k = Y.shape[1]

    B = Y.new_zeros((p, k))
    if m == 0 or k == 0:
        return B

    # torch does not report singular triangles, it returns inf/nan
    triangle = R[:m, :m]
    if bool((torch.diagonal(triangle) == 0).any().item()):
        raise SingularMatrixError(
            "Triangular factor of X is exactly singular. "
            "Use backend='cpu' with pivoting=True for rank-deficient designs.",
            matrix_name='R',
            rank=qr_result.rank,
            expected_rank=m,
        )

    QtY = Q.T @ Y
    B[:m] = torch.linalg.solve_triangular(triangle, QtY, upper=True)
    return B
