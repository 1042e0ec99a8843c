"""
Linear algebra kernels for PyResidual.

All functions follow these conventions:
    - CPU dense functions use SciPy (LAPACK under the hood)
    - GPU functions use PyTorch and leave results on the device
    - Sparse QR runs SuiteSparseQR on scipy.sparse CSC matrices in float64
    - Errors are raised immediately with clear messages

Submodules:
    qr: Dense Householder QR (CPU and GPU)
    sparse_qr: Sparse QR (SuiteSparseQR)
    ordering: Column ordering policies for sparse QR
"""

from pyresidual.core.compute.linalg.qr import (
    QRResult,
    DenseQR,
    qr_cpu,
    qr_gpu,
    qr_solve_cpu,
    qr_solve_gpu,
)
from pyresidual.core.compute.linalg.sparse_qr import SparseQR
from pyresidual.core.compute.linalg.ordering import (
    Ordering,
    ORDERINGS,
    spqr_ordering,
)

__all__ = [
    # Dense QR
    "QRResult",
    "DenseQR",
    "qr_cpu",
    "qr_gpu",
    "qr_solve_cpu",
    "qr_solve_gpu",
    # Sparse QR
    "SparseQR",
    # Orderings
    "Ordering",
    "ORDERINGS",
    "spqr_ordering",
]
