"""
PyResidual: QR-based least-squares residuals for Python.

Computes R = Y - X (X⁺ Y) through QR decompositions rather than the
normal equations, for dense and sparse design matrices in single or
double precision, with optional GPU acceleration.

Submodules:
    kernel: Residual kernel (designs, solutions, solvers, backends)
    core: Exceptions, validation, result envelope, compute kernels
"""

__version__ = "0.1.0"

from pyresidual.kernel.solvers import (
    residualize,
    residuals,
    dense_residual,
    sparse_residual,
    dense_residual_fp32,
)
from pyresidual.kernel.solution import ResidualSolution

__all__ = [
    "__version__",
    "residualize",
    "residuals",
    "dense_residual",
    "sparse_residual",
    "dense_residual_fp32",
    "ResidualSolution",
]
