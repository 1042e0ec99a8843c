"""
Least-squares residuals.

Computes R = Y - X B, B = argmin ||Y - XB||, through a QR decomposition of
X for dense (float32/float64) and sparse (float64) design matrices.

Public API:
    residualize(X, Y, ...) -> ResidualSolution
    residuals(X, Y, ...)   -> residual matrix
    dense_residual, sparse_residual, dense_residual_fp32
        fixed storage/precision entry points

Example:
    >>> from pyresidual import residuals
    >>> R = residuals(X, Y)
    >>> R_sparse = residuals(X_csc, Y, ordering='natural')
"""

from pyresidual.kernel.design import Design
from pyresidual.kernel.solution import ResidualSolution, ResidualParams
from pyresidual.kernel.solvers import (
    residualize,
    residuals,
    dense_residual,
    sparse_residual,
    dense_residual_fp32,
)

__all__ = [
    "residualize",
    "residuals",
    "dense_residual",
    "sparse_residual",
    "dense_residual_fp32",
    "Design",
    "ResidualSolution",
    "ResidualParams",
]
