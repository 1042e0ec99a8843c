"""
Solver dispatch for residual computation.

This module provides the public entry points and backend selection:

    residualize(X, Y, ...)     -> ResidualSolution (full result)
    residuals(X, Y, ...)       -> residual matrix only
    dense_residual(X, Y)       -> dense X, double precision
    sparse_residual(X, Y, ...) -> sparse X, double precision
    dense_residual_fp32(X, Y)  -> dense X, single precision

All of them run the same QR pipeline; they differ only in which
storage and precision they accept.
"""

import warnings
from typing import Any, Literal

from pyresidual.core.compute.device import select_device
from pyresidual.core.protocols import Backend
from pyresidual.core.compute.linalg.ordering import Ordering, ORDERINGS
from pyresidual.kernel.design import Design
from pyresidual.kernel.solution import ResidualParams, ResidualSolution
from pyresidual.kernel.backends.cpu import CPUQRBackend


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu', 'gpu']


def residualize(
    X: Any,
    Y: Any,
    *,
    ordering: Ordering = 'fill_reducing',
    pivoting: bool = False,
    tolerance: float | None = None,
    check_rank: bool = False,
    backend: BackendChoice = 'cpu',
) -> ResidualSolution:
    """
    Compute least-squares residuals R = Y - X B with B from a QR of X.

    Solves min_B ||Y - XB|| column by column through a QR decomposition
    of X, never through the normal equations, so the condition number of
    X is not squared. All validation happens before any computation.

    Args:
        X: Design matrix (n x p). Dense array-like (float32 or float64;
            integers are promoted to float64) or any scipy.sparse matrix
            (float64). p may be 0.
        Y: Response (n x k), same precision as X. Dense, or scipy.sparse
            when X is sparse. A 1-D Y gives 1-D residuals.
        ordering: Column ordering for sparse X:
            - 'fill_reducing': COLAMD ordering of X (less fill)
            - 'natural': columns in their given order
        pivoting: Use column-pivoted QR for dense X, truncating at the
            numerical rank (basic solution for rank-deficient X)
        tolerance: Rank threshold. None uses the factorization default:
            max(n, p) * eps * max|R_ii| dense,
            20 * (n + p) * eps * max column norm sparse.
        check_rank: Raise SingularMatrixError on rank-deficient X
        backend: Computational backend to use:
            - 'cpu': SciPy/LAPACK (dense) or sparse QR
            - 'gpu': PyTorch on CUDA/MPS (dense only)
            - 'auto': GPU for dense designs when available, else CPU

    Returns:
        ResidualSolution with residuals, fitted values, coefficients,
        rank and diagnostics

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and Y have different row counts
        PrecisionError: If X and Y differ in precision, or a dtype is
            unsupported
        SingularMatrixError: If check_rank is set and X is rank-deficient

    Example:
        >>> import numpy as np
        >>> from pyresidual import residualize
        >>>
        >>> X = np.ones((3, 1))
        >>> Y = np.array([[1.0], [2.0], [3.0]])
        >>> result = residualize(X, Y)
        >>> result.residuals.ravel().round(12)
        array([-1.,  0.,  1.])
    """
    # === Construct Design ===
    # This is the boundary - validate here, trust everywhere else
    design = Design.from_arrays(X, Y)

    return _run(
        design,
        ordering=ordering,
        pivoting=pivoting,
        tolerance=tolerance,
        check_rank=check_rank,
        backend=backend,
    )


def residuals(X: Any, Y: Any, **options: Any) -> Any:
    """
    Least-squares residual matrix of Y against X.

    Shorthand for residualize(X, Y, **options).residuals.
    """
    return residualize(X, Y, **options).residuals


def dense_residual(X: Any, Y: Any) -> Any:
    """
    Residuals for a dense, double precision design (Householder QR).

    Raises:
        ValidationError: If X is sparse
        PrecisionError: If X or Y is not float64
    """
    design = Design.from_arrays(X, Y, storage='dense', precision='fp64')
    return _run(design).residuals


def sparse_residual(X: Any, Y: Any, *, ordering: Ordering = 'fill_reducing') -> Any:
    """
    Residuals for a sparse, double precision design (sparse QR).

    Y may be dense (dense residuals) or sparse (CSC residuals).

    Raises:
        ValidationError: If X is dense
        PrecisionError: If X or Y is not float64
    """
    design = Design.from_arrays(X, Y, storage='sparse', precision='fp64')
    return _run(design, ordering=ordering).residuals


def dense_residual_fp32(X: Any, Y: Any) -> Any:
    """
    Residuals for a dense, single precision design.

    Factorization and solve run in float32 throughout.

    Raises:
        ValidationError: If X is sparse
        PrecisionError: If X or Y is not float32
    """
    design = Design.from_arrays(X, Y, storage='dense', precision='fp32')
    return _run(design).residuals


def _run(
    design: Design,
    *,
    ordering: Ordering = 'fill_reducing',
    pivoting: bool = False,
    tolerance: float | None = None,
    check_rank: bool = False,
    backend: BackendChoice = 'cpu',
) -> ResidualSolution:
    """Select a backend, solve, surface warnings and wrap the result."""
    if ordering not in ORDERINGS:
        raise ValueError(
            f"Unknown ordering: {ordering!r}. Use one of {ORDERINGS}."
        )

    # === Select Backend ===
    backend_impl = _get_backend(
        backend,
        design,
        ordering=ordering,
        pivoting=pivoting,
        tolerance=tolerance,
        check_rank=check_rank,
    )

    # === Solve ===
    result = backend_impl.solve(design)

    for message in result.warnings:
        warnings.warn(message, RuntimeWarning, stacklevel=3)

    # === Wrap and Return ===
    return ResidualSolution(_result=result, _design=design)


def _get_backend(
    choice: BackendChoice,
    design: Design,
    *,
    ordering: Ordering,
    pivoting: bool,
    tolerance: float | None,
    check_rank: bool,
) -> Backend[Design, ResidualParams]:
    """
    Select and instantiate the appropriate backend.

    Args:
        choice: User's backend preference
        design: The residual design (storage and precision decide
            GPU eligibility)

    Returns:
        Backend instance ready to solve

    Raises:
        ValueError: If unknown backend specified, or pivoting/sparse
            options are requested on GPU
        RuntimeError: If GPU requested but unavailable
    """
    if choice == 'cpu':
        return CPUQRBackend(
            ordering=ordering,
            pivoting=pivoting,
            tolerance=tolerance,
            check_rank=check_rank,
        )

    elif choice == 'gpu':
        if pivoting:
            raise ValueError(
                "pivoting=True is only available with backend='cpu'"
            )
        device = select_device('gpu')
        from pyresidual.kernel.backends.gpu import GPUQRBackend
        return GPUQRBackend(
            device=device.device_type,
            tolerance=tolerance,
            check_rank=check_rank,
        )

    elif choice == 'auto':
        # GPU only where it computes the same thing: dense, unpivoted
        if design.storage == 'dense' and not pivoting:
            device = select_device('auto', needs_fp64=design.precision == 'fp64')
            if device.is_gpu:
                from pyresidual.kernel.backends.gpu import GPUQRBackend
                return GPUQRBackend(
                    device=device.device_type,
                    tolerance=tolerance,
                    check_rank=check_rank,
                )
        return CPUQRBackend(
            ordering=ordering,
            pivoting=pivoting,
            tolerance=tolerance,
            check_rank=check_rank,
        )

    else:
        raise ValueError(f"Unknown backend: {choice!r}")
