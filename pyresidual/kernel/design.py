"""
Residual Design.

Design holds the validated pair (X, Y) a backend consumes: the design
matrix whose column space is projected out, and the response matrix
whose residuals are wanted. All validation happens here, once, before
any computation; backends trust what they receive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal
import numpy as np
import scipy.sparse as sp

from pyresidual.core.exceptions import ValidationError, PrecisionError
from pyresidual.core.compute.precision import Precision
from pyresidual.core.validation import (
    check_array,
    check_sparse,
    check_finite,
    check_2d,
    check_consistent_length,
    check_min_samples,
    check_matching_precision,
)


Storage = Literal['dense', 'sparse']


@dataclass(frozen=True)
class Design:
    """
    Residual problem specification.

    Immutable after construction. X and Y are held as views of the
    caller's arrays where no conversion was needed; nothing downstream
    writes to them.

    Construction:
        Design.from_arrays(X, Y)                   # storage/precision inferred
        Design.from_arrays(X, Y, precision='fp32') # enforce a precision
        Design.from_arrays(X, Y, storage='sparse') # enforce a storage
    """
    _X: Any
    _Y: Any
    _n: int
    _p: int
    _k: int
    _storage: Storage
    _precision: Precision
    _response_ndim: int

    @classmethod
    def from_arrays(
        cls,
        X: Any,
        Y: Any,
        *,
        storage: Storage | None = None,
        precision: Precision | None = None,
    ) -> Design:
        """
        Build Design from a design matrix and a response matrix.

        Args:
            X: Design matrix (n x p): array-like, or any scipy.sparse matrix.
               A 1-D X is a single column.
            Y: Response (n x k): array-like, or scipy.sparse when X is sparse.
               A 1-D Y is a single column and residuals come back 1-D.
            storage: Required storage of X, or None to accept either
            precision: Required precision, or None to accept either

        Returns:
            Design ready for a backend

        Raises:
            ValidationError: Non-numeric, non-finite, or unsupported
                storage combination
            DimensionError: Wrong ndim, no rows, or row counts differ
            PrecisionError: Unsupported dtype or X/Y precision mismatch
        """
        x_sparse = sp.issparse(X)
        y_sparse = sp.issparse(Y)

        if storage is not None and storage != ('sparse' if x_sparse else 'dense'):
            raise ValidationError(
                f"X: expected {storage} storage, got "
                f"{'sparse' if x_sparse else 'dense'} ({type(X).__name__})"
            )
        if y_sparse and not x_sparse:
            raise ValidationError(
                "Y: a sparse response requires a sparse design matrix X"
            )

        if x_sparse:
            X_arr = check_sparse(X, 'X')
        else:
            X_arr = check_array(X, 'X')
            if X_arr.ndim == 1:
                X_arr = X_arr.reshape(-1, 1)
            check_2d(X_arr, 'X')

        if y_sparse:
            Y_arr = check_sparse(Y, 'Y')
            response_ndim = 2
        else:
            Y_arr = check_array(Y, 'Y')
            response_ndim = Y_arr.ndim
            if Y_arr.ndim == 1:
                Y_arr = Y_arr.reshape(-1, 1)
            check_2d(Y_arr, 'Y')

        # Precision is checked before anything that reads values
        shared = check_matching_precision(X_arr, Y_arr, names=('X', 'Y'))
        if precision is not None and shared != precision:
            raise PrecisionError(
                f"Expected {precision} inputs, got X={X_arr.dtype}, Y={Y_arr.dtype}",
                dtypes=(str(X_arr.dtype), str(Y_arr.dtype)),
            )
        if x_sparse and shared != 'fp64':
            raise PrecisionError(
                f"Sparse design matrices are double precision only, got {X_arr.dtype}",
                dtypes=(str(X_arr.dtype), str(Y_arr.dtype)),
            )

        check_consistent_length(X_arr, Y_arr, names=('X', 'Y'))
        check_min_samples(X_arr, 1, 'X')
        check_finite(X_arr, 'X')
        check_finite(Y_arr, 'Y')

        n, p = X_arr.shape
        return cls(
            _X=X_arr,
            _Y=Y_arr,
            _n=n,
            _p=p,
            _k=Y_arr.shape[1],
            _storage='sparse' if x_sparse else 'dense',
            _precision=shared,
            _response_ndim=response_ndim,
        )

    # === Properties ===

    @property
    def X(self) -> Any:
        """Design matrix (n x p): ndarray, or csc_matrix for sparse storage."""
        return self._X

    @property
    def Y(self) -> Any:
        """Response matrix (n x k): ndarray, or csc_matrix."""
        return self._Y

    @property
    def n(self) -> int:
        """Number of observations (rows)."""
        return self._n

    @property
    def p(self) -> int:
        """Number of predictors (columns of X)."""
        return self._p

    @property
    def k(self) -> int:
        """Number of response columns."""
        return self._k

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def response_sparse(self) -> bool:
        return sp.issparse(self._Y)

    @property
    def precision(self) -> Precision:
        return self._precision

    @property
    def dtype(self) -> np.dtype:
        return self._X.dtype

    @property
    def response_ndim(self) -> int:
        """1 when Y was given as a vector, else 2."""
        return self._response_ndim

    def dense_response(self) -> np.ndarray:
        """Y as a dense array (a new array when Y is sparse)."""
        if self.response_sparse:
            return self._Y.toarray()
        return self._Y
