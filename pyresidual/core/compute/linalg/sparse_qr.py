"""
Sparse QR through SuiteSparseQR.

X P = Q R is computed by SuiteSparseQR (the `sparseqr` bindings) with the
column permutation P chosen by the ordering policy. Q is never formed:
the factorization applies Q' to the right-hand side while it runs
(`sparseqr.rz`), so the right-hand side is supplied at construction.

Rank policy: a column whose remaining norm is at or below the pivot
tolerance is "dead". SuiteSparseQR moves dead columns to the end of P and
they receive a zero coefficient (basic solution).
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp
from scipy.sparse.linalg import spsolve_triangular
import sparseqr

from pyresidual.core.compute.precision import sparse_rank_tolerance
from pyresidual.core.compute.linalg.ordering import Ordering, spqr_ordering


class SparseQR:
    """
    Column-ordered sparse QR of a double precision CSC matrix.

    Transient: built from X and its right-hand side by a backend, used for
    one solve, discarded. Satisfies the Factorization protocol.

    Attributes exposed as properties:
        rank: Number of live columns
        permutation: Column order used, perm[j] is the j-th factored column
        dead_columns: Original indices of columns treated as dependent
        tolerance: Pivot threshold used
        nnz_u: Non-zeros in the triangular factor (fill diagnostic)
    """

    def __init__(
        self,
        X: sp.csc_matrix,
        rhs: NDArray[np.floating[Any]] | None = None,
        *,
        ordering: Ordering = 'fill_reducing',
        tolerance: float | None = None,
    ):
        n, p = X.shape
        self._X = X
        self._shape = (n, p)
        self._ordering = ordering
        self._code = spqr_ordering(ordering)

        if tolerance is None:
            column_norms = np.sqrt(np.asarray(X.multiply(X).sum(axis=0)).ravel())
            tolerance = sparse_rank_tolerance(column_norms, (n, p))
        self._tolerance = float(tolerance)

        if rhs is None:
            rhs = np.zeros((n, 0), dtype=np.float64)
        self._rhs = rhs
        self._qt_rhs = self._factorize(rhs)

    def _factorize(self, Y: NDArray[np.floating[Any]]) -> NDArray[np.float64]:
        """Factor X, store R and P, and return the leading rows of Q'Y."""
        n, p = self._shape
        k = Y.shape[1]

        if p == 0 or n == 0:
            self._R = sp.csr_matrix((0, 0))
            self._nnz = 0
            self._perm = np.arange(p, dtype=np.intp)
            self._rank = 0
            return np.zeros((0, k), dtype=np.float64)

        B = np.asarray(Y, dtype=np.float64)
        if k == 0:
            B = np.zeros((n, 1), dtype=np.float64)

        # sparseqr reads a single-row right-hand side as a column vector
        if n == 1 and B.shape[1] > 1:
            parts = [self._rz(B[:, [j]]) for j in range(B.shape[1])]
            Z = np.hstack([part[0] for part in parts])
            _, R, E, rank = parts[0]
        else:
            Z, R, E, rank = self._rz(B)

        self._rank = int(rank)
        self._nnz = int(R.nnz)
        if E is None:
            self._perm = np.arange(p, dtype=np.intp)
        else:
            self._perm = np.asarray(E, dtype=np.intp).ravel()
        self._R = sp.csr_matrix(R)[:self._rank, :self._rank]
        return np.asarray(Z)[:self._rank, :k]

    def _rz(self, B: NDArray[np.float64]) -> tuple[Any, Any, Any, int]:
        return sparseqr.rz(
            self._X, B, tolerance=self._tolerance, ordering=self._code,
        )

    # === Diagnostics ===

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def ordering(self) -> str:
        return self._ordering

    @property
    def permutation(self) -> NDArray[np.intp]:
        return self._perm.copy()

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def dead_columns(self) -> NDArray[np.intp]:
        """Original column indices that received a zero coefficient."""
        return np.sort(self._perm[self._rank:])

    @property
    def full_size(self) -> int:
        """min(n, p): the rank of a non-degenerate X."""
        return min(self._shape)

    @property
    def nnz_u(self) -> int:
        return self._nnz

    @property
    def U(self) -> sp.csr_matrix:
        """Triangular factor restricted to the live columns (rank x rank)."""
        return self._R

    # === Solve ===

    def solve(self, Y: NDArray[np.floating[Any]]) -> NDArray[np.float64]:
        """
        Basic least-squares solution for dense right-hand sides Y (n x k).

        Q'Y is reused when Y is the right-hand side given at construction;
        any other Y is factored again.

        Returns:
            Coefficients (p x k) in the original column order of X
        """
        qt_y = self._qt_rhs if Y is self._rhs else self._factorize(Y)

        p = self._shape[1]
        k = Y.shape[1]
        B = np.zeros((p, k), dtype=np.float64)

        if self._rank > 0 and k > 0:
            head = spsolve_triangular(self._R, qt_y, lower=False)
            B[self._perm[:self._rank]] = np.asarray(head).reshape(self._rank, k)
        return B
