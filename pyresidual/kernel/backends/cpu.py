"""
CPU backend for least-squares residuals.

A single QR pipeline serves every storage and precision:
    1. Factor X: dense Householder QR (LAPACK), or SuiteSparseQR on a
       column-ordered X for compressed sparse column input
    2. Solve U B = Q'Y for the coefficients B
    3. Fitted values F = X B
    4. Residuals R = Y - F

Dense arithmetic runs in the precision of the inputs (float32 or
float64); sparse arithmetic is float64.

A sparse Y is densified for step 2 only. Q'Y has no useful sparsity
(orthogonal transforms mix rows) and SuiteSparseQR applies Q' to dense
right-hand sides. Step 4 keeps Y sparse and returns CSC residuals.
"""
from typing import Any

from pyresidual.core.result import Result
from pyresidual.core.compute.timing import Timer
from pyresidual.core.compute.linalg.qr import DenseQR
from pyresidual.core.compute.linalg.sparse_qr import SparseQR
from pyresidual.core.compute.linalg.ordering import Ordering, ORDERINGS
from pyresidual.core.protocols import Factorization
from pyresidual.kernel.design import Design
from pyresidual.kernel.solution import ResidualParams
from pyresidual.kernel.backends._common import (
    project_out,
    rank_warnings,
    require_full_rank,
)


class CPUQRBackend:
    """
    CPU backend using QR decomposition.

    Implements the Backend protocol for Design -> ResidualParams.
    Holds configuration only; every solve() builds and discards its own
    factorization, so one instance can be shared across threads.
    """

    def __init__(
        self,
        *,
        ordering: Ordering = 'fill_reducing',
        pivoting: bool = False,
        tolerance: float | None = None,
        check_rank: bool = False,
    ):
        """
        Initialize CPU backend.

        Args:
            ordering: Column ordering for sparse X ('fill_reducing' or
                'natural'). Ignored for dense X.
            pivoting: Use column-pivoted QR for dense X. Sparse QR always
                applies its own rank policy.
            tolerance: Rank threshold. None selects the default of the
                factorization in use.
            check_rank: Raise SingularMatrixError on rank-deficient X.
        """
        if ordering not in ORDERINGS:
            raise ValueError(
                f"Unknown ordering: {ordering!r}. Use one of {ORDERINGS}."
            )
        if tolerance is not None and tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {tolerance}")
        self.ordering = ordering
        self.pivoting = pivoting
        self.tolerance = tolerance
        self.check_rank = check_rank

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def _factorize(self, design: Design, rhs: Any) -> Factorization:
        if design.storage == 'sparse':
            return SparseQR(
                design.X, rhs, ordering=self.ordering, tolerance=self.tolerance,
            )
        return DenseQR(design.X, pivoting=self.pivoting, tolerance=self.tolerance)

    def _describe(self, design: Design, factorization: Any) -> dict[str, Any]:
        info: dict[str, Any] = {
            'storage': design.storage,
            'precision': design.precision,
            'rank': factorization.rank,
            'tolerance': factorization.tolerance,
        }
        if isinstance(factorization, SparseQR):
            info['method'] = 'suitesparse_qr'
            info['ordering'] = factorization.ordering
            info['permutation'] = factorization.permutation.tolist()
            info['dead_columns'] = factorization.dead_columns.tolist()
            info['nnz_u'] = factorization.nnz_u
        elif factorization.pivot is not None:
            info['method'] = 'pivoted_householder_qr'
            info['pivot'] = factorization.pivot.tolist()
        else:
            info['method'] = 'householder_qr'
        return info

    def solve(self, design: Design) -> Result[ResidualParams]:
        """
        Compute least-squares residuals via QR decomposition.

        Args:
            design: Validated residual design

        Returns:
            Result containing ResidualParams

        Raises:
            SingularMatrixError: If check_rank is set and X is
                rank-deficient, or if an unpivoted dense triangle is
                exactly singular
        """
        timer = Timer()
        timer.start()

        rhs = design.dense_response()

        with timer.section('factorization'):
            factorization = self._factorize(design, rhs)

        if self.check_rank:
            require_full_rank(factorization.rank, design.p)

        with timer.section('solve'):
            coefficients = factorization.solve(rhs)

        with timer.section('residuals'):
            fitted_values, residuals = project_out(design.X, design.Y, coefficients)

        timer.stop()

        truncated = design.storage == 'sparse' or self.pivoting
        params = ResidualParams(
            residuals=residuals,
            fitted_values=fitted_values,
            coefficients=coefficients,
            rank=factorization.rank,
        )

        return Result(
            params=params,
            info=self._describe(design, factorization),
            timing=timer.result(),
            backend_name=self.name,
            warnings=rank_warnings(factorization.rank, factorization.full_size, truncated),
        )
