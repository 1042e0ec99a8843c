"""
Residual solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
import scipy.sparse as sp
from scipy.sparse.linalg import norm as sparse_norm

from pyresidual.core.result import Result
from pyresidual.core.compute.tolerances import select_tolerance

if TYPE_CHECKING:
    from pyresidual.kernel.design import Design


@dataclass(frozen=True)
class ResidualParams:
    """
    Parameter payload for a residual computation.

    This is the immutable data computed by backends. Matrices are 2-D
    (n x k / p x k); residuals and fitted values are csc_matrix when the
    response was sparse.
    """
    residuals: Any
    fitted_values: Any
    coefficients: NDArray[np.floating[Any]]
    rank: int


@dataclass
class ResidualSolution:
    """
    User-facing residual results.

    Wraps the backend Result and provides accessors in the shape the
    caller supplied: a 1-D response gives 1-D residuals.
    """
    _result: Result[ResidualParams]
    _design: 'Design'

    def _shaped(self, matrix: Any) -> Any:
        if self._design.response_ndim == 1:
            return matrix.reshape(-1)
        return matrix

    @property
    def residuals(self) -> Any:
        """R = Y - X B, same shape and precision as Y."""
        return self._shaped(self._result.params.residuals)

    @property
    def fitted_values(self) -> Any:
        return self._shaped(self._result.params.fitted_values)

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        """Least-squares coefficients (p x k, or p for a 1-D response)."""
        coefficients = self._result.params.coefficients
        if self._design.response_ndim == 1:
            return coefficients.reshape(-1)
        return coefficients

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def is_full_rank(self) -> bool:
        return self.rank == min(self._design.n, self._design.p)

    @property
    def precision(self) -> str:
        return self._design.precision

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def orthogonality_error(self) -> float:
        """
        max |X'R| relative to ||X||_F * ||Y||_F.

        Zero (up to rounding) when R is orthogonal to the column space of X.
        Returns 0.0 when X or Y is identically zero.
        """
        X = self._design.X
        Y = self._design.Y
        R = self._result.params.residuals
        if self._design.p == 0 or self._design.k == 0:
            return 0.0

        XtR = X.T @ R
        if sp.issparse(XtR):
            XtR = XtR.toarray()
        XtR = np.asarray(XtR, dtype=np.float64)

        x_norm = sparse_norm(X) if sp.issparse(X) else np.linalg.norm(X)
        y_norm = sparse_norm(Y) if sp.issparse(Y) else np.linalg.norm(Y)
        scale = float(x_norm) * float(y_norm)
        if scale == 0.0:
            return 0.0
        return float(np.max(np.abs(XtR))) / scale

    def is_orthogonal(self, rtol: float | None = None) -> bool:
        """
        Check X'R ≈ 0 at the tolerance tier of the computation's precision.

        Only meaningful for full column rank X.
        """
        if rtol is None:
            rtol = select_tolerance(self.precision).rtol
        return self.orthogonality_error() <= rtol

    def summary(self) -> str:
        """Generate a text report of the computation."""
        info = self.info
        lines = [
            "Least-Squares Residuals",
            "=" * 60,
            f"Observations: {self._design.n}",
            f"Predictors: {self._design.p}",
            f"Responses: {self._design.k}",
            f"Storage: {self._design.storage}"
            + (" (sparse response)" if self._design.response_sparse else ""),
            f"Precision: {self.precision}",
            f"Method: {info.get('method', 'unknown')}",
            f"Rank: {self.rank} of {min(self._design.n, self._design.p)}",
        ]
        if 'ordering' in info:
            lines.append(f"Ordering: {info['ordering']}")
        if 'nnz_u' in info:
            lines.append(f"Non-zeros in U: {info['nnz_u']}")
        if info.get('dead_columns'):
            lines.append(f"Dependent columns: {list(info['dead_columns'])}")
        lines.append(f"Orthogonality error: {self.orthogonality_error():.3e}")
        lines.append("-" * 60)
        for warning in self.warnings:
            lines.append(f"Warning: {warning}")
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ResidualSolution(n={self._design.n}, p={self._design.p}, "
            f"k={self._design.k}, storage={self._design.storage!r}, "
            f"precision={self.precision!r}, rank={self.rank})"
        )
