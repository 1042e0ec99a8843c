"""
Exception hierarchy for PyResidual.

All exceptions inherit from PyResidualError to allow catching any
library-specific error.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyResidualError(Exception):
    """Base exception for all PyResidual errors."""
    pass


class ValidationError(PyResidualError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when the design and response matrices disagree on the row count.
    """
    pass


class PrecisionError(ValidationError):
    """
    Element precision is unsupported or inconsistent.

    Raised before any computation when an input has a dtype the kernel
    does not support, or when X and Y are of different precision. The
    kernel never runs mixed-precision arithmetic.

    Attributes:
        dtypes: The offending dtype names, in argument order
    """

    def __init__(self, message: str, dtypes: tuple[str, ...] = ()):
        super().__init__(message)
        self.dtypes = dtypes


class NumericalError(PyResidualError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when the triangular factor cannot be solved (exact zero on the
    diagonal), or when a rank check was requested and X is
    numerically rank-deficient.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank
