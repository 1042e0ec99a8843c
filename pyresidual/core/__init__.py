"""
Core infrastructure for PyResidual.

This module provides the shared abstractions used by the residual kernel.

Key components:
    protocols: Factorization, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Hardware detection, timing, precision, linear algebra kernels
"""

from pyresidual.core.protocols import Factorization, Backend
from pyresidual.core.result import Result
from pyresidual.core.exceptions import (
    PyResidualError,
    ValidationError,
    DimensionError,
    PrecisionError,
    NumericalError,
    SingularMatrixError,
)

__all__ = [
    # Protocols
    "Factorization",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyResidualError",
    "ValidationError",
    "DimensionError",
    "PrecisionError",
    "NumericalError",
    "SingularMatrixError",
]
