"""
Generic result container for PyResidual computations.

The Result class is the envelope every backend returns. It keeps the
numeric payload apart from metadata (method, factorization diagnostics),
timing and non-fatal warnings.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (rank, ordering, fill-in)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for residual computations.

    Type Parameters:
        P: The parameter payload type

    Attributes:
        params: Payload (residuals, fitted values, coefficients, ...)
        info: Structured metadata (method, storage, rank, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=ResidualParams(...),
        ...     info={'method': 'householder_qr', 'rank': 5},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_qr'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
