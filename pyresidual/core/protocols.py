"""
Core protocols for PyResidual.

These define structural interfaces the kernel is written against. We use
Protocol (structural typing) rather than ABC (nominal typing) so that dense,
sparse and GPU implementations need not share a base class.

Design Principles:
    - Minimal contracts: prescribe only what the residual pipeline needs
    - Type-safe: use generics to preserve type information through pipelines
"""

from typing import Protocol, TypeVar, Any, runtime_checkable

# Type variables for generic payloads
P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class Factorization(Protocol):
    """
    A QR factorization of a design matrix, usable for one least-squares solve.

    Dense Householder QR and sparse QR both satisfy this protocol, which is
    what lets a single residual pipeline serve every storage and precision.
    Instances are transient: built from X, used once, discarded.
    """

    @property
    def rank(self) -> int:
        """Numerical rank used by the solve."""
        ...

    def solve(self, Y: Any) -> Any:
        """
        Least-squares coefficients for the right-hand side(s) Y.

        Args:
            Y: Dense (n x k) right-hand side

        Returns:
            Coefficient matrix (p x k) in the original column order of X
        """
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend takes a validated design and produces a parameter
    payload wrapped in a Result. The backend handles all hardware-
    specific computation (CPU/GPU, precision, storage).

    Backends are stateless: all configuration is passed at construction
    time. This makes them easy to test, swap and share across threads.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_qr', 'gpu_qr_fp32'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the computation.

        Args:
            design: Validated design

        Returns:
            Result envelope containing parameter payload and metadata

        Raises:
            NumericalError: If numerical issues prevent a solution
            ValidationError: If design is invalid for this backend
        """
        ...
