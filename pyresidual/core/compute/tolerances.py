"""
Tolerance tiers for numerical validation.

Defines precision expectations for the residual kernel's compute paths:
- FP64 (CPU dense, CPU sparse, GPU FP64): close to machine precision
- FP32 (CPU single precision, GPU FP32): relaxed for single-precision arithmetic

Tolerances are relative to the scale of the problem: comparisons of
residual matrices use ||X|| * ||Y||-scaled absolute tolerances.

Used by the test suite and by ResidualSolution.is_orthogonal().
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Double precision, dense or sparse QR
FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='fp64',
    description='double precision Householder QR',
)

# Double precision, ill-conditioned problems (cond > 1e4)
FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-6,
    atol=1e-8,
    name='fp64_ill_conditioned',
    description='double precision, ill-conditioned (cond > 1e4)',
)

# Single precision
FP32 = ToleranceTier(
    rtol=1e-4,
    atol=1e-5,
    name='fp32',
    description='single precision Householder QR',
)

# Single precision, ill-conditioned problems
FP32_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-2,
    atol=1e-3,
    name='fp32_ill_conditioned',
    description='single precision, ill-conditioned',
)


def select_tolerance(
    precision: str,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select the tolerance tier for a precision ('fp32' or 'fp64')."""
    if precision == 'fp32':
        if is_ill_conditioned:
            return FP32_ILL_CONDITIONED
        return FP32
    if is_ill_conditioned:
        return FP64_ILL_CONDITIONED
    return FP64
