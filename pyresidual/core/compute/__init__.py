"""
Shared compute infrastructure for PyResidual.

This module provides hardware detection, timing utilities, precision
handling and the linear algebra kernels used by the residual backends.

IMPORTANT: This is NOT where backends live. Those go in
kernel/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    device: Hardware detection and device selection
    timing: Execution timing utilities
    precision: Supported precisions and rank tolerances
    tolerances: Tolerance tiers for numerical comparison
    linalg: Linear algebra kernels (dense QR, sparse QR, orderings)
"""

from pyresidual.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from pyresidual.core.compute.timing import Timer

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Timing
    "Timer",
]
