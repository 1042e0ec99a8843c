"""
Residual backends.

Available backends:
    CPUQRBackend: Dense Householder QR (float32/float64) and sparse QR (float64)
    GPUQRBackend: Dense Householder QR on CUDA/MPS via PyTorch (imported lazily)
"""

from pyresidual.kernel.backends.cpu import CPUQRBackend

__all__ = [
    "CPUQRBackend",
]
