"""
GPU backend for least-squares residuals using PyTorch.

Same Householder QR pipeline as the dense CPU backend, run on CUDA
(Linux/Windows) or MPS (macOS Apple Silicon). Arithmetic runs in the
precision of the inputs; there is no silent promotion or demotion.
Sparse designs are CPU-only.
"""

from typing import Any
import numpy as np

from pyresidual.core.result import Result
from pyresidual.core.exceptions import ValidationError, PrecisionError
from pyresidual.core.compute.timing import Timer
from pyresidual.core.compute.linalg.qr import qr_gpu, qr_solve_gpu
from pyresidual.kernel.design import Design
from pyresidual.kernel.solution import ResidualParams
from pyresidual.kernel.backends._common import rank_warnings, require_full_rank


class GPUQRBackend:
    """
    GPU backend using unpivoted Householder QR (torch.linalg.qr).

    Supports CUDA and MPS. MPS has no float64, so double precision
    designs are refused there rather than demoted.
    """

    def __init__(
        self,
        device: str = 'cuda',
        *,
        tolerance: float | None = None,
        check_rank: bool = False,
    ):
        """
        Initialize GPU backend.

        Args:
            device: GPU device type ('cuda', 'cuda:0', 'mps')
            tolerance: Rank threshold for the diagnostics, None for default
            check_rank: Raise SingularMatrixError on rank-deficient X
        """
        import torch

        if device.startswith('cuda'):
            if not torch.cuda.is_available():
                raise RuntimeError(
                    "CUDA not available. Install PyTorch with CUDA support, "
                    "or use backend='cpu'."
                )
            self.device = torch.device(device)
            self.device_name = torch.cuda.get_device_properties(self.device).name

        elif device == 'mps':
            if not (hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()):
                raise RuntimeError(
                    "MPS not available. Requires macOS with Apple Silicon "
                    "and PyTorch with MPS support."
                )
            self.device = torch.device('mps')
            self.device_name = 'Apple Silicon GPU (MPS)'

        else:
            raise ValueError(
                f"Unknown GPU device: {device!r}. Use 'cuda' or 'mps'."
            )

        self.tolerance = tolerance
        self.check_rank = check_rank

    @property
    def name(self) -> str:
        return 'gpu_qr'

    def solve(self, design: Design) -> Result[ResidualParams]:
        """
        Compute least-squares residuals on the GPU.

        Args:
            design: Validated dense residual design

        Returns:
            Result[ResidualParams] with NumPy arrays in the input precision

        Raises:
            ValidationError: If the design is sparse
            PrecisionError: If a float64 design is sent to MPS
            SingularMatrixError: If check_rank is set and X is
                rank-deficient, or if the triangle is exactly singular
        """
        import torch

        if design.storage == 'sparse':
            raise ValidationError(
                "Sparse designs are not supported on GPU. Use backend='cpu'."
            )
        if design.precision == 'fp64' and self.device.type == 'mps':
            raise PrecisionError(
                "MPS does not support float64. Cast inputs to float32 "
                "or use backend='cpu' for double precision.",
                dtypes=(str(design.dtype),),
            )

        dtype = torch.float64 if design.precision == 'fp64' else torch.float32
        timer = Timer(sync_device=self.device.type)
        timer.start()

        # Copies: torch.from_numpy needs writeable, contiguous memory
        with timer.section('data_transfer_to_gpu'):
            X = torch.from_numpy(np.ascontiguousarray(design.X).copy()).to(
                device=self.device, dtype=dtype
            )
            Y = torch.from_numpy(np.ascontiguousarray(design.Y).copy()).to(
                device=self.device, dtype=dtype
            )

        with timer.section('factorization'):
            qr_result = qr_gpu(X, tolerance=self.tolerance)

        if self.check_rank:
            require_full_rank(qr_result.rank, design.p)

        with timer.section('solve'):
            coef_gpu = qr_solve_gpu(qr_result, Y)

        with timer.section('residuals'):
            fitted_gpu = X @ coef_gpu
            residuals_gpu = Y - fitted_gpu

        with timer.section('data_transfer_to_cpu'):
            coefficients = coef_gpu.cpu().numpy()
            fitted_values = fitted_gpu.cpu().numpy()
            residuals = residuals_gpu.cpu().numpy()

        timer.stop()

        params = ResidualParams(
            residuals=residuals,
            fitted_values=fitted_values,
            coefficients=coefficients,
            rank=qr_result.rank,
        )

        info: dict[str, Any] = {
            'method': 'householder_qr',
            'storage': design.storage,
            'precision': design.precision,
            'rank': qr_result.rank,
            'tolerance': qr_result.tolerance,
            'device': str(self.device),
            'device_name': self.device_name,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=rank_warnings(
                qr_result.rank, min(design.n, design.p), truncated=False
            ),
        )
