"""
Execution timing utilities.

Provides accurate timing for both CPU and GPU work. GPU kernels run
asynchronously, so the timer synchronizes the device before each reading
when asked to.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating section timer with optional device synchronization.

    Usage:
        timer = Timer()
        timer.start()

        with timer.section('factorization'):
            factorization = DenseQR(X)

        with timer.section('solve'):
            coefficients = factorization.solve(Y)

        timer.stop()
        timer.result()
        # {'total_seconds': 0.05, 'factorization': 0.03, 'solve': 0.02}
    """

    def __init__(self, sync_device: str | None = None):
        """
        Initialize timer.

        Args:
            sync_device: Device type to synchronize before each reading
                ('cuda' or 'mps'), or None for CPU-only work.
        """
        self._sync_device = sync_device
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def _sync(self) -> None:
        """Wait for queued GPU work, if a device was given."""
        if self._sync_device is None:
            return
        import torch
        if self._sync_device.startswith('cuda') and torch.cuda.is_available():
            torch.cuda.synchronize()
        elif self._sync_device == 'mps' and hasattr(torch, 'mps'):
            torch.mps.synchronize()

    def start(self) -> None:
        """Start the overall timer."""
        self._sync()
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        """Stop the overall timer."""
        self._sync()
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """
        Time a named section.

        Repeated sections with the same name accumulate.

        Args:
            name: Section identifier (used as key in result dict)
        """
        self._sync()
        start = time.perf_counter()
        try:
            yield
        finally:
            self._sync()
            elapsed = time.perf_counter() - start
            self._sections[name] = self._sections.get(name, 0.0) + elapsed

    def result(self) -> dict[str, float]:
        """
        Get timing results.

        Returns:
            Dictionary with 'total_seconds' and all section timings

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")

        result = {'total_seconds': self._total}
        result.update(self._sections)
        return result
