"""
Execution timing for estimator backends.

Backends record the wall-clock cost of each fitting phase (the IWLS loop,
the post-convergence derivations, host/device transfers) and expose it as
Result.timing.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating phase timer.

    Usage:
        timer = Timer()
        timer.start()

        with timer.section('iwls'):
            beta = run_loop(...)

        with timer.section('derivations'):
            stats = derive(...)

        timer.stop()
        timer.result()
        # {'total_seconds': 0.004, 'iwls': 0.003, 'derivations': 0.001}

    With sync_cuda=True the timer waits for queued CUDA kernels before every
    reading, otherwise GPU phases would appear to cost nothing.
    """

    def __init__(self, sync_cuda: bool = False):
        self._sync_cuda = sync_cuda
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def _sync(self) -> None:
        if not self._sync_cuda:
            return
        import torch
        if torch.cuda.is_available():
            torch.cuda.synchronize()

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
        Time a named phase.

        Re-entering a section with the same name adds to its total.
        """
        self._sync()
        begin = time.perf_counter()
        try:
            yield
        finally:
            self._sync()
            self._sections[name] = (
                self._sections.get(name, 0.0) + time.perf_counter() - begin
            )

    def result(self) -> dict[str, float]:
        """
        Get timing results.

        Returns:
            Dictionary with 'total_seconds' and every section

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}
