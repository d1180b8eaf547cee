"""
GPU backend for the geometric GLM via IWLS.

Same iteration as backends/cpu.py. The O(n·p²) work of each step (Xβ,
X'WX, its inverse, X'Wz, the score) runs on the GPU through PyTorch; the
elementwise family functions run on CPU in float64, so μ, W and z match the
CPU backend exactly for a given β.

Precision:
    CUDA: float64 throughout, same tolerance as CPU
    MPS:  float32 (no float64 kernels); the score tolerance is raised to
          FP32_SCORE_FLOOR and a warning is recorded

After convergence the coefficients come back to the host and the result
bundle is derived on CPU in float64 (regression/diagnostics.py).
"""

import numpy as np

from geomglm.core.exceptions import ConvergenceError
from geomglm.core.result import Result
from geomglm.core.compute.linalg import invert_weighted_crossprod_gpu
from geomglm.core.compute.timing import Timer
from geomglm.core.compute.tolerances import FP32_SCORE_FLOOR
from geomglm.regression._common import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    initial_score,
    score_magnitude,
)
from geomglm.regression.design import Design
from geomglm.regression.diagnostics import derive
from geomglm.regression.family import GeometricFamily
from geomglm.regression.solution import GeometricParams


class GPUIWLSBackend:
    """GPU backend: IWLS with the matrix products on a CUDA/MPS device."""

    def __init__(self, device: str = 'cuda'):
        """Initialize GPU IWLS backend.

        Args:
            device: GPU device type ('cuda', 'cuda:0', 'mps')
        """
        import torch

        if device.startswith('cuda'):
            if not torch.cuda.is_available():
                raise RuntimeError(
                    "CUDA not available. Install PyTorch with CUDA support, "
                    "or use backend='cpu'."
                )
            self.device = torch.device(device)
            self.dtype = torch.float64
            self.device_name = torch.cuda.get_device_properties(self.device).name

        elif device == 'mps':
            if not (hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()):
                raise RuntimeError(
                    "MPS not available. Requires macOS with Apple Silicon "
                    "and PyTorch with MPS support."
                )
            self.device = torch.device('mps')
            self.dtype = torch.float32
            self.device_name = 'Apple Silicon GPU (MPS)'

        else:
            raise ValueError(
                f"Unknown GPU device: {device!r}. Use 'cuda' or 'mps'."
            )

    @property
    def name(self) -> str:
        import torch
        return 'gpu_iwls_fp64' if self.dtype == torch.float64 else 'gpu_iwls_fp32'

    def solve(
        self,
        design: Design,
        family: GeometricFamily | None = None,
        tol: float = DEFAULT_TOL,
        max_iter: int = DEFAULT_MAX_ITER,
    ) -> Result[GeometricParams]:
        """Run IWLS on the GPU and derive the result bundle on CPU.

        Args:
            design: Validated Design
            family: Geometric family functions (a fresh one if None)
            tol: Stop once sum(|U|) <= tol
            max_iter: Maximum IWLS iterations

        Returns:
            Result[GeometricParams]

        Raises:
            SingularMatrixError: If X'WX is singular at any iteration
            ConvergenceError: If max_iter is exhausted or the iterates
                stop being finite
        """
        import torch

        family = family if family is not None else GeometricFamily()
        timer = Timer(sync_cuda=self.device.type == 'cuda')
        timer.start()

        warnings_list: list[str] = []
        if self.dtype == torch.float32 and tol < FP32_SCORE_FLOOR:
            warnings_list.append(
                f"tol={tol:g} is below float32 resolution; using {FP32_SCORE_FLOOR:g}"
            )
            tol = FP32_SCORE_FLOOR

        y = design.y

        with timer.section('data_transfer_to_gpu'):
            X_gpu = torch.from_numpy(design.X).to(device=self.device, dtype=self.dtype)
            beta_gpu = torch.from_numpy(design.start).to(device=self.device, dtype=self.dtype)

        U = initial_score(design.p, tol)
        n_iter = 0

        with timer.section('iwls'):
            while score_magnitude(U) > tol:
                if n_iter >= max_iter:
                    raise ConvergenceError(
                        f"IWLS did not converge in {max_iter} iterations "
                        f"(sum|U|={score_magnitude(U):.3e}, tol={tol:g})",
                        iterations=n_iter,
                        final_change=score_magnitude(U),
                        reason='max_iterations',
                        threshold=tol,
                    )

                eta_gpu = X_gpu @ beta_gpu
                eta = eta_gpu.cpu().numpy().astype(np.float64)
                with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
                    mu = family.linkinv(eta)
                    w = family.weights(mu)
                    z = family.working_response(y, eta, mu)

                if not (np.all(np.isfinite(w)) and np.all(np.isfinite(z))):
                    raise ConvergenceError(
                        f"IWLS iterates became non-finite at iteration {n_iter + 1}",
                        iterations=n_iter,
                        final_change=score_magnitude(U),
                        reason='non_finite',
                        threshold=tol,
                    )

                w_gpu = torch.from_numpy(w).to(device=self.device, dtype=self.dtype)
                z_gpu = torch.from_numpy(z).to(device=self.device, dtype=self.dtype)

                inverse = invert_weighted_crossprod_gpu(
                    X_gpu, w_gpu, iteration=n_iter + 1
                )
                XtW = (X_gpu * w_gpu.unsqueeze(1)).T
                U = (XtW @ (z_gpu - eta_gpu)).cpu().numpy().astype(np.float64)
                beta_gpu = inverse @ (XtW @ z_gpu)
                n_iter += 1

        with timer.section('data_transfer_to_cpu'):
            beta = beta_gpu.cpu().numpy().astype(np.float64)

        with timer.section('derivations'):
            params, derive_warnings = derive(
                design, beta, family, n_iter=n_iter, score=score_magnitude(U)
            )
        warnings_list.extend(derive_warnings)

        timer.stop()

        return Result(
            params=params,
            info={
                'method': 'iwls_gpu',
                'iterations': n_iter,
                'score': params.score,
                'tol': tol,
                'max_iter': max_iter,
                'device': str(self.device),
                'dtype': str(self.dtype),
                'device_name': self.device_name,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
