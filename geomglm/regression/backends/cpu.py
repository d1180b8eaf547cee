"""
CPU backend for the geometric GLM via IWLS.

Implements the fixed-point iteration with NumPy. Each step inverts the
weighted cross-product X'WX (singularity-checked through
core.compute.linalg) and solves the weighted normal equations.

Algorithm:
    β = start;  U = placeholder with sum(|U|) > tol
    while sum(|U|) > tol:
        η = Xβ
        μ = exp(η) + 1
        W = (μ - 1)² / V(μ),   V(μ) = (μ - 1) μ
        z = η + (y - μ) / (μ - 1)
        U = X'W(z - η)                  # score at the current β
        β = (X'WX)⁻¹ X'Wz
"""

import numpy as np

from geomglm.core.exceptions import ConvergenceError
from geomglm.core.result import Result
from geomglm.core.compute.linalg import invert_weighted_crossprod
from geomglm.core.compute.timing import Timer
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


class CPUIWLSBackend:
    """CPU reference backend: IWLS with an explicit (X'WX)⁻¹ each step."""

    @property
    def name(self) -> str:
        return 'cpu_iwls'

    def solve(
        self,
        design: Design,
        family: GeometricFamily | None = None,
        tol: float = DEFAULT_TOL,
        max_iter: int = DEFAULT_MAX_ITER,
    ) -> Result[GeometricParams]:
        """Run IWLS to convergence and derive the result bundle.

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
        family = family if family is not None else GeometricFamily()
        timer = Timer()
        timer.start()

        X, y = design.X, design.y
        beta = design.start.copy()
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

                eta = X @ beta
                with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
                    mu = family.linkinv(eta)
                    w = family.weights(mu)
                    z = family.working_response(y, eta, mu)

                if not (np.all(np.isfinite(w)) and np.all(np.isfinite(z))):
                    raise ConvergenceError(
                        f"IWLS iterates became non-finite at iteration {n_iter + 1}; "
                        f"the linear predictor ranges over "
                        f"[{np.min(eta):.3g}, {np.max(eta):.3g}]",
                        iterations=n_iter,
                        final_change=score_magnitude(U),
                        reason='non_finite',
                        threshold=tol,
                    )

                inv = invert_weighted_crossprod(X, w, iteration=n_iter + 1)
                XtW = (X * w[:, np.newaxis]).T
                XtWz = XtW @ z
                U = XtW @ (z - eta)
                beta = inv @ XtWz
                n_iter += 1

        with timer.section('derivations'):
            params, warnings_list = derive(
                design, beta, family, n_iter=n_iter, score=score_magnitude(U)
            )

        timer.stop()

        return Result(
            params=params,
            info={
                'method': 'iwls',
                'iterations': n_iter,
                'score': params.score,
                'tol': tol,
                'max_iter': max_iter,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
