"""
Shared IWLS settings and helpers used by both estimator backends.
"""

import numpy as np
from numpy.typing import NDArray

# Stop once sum(|U|) falls to or below this value.
DEFAULT_TOL = 1e-6

# Iterations allowed before ConvergenceError.
DEFAULT_MAX_ITER = 100


def initial_score(p: int, tol: float) -> NDArray[np.float64]:
    """Placeholder score whose magnitude exceeds tol, so the loop body runs."""
    return np.full(p, tol + 1.0, dtype=np.float64)


def score_magnitude(U: NDArray) -> float:
    """Convergence measure: sum of absolute score components."""
    return float(np.sum(np.abs(U)))
