"""
Solver dispatch for geometric regression.

This module provides the fit() function (public API) and backend selection.
"""

from typing import Literal
import warnings

import numpy as np
from numpy.typing import ArrayLike

from geomglm.core.compute.device import select_device
from geomglm.regression._common import DEFAULT_MAX_ITER, DEFAULT_TOL
from geomglm.regression.design import Design
from geomglm.regression.family import GeometricFamily
from geomglm.regression.solution import GeometricSolution
from geomglm.regression.backends.cpu import CPUIWLSBackend


BackendChoice = Literal['auto', 'cpu', 'gpu']


def fit(
    y: ArrayLike | Design | None,
    X: ArrayLike | None = None,
    start: ArrayLike | None = None,
    *,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
    backend: BackendChoice = 'auto',
) -> GeometricSolution:
    """
    Fit a geometric-response GLM by iterated weighted least squares.

    Model: y_i ~ Geometric on {1, 2, ...} with mean μ_i = exp(x_i'β) + 1.

    This is the primary public API. All input validation, backend
    selection and result wrapping happens here.

    Args:
        y: Response counts (n,), positive integers. May instead be a
            prebuilt Design, in which case X and start must be omitted.
        X: Design matrix (n x p). Include a column of ones for an intercept.
        start: Starting coefficients (p,). Defaults to zeros.
        tol: Convergence threshold on sum(|U|), the absolute score sum
        max_iter: Maximum IWLS iterations before ConvergenceError
        backend: Computational backend to use:
            - 'auto': GPU if a float64-capable device exists, else CPU
            - 'cpu': NumPy reference backend
            - 'gpu': PyTorch backend (CUDA or MPS)

    Returns:
        GeometricSolution with coefficients, inference, residuals,
        influence measures and summary methods

    Raises:
        MissingArgumentError: If y or X is not supplied
        InvalidTypeError: If an input is not a numeric vector/matrix
        NonFiniteInputError: If an input has missing/NaN/Inf entries
        DimensionError: If lengths of y, X, start disagree
        InvalidDomainError: If y has non-positive or non-integer values
        SingularMatrixError: If X'WX is singular during fitting
        ConvergenceError: If IWLS does not converge within max_iter

    Example:
        >>> import numpy as np
        >>> from geomglm.regression import fit
        >>>
        >>> rng = np.random.default_rng(0)
        >>> x = rng.standard_normal(200)
        >>> X = np.column_stack([np.ones(200), x])
        >>> y = rng.geometric(1.0 / (np.exp(0.5 + 0.3 * x) + 1.0))
        >>>
        >>> result = fit(y, X)
        >>> print(result.summary())
    """
    # === Input Validation ===
    # This is the boundary - validate here, trust everywhere else
    if isinstance(y, Design):
        if X is not None or start is not None:
            raise ValueError("Pass either a Design or (y, X, start), not both")
        design = y
    else:
        design = Design.from_arrays(y, X, start)

    if not (np.isfinite(tol) and tol > 0):
        raise ValueError(f"tol must be a positive finite number, got {tol}")
    if not (np.isfinite(max_iter) and max_iter >= 1):
        raise ValueError(f"max_iter must be at least 1, got {max_iter}")

    # === Select Backend & Solve ===
    backend_impl = _get_backend(backend)
    result = backend_impl.solve(
        design, GeometricFamily(), tol=tol, max_iter=max_iter
    )

    for message in result.warnings:
        warnings.warn(message, RuntimeWarning, stacklevel=2)

    # === Wrap and Return ===
    return GeometricSolution(_result=result, _design=design)


def _get_backend(choice: BackendChoice):
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValueError: If unknown backend specified
        RuntimeError: If GPU requested but unavailable
    """
    if choice == 'auto':
        device = select_device('auto')
        if device.is_gpu:
            from geomglm.regression.backends.gpu import GPUIWLSBackend
            return GPUIWLSBackend(device.device_type)
        return CPUIWLSBackend()

    elif choice == 'cpu':
        return CPUIWLSBackend()

    elif choice == 'gpu':
        device = select_device('gpu')
        from geomglm.regression.backends.gpu import GPUIWLSBackend
        return GPUIWLSBackend(device.device_type)

    else:
        raise ValueError(f"Unknown backend: {choice!r}")
