"""
geomglm: geometric-response generalized linear models.

Fits y ∈ {1, 2, ...} with mean exp(Xβ) + 1 by iterated weighted least
squares and reports Wald inference, deviance, residuals and influence
diagnostics. Optional GPU acceleration through PyTorch.

Submodules:
    regression: Estimator, solution wrapper and diagnostic plots
    core: Exceptions, validation, result envelope, compute utilities
"""

__version__ = "0.1.0"

from geomglm import regression
from geomglm.regression import fit, Design, GeometricSolution
from geomglm.core.exceptions import (
    GeomGLMError,
    ValidationError,
    MissingArgumentError,
    InvalidTypeError,
    NonFiniteInputError,
    DimensionError,
    InvalidDomainError,
    NumericalError,
    SingularMatrixError,
    ConvergenceError,
)

__all__ = [
    "__version__",
    "regression",
    "fit",
    "Design",
    "GeometricSolution",
    "GeomGLMError",
    "ValidationError",
    "MissingArgumentError",
    "InvalidTypeError",
    "NonFiniteInputError",
    "DimensionError",
    "InvalidDomainError",
    "NumericalError",
    "SingularMatrixError",
    "ConvergenceError",
]
