"""
Core infrastructure for geomglm.

Shared abstractions used by the regression subpackage.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, device detection, weighted cross-product inversion
"""

from geomglm.core.result import Result
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
    # Result
    "Result",
    # Exceptions
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
