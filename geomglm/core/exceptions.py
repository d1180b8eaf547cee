"""
Exception hierarchy for geomglm.

All exceptions inherit from GeomGLMError so callers can catch any
library-specific failure in one place. Validation failures share the
ValidationError base; each distinct way an argument can be wrong has its
own subclass so callers (and tests) can tell them apart.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages name the offending parameter and show actual values
    - Never catch and re-raise with less information
"""


class GeomGLMError(Exception):
    """Base exception for all geomglm errors."""
    pass


class ValidationError(GeomGLMError):
    """
    Input validation failed.

    Base class for every invalid-argument condition. Raised before any
    numerical work starts.
    """
    pass


class MissingArgumentError(ValidationError):
    """A required input (y or X) was not supplied."""
    pass


class InvalidTypeError(ValidationError):
    """
    Input is not a numeric vector/matrix.

    Raised for non-numeric dtypes (strings, booleans, datetimes), mixed-type
    containers, and arrays of the wrong dimensionality.
    """
    pass


class NonFiniteInputError(ValidationError):
    """
    Input contains missing, NaN, or infinite values.

    Attributes:
        n_nan: Number of NaN (or missing) entries
        n_inf: Number of +/-Inf entries
    """

    def __init__(self, message: str, n_nan: int = 0, n_inf: int = 0):
        super().__init__(message)
        self.n_nan = n_nan
        self.n_inf = n_inf


class DimensionError(ValidationError):
    """
    Array lengths are inconsistent.

    Raised when len(y) != rows(X), cols(X) != len(start), or when there are
    fewer observations than coefficients.
    """
    pass


class InvalidDomainError(ValidationError):
    """
    Response values fall outside the geometric support {1, 2, 3, ...}.

    Attributes:
        bad_indices: Positions of the offending observations
    """

    def __init__(self, message: str, bad_indices: list[int] | None = None):
        super().__init__(message)
        self.bad_indices = bad_indices if bad_indices is not None else []


class NumericalError(GeomGLMError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during fitting.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or numerically rank-deficient.

    Raised when the weighted cross-product X'WX cannot be inverted. This is
    fatal: the fit is aborted and no partial result is returned.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank, if computed
        expected_rank: Expected rank (number of coefficients)
        iteration: IWLS iteration at which the failure occurred, if any
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
        iteration: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank
        self.iteration = iteration


class ConvergenceError(GeomGLMError):
    """
    Iterative algorithm failed to converge.

    Raised when IWLS does not bring the score below the tolerance within the
    maximum number of iterations.

    Attributes:
        iterations: Number of iterations completed
        final_change: Final score magnitude sum(|U|)
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
