"""
Regression Design.

Design holds the validated response y, design matrix X and IWLS start
vector. It is the validation boundary: once a Design exists, backends trust
its contents without re-checking.

Validation runs in a fixed order and stops at the first failure:
    1. y and X supplied                     (MissingArgumentError)
    2. y, start are vectors; X is a matrix  (InvalidTypeError)
    3. no missing / NaN / Inf               (NonFiniteInputError)
    4. lengths agree, n >= p                (DimensionError)
    5. y holds positive integers            (InvalidDomainError)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from geomglm.core.exceptions import DimensionError
from geomglm.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_columns_match,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_positive_integers,
    check_required,
)


@dataclass(frozen=True)
class Design:
    """
    Geometric regression inputs.

    Immutable after construction.

    Construction:
        Design.from_arrays(y, X)             # start = zeros(p)
        Design.from_arrays(y, X, start)      # explicit start vector
    """
    _y: NDArray[np.floating[Any]]
    _X: NDArray[np.floating[Any]]
    _start: NDArray[np.floating[Any]]
    _n: int
    _p: int

    @classmethod
    def from_arrays(
        cls,
        y: ArrayLike | None,
        X: ArrayLike | None,
        start: ArrayLike | None = None,
    ) -> Design:
        """
        Build and validate a Design.

        Args:
            y: Response counts (n,) or (n, 1)
            X: Design matrix (n, p); a 1-D X is taken as a single column
            start: Starting coefficients (p,); defaults to zeros

        Returns:
            Design ready for fitting

        Raises:
            MissingArgumentError, InvalidTypeError, NonFiniteInputError,
            DimensionError, InvalidDomainError
        """
        check_required(y, 'y')
        check_required(X, 'X')

        y_arr = _as_vector(check_array(y, 'y'))
        X_arr = check_array(X, 'X')
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        check_1d(y_arr, 'y')
        check_2d(X_arr, 'X')

        if start is None:
            start_arr = np.zeros(X_arr.shape[1], dtype=np.float64)
        else:
            start_arr = _as_vector(check_array(start, 'start'))
            check_1d(start_arr, 'start')

        check_finite(y_arr, 'y')
        check_finite(X_arr, 'X')
        check_finite(start_arr, 'start')

        check_consistent_length(y_arr, X_arr, names=('y', 'X'))
        check_columns_match(X_arr, start_arr, names=('X', 'start'))
        n, p = X_arr.shape
        if p == 0:
            raise DimensionError("X: must have at least one column")
        check_min_samples(X_arr, p, 'X')

        check_positive_integers(y_arr, 'y')

        return cls(_y=y_arr, _X=X_arr, _start=start_arr, _n=n, _p=p)

    # === Properties ===

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p)."""
        return self._X

    @property
    def start(self) -> NDArray[np.floating[Any]]:
        """IWLS starting coefficients (p,)."""
        return self._start

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of coefficients."""
        return self._p


def _as_vector(arr: NDArray) -> NDArray:
    """Flatten an (n, 1) column to (n,); leave anything else alone."""
    if arr.ndim == 2 and arr.shape[1] == 1:
        return arr.ravel()
    return arr
