"""
Input validation utilities for geomglm.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Missing entries (None) are reported as non-finite, not as a type error
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import numbers

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from geomglm.core.exceptions import (
    DimensionError,
    InvalidDomainError,
    InvalidTypeError,
    MissingArgumentError,
    NonFiniteInputError,
)


def check_required(value: Any, name: str) -> None:
    """
    Verify a required argument was supplied.

    Args:
        value: The argument value
        name: Parameter name for error messages

    Raises:
        MissingArgumentError: If value is None
    """
    if value is None:
        raise MissingArgumentError(f"{name}: required argument is missing")


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.float64]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like. Containers holding a mix of numbers and None are
    accepted, with None mapped to NaN so that check_finite reports it as a
    missing value. Anything else that lands in object dtype (strings mixed
    with numbers, nested objects) is rejected.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with dtype float64

    Raises:
        InvalidTypeError: If input cannot be converted to a real numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise InvalidTypeError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        result = _object_to_float(result, name)

    if result.dtype == np.bool_ or not np.issubdtype(result.dtype, np.number):
        raise InvalidTypeError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if np.issubdtype(result.dtype, np.complexfloating):
        raise InvalidTypeError(
            f"{name}: complex dtype {result.dtype}, expected real numeric data"
        )

    return result.astype(np.float64, copy=False)


def _object_to_float(array: NDArray, name: str) -> NDArray[np.float64]:
    """Convert an object array of numbers and None to float64."""
    values = []
    for item in array.ravel():
        if item is None:
            values.append(np.nan)
        elif isinstance(item, numbers.Real) and not isinstance(item, (bool, np.bool_)):
            values.append(float(item))
        else:
            raise InvalidTypeError(
                f"{name}: converted to object dtype, indicating mixed types "
                f"or non-numeric data (found {type(item).__name__})"
            )
    return np.asarray(values, dtype=np.float64).reshape(array.shape)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no missing, NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        NonFiniteInputError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise NonFiniteInputError(
            f"{name}: contains non-finite values ({n_nan} NaN/missing, {n_inf} Inf)",
            n_nan=n_nan,
            n_inf=n_inf,
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Args:
        array: Array to check
        ndim: Required number of dimensions
        name: Parameter name for error messages

    Raises:
        InvalidTypeError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        kind = "vector" if ndim == 1 else "matrix"
        raise InvalidTypeError(
            f"{name}: expected a numeric {kind} ({ndim}D array), "
            f"got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Args:
        *arrays: Arrays to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_columns_match(
    X: NDArray[np.floating[Any]],
    vector: NDArray[np.floating[Any]],
    names: tuple[str, str],
) -> None:
    """
    Verify a vector has one entry per column of X.

    Args:
        X: 2D array
        vector: 1D array expected to have X.shape[1] entries
        names: (matrix name, vector name) for error messages

    Raises:
        DimensionError: If the lengths differ
    """
    if X.shape[1] != vector.shape[0]:
        raise DimensionError(
            f"{names[1]}: length {vector.shape[0]} does not match "
            f"{X.shape[1]} columns of {names[0]}"
        )


def check_min_samples(array: NDArray[np.floating[Any]], min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of samples.

    Args:
        array: Array to check
        min_samples: Minimum required samples (first dimension)
        name: Parameter name for error messages

    Raises:
        DimensionError: If array has fewer than min_samples
    """
    n = array.shape[0]
    if n < min_samples:
        raise DimensionError(
            f"{name}: requires at least {min_samples} observations, got {n}"
        )


def check_positive_integers(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify every element is a positive integer (1, 2, 3, ...).

    Args:
        array: Finite array to check
        name: Parameter name for error messages

    Raises:
        InvalidDomainError: If any element is < 1 or has a fractional part
    """
    bad = np.flatnonzero((array < 1) | (array != np.floor(array)))
    if len(bad) > 0:
        shown = ", ".join(repr(float(array[i])) for i in bad[:5])
        more = f" (and {len(bad) - 5} more)" if len(bad) > 5 else ""
        raise InvalidDomainError(
            f"{name}: geometric response must contain positive integers, "
            f"got {shown}{more} at positions {bad[:5].tolist()}",
            bad_indices=bad.tolist(),
        )
