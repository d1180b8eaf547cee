"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_required: None detection
    - check_array: conversion, dtype coercion, None → NaN, type rejection
    - check_finite: NaN/Inf detection
    - check_1d / check_2d: dimensionality checks
    - check_consistent_length / check_columns_match: length contracts
    - check_min_samples: n >= p
    - check_positive_integers: geometric support
"""

import numpy as np
import pytest

from geomglm.core.exceptions import (
    DimensionError,
    InvalidDomainError,
    InvalidTypeError,
    MissingArgumentError,
    NonFiniteInputError,
)
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


# ═══════════════════════════════════════════════════════════════════════
# check_required
# ═══════════════════════════════════════════════════════════════════════


class TestCheckRequired:

    def test_none_raises(self):
        with pytest.raises(MissingArgumentError, match="y"):
            check_required(None, "y")

    def test_value_passes(self):
        check_required([1, 2], "y")

    def test_empty_list_is_not_missing(self):
        check_required([], "y")


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "y")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_float32_promoted(self):
        result = check_array(np.array([1.0, 2.0], dtype=np.float32), "X")
        assert result.dtype == np.float64

    def test_nested_list_to_2d(self):
        result = check_array([[1, 2], [3, 4]], "X")
        assert result.shape == (2, 2)

    def test_none_entries_become_nan(self):
        result = check_array([1, None, 3], "y")
        assert np.isnan(result[1])
        assert result[0] == 1.0

    def test_rejects_mixed_strings_and_numbers(self):
        with pytest.raises(InvalidTypeError):
            check_array([1, "two", 3], "y")

    def test_rejects_object_mix_with_missing(self):
        with pytest.raises(InvalidTypeError, match="mixed types"):
            check_array([1.0, None, "two"], "y")

    def test_rejects_homogeneous_strings(self):
        with pytest.raises(InvalidTypeError, match="non-numeric dtype"):
            check_array(["a", "b", "c"], "y")

    def test_rejects_booleans(self):
        with pytest.raises(InvalidTypeError, match="non-numeric dtype"):
            check_array([True, False], "y")

    def test_rejects_complex(self):
        with pytest.raises(InvalidTypeError, match="complex"):
            check_array([1 + 2j, 3], "y")

    def test_rejects_ragged(self):
        with pytest.raises(InvalidTypeError):
            check_array([[1, 2], [3]], "X")

    def test_name_in_message(self):
        with pytest.raises(InvalidTypeError, match="start"):
            check_array(["a"], "start")


# ═══════════════════════════════════════════════════════════════════════
# check_finite
# ═══════════════════════════════════════════════════════════════════════


class TestCheckFinite:

    def test_finite_passes(self):
        check_finite(np.array([1.0, 2.0]), "y")

    def test_nan_counted(self):
        with pytest.raises(NonFiniteInputError) as exc_info:
            check_finite(np.array([1.0, np.nan, np.nan]), "y")
        assert exc_info.value.n_nan == 2
        assert exc_info.value.n_inf == 0

    def test_inf_counted(self):
        with pytest.raises(NonFiniteInputError) as exc_info:
            check_finite(np.array([[1.0, np.inf], [-np.inf, 0.0]]), "X")
        assert exc_info.value.n_inf == 2
        assert "X" in str(exc_info.value)


# ═══════════════════════════════════════════════════════════════════════
# Dimensionality
# ═══════════════════════════════════════════════════════════════════════


class TestDimensions:

    def test_1d_passes(self):
        check_1d(np.zeros(3), "y")

    def test_1d_rejects_matrix(self):
        with pytest.raises(InvalidTypeError, match="vector"):
            check_1d(np.zeros((3, 2)), "y")

    def test_2d_passes(self):
        check_2d(np.zeros((3, 2)), "X")

    def test_2d_rejects_3d(self):
        with pytest.raises(InvalidTypeError, match="matrix"):
            check_2d(np.zeros((2, 2, 2)), "X")


# ═══════════════════════════════════════════════════════════════════════
# Length contracts
# ═══════════════════════════════════════════════════════════════════════


class TestLengths:

    def test_consistent_length_passes(self):
        check_consistent_length(np.zeros(4), np.zeros((4, 2)), names=("y", "X"))

    def test_inconsistent_length(self):
        with pytest.raises(DimensionError, match="y=5, X=4"):
            check_consistent_length(np.zeros(5), np.zeros((4, 1)), names=("y", "X"))

    def test_names_must_match_arrays(self):
        with pytest.raises(ValueError):
            check_consistent_length(np.zeros(2), np.zeros(2), names=("y",))

    def test_columns_match(self):
        check_columns_match(np.zeros((5, 3)), np.zeros(3), names=("X", "start"))

    def test_columns_mismatch(self):
        with pytest.raises(DimensionError, match="start"):
            check_columns_match(np.zeros((5, 3)), np.zeros(2), names=("X", "start"))

    def test_min_samples(self):
        with pytest.raises(DimensionError, match="at least 3"):
            check_min_samples(np.zeros((2, 3)), 3, "X")


# ═══════════════════════════════════════════════════════════════════════
# Geometric support
# ═══════════════════════════════════════════════════════════════════════


class TestPositiveIntegers:

    def test_positive_integers_pass(self):
        check_positive_integers(np.array([1.0, 2.0, 17.0]), "y")

    def test_fractional_rejected(self):
        with pytest.raises(InvalidDomainError) as exc_info:
            check_positive_integers(np.array([1.5, 2.0, 3.0]), "y")
        assert exc_info.value.bad_indices == [0]

    @pytest.mark.parametrize("bad", [0.0, -1.0, -2.5])
    def test_non_positive_rejected(self, bad):
        with pytest.raises(InvalidDomainError, match="positive integers"):
            check_positive_integers(np.array([2.0, bad]), "y")

    def test_reports_all_bad_indices(self):
        y = np.array([0.0] * 8 + [1.0])
        with pytest.raises(InvalidDomainError, match="and 3 more") as exc_info:
            check_positive_integers(y, "y")
        assert exc_info.value.bad_indices == list(range(8))
