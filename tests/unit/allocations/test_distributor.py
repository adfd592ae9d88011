"""
Tests for the validating and unchecked value distributors.

These tests ensure that:
1. Exact distribution conserves the value for every integral kind
2. Approximate distribution rounds each slot independently
3. Every validation failure leaves the target untouched
"""

from __future__ import annotations

from decimal import Decimal

import numpy as np
import pytest

from apportion.library.allocations import (
    UncheckedValueDistributor,
    ValueDistributor,
    ZeroSumStrategy,
    distribute_approximate,
    distribute_exact,
)
from apportion.library.exceptions import (
    AllocationOverflowError,
    ConfigurationError,
    ErrorKind,
    InvalidShapeError,
    NonFiniteWeightError,
    UnresolvableWeightsError,
    UnsupportedNumericKindError,
)


class TestExactDistribution:
    """Test exact distribution scenarios."""

    def test_uniform_weights(self, value_distributor, int64_target):
        value_distributor.distribute(100, [1, 1, 1, 1], int64_target)

        np.testing.assert_array_equal(int64_target, [25, 25, 25, 25])

    def test_remainder_goes_to_highest_demand(self, value_distributor):
        target = np.zeros(2, dtype=np.int64)

        value_distributor.distribute(10, [3, 1], target)

        np.testing.assert_array_equal(target, [8, 2])

    def test_all_zero_weights_spread_evenly(self, value_distributor):
        target = np.zeros(5, dtype=np.int32)

        value_distributor.distribute(15, [0, 0, 0, 0, 0], target)

        np.testing.assert_array_equal(target, [3, 3, 3, 3, 3])

    def test_accumulates_into_existing_values(self, value_distributor):
        target = np.array([10, -4], dtype=np.int64)

        value_distributor.distribute(6, [1, 1], target)

        np.testing.assert_array_equal(target, [13, -1])

    @pytest.mark.parametrize("dtype", [np.int32, np.int64])
    @pytest.mark.parametrize("value", [0, 1, 7, 99, 10_001, -250])
    def test_conservation(self, value_distributor, rng, dtype, value):
        weights = rng.random(13)
        target = np.full(13, 5, dtype=dtype)
        before = int(target.sum())

        value_distributor.distribute(value, weights, target)

        assert int(target.sum()) - before == value

    def test_non_negative_inputs_give_non_negative_deltas(self, value_distributor, rng):
        weights = rng.random(20)
        weights[::3] = 0.0
        target = np.zeros(20, dtype=np.int64)

        value_distributor.distribute(1_234, weights, target)

        assert (target >= 0).all()
        assert target.sum() == 1_234

    def test_weight_vector_normalized_in_place(self, value_distributor):
        weights = np.array([np.nan, 1.0, 1.0])
        target = np.zeros(3, dtype=np.int64)

        value_distributor.distribute(4, weights, target)

        np.testing.assert_array_equal(weights, [0.0, 1.0, 1.0])
        np.testing.assert_array_equal(target, [0, 2, 2])

    def test_intp_requires_explicit_kind(self, value_distributor):
        target = np.zeros(3, dtype=np.intp)

        value_distributor.distribute(9, [1, 1, 1], target, kind="intp")

        np.testing.assert_array_equal(target, [3, 3, 3])

    def test_float32_target(self, value_distributor):
        target = np.zeros(4, dtype=np.float32)

        value_distributor.distribute(1.0, [1, 1, 1, 1], target)

        np.testing.assert_allclose(target, [0.25] * 4)
        assert target.dtype == np.float32

    def test_decimal_target(self, value_distributor, decimal_target):
        value_distributor.distribute(Decimal("1"), [1, 1, 1], decimal_target)

        assert all(isinstance(share, Decimal) for share in decimal_target)
        assert abs(sum(decimal_target) - Decimal("1")) < Decimal("1e-25")

    def test_allocate_returns_new_buffer(self, value_distributor):
        result = value_distributor.allocate(10, [3, 1], kind="int32")

        assert result.dtype == np.int32
        np.testing.assert_array_equal(result, [8, 2])

    def test_allocate_decimal(self, value_distributor):
        result = value_distributor.allocate(Decimal("3"), [1, 2], kind="decimal")

        assert result == [Decimal(1), Decimal(2)]


class TestApproximateDistribution:
    """Test independent per-slot rounding."""

    def test_rounding_error_is_not_corrected(self, value_distributor):
        target = np.zeros(3, dtype=np.int64)

        value_distributor.distribute_approximate(10, [1, 1, 1], target)

        np.testing.assert_array_equal(target, [3, 3, 3])
        assert target.sum() == 9

    def test_real_kinds_match_exact(self, value_distributor):
        target = np.zeros(2, dtype=np.float64)

        value_distributor.distribute_approximate(3.0, [1, 2], target)

        np.testing.assert_allclose(target, [1.0, 2.0])

    def test_allocate_approximate(self, value_distributor):
        result = value_distributor.allocate_approximate(2, [1, 1, 1])

        np.testing.assert_array_equal(result, [1, 1, 1])


class TestValidation:
    """Test that every rejected call leaves the target untouched."""

    def test_shape_mismatch(self, value_distributor):
        target = np.arange(5, dtype=np.int64)

        with pytest.raises(InvalidShapeError, match="lengths do not match") as excinfo:
            value_distributor.distribute(10, [1, 1, 1], target)

        assert excinfo.value.kind is ErrorKind.INVALID_SHAPE
        np.testing.assert_array_equal(target, np.arange(5))

    @pytest.mark.parametrize(
        "weights,target,name",
        [
            ([1.0], np.zeros(0, dtype=np.int64), "target"),
            ([], np.zeros(2, dtype=np.int64), "weight vector"),
        ],
    )
    def test_empty_vectors(self, value_distributor, weights, target, name):
        with pytest.raises(InvalidShapeError, match=f"Empty {name}"):
            value_distributor.distribute(1, weights, target)

    def test_two_dimensional_weights(self, value_distributor):
        with pytest.raises(InvalidShapeError, match="one-dimensional"):
            value_distributor.distribute(1, [[1.0, 2.0]], np.zeros(2, dtype=np.int64))

    def test_all_infinite_weights(self, value_distributor):
        target = np.array([1, 2, 3], dtype=np.int64)

        with pytest.raises(NonFiniteWeightError):
            value_distributor.distribute(10, [np.inf, np.inf, -np.inf], target)

        np.testing.assert_array_equal(target, [1, 2, 3])

    @pytest.mark.parametrize("dtype", [np.uint32, np.int16, np.int8, np.bool_, np.float16])
    def test_unsupported_dtypes(self, value_distributor, dtype):
        target = np.zeros(2, dtype=dtype)

        with pytest.raises(UnsupportedNumericKindError, match="is not supported") as excinfo:
            value_distributor.distribute(1, [1, 1], target)

        assert excinfo.value.kind is ErrorKind.UNSUPPORTED_NUMERIC_KIND

    def test_plain_list_of_ints_unsupported(self, value_distributor):
        with pytest.raises(UnsupportedNumericKindError):
            value_distributor.distribute(1, [1, 1], [0, 0])

    def test_kind_contradicting_target(self, value_distributor):
        with pytest.raises(UnsupportedNumericKindError, match="not int32"):
            value_distributor.distribute(
                1, [1, 1], np.zeros(2, dtype=np.int64), kind="int32"
            )

    def test_value_out_of_range(self, value_distributor):
        target = np.zeros(2, dtype=np.int32)

        with pytest.raises(AllocationOverflowError, match="does not fit int32"):
            value_distributor.distribute(2**31, [1, 1], target)

        np.testing.assert_array_equal(target, [0, 0])

    def test_cancelling_weights_with_raise_strategy(self):
        distributor = ValueDistributor(zero_sum_strategy="raise")
        target = np.zeros(3, dtype=np.int64)

        with pytest.raises(UnresolvableWeightsError):
            distributor.distribute(10, [2, -1, -1], target)

        np.testing.assert_array_equal(target, [0, 0, 0])

    def test_resample_strategy_rejected(self):
        with pytest.raises(ConfigurationError, match="cannot resample"):
            ValueDistributor(zero_sum_strategy=ZeroSumStrategy.RESAMPLE)

    def test_mistyped_strategy_suggests_match(self):
        with pytest.raises(ConfigurationError, match="Did you mean: epsilon") as excinfo:
            ValueDistributor(zero_sum_strategy="epsilom")

        assert excinfo.value.kind is ErrorKind.CONFIGURATION


class TestUncheckedValueDistributor:
    """Test distribution with a precomputed weight sum."""

    def test_precomputed_sum(self, rng):
        target = np.zeros(2, dtype=np.int64)

        UncheckedValueDistributor(rng=rng).distribute(10, np.array([3.0, 1.0]), target, 4.0)

        np.testing.assert_array_equal(target, [8, 2])

    def test_sum_computed_when_missing(self, rng):
        target = np.zeros(4, dtype=np.int64)

        UncheckedValueDistributor(rng=rng).distribute(100, np.ones(4), target)

        np.testing.assert_array_equal(target, [25, 25, 25, 25])

    def test_zero_sum_resolved(self, rng):
        target = np.zeros(5, dtype=np.int64)

        UncheckedValueDistributor(rng=rng).distribute(15, np.zeros(5), target, 0.0)

        np.testing.assert_array_equal(target, [3, 3, 3, 3, 3])

    def test_approximate(self, rng):
        target = np.zeros(3, dtype=np.int64)

        UncheckedValueDistributor(rng=rng).distribute_approximate(10, np.ones(3), target)

        assert target.sum() == 9


class TestConvenienceFunctions:
    """Test the module-level distribute functions."""

    def test_distribute_exact(self):
        target = np.zeros(2, dtype=np.int64)

        distribute_exact(10, target, [3, 1])

        np.testing.assert_array_equal(target, [8, 2])

    def test_distribute_approximate(self, rng):
        target = np.zeros(3, dtype=np.int64)

        distribute_approximate(10, target, [1, 1, 1], rng=rng)

        np.testing.assert_array_equal(target, [3, 3, 3])
