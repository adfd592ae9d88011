"""
Tests for weight normalization.

These tests ensure that:
1. NaN weights are replaced and reported, infinite weights are rejected
2. Zero weight sums fall back to uniform weights or the zero-sum strategy
3. The returned weight sum is never zero
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from apportion.library.allocations import (
    SignProfile,
    ZeroSumStrategy,
    normalize_weights,
    resolve_zero_weight_sum,
    scan_weights,
    to_zero_sum_strategy,
)
from apportion.library.allocations.normalization import EPSILON, epsilon_weight_sum
from apportion.library.exceptions import (
    ConfigurationError,
    ErrorKind,
    NonFiniteWeightError,
    UnresolvableWeightsError,
)


class TestScanWeights:
    """Test the validating scan over a weight vector."""

    def test_scan_reports_sum_max_and_profile(self):
        scan = scan_weights(np.array([1.0, -3.0, 2.5]))

        assert scan.total == pytest.approx(0.5)
        assert scan.max_abs == 3.0
        assert scan.profile is SignProfile.MIXED

    @pytest.mark.parametrize(
        "weights,profile",
        [
            ([0.0, 0.0], SignProfile.NON_NEGATIVE),
            ([1.0, 0.0], SignProfile.NON_NEGATIVE),
            ([-1.0, 0.0], SignProfile.NON_POSITIVE),
            ([-1.0, 1.0], SignProfile.MIXED),
        ],
    )
    def test_sign_profiles(self, weights, profile):
        assert scan_weights(np.array(weights)).profile is profile

    def test_nan_replaced_with_zero(self, caplog):
        weights = np.array([1.0, np.nan, 2.0])

        with caplog.at_level(logging.WARNING):
            scan = scan_weights(weights)

        np.testing.assert_array_equal(weights, [1.0, 0.0, 2.0])
        assert scan.total == 3.0
        assert "NaN" in caplog.text

    @pytest.mark.parametrize("bad", [np.inf, -np.inf])
    def test_infinite_weight_rejected(self, bad):
        weights = np.array([1.0, bad, np.nan])

        with pytest.raises(NonFiniteWeightError, match="Infinite weight") as excinfo:
            scan_weights(weights)

        assert excinfo.value.kind is ErrorKind.NON_FINITE_WEIGHT
        # rejected before NaN replacement
        assert np.isnan(weights[2])

    def test_overflowing_sum_rejected(self):
        big = np.finfo(np.float64).max
        with pytest.raises(NonFiniteWeightError, match="Weight sum is not finite"):
            scan_weights(np.array([big, big]))


class TestNormalizeWeights:
    """Test weight sum resolution."""

    def test_nonzero_sum_returned_unchanged(self):
        weights = np.array([3.0, 1.0])

        assert normalize_weights(weights) == 4.0
        np.testing.assert_array_equal(weights, [3.0, 1.0])

    @pytest.mark.parametrize(
        "weights", [[0.0, 0.0, 0.0, 0.0, 0.0], [0.0, -0.0, 0.0]]
    )
    def test_all_zero_falls_back_to_uniform(self, weights):
        vector = np.array(weights)

        total = normalize_weights(vector)

        assert total == len(weights)
        np.testing.assert_array_equal(vector, np.ones(len(weights)))

    def test_epsilon_strategy_for_cancelling_weights(self, caplog):
        weights = np.array([2.0, -1.0, -1.0])

        with caplog.at_level(logging.WARNING):
            total = normalize_weights(weights, strategy="epsilon")

        assert total == epsilon_weight_sum(2.0)
        assert total > 0
        assert "epsilon" in caplog.text
        np.testing.assert_array_equal(weights, [2.0, -1.0, -1.0])

    def test_epsilon_floor_for_tiny_weights(self):
        assert epsilon_weight_sum(0.1) == EPSILON * 2.1

    def test_raise_strategy_for_cancelling_weights(self):
        with pytest.raises(UnresolvableWeightsError, match="sum to zero") as excinfo:
            normalize_weights(np.array([1.0, -1.0]), strategy=ZeroSumStrategy.RAISE)

        assert excinfo.value.kind is ErrorKind.UNRESOLVABLE_WEIGHTS

    def test_resample_strategy_redraws_weights(self):
        draws = iter([[1.0, -1.0], [2.0, -1.0]])

        def resample(weights):
            weights[...] = next(draws)

        weights = np.array([1.0, -1.0])
        total = normalize_weights(
            weights, strategy=ZeroSumStrategy.RESAMPLE, resample=resample
        )

        assert total == 1.0
        np.testing.assert_array_equal(weights, [2.0, -1.0])

    def test_resample_gives_up_after_max_attempts(self, caplog):
        calls = []

        def resample(weights):
            calls.append(1)
            weights[...] = [1.0, -1.0]

        with caplog.at_level(logging.WARNING):
            with pytest.raises(UnresolvableWeightsError, match="Resampled 3"):
                normalize_weights(
                    np.array([1.0, -1.0]),
                    strategy="resample",
                    resample=resample,
                    max_attempts=3,
                )

        assert len(calls) == 3
        assert "Gave up resampling" in caplog.text

    def test_resample_without_callable_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="resample callable"):
            normalize_weights(np.array([1.0]), strategy=ZeroSumStrategy.RESAMPLE)

    def test_strategy_names_case_insensitive(self):
        assert to_zero_sum_strategy("RAISE") is ZeroSumStrategy.RAISE
        assert to_zero_sum_strategy(ZeroSumStrategy.EPSILON) is ZeroSumStrategy.EPSILON

    def test_unknown_strategy_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="Did you mean: resample"):
            normalize_weights(np.array([1.0]), strategy="resampel")


class TestResolveZeroWeightSum:
    """Test zero-sum resolution for precomputed sums."""

    def test_single_signed_weights_spread_evenly(self):
        weights = np.zeros(3)

        assert resolve_zero_weight_sum(weights) == 3.0
        np.testing.assert_array_equal(weights, [1.0, 1.0, 1.0])

    def test_mixed_weights_get_epsilon(self):
        weights = np.array([4.0, -4.0])

        assert resolve_zero_weight_sum(weights) == epsilon_weight_sum(4.0)
