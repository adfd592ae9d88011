"""
End-to-end tests of configured distribution pipelines.

These tests load configuration from YAML, build distributors and check the
distribution properties over many seeds:
1. Exact integral distribution conserves the value
2. Non-negative weights and values never produce negative shares
3. All-zero weights behave like uniform weights
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from apportion.library.allocations import ValueDistributor
from apportion.library.config import build_distributor, load_distributor_config
from apportion.library.exceptions import ConfigurationError
from apportion.library.policies import WeightClamping

CONF_DIR = Path(__file__).resolve().parents[2] / "conf" / "distributors"


class TestShippedConfigs:
    """Test the configurations shipped with the project."""

    @pytest.mark.parametrize("seed", range(10))
    def test_center_biased_grid(self, seed):
        config = load_distributor_config(
            CONF_DIR / "center_biased_grid.yaml", {"sampler.seed": seed}
        )
        distributor = build_distributor(config, length=49)

        result = distributor.allocate(30, 49, kind=config.kind)

        assert result.sum() == 30
        assert (result >= 0).all()
        assert result.reshape(7, 7)[3, 3] == result.max()

    def test_center_biased_grid_refuses_resampling(self):
        with pytest.raises(ConfigurationError, match="same weights on every draw"):
            load_distributor_config(
                CONF_DIR / "center_biased_grid.yaml",
                {"normalization.zero_sum_strategy": "resample"},
            )

    @pytest.mark.parametrize("length", [1, 2, 5, 64])
    def test_white_noise(self, length):
        config = load_distributor_config(CONF_DIR / "white_noise.yaml", {"sampler.seed": 0})
        distributor = build_distributor(config, length=length)

        result = distributor.allocate(1_000, length)

        assert result.sum() == 1_000
        assert (result >= 0).all()


class TestDistributionProperties:
    """Test distribution invariants across random inputs."""

    @pytest.mark.parametrize("seed", range(20))
    def test_conservation_with_mixed_sign_weights(self, seed):
        rng = np.random.default_rng(seed)
        weights = rng.normal(size=17)
        target = rng.integers(-50, 50, size=17).astype(np.int64)
        before = int(target.sum())
        value = int(rng.integers(-10_000, 10_000))

        ValueDistributor(rng=rng).distribute(value, weights, target)

        assert int(target.sum()) - before == value

    @pytest.mark.parametrize("seed", range(20))
    def test_non_negativity(self, seed):
        rng = np.random.default_rng(seed)
        weights = rng.random(9) * rng.integers(0, 2, size=9)
        target = np.zeros(9, dtype=np.int32)

        ValueDistributor(rng=rng).distribute(int(rng.integers(0, 500)), weights, target)

        assert (target >= 0).all()

    @pytest.mark.parametrize("value", [15, 16, 19, 0])
    def test_all_zero_weights_match_uniform(self, value):
        zero = ValueDistributor().allocate(value, np.zeros(5))
        uniform = ValueDistributor().allocate(value, np.ones(5))

        assert np.abs(zero - uniform).max() <= 1
        assert zero.sum() == value

    def test_float_distribution_across_configured_policies(self):
        config = load_distributor_config(
            CONF_DIR / "white_noise.yaml",
            {"sampler.seed": 5, "kind": "float64"},
        )
        distributor = build_distributor(config)

        result = distributor.allocate(2.5, 8, WeightClamping(0.25, 0.75), kind=config.kind)

        assert result.sum() == pytest.approx(2.5)
        assert result.min() >= 2.5 * 0.25 / (0.75 * 8) - 1e-12
