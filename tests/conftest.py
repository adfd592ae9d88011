"""
Common fixtures for pytest unit and integration tests for the apportion library.

"""

from __future__ import annotations

from decimal import Decimal

import numpy as np
import pytest

from apportion.library.allocations import ValueDistributor

# Weight vectors reused across distributor tests
UNIFORM_WEIGHTS = [1.0, 1.0, 1.0, 1.0]
SKEWED_WEIGHTS = [3.0, 1.0]
MIXED_CANCELLING_WEIGHTS = [2.0, -1.0, -1.0]


class ConstantSampler:
    """Sampler double that adds a fixed sequence of weight layers."""

    def __init__(self, *layers):
        self.layers = [np.asarray(layer, dtype=np.float64) for layer in layers]
        self.calls = 0

    def add_sample(self, out):
        layer = self.layers[min(self.calls, len(self.layers) - 1)]
        out += layer[: len(out)]
        self.calls += 1

    def sample(self, count):
        weights = np.zeros(count)
        self.add_sample(weights)
        return weights


@pytest.fixture
def rng():
    """Seeded generator for reproducible tests."""
    return np.random.default_rng(12345)


@pytest.fixture
def value_distributor(rng):
    """Validating distributor with a seeded generator."""
    return ValueDistributor(rng=rng)


@pytest.fixture
def int64_target():
    return np.zeros(4, dtype=np.int64)


@pytest.fixture
def decimal_target():
    return [Decimal(0)] * 3


@pytest.fixture
def constant_sampler():
    """Factory for samplers that replay fixed weight layers."""
    return ConstantSampler
