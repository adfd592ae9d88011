"""
Distributor over white noise weights.

One generator feeds both the sampler and the rounding-drift placement, so a
seeded instance reproduces every result.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from attrs import define

from apportion.library.allocations import (
    DEFAULT_MAX_ATTEMPTS,
    UncheckedValueDistributor,
    ZeroSumStrategy,
)
from apportion.library.distributors.configurable import ConfigurableDistributor
from apportion.library.policies import WeightPolicy
from apportion.library.sampling import WhiteNoise


@define(init=False)
class RandomDistributor(ConfigurableDistributor):
    """
    Distribute values with statistically random weights.

    Weights are uniform draws from one owned generator, which also places
    real-kind rounding drift. Weights that cancel exactly are redrawn.

    Parameters
    ----------
    rng
        Generator to own. A fresh unseeded one is created when omitted.
    policies
        Policies applied to every sampled vector
    zero_sum_strategy
        Defaults to RESAMPLE
    max_attempts
        Resample limit
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        policies: Iterable[WeightPolicy] = (),
        zero_sum_strategy: ZeroSumStrategy | str = ZeroSumStrategy.RESAMPLE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if rng is None:
            rng = np.random.default_rng()
        self.__attrs_init__(
            sampler=WhiteNoise(rng=rng),
            distributor=UncheckedValueDistributor(rng=rng),
            policies=policies,
            zero_sum_strategy=zero_sum_strategy,
            max_attempts=max_attempts,
        )

    @classmethod
    def seeded(cls, seed: int | None, **kwargs) -> RandomDistributor:
        return cls(rng=np.random.default_rng(seed), **kwargs)

    @property
    def rng(self) -> np.random.Generator:
        return self.sampler.rng
