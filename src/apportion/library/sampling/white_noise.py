"""Uniform random weights drawn from a numpy generator."""

from __future__ import annotations

import numpy as np
from attrs import define, field

from apportion.library.sampling.base import WeightSampler


@define
class WhiteNoise(WeightSampler):
    """
    Uniform random weights in [0, 1).

    Owns its generator. Sharing one instance between threads is not safe.
    """

    rng: np.random.Generator = field(factory=np.random.default_rng)

    @classmethod
    def seeded(cls, seed: int | None) -> WhiteNoise:
        return cls(rng=np.random.default_rng(seed))

    def add_sample(self, out: np.ndarray) -> None:
        out += self.rng.random(len(out))
