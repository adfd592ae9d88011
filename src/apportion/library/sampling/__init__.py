"""
Weight samplers that produce raw weights for the configurable distributors.

"""

from apportion.library.sampling.base import WeightSampler
from apportion.library.sampling.coherent_noise import (
    DEFAULT_SEED,
    CoherentNoise,
    NoiseType,
)
from apportion.library.sampling.white_noise import WhiteNoise

__all__ = [
    "DEFAULT_SEED",
    "CoherentNoise",
    "NoiseType",
    "WeightSampler",
    "WhiteNoise",
]
