"""
Distributors that sample their own weights.

"""

from apportion.library.distributors.configurable import (
    ConfigurableDistributor,
    NoiseDistributor,
)
from apportion.library.distributors.random_distributor import RandomDistributor

__all__ = [
    "ConfigurableDistributor",
    "NoiseDistributor",
    "RandomDistributor",
]
