"""
Weight-to-allocation engine for the apportion library.

"""

from apportion.library.allocations.core import (
    AllocationMode,
    allocate,
    floor_shares,
)
from apportion.library.allocations.distributor import (
    UncheckedValueDistributor,
    ValueDistributor,
    distribute_approximate,
    distribute_exact,
)
from apportion.library.allocations.normalization import (
    DEFAULT_MAX_ATTEMPTS,
    SignProfile,
    ZeroSumStrategy,
    normalize_weights,
    resolve_zero_weight_sum,
    scan_weights,
    to_zero_sum_strategy,
)
from apportion.library.allocations.remainder import correct_remainder, demands

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "AllocationMode",
    "SignProfile",
    "UncheckedValueDistributor",
    "ValueDistributor",
    "ZeroSumStrategy",
    "allocate",
    "correct_remainder",
    "demands",
    "distribute_approximate",
    "distribute_exact",
    "floor_shares",
    "normalize_weights",
    "resolve_zero_weight_sum",
    "scan_weights",
    "to_zero_sum_strategy",
]
