"""
Weight policies applied to sampled weights before distribution.

"""

from apportion.library.policies.base import WeightPolicy, apply_policies
from apportion.library.policies.center_biasing import WeightCenterBiasing2D
from apportion.library.policies.clamping import WeightClamping
from apportion.library.policies.point_distancing import WeightPointDistancing
from apportion.library.policies.range_mapping import WeightRangeMapping
from apportion.library.policies.registry import get_policy, get_policy_classes

__all__ = [
    "WeightCenterBiasing2D",
    "WeightClamping",
    "WeightPointDistancing",
    "WeightPolicy",
    "WeightRangeMapping",
    "apply_policies",
    "get_policy",
    "get_policy_classes",
]
