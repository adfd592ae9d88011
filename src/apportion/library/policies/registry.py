"""
Weight policy registry and lookup functions.

This module maps policy names, as used in configuration files, to the
policy classes that implement them.
"""

from __future__ import annotations

from typing import Any

from apportion.library.error_messages import format_error, suggest_similar
from apportion.library.exceptions import ConfigurationError
from apportion.library.policies.base import WeightPolicy
from apportion.library.policies.center_biasing import WeightCenterBiasing2D
from apportion.library.policies.clamping import WeightClamping
from apportion.library.policies.point_distancing import WeightPointDistancing
from apportion.library.policies.range_mapping import WeightRangeMapping


def get_policy_classes() -> dict[str, type]:
    """
    Get the policy class registry.

    Returns
    -------
    dict[str, type]
        Dictionary mapping policy names to policy classes
    """
    return {
        "range_mapping": WeightRangeMapping,
        "point_distancing": WeightPointDistancing,
        "clamping": WeightClamping,
        "center_biasing_2d": WeightCenterBiasing2D,
    }


def get_policy(name: str, **params: Any) -> WeightPolicy:
    """
    Build a policy by name.

    Parameters
    ----------
    name
        Registered policy name (e.g., "range_mapping")
    **params
        Keyword arguments for the policy class

    Returns
    -------
    WeightPolicy
        The configured policy

    Raises
    ------
    ConfigurationError
        If the name is not registered or the parameters do not fit the class
    """
    policy_classes = get_policy_classes()
    if name not in policy_classes:
        raise ConfigurationError(
            format_error(
                "invalid_policy",
                name=name,
                suggestion=suggest_similar(name, list(policy_classes)),
            )
        )
    try:
        return policy_classes[name](**params)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid parameters for policy '{name}': {e}") from e
