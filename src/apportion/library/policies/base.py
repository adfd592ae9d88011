"""
Weight policy interface and pipeline application.

"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class WeightPolicy(Protocol):
    """A pure in-place transformation of a weight vector."""

    def apply_to(self, weights: np.ndarray) -> None: ...


def apply_policies(weights: np.ndarray, policies: Iterable[WeightPolicy]) -> None:
    """Apply policies to weights in place, left to right."""
    for policy in policies:
        policy.apply_to(weights)
