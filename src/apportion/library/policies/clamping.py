"""Clamping of weights into a closed interval."""

from __future__ import annotations

import numpy as np
from attrs import define


@define
class WeightClamping:
    """Clamp weights into [lower, upper]."""

    lower: float = 0.0
    upper: float = 1.0

    def apply_to(self, weights: np.ndarray) -> None:
        np.clip(weights, self.lower, self.upper, out=weights)
