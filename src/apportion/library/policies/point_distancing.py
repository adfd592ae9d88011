"""
Distance remapping of weights around a point.

Each weight keeps its side of the source point while its distance is mapped
linearly from the source distance range onto the target one.
"""

from __future__ import annotations

import numpy as np
from attrs import define


@define
class WeightPointDistancing:
    """
    Remap each weight's distance around a point into a new distance band.

    A weight at ``source_min_distance`` from ``source_point`` lands at
    ``target_min_distance`` from ``target_point``, and so on linearly up to
    the max distances. Negative weights are pushed away on the negative side,
    so the sign survives.

    The defaults leave weights in [0, 1) unchanged up to rounding.
    """

    source_point: float = 0.0
    source_min_distance: float = 0.0
    source_max_distance: float = 1.0
    target_point: float = 0.0
    target_min_distance: float = 0.0
    target_max_distance: float = 1.0

    @classmethod
    def around(
        cls, point: float, min_distance: float, max_distance: float
    ) -> WeightPointDistancing:
        """Map weights in [0, 1) to [min_distance, max_distance) around point."""
        return cls(
            target_point=point,
            target_min_distance=min_distance,
            target_max_distance=max_distance,
        )

    def apply_to(self, weights: np.ndarray) -> None:
        from_span = self.source_max_distance - self.source_min_distance
        to_span = self.target_max_distance - self.target_min_distance
        to_offset = self.target_point + self.target_min_distance

        if from_span == 0:
            weights[...] = to_span * 0.5 + to_offset
            return

        from_offset = self.source_point + self.source_min_distance
        scaled = (weights - from_offset) / from_span * to_span
        # signbit keeps -0.0 on the negative side
        weights[...] = scaled + to_offset * np.where(np.signbit(scaled), -1.0, 1.0)
