"""Linear remapping of weights from one interval onto another."""

from __future__ import annotations

import numpy as np
from attrs import define


@define
class WeightRangeMapping:
    """
    Linearly map weights from a source range onto a target range.

    Works with negative weights. Defaults assume sampled weights in [0, 1).
    When the source range has zero width every weight becomes the midpoint
    of the target range.
    """

    from_lower: float = 0.0
    from_upper: float = 1.0
    to_lower: float = 0.0
    to_upper: float = 1.0

    def apply_to(self, weights: np.ndarray) -> None:
        from_span = self.from_upper - self.from_lower
        if from_span == 0:
            weights[...] = (self.to_lower + self.to_upper) * 0.5
            return
        scale = (self.to_upper - self.to_lower) / from_span
        weights[...] = self.to_lower + (weights - self.from_lower) * scale
