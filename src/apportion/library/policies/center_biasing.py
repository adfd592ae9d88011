"""
Radial biasing of weights laid out on a 2D grid.

"""

from __future__ import annotations

import numpy as np
from attrs import define, field, validators

from apportion.library.error_messages import format_error
from apportion.library.exceptions import InvalidShapeError


@define
class WeightCenterBiasing2D:
    """
    Scale grid weights by a squared linear falloff from the grid centre.

    Weights are read row-major (x fastest). A slot at the centre keeps its
    weight, the corners drop to 0.

    Parameters
    ----------
    width
        Number of columns
    height
        Number of rows
    """

    width: int = field(validator=validators.ge(1))
    height: int = field(validator=validators.ge(1))

    def falloff(self) -> np.ndarray:
        """Per-slot scale factors, shape (height * width,)."""
        center_x = (self.width - 1) * 0.5
        center_y = (self.height - 1) * 0.5
        radius = np.hypot(center_x, center_y)
        if radius == 0:
            return np.ones(1)

        y, x = np.mgrid[0 : self.height, 0 : self.width]
        distance = np.hypot(x - center_x, y - center_y)
        linear = 1.0 - distance / radius
        return np.maximum(0.0, linear * linear).ravel()

    def apply_to(self, weights: np.ndarray) -> None:
        if len(weights) != self.width * self.height:
            raise InvalidShapeError(
                format_error(
                    "shape_mismatch",
                    weight_count=len(weights),
                    target_count=f"{self.width}x{self.height}",
                )
            )
        weights *= self.falloff()
