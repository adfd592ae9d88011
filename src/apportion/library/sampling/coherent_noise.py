"""
Coherent noise as a weight source.

Neighbouring slots receive similar weights, which gives spatially smooth
distributions over 1D, 2D or 3D grids. Samples come from FastNoiseLite
through ``pyfastnoiselite`` and lie roughly within [-1, 1]. Slots are filled
with x varying fastest, then y, then z.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

import numpy as np
from attrs import define, field
from pyfastnoiselite.pyfastnoiselite import FastNoiseLite
from pyfastnoiselite.pyfastnoiselite import NoiseType as FastNoiseType

from apportion.library.error_messages import format_error
from apportion.library.exceptions import SamplingError
from apportion.library.sampling.base import WeightSampler

DEFAULT_SEED = 1337


class NoiseType(Enum):
    """Noise algorithms supported by FastNoiseLite."""

    OPENSIMPLEX2 = "opensimplex2"
    OPENSIMPLEX2S = "opensimplex2s"
    CELLULAR = "cellular"
    PERLIN = "perlin"
    VALUE_CUBIC = "value_cubic"
    VALUE = "value"


_FAST_NOISE_TYPES = {
    NoiseType.OPENSIMPLEX2: FastNoiseType.NoiseType_OpenSimplex2,
    NoiseType.OPENSIMPLEX2S: FastNoiseType.NoiseType_OpenSimplex2S,
    NoiseType.CELLULAR: FastNoiseType.NoiseType_Cellular,
    NoiseType.PERLIN: FastNoiseType.NoiseType_Perlin,
    NoiseType.VALUE_CUBIC: FastNoiseType.NoiseType_ValueCubic,
    NoiseType.VALUE: FastNoiseType.NoiseType_Value,
}


def _vector(values: tuple[float, float, float]) -> tuple[float, float, float]:
    x, y, z = values
    return (float(x), float(y), float(z))


def _int32(seed: int) -> int:
    # FastNoiseLite seeds are C ints
    return (int(seed) + 2**31) % 2**32 - 2**31


@define
class CoherentNoise(WeightSampler):
    """
    Configurable coherent noise sampler.

    Setters return the sampler so calls can be chained::

        CoherentNoise().set_dimensions(7, 7).set_scale(0.05, 0.05).sample(49)

    Attributes
    ----------
    seed
        Noise seed, wrapped into the signed 32-bit range
    noise_type
        Noise algorithm
    dimensions
        Sampled region size (x, y, z). A y or z below 1 drops that axis, so
        (n, 0, 0) samples a line and (w, h, 0) a plane.
    scale
        Per-axis distance between neighbouring samples. Small values zoom in
        and give smoother weights.
    position
        Noise coordinates of the first sample, before scaling
    frequency
        FastNoiseLite frequency, a global multiplier on all coordinates
    """

    deterministic: ClassVar[bool] = True

    seed: int = DEFAULT_SEED
    noise_type: NoiseType = field(default=NoiseType.OPENSIMPLEX2, converter=NoiseType)
    dimensions: tuple[float, float, float] = field(
        default=(1.0, 1.0, 0.0), converter=_vector
    )
    scale: tuple[float, float, float] = field(default=(1.0, 1.0, 1.0), converter=_vector)
    position: tuple[float, float, float] = field(
        default=(0.0, 0.0, 0.0), converter=_vector
    )
    frequency: float = 1.0

    def set_seed(self, seed: int) -> CoherentNoise:
        self.seed = seed
        return self

    def set_noise_type(self, noise_type: NoiseType | str) -> CoherentNoise:
        self.noise_type = NoiseType(noise_type)
        return self

    def set_dimensions(self, x: float, y: float = 0.0, z: float = 0.0) -> CoherentNoise:
        self.dimensions = _vector((x, y, z))
        return self

    def set_scale(self, x: float, y: float = 1.0, z: float = 1.0) -> CoherentNoise:
        self.scale = _vector((x, y, z))
        return self

    def set_position(self, x: float, y: float = 0.0, z: float = 0.0) -> CoherentNoise:
        self.position = _vector((x, y, z))
        return self

    def sample_count(self) -> int:
        """Number of slots one ``add_sample`` call fills."""
        x, y, z = (int(d) for d in self.dimensions)
        return x * max(1, y) * max(1, z)

    def generator(self) -> FastNoiseLite:
        """FastNoiseLite generator configured from the current settings."""
        noise = FastNoiseLite(_int32(self.seed))
        noise.noise_type = _FAST_NOISE_TYPES[self.noise_type]
        noise.frequency = self.frequency
        return noise

    def add_sample(self, out: np.ndarray) -> None:
        """
        Add noise for every grid point into the leading slots of ``out``.

        Raises
        ------
        SamplingError
            If ``out`` is empty, the x dimension is below 1, or ``out`` is
            shorter than the sampled grid
        """
        if len(out) < 1:
            raise SamplingError(
                format_error("invalid_noise_dimensions", detail="The weight buffer is empty.")
            )
        if self.dimensions[0] < 1:
            raise SamplingError(
                format_error(
                    "invalid_noise_dimensions",
                    detail=f"The x dimension is {self.dimensions[0]}, expected >= 1.",
                )
            )
        count = self.sample_count()
        if len(out) < count:
            raise SamplingError(
                format_error(
                    "invalid_noise_dimensions",
                    detail=(
                        f"Dimensions {self.dimensions} need {count} weights "
                        f"but the buffer holds {len(out)}."
                    ),
                )
            )

        out[:count] += self.generator().gen_from_coords(self.coordinates())

    def coordinates(self) -> np.ndarray:
        """
        Scaled sample coordinates, one column per slot with x fastest.

        A line is sampled along y = 0 of the 2D noise, so the result always
        has two or three rows.
        """
        axes = []
        for axis, size in enumerate(self.dimensions):
            if axis > 0 and size < 1:
                continue
            steps = self.position[axis] + np.arange(int(size), dtype=np.float64)
            axes.append(steps * self.scale[axis])
        grids = np.meshgrid(*reversed(axes), indexing="ij")
        rows = [grid.ravel() for grid in reversed(grids)]
        if len(rows) == 1:
            rows.append(np.zeros_like(rows[0]))
        return np.ascontiguousarray(rows, dtype=np.float32)
