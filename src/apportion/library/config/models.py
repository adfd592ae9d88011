"""Pydantic models for distributor configuration validation."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

from apportion.library.allocations import (
    DEFAULT_MAX_ATTEMPTS,
    AllocationMode,
    ZeroSumStrategy,
)
from apportion.library.exceptions import ConfigurationError
from apportion.library.numeric import NumericKind
from apportion.library.policies import WeightPolicy, get_policy
from apportion.library.sampling import NoiseType


class _PolicyConfig(BaseModel):
    def to_policy(self) -> WeightPolicy:
        """Build the policy this entry describes."""
        return get_policy(self.type, **self.model_dump(exclude={"type"}))


class RangeMappingConfig(_PolicyConfig):
    """Linear remapping of weights from one interval to another."""

    type: Literal["range_mapping"]
    from_lower: float = Field(0.0, description="Lower bound of the source range")
    from_upper: float = Field(1.0, description="Upper bound of the source range")
    to_lower: float = Field(0.0, description="Lower bound of the target range")
    to_upper: float = Field(1.0, description="Upper bound of the target range")


class PointDistancingConfig(_PolicyConfig):
    """Remapping of distances around a point, keeping the side of each weight."""

    type: Literal["point_distancing"]
    source_point: float = 0.0
    source_min_distance: float = 0.0
    source_max_distance: float = 1.0
    target_point: float = 0.0
    target_min_distance: float = 0.0
    target_max_distance: float = 1.0


class ClampingConfig(_PolicyConfig):
    """Clamping of weights into a closed interval."""

    type: Literal["clamping"]
    lower: float = 0.0
    upper: float = 1.0

    @model_validator(mode="after")
    def validate_bounds(self) -> ClampingConfig:
        """Validate that the interval is not empty."""
        if self.lower > self.upper:
            raise ConfigurationError(
                f"Clamping lower bound {self.lower} exceeds upper bound {self.upper}."
            )
        return self


class CenterBiasing2DConfig(_PolicyConfig):
    """Radial falloff over a width x height grid."""

    type: Literal["center_biasing_2d"]
    width: int = Field(..., ge=1, description="Number of grid columns")
    height: int = Field(..., ge=1, description="Number of grid rows")


PolicyConfig = Annotated[
    Union[RangeMappingConfig, PointDistancingConfig, ClampingConfig, CenterBiasing2DConfig],
    Field(discriminator="type"),
]


class SamplerConfig(BaseModel):
    """Configuration of the weight sampler."""

    type: Literal["white", "coherent"] = Field(
        "white", description="Uniform random weights or coherent noise"
    )
    seed: int | None = Field(None, description="Seed for reproducible weights")
    noise_type: NoiseType = Field(
        NoiseType.OPENSIMPLEX2, description="FastNoiseLite noise algorithm"
    )
    dimensions: list[float] | None = Field(
        None,
        min_length=1,
        max_length=3,
        description="Sampled grid size (x, y, z). Defaults to a line over the target.",
    )
    scale: list[float] = Field(
        [1.0, 1.0, 1.0], min_length=1, max_length=3, description="Per-axis sample spacing"
    )
    position: list[float] = Field(
        [0.0, 0.0, 0.0], min_length=1, max_length=3, description="Grid origin"
    )
    frequency: float = Field(1.0, gt=0, description="Coordinate multiplier")

    @model_validator(mode="after")
    def validate_noise_settings(self) -> SamplerConfig:
        """Validate that the first noise dimension can hold a sample."""
        if self.dimensions is not None and self.dimensions[0] < 1:
            raise ConfigurationError(
                f"Noise x dimension must be >= 1, got {self.dimensions[0]}."
            )
        return self


class NormalizationConfig(BaseModel):
    """How sampled weights that cancel out are handled."""

    zero_sum_strategy: ZeroSumStrategy = Field(
        ZeroSumStrategy.EPSILON, description="epsilon, resample or raise"
    )
    max_attempts: int = Field(
        DEFAULT_MAX_ATTEMPTS, ge=1, description="Resample limit for 'resample'"
    )


class DistributorConfig(BaseModel):
    """Top-level configuration for a sampling distributor."""

    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    policies: list[PolicyConfig] = Field(
        default_factory=list, description="Weight policies, applied in order"
    )
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    mode: AllocationMode = Field(AllocationMode.EXACT, description="exact or approximate")
    kind: NumericKind = Field(NumericKind.INT64, description="Numeric kind of the output")

    @model_validator(mode="after")
    def validate_resampling(self) -> DistributorConfig:
        """Validate that resampling is only requested for random samplers."""
        if (
            self.sampler.type == "coherent"
            and self.normalization.zero_sum_strategy is ZeroSumStrategy.RESAMPLE
        ):
            raise ConfigurationError(
                "Coherent noise returns the same weights on every draw; "
                "use zero_sum_strategy 'epsilon' or 'raise' with it."
            )
        return self
