"""Configuration models and utilities for building distributors."""

from apportion.library.config.factory import build_distributor, build_sampler
from apportion.library.config.loader import (
    apply_overrides,
    load_distributor_config,
    parse_distributor_config,
)
from apportion.library.config.models import (
    CenterBiasing2DConfig,
    ClampingConfig,
    DistributorConfig,
    NormalizationConfig,
    PointDistancingConfig,
    RangeMappingConfig,
    SamplerConfig,
)

__all__ = [
    "CenterBiasing2DConfig",
    "ClampingConfig",
    "DistributorConfig",
    "NormalizationConfig",
    "PointDistancingConfig",
    "RangeMappingConfig",
    "SamplerConfig",
    "apply_overrides",
    "build_distributor",
    "build_sampler",
    "load_distributor_config",
    "parse_distributor_config",
]
