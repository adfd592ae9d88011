"""
Building distributors from validated configuration.

"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from apportion.library.allocations import UncheckedValueDistributor
from apportion.library.config.models import DistributorConfig, SamplerConfig
from apportion.library.distributors import ConfigurableDistributor
from apportion.library.sampling import CoherentNoise, WeightSampler, WhiteNoise

logger = logging.getLogger(__name__)


def _pad(values: Sequence[float], fill: float) -> tuple[float, float, float]:
    padded = list(values) + [fill] * (3 - len(values))
    return (padded[0], padded[1], padded[2])


def build_sampler(
    config: SamplerConfig, rng: np.random.Generator, length: int | None = None
) -> WeightSampler:
    """
    Build the configured weight sampler.

    Coherent noise without explicit dimensions samples a line of ``length``
    slots.
    """
    if config.type == "white":
        return WhiteNoise(rng=rng)

    if config.dimensions is not None:
        dimensions = _pad(config.dimensions, 0.0)
    else:
        dimensions = (float(length or 1), 0.0, 0.0)
    return CoherentNoise(
        seed=config.seed if config.seed is not None else int(rng.integers(2**31)),
        noise_type=config.noise_type,
        dimensions=dimensions,
        scale=_pad(config.scale, 1.0),
        position=_pad(config.position, 0.0),
        frequency=config.frequency,
    )


def build_distributor(
    config: DistributorConfig, length: int | None = None
) -> ConfigurableDistributor:
    """
    Build a configurable distributor from validated configuration.

    Parameters
    ----------
    config
        Validated configuration
    length
        Target length, used to size coherent noise when no dimensions are
        configured

    Returns
    -------
    ConfigurableDistributor
        Distributor whose sampler and value distributor share one generator
        seeded from ``config.sampler.seed``
    """
    rng = np.random.default_rng(config.sampler.seed)
    distributor = ConfigurableDistributor(
        sampler=build_sampler(config.sampler, rng, length),
        distributor=UncheckedValueDistributor(rng=rng),
        policies=[entry.to_policy() for entry in config.policies],
        zero_sum_strategy=config.normalization.zero_sum_strategy,
        max_attempts=config.normalization.max_attempts,
    )
    logger.debug(
        "Built %s distributor with %d policies.",
        config.sampler.type,
        len(distributor.policies),
    )
    return distributor
