"""
Distributors that generate their own weights.

A configurable distributor samples a fresh weight vector for every call,
shapes it with weight policies, normalizes it and hands it to an unchecked
value distributor together with the weight sum.

None of these classes are thread-safe. The sampler, the policies and the
random generators are shared across calls on one instance.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import numpy as np
from attrs import define, field, validators

from apportion.library.allocations import (
    DEFAULT_MAX_ATTEMPTS,
    AllocationMode,
    UncheckedValueDistributor,
    ZeroSumStrategy,
    normalize_weights,
    to_zero_sum_strategy,
)
from apportion.library.exceptions import ConfigurationError
from apportion.library.numeric import NumericKind, get_adapter, resolve_adapter
from apportion.library.policies import WeightPolicy, apply_policies
from apportion.library.sampling import CoherentNoise, NoiseType, WeightSampler, WhiteNoise
from apportion.library.validation import validate_not_empty

logger = logging.getLogger(__name__)


def _resamplable(instance: Any, attribute: Any, value: ZeroSumStrategy) -> None:
    if value is ZeroSumStrategy.RESAMPLE and getattr(
        instance.sampler, "deterministic", False
    ):
        raise ConfigurationError(
            f"{type(instance.sampler).__name__} returns the same weights on every "
            "draw, so the 'resample' zero-sum strategy could never succeed; "
            "use 'epsilon' or 'raise'."
        )


@define
class ConfigurableDistributor:
    """
    Sample weights, apply policies, then distribute a value.

    Attributes
    ----------
    sampler
        Weight source, called once per distribution and once per resample
    distributor
        Receives the normalized weights and their sum
    policies
        Applied to every sampled vector before any per-call policies
    zero_sum_strategy
        How to resolve sampled weights that cancel exactly. RESAMPLE draws
        a new vector from the sampler and is rejected for deterministic
        samplers such as CoherentNoise.
    max_attempts
        Resample limit for the RESAMPLE strategy
    """

    sampler: WeightSampler = field(factory=WhiteNoise)
    distributor: UncheckedValueDistributor = field(factory=UncheckedValueDistributor)
    policies: tuple[WeightPolicy, ...] = field(default=(), converter=tuple)
    zero_sum_strategy: ZeroSumStrategy = field(
        default=ZeroSumStrategy.EPSILON,
        converter=to_zero_sum_strategy,
        validator=_resamplable,
    )
    max_attempts: int = field(default=DEFAULT_MAX_ATTEMPTS, validator=validators.ge(1))

    def distribute(
        self,
        value: Any,
        target: Any,
        *policies: WeightPolicy,
        kind: NumericKind | str | None = None,
    ) -> None:
        """
        Add exactly ``value`` into target using freshly sampled weights.

        Parameters
        ----------
        value
            Quantity to distribute
        target
            Non-empty buffer accumulated into
        *policies
            Extra policies for this call, applied after the instance policies
        kind
            Optional explicit numeric kind

        Raises
        ------
        InvalidShapeError
            If target is empty
        NonFiniteWeightError
            If the policies produce an infinite weight
        UnresolvableWeightsError
            If the weights cancel and the strategy cannot resolve it
        """
        self._distribute(value, target, policies, kind, AllocationMode.EXACT)

    def distribute_approximate(
        self,
        value: Any,
        target: Any,
        *policies: WeightPolicy,
        kind: NumericKind | str | None = None,
    ) -> None:
        """Like ``distribute`` with independent per-slot rounding."""
        self._distribute(value, target, policies, kind, AllocationMode.APPROXIMATE)

    def allocate(
        self,
        value: Any,
        length: int,
        *policies: WeightPolicy,
        kind: NumericKind | str = NumericKind.INT64,
    ) -> Any:
        """Distribute value exactly into a new zeroed buffer of ``length`` slots."""
        target = get_adapter(kind).zeros(length)
        self.distribute(value, target, *policies, kind=kind)
        return target

    def allocate_approximate(
        self,
        value: Any,
        length: int,
        *policies: WeightPolicy,
        kind: NumericKind | str = NumericKind.INT64,
    ) -> Any:
        target = get_adapter(kind).zeros(length)
        self.distribute_approximate(value, target, *policies, kind=kind)
        return target

    def sample_weights(self, length: int, *policies: WeightPolicy) -> np.ndarray:
        """Sample and shape one weight vector without normalizing it."""
        weights = np.zeros(length, dtype=np.float64)
        self._fill(weights, policies)
        return weights

    def _fill(self, weights: np.ndarray, policies: Iterable[WeightPolicy]) -> None:
        weights[...] = 0.0
        self.sampler.add_sample(weights)
        apply_policies(weights, self.policies)
        apply_policies(weights, policies)

    def _distribute(
        self,
        value: Any,
        target: Any,
        policies: tuple[WeightPolicy, ...],
        kind: NumericKind | str | None,
        mode: AllocationMode,
    ) -> None:
        validate_not_empty(target, "target")
        adapter = resolve_adapter(target, kind)
        coerced = adapter.coerce_value(value)

        weights = np.zeros(len(target), dtype=np.float64)
        self._fill(weights, policies)
        weight_sum = normalize_weights(
            weights,
            strategy=self.zero_sum_strategy,
            resample=lambda w: self._fill(w, policies),
            max_attempts=self.max_attempts,
        )
        logger.debug(
            "Sampled %d weights with %s (sum %r).",
            len(weights),
            type(self.sampler).__name__,
            weight_sum,
        )

        if mode is AllocationMode.EXACT:
            self.distributor.distribute(coerced, weights, target, weight_sum, adapter.kind)
        else:
            self.distributor.distribute_approximate(
                coerced, weights, target, weight_sum, adapter.kind
            )


@define
class NoiseDistributor(ConfigurableDistributor):
    """
    Configurable distributor over a coherent noise sampler.

    Neighbouring slots get similar weights. The setters configure the
    sampler and return the distributor so calls chain::

        NoiseDistributor().set_dimensions(7, 7).set_scale(0.05, 0.05).allocate(30, 49)
    """

    sampler: CoherentNoise = field(factory=CoherentNoise)

    def set_seed(self, seed: int) -> NoiseDistributor:
        self.sampler.set_seed(seed)
        return self

    def set_dimensions(self, x: float, y: float = 0.0, z: float = 0.0) -> NoiseDistributor:
        self.sampler.set_dimensions(x, y, z)
        return self

    def set_scale(self, x: float, y: float = 1.0, z: float = 1.0) -> NoiseDistributor:
        self.sampler.set_scale(x, y, z)
        return self

    def set_position(self, x: float, y: float = 0.0, z: float = 0.0) -> NoiseDistributor:
        self.sampler.set_position(x, y, z)
        return self

    def set_noise_type(self, noise_type: NoiseType | str) -> NoiseDistributor:
        self.sampler.set_noise_type(noise_type)
        return self
