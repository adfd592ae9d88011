"""
Distributors that spread a value across a target using caller-supplied weights.

``ValueDistributor`` validates everything before touching the target.
``UncheckedValueDistributor`` trusts its caller and can take a precomputed
weight sum. It still resolves an exactly-zero sum.

Neither class is thread-safe. Each instance owns its random generator,
which is only used to place real-kind rounding drift. Concurrent callers
must use separate instances.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
from attrs import define, field

from apportion.library.allocations.core import AllocationMode
from apportion.library.allocations.core import allocate as _allocate
from apportion.library.allocations.normalization import (
    ZeroSumStrategy,
    normalize_weights,
    resolve_zero_weight_sum,
    to_zero_sum_strategy,
)
from apportion.library.exceptions import ConfigurationError
from apportion.library.numeric import NumericKind, get_adapter, resolve_adapter
from apportion.library.validation import as_weight_vector, validate_shapes

logger = logging.getLogger(__name__)


def _direct_strategy(
    instance: Any, attribute: Any, value: ZeroSumStrategy
) -> None:
    if value is ZeroSumStrategy.RESAMPLE:
        raise ConfigurationError(
            "ValueDistributor receives fixed weights and cannot resample them; "
            "use 'epsilon' or 'raise', or a sampling distributor."
        )


@define
class ValueDistributor:
    """
    Validating distributor for caller-supplied weights.

    Attributes
    ----------
    rng
        Generator used to place real-kind rounding drift
    zero_sum_strategy
        EPSILON (default) or RAISE for mixed-sign weights that cancel
    """

    rng: np.random.Generator = field(factory=np.random.default_rng)
    zero_sum_strategy: ZeroSumStrategy = field(
        default=ZeroSumStrategy.EPSILON,
        converter=to_zero_sum_strategy,
        validator=_direct_strategy,
    )

    def distribute(
        self,
        value: Any,
        weights: np.ndarray | Sequence[float],
        target: Any,
        kind: NumericKind | str | None = None,
    ) -> None:
        """
        Add shares of value proportional to weights into target, exactly.

        For integral kinds the added shares sum to value exactly.

        Parameters
        ----------
        value
            Quantity to distribute
        weights
            One weight per target slot. A float64 ndarray is normalized in
            place.
        target
            Buffer accumulated into (numpy array or Decimal sequence)
        kind
            Optional explicit numeric kind (needed for ``intp``)

        Raises
        ------
        InvalidShapeError
            If lengths differ or either vector is empty
        UnsupportedNumericKindError
            If the target's kind has no adapter
        NonFiniteWeightError
            If a weight is infinite
        UnresolvableWeightsError
            If weights cancel and the strategy is RAISE
        AllocationOverflowError
            If the value or a share does not fit the kind
        """
        self._distribute(value, weights, target, kind, AllocationMode.EXACT)

    def distribute_approximate(
        self,
        value: Any,
        weights: np.ndarray | Sequence[float],
        target: Any,
        kind: NumericKind | str | None = None,
    ) -> None:
        """
        Add independently rounded shares of value into target.

        Integral shares are rounded to nearest without correction, so the
        added total may differ from value. Real and decimal kinds behave as
        in ``distribute``.
        """
        self._distribute(value, weights, target, kind, AllocationMode.APPROXIMATE)

    def allocate(
        self,
        value: Any,
        weights: np.ndarray | Sequence[float],
        kind: NumericKind | str = NumericKind.INT64,
    ) -> Any:
        """Distribute value exactly into a new zeroed buffer of the given kind."""
        target = get_adapter(kind).zeros(len(weights))
        self.distribute(value, weights, target, kind)
        return target

    def allocate_approximate(
        self,
        value: Any,
        weights: np.ndarray | Sequence[float],
        kind: NumericKind | str = NumericKind.INT64,
    ) -> Any:
        """Distribute value approximately into a new zeroed buffer."""
        target = get_adapter(kind).zeros(len(weights))
        self.distribute_approximate(value, weights, target, kind)
        return target

    def _distribute(
        self,
        value: Any,
        weights: np.ndarray | Sequence[float],
        target: Any,
        kind: NumericKind | str | None,
        mode: AllocationMode,
    ) -> None:
        vector = as_weight_vector(weights)
        validate_shapes(vector, target)
        adapter = resolve_adapter(target, kind)
        coerced = adapter.coerce_value(value)
        weight_sum = normalize_weights(vector, strategy=self.zero_sum_strategy)
        logger.debug(
            "Distributing %s across %d %s slots (%s).",
            coerced,
            len(vector),
            adapter.kind.value,
            mode.value,
        )
        _allocate(coerced, vector, weight_sum, target, adapter, mode, self.rng)


@define
class UncheckedValueDistributor:
    """
    Distributor that skips shape and finiteness validation.

    Pass ``weight_sum`` when it is already known to avoid a second pass.
    Infinite or NaN weights are not caught and produce meaningless shares
    or overflow errors.
    """

    rng: np.random.Generator = field(factory=np.random.default_rng)

    def distribute(
        self,
        value: Any,
        weights: np.ndarray,
        target: Any,
        weight_sum: float | None = None,
        kind: NumericKind | str | None = None,
    ) -> None:
        self._distribute(value, weights, target, weight_sum, kind, AllocationMode.EXACT)

    def distribute_approximate(
        self,
        value: Any,
        weights: np.ndarray,
        target: Any,
        weight_sum: float | None = None,
        kind: NumericKind | str | None = None,
    ) -> None:
        self._distribute(
            value, weights, target, weight_sum, kind, AllocationMode.APPROXIMATE
        )

    def _distribute(
        self,
        value: Any,
        weights: np.ndarray,
        target: Any,
        weight_sum: float | None,
        kind: NumericKind | str | None,
        mode: AllocationMode,
    ) -> None:
        vector = as_weight_vector(weights)
        if weight_sum is None:
            weight_sum = float(vector.sum())
        if weight_sum == 0:
            weight_sum = resolve_zero_weight_sum(vector)
        adapter = resolve_adapter(target, kind)
        _allocate(
            adapter.coerce_value(value), vector, weight_sum, target, adapter, mode, self.rng
        )


def distribute_exact(
    value: Any,
    target: Any,
    weights: np.ndarray | Sequence[float],
    *,
    kind: NumericKind | str | None = None,
    rng: np.random.Generator | None = None,
) -> None:
    """
    Distribute value across target in proportion to weights, exactly.

    Convenience wrapper around ``ValueDistributor.distribute`` with the
    epsilon zero-sum strategy.
    """
    distributor = ValueDistributor() if rng is None else ValueDistributor(rng=rng)
    distributor.distribute(value, weights, target, kind)


def distribute_approximate(
    value: Any,
    target: Any,
    weights: np.ndarray | Sequence[float],
    *,
    kind: NumericKind | str | None = None,
    rng: np.random.Generator | None = None,
) -> None:
    """
    Distribute value across target with independent per-slot rounding.

    Convenience wrapper around ``ValueDistributor.distribute_approximate``.
    """
    distributor = ValueDistributor() if rng is None else ValueDistributor(rng=rng)
    distributor.distribute_approximate(value, weights, target, kind)
