"""
Core allocation logic shared by every distributor.

Given normalized weights and a nonzero weight sum, compute each slot's
share of a value and add it into the target buffer:

- Exact mode on integral kinds truncates shares toward zero and hands out
  the remainder by demand, so the added shares sum to the value exactly.
- Exact mode on real and decimal kinds computes shares in the target's own
  arithmetic and puts the rounding discrepancy into one random slot.
- Approximate mode on integral kinds rounds each share to nearest (ties to
  even) with no cross-slot correction. On real and decimal kinds it is the
  same as exact mode.

The ratio ``value * weight / weight_sum`` is always computed in float64 for
integral kinds. Every check runs before the target is touched.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import numpy as np

from apportion.library.allocations.remainder import correct_remainder
from apportion.library.error_messages import format_error
from apportion.library.exceptions import AllocationOverflowError
from apportion.library.numeric import IntegerAdapter, NumericAdapter

logger = logging.getLogger(__name__)


class AllocationMode(Enum):
    """Whether the allocated shares must sum to the value exactly."""

    EXACT = "exact"
    APPROXIMATE = "approximate"


def share_ratios(value: int, weights: np.ndarray, weight_sum: float) -> np.ndarray:
    """Compute ``value * weight / weight_sum`` in float64."""
    with np.errstate(over="ignore", invalid="ignore"):
        return float(value) * weights / weight_sum


def floor_shares(
    value: int,
    weights: np.ndarray,
    weight_sum: float,
    adapter: IntegerAdapter,
) -> tuple[np.ndarray, int]:
    """
    Truncate each slot's share toward zero.

    Returns
    -------
    tuple[np.ndarray, int]
        int64 shares and the remainder ``value - sum(shares)``
    """
    shares = adapter.to_shares(np.trunc(share_ratios(value, weights, weight_sum)))
    # Python ints keep the sum exact even where int64 would overflow
    remainder = value - sum(shares.tolist())
    return shares, remainder


def allocate_integral_exact(
    value: int,
    weights: np.ndarray,
    weight_sum: float,
    adapter: IntegerAdapter,
) -> np.ndarray:
    shares, remainder = floor_shares(value, weights, weight_sum, adapter)
    if remainder:
        logger.debug("Correcting remainder of %d across %d slots.", remainder, len(shares))
        correct_remainder(shares, weights, remainder)
    return shares


def allocate_integral_approximate(
    value: int,
    weights: np.ndarray,
    weight_sum: float,
    adapter: IntegerAdapter,
) -> np.ndarray:
    return adapter.to_shares(np.rint(share_ratios(value, weights, weight_sum)))


def allocate_real(
    value: Any,
    weights: np.ndarray,
    weight_sum: float,
    adapter: NumericAdapter,
    rng: np.random.Generator,
) -> Any:
    """
    Compute shares in the adapter's arithmetic and fix the rounding drift.

    The discrepancy is orders of magnitude below any weight-driven
    difference, so it goes to one uniformly random slot.

    Raises
    ------
    AllocationOverflowError
        If the shares are so large that the value is lost in their rounding.
        The epsilon weight sum for cancelling mixed-sign weights does this on
        decimal targets, whose exponent range lets the shares stay finite.
    """
    shares = adapter.shares(value, weights, weight_sum)
    discrepancy = value - adapter.total(shares)
    if discrepancy:
        index = int(rng.integers(len(shares)))
        shares[index] += discrepancy
        residual = value - adapter.total(shares)
        if abs(residual) > abs(value) * adapter.drift_tolerance():
            raise AllocationOverflowError(
                format_error(
                    "precision_loss",
                    kind=adapter.kind.value,
                    value=value,
                    residual=residual,
                    index=index,
                )
            )
    return shares


def allocate(
    value: Any,
    weights: np.ndarray,
    weight_sum: float,
    target: Any,
    adapter: NumericAdapter,
    mode: AllocationMode,
    rng: np.random.Generator,
) -> None:
    """
    Distribute an already coerced value into target.

    Parameters
    ----------
    value
        Value in the adapter's kind (see ``NumericAdapter.coerce_value``)
    weights
        Normalized weights, same length as target
    weight_sum
        Nonzero divisor from normalization
    target
        Buffer to accumulate into
    adapter
        Adapter matching target
    mode
        Exact or approximate allocation
    rng
        Picks the slot for real-kind rounding drift

    Raises
    ------
    AllocationOverflowError
        If a share or an accumulated slot leaves the kind's range. The
        target is unchanged.
    """
    if isinstance(adapter, IntegerAdapter):
        if len(weights) == 1:
            # a lone slot takes the whole value, which float64 may not hold
            shares = np.array([value], dtype=np.int64)
        elif mode is AllocationMode.EXACT:
            shares = allocate_integral_exact(value, weights, weight_sum, adapter)
        else:
            shares = allocate_integral_approximate(value, weights, weight_sum, adapter)
    else:
        shares = allocate_real(value, weights, weight_sum, adapter, rng)
    adapter.accumulate(target, shares)
