"""
Remainder correction for exact integral allocation.

Truncating each share toward zero leaves a small integer remainder. It is
handed out one unit per slot by highest demand, in the manner of the
D'Hondt/Jefferson divisor method: a slot's demand is its weight divided by
one more than what it already holds.
"""

from __future__ import annotations

import heapq
import logging

import numpy as np

logger = logging.getLogger(__name__)


def demands(weights: np.ndarray, shares: np.ndarray) -> np.ndarray:
    """
    Marginal demand of each slot for one more unit.

    ``weight / (share + 1)``. A share of -1 divides by zero, giving +-inf,
    or NaN for a zero weight. NaN ranks below every other demand.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        demand = weights / (shares.astype(np.float64) + 1.0)
    demand[np.isnan(demand)] = -np.inf
    return demand


def _select(demand: np.ndarray, count: int, highest: bool) -> list[int]:
    # nlargest/nsmallest keep the lower index on equal demand
    select = heapq.nlargest if highest else heapq.nsmallest
    return select(count, range(len(demand)), key=demand.__getitem__)


def correct_remainder(
    shares: np.ndarray, weights: np.ndarray, remainder: int
) -> None:
    """
    Adjust truncated shares in place so they sum to the distributed value.

    Parameters
    ----------
    shares
        int64 truncated shares, mutated in place
    weights
        Normalized weights, index-aligned with shares
    remainder
        ``value - shares.sum()``. Positive increments the ``remainder``
        highest-demand slots, negative decrements the ``|remainder|``
        lowest-demand slots.

    Notes
    -----
    Truncation leaves less than one unit per slot, so ``|remainder| <= N``
    and a single round suffices. A larger remainder can only come from
    float64 rounding on values beyond 2**53. It is applied in rounds of at
    most N, and demand is recomputed between rounds.
    """
    length = len(shares)
    rounds = 0
    while remainder:
        step = min(abs(remainder), length)
        demand = demands(weights, shares)
        if remainder > 0:
            shares[_select(demand, step, highest=True)] += 1
            remainder -= step
        else:
            shares[_select(demand, step, highest=False)] -= 1
            remainder += step
        rounds += 1
    if rounds > 1:
        logger.debug("Remainder needed %d correction rounds.", rounds)
