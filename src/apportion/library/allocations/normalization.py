"""
Weight normalization for value distribution.

Turns a raw weight vector into a safe divisor. The weight sum handed to the
allocator is never literally zero:

- NaN weights are replaced with 0 and reported
- Infinite weights are rejected
- An all-zero (or single-signed zero-sum) vector falls back to uniform
  weights of 1.0 with a sum of N
- A mixed-sign vector whose weights cancel exactly is resolved by the
  configured ZeroSumStrategy
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

import numpy as np
from attrs import define

from apportion.library.error_messages import format_error, suggest_similar
from apportion.library.exceptions import (
    ConfigurationError,
    NonFiniteWeightError,
    UnresolvableWeightsError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 256

# smallest positive subnormal double
EPSILON = float(np.finfo(np.float64).smallest_subnormal)


class SignProfile(Enum):
    """Which signs occur among the weights. All-zero counts as non-negative."""

    NON_NEGATIVE = "non-negative"
    NON_POSITIVE = "non-positive"
    MIXED = "mixed"


class ZeroSumStrategy(Enum):
    """How a mixed-sign, exactly-zero weight sum is resolved."""

    EPSILON = "epsilon"
    RESAMPLE = "resample"
    RAISE = "raise"


def to_zero_sum_strategy(strategy: ZeroSumStrategy | str) -> ZeroSumStrategy:
    """
    Convert a strategy name (case-insensitive) to a ZeroSumStrategy.

    Raises
    ------
    ConfigurationError
        If the name matches no strategy
    """
    if isinstance(strategy, ZeroSumStrategy):
        return strategy
    name = str(strategy).lower()
    for member in ZeroSumStrategy:
        if name in (member.value, member.name.lower()):
            return member
    raise ConfigurationError(
        format_error(
            "invalid_zero_sum_strategy",
            name=strategy,
            suggestion=suggest_similar(name, [m.value for m in ZeroSumStrategy]),
        )
    )


@define(frozen=True)
class WeightScan:
    """Result of a single validating pass over a weight vector."""

    total: float
    max_abs: float
    profile: SignProfile


def sign_profile(weights: np.ndarray) -> SignProfile:
    has_positive = bool((weights > 0).any())
    has_negative = bool((weights < 0).any())
    if has_positive and has_negative:
        return SignProfile.MIXED
    if has_negative:
        return SignProfile.NON_POSITIVE
    return SignProfile.NON_NEGATIVE


def epsilon_weight_sum(max_abs: float) -> float:
    """
    Substitute divisor for mixed-sign weights that cancel exactly.

    Small enough not to perturb ratios noticeably, large enough never to be
    zero. A heuristic with no fairness guarantee.
    """
    return max(EPSILON * 2.1, EPSILON * max_abs * 2.1)


def scan_weights(weights: np.ndarray) -> WeightScan:
    """
    Validate weights in place and compute their sum, max magnitude and signs.

    Parameters
    ----------
    weights
        float64 weight vector, mutated in place (NaN -> 0)

    Returns
    -------
    WeightScan
        Sum, largest absolute weight and sign profile

    Raises
    ------
    NonFiniteWeightError
        If any weight is infinite, or the finite weights sum to infinity
    """
    infinite = np.isinf(weights)
    if infinite.any():
        raise NonFiniteWeightError(
            format_error(
                "non_finite_weight",
                count=int(infinite.sum()),
                index=int(np.flatnonzero(infinite)[0]),
            )
        )

    missing = np.isnan(weights)
    if missing.any():
        logger.warning(
            "Weight policies produced %d NaN value(s); replacing with 0.",
            int(missing.sum()),
        )
        weights[missing] = 0.0

    with np.errstate(over="ignore"):
        total = float(weights.sum())
    if not np.isfinite(total):
        raise NonFiniteWeightError(format_error("weight_sum_overflow", total=total))

    return WeightScan(
        total=total,
        max_abs=float(np.abs(weights).max()),
        profile=sign_profile(weights),
    )


def spread_even(weights: np.ndarray) -> float:
    """Overwrite every weight with 1.0 and return the resulting sum."""
    weights[...] = 1.0
    return float(len(weights))


def resolve_zero_weight_sum(weights: np.ndarray) -> float:
    """
    Resolve a zero weight sum without validating the weights.

    Used when the caller supplies a precomputed sum. Mixed-sign weights get
    the epsilon divisor, anything else falls back to uniform weights.
    """
    if sign_profile(weights) is not SignProfile.MIXED:
        return spread_even(weights)
    return epsilon_weight_sum(float(np.abs(weights).max()))


def normalize_weights(
    weights: np.ndarray,
    *,
    strategy: ZeroSumStrategy | str = ZeroSumStrategy.EPSILON,
    resample: Callable[[np.ndarray], None] | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> float:
    """
    Validate weights and compute the weight sum used as divisor.

    Parameters
    ----------
    weights
        float64 weight vector, mutated in place
    strategy
        How to resolve positive and negative weights that cancel exactly
    resample
        Callable that refills ``weights`` in place. Required for
        ``ZeroSumStrategy.RESAMPLE``.
    max_attempts
        Number of resamples allowed before giving up

    Returns
    -------
    float
        A weight sum that is never zero

    Raises
    ------
    NonFiniteWeightError
        If an infinite weight is found
    UnresolvableWeightsError
        If the weights cancel and the strategy cannot resolve it
    ConfigurationError
        If RESAMPLE is requested without a resample callable
    """
    strategy = to_zero_sum_strategy(strategy)
    if strategy is ZeroSumStrategy.RESAMPLE and resample is None:
        raise ConfigurationError(
            "The 'resample' zero-sum strategy needs a resample callable; "
            "only sampling distributors can use it."
        )

    scan = scan_weights(weights)
    attempts = 0
    while scan.total == 0 and scan.profile is SignProfile.MIXED:
        if strategy is ZeroSumStrategy.EPSILON:
            logger.warning(
                "Mixed-sign weights cancel exactly; substituting epsilon weight sum."
            )
            return epsilon_weight_sum(scan.max_abs)
        if strategy is ZeroSumStrategy.RAISE:
            raise UnresolvableWeightsError(
                format_error(
                    "unresolvable_weights",
                    detail="The 'raise' zero-sum strategy refuses cancelling weights.",
                )
            )
        if attempts >= max_attempts:
            logger.warning("Gave up resampling weights after %d attempts.", attempts)
            raise UnresolvableWeightsError(
                format_error(
                    "unresolvable_weights",
                    detail=f"Resampled {attempts} time(s) without a nonzero sum.",
                )
            )
        resample(weights)
        attempts += 1
        scan = scan_weights(weights)

    if attempts:
        logger.debug("Weights resolved after %d resample(s).", attempts)
    if scan.total == 0:
        return spread_even(weights)
    return scan.total
