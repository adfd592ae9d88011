"""
Exceptions that are used throughout the apportion library.

Every error raised while validating or distributing a value carries a
class-level ``kind`` so callers can choose a recovery strategy (retry with
different weights, fix the buffer shape, abort) without string matching.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Enumerable error kinds raised by the distribution engine."""

    INVALID_SHAPE = "invalid-shape"
    NON_FINITE_WEIGHT = "non-finite-weight"
    UNRESOLVABLE_WEIGHTS = "unresolvable-weights"
    UNSUPPORTED_NUMERIC_KIND = "unsupported-numeric-kind"
    OVERFLOW = "overflow"
    CONFIGURATION = "configuration"
    SAMPLING = "sampling"


class ApportionError(Exception):
    """Base exception for apportion library."""

    kind: ErrorKind | None = None


class ConfigurationError(ApportionError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.CONFIGURATION


class ValidationError(ApportionError):
    """Base exception for argument validation errors."""

    pass


class InvalidShapeError(ValidationError):
    """
    Raised when target and weight vectors cannot be paired.

    Covers length mismatches and empty vectors. Always raised before any
    computation, so the target is never mutated.
    """

    kind = ErrorKind.INVALID_SHAPE


class UnsupportedNumericKindError(ValidationError):
    """
    Raised when a target buffer's numeric kind has no adapter.

    Unsigned and sub-32-bit integers are rejected because remainder
    correction may need to decrement below zero.
    """

    kind = ErrorKind.UNSUPPORTED_NUMERIC_KIND


class WeightError(ApportionError):
    """Base exception for weight vectors that cannot be normalized."""

    pass


class NonFiniteWeightError(WeightError):
    """Raised when an infinite weight reaches normalization."""

    kind = ErrorKind.NON_FINITE_WEIGHT


class UnresolvableWeightsError(WeightError):
    """
    Raised when a mixed-sign zero weight sum cannot be resolved.

    Either the bounded resampling budget was exhausted or the distributor
    was configured to refuse such weights outright.
    """

    kind = ErrorKind.UNRESOLVABLE_WEIGHTS


class AllocationOverflowError(ApportionError):
    """Raised when a value or share does not fit the target's numeric kind."""

    kind = ErrorKind.OVERFLOW


class SamplingError(ApportionError):
    """Raised when a weight sampler is misconfigured for the requested buffer."""

    kind = ErrorKind.SAMPLING
