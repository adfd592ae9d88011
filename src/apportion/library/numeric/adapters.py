"""
Numeric adapters mapping the float64 distribution math onto target buffers.

Each supported numeric kind gets one adapter. Integral adapters receive
truncated float64 shares and check them against the kind's range; real and
decimal adapters compute shares in their own arithmetic. Every adapter
validates before it mutates: ``accumulate`` either adds every share or
raises without touching the target.
"""

from __future__ import annotations

import decimal
from abc import ABC, abstractmethod
from collections.abc import MutableSequence
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

import numpy as np
from attrs import define

from apportion.library.error_messages import format_error, suggest_similar
from apportion.library.exceptions import (
    AllocationOverflowError,
    InvalidShapeError,
    UnsupportedNumericKindError,
)


class NumericKind(Enum):
    """Numeric kinds a target buffer can hold."""

    INT32 = "int32"
    INT64 = "int64"
    INTP = "intp"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"


class NumericAdapter(ABC):
    """Abstract base class for numeric kind adapters."""

    kind: NumericKind
    integral: ClassVar[bool] = False

    @abstractmethod
    def coerce_value(self, value: Any) -> Any:
        """Convert the value to distribute into this kind, failing on overflow."""
        raise NotImplementedError

    @abstractmethod
    def zeros(self, length: int) -> Any:
        """Create a zeroed buffer of this kind."""
        raise NotImplementedError

    @abstractmethod
    def accumulate(self, target: Any, shares: Any) -> None:
        """Add shares into target, or raise without mutating it."""
        raise NotImplementedError


@define(frozen=True)
class IntegerAdapter(NumericAdapter):
    """
    Adapter for signed fixed-width integer buffers.

    Shares travel as int64 arrays until they are added into the target,
    which keeps the +-1 remainder adjustments free of wraparound.
    """

    kind: NumericKind
    dtype: np.dtype
    integral: ClassVar[bool] = True

    @property
    def minimum(self) -> int:
        return int(np.iinfo(self.dtype).min)

    @property
    def maximum(self) -> int:
        return int(np.iinfo(self.dtype).max)

    def coerce_value(self, value: Any) -> int:
        """
        Convert value to a Python int, truncating toward zero.

        Raises
        ------
        AllocationOverflowError
            If value is not finite or lies outside the kind's range.
        """
        try:
            coerced = int(value)
        except (OverflowError, ValueError) as e:
            raise AllocationOverflowError(
                format_error(
                    "value_overflow",
                    value=value,
                    kind=self.kind.value,
                    minimum=self.minimum,
                    maximum=self.maximum,
                )
            ) from e
        if not self.minimum <= coerced <= self.maximum:
            raise AllocationOverflowError(
                format_error(
                    "value_overflow",
                    value=value,
                    kind=self.kind.value,
                    minimum=self.minimum,
                    maximum=self.maximum,
                )
            )
        return coerced

    def zeros(self, length: int) -> np.ndarray:
        return np.zeros(length, dtype=self.dtype)

    def to_shares(self, raw_shares: np.ndarray) -> np.ndarray:
        """
        Convert float64 shares that are already integral into int64 shares.

        Both bounds are compared as exact powers of two so that float64
        rounding of ``maximum`` cannot let 2**63 slip through.
        """
        out_of_range = (raw_shares >= float(self.maximum + 1)) | (
            raw_shares < float(self.minimum)
        )
        if out_of_range.any():
            index = int(np.flatnonzero(out_of_range)[0])
            raise AllocationOverflowError(
                format_error(
                    "share_overflow",
                    kind=self.kind.value,
                    index=index,
                    share=raw_shares[index],
                )
            )
        return raw_shares.astype(np.int64)

    def check_shares(self, shares: np.ndarray) -> None:
        out_of_range = (shares > self.maximum) | (shares < self.minimum)
        if out_of_range.any():
            index = int(np.flatnonzero(out_of_range)[0])
            raise AllocationOverflowError(
                format_error(
                    "share_overflow",
                    kind=self.kind.value,
                    index=index,
                    share=int(shares[index]),
                )
            )

    def accumulate(self, target: np.ndarray, shares: np.ndarray) -> None:
        self.check_shares(shares)
        # headroom stays inside int64 because shares are already in range
        current = target.astype(np.int64)
        upper = self.maximum - np.maximum(shares, 0)
        lower = self.minimum - np.minimum(shares, 0)
        overflowing = (current > upper) | (current < lower)
        if overflowing.any():
            raise AllocationOverflowError(
                format_error(
                    "accumulation_overflow",
                    kind=self.kind.value,
                    index=int(np.flatnonzero(overflowing)[0]),
                )
            )
        target += shares.astype(self.dtype)


@define(frozen=True)
class RealAdapter(NumericAdapter):
    """Adapter for float32 and float64 buffers."""

    kind: NumericKind
    dtype: np.dtype

    def coerce_value(self, value: Any) -> np.floating:
        info = np.finfo(self.dtype)
        message = format_error(
            "value_overflow",
            value=value,
            kind=self.kind.value,
            minimum=info.min,
            maximum=info.max,
        )
        try:
            with np.errstate(over="ignore"):
                coerced = self.dtype.type(float(value))
        except OverflowError as e:
            raise AllocationOverflowError(message) from e
        if not np.isfinite(coerced):
            raise AllocationOverflowError(message)
        return coerced

    def zeros(self, length: int) -> np.ndarray:
        return np.zeros(length, dtype=self.dtype)

    def shares(
        self, value: np.floating, weights: np.ndarray, weight_sum: float
    ) -> np.ndarray:
        """Compute ``value * weight / weight_sum`` in this kind's precision."""
        with np.errstate(all="ignore"):
            shares = value * weights.astype(self.dtype) / self.dtype.type(weight_sum)
        finite = np.isfinite(shares)
        if not finite.all():
            index = int(np.flatnonzero(~finite)[0])
            raise AllocationOverflowError(
                format_error(
                    "share_overflow",
                    kind=self.kind.value,
                    index=index,
                    share=shares[index],
                )
            )
        return shares

    def total(self, shares: np.ndarray) -> np.floating:
        return shares.sum(dtype=self.dtype)

    def drift_tolerance(self) -> float:
        """Largest relative error accepted after the drift correction."""
        return float(np.sqrt(np.finfo(self.dtype).eps))

    def accumulate(self, target: np.ndarray, shares: np.ndarray) -> None:
        with np.errstate(over="ignore", invalid="ignore"):
            updated = target + shares
        overflowing = ~np.isfinite(updated) & np.isfinite(target)
        if overflowing.any():
            raise AllocationOverflowError(
                format_error(
                    "accumulation_overflow",
                    kind=self.kind.value,
                    index=int(np.flatnonzero(overflowing)[0]),
                )
            )
        target[...] = updated


@define(frozen=True)
class DecimalAdapter(NumericAdapter):
    """
    Adapter for sequences of ``decimal.Decimal``.

    Arithmetic runs in the active decimal context, so precision follows
    ``decimal.getcontext()``.
    """

    kind: NumericKind = NumericKind.DECIMAL

    def coerce_value(self, value: Any) -> Decimal:
        if isinstance(value, np.integer):
            value = int(value)
        elif isinstance(value, np.floating):
            value = float(value)
        try:
            coerced = value if isinstance(value, Decimal) else Decimal(value)
        except (TypeError, decimal.InvalidOperation) as e:
            raise AllocationOverflowError(
                format_error(
                    "value_overflow",
                    value=value,
                    kind=self.kind.value,
                    minimum="-Infinity",
                    maximum="Infinity",
                )
            ) from e
        if not coerced.is_finite():
            raise AllocationOverflowError(
                format_error(
                    "value_overflow",
                    value=value,
                    kind=self.kind.value,
                    minimum="-Infinity",
                    maximum="Infinity",
                )
            )
        return coerced

    def zeros(self, length: int) -> list[Decimal]:
        return [Decimal(0)] * length

    def shares(
        self, value: Decimal, weights: np.ndarray, weight_sum: float
    ) -> list[Decimal]:
        divisor = Decimal(weight_sum)
        shares = []
        for i, weight in enumerate(weights.tolist()):
            try:
                shares.append(value * Decimal(weight) / divisor)
            except (decimal.Overflow, decimal.InvalidOperation) as e:
                raise AllocationOverflowError(
                    format_error(
                        "share_overflow", kind=self.kind.value, index=i, share=e
                    )
                ) from e
        return shares

    def total(self, shares: list[Decimal]) -> Decimal:
        return sum(shares, Decimal(0))

    def drift_tolerance(self) -> Decimal:
        """Largest relative error accepted after the drift correction."""
        return Decimal(10) ** -(decimal.getcontext().prec // 2)

    def accumulate(self, target: MutableSequence, shares: list[Decimal]) -> None:
        updated = []
        for i, (current, share) in enumerate(zip(target, shares)):
            try:
                updated.append(current + share)
            except decimal.Overflow as e:
                raise AllocationOverflowError(
                    format_error("accumulation_overflow", kind=self.kind.value, index=i)
                ) from e
        for i, value in enumerate(updated):
            target[i] = value


_ADAPTERS: dict[NumericKind, NumericAdapter] = {
    NumericKind.INT32: IntegerAdapter(NumericKind.INT32, np.dtype(np.int32)),
    NumericKind.INT64: IntegerAdapter(NumericKind.INT64, np.dtype(np.int64)),
    NumericKind.INTP: IntegerAdapter(NumericKind.INTP, np.dtype(np.intp)),
    NumericKind.FLOAT32: RealAdapter(NumericKind.FLOAT32, np.dtype(np.float32)),
    NumericKind.FLOAT64: RealAdapter(NumericKind.FLOAT64, np.dtype(np.float64)),
    NumericKind.DECIMAL: DecimalAdapter(),
}

# intp shares its dtype with int64 on 64-bit platforms, so it is only
# selected when requested explicitly
_DTYPE_KINDS: dict[np.dtype, NumericKind] = {
    np.dtype(np.int32): NumericKind.INT32,
    np.dtype(np.int64): NumericKind.INT64,
    np.dtype(np.float32): NumericKind.FLOAT32,
    np.dtype(np.float64): NumericKind.FLOAT64,
}

SUPPORTED_KINDS = [kind.value for kind in NumericKind]


def get_adapter(kind: NumericKind | str) -> NumericAdapter:
    """
    Get the adapter for a numeric kind.

    Parameters
    ----------
    kind
        A NumericKind member or its name/value (case-insensitive)

    Returns
    -------
    NumericAdapter
        The adapter for that kind

    Raises
    ------
    UnsupportedNumericKindError
        If the kind is not recognized
    """
    if isinstance(kind, NumericKind):
        return _ADAPTERS[kind]
    name = str(kind).lower()
    for member in NumericKind:
        if name in (member.value, member.name.lower()):
            return _ADAPTERS[member]
    raise UnsupportedNumericKindError(
        format_error(
            "invalid_numeric_kind",
            name=kind,
            suggestion=suggest_similar(name, SUPPORTED_KINDS),
        )
    )


def _unsupported_dtype(dtype: np.dtype) -> UnsupportedNumericKindError:
    if dtype.kind == "u":
        detail = f"Unsigned integer dtype {dtype} cannot hold negative adjustments."
        suggestion = "Use a signed dtype, e.g. np.int64."
    elif dtype.kind == "i":
        detail = f"Integer dtype {dtype} is narrower than 32 bits."
        suggestion = "Use np.int32 or np.int64 and narrow afterwards."
    elif dtype.kind == "b":
        detail = "Boolean buffers cannot hold distributed quantities."
        suggestion = "Use np.int64."
    elif dtype.kind == "f":
        detail = f"Floating dtype {dtype} is not single or double precision."
        suggestion = "Use np.float32 or np.float64."
    else:
        detail = f"Dtype {dtype} has no numeric adapter."
        suggestion = "Use a signed integer, float32/float64, or Decimal buffer."
    return UnsupportedNumericKindError(
        format_error(
            "unsupported_numeric_kind",
            kind=str(dtype),
            detail=detail,
            suggestion=suggestion,
            supported=", ".join(SUPPORTED_KINDS),
        )
    )


def _all_decimal(values: Any) -> bool:
    return all(isinstance(value, Decimal) for value in values)


def _infer_kind(target: Any) -> NumericKind:
    if isinstance(target, np.ndarray):
        if target.ndim != 1:
            raise InvalidShapeError(
                format_error(
                    "not_one_dimensional", vector_name="Target", shape=target.shape
                )
            )
        if target.dtype == object:
            if _all_decimal(target):
                return NumericKind.DECIMAL
            raise UnsupportedNumericKindError(
                format_error(
                    "unsupported_numeric_kind",
                    kind="object",
                    detail="Object arrays must contain only decimal.Decimal values.",
                    suggestion="Convert elements with Decimal(...).",
                    supported=", ".join(SUPPORTED_KINDS),
                )
            )
        if target.dtype not in _DTYPE_KINDS:
            raise _unsupported_dtype(target.dtype)
        return _DTYPE_KINDS[target.dtype]
    if isinstance(target, MutableSequence) and _all_decimal(target):
        return NumericKind.DECIMAL
    raise UnsupportedNumericKindError(
        format_error(
            "unsupported_numeric_kind",
            kind=type(target).__name__,
            detail="Plain sequences are only accepted when every element is a Decimal.",
            suggestion="Pass a numpy array, e.g. np.zeros(n, dtype=np.int64).",
            supported=", ".join(SUPPORTED_KINDS),
        )
    )


def resolve_adapter(target: Any, kind: NumericKind | str | None = None) -> NumericAdapter:
    """
    Resolve the adapter for a target buffer.

    Parameters
    ----------
    target
        A one-dimensional numpy array, or a mutable sequence of Decimal
    kind
        Optional explicit kind. Must be compatible with the target's dtype;
        needed to select ``intp``.

    Returns
    -------
    NumericAdapter
        The adapter that will write into the target

    Raises
    ------
    UnsupportedNumericKindError
        If the target's kind is unsupported or contradicts ``kind``
    InvalidShapeError
        If the target array is not one-dimensional
    """
    inferred = _infer_kind(target)
    if kind is None:
        return _ADAPTERS[inferred]

    adapter = get_adapter(kind)
    if isinstance(adapter, DecimalAdapter):
        compatible = inferred is NumericKind.DECIMAL
    else:
        compatible = isinstance(target, np.ndarray) and target.dtype == adapter.dtype
    if not compatible:
        raise UnsupportedNumericKindError(
            format_error(
                "unsupported_numeric_kind",
                kind=adapter.kind.value,
                detail=f"Target holds {inferred.value} values, not {adapter.kind.value}.",
                suggestion="Omit kind to infer it from the target, or convert the target.",
                supported=", ".join(SUPPORTED_KINDS),
            )
        )
    return adapter
