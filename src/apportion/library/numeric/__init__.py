"""
Numeric kind adapters for the apportion library.

"""

from apportion.library.numeric.adapters import (
    SUPPORTED_KINDS,
    DecimalAdapter,
    IntegerAdapter,
    NumericAdapter,
    NumericKind,
    RealAdapter,
    get_adapter,
    resolve_adapter,
)

__all__ = [
    "SUPPORTED_KINDS",
    "DecimalAdapter",
    "IntegerAdapter",
    "NumericAdapter",
    "NumericKind",
    "RealAdapter",
    "get_adapter",
    "resolve_adapter",
]
