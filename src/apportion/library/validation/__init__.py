"""
Validation for the apportion library.

"""

from .inputs import (
    as_weight_vector,
    validate_not_empty,
    validate_shapes,
)

__all__ = [
    "as_weight_vector",
    "validate_not_empty",
    "validate_shapes",
]
