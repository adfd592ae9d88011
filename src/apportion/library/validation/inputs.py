"""
Input validation for weighted value distribution.

Validation functions:
- Weight vector coercion (float64, one-dimensional, in place when possible)
- Target/weight shape pairing
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from apportion.library.error_messages import format_error
from apportion.library.exceptions import InvalidShapeError


def as_weight_vector(weights: np.ndarray | Sequence[float]) -> np.ndarray:
    """
    Return weights as a one-dimensional float64 array.

    A float64 ndarray is returned as-is so normalization mutates the
    caller's buffer in place. Any other sequence is copied.

    Raises
    ------
    InvalidShapeError
        If the weights are not one-dimensional
    """
    vector = np.asarray(weights, dtype=np.float64)
    if vector.ndim != 1:
        raise InvalidShapeError(
            format_error(
                "not_one_dimensional", vector_name="Weights", shape=vector.shape
            )
        )
    return vector


def validate_not_empty(vector: Any, vector_name: str) -> None:
    """
    Validate that a vector has at least one slot.

    Raises
    ------
    InvalidShapeError
        If the vector is empty
    """
    if len(vector) < 1:
        raise InvalidShapeError(format_error("empty_vector", vector_name=vector_name))


def validate_shapes(weights: np.ndarray, target: Any) -> None:
    """
    Validate that weights and target can be paired slot by slot.

    Parameters
    ----------
    weights
        Weight vector
    target
        Target buffer

    Raises
    ------
    InvalidShapeError
        If either vector is empty or their lengths differ
    """
    validate_not_empty(target, "target")
    validate_not_empty(weights, "weight vector")
    if len(weights) != len(target):
        raise InvalidShapeError(
            format_error(
                "shape_mismatch",
                weight_count=len(weights),
                target_count=len(target),
            )
        )
