"""
Weight sampler interface.

A sampler produces raw real-valued weights for a requested number of slots.
Samplers add one layer of samples into an existing buffer, so several
sources can be stacked before policies run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

import numpy as np


class WeightSampler(ABC):
    """
    Abstract base class for weight sources.

    ``deterministic`` samplers return the same weights on every call, so
    redrawing them cannot resolve weights that cancel.
    """

    deterministic: ClassVar[bool] = False

    @abstractmethod
    def add_sample(self, out: np.ndarray) -> None:
        """Add one layer of samples into ``out`` in place."""
        raise NotImplementedError

    def sample(self, count: int) -> np.ndarray:
        """Return a fresh float64 vector of ``count`` sampled weights."""
        weights = np.zeros(count, dtype=np.float64)
        self.add_sample(weights)
        return weights
