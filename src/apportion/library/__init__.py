"""
Main components for the apportion library.

Nothing is exported from this module, users should import from specific submodules:
- apportion.library.allocations (value distributors, normalization, remainder correction)
- apportion.library.distributors (sampling distributors)
- apportion.library.policies (weight policies)
- apportion.library.sampling (weight samplers)
- apportion.library.config (configuration models and loading)
"""

from __future__ import annotations
