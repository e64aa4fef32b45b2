"""
Numerical methods for the immersed boundary core.

This module provides:
- Inverse-distance weighting with an expanding donor search cube
"""

from .weighting import (
    apply_weighting,
    inverse_distance_weighting,
    normalize,
)

__all__ = [
    'apply_weighting',
    'inverse_distance_weighting',
    'normalize',
]
