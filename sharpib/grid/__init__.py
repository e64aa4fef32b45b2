"""
Grid metadata for the immersed boundary core.

This module provides:
- Partition: node extents, halo, spacing and index/physical mapping
- The layer-ordered neighbour search path used for node classification
"""

from .partition import Partition
from .search_path import compute_search_path, layer_of

__all__ = [
    'Partition',
    'compute_search_path',
    'layer_of',
]
