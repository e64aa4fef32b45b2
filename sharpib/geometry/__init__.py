"""
Immersed solid geometry.

This module provides:
- Sphere and Polyhedron shapes sharing one geometric query interface
- The Geometry collection (1-based shape ids on grid nodes)
- Numba kernels for point-in-polyhedron and face projection
"""

from .shapes import (
    Shape,
    Sphere,
    Polyhedron,
    Geometry,
    box_polyhedron,
)

from .computational import (
    dot,
    cross,
    norm,
    dist2,
    orthogonal_space,
    closest_point_on_triangle,
    point_in_polyhedron,
    compute_intersection,
)

__all__ = [
    # Shapes
    'Shape',
    'Sphere',
    'Polyhedron',
    'Geometry',
    'box_polyhedron',
    # Kernels
    'dot',
    'cross',
    'norm',
    'dist2',
    'orthogonal_space',
    'closest_point_on_triangle',
    'point_in_polyhedron',
    'compute_intersection',
]
