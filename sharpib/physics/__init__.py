"""
Gas physics for the immersed boundary core.
"""

from .gas import (
    primitive_by_conservative,
    conservative_by_primitive,
    density_by_state,
    primitive_field,
)

__all__ = [
    'primitive_by_conservative',
    'conservative_by_primitive',
    'density_by_state',
    'primitive_field',
]
