"""
I/O module for the immersed boundary core.

Provides a legacy VTK writer and mid-plane slice plots of classified spaces.
"""

from .vtk_writer import write_vtk
from .plotting import plot_classification_slice

__all__ = ['write_vtk', 'plot_classification_slice']
