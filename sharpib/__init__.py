"""
Sharp-interface immersed boundary treatment for Cartesian CFD grids.

Solid bodies (analytical spheres or triangulated polyhedra) are overlaid on a
structured node grid. Nodes are classified against the geometry and ghost
nodes inside the bodies are reconstructed by the method of image so that the
flow solver sees the correct wall boundary condition.

Entry points:
    - compute_geometry_domain: classify nodes after every remesh (body motion)
    - apply_immersed_boundary_treatment: refresh ghost nodes once per stage
"""

__version__ = "0.1.0"

from .solvers.classifier import compute_geometry_domain
from .solvers.immersed_boundary import apply_immersed_boundary_treatment

__all__ = [
    'compute_geometry_domain',
    'apply_immersed_boundary_treatment',
]
