"""
Solver components of the immersed boundary core.

This package provides:
    - Node arena and simulation space
    - Node classifier (reset, ownership, interfacial/ghost layers)
    - Boundary treatment driver (method of image, layer extrapolation)
    - Classification diagnostics and a config-driven factory
"""

from .params import ModelParams

from .space import (
    NodeFields,
    Space,
    initialize_state,
)

from .classifier import (
    compute_geometry_domain,
    initialize_geometry_domain,
    identify_geometry_node,
    identify_interfacial_node,
    reconstruct_exposed_nodes,
)

from .immersed_boundary import (
    apply_immersed_boundary_treatment,
    compute_geometric_data,
    flow_reconstruction,
    method_of_image,
)

from .diagnostics import (
    ClassificationSummary,
    classification_summary,
    check_classification,
)

from .factory import (
    build_partition,
    build_geometry,
    build_model,
    create_space,
)

__all__ = [
    'ModelParams',
    # Space
    'NodeFields',
    'Space',
    'initialize_state',
    # Classifier
    'compute_geometry_domain',
    'initialize_geometry_domain',
    'identify_geometry_node',
    'identify_interfacial_node',
    'reconstruct_exposed_nodes',
    # Boundary treatment
    'apply_immersed_boundary_treatment',
    'compute_geometric_data',
    'flow_reconstruction',
    'method_of_image',
    # Diagnostics
    'ClassificationSummary',
    'classification_summary',
    'check_classification',
    # Factory
    'build_partition',
    'build_geometry',
    'build_model',
    'create_space',
]
