"""
Configuration module for the immersed boundary core.

Provides YAML-based configuration with dataclass schema.
"""

from .schema import (
    SimulationConfig,
    GridConfig,
    FlowConfig,
    IBMConfig,
    ShapeConfig,
    OutputConfig,
)

from .loader import (
    load_yaml,
    from_dict,
    apply_cli_overrides,
    save_yaml,
)

__all__ = [
    # Schema classes
    'SimulationConfig',
    'GridConfig',
    'FlowConfig',
    'IBMConfig',
    'ShapeConfig',
    'OutputConfig',
    # Loader functions
    'load_yaml',
    'from_dict',
    'apply_cli_overrides',
    'save_yaml',
]
