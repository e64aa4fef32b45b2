"""
YAML configuration loader with validation.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Union
from dataclasses import fields, is_dataclass

from .schema import (
    SimulationConfig, GridConfig, FlowConfig, IBMConfig,
    ShapeConfig, OutputConfig,
)
from ..errors import ConfigurationError

SHAPE_KINDS = ('sphere', 'box')


def _coerce_type(value, field_type):
    """Coerce value to the expected field type."""
    # Handle string representations of numbers (e.g., "1.0e-3")
    if field_type == float and isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    if field_type == int and isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return value
    return value


def _dict_to_dataclass(cls, data: dict):
    """Convert a nested dictionary to a dataclass instance."""
    if not is_dataclass(cls):
        return data
    
    field_types = {f.name: f.type for f in fields(cls)}
    kwargs = {}
    
    for key, value in data.items():
        if key not in field_types:
            continue  # Skip unknown fields
        
        field_type = field_types[key]
        
        if is_dataclass(field_type) and isinstance(value, dict):
            kwargs[key] = _dict_to_dataclass(field_type, value)
        else:
            kwargs[key] = _coerce_type(value, field_type)
    
    return cls(**kwargs)


def _shape_from_dict(data: Dict[str, Any]) -> ShapeConfig:
    """Build a ShapeConfig, rejecting unknown shape kinds."""
    shape = _dict_to_dataclass(ShapeConfig, data)
    shape.kind = str(shape.kind).lower()
    if shape.kind not in SHAPE_KINDS:
        raise ConfigurationError(
            f"Unknown shape kind '{shape.kind}', expected one of {SHAPE_KINDS}")
    return shape


def load_yaml(path: Union[str, Path]) -> SimulationConfig:
    """
    Load configuration from a YAML file.
    
    Args:
        path: Path to YAML configuration file
        
    Returns:
        SimulationConfig instance
        
    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ConfigurationError: If a shape kind is unknown
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    
    with open(path) as f:
        data = yaml.safe_load(f)
    
    if data is None:
        data = {}
    
    return from_dict(data)


def from_dict(data: Dict[str, Any]) -> SimulationConfig:
    """
    Create SimulationConfig from a dictionary.
    
    Handles nested structures and applies defaults for missing values.
    """
    config_dict = {}
    
    if 'grid' in data:
        config_dict['grid'] = _dict_to_dataclass(GridConfig, data['grid'])
    
    if 'flow' in data:
        config_dict['flow'] = _dict_to_dataclass(FlowConfig, data['flow'])
    
    if 'ibm' in data:
        config_dict['ibm'] = _dict_to_dataclass(IBMConfig, data['ibm'])
    
    if 'shapes' in data:
        config_dict['shapes'] = [_shape_from_dict(s) for s in (data['shapes'] or [])]
    
    if 'output' in data:
        config_dict['output'] = _dict_to_dataclass(OutputConfig, data['output'])
    
    return SimulationConfig(**config_dict)


def apply_cli_overrides(config: SimulationConfig, args) -> SimulationConfig:
    """
    Apply command-line argument overrides to a configuration.
    
    Only overrides values that were explicitly set (not None).
    
    Args:
        config: Base configuration
        args: argparse.Namespace with CLI arguments
        
    Returns:
        Updated SimulationConfig
    """
    config_dict = config.to_dict()
    
    cli_mapping = {
        # Grid
        'nodes': ('grid', 'nodes'),
        'halo': ('grid', 'halo'),
        'ghost_layers': ('grid', 'ghost_layers'),
        
        # Immersed boundary
        'ibm_layer': ('ibm', 'ibm_layer'),
        'max_search_radius': ('ibm', 'max_search_radius'),
        
        # Output
        'output_dir': ('output', 'directory'),
        'case_name': ('output', 'case_name'),
        'plot': ('output', 'plot'),
    }
    
    for cli_name, config_path in cli_mapping.items():
        if hasattr(args, cli_name):
            value = getattr(args, cli_name)
            if value is not None:
                target = config_dict
                for key in config_path[:-1]:
                    target = target[key]
                target[config_path[-1]] = value
    
    return from_dict(config_dict)


def save_yaml(config: SimulationConfig, path: Union[str, Path]) -> None:
    """Save configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    
    with open(path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
