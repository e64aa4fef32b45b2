"""
Space Factory Module.

Builds the partition, geometry, node arena and model parameters from a
SimulationConfig so that scripts and tests share one initialisation path.
"""

from typing import Tuple

from .params import ModelParams
from .space import Space, initialize_state
from ..config.schema import SimulationConfig, ShapeConfig, GridConfig, IBMConfig
from ..errors import ConfigurationError
from ..geometry.shapes import Geometry, Shape, Sphere, box_polyhedron
from ..grid.partition import Partition


def build_partition(grid: GridConfig, ibm: IBMConfig) -> Partition:
    return Partition.create(
        domain=[grid.x, grid.y, grid.z],
        nodes=grid.nodes,
        ng=grid.halo,
        gl=grid.ghost_layers,
        tiny_factor=ibm.tiny_factor,
        max_search_radius=ibm.max_search_radius,
    )


def build_shape(cfg: ShapeConfig) -> Shape:
    common = dict(
        velocity=cfg.velocity,
        angular_velocity=cfg.angular_velocity,
        moving=cfg.moving,
        friction=cfg.friction,
        wall_temperature=cfg.wall_temperature,
    )
    if cfg.kind == "sphere":
        center = cfg.center if cfg.center is not None else [0.0, 0.0, 0.0]
        return Sphere(center=center, radius=cfg.radius, **common)
    if cfg.kind == "box":
        if cfg.center is not None:
            common['center'] = cfg.center
        return box_polyhedron(cfg.lower, cfg.upper, **common)
    raise ConfigurationError(f"Unknown shape kind '{cfg.kind}'")


def build_geometry(config: SimulationConfig) -> Geometry:
    return Geometry([build_shape(s) for s in config.shapes])


def build_model(config: SimulationConfig) -> ModelParams:
    if config.ibm.ibm_layer < 0:
        raise ConfigurationError(f"ibm_layer must be >= 0, got {config.ibm.ibm_layer}")
    return ModelParams(
        gamma=config.flow.gamma,
        gas_r=config.flow.gas_r,
        ibm_layer=config.ibm.ibm_layer,
    )


def create_space(config: SimulationConfig) -> Tuple[Space, ModelParams]:
    """
    Create a space with uniform initial state from a configuration.
    
    Returns
    -------
    space : Space
        Unclassified space; call compute_geometry_domain next.
    model : ModelParams
    """
    part = build_partition(config.grid, config.ibm)
    model = build_model(config)
    space = Space.create(part, build_geometry(config), time_levels=config.ibm.time_levels)
    flow = config.flow
    temperature = flow.pressure / (flow.density * flow.gas_r)
    initialize_state(space, flow.velocity, flow.pressure, temperature,
                     flow.gamma, flow.gas_r)
    return space, model
