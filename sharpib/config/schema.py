"""
Configuration schema for the immersed boundary core.

Dataclass-based configuration that can be loaded from YAML or constructed programmatically.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, List


@dataclass
class GridConfig:
    """Cartesian node grid configuration."""
    
    x: List[float] = field(default_factory=lambda: [-1.5, 1.5])   # Domain bounds
    y: List[float] = field(default_factory=lambda: [-1.5, 1.5])
    z: List[float] = field(default_factory=lambda: [-1.5, 1.5])
    nodes: List[int] = field(default_factory=lambda: [31, 31, 31])  # Nodes incl. domain boundary; 1 = collapsed axis
    halo: int = 2              # Exterior node layers on each side of active axes
    ghost_layers: int = 2      # Ghost node layers inside solid bodies


@dataclass
class FlowConfig:
    """Gas model and initial uniform state."""
    
    gamma: float = 1.4
    gas_r: float = 287.058     # Specific gas constant [J/(kg K)]
    density: float = 1.225
    velocity: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    pressure: float = 101325.0


@dataclass
class IBMConfig:
    """Immersed boundary treatment settings."""
    
    ibm_layer: int = 1         # Ghost layers reconstructed by the method of image
    max_search_radius: Optional[int] = None  # Donor search cutoff (None = 2 * halo)
    tiny_factor: float = 1.0e-3  # Weight clamp length relative to min spacing
    time_levels: int = 2       # Retained time levels in the state array


@dataclass
class ShapeConfig:
    """
    One solid body.
    
    kind is 'sphere' (center + radius) or 'box' (lower + upper corners,
    triangulated into a closed polyhedron).
    """
    
    kind: str = "sphere"
    center: Optional[List[float]] = None   # Sphere centre; box centroid if None
    radius: float = 1.0
    lower: List[float] = field(default_factory=lambda: [-0.5, -0.5, -0.5])
    upper: List[float] = field(default_factory=lambda: [0.5, 0.5, 0.5])
    velocity: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    angular_velocity: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    moving: bool = False
    friction: float = 1.0      # > 0: no-slip wall, <= 0: slip wall
    wall_temperature: float = -1.0  # < 0: adiabatic wall, otherwise isothermal [K]


@dataclass
class OutputConfig:
    """Output configuration."""
    
    directory: str = "output/ibm"
    case_name: str = "immersed_body"
    write_vtk: bool = True
    plot: bool = False


@dataclass
class SimulationConfig:
    """Complete configuration."""
    
    grid: GridConfig = field(default_factory=GridConfig)
    flow: FlowConfig = field(default_factory=FlowConfig)
    ibm: IBMConfig = field(default_factory=IBMConfig)
    shapes: List[ShapeConfig] = field(default_factory=list)
    output: OutputConfig = field(default_factory=OutputConfig)
    
    def to_dict(self) -> dict:
        """Convert to nested dictionary."""
        return asdict(self)
