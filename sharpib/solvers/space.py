"""
Node arena and simulation space.

All per-node data lives in a handful of arrays indexed [k, j, i] (structure
of arrays), owned by one Space together with the partition and the geometry.
Phase functions receive the Space and mutate the arrays in place; no node is
allocated on its own.

Node fields:
    gid      owner: 0 fluid, s > 0 shape s (1-based), NONE exterior (halo)
    fid      nearest face of the owning polyhedron (0 for spheres, NONE if unset)
    lid      interfacial layer: 0 if no heterogeneous neighbour within gl layers,
             else the layer of the nearest one
    gst      ghost layer: 0 if not a ghost node, else the layer of the nearest
             fluid neighbour; ghost nodes are interfacial solid nodes
    pending  freed from a moving shape at the last reset and awaiting
             reconstruction as a fluid node
    U        conservative state, shape (time_levels, nz, ny, nx, 5)

Invariant after classification: gst != 0 => lid != 0 => gid > 0, and no node
is left pending.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Sequence, Set

from ..constants import NONE, N_CONS, N_PRIM, RHO_IDX, P_IDX, T_IDX
from ..grid.partition import Partition
from ..geometry.shapes import Geometry
from ..physics.gas import conservative_by_primitive, density_by_state


@dataclass(eq=False)
class NodeFields:
    """Structure-of-arrays storage of every grid node."""
    
    gid: np.ndarray
    fid: np.ndarray
    lid: np.ndarray
    gst: np.ndarray
    pending: np.ndarray
    U: np.ndarray
    
    @classmethod
    def allocate(cls, part: Partition, time_levels: int = 2) -> 'NodeFields':
        """
        Allocate node fields for a partition.
        
        Interior nodes start as fluid, halo nodes as exterior (NONE).
        """
        shape = part.shape
        gid = np.full(shape, NONE, dtype=np.int64)
        gid[part.interior] = 0
        return cls(
            gid=gid,
            fid=np.full(shape, NONE, dtype=np.int64),
            lid=np.zeros(shape, dtype=np.int64),
            gst=np.zeros(shape, dtype=np.int64),
            pending=np.zeros(shape, dtype=np.bool_),
            U=np.zeros((time_levels,) + shape + (N_CONS,)),
        )
    
    @property
    def time_levels(self) -> int:
        return self.U.shape[0]


@dataclass(eq=False)
class Space:
    """Top-level context: grid partition, node arena and immersed geometry."""
    
    part: Partition
    node: NodeFields
    geo: Geometry
    # 1-based ids of stationary shapes whose nodes this space has claimed
    claimed: Set[int] = field(default_factory=set)
    
    @classmethod
    def create(cls, part: Partition, geo: Geometry, time_levels: int = 2) -> 'Space':
        return cls(part=part, node=NodeFields.allocate(part, time_levels), geo=geo)


def initialize_state(space: Space, velocity: Sequence[float], pressure: float,
                     temperature: float, gamma: float, gas_r: float) -> None:
    """
    Fill every node at every time level with one uniform state.
    
    Density follows from the ideal-gas relation.
    """
    Uo = np.zeros(N_PRIM)
    Uo[1:4] = np.asarray(velocity, dtype=np.float64)
    Uo[P_IDX] = pressure
    Uo[T_IDX] = temperature
    Uo[RHO_IDX] = density_by_state(pressure, temperature, gas_r)
    space.node.U[...] = conservative_by_primitive(gamma, Uo)
