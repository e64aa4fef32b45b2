"""
Structured node grid partition.

Node layout per axis (x, y, z):

    halo (ng) | interior nodes (m) | halo (ng)
    
    - total nodes n = m + 2 * ng on active axes, n = m = 1 on a collapsed axis
    - interior node i sits at  s = s_min + (i - ng) * d
    - the interior range [ns_min, ns_max) covers the domain including its
      boundary nodes; halo nodes are exterior and carry owner id NONE

Node arrays are stored [k, j, i] (z, y, x); triples and points handed around
in code are ordered (x, y, z).
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .search_path import compute_search_path
from ..constants import X, Y, Z, DIMS, TINY_FACTOR, interior_slice
from ..errors import ConfigurationError


@dataclass
class Partition:
    """
    Grid metadata consumed read-only by the classifier and the driver.
    
    Attributes
    ----------
    m : ndarray (3,)
        Interior nodes per axis (including the domain boundary nodes).
    n : ndarray (3,)
        Total nodes per axis including halo.
    ngs : ndarray (3,)
        Halo layers per axis (0 on a collapsed axis).
    ng : int
        Halo layers on active axes.
    gl : int
        Ghost layers of the immersed boundary treatment.
    domain : ndarray (3, 2)
        Physical bounds [min, max] per axis.
    d, dd : ndarray (3,)
        Node spacing and its reciprocal.
    ns_min, ns_max : ndarray (3,)
        Interior node range per axis, max exclusive.
    path, path_sep : ndarray
        Neighbour search template (see search_path).
    tiny : float
        Lower clamp on squared distances in inverse-distance weighting.
    max_search_radius : int
        Largest donor search half-width before giving up.
    """
    m: np.ndarray
    n: np.ndarray
    ngs: np.ndarray
    ng: int
    gl: int
    domain: np.ndarray
    d: np.ndarray
    dd: np.ndarray
    ns_min: np.ndarray
    ns_max: np.ndarray
    path: np.ndarray
    path_sep: np.ndarray
    tiny: float
    max_search_radius: int
    
    @classmethod
    def create(cls,
               domain: Sequence[Sequence[float]],
               nodes: Sequence[int],
               ng: int = 2,
               gl: int = 2,
               tiny_factor: float = TINY_FACTOR,
               max_search_radius: Optional[int] = None) -> 'Partition':
        """
        Build a partition from domain bounds and node counts.
        
        Parameters
        ----------
        domain : 3 pairs of float
            [[xmin, xmax], [ymin, ymax], [zmin, zmax]].
        nodes : 3 ints
            Interior nodes per axis; 1 collapses the axis (2-D runs).
        ng : int
            Halo layers on active axes.
        gl : int
            Ghost layers, also the depth of the neighbour search path.
        tiny_factor : float
            Weight clamp length as a fraction of the minimum spacing.
        max_search_radius : int, optional
            Donor search cutoff; defaults to 2 * ng.
        """
        domain = np.asarray(domain, dtype=np.float64).reshape(DIMS, 2)
        m = np.asarray(nodes, dtype=np.int64).reshape(DIMS)
        
        if np.any(m < 1):
            raise ConfigurationError(f"Node counts must be >= 1, got {m.tolist()}")
        if ng < 0:
            raise ConfigurationError(f"Halo layers must be >= 0, got {ng}")
        if gl < 1:
            raise ConfigurationError(f"Ghost layers must be >= 1, got {gl}")
        if ng < gl:
            raise ConfigurationError(f"Halo layers ({ng}) must cover the ghost layers ({gl})")
        
        active = m > 1
        if not np.any(active):
            raise ConfigurationError("At least one axis needs more than one node")
        
        d = np.ones(DIMS, dtype=np.float64)
        for s in range(DIMS):
            if active[s]:
                length = domain[s, 1] - domain[s, 0]
                if length <= 0.0:
                    raise ConfigurationError(
                        f"Domain bounds on axis {s} must be increasing, got {domain[s].tolist()}")
                d[s] = length / (m[s] - 1)
        dd = 1.0 / d
        
        ngs = np.where(active, ng, 0).astype(np.int64)
        n = m + 2 * ngs
        
        path, path_sep = compute_search_path(gl, active=tuple(bool(a) for a in active))
        
        if max_search_radius is None:
            max_search_radius = 2 * ng
        
        tiny_length = tiny_factor * float(np.min(d[active]))
        
        return cls(
            m=m, n=n, ngs=ngs, ng=ng, gl=gl,
            domain=domain, d=d, dd=dd,
            ns_min=ngs.copy(), ns_max=ngs + m,
            path=path, path_sep=path_sep,
            tiny=tiny_length * tiny_length,
            max_search_radius=int(max_search_radius),
        )
    
    # =========================================================================
    # Shapes and slices
    # =========================================================================
    
    @property
    def shape(self) -> Tuple[int, int, int]:
        """Node array shape (nz, ny, nx)."""
        return (int(self.n[Z]), int(self.n[Y]), int(self.n[X]))
    
    @property
    def s_min(self) -> np.ndarray:
        """Lower domain corner (x, y, z)."""
        return np.ascontiguousarray(self.domain[:, 0])
    
    @property
    def active(self) -> np.ndarray:
        """Axes with more than one node."""
        return self.m > 1
    
    @property
    def interior(self) -> tuple:
        """[k, j, i] slice of the interior region."""
        return interior_slice(self.ns_min, self.ns_max)
    
    # =========================================================================
    # Index <-> physical space
    # =========================================================================
    
    def node_space(self, s: float, axis: int) -> int:
        """Nearest node index to the coordinate s along an axis (unclamped)."""
        return int(np.floor((s - self.domain[axis, 0]) * self.dd[axis] + 0.5)) + int(self.ngs[axis])
    
    def valid_node_space(self, n: int, axis: int) -> int:
        """Clamp a node index into the interior range of an axis."""
        return int(min(max(n, self.ns_min[axis]), self.ns_max[axis] - 1))
    
    def point_space(self, n: int, axis: int) -> float:
        """Physical coordinate of node index n along an axis."""
        return float(self.domain[axis, 0] + (n - self.ngs[axis]) * self.d[axis])
    
    def point(self, i: int, j: int, k: int) -> np.ndarray:
        """Physical point (x, y, z) of node (i, j, k)."""
        return self.domain[:, 0] + (np.array([i, j, k]) - self.ngs) * self.d
    
    def node_index(self, p: Sequence[float]) -> np.ndarray:
        """Nearest node (i, j, k) to a physical point, unclamped."""
        return np.array([self.node_space(p[s], s) for s in range(DIMS)], dtype=np.int64)
    
    def index_node(self, k: int, j: int, i: int) -> int:
        """Linear index of node (i, j, k) in a C-ordered [k, j, i] array."""
        return int((k * self.n[Y] + j) * self.n[X] + i)
    
    def coordinates(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Physical coordinates of all nodes along each axis, halo included."""
        return tuple(self.domain[s, 0] + (np.arange(self.n[s]) - self.ngs[s]) * self.d[s]
                     for s in range(DIMS))
    
    # =========================================================================
    # Bounding boxes
    # =========================================================================
    
    def box_range(self, box: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Interior node range covering a physical bounding box.
        
        Parameters
        ----------
        box : ndarray, shape (3, 2)
            [min, max] per axis.
            
        Returns
        -------
        lo, hi : ndarray (3,)
            Node range per axis (x, y, z), hi exclusive, clamped to the
            interior so that indexing never leaves the array.
        """
        lo = np.empty(DIMS, dtype=np.int64)
        hi = np.empty(DIMS, dtype=np.int64)
        for s in range(DIMS):
            lo[s] = self.valid_node_space(self.node_space(box[s, 0], s), s)
            hi[s] = self.valid_node_space(self.node_space(box[s, 1], s), s) + 1
        return lo, hi
    
    def box_intersects(self, box: np.ndarray) -> bool:
        """Whether a bounding box overlaps the domain on every active axis."""
        for s in range(DIMS):
            if not self.active[s]:
                continue
            if box[s, 1] < self.domain[s, 0] or box[s, 0] > self.domain[s, 1]:
                return False
        return True
