"""
Solid shapes immersed in the node grid.

Two representations share one geometric query interface:

    Sphere      analytical body given by centre and radius
    Polyhedron  closed triangle mesh with outward counter-clockwise faces

Every shape carries its rigid-body kinematics (centroid, linear and angular
velocity), a motion flag, the wall friction switch (> 0 no-slip, <= 0 slip)
and a wall temperature (< 0 adiabatic, otherwise isothermal).

Interface used by the classifier and the boundary treatment:

    box                  bounding box, shape (3, 2)
    contains(p, tiny)    -> (inside, nearest face id)
    project(p, fid)      -> (boundary point, outward unit normal)
    surface_velocity(p)  -> V + W x (p - O)
    claim_nodes(...)     ownership kernel over a node range
    advance(dt)          rigid update of the pose
"""

import numpy as np
from dataclasses import dataclass, field
from numba import njit
from typing import Iterator, List, Sequence, Tuple

from .computational import (
    compute_intersection,
    cross,
    dist2,
    face_normals,
    point_in_polyhedron,
)
from ..errors import GeometryError


def _vec3(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).reshape(3).copy()


def _rotation_matrix(omega: np.ndarray, dt: float) -> np.ndarray:
    """Rotation by |omega|*dt about omega (Rodrigues formula)."""
    speed = np.linalg.norm(omega)
    if speed == 0.0 or dt == 0.0:
        return np.eye(3)
    axis = omega / speed
    angle = speed * dt
    K = np.array([[0.0, -axis[2], axis[1]],
                  [axis[2], 0.0, -axis[0]],
                  [-axis[1], axis[0], 0.0]])
    return np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * (K @ K)


# =============================================================================
# Ownership kernels
# =============================================================================

@njit(cache=True)
def _claim_sphere_kernel(gid, fid, pending, lo, hi, s_min, d, ngs,
                         center, radius, shape_id):
    """Claim unowned nodes with |p - O|^2 <= R^2 (boundary inclusive)."""
    claimed = 0
    p = np.empty(3)
    r2 = radius * radius
    for k in range(lo[2], hi[2]):
        p[2] = s_min[2] + (k - ngs[2]) * d[2]
        for j in range(lo[1], hi[1]):
            p[1] = s_min[1] + (j - ngs[1]) * d[1]
            for i in range(lo[0], hi[0]):
                if gid[k, j, i] != 0:  # already classified
                    continue
                p[0] = s_min[0] + (i - ngs[0]) * d[0]
                if r2 >= dist2(center, p):
                    gid[k, j, i] = shape_id
                    fid[k, j, i] = 0
                    pending[k, j, i] = False
                    claimed += 1
    return claimed


@njit(cache=True)
def _claim_polyhedron_kernel(gid, fid, pending, lo, hi, s_min, d, ngs,
                             vertices, faces, tiny, shape_id):
    """Claim unowned nodes inside a triangulated polyhedron, caching the nearest face."""
    claimed = 0
    p = np.empty(3)
    for k in range(lo[2], hi[2]):
        p[2] = s_min[2] + (k - ngs[2]) * d[2]
        for j in range(lo[1], hi[1]):
            p[1] = s_min[1] + (j - ngs[1]) * d[1]
            for i in range(lo[0], hi[0]):
                if gid[k, j, i] != 0:
                    continue
                p[0] = s_min[0] + (i - ngs[0]) * d[0]
                inside, f = point_in_polyhedron(p, vertices, faces, tiny)
                if inside:
                    gid[k, j, i] = shape_id
                    fid[k, j, i] = f
                    pending[k, j, i] = False
                    claimed += 1
    return claimed


# =============================================================================
# Shapes
# =============================================================================

@dataclass(eq=False)
class Shape:
    """Common rigid-body state of an immersed solid."""
    
    center: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    moving: bool = False
    friction: float = 1.0
    wall_temperature: float = -1.0
    
    def __post_init__(self):
        self.center = _vec3(self.center)
        self.velocity = _vec3(self.velocity)
        self.angular_velocity = _vec3(self.angular_velocity)
    
    @property
    def no_slip(self) -> bool:
        return self.friction > 0.0
    
    @property
    def adiabatic(self) -> bool:
        return self.wall_temperature < 0.0
    
    def surface_velocity(self, p: np.ndarray) -> np.ndarray:
        """Velocity of the solid surface at p: Vs = V + W x (p - O)."""
        return self.velocity + cross(self.angular_velocity, p - self.center)
    
    @property
    def box(self) -> np.ndarray:
        raise NotImplementedError
    
    def contains(self, p: np.ndarray, tiny: float = 0.0) -> Tuple[bool, int]:
        raise NotImplementedError
    
    def project(self, p: np.ndarray, fid: int) -> Tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError
    
    def claim_nodes(self, gid, fid, pending, lo, hi, part, shape_id: int) -> int:
        raise NotImplementedError
    
    def advance(self, dt: float) -> None:
        """Translate the centroid by V * dt."""
        self.center = self.center + self.velocity * dt


@dataclass(eq=False)
class Sphere(Shape):
    """Analytical sphere (a circle on a grid with a collapsed axis)."""
    
    radius: float = 1.0
    
    def __post_init__(self):
        super().__post_init__()
        if self.radius <= 0.0:
            raise GeometryError(f"Sphere radius must be positive, got {self.radius}")
    
    @property
    def box(self) -> np.ndarray:
        return np.stack([self.center - self.radius, self.center + self.radius], axis=1)
    
    def contains(self, p: np.ndarray, tiny: float = 0.0) -> Tuple[bool, int]:
        return bool(self.radius * self.radius >= dist2(self.center, _vec3(p))), 0
    
    def project(self, p: np.ndarray, fid: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Move p along the radial direction onto the sphere surface.
        
        Undefined at the centre, where every direction is a normal.
        """
        p = _vec3(p)
        N = p - self.center
        dist = np.linalg.norm(N)
        if dist == 0.0:
            raise GeometryError("Ghost point at sphere centre, sphere under-resolved")
        N = N / dist
        pO = p + (self.radius - dist) * N
        return pO, N
    
    def claim_nodes(self, gid, fid, pending, lo, hi, part, shape_id: int) -> int:
        return _claim_sphere_kernel(gid, fid, pending, lo, hi, part.s_min, part.d,
                                    part.ngs, self.center, float(self.radius), shape_id)


@dataclass(eq=False)
class Polyhedron(Shape):
    """
    Closed triangulated polyhedron.
    
    vertices (nv, 3) and faces (nf, 3) with outward counter-clockwise
    winding. The centre defaults to the vertex centroid.
    """
    
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    faces: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64))
    normals: np.ndarray = field(init=False, repr=False)
    
    def __post_init__(self):
        self.vertices = np.ascontiguousarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.ascontiguousarray(self.faces, dtype=np.int64).reshape(-1, 3)
        if self.faces.shape[0] == 0:
            raise GeometryError("Polyhedron has no faces")
        if self.faces.min() < 0 or self.faces.max() >= self.vertices.shape[0]:
            raise GeometryError("Polyhedron face references a missing vertex")
        super().__post_init__()
        self._update_normals()
    
    @classmethod
    def from_arrays(cls, vertices, faces, center=None, **kwargs) -> 'Polyhedron':
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        if center is None:
            center = vertices.mean(axis=0)
        return cls(vertices=vertices, faces=faces, center=center, **kwargs)
    
    def _update_normals(self) -> None:
        self.normals = face_normals(self.vertices, self.faces)
        degenerate = np.flatnonzero(~np.any(self.normals != 0.0, axis=1))
        if degenerate.size:
            raise GeometryError(f"Polyhedron has zero-area faces: {degenerate.tolist()}")
    
    @property
    def box(self) -> np.ndarray:
        return np.stack([self.vertices.min(axis=0), self.vertices.max(axis=0)], axis=1)
    
    def contains(self, p: np.ndarray, tiny: float = 0.0) -> Tuple[bool, int]:
        inside, f = point_in_polyhedron(_vec3(p), self.vertices, self.faces, tiny)
        return bool(inside), int(f)
    
    def project(self, p: np.ndarray, fid: int) -> Tuple[np.ndarray, np.ndarray]:
        if fid < 0 or fid >= self.faces.shape[0]:
            raise GeometryError(f"Invalid face id {fid} for projection")
        return compute_intersection(_vec3(p), int(fid), self.vertices, self.faces, self.normals)
    
    def claim_nodes(self, gid, fid, pending, lo, hi, part, shape_id: int) -> int:
        return _claim_polyhedron_kernel(gid, fid, pending, lo, hi, part.s_min, part.d,
                                        part.ngs, self.vertices, self.faces,
                                        float(part.tiny), shape_id)
    
    def advance(self, dt: float) -> None:
        """Rotate the vertices about the centroid by W * dt, then translate by V * dt."""
        rot = _rotation_matrix(self.angular_velocity, dt)
        self.vertices = np.ascontiguousarray(
            (self.vertices - self.center) @ rot.T + self.center + self.velocity * dt)
        super().advance(dt)
        self._update_normals()


def box_polyhedron(lower: Sequence[float], upper: Sequence[float], **kwargs) -> Polyhedron:
    """
    Axis-aligned box as a closed 12-triangle polyhedron.
    
    Extra keyword arguments are forwarded to Polyhedron (velocity, moving,
    friction, wall_temperature, ...).
    """
    lo = _vec3(lower)
    up = _vec3(upper)
    if np.any(up <= lo):
        raise GeometryError(f"Box corners must satisfy lower < upper, got {lo} and {up}")
    vertices = np.array([
        [lo[0], lo[1], lo[2]],
        [up[0], lo[1], lo[2]],
        [up[0], up[1], lo[2]],
        [lo[0], up[1], lo[2]],
        [lo[0], lo[1], up[2]],
        [up[0], lo[1], up[2]],
        [up[0], up[1], up[2]],
        [lo[0], up[1], up[2]],
    ])
    faces = np.array([
        [0, 3, 2], [0, 2, 1],   # z = lower
        [4, 5, 6], [4, 6, 7],   # z = upper
        [0, 1, 5], [0, 5, 4],   # y = lower
        [3, 7, 6], [3, 6, 2],   # y = upper
        [0, 4, 7], [0, 7, 3],   # x = lower
        [1, 2, 6], [1, 6, 5],   # x = upper
    ], dtype=np.int64)
    return Polyhedron.from_arrays(vertices, faces, **kwargs)


class Geometry:
    """
    Ordered collection of shapes.
    
    Shape ids stored on grid nodes are 1-based positions in this collection;
    0 means fluid.
    """
    
    def __init__(self, shapes: Sequence[Shape] = ()):
        self.shapes: List[Shape] = list(shapes)
    
    def __len__(self) -> int:
        return len(self.shapes)
    
    def __iter__(self) -> Iterator[Shape]:
        return iter(self.shapes)
    
    def __getitem__(self, index: int) -> Shape:
        return self.shapes[index]
    
    def add(self, shape: Shape) -> int:
        """Append a shape and return its 1-based id."""
        self.shapes.append(shape)
        return len(self.shapes)
    
    def shape_of(self, gid: int) -> Shape:
        """Shape owning node id gid (1-based)."""
        return self.shapes[gid - 1]
    
    def moving_flags(self) -> np.ndarray:
        """Per-shape motion flags as a bool array for kernels."""
        return np.array([s.moving for s in self.shapes], dtype=np.bool_)
    
    def advance(self, dt: float) -> None:
        """Advance every moving shape by dt."""
        for shape in self.shapes:
            if shape.moving:
                shape.advance(dt)
