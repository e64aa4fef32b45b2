"""
Computational geometry kernels.

Numba-compiled vector helpers and triangle-mesh queries used by the
classifier and the boundary treatment:

    - dot, cross, norm, normalize, dist2, orthogonal_space
    - closest_point_on_triangle: Voronoi-region projection onto a triangle
    - point_in_polyhedron: inclusion test with nearest face id
    - compute_intersection: projection of a point onto a given face

Inclusion uses the generalised winding number (sum of signed solid angles
over 4*pi), which is robust to rays grazing edges and vertices, a common
situation when grid lines are aligned with polyhedron faces. Points within
sqrt(tiny) of the surface count as inside.

Triangles are expected with counter-clockwise vertex order seen from
outside, so face normals (b - a) x (c - a) point outward.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def dot(a: np.ndarray, b: np.ndarray) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


@njit(cache=True)
def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    c = np.empty(3)
    c[0] = a[1] * b[2] - a[2] * b[1]
    c[1] = a[2] * b[0] - a[0] * b[2]
    c[2] = a[0] * b[1] - a[1] * b[0]
    return c


@njit(cache=True)
def norm(a: np.ndarray) -> float:
    return np.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


@njit(cache=True)
def normalize(a: np.ndarray) -> np.ndarray:
    """Unit vector along a (a must be non-zero)."""
    return a / norm(a)


@njit(cache=True)
def dist2(a: np.ndarray, b: np.ndarray) -> float:
    """Squared Euclidean distance (avoids the sqrt in weighting loops)."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return dx * dx + dy * dy + dz * dz


@njit(cache=True)
def orthogonal_space(N: np.ndarray):
    """
    Two unit tangents completing the unit normal N to a right-handed basis.
    
    Ta is built from the coordinate axis least aligned with N, so the
    construction never degenerates. Tb = N x Ta.
    
    Returns
    -------
    Ta, Tb : ndarray (3,)
    """
    e = np.zeros(3)
    ax = np.abs(N)
    if ax[0] <= ax[1] and ax[0] <= ax[2]:
        e[0] = 1.0
    elif ax[1] <= ax[2]:
        e[1] = 1.0
    else:
        e[2] = 1.0
    Ta = normalize(cross(N, e))
    Tb = cross(N, Ta)
    return Ta, Tb


@njit(cache=True)
def closest_point_on_triangle(p: np.ndarray, a: np.ndarray,
                              b: np.ndarray, c: np.ndarray) -> np.ndarray:
    """
    Closest point to p on triangle abc.
    
    Classifies p against the vertex, edge and face Voronoi regions of the
    triangle and projects accordingly (Ericson, Real-Time Collision
    Detection, 5.1.5).
    """
    ab = b - a
    ac = c - a
    ap = p - a
    d1 = dot(ab, ap)
    d2 = dot(ac, ap)
    if d1 <= 0.0 and d2 <= 0.0:
        return a.copy()
    
    bp = p - b
    d3 = dot(ab, bp)
    d4 = dot(ac, bp)
    if d3 >= 0.0 and d4 <= d3:
        return b.copy()
    
    vc = d1 * d4 - d3 * d2
    if vc <= 0.0 and d1 >= 0.0 and d3 <= 0.0:
        v = d1 / (d1 - d3)
        return a + v * ab
    
    cp = p - c
    d5 = dot(ab, cp)
    d6 = dot(ac, cp)
    if d6 >= 0.0 and d5 <= d6:
        return c.copy()
    
    vb = d5 * d2 - d1 * d6
    if vb <= 0.0 and d2 >= 0.0 and d6 <= 0.0:
        w = d2 / (d2 - d6)
        return a + w * ac
    
    va = d3 * d6 - d5 * d4
    if va <= 0.0 and (d4 - d3) >= 0.0 and (d5 - d6) >= 0.0:
        w = (d4 - d3) / ((d4 - d3) + (d5 - d6))
        return b + w * (c - b)
    
    denom = 1.0 / (va + vb + vc)
    v = vb * denom
    w = vc * denom
    return a + ab * v + ac * w


@njit(cache=True)
def _solid_angle(p: np.ndarray, a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    """Signed solid angle of triangle abc seen from p (Van Oosterom & Strackee)."""
    ra = a - p
    rb = b - p
    rc = c - p
    la = norm(ra)
    lb = norm(rb)
    lc = norm(rc)
    numer = dot(ra, cross(rb, rc))
    denom = la * lb * lc + dot(ra, rb) * lc + dot(rb, rc) * la + dot(rc, ra) * lb
    return 2.0 * np.arctan2(numer, denom)


@njit(cache=True)
def point_in_polyhedron(p: np.ndarray, vertices: np.ndarray,
                        faces: np.ndarray, tiny: float):
    """
    Inclusion test for a closed triangulated polyhedron.
    
    Parameters
    ----------
    p : ndarray (3,)
        Query point.
    vertices : ndarray (nv, 3)
    faces : ndarray (nf, 3), int
        Vertex indices per triangle, outward counter-clockwise.
    tiny : float
        Squared distance below which p is considered on the surface.
        
    Returns
    -------
    inside : bool
        True if p is inside or on the surface.
    fid : int
        Index of the face closest to p.
    """
    fid = -1
    best = np.inf
    omega = 0.0
    for f in range(faces.shape[0]):
        a = vertices[faces[f, 0]]
        b = vertices[faces[f, 1]]
        c = vertices[faces[f, 2]]
        q = closest_point_on_triangle(p, a, b, c)
        d2 = dist2(p, q)
        if d2 < best:
            best = d2
            fid = f
        omega += _solid_angle(p, a, b, c)
    if best <= tiny:
        return True, fid
    winding = omega / (4.0 * np.pi)
    return winding > 0.5, fid


@njit(cache=True)
def compute_intersection(p: np.ndarray, fid: int, vertices: np.ndarray,
                         faces: np.ndarray, normals: np.ndarray):
    """
    Boundary point and outward normal for p on face fid.
    
    Returns
    -------
    pO : ndarray (3,)
        Closest point to p on the face.
    N : ndarray (3,)
        Outward unit normal of the face.
    """
    a = vertices[faces[fid, 0]]
    b = vertices[faces[fid, 1]]
    c = vertices[faces[fid, 2]]
    pO = closest_point_on_triangle(p, a, b, c)
    N = normals[fid].copy()
    return pO, N


@njit(cache=True)
def face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    Outward unit normals of all faces.
    
    Degenerate faces get a zero normal; callers are expected to reject them.
    """
    nf = faces.shape[0]
    normals = np.zeros((nf, 3))
    for f in range(nf):
        a = vertices[faces[f, 0]]
        b = vertices[faces[f, 1]]
        c = vertices[faces[f, 2]]
        n = cross(b - a, c - a)
        length = norm(n)
        if length > 0.0:
            normals[f] = n / length
    return normals
