"""
Inverse-distance weighting on the node grid.

Donor nodes are searched in a cube of half-width r centred at a node; each
qualifying donor contributes its primitive state with weight

    w = 1 / max(|p - p_donor|^2, tiny)

Squared distances avoid a sqrt per donor, and the clamp keeps a donor sitting
on the target point from overflowing the sum. If no donor qualifies at
half-width r, the whole cube is scanned again at r + 1. Donors are normally
found at the starting half-width, so re-scanning the inner cells is cheap in
practice. The search stops with an error at the partition's maximum radius.

Donor rule:
    owner == 0   fluid nodes that are not pending reconstruction
    owner  > 0   nodes of that shape with ghost layer == ghost_layer

The returned state is NOT normalised: callers divide by the weight sum, and
the flow reconstruction folds one more weighted sample in before doing so.
"""

import numpy as np
from numba import njit
from typing import Optional, Sequence, Tuple

from ..constants import N_PRIM
from ..errors import DonorSearchError
from ..geometry.computational import dist2
from ..physics.gas import primitive_by_conservative


@njit(cache=True)
def apply_weighting(Uoh: np.ndarray, tiny: float, distance2: float,
                    weight_sum: float, Uo: np.ndarray) -> float:
    """
    Accumulate one weighted sample into Uo.
    
    Returns
    -------
    weight_sum : float
        Updated sum of weights.
    """
    if distance2 < tiny:  # avoid overflow of too small distance
        distance2 = tiny
    weight = 1.0 / distance2
    for n in range(Uo.shape[0]):
        Uo[n] += Uoh[n] * weight
    return weight_sum + weight


@njit(cache=True)
def _idw_kernel(U, gid, gst, pending, center, p, h, max_r, owner, ghost_layer,
                s_min, d, ngs, gamma, gas_r, tiny, Uo):
    """
    Weighted primitive sum over qualifying donors around node `center`.
    
    Parameters
    ----------
    U : ndarray, shape (nz, ny, nx, 5)
        Conservative state at one time level.
    gid, gst : ndarray, shape (nz, ny, nx)
        Owner ids and ghost layers.
    pending : ndarray, shape (nz, ny, nx), bool
        Nodes awaiting reconstruction (never donors).
    center : ndarray (3,)
        Search centre (i, j, k).
    p : ndarray (3,)
        Interpolation target point.
    h, max_r : int
        Starting and maximum cube half-width.
    owner, ghost_layer : int
        Donor rule.
    Uo : ndarray (6,)
        Output accumulator, zeroed here.
        
    Returns
    -------
    weight_sum : float
    tally : int
        Number of donors used (0 if the search failed).
    """
    nz, ny, nx = gid.shape
    ph = np.empty(3)
    for n in range(Uo.shape[0]):
        Uo[n] = 0.0
    weight_sum = 0.0
    tally = 0
    r = h
    while tally == 0 and r <= max_r:
        for kh in range(-r, r + 1):
            kk = center[2] + kh
            if kk < 0 or kk >= nz:  # illegal index
                continue
            for jh in range(-r, r + 1):
                jj = center[1] + jh
                if jj < 0 or jj >= ny:
                    continue
                for ih in range(-r, r + 1):
                    ii = center[0] + ih
                    if ii < 0 or ii >= nx:
                        continue
                    if gid[kk, jj, ii] != owner:
                        continue
                    if owner == 0:
                        if pending[kk, jj, ii]:  # require normal node type
                            continue
                    else:
                        if gst[kk, jj, ii] != ghost_layer:
                            continue
                    tally += 1
                    ph[0] = s_min[0] + (ii - ngs[0]) * d[0]
                    ph[1] = s_min[1] + (jj - ngs[1]) * d[1]
                    ph[2] = s_min[2] + (kk - ngs[2]) * d[2]
                    Uoh = primitive_by_conservative(gamma, gas_r, U[kk, jj, ii])
                    weight_sum = apply_weighting(Uoh, tiny, dist2(p, ph), weight_sum, Uo)
        r += 1
    return weight_sum, tally


def inverse_distance_weighting(U: np.ndarray, part, node, center: Sequence[int],
                               p: np.ndarray, h: int, gamma: float, gas_r: float,
                               owner: int = 0, ghost_layer: int = 0,
                               shape_id: Optional[int] = None
                               ) -> Tuple[np.ndarray, float]:
    """
    Inverse-distance weighted primitive state at point p.
    
    Parameters
    ----------
    U : ndarray, shape (nz, ny, nx, 5)
        Conservative state at the time level being read.
    part : Partition
    node : NodeFields
    center : (i, j, k)
        Node the search cube is centred on.
    p : ndarray (3,)
        Target point.
    h : int
        Starting cube half-width.
    gamma, gas_r : float
        Gas model.
    owner, ghost_layer : int
        Donor rule (see module docstring).
    shape_id : int, optional
        Shape whose ghost node is being reconstructed, for error context.
        
    Returns
    -------
    Uo : ndarray (6,)
        Weighted (unnormalised) primitive sum.
    weight_sum : float
        Sum of the weights; Uo / weight_sum is a convex combination of
        donor states.
        
    Raises
    ------
    DonorSearchError
        If no donor qualifies up to the maximum search radius.
    """
    center = np.asarray(center, dtype=np.int64)
    p = np.asarray(p, dtype=np.float64)
    max_r = max(part.max_search_radius, h)
    Uo = np.zeros(N_PRIM)
    weight_sum, tally = _idw_kernel(
        U, node.gid, node.gst, node.pending, center, p, h, max_r,
        owner, ghost_layer, part.s_min, part.d, part.ngs,
        gamma, gas_r, part.tiny, Uo,
    )
    if tally == 0:
        raise DonorSearchError(center, p, h, max_r, donor_owner=owner, shape_id=shape_id)
    return Uo, weight_sum


def normalize(Uo: np.ndarray, weight_sum: float) -> np.ndarray:
    """Divide a weighted sum by its weight sum in place."""
    Uo /= weight_sum
    return Uo
