"""
Sharp-interface immersed boundary treatment.

Refreshes the state of ghost nodes once per time-integration stage, using
the classification produced by compute_geometry_domain:

    for each shape, for ghost layer r = 1 .. gl (surface inward):
        r <= ibm_layer   method of image
                         ghost point G -> boundary point O on the surface
                         -> image point I = 2*O - G in the fluid;
                         interpolate the flow at I, enforce the wall
                         condition at O, reflect back to G
        r >  ibm_layer   inverse-distance extrapolation from the ghost
                         nodes of layer r - 1 of the same shape

Layers are processed in increasing order because the extrapolated layers read
the previous layer's freshly written state. Ghost density is always derived
from pressure and temperature, then the state is stored in conservative form.

Reference:
    Mo, H., Lien, F.S., Zhang, F. and Cronin, D.S., 2016. A sharp interface
    immersed boundary method for solving flow with arbitrarily irregular and
    changing geometry. arXiv preprint arXiv:1602.06830.
"""

import numpy as np
from loguru import logger
from typing import Tuple

from .params import ModelParams
from .space import Space
from ..constants import (
    GHOST_SEARCH_RADIUS, IMAGE_SEARCH_RADIUS, N_PRIM,
    RHO_IDX, U_IDX, W_IDX, P_IDX, T_IDX,
)
from ..errors import DonorSearchError, GeometryError
from ..geometry.computational import dist2, dot, orthogonal_space
from ..geometry.shapes import Shape
from ..numerics.weighting import apply_weighting, inverse_distance_weighting, normalize
from ..physics.gas import conservative_by_primitive, density_by_state


def apply_immersed_boundary_treatment(tn: int, space: Space, model: ModelParams) -> int:
    """
    Reconstruct every ghost node at time level tn.
    
    Parameters
    ----------
    tn : int
        Time level of node.U to read donors from and write ghosts to.
    space : Space
        Classified space (compute_geometry_domain already called).
    model : ModelParams
        
    Returns
    -------
    count : int
        Number of ghost nodes reconstructed.
    """
    part, node = space.part, space.node
    U = node.U[tn]
    total = 0
    for n, shape in enumerate(space.geo):
        shape_id = n + 1
        if not part.box_intersects(shape.box):
            continue
        lo, hi = part.box_range(shape.box)
        window = (slice(lo[2], hi[2]), slice(lo[1], hi[1]), slice(lo[0], hi[0]))
        for r in range(1, part.gl + 1):  # layer by layer treatment
            mask = (node.gst[window] == r) & (node.gid[window] == shape_id)
            ks, js, is_ = np.nonzero(mask)
            for k, j, i in zip(ks + lo[2], js + lo[1], is_ + lo[0]):
                pG = part.point(i, j, k)
                if model.ibm_layer >= r:
                    try:
                        pO, pI, N = compute_geometric_data(node.fid[k, j, i], shape, pG)
                    except GeometryError as err:
                        raise GeometryError(str(err), shape_id=shape_id, node=(i, j, k)) from err
                    nI = part.node_index(pI)
                    try:
                        UoO, UoI = flow_reconstruction(U, nI, pI, IMAGE_SEARCH_RADIUS,
                                                       shape, pO, N, space, model,
                                                       shape_id=shape_id)
                    except DonorSearchError as err:
                        raise DonorSearchError((i, j, k), pG, err.radius_start, err.radius_max,
                                               donor_owner=err.donor_owner, shape_id=shape_id,
                                               center=err.center) from err
                    UoG = method_of_image(UoI, UoO)
                else:
                    UoG, weight_sum = inverse_distance_weighting(
                        U, part, node, (i, j, k), pG, GHOST_SEARCH_RADIUS,
                        model.gamma, model.gas_r,
                        owner=shape_id, ghost_layer=r - 1, shape_id=shape_id,
                    )
                    normalize(UoG, weight_sum)
                UoG[RHO_IDX] = density_by_state(UoG[P_IDX], UoG[T_IDX], model.gas_r)
                U[k, j, i] = conservative_by_primitive(model.gamma, UoG)
            total += ks.size
            if ks.size:
                logger.debug(f"Shape {shape_id}, ghost layer {r}: {ks.size} nodes reconstructed")
    return total


def compute_geometric_data(fid: int, shape: Shape, pG: np.ndarray
                           ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Boundary point, image point and outward normal of a ghost point.
    
    Parameters
    ----------
    fid : int
        Cached nearest face (ignored for spheres).
    shape : Shape
        Owning shape.
    pG : ndarray (3,)
        Ghost point.
        
    Returns
    -------
    pO : ndarray (3,)
        Boundary point on the surface.
    pI : ndarray (3,)
        Image point, the reflection of pG through pO.
    N : ndarray (3,)
        Outward unit normal at pO.
    """
    pO, N = shape.project(pG, fid)
    pI = pO + pO - pG
    return pO, pI, N


def flow_reconstruction(U: np.ndarray, nI, pI: np.ndarray, h: int, shape: Shape,
                        pO: np.ndarray, N: np.ndarray, space: Space,
                        model: ModelParams, shape_id=None
                        ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Primitive states at the boundary point and the corrected image point.
    
    Steps:
        1. pre-estimate the image state by inverse-distance weighting of
           fluid nodes around the image node
        2. enforce the wall condition at the boundary point
             velocity     no-slip: Vs = V + W x (pO - O)
                          slip: normal part from Vs, tangential parts from
                          the image estimate
             pressure     zero normal gradient (image value)
             temperature  adiabatic: image value; isothermal: wall value
        3. correct the image estimate by adding the boundary point as one
           more stencil point, weighted by its distance to the image point
    
    The curvature/acceleration pressure gradient
    dp/dn = rho * vt^2 / R - rho * a_s is not applied; its effect on results
    was found to be negligible.
    
    Returns
    -------
    UoO : ndarray (6,)
        Boundary point primitive state.
    UoI : ndarray (6,)
        Corrected, normalised image point primitive state.
    """
    part, node = space.part, space.node
    # pre-estimate step
    UoI, weight_sum = inverse_distance_weighting(
        U, part, node, nI, pI, h, model.gamma, model.gas_r,
        owner=0, shape_id=shape_id,
    )
    weight = 1.0 / weight_sum
    
    # physical boundary condition enforcement step
    UoO = np.zeros(N_PRIM)
    Vs = shape.surface_velocity(pO)
    if shape.no_slip:
        UoO[U_IDX:W_IDX + 1] = Vs
    else:
        VI = UoI[U_IDX:W_IDX + 1] * weight
        Ta, Tb = orthogonal_space(N)
        rhs = np.array([dot(Vs, N), dot(VI, Ta), dot(VI, Tb)])
        UoO[U_IDX:W_IDX + 1] = N * rhs[0] + Ta * rhs[1] + Tb * rhs[2]
    UoO[P_IDX] = UoI[P_IDX] * weight
    if shape.adiabatic:  # dT/dn = 0
        UoO[T_IDX] = UoI[T_IDX] * weight
    else:  # T = Tw
        UoO[T_IDX] = shape.wall_temperature
    UoO[RHO_IDX] = density_by_state(UoO[P_IDX], UoO[T_IDX], model.gas_r)
    
    # correction step by adding the boundary point as a stencil
    weight_sum = apply_weighting(UoO, part.tiny, dist2(pI, pO), weight_sum, UoI)
    normalize(UoI, weight_sum)
    return UoO, UoI


def method_of_image(UoI: np.ndarray, UoO: np.ndarray) -> np.ndarray:
    """
    Ghost state from the image and boundary states.
    
    Velocity is reflected linearly through the wall, which covers slip and
    no-slip, moving and stationary walls alike. Pressure and temperature are
    copied from the image. Density is left for the caller to derive from the
    equation of state.
    """
    UoG = np.zeros(N_PRIM)
    UoG[U_IDX:W_IDX + 1] = UoO[U_IDX:W_IDX + 1] + UoO[U_IDX:W_IDX + 1] - UoI[U_IDX:W_IDX + 1]
    UoG[P_IDX] = UoI[P_IDX]
    UoG[T_IDX] = UoI[T_IDX]
    return UoG
