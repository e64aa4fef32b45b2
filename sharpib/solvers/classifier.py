"""
Node classification against the immersed geometry.

Runs once per remesh event (whenever bodies have moved), strictly before the
boundary treatment. Three phases, each completed for the whole grid before
the next one starts:

    1. Reset      clear interfacial/ghost markers; keep ownership of
                  stationary shapes; free the interfacial nodes of moving
                  shapes so they are re-tested (deep interior nodes of moving
                  shapes are kept, motion per remesh step is assumed to be
                  smaller than the layer depth)
    2. Ownership  per shape, test the unowned nodes inside its bounding box;
                  the first shape to claim a node keeps it
    3. Layers     reconstruct newly exposed fluid nodes, then assign the
                  interfacial layer and ghost layer of every solid node by
                  walking the neighbour search path

Points in or on a shape belong to it, so the ghost approach sees the
boundary as tightly as the grid allows.

Known limitation: when two touching bodies separate within one remesh step,
fresh fluid nodes may appear without any fluid neighbour. Their
reconstruction raises DonorSearchError; no special treatment exists.
"""

import numpy as np
from numba import njit
from loguru import logger

from .params import ModelParams
from .space import Space
from ..constants import NONE, TO, IMAGE_SEARCH_RADIUS, RHO_IDX, P_IDX, T_IDX
from ..numerics.weighting import inverse_distance_weighting, normalize
from ..physics.gas import conservative_by_primitive, density_by_state


def compute_geometry_domain(space: Space, model: ModelParams) -> None:
    """
    Classify every interior node against the current geometry.
    
    Must be called whenever body geometry changes, before any call to
    apply_immersed_boundary_treatment.
    """
    initialize_geometry_domain(space)
    identify_geometry_node(space)
    identify_interfacial_node(space, model)


# =============================================================================
# Phase 1: reset
# =============================================================================

@njit(cache=True)
def _reset_kernel(gid, lid, gst, pending, lo, hi, moving):
    freed = 0
    for k in range(lo[2], hi[2]):
        for j in range(lo[1], hi[1]):
            for i in range(lo[0], hi[0]):
                g = gid[k, j, i]
                if g <= 0:  # reset information for non-shape nodes
                    gid[k, j, i] = 0
                    lid[k, j, i] = 0
                    gst[k, j, i] = 0
                    continue
                if not moving[g - 1]:  # stationary shape keeps its nodes
                    lid[k, j, i] = 0
                    gst[k, j, i] = 0
                    continue
                if lid[k, j, i] > 0:
                    gid[k, j, i] = 0
                    lid[k, j, i] = 0
                    gst[k, j, i] = 0
                    pending[k, j, i] = True
                    freed += 1
    return freed


def initialize_geometry_domain(space: Space) -> int:
    """
    Reset classification state before ownership is re-evaluated.
    
    Returns
    -------
    freed : int
        Interfacial nodes of moving shapes released for re-testing.
    """
    part, node = space.part, space.node
    moving = space.geo.moving_flags()
    if moving.size == 0:
        moving = np.zeros(1, dtype=np.bool_)
    freed = _reset_kernel(node.gid, node.lid, node.gst, node.pending,
                          part.ns_min, part.ns_max, moving)
    logger.debug(f"Reset: {freed} interfacial nodes of moving shapes released")
    return freed


# =============================================================================
# Phase 2: ownership
# =============================================================================

def identify_geometry_node(space: Space) -> int:
    """
    Link nodes inside each shape to that shape.
    
    Only the bounding box of a shape is searched, so the cost scales with
    the size of the shape rather than the domain. Stationary shapes are
    claimed once and skipped afterwards.
    
    Returns
    -------
    claimed : int
        Nodes newly claimed by all shapes.
    """
    part, node = space.part, space.node
    total = 0
    for n, shape in enumerate(space.geo):
        shape_id = n + 1
        if not shape.moving and shape_id in space.claimed:
            continue
        box = shape.box
        if not part.box_intersects(box):
            logger.warning(f"Shape {shape_id} lies outside the domain, no nodes claimed")
            space.claimed.add(shape_id)
            continue
        lo, hi = part.box_range(box)
        claimed = shape.claim_nodes(node.gid, node.fid, node.pending, lo, hi, part, shape_id)
        space.claimed.add(shape_id)
        total += claimed
        logger.debug(f"Shape {shape_id} ({type(shape).__name__}): claimed {claimed} nodes")
    return total


# =============================================================================
# Phase 3: interfacial and ghost layers
# =============================================================================

@njit(cache=True)
def _interfacial_state(k, j, i, g, gid, path, path_sep):
    """Layer of the first heterogeneous neighbour on the path, 0 if none."""
    nz, ny, nx = gid.shape
    for n in range(path_sep[0]):
        kk = k + path[n, 2]
        jj = j + path[n, 1]
        ii = i + path[n, 0]
        if kk < 0 or kk >= nz or jj < 0 or jj >= ny or ii < 0 or ii >= nx:
            continue
        h = gid[kk, jj, ii]
        if h == NONE:  # an exterior node is not valid
            continue
        if h != g:
            for r in range(1, path_sep.shape[0]):
                if path_sep[r] > n:
                    return r
    return 0


@njit(cache=True)
def _ghost_state(k, j, i, gid, path, path_sep):
    """Layer of the first fluid neighbour on the path, 0 if none."""
    nz, ny, nx = gid.shape
    for n in range(path_sep[0]):
        kk = k + path[n, 2]
        jj = j + path[n, 1]
        ii = i + path[n, 0]
        if kk < 0 or kk >= nz or jj < 0 or jj >= ny or ii < 0 or ii >= nx:
            continue
        if gid[kk, jj, ii] == 0:  # a normal computational node on the path
            for r in range(1, path_sep.shape[0]):
                if path_sep[r] > n:
                    return r
    return 0


@njit(cache=True)
def _layer_kernel(gid, lid, gst, lo, hi, path, path_sep):
    interfacial = 0
    ghost = 0
    for k in range(lo[2], hi[2]):
        for j in range(lo[1], hi[1]):
            for i in range(lo[0], hi[0]):
                g = gid[k, j, i]
                if g == 0:  # fluid nodes are never interfacial here
                    continue
                lid[k, j, i] = _interfacial_state(k, j, i, g, gid, path, path_sep)
                gst[k, j, i] = 0
                if lid[k, j, i] != 0:
                    interfacial += 1
                    gst[k, j, i] = _ghost_state(k, j, i, gid, path, path_sep)
                    if gst[k, j, i] != 0:
                        ghost += 1
    return interfacial, ghost


def reconstruct_exposed_nodes(space: Space, model: ModelParams) -> int:
    """
    Give newly exposed fluid nodes a physical state.
    
    A node freed from a moving shape that no shape reclaimed is now open
    fluid carrying a stale ghost value. Its state at time level TO is
    rebuilt from surrounding fluid nodes that are not themselves pending.
    Nodes are processed in storage order, and a reconstructed node serves as
    a donor for the ones after it.
    
    Returns
    -------
    count : int
        Number of nodes reconstructed.
        
    Raises
    ------
    DonorSearchError
        If a newly exposed node has no fluid node within reach.
    """
    part, node = space.part, space.node
    exposed = node.pending & (node.gid == 0)
    ks, js, is_ = np.nonzero(exposed)
    U = node.U[TO]
    for k, j, i in zip(ks, js, is_):
        p = part.point(i, j, k)
        Uo, weight_sum = inverse_distance_weighting(
            U, part, node, (i, j, k), p, IMAGE_SEARCH_RADIUS,
            model.gamma, model.gas_r, owner=0,
        )
        normalize(Uo, weight_sum)
        Uo[RHO_IDX] = density_by_state(Uo[P_IDX], Uo[T_IDX], model.gas_r)
        U[k, j, i] = conservative_by_primitive(model.gamma, Uo)
        node.pending[k, j, i] = False
    if ks.size:
        logger.debug(f"Reconstructed {ks.size} newly exposed fluid nodes")
    return int(ks.size)


def identify_interfacial_node(space: Space, model: ModelParams):
    """
    Reconstruct newly exposed nodes and assign interfacial/ghost layers.
    
    Interfacial state is always redetermined from the current ownership,
    whether or not a node's ownership was preserved by the reset.
    
    Returns
    -------
    interfacial, ghost : int
        Number of interfacial and ghost nodes.
    """
    reconstruct_exposed_nodes(space, model)
    part, node = space.part, space.node
    interfacial, ghost = _layer_kernel(node.gid, node.lid, node.gst,
                                       part.ns_min, part.ns_max,
                                       part.path, part.path_sep)
    logger.debug(f"Layers: {interfacial} interfacial nodes, {ghost} ghost nodes")
    return interfacial, ghost
