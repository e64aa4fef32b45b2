"""
Global constants for the immersed boundary core.

This module defines constants used throughout the codebase to ensure
consistency in array shapes and indexing.
"""

# Axis indices for physical points and node triples (x, y, z).
# Node arrays themselves are indexed [k, j, i] = [z, y, x].
X = 0
Y = 1
Z = 2
DIMS = 3

# Sentinel for "no value": owner id of exterior (halo) nodes and
# face id of nodes without a cached nearest face
NONE = -1

# Conservative state components
RHO_IDX = 0    # density
MX_IDX = 1     # x-momentum
MY_IDX = 2     # y-momentum
MZ_IDX = 3     # z-momentum
E_IDX = 4      # total energy per unit volume
N_CONS = 5

# Primitive state components
U_IDX = 1      # x-velocity
V_IDX = 2      # y-velocity
W_IDX = 3      # z-velocity
P_IDX = 4      # pressure
T_IDX = 5      # temperature
N_PRIM = 6

# Time level written by the classifier when reconstructing newly exposed nodes
TO = 0

# Starting half-width of the donor search cube
IMAGE_SEARCH_RADIUS = 2   # image points and newly exposed nodes
GHOST_SEARCH_RADIUS = 1   # deep ghost layers (previous layer as donors)

# Clamp length for inverse-distance weights, relative to the minimum spacing
TINY_FACTOR = 1.0e-3


def interior_slice(ns_min, ns_max) -> tuple:
    """
    Return the [k, j, i] slice of the interior node region.

    Parameters
    ----------
    ns_min, ns_max : sequence of int
        Interior node range per axis (x, y, z), max exclusive.

    Returns
    -------
    tuple of slices
        (slice(kmin, kmax), slice(jmin, jmax), slice(imin, imax))
    """
    return (slice(ns_min[Z], ns_max[Z]),
            slice(ns_min[Y], ns_max[Y]),
            slice(ns_min[X], ns_max[X]))
