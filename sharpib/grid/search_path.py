"""
Neighbour search path for interfacial and ghost node identification.

The search path is a template of integer node offsets around a node, grouped
into layers. Layer r holds the offsets whose largest component magnitude is
exactly r, restricted to the coordinate planes (at most two non-zero
components). These are the plane-square stencils with corner nodes that
second-order mixed derivatives of diffusive fluxes touch; a full 3-D corner
never enters a flux stencil and is not searched.

Within a layer, offsets are ordered by distance, so walking the path from the
start visits layer 1 first, then layer 2, and so on. The separators give the
end of each layer:

    path_sep[r]  = number of offsets in layers 1..r   (r = 1..gl)
    path_sep[0]  = path_sep[gl] = total path length

so "all offsets within layer r" is the prefix path[:path_sep[r]], and the
layer of the n-th offset is the smallest r with path_sep[r] > n.
"""

import numpy as np
from typing import Sequence, Tuple


def compute_search_path(gl: int,
                        active: Sequence[bool] = (True, True, True)
                        ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the layer-ordered offset template.
    
    Parameters
    ----------
    gl : int
        Number of layers (ghost layers of the immersed boundary treatment).
    active : sequence of 3 bool
        Whether each axis (x, y, z) is active. Offsets along a collapsed
        axis are never generated.
        
    Returns
    -------
    path : ndarray, shape (npath, 3), int64
        Offsets (dx, dy, dz).
    path_sep : ndarray, shape (gl + 1,), int64
        Layer separators as described in the module docstring.
    """
    if gl < 1:
        raise ValueError(f"Search path needs at least one layer, got gl={gl}")
    
    span = [range(-gl, gl + 1) if active[s] else range(0, 1) for s in range(3)]
    offsets = []
    path_sep = np.zeros(gl + 1, dtype=np.int64)
    
    for r in range(1, gl + 1):
        shell = []
        for dz in span[2]:
            for dy in span[1]:
                for dx in span[0]:
                    off = (dx, dy, dz)
                    if max(abs(dx), abs(dy), abs(dz)) != r:
                        continue
                    if sum(1 for c in off if c != 0) > 2:
                        continue
                    shell.append(off)
        # Distance first; the index tail keeps the ordering deterministic
        shell.sort(key=lambda o: (o[0]**2 + o[1]**2 + o[2]**2, o[2], o[1], o[0]))
        offsets.extend(shell)
        path_sep[r] = len(offsets)
    
    path_sep[0] = len(offsets)
    path = np.array(offsets, dtype=np.int64).reshape(-1, 3)
    return path, path_sep


def layer_of(n: int, path_sep: np.ndarray) -> int:
    """Layer (1-based) containing the n-th path offset, 0 if past the end."""
    for r in range(1, path_sep.shape[0]):
        if path_sep[r] > n:
            return r
    return 0
