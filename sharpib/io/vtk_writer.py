"""
VTK file writer for classified immersed boundary spaces.

Writes the node grid (halo included) as a legacy ASCII STRUCTURED_POINTS
dataset with node classification and primitive flow fields as point data.
Legacy VTK point order is x fastest, then y, then z, which matches the
C order of the [k, j, i] node arrays.
"""

import numpy as np
from loguru import logger
from pathlib import Path
from typing import Union

from ._array_utils import sanitize_array
from ..constants import RHO_IDX, U_IDX, W_IDX, P_IDX, T_IDX
from ..physics.gas import primitive_field
from ..solvers.space import Space


def write_vtk(filename: Union[str, Path], space: Space, tn: int,
              gamma: float, gas_r: float, title: str = "Immersed boundary") -> Path:
    """Save node classification and the primitive state at time level tn.
    
    Parameters
    ----------
    filename : str or Path
        Output VTK file path; parent directories are created.
    space : Space
        Classified space.
    tn : int
        Time level of the state to write.
    gamma, gas_r : float
        Gas model used to recover primitive variables.
    title : str
        Header line of the VTK file.
        
    Returns
    -------
    Path
        The written file.
    """
    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)
    part, node = space.part, space.node
    nz, ny, nx = part.shape
    npts = nx * ny * nz
    origin = part.domain[:, 0] - part.ngs * part.d
    
    Uo = primitive_field(gamma, gas_r, node.U[tn])
    
    with open(filename, 'w') as f:
        f.write("# vtk DataFile Version 3.0\n")
        f.write(f"{title}\n")
        f.write("ASCII\n")
        f.write("DATASET STRUCTURED_POINTS\n")
        f.write(f"DIMENSIONS {nx} {ny} {nz}\n")
        f.write(f"ORIGIN {origin[0]:.10e} {origin[1]:.10e} {origin[2]:.10e}\n")
        f.write(f"SPACING {part.d[0]:.10e} {part.d[1]:.10e} {part.d[2]:.10e}\n")
        
        f.write(f"\nPOINT_DATA {npts}\n")
        
        # Classification
        _write_scalar_field(f, "gid", node.gid, "int")
        _write_scalar_field(f, "lid", node.lid, "int")
        _write_scalar_field(f, "gst", node.gst, "int")
        
        # Flow
        _write_scalar_field(f, "rho", sanitize_array(Uo[..., RHO_IDX]), "double")
        _write_scalar_field(f, "p", sanitize_array(Uo[..., P_IDX]), "double")
        _write_scalar_field(f, "T", sanitize_array(Uo[..., T_IDX]), "double")
        
        vel = sanitize_array(Uo[..., U_IDX:W_IDX + 1]).reshape(-1, 3)
        f.write("\nVECTORS velocity double\n")
        for u, v, w in vel:
            f.write(f"{u:.10e} {v:.10e} {w:.10e}\n")
    
    logger.info(f"Saved VTK file to: {filename}")
    return filename


def _write_scalar_field(f, name: str, data: np.ndarray, dtype: str) -> None:
    """Write a scalar field to VTK file."""
    f.write(f"\nSCALARS {name} {dtype} 1\n")
    f.write("LOOKUP_TABLE default\n")
    if dtype == "int":
        for value in data.ravel():
            f.write(f"{int(value)}\n")
    else:
        for value in data.ravel():
            f.write(f"{value:.10e}\n")
