"""
Visualization of node classification.

Mid-plane slices of a classified space: owner ids with ghost nodes marked,
and a primitive flow variable. Intended for quick inspection of the
classification, not for publication plots.
"""

import numpy as np
from loguru import logger
from pathlib import Path
from typing import Optional, Union

from ._array_utils import safe_minmax
from ..constants import Z, P_IDX, T_IDX, U_IDX
from ..physics.gas import primitive_field
from ..solvers.space import Space

# Lazy import matplotlib to avoid issues when not installed
_plt = None

_FIELDS = {'p': P_IDX, 'T': T_IDX, 'u': U_IDX}


def _ensure_matplotlib():
    """Ensure matplotlib is available and configured."""
    global _plt
    if _plt is None:
        import matplotlib
        matplotlib.use('Agg')  # Non-interactive backend
        import matplotlib.pyplot as plt
        _plt = plt
    return _plt


def plot_classification_slice(space: Space, output_dir: Union[str, Path],
                              case_name: str = "ibm", tn: int = 0,
                              gamma: float = 1.4, gas_r: float = 287.058,
                              field: str = 'p', k: Optional[int] = None) -> Path:
    """
    Plot an x-y slice of the classification and one flow field.
    
    Parameters
    ----------
    space : Space
        Classified space.
    output_dir : str or Path
        Directory for the PNG file.
    case_name : str
        Base name for the output file.
    tn : int
        Time level of the flow field.
    gamma, gas_r : float
        Gas model.
    field : {'p', 'T', 'u'}
        Primitive variable to plot.
    k : int, optional
        z node index of the slice; the interior mid-plane by default.
        
    Returns
    -------
    output_path : Path
        Path to saved PNG file.
    """
    plt = _ensure_matplotlib()
    part, node = space.part, space.node
    if field not in _FIELDS:
        raise ValueError(f"Unknown field '{field}', expected one of {list(_FIELDS)}")
    if k is None:
        k = int((part.ns_min[Z] + part.ns_max[Z] - 1) // 2)
    
    interior = part.interior
    x, y, _ = part.coordinates()
    x = x[interior[2]]
    y = y[interior[1]]
    gid = node.gid[k, interior[1], interior[2]]
    gst = node.gst[k, interior[1], interior[2]]
    values = primitive_field(gamma, gas_r, node.U[tn, k, interior[1], interior[2]])[..., _FIELDS[field]]
    vmin, vmax = safe_minmax(values)
    
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    
    ax = axes[0]
    im = ax.pcolormesh(x, y, gid, shading='nearest', cmap='tab10')
    jj, ii = np.nonzero(gst)
    ax.scatter(x[ii], y[jj], c=gst[jj, ii], s=8, cmap='autumn', marker='s')
    fig.colorbar(im, ax=ax, label='owner id')
    ax.set_title('Owner id (markers: ghost nodes)')
    
    ax = axes[1]
    im = ax.pcolormesh(x, y, values, shading='nearest', cmap='viridis', vmin=vmin, vmax=vmax)
    fig.colorbar(im, ax=ax, label=field)
    ax.set_title(f'{field} at time level {tn}')
    
    z = part.point_space(k, Z)
    for ax in axes:
        ax.set_aspect('equal')
        ax.set_xlabel('x')
        ax.set_ylabel('y')
    fig.suptitle(f'{case_name}: slice z = {z:.4g}')
    fig.tight_layout()
    
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{case_name}_slice.png"
    fig.savefig(output_path, dpi=120)
    plt.close(fig)
    logger.info(f"Saved classification slice to: {output_path}")
    return output_path
