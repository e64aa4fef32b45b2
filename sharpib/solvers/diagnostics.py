"""Classification diagnostics for immersed boundary runs."""

import numpy as np
from typing import Dict, List, NamedTuple

from .space import Space


class ClassificationSummary(NamedTuple):
    """Node counts of the interior region after classification."""
    fluid: int
    solid: Dict[int, int]        # shape id -> owned nodes
    interfacial: int
    ghost: Dict[int, int]        # ghost layer -> nodes
    pending: int
    
    def __str__(self) -> str:
        solid = ", ".join(f"#{s}: {c}" for s, c in self.solid.items())
        ghost = ", ".join(f"L{r}: {c}" for r, c in self.ghost.items())
        return (f"fluid {self.fluid} | solid [{solid}] | interfacial {self.interfacial} | "
                f"ghost [{ghost}] | pending {self.pending}")


def classification_summary(space: Space) -> ClassificationSummary:
    part, node = space.part, space.node
    gid = node.gid[part.interior]
    lid = node.lid[part.interior]
    gst = node.gst[part.interior]
    return ClassificationSummary(
        fluid=int(np.count_nonzero(gid == 0)),
        solid={s: int(np.count_nonzero(gid == s)) for s in range(1, len(space.geo) + 1)},
        interfacial=int(np.count_nonzero(lid)),
        ghost={r: int(np.count_nonzero(gst == r)) for r in range(1, part.gl + 1)},
        pending=int(np.count_nonzero(node.pending[part.interior])),
    )


def check_classification(space: Space) -> List[str]:
    """
    Check the classification invariants.
    
    - owner ids are 0 or a valid shape id
    - ghost => interfacial => owned
    - layers within 0..gl
    - no node left pending reconstruction
    
    Returns
    -------
    violations : list of str
        Empty when the classification is consistent.
    """
    part, node = space.part, space.node
    gid = node.gid[part.interior]
    lid = node.lid[part.interior]
    gst = node.gst[part.interior]
    nshape = len(space.geo)
    violations = []
    
    bad_owner = np.count_nonzero((gid < 0) | (gid > nshape))
    if bad_owner:
        violations.append(f"{bad_owner} interior nodes with invalid owner id")
    
    ghost_not_interfacial = np.count_nonzero((gst != 0) & (lid == 0))
    if ghost_not_interfacial:
        violations.append(f"{ghost_not_interfacial} ghost nodes are not interfacial")
    
    interfacial_fluid = np.count_nonzero((lid != 0) & (gid == 0))
    if interfacial_fluid:
        violations.append(f"{interfacial_fluid} interfacial nodes are not owned")
    
    out_of_range = np.count_nonzero((lid < 0) | (lid > part.gl) | (gst < 0) | (gst > part.gl))
    if out_of_range:
        violations.append(f"{out_of_range} nodes with layer outside 0..{part.gl}")
    
    pending = np.count_nonzero(node.pending)
    if pending:
        violations.append(f"{pending} nodes still pending reconstruction")
    
    return violations
