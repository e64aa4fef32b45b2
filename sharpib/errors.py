"""
Exceptions raised by the immersed boundary core.

Out-of-range neighbour indices and near-zero interpolation distances are
handled in place and never raise. Everything here is fatal to the current
timestep and carries enough context to locate the offending node.
"""

from typing import Optional, Sequence


class ImmersedBoundaryError(RuntimeError):
    """Base class for immersed boundary failures."""


class ConfigurationError(ValueError):
    """Invalid grid, model or geometry configuration."""


class GeometryError(ImmersedBoundaryError):
    """Malformed or under-resolved geometry."""

    def __init__(self, message: str, shape_id: Optional[int] = None,
                 node: Optional[Sequence[int]] = None):
        self.shape_id = shape_id
        self.node = tuple(int(n) for n in node) if node is not None else None
        context = []
        if shape_id is not None:
            context.append(f"shape {shape_id}")
        if node is not None:
            context.append(f"node (i, j, k) = {self.node}")
        if context:
            message = f"{message} [{', '.join(context)}]"
        super().__init__(message)


class DonorSearchError(ImmersedBoundaryError):
    """
    No qualifying donor node found within the maximum search radius.

    Usually means a disconnected or degenerate geometry (for example two
    touching bodies separating within one remesh step) or a mesh too coarse
    for the body.

    Attributes
    ----------
    node : tuple of int
        (i, j, k) of the node being reconstructed.
    point : tuple of float
        Physical point of that node.
    center : tuple of int
        (i, j, k) centre of the search cube; differs from node when the
        search runs around an image point.
    donor_owner : int
        Owner id the donors were required to have (0 = fluid).
    shape_id : int or None
        Shape whose ghost node was being reconstructed, None for fluid nodes.
    """

    def __init__(self, node: Sequence[int], point: Sequence[float],
                 radius_start: int, radius_max: int,
                 donor_owner: int = 0, shape_id: Optional[int] = None,
                 center: Optional[Sequence[int]] = None):
        self.node = tuple(int(n) for n in node)
        self.point = tuple(float(p) for p in point)
        self.center = tuple(int(n) for n in center) if center is not None else self.node
        self.radius_start = radius_start
        self.radius_max = radius_max
        self.donor_owner = donor_owner
        self.shape_id = shape_id
        donors = "fluid nodes" if donor_owner == 0 else f"ghost nodes of shape {donor_owner}"
        target = "fluid node" if shape_id is None else f"ghost node of shape {shape_id}"
        super().__init__(
            f"No qualifying donor ({donors}) for {target} (i, j, k) = {self.node} at "
            f"({self.point[0]:.6g}, {self.point[1]:.6g}, {self.point[2]:.6g}): "
            f"search centred at {self.center}, half-width {radius_start}..{radius_max}"
        )
