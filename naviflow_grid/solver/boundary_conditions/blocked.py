"""
Blocked (binary) boundary conditions.
"""

import numpy as np

from ..markers import BOUNDARY, MarkerBuilder, fluid_everywhere
from .base_boundary_condition_solver import GridBoundaryConditionSolver


class BlockedBoundaryConditionSolver(GridBoundaryConditionSolver):
    """
    Treats every cell whose center lies inside the collider as solid.

    A face is blocked when its own center is inside the collider or when it
    bounds a solid cell; blocked faces take the collider's velocity component
    normal to the face.
    """

    def __init__(self, closed_domain=True):
        super().__init__(closed_domain)
        self.cell_marker_builder = MarkerBuilder()

    @property
    def cell_markers(self):
        return self.cell_marker_builder.markers

    def blocked_faces(self, velocity, axis):
        """Mask of blocked faces for component ``axis``."""
        sdf = self.collider_sdf()
        solid = self.cell_markers == BOUNDARY
        pad = [(0, 0)] * velocity.ndim
        pad[axis] = (1, 1)
        padded = np.pad(solid, pad, constant_values=False)
        lower = [slice(None)] * velocity.ndim
        upper = [slice(None)] * velocity.ndim
        lower[axis] = slice(0, -1)
        upper[axis] = slice(1, None)
        touching = padded[tuple(lower)] | padded[tuple(upper)]
        return touching | (sdf.sample(velocity.data_positions(axis)) <= 0.0)

    def constrain_velocity(self, velocity, extrapolation_depth=5):
        self.cell_marker_builder.build(
            velocity.resolution, velocity.cell_center_position, self.collider_sdf(), fluid_everywhere())
        for axis in range(velocity.ndim):
            blocked = self.blocked_faces(velocity, axis)
            if np.any(blocked):
                positions = velocity.data_positions(axis)[blocked]
                velocity.data[axis][blocked] = self.collider_velocity(positions)[..., axis]
        self._apply_closed_domain(velocity)
        return velocity
