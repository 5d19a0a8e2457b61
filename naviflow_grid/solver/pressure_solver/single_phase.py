"""
Single-phase pressure solver with blocked (binary) boundaries.
"""

import numpy as np

from ..markers import AIR, BOUNDARY, FLUID
from .base_pressure_solver import GridPressureSolver, face_slices, interior_faces


class SinglePhasePressureSolver(GridPressureSolver):
    """
    Pressure projection on a cell-centered marker field.

    Fluid cells carry the unknowns. Air neighbours are Dirichlet ``p = 0``,
    Boundary neighbours and the domain edges are zero flux. Air and Boundary
    cells are identity rows with ``b = 0``. Only faces touching a Fluid cell
    and no Boundary cell are corrected.
    """

    def build_markers(self, velocity, boundary_sdf, fluid_sdf):
        markers = self.marker_builder.build(
            velocity.resolution, velocity.cell_center_position, boundary_sdf, fluid_sdf)
        return markers == FLUID

    def build_system(self, velocity, time_interval, boundary_sdf, boundary_velocity, fluid_sdf):
        system = self.system
        markers = self.markers
        ndim = velocity.ndim
        fluid = markers == FLUID
        air = markers == AIR
        h = velocity.grid_spacing

        system.b[...] = np.where(fluid, -velocity.divergence_at_cell_centers(), 0.0)
        for axis in range(ndim):
            c = time_interval / (self.density * h[axis] ** 2)
            lower, upper = face_slices(ndim, axis)

            fluid_pair = fluid[lower] & fluid[upper]
            system.a_plus[axis][lower][fluid_pair] = -c
            open_lower = fluid[lower] & (fluid[upper] | air[upper])
            open_upper = fluid[upper] & (fluid[lower] | air[lower])
            system.a_center[lower] += np.where(open_lower, c, 0.0)
            system.a_center[upper] += np.where(open_upper, c, 0.0)

        # non-fluid cells and fully enclosed fluid cells keep p = 0
        trivial = ~fluid | (system.a_center == 0.0)
        system.a_center[trivial] = 1.0
        system.b[trivial] = 0.0
        return system

    def apply_pressure_gradient(self, input_velocity, time_interval, output_velocity,
                                boundary_sdf, boundary_velocity, fluid_sdf):
        markers = self.markers
        pressure = self.system.x
        ndim = input_velocity.ndim
        for axis in range(ndim):
            lower, upper = face_slices(ndim, axis)
            left, right = markers[lower], markers[upper]
            correct = ((left == FLUID) | (right == FLUID)) & (left != BOUNDARY) & (right != BOUNDARY)
            gradient = (pressure[upper] - pressure[lower]) / input_velocity.grid_spacing[axis]
            faces = output_velocity.data[axis][interior_faces(ndim, axis)]
            faces -= np.where(correct, time_interval / self.density * gradient, 0.0)
        return output_velocity
