"""
Fractional single-phase pressure solver.

Solid boundaries enter through face weights (the open fraction of each face
measured on the boundary SDF). The free surface enters through a ghost-fluid
treatment of the fluid SDF: the distance to an Air neighbour is shortened to
the fraction ``theta`` of the cell spacing at which the surface crosses.
"""

import numpy as np

from ...preprocessing.fields import fraction_inside_sdf
from ..boundary_conditions.fractional import face_weights
from ..markers import FLUID, no_boundary
from .base_pressure_solver import GridPressureSolver, face_slices, interior_faces

MIN_THETA = 0.01


class FractionalSinglePhasePressureSolver(GridPressureSolver):
    """
    Pressure projection with sub-cell solid and free-surface geometry.

    Fully blocked faces (weight 0) take the boundary velocity. Faces with a
    positive weight next to at least one Fluid cell are corrected with the
    pressure gradient, using the ghost-fluid distance across the free surface.
    """

    def __init__(self, linear_solver=None, density=1.0):
        super().__init__(linear_solver=linear_solver, density=density)
        self.face_weights = []
        self.fluid_phi = np.zeros(0)

    def build_markers(self, velocity, boundary_sdf, fluid_sdf):
        markers = self.marker_builder.build(
            velocity.resolution, velocity.cell_center_position, no_boundary(), fluid_sdf)
        self.fluid_phi = fluid_sdf.sample(
            velocity.cell_center_position(np.moveaxis(np.indices(velocity.resolution), 0, -1)))
        self.face_weights = [face_weights(boundary_sdf, velocity, axis) for axis in range(velocity.ndim)]
        return markers == FLUID

    def _theta(self, lower, upper):
        theta = fraction_inside_sdf(self.fluid_phi[lower], self.fluid_phi[upper])
        return np.maximum(theta, MIN_THETA)

    def build_system(self, velocity, time_interval, boundary_sdf, boundary_velocity, fluid_sdf):
        system = self.system
        ndim = velocity.ndim
        fluid = self.markers == FLUID
        h = velocity.grid_spacing

        divergence = np.zeros(velocity.resolution)
        for axis in range(ndim):
            weights = self.face_weights[axis]
            solid_velocity = self._collider_velocity(boundary_velocity, velocity.data_positions(axis))[..., axis]
            flux = weights * velocity.data[axis] + (1.0 - weights) * solid_velocity
            lower, upper = face_slices(ndim, axis)
            divergence += (flux[upper] - flux[lower]) / h[axis]

            c = time_interval / (self.density * h[axis] ** 2)
            term = c * weights[interior_faces(ndim, axis)]
            fluid_pair = fluid[lower] & fluid[upper]
            theta = self._theta(lower, upper)
            system.a_plus[axis][lower][fluid_pair] = -term[fluid_pair]
            system.a_center[lower] += np.where(
                fluid[lower], np.where(fluid[upper], term, term / theta), 0.0)
            system.a_center[upper] += np.where(
                fluid[upper], np.where(fluid[lower], term, term / theta), 0.0)

        system.b[...] = np.where(fluid, -divergence, 0.0)
        trivial = ~fluid | (system.a_center == 0.0)
        system.a_center[trivial] = 1.0
        system.b[trivial] = 0.0
        return system

    def apply_pressure_gradient(self, input_velocity, time_interval, output_velocity,
                                boundary_sdf, boundary_velocity, fluid_sdf):
        fluid = self.markers == FLUID
        pressure = self.system.x
        ndim = input_velocity.ndim
        for axis in range(ndim):
            weights = self.face_weights[axis]
            lower, upper = face_slices(ndim, axis)
            interior = interior_faces(ndim, axis)

            both = fluid[lower] & fluid[upper]
            distance = np.where(both, 1.0, self._theta(lower, upper)) * input_velocity.grid_spacing[axis]
            gradient = (pressure[upper] - pressure[lower]) / distance
            correct = (fluid[lower] | fluid[upper]) & (weights[interior] > 0.0)
            faces = output_velocity.data[axis][interior]
            faces -= np.where(correct, time_interval / self.density * gradient, 0.0)

            blocked = weights <= 0.0
            if np.any(blocked):
                positions = input_velocity.data_positions(axis)[blocked]
                output_velocity.data[axis][blocked] = self._collider_velocity(
                    boundary_velocity, positions)[..., axis]
        return output_velocity
