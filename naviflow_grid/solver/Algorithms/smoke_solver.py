"""
Smoke solver: a grid fluid solver carrying smoke density and temperature.
"""

import logging

import numpy as np

from ...exceptions import ConfigurationError
from .grid_fluid_solver import GridFluidSolver

logger = logging.getLogger(__name__)


class GridSmokeSolver(GridFluidSolver):
    """
    Grid fluid solver with buoyant smoke.

    Buoyancy acts against gravity with magnitude
    ``smoke_density_factor * density + temperature_factor * (T - T_ambient)``,
    where ``T_ambient`` is the mean temperature of the domain. Density and
    temperature are diffused and decayed at the end of every sub-step.

    Parameters:
    -----------
    smoke_diffusion_coefficient, temperature_diffusion_coefficient : float, optional
        Diffusivities of the two scalars
    buoyancy_smoke_density_factor : float, optional
        Buoyancy per unit density; negative makes dense smoke sink
    buoyancy_temperature_factor : float, optional
        Buoyancy per unit temperature above ambient
    smoke_decay_factor, temperature_decay_factor : float, optional
        Fraction removed per sub-step, in [0, 1]
    **kwargs
        Forwarded to ``GridFluidSolver``
    """

    def __init__(self, resolution, smoke_diffusion_coefficient=0.0, temperature_diffusion_coefficient=0.0,
                 buoyancy_smoke_density_factor=-0.000625, buoyancy_temperature_factor=5.0,
                 smoke_decay_factor=0.001, temperature_decay_factor=0.001, **kwargs):
        super().__init__(resolution, **kwargs)
        for name, value in (("smoke_diffusion_coefficient", smoke_diffusion_coefficient),
                            ("temperature_diffusion_coefficient", temperature_diffusion_coefficient)):
            if value < 0.0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        for name, value in (("smoke_decay_factor", smoke_decay_factor),
                            ("temperature_decay_factor", temperature_decay_factor)):
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must lie in [0, 1], got {value}")
        self.smoke_diffusion_coefficient = float(smoke_diffusion_coefficient)
        self.temperature_diffusion_coefficient = float(temperature_diffusion_coefficient)
        self.buoyancy_smoke_density_factor = float(buoyancy_smoke_density_factor)
        self.buoyancy_temperature_factor = float(buoyancy_temperature_factor)
        self.smoke_decay_factor = float(smoke_decay_factor)
        self.temperature_decay_factor = float(temperature_decay_factor)
        self.add_scalar_field("density")
        self.add_scalar_field("temperature")

    @property
    def smoke_density(self):
        return self.scalar_fields["density"]

    @property
    def temperature(self):
        return self.scalar_fields["temperature"]

    def up_direction(self):
        """Unit vector opposite to gravity (+y when gravity is zero)."""
        norm = np.linalg.norm(self.gravity)
        if norm > 0.0:
            return -self.gravity / norm
        up = np.zeros(self.velocity.ndim)
        up[min(1, self.velocity.ndim - 1)] = 1.0
        return up

    def face_acceleration(self, axis):
        return super().face_acceleration(axis) + self.buoyancy_force(axis)

    def buoyancy_force(self, axis):
        """Buoyant acceleration on the faces normal to ``axis``."""
        up = self.up_direction()
        size = self.velocity.data_size(axis)
        if up[axis] == 0.0:
            return np.zeros(size)
        ambient = float(np.mean(self.temperature.data))
        positions = self.velocity.data_positions(axis)
        force = (self.buoyancy_smoke_density_factor * self.smoke_density.sample(positions)
                 + self.buoyancy_temperature_factor * (self.temperature.sample(positions) - ambient))
        return force * up[axis]

    def on_end_advance_time_step(self, time_interval):
        self.compute_scalar_diffusion(time_interval)
        self.compute_scalar_decay()

    def compute_scalar_diffusion(self, time_interval):
        if self.diffusion_solver is None:
            return
        self.profiler.start_section("scalar_diffusion")
        for name, coefficient in (("density", self.smoke_diffusion_coefficient),
                                  ("temperature", self.temperature_diffusion_coefficient)):
            if coefficient <= 0.0:
                continue
            source, dest = self.scalar_fields[name], self._scalar_buffers[name]
            self.diffusion_solver.solve(source, coefficient, time_interval, dest,
                                        self.boundary_sdf(), self.fluid_sdf)
            self.scalar_fields[name], self._scalar_buffers[name] = dest, source
        self.profiler.end_section("scalar_diffusion")

    def compute_scalar_decay(self):
        self.smoke_density.data *= 1.0 - self.smoke_decay_factor
        self.temperature.data *= 1.0 - self.temperature_decay_factor

    def add_smoke_source(self, region, density=1.0, temperature=1.0, velocity=None):
        """
        Emit smoke inside ``region`` (an SDF, ``<= 0`` inside).

        Density and temperature of the covered cells are raised to at least
        the given values; when ``velocity`` is given the faces inside the
        region are set to it.

        Returns:
        --------
        int
            Number of cells inside the region
        """
        positions = self.smoke_density.data_positions()
        inside = region.sample(positions) <= 0.0
        self.smoke_density.data[inside] = np.maximum(self.smoke_density.data[inside], density)
        self.temperature.data[inside] = np.maximum(self.temperature.data[inside], temperature)
        if velocity is not None:
            velocity = np.broadcast_to(np.asarray(velocity, dtype=np.float64), (self.velocity.ndim,))
            for axis in range(self.velocity.ndim):
                faces = region.sample(self.velocity.data_positions(axis)) <= 0.0
                self.velocity.data[axis][faces] = velocity[axis]
        count = int(np.count_nonzero(inside))
        logger.debug("Smoke source covers %d cells", count)
        return count
