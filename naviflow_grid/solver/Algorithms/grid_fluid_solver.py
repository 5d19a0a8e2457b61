"""
Grid fluid solver.

Drives one simulation frame by sequencing the stages on a face-centered
velocity grid:

    external forces -> advection -> diffusion -> boundary conditions
    -> pressure projection -> boundary conditions -> scalar advection

Each stage reads the current grid and writes a second buffer which is then
swapped in, so no stage reads what it is writing.
"""

import logging
import math

import numpy as np

from ...constructor.properties.fluid import FluidProperties
from ...exceptions import ConfigurationError
from ...preprocessing.grids import CellCenteredScalarGrid, FaceCenteredGrid
from ..advection import SemiLagrangianSolver
from ..boundary_conditions import BlockedBoundaryConditionSolver
from ..diffusion import ForwardEulerDiffusionSolver
from ..markers import fluid_everywhere, no_boundary
from ..pressure_solver import SinglePhasePressureSolver
from ...utils.profiler import Profiler

logger = logging.getLogger(__name__)

DEFAULT_GRAVITY = -9.8


def default_gravity(ndim):
    """Gravity pulling along -y (along -x for 1-D grids)."""
    gravity = np.zeros(ndim)
    gravity[min(1, ndim - 1)] = DEFAULT_GRAVITY
    return gravity


class GridFluidSolver:
    """
    Incompressible grid fluid solver.

    Parameters:
    -----------
    resolution : int or sequence of int
        Cell counts per axis
    grid_spacing : float or sequence of float, optional
        Cell size per axis
    origin : float or sequence of float, optional
        Lower domain corner
    fluid : FluidProperties, optional
        Density and viscosity; defaults to an inviscid unit-density fluid
    gravity : array-like, optional
        Gravity vector; defaults to -9.8 along y
    advection_solver, diffusion_solver, pressure_solver, boundary_condition_solver : optional
        Stage implementations; default to semi-Lagrangian, forward Euler,
        single-phase and blocked
    use_adaptive_time_stepping : bool, optional
        Split each frame into sub-steps bounded by ``max_cfl``
    max_cfl : float, optional
        Largest CFL number allowed per sub-step
    closed_domain : bool or array-like, optional
        Solid walls on the domain sides, see ``closed_domain_flags``
    extrapolation_depth : int, optional
        Passes used to extrapolate velocity into colliders
    """

    def __init__(self, resolution, grid_spacing=1.0, origin=0.0, fluid=None, gravity=None,
                 advection_solver=None, diffusion_solver=None, pressure_solver=None,
                 boundary_condition_solver=None, use_adaptive_time_stepping=True,
                 max_cfl=5.0, closed_domain=True, extrapolation_depth=5, interpolation="linear"):
        self.velocity = FaceCenteredGrid(resolution, grid_spacing, origin, interpolation=interpolation)
        self._velocity_buffer = self.velocity.clone()
        ndim = self.velocity.ndim

        self.fluid = fluid if fluid is not None else FluidProperties()
        self.gravity = default_gravity(ndim) if gravity is None else np.asarray(gravity, dtype=np.float64)
        if self.gravity.shape != (ndim,):
            raise ConfigurationError(f"Gravity must have {ndim} components, got {self.gravity.shape}")
        if max_cfl <= 0.0:
            raise ConfigurationError(f"max_cfl must be positive, got {max_cfl}")

        self.advection_solver = advection_solver if advection_solver is not None else SemiLagrangianSolver()
        self.diffusion_solver = diffusion_solver if diffusion_solver is not None else ForwardEulerDiffusionSolver()
        self.pressure_solver = pressure_solver if pressure_solver is not None else SinglePhasePressureSolver(
            density=self.fluid.get_density())
        self.boundary_condition_solver = (
            boundary_condition_solver if boundary_condition_solver is not None
            else BlockedBoundaryConditionSolver()
        )
        self.boundary_condition_solver.closed_domain = closed_domain

        self.use_adaptive_time_stepping = use_adaptive_time_stepping
        self.max_cfl = float(max_cfl)
        self.extrapolation_depth = int(extrapolation_depth)

        self.collider = None
        self.fluid_sdf = fluid_everywhere()
        self.force_fields = []
        self.scalar_fields = {}
        self._scalar_buffers = {}

        self.current_time = 0.0
        self.current_frame = 0
        self.last_pressure_result = None
        self.profiler = Profiler(type(self).__name__, self.velocity.resolution)

    # -- configuration -----------------------------------------------------

    @property
    def resolution(self):
        return self.velocity.resolution

    @property
    def grid_spacing(self):
        return self.velocity.grid_spacing

    @property
    def viscosity_coefficient(self):
        return self.fluid.get_kinematic_viscosity()

    def set_collider(self, collider):
        self.collider = collider
        self.boundary_condition_solver.update_collider(collider)

    def set_fluid_sdf(self, fluid_sdf):
        """Restrict the fluid to the region where ``fluid_sdf <= 0``; the rest is Air."""
        self.fluid_sdf = fluid_sdf if fluid_sdf is not None else fluid_everywhere()

    def add_force_field(self, force_field):
        """Add a body-force (acceleration) field sampled at the face centers."""
        self.force_fields.append(force_field)

    def add_scalar_field(self, name, initial_value=0.0, interpolation="linear"):
        """
        Register a cell-centered scalar advected with the flow after projection.

        Returns:
        --------
        CellCenteredScalarGrid
            The new grid; access it later through ``scalar_fields[name]``
        """
        if name in self.scalar_fields:
            raise ConfigurationError(f"Scalar field '{name}' already exists")
        grid = CellCenteredScalarGrid(self.velocity.resolution, self.velocity.grid_spacing,
                                      self.velocity.origin, initial_value, interpolation)
        self.scalar_fields[name] = grid
        self._scalar_buffers[name] = grid.clone()
        return grid

    def boundary_sdf(self):
        return self.collider.surface if self.collider is not None else no_boundary()

    def boundary_velocity(self):
        return self.collider.velocity_field if self.collider is not None else None

    # -- time stepping -----------------------------------------------------

    def cfl(self, time_interval):
        """CFL number of the current velocity including one step of gravity."""
        velocity = self.velocity.value_at_cell_centers() + time_interval * self.gravity
        max_speed = float(np.max(np.linalg.norm(velocity, axis=-1)))
        return max_speed * time_interval / float(np.min(self.velocity.grid_spacing))

    def number_of_sub_time_steps(self, time_interval):
        if not self.use_adaptive_time_stepping:
            return 1
        return max(int(math.ceil(self.cfl(time_interval) / self.max_cfl)), 1)

    def advance_frame(self, time_interval):
        """
        Advance the simulation by ``time_interval``.

        Returns:
        --------
        dict
            Frame metrics: sub-step count, pressure-solve outcome and the
            largest remaining divergence
        """
        if time_interval <= 0.0:
            raise ConfigurationError(f"Time interval must be positive, got {time_interval}")
        self.profiler.start()
        num_sub_steps = self.number_of_sub_time_steps(time_interval)
        if num_sub_steps > 1:
            logger.info("Frame %d split into %d sub-steps", self.current_frame, num_sub_steps)
        sub_dt = time_interval / num_sub_steps
        for _ in range(num_sub_steps):
            self.on_advance_time_step(sub_dt)
            self.current_time += sub_dt
        self.current_frame += 1
        self.profiler.end()
        self.profiler.count_frame(num_sub_steps)
        self.profiler.sample_memory()

        result = self.last_pressure_result
        return {
            "frame": self.current_frame,
            "sub_steps": num_sub_steps,
            "pressure_converged": result.converged if result else None,
            "pressure_iterations": result.iterations if result else 0,
            "pressure_residual": result.residual if result else None,
            "divergence_max": float(np.max(np.abs(self.velocity.divergence_at_cell_centers()))),
        }

    def on_advance_time_step(self, time_interval):
        self.on_begin_advance_time_step(time_interval)
        self.compute_external_forces(time_interval)
        self.compute_advection(time_interval)
        self.compute_viscosity(time_interval)
        self.apply_boundary_condition()
        self.compute_pressure(time_interval)
        self.apply_boundary_condition()
        self.compute_scalar_advection(time_interval)
        self.on_end_advance_time_step(time_interval)

    def on_begin_advance_time_step(self, time_interval):
        if self.collider is not None:
            self.collider.update(self.current_time, time_interval)
            self.boundary_condition_solver.update_collider(self.collider)

    def on_end_advance_time_step(self, time_interval):
        pass

    # -- stages --------------------------------------------------------------

    def _swap_velocity(self):
        self.velocity, self._velocity_buffer = self._velocity_buffer, self.velocity

    def face_acceleration(self, axis):
        """Gravity plus user force fields on the faces normal to ``axis``."""
        acceleration = np.full(self.velocity.data_size(axis), self.gravity[axis])
        if self.force_fields:
            positions = self.velocity.data_positions(axis)
            for force_field in self.force_fields:
                acceleration += force_field.sample(positions)[..., axis]
        return acceleration

    def compute_external_forces(self, time_interval):
        self.profiler.start_section("forces")
        source, dest = self.velocity, self._velocity_buffer
        for axis in range(source.ndim):
            dest.data[axis][...] = source.data[axis] + time_interval * self.face_acceleration(axis)
        self._swap_velocity()
        self.profiler.end_section("forces")

    def compute_advection(self, time_interval):
        self.profiler.start_section("advection")
        self.advection_solver.advect(self.velocity, self.velocity, time_interval,
                                     self._velocity_buffer, self.boundary_sdf())
        self._swap_velocity()
        self.profiler.end_section("advection")

    def compute_viscosity(self, time_interval):
        if self.diffusion_solver is None or self.viscosity_coefficient <= 0.0:
            return
        self.profiler.start_section("diffusion")
        self.diffusion_solver.solve(self.velocity, self.viscosity_coefficient, time_interval,
                                    self._velocity_buffer, self.boundary_sdf(), self.fluid_sdf)
        self._swap_velocity()
        self.profiler.end_section("diffusion")

    def apply_boundary_condition(self):
        self.profiler.start_section("boundary_condition")
        self._velocity_buffer.copy_from(self.velocity)
        self.boundary_condition_solver.constrain_velocity(self._velocity_buffer, self.extrapolation_depth)
        self._swap_velocity()
        self.profiler.end_section("boundary_condition")

    def compute_pressure(self, time_interval):
        self.profiler.start_section("pressure")
        self.last_pressure_result = self.pressure_solver.solve(
            self.velocity, time_interval, self._velocity_buffer,
            self.boundary_sdf(), self.boundary_velocity(), self.fluid_sdf)
        self._swap_velocity()
        self.profiler.end_section("pressure")
        linear_solver = self.pressure_solver.linear_solver
        self.profiler.set_pressure_solver_info(
            type(self.pressure_solver).__name__, linear_solver.get_solver_info(),
            self.last_pressure_result)

    def compute_scalar_advection(self, time_interval):
        if not self.scalar_fields:
            return
        self.profiler.start_section("scalar_advection")
        for name in self.scalar_fields:
            source, dest = self.scalar_fields[name], self._scalar_buffers[name]
            self.advection_solver.advect(source, self.velocity, time_interval, dest, self.boundary_sdf())
            self.scalar_fields[name], self._scalar_buffers[name] = dest, source
        self.profiler.end_section("scalar_advection")
