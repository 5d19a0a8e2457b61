"""
Base class for pressure projection solvers.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from ...exceptions import ConfigurationError, GridMismatchError
from ...preprocessing.grids import FaceCenteredGrid
from ..linear_solver import ICCGSolver, LinearSolveResult, StencilSystem
from ..markers import MarkerBuilder, fluid_everywhere, no_boundary

logger = logging.getLogger(__name__)


def face_slices(ndim, axis):
    """Slices selecting the lower and upper neighbour along ``axis``."""
    lower = [slice(None)] * ndim
    upper = [slice(None)] * ndim
    lower[axis] = slice(0, -1)
    upper[axis] = slice(1, None)
    return tuple(lower), tuple(upper)


def interior_faces(ndim, axis):
    """Slice selecting the faces between two cells along ``axis``."""
    index = [slice(None)] * ndim
    index[axis] = slice(1, -1)
    return tuple(index)


class GridPressureSolver(ABC):
    """
    Projects a face-centered velocity field onto its divergence-free part.

    The pressure system is ``A p = b`` with ``A = -(dt/rho) L`` assembled over
    Fluid cells and ``b = -div(u*)``; the corrected velocity is
    ``u = u* - dt/rho grad(p)``. The system buffers and marker buffer are
    owned by the solver and reused between calls.

    Parameters:
    -----------
    linear_solver : LinearSystemSolver, optional
        Solver for the pressure system; defaults to ICCG
    density : float, optional
        Fluid density rho
    """

    def __init__(self, linear_solver=None, density=1.0):
        if density <= 0.0:
            raise ConfigurationError(f"Density must be positive, got {density}")
        self.linear_solver = linear_solver if linear_solver is not None else ICCGSolver(
            tolerance=1e-8, max_iterations=1000)
        self.density = float(density)
        self.system = StencilSystem()
        self.marker_builder = MarkerBuilder()
        self.last_solve_result = None

    @property
    def markers(self):
        return self.marker_builder.markers

    @property
    def pressure(self):
        """Pressure from the last solve, cell-centered."""
        return self.system.x

    def solve(self, input_velocity, time_interval, output_velocity,
              boundary_sdf=None, boundary_velocity=None, fluid_sdf=None):
        """
        Project ``input_velocity`` into ``output_velocity``.

        Parameters:
        -----------
        input_velocity : FaceCenteredGrid
            Intermediate velocity u*
        time_interval : float
            Strictly positive time step
        output_velocity : FaceCenteredGrid
            Destination with the same layout; must not be ``input_velocity``
        boundary_sdf : ScalarField, optional
            Solid region, defaults to no solid
        boundary_velocity : VectorField, optional
            Velocity of the solid, defaults to zero
        fluid_sdf : ScalarField, optional
            Fluid region, defaults to fluid everywhere

        Returns:
        --------
        LinearSolveResult
            Outcome of the pressure solve; non-convergence is not an error
        """
        if not isinstance(input_velocity, FaceCenteredGrid):
            raise ConfigurationError("Pressure projection requires a face-centered velocity grid")
        if time_interval <= 0.0:
            raise ConfigurationError(f"Time interval must be positive, got {time_interval}")
        if output_velocity is input_velocity:
            raise GridMismatchError("Pressure projection cannot write into its input grid")
        input_velocity.check_same_shape(output_velocity, "pressure input/output")
        if boundary_sdf is None:
            boundary_sdf = no_boundary()
        if fluid_sdf is None:
            fluid_sdf = fluid_everywhere()

        output_velocity.copy_from(input_velocity)
        fluid = self.build_markers(input_velocity, boundary_sdf, fluid_sdf)
        if not np.any(fluid):
            logger.debug("No fluid cells, pressure projection skipped")
            self.system.resize(input_velocity.resolution).clear()
            self.last_solve_result = LinearSolveResult(True, 0, 0.0, self.linear_solver.tolerance)
            return self.last_solve_result

        system = self.system.resize(input_velocity.resolution)
        system.clear()
        self.build_system(input_velocity, time_interval, boundary_sdf, boundary_velocity, fluid_sdf)
        self.last_solve_result = self.linear_solver.solve(system)
        self.apply_pressure_gradient(input_velocity, time_interval, output_velocity,
                                     boundary_sdf, boundary_velocity, fluid_sdf)
        return self.last_solve_result

    def _collider_velocity(self, boundary_velocity, positions):
        if boundary_velocity is None:
            return np.zeros(positions.shape)
        return boundary_velocity.sample(positions)

    @abstractmethod
    def build_markers(self, velocity, boundary_sdf, fluid_sdf):
        """Classify cells; return the bool mask of cells with a pressure unknown."""
        pass

    @abstractmethod
    def build_system(self, velocity, time_interval, boundary_sdf, boundary_velocity, fluid_sdf):
        """Fill ``self.system`` for the current markers."""
        pass

    @abstractmethod
    def apply_pressure_gradient(self, input_velocity, time_interval, output_velocity,
                                boundary_sdf, boundary_velocity, fluid_sdf):
        """Subtract ``dt/rho grad(p)`` from ``output_velocity``."""
        pass
