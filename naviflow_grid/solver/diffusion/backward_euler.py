"""
Implicit (backward Euler) diffusion.
"""

import logging

import numpy as np

from ...exceptions import ConfigurationError
from ..linear_solver import ICCGSolver, StencilSystem
from ..markers import FLUID
from .base_diffusion_solver import GridDiffusionSolver

logger = logging.getLogger(__name__)


class BackwardEulerDiffusionSolver(GridDiffusionSolver):
    """
    Solves ``(I - c dt L) x = source`` on Fluid samples.

    Unconditionally stable. Non-fluid samples are identity rows that keep
    their source value. With ``boundary_type="neumann"`` non-fluid neighbours
    add no flux; with ``"dirichlet"`` their source value is held fixed and
    enters the right-hand side.

    Parameters:
    -----------
    boundary_type : str, optional
        'neumann' (default) or 'dirichlet'
    linear_solver : LinearSystemSolver, optional
        Defaults to an ICCG solver
    """

    boundary_types = ("neumann", "dirichlet")

    def __init__(self, boundary_type="neumann", linear_solver=None):
        super().__init__()
        if boundary_type not in self.boundary_types:
            raise ConfigurationError(f"boundary_type must be 'neumann' or 'dirichlet', got '{boundary_type}'")
        self.boundary_type = boundary_type
        self.linear_solver = linear_solver if linear_solver is not None else ICCGSolver(
            tolerance=1e-9, max_iterations=1000)
        self.system = StencilSystem()
        self.last_solve_result = None

    def build_system(self, values, markers, grid_spacing, coeff_dt):
        """Assemble the implicit diffusion system for one component into ``self.system``."""
        system = self.system.resize(values.shape)
        system.clear()
        ndim = values.ndim
        fluid = markers == FLUID
        dirichlet = self.boundary_type == "dirichlet"

        system.a_center[...] = 1.0
        system.b[...] = values
        system.x[...] = values
        for axis in range(ndim):
            c = coeff_dt / grid_spacing[axis] ** 2
            lower = [slice(None)] * ndim
            upper = [slice(None)] * ndim
            lower[axis] = slice(0, -1)
            upper[axis] = slice(1, None)
            lower, upper = tuple(lower), tuple(upper)

            fluid_pair = fluid[lower] & fluid[upper]
            system.a_plus[axis][lower][fluid_pair] = -c
            if dirichlet:
                # any in-domain neighbour couples; non-fluid ones through b
                system.a_center[lower] += np.where(fluid[lower], c, 0.0)
                system.a_center[upper] += np.where(fluid[upper], c, 0.0)
                system.b[lower] += np.where(fluid[lower] & ~fluid[upper], c * values[upper], 0.0)
                system.b[upper] += np.where(fluid[upper] & ~fluid[lower], c * values[lower], 0.0)
            else:
                system.a_center[lower] += np.where(fluid_pair, c, 0.0)
                system.a_center[upper] += np.where(fluid_pair, c, 0.0)
        return system

    def _diffuse(self, values, markers, grid_spacing, diffusion_coefficient, time_interval):
        values = np.asarray(values, dtype=np.float64)
        if not np.any(markers == FLUID):
            return values.copy()
        system = self.build_system(values, markers, grid_spacing, diffusion_coefficient * time_interval)
        self.last_solve_result = self.linear_solver.solve(system)
        logger.debug("Implicit diffusion solve: %d iterations, residual %.3e",
                     self.last_solve_result.iterations, self.last_solve_result.residual)
        return system.x.copy()
