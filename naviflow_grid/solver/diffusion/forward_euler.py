"""
Explicit (forward Euler) diffusion.
"""

import logging

import numpy as np

from .base_diffusion_solver import GridDiffusionSolver
from .helpers.laplacian import forward_euler_step

logger = logging.getLogger(__name__)


class ForwardEulerDiffusionSolver(GridDiffusionSolver):
    """
    ``dest = source + c * dt * L(source)`` on Fluid samples.

    Stable only while ``c * dt / h^2 < 0.5`` on every axis. The bound is a
    precondition of the caller: violating it is logged, never clamped.
    """

    stability_limit = 0.5

    def _diffuse(self, values, markers, grid_spacing, diffusion_coefficient, time_interval):
        ratio = diffusion_coefficient * time_interval / np.asarray(grid_spacing) ** 2
        if np.any(ratio >= self.stability_limit):
            logger.warning(
                "Explicit diffusion outside its stability bound: c*dt/h^2 = %s (limit %.2f)",
                np.array2string(ratio, precision=3), self.stability_limit,
            )
        return forward_euler_step(values, markers, grid_spacing, diffusion_coefficient * time_interval)
