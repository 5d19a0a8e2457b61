"""
Weighted Jacobi solver for stencil systems.
"""

import numpy as np

from .base_linear_solver import LinearSystemSolver
from .helpers.stencil_kernels import jacobi_sweep


class JacobiSolver(LinearSystemSolver):
    """
    Jacobi iteration, every sample updated from the previous iterate.

    Parameters:
    -----------
    omega : float, optional
        Relaxation weight; 1.0 is plain Jacobi, 2/3 a common damped choice
    """

    name = "JacobiSolver"

    def __init__(self, tolerance=1e-6, max_iterations=1000, omega=1.0):
        super().__init__(tolerance=tolerance, max_iterations=max_iterations)
        self.omega = float(omega)

    def _solve(self, system):
        a_center, a_plus, shape, strides = system.kernel_arguments()
        b = system.b.reshape(-1)
        x = system.x.reshape(-1)
        x_next = np.empty_like(x)
        res_norm = np.inf
        iterations = 0
        for iterations in range(1, self.max_iterations + 1):
            jacobi_sweep(a_center, a_plus, x, b, shape, strides, self.omega, x_next)
            x, x_next = x_next, x
            res_norm = system.residual_norm(x.reshape(system.shape))
            self._track(res_norm)
            if res_norm < self.tolerance:
                break
        system.x[...] = x.reshape(system.shape)
        return iterations, res_norm

    def get_solver_info(self):
        info = super().get_solver_info()
        info["omega"] = self.omega
        return info
