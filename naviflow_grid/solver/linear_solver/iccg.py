"""
Incomplete-Cholesky preconditioned conjugate gradient.
"""

import numpy as np

from .conjugate_gradient import ConjugateGradientSolver
from .helpers.stencil_kernels import incomplete_cholesky_apply, incomplete_cholesky_factor


class ICCGSolver(ConjugateGradientSolver):
    """
    CG preconditioned with a zero-fill incomplete Cholesky factor.

    The factor is rebuilt on every solve because the stencil changes with the
    marker field. Pivots below ``sigma`` times the diagonal fall back to the
    diagonal to keep the factor well defined.
    """

    name = "ICCGSolver"

    def __init__(self, tolerance=1e-6, max_iterations=1000, sigma=0.25):
        super().__init__(tolerance=tolerance, max_iterations=max_iterations)
        self.sigma = float(sigma)
        self._precon = np.zeros(0)
        self._scratch = np.zeros(0)

    def _setup_preconditioner(self, system):
        if self._precon.size != system.size:
            self._precon = np.zeros(system.size)
            self._scratch = np.zeros(system.size)
        a_center, a_plus, shape, strides = system.kernel_arguments()
        incomplete_cholesky_factor(a_center, a_plus, shape, strides, self.sigma, self._precon)

    def _precondition(self, system, r):
        _, a_plus, shape, strides = system.kernel_arguments()
        z = np.empty_like(r)
        incomplete_cholesky_apply(a_plus, self._precon, r, shape, strides, self._scratch, z)
        return z

    def get_solver_info(self):
        info = super().get_solver_info()
        info["sigma"] = self.sigma
        return info
