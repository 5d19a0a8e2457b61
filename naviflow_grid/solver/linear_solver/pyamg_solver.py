"""
Algebraic multigrid preconditioned CG using PyAMG on the assembled matrix.
"""

import numpy as np
import pyamg
from scipy.sparse.linalg import cg

from .base_linear_solver import LinearSystemSolver


class PyAMGSolver(LinearSystemSolver):
    """
    Conjugate gradient with a smoothed-aggregation AMG V-cycle as preconditioner.

    The stencil system is exported to CSR on every solve, so this solver
    trades memory for robustness on large or badly scaled systems.
    """

    name = "PyAMGSolver"

    def __init__(self, tolerance=1e-6, max_iterations=100,
                 presmoother=("gauss_seidel", {"sweep": "symmetric", "iterations": 1}),
                 postsmoother=("gauss_seidel", {"sweep": "symmetric", "iterations": 1}),
                 cycle_type="V"):
        """
        Parameters:
        -----------
        tolerance : float, optional
            Absolute residual tolerance of the outer CG iteration
        max_iterations : int, optional
            Maximum number of CG iterations
        presmoother, postsmoother : tuple, optional
            PyAMG smoother configuration (type, options)
        cycle_type : str, optional
            Multigrid cycle ('V', 'W', 'F')
        """
        super().__init__(tolerance=tolerance, max_iterations=max_iterations)
        self.presmoother = presmoother
        self.postsmoother = postsmoother
        self.cycle_type = cycle_type

    def _solve(self, system):
        A = system.to_csr()
        b = system.b.reshape(-1)
        ml = pyamg.smoothed_aggregation_solver(
            A,
            presmoother=self.presmoother,
            postsmoother=self.postsmoother,
        )
        M = ml.aspreconditioner(cycle=self.cycle_type)

        def callback(xk):
            self._track(float(np.linalg.norm(b - A @ xk)))

        x, info = cg(
            A,
            b,
            x0=system.x.reshape(-1).copy(),
            M=M,
            rtol=0.0,
            atol=self.tolerance,
            maxiter=self.max_iterations,
            callback=callback,
        )
        system.x[...] = x.reshape(system.shape)
        return len(self.residual_history), system.residual_norm()

    def get_solver_info(self):
        info = super().get_solver_info()
        info["cycle_type"] = self.cycle_type
        return info
