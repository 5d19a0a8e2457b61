"""
Matrix-free conjugate gradient solver for symmetric stencil systems.
"""

import numpy as np

from .base_linear_solver import LinearSystemSolver


class ConjugateGradientSolver(LinearSystemSolver):
    """
    (Preconditioned) conjugate gradient on the stencil operator.

    Subclasses supply a preconditioner by overriding ``_setup_preconditioner``
    and ``_precondition``; the plain solver uses the identity.
    """

    name = "ConjugateGradientSolver"

    def _setup_preconditioner(self, system):
        pass

    def _precondition(self, system, r):
        return r.copy()

    def _solve(self, system):
        self._setup_preconditioner(system)
        n = system.size
        x = system.x.reshape(n)
        r = system.b.reshape(n) - system.matvec(x)
        z = self._precondition(system, r)
        p = z.copy()
        q = np.empty(n)
        rz = float(np.dot(r, z))
        res_norm = float(np.linalg.norm(r))
        iterations = 0

        for iterations in range(1, self.max_iterations + 1):
            system.matvec(p, out=q)
            pq = float(np.dot(p, q))
            if pq <= 0.0:
                # search direction left the positive-definite subspace
                break
            alpha = rz / pq
            x += alpha * p
            r -= alpha * q
            res_norm = float(np.linalg.norm(r))
            self._track(res_norm)
            if res_norm < self.tolerance:
                break
            z = self._precondition(system, r)
            rz_new = float(np.dot(r, z))
            p *= rz_new / rz
            p += z
            rz = rz_new

        return iterations, system.residual_norm()
