"""
Gauss-Seidel / SOR solver for stencil systems.
"""

from ...exceptions import ConfigurationError
from .base_linear_solver import LinearSystemSolver
from .helpers.stencil_kernels import gauss_seidel_color_sweep, gauss_seidel_sweep


class GaussSeidelSolver(LinearSystemSolver):
    """
    Gauss-Seidel iteration with optional over-relaxation.

    Red-black ordering updates all samples of one parity in parallel, then
    the other. Standard ordering sweeps lexicographically, symmetric ordering
    adds a backward sweep.
    """

    name = "GaussSeidelSolver"
    method_types = ("red_black", "standard", "symmetric")

    def __init__(self, tolerance=1e-6, max_iterations=1000, omega=1.0, method_type="red_black"):
        """
        Parameters:
        -----------
        tolerance : float, optional
            Absolute residual tolerance
        max_iterations : int, optional
            Maximum number of sweeps
        omega : float, optional
            Relaxation factor for SOR; 1.0 is plain Gauss-Seidel
        method_type : str, optional
            'red_black', 'standard' or 'symmetric'
        """
        super().__init__(tolerance=tolerance, max_iterations=max_iterations)
        if method_type not in self.method_types:
            raise ConfigurationError("method_type must be one of 'red_black', 'standard', or 'symmetric'")
        if not 0.0 < omega < 2.0:
            raise ConfigurationError(f"SOR factor must lie in (0, 2), got {omega}")
        self.omega = float(omega)
        self.method_type = method_type

    def _sweep(self, a_center, a_plus, x, b, shape, strides):
        if self.method_type == "red_black":
            gauss_seidel_color_sweep(a_center, a_plus, x, b, shape, strides, self.omega, 0)
            gauss_seidel_color_sweep(a_center, a_plus, x, b, shape, strides, self.omega, 1)
        else:
            gauss_seidel_sweep(a_center, a_plus, x, b, shape, strides, self.omega, False)
            if self.method_type == "symmetric":
                gauss_seidel_sweep(a_center, a_plus, x, b, shape, strides, self.omega, True)

    def _solve(self, system):
        a_center, a_plus, shape, strides = system.kernel_arguments()
        b = system.b.reshape(-1)
        x = system.x.reshape(-1)
        res_norm = float("inf")
        iterations = 0
        for iterations in range(1, self.max_iterations + 1):
            self._sweep(a_center, a_plus, x, b, shape, strides)
            res_norm = system.residual_norm()
            self._track(res_norm)
            if res_norm < self.tolerance:
                break
        return iterations, res_norm

    def get_solver_info(self):
        info = super().get_solver_info()
        info.update({"omega": self.omega, "method": self.method_type.capitalize()})
        return info
