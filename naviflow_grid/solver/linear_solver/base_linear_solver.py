"""
Base class for iterative solvers of stencil systems.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class LinearSolveResult:
    """
    Outcome of one linear solve. Not reaching the tolerance is reported here,
    never raised.
    """

    converged: bool
    iterations: int
    residual: float
    tolerance: float


class LinearSystemSolver(ABC):
    """
    Base class for linear system solvers.

    Solvers update ``system.x`` in place, starting from its current content.
    Convergence is declared once the L2 norm of ``b - A x`` drops below
    ``tolerance``.
    """

    name = "LinearSystemSolver"

    def __init__(self, tolerance=1e-6, max_iterations=1000):
        """
        Parameters:
        -----------
        tolerance : float, optional
            Absolute residual tolerance
        max_iterations : int, optional
            Iteration cap; the only bound on the cost of one solve
        """
        if tolerance <= 0.0:
            raise ConfigurationError(f"tolerance must be positive, got {tolerance}")
        if int(max_iterations) < 1:
            raise ConfigurationError(f"max_iterations must be at least 1, got {max_iterations}")
        self.tolerance = float(tolerance)
        self.max_iterations = int(max_iterations)
        self.residual_history = []
        self.inner_iterations_history = []
        self.total_inner_iterations = 0
        self.convergence_rates = []
        self.last_result = None

    def solve(self, system):
        """
        Solve ``system`` in place.

        Returns:
        --------
        LinearSolveResult
            Convergence flag, iteration count and final residual norm
        """
        self.residual_history = []
        self.convergence_rates = []
        if system.size == 0:
            result = LinearSolveResult(True, 0, 0.0, self.tolerance)
        else:
            initial = system.residual_norm()
            if initial < self.tolerance:
                result = LinearSolveResult(True, 0, initial, self.tolerance)
            else:
                iterations, residual = self._solve(system)
                result = LinearSolveResult(residual < self.tolerance, iterations, residual, self.tolerance)

        self.inner_iterations_history.append(result.iterations)
        self.total_inner_iterations += result.iterations
        self.last_result = result
        if result.converged:
            logger.debug("%s converged in %d iterations, residual: %.6e",
                         self.name, result.iterations, result.residual)
        else:
            logger.warning("%s did not converge in %d iterations, residual: %.6e (tolerance %.1e)",
                           self.name, result.iterations, result.residual, self.tolerance)
        return result

    @abstractmethod
    def _solve(self, system):
        """Iterate on ``system.x``; return ``(iterations, final_residual_norm)``."""
        pass

    def _track(self, res_norm):
        if self.residual_history and self.residual_history[-1] > 0.0:
            self.convergence_rates.append(res_norm / self.residual_history[-1])
        self.residual_history.append(res_norm)

    def get_solver_info(self):
        """
        Get information about the solver's performance.

        Returns:
        --------
        dict
            Dictionary containing solver performance metrics
        """
        if self.convergence_rates:
            last_rates = self.convergence_rates[-min(10, len(self.convergence_rates)):]
            avg_rate = sum(last_rates) / len(last_rates)
        else:
            avg_rate = None
        return {
            "name": self.name,
            "inner_iterations_history": list(self.inner_iterations_history),
            "total_inner_iterations": self.total_inner_iterations,
            "convergence_rate": avg_rate,
            "tolerance": self.tolerance,
            "max_iterations": self.max_iterations,
            "last_residual": self.last_result.residual if self.last_result else None,
        }
