"""
Construct boundary-condition solvers from configuration names.
"""

from ...exceptions import ConfigurationError
from .blocked import BlockedBoundaryConditionSolver
from .fractional import FractionalBoundaryConditionSolver

BOUNDARY_CONDITION_SOLVERS = {
    "blocked": BlockedBoundaryConditionSolver,
    "fractional": FractionalBoundaryConditionSolver,
}


def create_boundary_condition_solver(policy="blocked", closed_domain=True):
    """Build a boundary-condition solver by policy name ('blocked' or 'fractional')."""
    try:
        solver_class = BOUNDARY_CONDITION_SOLVERS[policy]
    except KeyError:
        raise ConfigurationError(
            f"Unknown boundary-condition policy '{policy}', expected one of "
            f"{sorted(BOUNDARY_CONDITION_SOLVERS)}"
        )
    return solver_class(closed_domain=closed_domain)
