"""
Construct pressure solvers from configuration names.
"""

from ...exceptions import ConfigurationError
from .fractional import FractionalSinglePhasePressureSolver
from .single_phase import SinglePhasePressureSolver

PRESSURE_SOLVERS = {
    "single_phase": SinglePhasePressureSolver,
    "fractional": FractionalSinglePhasePressureSolver,
}


def create_pressure_solver(kind="single_phase", linear_solver=None, density=1.0):
    """Build a pressure solver by name ('single_phase' or 'fractional')."""
    try:
        solver_class = PRESSURE_SOLVERS[kind]
    except KeyError:
        raise ConfigurationError(
            f"Unknown pressure solver '{kind}', expected one of {sorted(PRESSURE_SOLVERS)}"
        )
    return solver_class(linear_solver=linear_solver, density=density)
