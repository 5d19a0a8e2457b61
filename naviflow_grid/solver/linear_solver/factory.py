"""
Construct linear solvers from configuration names.
"""

from ...exceptions import ConfigurationError
from .conjugate_gradient import ConjugateGradientSolver
from .gauss_seidel import GaussSeidelSolver
from .iccg import ICCGSolver
from .jacobi import JacobiSolver
from .pyamg_solver import PyAMGSolver

LINEAR_SOLVERS = {
    "jacobi": JacobiSolver,
    "gauss_seidel": GaussSeidelSolver,
    "cg": ConjugateGradientSolver,
    "iccg": ICCGSolver,
    "amg": PyAMGSolver,
}


def create_linear_solver(name="iccg", **options):
    """
    Build a linear solver by name ('jacobi', 'gauss_seidel', 'cg', 'iccg', 'amg').

    Extra keyword options are forwarded to the solver's constructor.
    """
    try:
        solver_class = LINEAR_SOLVERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown linear solver '{name}', expected one of {sorted(LINEAR_SOLVERS)}"
        )
    return solver_class(**options)
