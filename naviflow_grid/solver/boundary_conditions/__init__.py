from .base_boundary_condition_solver import GridBoundaryConditionSolver, closed_domain_flags
from .blocked import BlockedBoundaryConditionSolver
from .fractional import FractionalBoundaryConditionSolver, face_weights
from .helpers.extrapolation import extrapolate_to_region
from .factory import create_boundary_condition_solver, BOUNDARY_CONDITION_SOLVERS
