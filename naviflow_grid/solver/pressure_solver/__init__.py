from .base_pressure_solver import GridPressureSolver
from .single_phase import SinglePhasePressureSolver
from .fractional import FractionalSinglePhasePressureSolver
from .factory import create_pressure_solver, PRESSURE_SOLVERS
