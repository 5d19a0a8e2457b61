# Algorithms module initialization

from .grid_fluid_solver import GridFluidSolver
from .smoke_solver import GridSmokeSolver
