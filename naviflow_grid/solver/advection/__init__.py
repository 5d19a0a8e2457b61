from .base_advection_solver import GridAdvectionSolver
from .semi_lagrangian import SemiLagrangianSolver, CubicSemiLagrangianSolver, back_trace
