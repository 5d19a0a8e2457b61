from .base_linear_solver import LinearSystemSolver, LinearSolveResult
from .system import StencilSystem
from .jacobi import JacobiSolver
from .gauss_seidel import GaussSeidelSolver
from .conjugate_gradient import ConjugateGradientSolver
from .iccg import ICCGSolver
from .pyamg_solver import PyAMGSolver
from .factory import create_linear_solver, LINEAR_SOLVERS
