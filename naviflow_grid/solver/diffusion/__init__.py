from .base_diffusion_solver import GridDiffusionSolver
from .forward_euler import ForwardEulerDiffusionSolver
from .backward_euler import BackwardEulerDiffusionSolver
from .helpers.laplacian import masked_laplacian
