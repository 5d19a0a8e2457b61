"""
naviflow_grid: grid-based incompressible flow solver.

Velocity lives on a face-centered (MAC) grid; every time step runs external
forces, semi-Lagrangian advection, diffusion, boundary conditions and a
pressure projection, with scalars advected by the projected flow.
"""

from .exceptions import NaviflowGridError, ConfigurationError, GridMismatchError
from .constructor import Collider, FluidProperties, FluidSolverConfig, load_config, build_solver
from .solver.Algorithms import GridFluidSolver, GridSmokeSolver

__version__ = "0.1.0"
