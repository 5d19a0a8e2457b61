# Constructor module initialization
from .properties.fluid import FluidProperties
from .collider import Collider
from .config import FluidSolverConfig, load_config, build_solver
