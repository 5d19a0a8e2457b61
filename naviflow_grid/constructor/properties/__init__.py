from .fluid import FluidProperties
