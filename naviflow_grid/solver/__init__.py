# Solver module initialization
from .markers import FLUID, AIR, BOUNDARY, MarkerBuilder
