"""
Exception types raised by naviflow_grid.

Configuration problems are reported eagerly, before any field is touched.
Numerical non-convergence is never an exception; see
``naviflow_grid.solver.linear_solver.LinearSolveResult``.
"""


class NaviflowGridError(Exception):
    """Base class for all errors raised by the package."""


class ConfigurationError(NaviflowGridError, ValueError):
    """
    Invalid solver input: negative diffusion coefficient, non-positive time
    step or grid spacing, unknown option names, malformed config files.
    """


class GridMismatchError(ConfigurationError):
    """
    Source and destination grids disagree in resolution or layout, or the
    destination aliases the source buffer.
    """
