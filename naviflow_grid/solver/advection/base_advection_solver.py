"""
Base class for grid advection solvers.
"""

from abc import ABC, abstractmethod

from ...exceptions import ConfigurationError, GridMismatchError
from ...preprocessing.grids import CollocatedVectorGrid, FaceCenteredGrid, ScalarGrid


class GridAdvectionSolver(ABC):
    """
    Transports a grid quantity along a flow field.

    Implementations always write into a separate destination grid; the
    source grid is read-only during the call.
    """

    def advect(self, source, flow, time_interval, dest, boundary_sdf=None):
        """
        Advect ``source`` through ``flow`` over ``time_interval`` into ``dest``.

        Parameters:
        -----------
        source : ScalarGrid, CollocatedVectorGrid or FaceCenteredGrid
            Quantity to transport
        flow : VectorField
            Velocity field, sampled at arbitrary positions
        time_interval : float
            Strictly positive time step
        dest : grid
            Output grid with the same layout as ``source``
        boundary_sdf : ScalarField, optional
            Solid region; back-traces stop at its surface
        """
        if not isinstance(source, (ScalarGrid, CollocatedVectorGrid, FaceCenteredGrid)):
            raise ConfigurationError(f"Cannot advect a {type(source).__name__}")
        if time_interval <= 0.0:
            raise ConfigurationError(f"Time interval must be positive, got {time_interval}")
        if dest is source:
            raise GridMismatchError("Advection cannot write into its source grid")
        source.check_same_shape(dest, "advection source/destination")
        return self._advect(source, flow, time_interval, dest, boundary_sdf)

    @abstractmethod
    def _advect(self, source, flow, time_interval, dest, boundary_sdf):
        pass
