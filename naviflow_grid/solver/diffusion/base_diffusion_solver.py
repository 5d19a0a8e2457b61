"""
Base class for grid diffusion solvers.
"""

from abc import ABC, abstractmethod

from ...exceptions import ConfigurationError, GridMismatchError
from ...preprocessing.grids import CollocatedVectorGrid, FaceCenteredGrid, ScalarGrid
from ..markers import MarkerBuilder, fluid_everywhere, no_boundary


class GridDiffusionSolver(ABC):
    """
    Diffuses scalar, collocated vector and face-centered grids.

    Markers are rebuilt on every call at the sample layout of the source
    grid. Face-centered grids get one marker field per axis, sampled at that
    axis's face centers. Samples that are not Fluid are copied unchanged.
    """

    def __init__(self):
        self._marker_builders = []

    def marker_builder(self, axis=0):
        while len(self._marker_builders) <= axis:
            self._marker_builders.append(MarkerBuilder())
        return self._marker_builders[axis]

    @property
    def markers(self):
        """Marker arrays from the last call, one per component layout."""
        return [builder.markers for builder in self._marker_builders]

    def solve(self, source, diffusion_coefficient, time_interval, dest,
              boundary_sdf=None, fluid_sdf=None):
        """
        Diffuse ``source`` over ``time_interval`` into ``dest``.

        Parameters:
        -----------
        source : ScalarGrid, CollocatedVectorGrid or FaceCenteredGrid
            Field to diffuse; never modified
        diffusion_coefficient : float
            Non-negative diffusivity
        time_interval : float
            Strictly positive time step
        dest : grid
            Output grid with the same layout as ``source``
        boundary_sdf, fluid_sdf : Samplable, optional
            Solid and fluid regions; default to no solid and fluid everywhere
        """
        self._validate(source, diffusion_coefficient, time_interval, dest)
        if boundary_sdf is None:
            boundary_sdf = no_boundary()
        if fluid_sdf is None:
            fluid_sdf = fluid_everywhere()

        spacing = source.grid_spacing
        if isinstance(source, FaceCenteredGrid):
            for axis in range(source.ndim):
                markers = self.marker_builder(axis).build(
                    source.data_size(axis), source.position_function(axis), boundary_sdf, fluid_sdf)
                dest.data[axis][...] = self._diffuse(
                    source.data[axis], markers, spacing, diffusion_coefficient, time_interval)
        elif isinstance(source, ScalarGrid):
            markers = self.marker_builder().build(
                source.data_size, source.data_position, boundary_sdf, fluid_sdf)
            dest.data[...] = self._diffuse(
                source.data, markers, spacing, diffusion_coefficient, time_interval)
        else:
            markers = self.marker_builder().build(
                source.data_size, source.data_position, boundary_sdf, fluid_sdf)
            for axis in range(source.ndim):
                dest.data[..., axis] = self._diffuse(
                    source.data[..., axis], markers, spacing, diffusion_coefficient, time_interval)
        return dest

    def _validate(self, source, diffusion_coefficient, time_interval, dest):
        if not isinstance(source, (ScalarGrid, CollocatedVectorGrid, FaceCenteredGrid)):
            raise ConfigurationError(f"Cannot diffuse a {type(source).__name__}")
        if diffusion_coefficient < 0.0:
            raise ConfigurationError(f"Diffusion coefficient must be non-negative, got {diffusion_coefficient}")
        if time_interval <= 0.0:
            raise ConfigurationError(f"Time interval must be positive, got {time_interval}")
        if dest is source:
            raise GridMismatchError("Diffusion cannot write into its source grid")
        source.check_same_shape(dest, "diffusion source/destination")

    @abstractmethod
    def _diffuse(self, values, markers, grid_spacing, diffusion_coefficient, time_interval):
        """Return diffused ``values`` (same shape) given the sample ``markers``."""
        pass
