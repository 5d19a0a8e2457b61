"""
Face-centered (MAC) vector grid.

Component ``a`` lives on the faces normal to axis ``a``: its data array has
one extra sample along ``a`` and sample ``idx`` sits at
``origin + h * (idx + 0.5) - 0.5 * h[a] * e_a``.
"""

from functools import partial

import numpy as np

from ...exceptions import GridMismatchError
from ..fields.field import VectorField
from .base import Grid
from .interpolation import get_sampler


class FaceCenteredGrid(Grid, VectorField):
    """
    Staggered velocity grid.

    Parameters:
    -----------
    resolution : int or sequence of int
        Number of cells per axis
    grid_spacing : float or sequence of float
        Cell size per axis
    origin : float or sequence of float
        Lower domain corner
    initial_value : float or sequence of float
        Initial velocity (a scalar applies to every component)
    interpolation : str
        ``"linear"`` or ``"cubic"`` sampling
    """

    def __init__(self, resolution, grid_spacing=1.0, origin=0.0, initial_value=0.0,
                 interpolation="linear"):
        super().__init__(resolution, grid_spacing, origin)
        self.interpolation = interpolation
        self._sampler = get_sampler(interpolation)
        initial = np.broadcast_to(np.asarray(initial_value, dtype=np.float64), (self.ndim,))
        self.data = [np.full(self.data_size(axis), initial[axis], dtype=np.float64)
                     for axis in range(self.ndim)]

    @property
    def u(self):
        return self.data[0]

    @property
    def v(self):
        return self.data[1]

    @property
    def w(self):
        return self.data[2]

    def data_size(self, axis):
        size = list(self.resolution)
        size[axis] += 1
        return tuple(size)

    def data_origin(self, axis):
        offset = 0.5 * self.grid_spacing.copy()
        offset[axis] = 0.0
        return self.origin + offset

    def data_position(self, axis, index):
        index = np.asarray(index, dtype=np.float64)
        return self.data_origin(axis) + index * self.grid_spacing

    def position_function(self, axis):
        """Callable mapping integer indices of component ``axis`` to world positions."""
        return partial(self.data_position, axis)

    def data_positions(self, axis):
        return self._index_positions(self.data_origin(axis), self.data_size(axis))

    def sample(self, points):
        points = np.asarray(points, dtype=np.float64)
        return np.stack(
            [self._sampler(self.data[axis], self.data_origin(axis), self.grid_spacing, points)
             for axis in range(self.ndim)],
            axis=-1,
        )

    def fill(self, value):
        """Fill from a constant vector, a ``Samplable`` or a callable of positions."""
        for axis in range(self.ndim):
            if callable(value) and not hasattr(value, "sample"):
                self.data[axis][...] = value(self.data_positions(axis))[..., axis]
            elif hasattr(value, "sample"):
                self.data[axis][...] = value.sample(self.data_positions(axis))[..., axis]
            else:
                self.data[axis][...] = np.broadcast_to(
                    np.asarray(value, dtype=np.float64), (self.ndim,))[axis]

    def for_each_data_point_index(self, axis, func):
        """Call ``func(*index)`` for every sample of component ``axis``."""
        for index in np.ndindex(*self.data_size(axis)):
            func(*index)

    def _face_slices(self, axis):
        lower = [slice(None)] * self.ndim
        upper = [slice(None)] * self.ndim
        lower[axis] = slice(0, -1)
        upper[axis] = slice(1, None)
        return tuple(lower), tuple(upper)

    def divergence_at_cell_centers(self):
        """Discrete divergence per cell from the face fluxes, shape ``resolution``."""
        div = np.zeros(self.resolution)
        for axis in range(self.ndim):
            lower, upper = self._face_slices(axis)
            div += (self.data[axis][upper] - self.data[axis][lower]) / self.grid_spacing[axis]
        return div

    def value_at_cell_centers(self):
        """Average of the two bounding faces per component, shape ``resolution + (ndim,)``."""
        values = np.empty(self.resolution + (self.ndim,))
        for axis in range(self.ndim):
            lower, upper = self._face_slices(axis)
            values[..., axis] = 0.5 * (self.data[axis][lower] + self.data[axis][upper])
        return values

    def max_abs_velocity(self):
        """Largest velocity magnitude over the cell centers."""
        return float(np.max(np.linalg.norm(self.value_at_cell_centers(), axis=-1)))

    def clone(self):
        copy = FaceCenteredGrid(self.resolution, self.grid_spacing, self.origin,
                                interpolation=self.interpolation)
        for axis in range(self.ndim):
            copy.data[axis][...] = self.data[axis]
        return copy

    def copy_from(self, other):
        self.check_same_shape(other, "face-centered grid")
        for axis in range(self.ndim):
            self.data[axis][...] = other.data[axis]

    def swap(self, other):
        if not isinstance(other, FaceCenteredGrid):
            raise GridMismatchError("Cannot swap grids of different layouts")
        self.__dict__, other.__dict__ = other.__dict__, self.__dict__
