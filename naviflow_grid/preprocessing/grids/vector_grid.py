"""
Collocated vector grids: all components stored at the same sample points.
"""

from abc import abstractmethod

import numpy as np

from ...exceptions import GridMismatchError
from ..fields.field import VectorField
from .base import Grid
from .interpolation import get_sampler


class CollocatedVectorGrid(Grid, VectorField):
    """
    Vector samples on a regular lattice, ``data`` shaped ``data_size + (ndim,)``.
    """

    def __init__(self, resolution, grid_spacing=1.0, origin=0.0, initial_value=0.0,
                 interpolation="linear"):
        super().__init__(resolution, grid_spacing, origin)
        self.interpolation = interpolation
        self._sampler = get_sampler(interpolation)
        self.data = np.zeros(self.data_size + (self.ndim,), dtype=np.float64)
        self.data[...] = np.asarray(initial_value, dtype=np.float64)

    @property
    @abstractmethod
    def data_size(self):
        pass

    @property
    @abstractmethod
    def data_origin(self):
        pass

    def data_position(self, index):
        index = np.asarray(index, dtype=np.float64)
        return self.data_origin + index * self.grid_spacing

    def data_positions(self):
        return self._index_positions(self.data_origin, self.data_size)

    def component(self, axis):
        """View of one vector component, shaped ``data_size``."""
        return self.data[..., axis]

    def sample(self, points):
        points = np.asarray(points, dtype=np.float64)
        return np.stack(
            [self._sampler(self.data[..., axis], self.data_origin, self.grid_spacing, points)
             for axis in range(self.ndim)],
            axis=-1,
        )

    def fill(self, value):
        if callable(value):
            self.data[...] = value(self.data_positions())
        elif hasattr(value, "sample"):
            self.data[...] = value.sample(self.data_positions())
        else:
            self.data[...] = np.asarray(value, dtype=np.float64)

    def for_each_data_point_index(self, func):
        for index in np.ndindex(*self.data_size):
            func(*index)

    def divergence_at_data_points(self):
        """Central-difference divergence, one-sided at the data boundary."""
        div = np.zeros(self.data_size)
        for axis in range(self.ndim):
            if self.data_size[axis] > 1:
                div += np.gradient(self.data[..., axis], self.grid_spacing[axis], axis=axis)
        return div

    def max_abs_velocity(self):
        return float(np.max(np.linalg.norm(self.data, axis=-1))) if self.data.size else 0.0

    def clone(self):
        copy = type(self)(self.resolution, self.grid_spacing, self.origin,
                          interpolation=self.interpolation)
        copy.data[...] = self.data
        return copy

    def copy_from(self, other):
        self.check_same_shape(other, "vector grid")
        self.data[...] = other.data

    def swap(self, other):
        if type(self) is not type(other):
            raise GridMismatchError("Cannot swap grids of different layouts")
        self.__dict__, other.__dict__ = other.__dict__, self.__dict__


class CellCenteredVectorGrid(CollocatedVectorGrid):
    """Vector samples at cell centers."""

    @property
    def data_size(self):
        return self.resolution

    @property
    def data_origin(self):
        return self.origin + 0.5 * self.grid_spacing


class VertexCenteredVectorGrid(CollocatedVectorGrid):
    """Vector samples at cell corners."""

    @property
    def data_size(self):
        return tuple(n + 1 for n in self.resolution)

    @property
    def data_origin(self):
        return self.origin.copy()
