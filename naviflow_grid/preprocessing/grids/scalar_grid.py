"""
Collocated scalar grids: one value per cell center or per vertex.
"""

from abc import abstractmethod

import numpy as np

from ...exceptions import GridMismatchError
from ..fields.field import ScalarField
from .base import Grid
from .interpolation import get_sampler


class ScalarGrid(Grid, ScalarField):
    """
    Scalar samples on a regular lattice.

    ``data`` has shape ``data_size``; sample ``idx`` sits at
    ``data_origin + idx * grid_spacing``.
    """

    def __init__(self, resolution, grid_spacing=1.0, origin=0.0, initial_value=0.0,
                 interpolation="linear"):
        super().__init__(resolution, grid_spacing, origin)
        self.interpolation = interpolation
        self._sampler = get_sampler(interpolation)
        self.data = np.full(self.data_size, float(initial_value), dtype=np.float64)
        self.derivative_resolution = 0.5 * float(np.min(self.grid_spacing))

    @property
    @abstractmethod
    def data_size(self):
        pass

    @property
    @abstractmethod
    def data_origin(self):
        pass

    def data_position(self, index):
        """World position of integer data index (or an array of them, shape (..., ndim))."""
        index = np.asarray(index, dtype=np.float64)
        return self.data_origin + index * self.grid_spacing

    def data_positions(self):
        """Positions of every data point, shape ``data_size + (ndim,)``."""
        return self._index_positions(self.data_origin, self.data_size)

    def sample(self, points):
        return self._sampler(self.data, self.data_origin, self.grid_spacing, points)

    def fill(self, value):
        """Fill with a constant or with ``value(positions)`` evaluated at every data point."""
        if callable(value):
            self.data[...] = value(self.data_positions())
        elif hasattr(value, "sample"):
            self.data[...] = value.sample(self.data_positions())
        else:
            self.data.fill(float(value))

    def for_each_data_point_index(self, func):
        for index in np.ndindex(*self.data_size):
            func(*index)

    def clone(self):
        copy = type(self)(self.resolution, self.grid_spacing, self.origin,
                          interpolation=self.interpolation)
        copy.data[...] = self.data
        return copy

    def copy_from(self, other):
        self.check_same_shape(other, "scalar grid")
        self.data[...] = other.data

    def swap(self, other):
        if type(self) is not type(other):
            raise GridMismatchError("Cannot swap grids of different layouts")
        self.__dict__, other.__dict__ = other.__dict__, self.__dict__

    def __getitem__(self, item):
        return self.data[item]

    def __setitem__(self, item, value):
        self.data[item] = value


class CellCenteredScalarGrid(ScalarGrid):
    """One value per cell, located at the cell center."""

    @property
    def data_size(self):
        return self.resolution

    @property
    def data_origin(self):
        return self.origin + 0.5 * self.grid_spacing


class VertexCenteredScalarGrid(ScalarGrid):
    """One value per cell corner; data is one larger than the resolution on every axis."""

    @property
    def data_size(self):
        return tuple(n + 1 for n in self.resolution)

    @property
    def data_origin(self):
        return self.origin.copy()
