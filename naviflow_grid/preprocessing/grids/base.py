"""
Regular lattice over an axis-aligned domain.

A grid owns its resolution (cell counts per axis), grid spacing and origin.
Where the samples sit inside each cell is decided by the concrete layout:
cell-centered, vertex-centered or face-centered.
"""

from abc import ABC

import numpy as np

from ...exceptions import ConfigurationError, GridMismatchError


def _as_axis_vector(value, ndim, name):
    vector = np.asarray(value, dtype=np.float64)
    if vector.ndim == 0:
        vector = np.full(ndim, float(vector))
    if vector.shape != (ndim,):
        raise ConfigurationError(f"{name} must be a scalar or have {ndim} entries, got {vector.shape}")
    return vector.copy()


class Grid(ABC):
    """
    Base class for all grids.

    Parameters:
    -----------
    resolution : int or sequence of int
        Number of cells along each axis; its length sets the dimensionality
    grid_spacing : float or sequence of float
        Cell size along each axis, strictly positive
    origin : float or sequence of float
        World position of the lower domain corner
    """

    def __init__(self, resolution, grid_spacing=1.0, origin=0.0):
        resolution = tuple(int(n) for n in np.atleast_1d(resolution))
        if len(resolution) == 0 or any(n < 1 for n in resolution):
            raise ConfigurationError(f"Grid resolution must be positive, got {resolution}")
        self.resolution = resolution
        self.grid_spacing = _as_axis_vector(grid_spacing, self.ndim, "grid_spacing")
        if not np.all(np.isfinite(self.grid_spacing)) or np.any(self.grid_spacing <= 0.0):
            raise ConfigurationError(f"Grid spacing must be strictly positive, got {self.grid_spacing}")
        self.origin = _as_axis_vector(origin, self.ndim, "origin")

    @property
    def ndim(self):
        return len(self.resolution)

    def get_dimensions(self):
        """Return the cell counts per axis."""
        return self.resolution

    def get_cell_sizes(self):
        """Return the grid spacing per axis."""
        return tuple(self.grid_spacing)

    def bounding_box(self):
        """Lower and upper corners of the grid domain."""
        upper = self.origin + self.grid_spacing * np.asarray(self.resolution)
        return self.origin.copy(), upper

    def cell_center_position(self, index):
        index = np.asarray(index, dtype=np.float64)
        return self.origin + (index + 0.5) * self.grid_spacing

    def has_same_shape(self, other):
        return (
            type(self) is type(other)
            and self.resolution == other.resolution
            and np.allclose(self.grid_spacing, other.grid_spacing)
            and np.allclose(self.origin, other.origin)
        )

    def check_same_shape(self, other, label="grid"):
        """Raise ``GridMismatchError`` unless ``other`` shares this grid's layout."""
        if not self.has_same_shape(other):
            raise GridMismatchError(
                f"{label} mismatch: {type(self).__name__}{self.resolution} vs "
                f"{type(other).__name__}{getattr(other, 'resolution', None)}"
            )

    def _index_positions(self, data_origin, size):
        indices = np.moveaxis(np.indices(size, dtype=np.float64), 0, -1)
        return data_origin + indices * self.grid_spacing

    def __repr__(self):
        return (
            f"{type(self).__name__}(resolution={self.resolution}, "
            f"grid_spacing={tuple(self.grid_spacing)}, origin={tuple(self.origin)})"
        )
