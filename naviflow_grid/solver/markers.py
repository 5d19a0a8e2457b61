"""
Marker field builder.

Every grid sample is labelled from two signed distance fields: inside the
boundary SDF is ``BOUNDARY``, else inside the fluid SDF is ``FLUID``, else
``AIR``. Labels are rebuilt on every call; nothing is remembered between
calls.
"""

import logging

import numpy as np

from ..preprocessing.fields import ConstantScalarField

logger = logging.getLogger(__name__)

FLUID = 0
AIR = 1
BOUNDARY = 2

MARKER_NAMES = {FLUID: "fluid", AIR: "air", BOUNDARY: "boundary"}


def no_boundary():
    """Boundary SDF that is outside everywhere."""
    return ConstantScalarField(np.inf)


def fluid_everywhere():
    """Fluid SDF that is inside everywhere."""
    return ConstantScalarField(-np.inf)


def index_positions(size, position_fn):
    """Evaluate ``position_fn`` on every integer index of ``size`` at once."""
    indices = np.moveaxis(np.indices(size), 0, -1)
    return np.asarray(position_fn(indices), dtype=np.float64)


def classify(boundary_phi, fluid_phi, out=None):
    """Label samples from boundary and fluid SDF values (``<= 0`` is inside)."""
    boundary_phi = np.asarray(boundary_phi)
    fluid_phi = np.asarray(fluid_phi)
    if out is None:
        out = np.empty(boundary_phi.shape, dtype=np.int8)
    out[...] = AIR
    out[fluid_phi <= 0.0] = FLUID
    out[boundary_phi <= 0.0] = BOUNDARY
    return out


def count_markers(markers):
    """Number of samples per label, keyed by label name."""
    counts = np.bincount(np.asarray(markers).ravel(), minlength=3)
    return {MARKER_NAMES[label]: int(counts[label]) for label in MARKER_NAMES}


class MarkerBuilder:
    """
    Owns a reusable marker buffer.

    The buffer only grows: ``resize`` reuses the existing allocation whenever
    it is large enough and reallocates otherwise. ``allocations`` counts real
    allocations so callers can observe reuse.
    """

    def __init__(self):
        self._buffer = np.empty(0, dtype=np.int8)
        self.markers = self._buffer.reshape((0,))
        self.allocations = 0

    @property
    def capacity(self):
        return self._buffer.size

    def resize(self, shape):
        """Reshape the marker view to ``shape``, growing the backing buffer if needed."""
        shape = tuple(int(n) for n in shape)
        count = int(np.prod(shape)) if shape else 1
        if count > self._buffer.size:
            self._buffer = np.empty(count, dtype=np.int8)
            self.allocations += 1
            logger.debug("Marker buffer grown to %d samples", count)
        self.markers = self._buffer[:count].reshape(shape)
        return self.markers

    def build(self, size, position_fn, boundary_sdf, fluid_sdf):
        """
        Classify every index of ``size``.

        Parameters:
        -----------
        size : tuple of int
            Shape of the sample lattice (a grid's data size)
        position_fn : callable
            Maps an integer index array of shape (..., ndim) to world positions
        boundary_sdf, fluid_sdf : Samplable
            Signed distance fields sampled at those positions

        Returns:
        --------
        ndarray
            ``int8`` marker array of shape ``size`` (a view of the owned buffer)
        """
        markers = self.resize(size)
        positions = index_positions(size, position_fn)
        classify(boundary_sdf.sample(positions), fluid_sdf.sample(positions), out=markers)
        return markers
