"""
Matrix-free symmetric stencil system ``A x = b``.

``A`` is described by its diagonal ``a_center`` (grid shaped) and one
coupling coefficient per axis towards the ``+1`` neighbour, ``a_plus``
(shape ``(ndim,) + grid shape``). The coupling towards the ``-1``
neighbour is read from the neighbour's own ``a_plus`` entry, which keeps
the operator symmetric by construction.
"""

import logging

import numpy as np
from scipy import sparse

from .helpers.stencil_kernels import element_strides, stencil_matvec

logger = logging.getLogger(__name__)


class StencilSystem:
    """
    Owns the coefficient, solution and right-hand-side buffers of one linear system.

    Storage only grows: ``resize`` reshapes views of flat backing arrays and
    reallocates only when the new shape needs more samples than they hold.
    ``allocations`` counts real allocations so callers can observe reuse.
    """

    def __init__(self, shape=None):
        self.shape = ()
        self.strides = np.zeros(0, dtype=np.int64)
        self._storage = np.zeros((3, 0))
        self._plus_storage = np.zeros(0)
        self.a_center = self._storage[0]
        self.a_plus = np.zeros((0,))
        self.x = self._storage[1]
        self.b = self._storage[2]
        self.allocations = 0
        if shape is not None:
            self.resize(shape)

    @property
    def ndim(self):
        return len(self.shape)

    @property
    def size(self):
        return self.a_center.size

    @property
    def capacity(self):
        return self._storage.shape[1]

    def resize(self, shape):
        """Reshape the buffers to ``shape``; a changed shape starts from zeros."""
        shape = tuple(int(n) for n in shape)
        if shape == self.shape:
            return self
        count = int(np.prod(shape))
        plus_count = len(shape) * count
        if count > self.capacity or plus_count > self._plus_storage.size:
            self._storage = np.zeros((3, max(count, self.capacity)))
            self._plus_storage = np.zeros(max(plus_count, self._plus_storage.size))
            self.allocations += 1
            logger.debug("Linear system buffers grown to %d samples for shape %s", count, shape)
        self.shape = shape
        self.strides = element_strides(shape)
        self.a_center = self._storage[0, :count].reshape(shape)
        self.x = self._storage[1, :count].reshape(shape)
        self.b = self._storage[2, :count].reshape(shape)
        self.a_plus = self._plus_storage[:plus_count].reshape((len(shape),) + shape)
        self.clear()
        return self

    def clear(self):
        self.a_center.fill(0.0)
        self.a_plus.fill(0.0)
        self.x.fill(0.0)
        self.b.fill(0.0)

    def kernel_arguments(self):
        """Flattened coefficient views and shape metadata for the numba kernels."""
        n = self.size
        return (
            self.a_center.reshape(n),
            self.a_plus.reshape(self.ndim, n),
            np.asarray(self.shape, dtype=np.int64),
            self.strides,
        )

    def matvec(self, x, out=None):
        """Return ``A x`` for a flat or grid-shaped ``x``."""
        x_flat = np.ascontiguousarray(x, dtype=np.float64).reshape(-1)
        result = np.empty_like(x_flat) if out is None else out.reshape(-1)
        a_center, a_plus, shape, strides = self.kernel_arguments()
        stencil_matvec(a_center, a_plus, x_flat, shape, strides, result)
        return result.reshape(np.shape(x)) if out is None else out

    def residual(self, x=None):
        """``b - A x`` as a grid-shaped array; ``x`` defaults to the stored solution."""
        x = self.x if x is None else x
        return self.b - self.matvec(x).reshape(self.shape)

    def residual_norm(self, x=None):
        return float(np.linalg.norm(self.residual(x)))

    def set_identity_rows(self, mask):
        """
        Turn the rows selected by ``mask`` into ``x_i = b_i`` and remove their couplings.
        """
        mask = np.asarray(mask, dtype=bool)
        self.a_center[mask] = 1.0
        for axis in range(self.ndim):
            self.a_plus[axis][mask] = 0.0
            lower = [slice(None)] * self.ndim
            upper = [slice(None)] * self.ndim
            lower[axis] = slice(0, -1)
            upper[axis] = slice(1, None)
            # coupling stored on the minus-side neighbour
            self.a_plus[axis][tuple(lower)][mask[tuple(upper)]] = 0.0

    def to_csr(self):
        """Export ``A`` as a ``scipy.sparse.csr_matrix`` over the flattened index."""
        n = self.size
        rows = [np.arange(n)]
        cols = [np.arange(n)]
        values = [self.a_center.reshape(n)]
        coords = np.indices(self.shape).reshape(self.ndim, n)
        flat_plus = self.a_plus.reshape(self.ndim, n)
        for axis in range(self.ndim):
            index = np.nonzero((coords[axis] + 1 < self.shape[axis]) & (flat_plus[axis] != 0.0))[0]
            neighbour = index + self.strides[axis]
            coupling = flat_plus[axis][index]
            rows.extend([index, neighbour])
            cols.extend([neighbour, index])
            values.extend([coupling, coupling])
        matrix = sparse.coo_matrix(
            (np.concatenate(values), (np.concatenate(rows), np.concatenate(cols))),
            shape=(n, n),
        )
        return matrix.tocsr()
