"""
Marker-masked Laplacian kernels.

Only Fluid-to-Fluid differences contribute: a neighbour that is missing
(domain edge) or not Fluid adds nothing, which is a zero-flux condition.
"""

import numpy as np
from numba import njit, prange

from ...linear_solver.helpers.stencil_kernels import element_strides
from ...markers import FLUID


@njit(inline="always")
def _masked_laplacian_at(x, markers, i, shape, strides, inv_h2):
    acc = 0.0
    center = x[i]
    for a in range(shape.shape[0]):
        coord = (i // strides[a]) % shape[a]
        if coord > 0 and markers[i - strides[a]] == FLUID:
            acc += (x[i - strides[a]] - center) * inv_h2[a]
        if coord + 1 < shape[a] and markers[i + strides[a]] == FLUID:
            acc += (x[i + strides[a]] - center) * inv_h2[a]
    return acc


@njit(parallel=True)
def masked_laplacian_kernel(x, markers, shape, strides, inv_h2, out):
    for i in prange(x.shape[0]):
        if markers[i] == FLUID:
            out[i] = _masked_laplacian_at(x, markers, i, shape, strides, inv_h2)
        else:
            out[i] = 0.0


@njit(parallel=True)
def forward_euler_kernel(x, markers, shape, strides, inv_h2, coeff_dt, out):
    for i in prange(x.shape[0]):
        if markers[i] == FLUID:
            out[i] = x[i] + coeff_dt * _masked_laplacian_at(x, markers, i, shape, strides, inv_h2)
        else:
            out[i] = x[i]


def _flat_arguments(values, markers, grid_spacing):
    values = np.ascontiguousarray(values, dtype=np.float64)
    shape = np.asarray(values.shape, dtype=np.int64)
    inv_h2 = 1.0 / np.asarray(grid_spacing, dtype=np.float64) ** 2
    return (values.reshape(-1), np.ascontiguousarray(markers).reshape(-1), shape,
            element_strides(values.shape), inv_h2)


def masked_laplacian(values, markers, grid_spacing):
    """Laplacian of ``values`` on Fluid samples, zero elsewhere."""
    x, flat_markers, shape, strides, inv_h2 = _flat_arguments(values, markers, grid_spacing)
    out = np.empty_like(x)
    masked_laplacian_kernel(x, flat_markers, shape, strides, inv_h2, out)
    return out.reshape(np.shape(values))


def forward_euler_step(values, markers, grid_spacing, coeff_dt):
    """``values + coeff_dt * L(values)`` on Fluid samples, a copy elsewhere."""
    x, flat_markers, shape, strides, inv_h2 = _flat_arguments(values, markers, grid_spacing)
    out = np.empty_like(x)
    forward_euler_kernel(x, flat_markers, shape, strides, inv_h2, float(coeff_dt), out)
    return out.reshape(np.shape(values))
