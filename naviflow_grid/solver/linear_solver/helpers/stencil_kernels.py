"""
Numba kernels for symmetric stencil systems.

Every kernel works on flattened (C-order) arrays and receives the grid
``shape`` and element ``strides`` as int64 arrays, so one implementation
covers any number of axes. ``a_plus`` is laid out as ``(ndim, n)``: entry
``a_plus[a, i]`` couples sample ``i`` with ``i + strides[a]``.
"""

import numpy as np
from numba import njit, prange


def element_strides(shape):
    """C-order element strides of ``shape`` as an int64 array."""
    strides = np.ones(len(shape), dtype=np.int64)
    for axis in range(len(shape) - 2, -1, -1):
        strides[axis] = strides[axis + 1] * shape[axis + 1]
    return strides


@njit(inline="always")
def _off_diagonal_sum(a_plus, x, i, shape, strides):
    acc = 0.0
    for a in range(shape.shape[0]):
        coord = (i // strides[a]) % shape[a]
        if coord + 1 < shape[a]:
            acc += a_plus[a, i] * x[i + strides[a]]
        if coord > 0:
            acc += a_plus[a, i - strides[a]] * x[i - strides[a]]
    return acc


@njit(inline="always")
def _parity(i, shape, strides):
    total = 0
    for a in range(shape.shape[0]):
        total += (i // strides[a]) % shape[a]
    return total % 2


@njit(parallel=True)
def stencil_matvec(a_center, a_plus, x, shape, strides, out):
    for i in prange(x.shape[0]):
        out[i] = a_center[i] * x[i] + _off_diagonal_sum(a_plus, x, i, shape, strides)


@njit(parallel=True)
def jacobi_sweep(a_center, a_plus, x, b, shape, strides, omega, out):
    for i in prange(x.shape[0]):
        if a_center[i] == 0.0:
            out[i] = x[i]
            continue
        x_new = (b[i] - _off_diagonal_sum(a_plus, x, i, shape, strides)) / a_center[i]
        out[i] = (1.0 - omega) * x[i] + omega * x_new


@njit(parallel=True)
def gauss_seidel_color_sweep(a_center, a_plus, x, b, shape, strides, omega, color):
    # same-colored samples never neighbour each other, so updates are independent
    for i in prange(x.shape[0]):
        if _parity(i, shape, strides) != color or a_center[i] == 0.0:
            continue
        x_new = (b[i] - _off_diagonal_sum(a_plus, x, i, shape, strides)) / a_center[i]
        x[i] = x[i] + omega * (x_new - x[i])


@njit
def gauss_seidel_sweep(a_center, a_plus, x, b, shape, strides, omega, backward):
    n = x.shape[0]
    for k in range(n):
        i = n - 1 - k if backward else k
        if a_center[i] == 0.0:
            continue
        x_new = (b[i] - _off_diagonal_sum(a_plus, x, i, shape, strides)) / a_center[i]
        x[i] = x[i] + omega * (x_new - x[i])


@njit
def incomplete_cholesky_factor(a_center, a_plus, shape, strides, sigma, precon):
    """
    IC(0) factor stored as ``precon = 1 / sqrt(e)``.

    Pivots smaller than ``sigma * diagonal`` fall back to the diagonal.
    """
    n = a_center.shape[0]
    for i in range(n):
        diag = a_center[i]
        if diag <= 0.0:
            precon[i] = 0.0
            continue
        e = diag
        for a in range(shape.shape[0]):
            if (i // strides[a]) % shape[a] > 0:
                j = i - strides[a]
                t = a_plus[a, j] * precon[j]
                e -= t * t
        if e < sigma * diag:
            e = diag
        precon[i] = 1.0 / np.sqrt(e)


@njit
def incomplete_cholesky_apply(a_plus, precon, r, shape, strides, q, z):
    """Solve ``L L^T z = r`` with the IC(0) factor; ``q`` is scratch."""
    n = r.shape[0]
    ndim = shape.shape[0]
    for i in range(n):
        t = r[i]
        for a in range(ndim):
            if (i // strides[a]) % shape[a] > 0:
                j = i - strides[a]
                t -= a_plus[a, j] * precon[j] * q[j]
        q[i] = t * precon[i]
    for i in range(n - 1, -1, -1):
        t = q[i]
        for a in range(ndim):
            if (i // strides[a]) % shape[a] + 1 < shape[a]:
                t -= a_plus[a, i] * precon[i] * z[i + strides[a]]
        z[i] = t * precon[i]
