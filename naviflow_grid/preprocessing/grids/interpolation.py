"""
Multilinear (scipy) and monotonic cubic samplers for regularly spaced data
of any dimension.

Both samplers clamp query positions to the data domain, so tracing outside
the grid returns boundary values instead of raising.
"""

import numpy as np
from scipy.interpolate import RegularGridInterpolator


def _to_index_space(data_shape, data_origin, grid_spacing, points):
    ndim = len(data_shape)
    points = np.asarray(points, dtype=np.float64)
    if points.shape[-1] != ndim:
        raise ValueError(
            f"Sample points have {points.shape[-1]} coordinates, data is {ndim}-D"
        )
    flat = points.reshape(-1, ndim)
    return (flat - data_origin) / grid_spacing, points.shape[:-1]


def _lower_index_and_fraction(coord, size):
    """Bracket ``coord`` between two data indices; clamps to the domain."""
    if size == 1:
        return np.zeros(coord.shape, dtype=np.int64), np.zeros(coord.shape)
    coord = np.clip(coord, 0.0, size - 1)
    lower = np.minimum(np.floor(coord).astype(np.int64), size - 2)
    return lower, coord - lower


def sample_linear(data, data_origin, grid_spacing, points):
    """
    Multilinear interpolation of ``data`` at world positions.

    Positions are mapped to index space and clipped to the data bounds before
    ``scipy.interpolate.RegularGridInterpolator`` evaluates them. Axes holding
    a single sample are constant along that axis.

    Parameters:
    -----------
    data : ndarray
        Scalar samples, shape (n0, n1, ...)
    data_origin : array_like
        World position of data index (0, 0, ...)
    grid_spacing : array_like
        Spacing between samples along each axis
    points : ndarray
        Query positions, shape (..., ndim)

    Returns:
    --------
    ndarray
        Interpolated values, shape (...)
    """
    coords, out_shape = _to_index_space(data.shape, data_origin, grid_spacing, points)
    axes = [axis for axis in range(data.ndim) if data.shape[axis] > 1]
    reduced = np.asarray(
        data[tuple(slice(None) if data.shape[axis] > 1 else 0 for axis in range(data.ndim))],
        dtype=np.float64,
    )
    if not axes:
        return np.full(out_shape, float(reduced))

    coords = np.clip(coords[:, axes], 0.0, np.asarray(reduced.shape, dtype=np.float64) - 1.0)
    interp_func = RegularGridInterpolator(
        tuple(np.arange(n, dtype=np.float64) for n in reduced.shape),
        reduced,
        method="linear",
        bounds_error=False,
        fill_value=None,
    )
    return interp_func(coords).reshape(out_shape)


def monotonic_catmull_rom(f0, f1, f2, f3, t):
    """Monotonic Catmull-Rom spline between f1 and f2 (Fritsch-Carlson style limiter)."""
    d1 = 0.5 * (f2 - f0)
    d2 = 0.5 * (f3 - f1)
    delta = f2 - f1

    flat = np.abs(delta) < np.finfo(np.float64).eps
    d1 = np.where(flat | (np.sign(delta) != np.sign(d1)), 0.0, d1)
    d2 = np.where(flat | (np.sign(delta) != np.sign(d2)), 0.0, d2)

    a3 = d1 + d2 - 2.0 * delta
    a2 = 3.0 * delta - 2.0 * d1 - d2
    return ((a3 * t + a2) * t + d1) * t + f1


def sample_cubic(data, data_origin, grid_spacing, points):
    """
    Tensor-product monotonic Catmull-Rom interpolation.

    Same signature as ``sample_linear``. Axes with fewer than two samples fall
    back to nearest-value lookup along that axis.
    """
    coords, out_shape = _to_index_space(data.shape, data_origin, grid_spacing, points)
    ndim = data.ndim
    n_points = coords.shape[0]

    taps, fractions = [], []
    for axis in range(ndim):
        size = data.shape[axis]
        lower, frac = _lower_index_and_fraction(coords[:, axis], size)
        stencil = lower[:, None] + np.arange(-1, 3)[None, :]
        taps.append(np.clip(stencil, 0, size - 1))
        fractions.append(frac)

    index = []
    for axis in range(ndim):
        shape = [n_points] + [1] * ndim
        shape[axis + 1] = 4
        index.append(taps[axis].reshape(shape))
    values = data[tuple(index)]

    # Collapse the last remaining stencil axis each pass.
    for axis in reversed(range(ndim)):
        t = fractions[axis].reshape([n_points] + [1] * axis)
        values = monotonic_catmull_rom(
            values[..., 0], values[..., 1], values[..., 2], values[..., 3], t
        )
    return values.reshape(out_shape)


SAMPLERS = {"linear": sample_linear, "cubic": sample_cubic}


def get_sampler(name):
    try:
        return SAMPLERS[name]
    except KeyError:
        raise ValueError(f"Unknown interpolation scheme: {name}. Use 'linear' or 'cubic'.")
