"""
Extrapolation of valid samples into invalid regions.
"""

import numpy as np


def extrapolate_to_region(values, valid, depth):
    """
    Fill invalid samples with the mean of their valid axis neighbours.

    Each pass grows the valid region by one sample, so after ``depth`` passes
    every invalid sample within ``depth`` steps of a valid one has a value.
    Samples that stay out of reach keep their input value.

    Parameters:
    -----------
    values : ndarray
        Input samples
    valid : ndarray of bool
        Mask of samples whose value is trusted
    depth : int
        Number of passes

    Returns:
    --------
    ndarray
        Extrapolated copy of ``values``
    """
    output = np.array(values, dtype=np.float64, copy=True)
    valid = np.asarray(valid, dtype=bool).copy()
    ndim = output.ndim

    for _ in range(int(depth)):
        if valid.all() or not valid.any():
            break
        total = np.zeros_like(output)
        count = np.zeros(output.shape, dtype=np.int64)
        weighted = np.where(valid, output, 0.0)
        for axis in range(ndim):
            lower = [slice(None)] * ndim
            upper = [slice(None)] * ndim
            lower[axis] = slice(0, -1)
            upper[axis] = slice(1, None)
            lower, upper = tuple(lower), tuple(upper)
            total[lower] += weighted[upper]
            count[lower] += valid[upper]
            total[upper] += weighted[lower]
            count[upper] += valid[lower]
        grow = ~valid & (count > 0)
        output[grow] = total[grow] / count[grow]
        valid |= grow
    return output
