"""
Semi-Lagrangian advection.

Every destination sample is traced backwards through the flow field and
takes the source value interpolated at the departure point.
"""

import logging

import numpy as np

from ...exceptions import ConfigurationError
from ...preprocessing.grids import FaceCenteredGrid, ScalarGrid
from ...preprocessing.grids.interpolation import sample_cubic, sample_linear
from ..markers import no_boundary
from .base_advection_solver import GridAdvectionSolver

logger = logging.getLogger(__name__)


def back_trace(flow, time_interval, h, positions, boundary_sdf, order=2):
    """
    Departure points of ``positions`` after tracing back ``time_interval``.

    The trace is split so that no sub-step moves further than ``h``. With
    ``order=2`` each sub-step uses the velocity at its midpoint. A trace that
    crosses the surface of ``boundary_sdf`` stops at the interpolated
    crossing point.
    """
    positions = np.asarray(positions, dtype=np.float64)
    ndim = positions.shape[-1]
    points = positions.reshape(-1, ndim).copy()
    n = points.shape[0]
    remaining = np.full(n, float(time_interval))
    active = np.ones(n, dtype=bool)
    phi = boundary_sdf.sample(points)
    passes = 0

    while np.any(active):
        idx = np.nonzero(active)[0]
        p0 = points[idx]
        vel0 = flow.sample(p0)
        speed = np.linalg.norm(vel0, axis=-1)
        num_substeps = np.maximum(np.ceil(speed * remaining[idx] / h), 1.0)
        sub_dt = (remaining[idx] / num_substeps)[:, None]

        if order == 2:
            velocity = flow.sample(p0 - 0.5 * sub_dt * vel0)
        else:
            velocity = vel0
        p1 = p0 - sub_dt * velocity

        phi0 = phi[idx]
        phi1 = boundary_sdf.sample(p1)
        crossed = phi0 * phi1 < 0.0
        if np.any(crossed):
            a0 = np.abs(phi0[crossed])
            a1 = np.abs(phi1[crossed])
            w = (a1 / (a0 + a1))[:, None]
            p1[crossed] = w * p0[crossed] + (1.0 - w) * p1[crossed]

        points[idx] = p1
        phi[idx] = phi1
        remaining[idx] -= sub_dt[:, 0]
        finished = crossed | (remaining[idx] <= 1e-12 * time_interval)
        active[idx[finished]] = False
        passes += 1

    logger.debug("Back-trace of %d points took %d passes", n, passes)
    return points.reshape(positions.shape)


class SemiLagrangianSolver(GridAdvectionSolver):
    """
    Semi-Lagrangian advection with multilinear interpolation.

    Parameters:
    -----------
    order : int, optional
        1 for an Euler back-trace, 2 (default) for the midpoint rule
    """

    def __init__(self, order=2):
        if order not in (1, 2):
            raise ConfigurationError(f"Back-trace order must be 1 or 2, got {order}")
        self.order = order

    def _interpolate(self, data, data_origin, grid_spacing, points):
        return sample_linear(data, data_origin, grid_spacing, points)

    def _advect(self, source, flow, time_interval, dest, boundary_sdf):
        if boundary_sdf is None:
            boundary_sdf = no_boundary()
        h = float(np.min(source.grid_spacing))
        spacing = source.grid_spacing

        if isinstance(source, FaceCenteredGrid):
            for axis in range(source.ndim):
                points = back_trace(flow, time_interval, h, source.data_positions(axis),
                                    boundary_sdf, self.order)
                dest.data[axis][...] = self._interpolate(
                    source.data[axis], source.data_origin(axis), spacing, points)
        else:
            points = back_trace(flow, time_interval, h, source.data_positions(),
                                boundary_sdf, self.order)
            if isinstance(source, ScalarGrid):
                dest.data[...] = self._interpolate(source.data, source.data_origin, spacing, points)
            else:
                for axis in range(source.ndim):
                    dest.data[..., axis] = self._interpolate(
                        source.data[..., axis], source.data_origin, spacing, points)
        return dest


class CubicSemiLagrangianSolver(SemiLagrangianSolver):
    """Semi-Lagrangian advection with monotonic Catmull-Rom interpolation."""

    def _interpolate(self, data, data_origin, grid_spacing, points):
        return sample_cubic(data, data_origin, grid_spacing, points)
