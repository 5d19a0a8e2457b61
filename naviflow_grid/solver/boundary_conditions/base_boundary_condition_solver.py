"""
Base class for boundary-condition solvers acting on face-centered velocity.
"""

from abc import ABC, abstractmethod

import numpy as np

from ...exceptions import ConfigurationError
from ..markers import no_boundary


def closed_domain_flags(closed_domain, ndim):
    """
    Normalise a closed-domain description to an ``(ndim, 2)`` bool array.

    ``True``/``False`` close or open every side; otherwise one ``(lower,
    upper)`` pair per axis is expected.
    """
    if isinstance(closed_domain, (bool, np.bool_)):
        return np.full((ndim, 2), bool(closed_domain))
    flags = np.asarray(closed_domain, dtype=bool)
    if flags.shape != (ndim, 2):
        raise ConfigurationError(f"closed_domain must be a bool or have shape ({ndim}, 2), got {flags.shape}")
    return flags.copy()


class GridBoundaryConditionSolver(ABC):
    """
    Constrains a face-centered velocity field at solid boundaries.

    Parameters:
    -----------
    closed_domain : bool or array-like, optional
        Which sides of the domain are solid walls, see ``closed_domain_flags``
    """

    def __init__(self, closed_domain=True):
        self.closed_domain = closed_domain
        self.collider = None

    def update_collider(self, collider):
        """Attach (or replace) the collider used for the following constraints."""
        self.collider = collider

    def collider_sdf(self):
        if self.collider is None:
            return no_boundary()
        return self.collider.surface

    def collider_velocity(self, points):
        points = np.asarray(points, dtype=np.float64)
        if self.collider is None:
            return np.zeros(points.shape)
        return self.collider.velocity_at(points)

    def closed_domain_flags(self, ndim):
        return closed_domain_flags(self.closed_domain, ndim)

    @abstractmethod
    def constrain_velocity(self, velocity, extrapolation_depth=5):
        """Apply the boundary conditions to ``velocity`` in place."""
        pass

    def _apply_closed_domain(self, velocity):
        """Zero the normal velocity on closed domain walls."""
        flags = self.closed_domain_flags(velocity.ndim)
        for axis in range(velocity.ndim):
            data = np.moveaxis(velocity.data[axis], axis, 0)
            if flags[axis, 0]:
                data[0] = 0.0
            if flags[axis, 1]:
                data[-1] = 0.0
