"""
Collider: a solid obstacle described by a signed distance field and a
velocity field, with a friction coefficient for free-slip projection.
"""

import numpy as np

from ..exceptions import ConfigurationError
from ..preprocessing.fields import ConstantVectorField, CustomVectorField


class Collider:
    """
    Solid obstacle seen by the boundary-condition and pressure stages.

    Parameters:
    -----------
    surface : ScalarField
        Signed distance field of the solid, ``<= 0`` inside
    velocity : VectorField, callable or array-like, optional
        Velocity of the solid; ``None`` means it is at rest
    friction_coefficient : float, optional
        Non-negative friction applied to tangential slip
    on_update : callable, optional
        ``on_update(collider, time, time_interval)`` hook run by ``update``;
        use it to move or reshape the collider between steps
    """

    def __init__(self, surface, velocity=None, friction_coefficient=0.0, on_update=None):
        if friction_coefficient < 0.0:
            raise ConfigurationError(f"Friction coefficient must be non-negative, got {friction_coefficient}")
        self.surface = surface
        self.friction_coefficient = float(friction_coefficient)
        self.on_update = on_update
        self.velocity_field = self._as_velocity_field(velocity)

    @staticmethod
    def _as_velocity_field(velocity):
        if velocity is None or hasattr(velocity, "sample"):
            return velocity
        if callable(velocity):
            return CustomVectorField(velocity)
        return ConstantVectorField(velocity)

    def velocity_at(self, points):
        """Velocity of the solid at ``points``, shape (..., ndim)."""
        points = np.asarray(points, dtype=np.float64)
        if self.velocity_field is None:
            return np.zeros(points.shape)
        return self.velocity_field.sample(points)

    def is_penetrating(self, points):
        return self.surface.sample(points) <= 0.0

    def update(self, time, time_interval):
        if self.on_update is not None:
            self.on_update(self, time, time_interval)
