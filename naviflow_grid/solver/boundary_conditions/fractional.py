"""
Fractional boundary conditions.

Face weights measure how much of each face lies outside the collider, which
gives sub-cell accuracy for curved obstacles.
"""

import logging

import numpy as np

from ...preprocessing.fields import is_inside_sdf, fraction_inside_sdf
from .base_boundary_condition_solver import GridBoundaryConditionSolver
from .helpers.extrapolation import extrapolate_to_region

logger = logging.getLogger(__name__)


def face_weights(sdf, velocity, axis):
    """
    Open fraction of every face normal to ``axis``.

    The fraction inside the SDF is measured along each tangential axis
    through the face center and averaged. In 1-D the face is a point and its
    weight is 0 or 1.
    """
    positions = velocity.data_positions(axis)
    tangential = [b for b in range(velocity.ndim) if b != axis]
    if not tangential:
        return np.where(is_inside_sdf(sdf.sample(positions)), 0.0, 1.0)
    inside = np.zeros(positions.shape[:-1])
    for b in tangential:
        offset = np.zeros(velocity.ndim)
        offset[b] = 0.5 * velocity.grid_spacing[b]
        inside += fraction_inside_sdf(sdf.sample(positions - offset), sdf.sample(positions + offset))
    return 1.0 - inside / len(tangential)


def project_and_apply_friction(velocity, normal, friction_coefficient):
    """
    Remove the normal component of ``velocity`` and damp the tangential part
    by friction proportional to the removed inward normal speed.
    """
    normal_speed = np.sum(velocity * normal, axis=-1, keepdims=True)
    tangential = velocity - normal_speed * normal
    if friction_coefficient > 0.0:
        t_norm = np.linalg.norm(tangential, axis=-1, keepdims=True)
        with np.errstate(divide="ignore", invalid="ignore"):
            scale = np.where(
                t_norm > 0.0,
                np.maximum(1.0 - friction_coefficient * np.maximum(-normal_speed, 0.0) / t_norm, 0.0),
                1.0,
            )
        tangential = tangential * scale
    return tangential


class FractionalBoundaryConditionSolver(GridBoundaryConditionSolver):
    """
    Boundary conditions weighted by the open fraction of each face.

    Faces with no open fraction take the collider velocity. Fluid velocity is
    then extrapolated into the collider and, on faces inside it, the velocity
    relative to the collider is projected onto the surface tangent (free
    slip) with the collider's friction applied.
    """

    def __init__(self, closed_domain=True):
        super().__init__(closed_domain)
        self.face_weights = []

    def constrain_velocity(self, velocity, extrapolation_depth=5):
        sdf = self.collider_sdf()
        ndim = velocity.ndim
        friction = self.collider.friction_coefficient if self.collider is not None else 0.0

        self.face_weights = [face_weights(sdf, velocity, axis) for axis in range(ndim)]
        for axis in range(ndim):
            weights = self.face_weights[axis]
            invalid = weights <= 0.0
            if np.any(invalid):
                positions = velocity.data_positions(axis)[invalid]
                velocity.data[axis][invalid] = self.collider_velocity(positions)[..., axis]
            velocity.data[axis][...] = extrapolate_to_region(velocity.data[axis], ~invalid, extrapolation_depth)

        if self.collider is not None:
            reference = velocity.clone()
            for axis in range(ndim):
                positions = velocity.data_positions(axis)
                inside = is_inside_sdf(sdf.sample(positions))
                if not np.any(inside):
                    continue
                points = positions[inside]
                gradient = sdf.gradient(points)
                length = np.linalg.norm(gradient, axis=-1, keepdims=True)
                usable = length[:, 0] > 0.0
                if not np.any(usable):
                    continue
                normal = gradient[usable] / length[usable]
                collider_vel = self.collider_velocity(points[usable])
                relative = reference.sample(points[usable]) - collider_vel
                projected = project_and_apply_friction(relative, normal, friction) + collider_vel
                target = velocity.data[axis][inside]
                target[usable] = projected[:, axis]
                velocity.data[axis][inside] = target
            logger.debug("Free-slip projection applied with friction %.3g", friction)

        self._apply_closed_domain(velocity)
        return velocity
