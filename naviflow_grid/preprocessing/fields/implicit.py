"""
Signed distance fields and level-set helpers.

Sign convention: negative (or zero) inside, positive outside. The same
convention holds for boundary (collider) and fluid SDFs.
"""

import numpy as np

from .field import ScalarField, as_points


def is_inside_sdf(phi):
    """True where the signed distance marks the inside of a region."""
    return np.asarray(phi) <= 0.0


def fraction_inside_sdf(phi0, phi1):
    """
    Fraction of the segment between two SDF samples that lies inside.

    Both inside gives 1, both outside gives 0, a sign change gives the
    linearly interpolated crossing position measured from the inside end.
    """
    phi0 = np.asarray(phi0, dtype=np.float64)
    phi1 = np.asarray(phi1, dtype=np.float64)
    inside0 = is_inside_sdf(phi0)
    inside1 = is_inside_sdf(phi1)

    with np.errstate(divide="ignore", invalid="ignore"):
        first_inside = phi0 / (phi0 - phi1)
        second_inside = phi1 / (phi1 - phi0)

    fraction = np.where(
        inside0 & inside1,
        1.0,
        np.where(inside0, first_inside, np.where(inside1, second_inside, 0.0)),
    )
    return np.clip(fraction, 0.0, 1.0)


class Sphere(ScalarField):
    """Signed distance to a sphere (a disc in 2-D, an interval in 1-D)."""

    def __init__(self, center, radius):
        self.center = np.asarray(center, dtype=np.float64)
        self.radius = float(radius)

    def sample(self, points):
        points = as_points(points)
        return np.linalg.norm(points - self.center, axis=-1) - self.radius

    def gradient(self, points):
        points = as_points(points)
        delta = points - self.center
        norm = np.linalg.norm(delta, axis=-1, keepdims=True)
        with np.errstate(divide="ignore", invalid="ignore"):
            grad = np.where(norm > 0.0, delta / norm, 0.0)
        return grad


class Box(ScalarField):
    """Exact signed distance to an axis-aligned box."""

    def __init__(self, lower_corner, upper_corner):
        self.lower_corner = np.asarray(lower_corner, dtype=np.float64)
        self.upper_corner = np.asarray(upper_corner, dtype=np.float64)
        if np.any(self.upper_corner < self.lower_corner):
            raise ValueError("Box upper corner must not be below the lower corner")

    def sample(self, points):
        points = as_points(points)
        center = 0.5 * (self.lower_corner + self.upper_corner)
        half = 0.5 * (self.upper_corner - self.lower_corner)
        q = np.abs(points - center) - half
        outside = np.linalg.norm(np.maximum(q, 0.0), axis=-1)
        inside = np.minimum(np.max(q, axis=-1), 0.0)
        return outside + inside


class Plane(ScalarField):
    """Half-space; negative on the side opposite to ``normal``."""

    def __init__(self, normal, point):
        normal = np.asarray(normal, dtype=np.float64)
        length = np.linalg.norm(normal)
        if length == 0.0:
            raise ValueError("Plane normal must be non-zero")
        self.normal = normal / length
        self.point = np.asarray(point, dtype=np.float64)

    def sample(self, points):
        points = as_points(points)
        return (points - self.point) @ self.normal

    def gradient(self, points):
        points = as_points(points)
        return np.broadcast_to(self.normal, points.shape).copy()


class ImplicitSurfaceSet(ScalarField):
    """
    Boolean combination of signed distance fields.

    ``combine`` is ``"union"`` (pointwise minimum), ``"intersection"``
    (pointwise maximum) or any binary numpy ufunc.
    """

    _rules = {"union": np.minimum, "intersection": np.maximum}

    def __init__(self, surfaces=(), combine="union"):
        self.surfaces = list(surfaces)
        if isinstance(combine, str):
            try:
                combine = self._rules[combine]
            except KeyError:
                raise ValueError(f"Unknown combine rule: {combine}")
        self.combine = combine

    def add_surface(self, surface):
        self.surfaces.append(surface)

    def sample(self, points):
        points = as_points(points)
        if not self.surfaces:
            return np.full(points.shape[:-1], np.inf)
        result = self.surfaces[0].sample(points)
        for surface in self.surfaces[1:]:
            result = self.combine(result, surface.sample(points))
        return result


class ComplementField(ScalarField):
    """Sign-flipped SDF: inside becomes outside."""

    def __init__(self, field):
        self.field = field

    def sample(self, points):
        return -self.field.sample(points)

    def gradient(self, points):
        if hasattr(self.field, "gradient"):
            return -self.field.gradient(points)
        return super().gradient(points)


def complement(field):
    """Return the complement of ``field`` (e.g. a closed container from a box)."""
    return ComplementField(field)
