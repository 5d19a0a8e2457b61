"""
Continuous fields that can be sampled at arbitrary world positions.

Every sampler in the package, analytic or grid-backed, satisfies the
``Samplable`` protocol: ``sample(points)`` takes an array of positions with
shape ``(..., ndim)`` and returns values with shape ``(...)`` for scalar fields
or ``(..., ndim)`` for vector fields.
"""

from abc import ABC, abstractmethod
from typing import Callable, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Samplable(Protocol):
    """Anything that can be evaluated at a batch of world positions."""

    def sample(self, points: np.ndarray) -> np.ndarray:
        ...


def as_points(points) -> np.ndarray:
    """Coerce ``points`` to a float64 array whose last axis holds coordinates."""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 0:
        raise ValueError("points must have at least one dimension")
    return points


class ScalarField(ABC):
    """
    Base class for analytic scalar fields.

    Subclasses only implement ``sample``. The gradient falls back to central
    differences with step ``derivative_resolution``.
    """

    derivative_resolution = 1e-3

    @abstractmethod
    def sample(self, points: np.ndarray) -> np.ndarray:
        pass

    def gradient(self, points: np.ndarray) -> np.ndarray:
        """
        Central-difference gradient of the field.

        Parameters:
        -----------
        points : ndarray
            Positions with shape (..., ndim)

        Returns:
        --------
        ndarray
            Gradient vectors with shape (..., ndim)
        """
        points = as_points(points)
        ndim = points.shape[-1]
        h = self.derivative_resolution
        grad = np.empty(points.shape, dtype=np.float64)
        for axis in range(ndim):
            offset = np.zeros(ndim)
            offset[axis] = h
            grad[..., axis] = (self.sample(points + offset) - self.sample(points - offset)) / (2.0 * h)
        return grad

    def __call__(self, points):
        return self.sample(points)


class VectorField(ABC):
    """Base class for analytic vector fields."""

    @abstractmethod
    def sample(self, points: np.ndarray) -> np.ndarray:
        pass

    def __call__(self, points):
        return self.sample(points)


class ConstantScalarField(ScalarField):
    """Scalar field returning the same value everywhere."""

    def __init__(self, value):
        self.value = float(value)

    def sample(self, points):
        points = as_points(points)
        return np.full(points.shape[:-1], self.value, dtype=np.float64)

    def gradient(self, points):
        return np.zeros_like(as_points(points))


class ConstantVectorField(VectorField):
    """Vector field returning the same vector everywhere."""

    def __init__(self, value):
        self.value = np.asarray(value, dtype=np.float64)

    def sample(self, points):
        points = as_points(points)
        if points.shape[-1] != self.value.shape[0]:
            raise ValueError(
                f"Constant vector of length {self.value.shape[0]} sampled with "
                f"{points.shape[-1]}-D points"
            )
        return np.broadcast_to(self.value, points.shape).copy()


class CustomScalarField(ScalarField):
    """
    Scalar field backed by a vectorised callable.

    ``func`` receives positions of shape (..., ndim) and must return an array
    of shape (...). An optional ``gradient_func`` replaces the finite
    difference gradient.
    """

    def __init__(self, func: Callable, gradient_func: Callable = None, derivative_resolution=1e-3):
        self._func = func
        self._gradient_func = gradient_func
        self.derivative_resolution = derivative_resolution

    def sample(self, points):
        points = as_points(points)
        return np.asarray(self._func(points), dtype=np.float64)

    def gradient(self, points):
        if self._gradient_func is not None:
            return np.asarray(self._gradient_func(as_points(points)), dtype=np.float64)
        return super().gradient(points)


class CustomVectorField(VectorField):
    """Vector field backed by a vectorised callable returning (..., ndim)."""

    def __init__(self, func: Callable):
        self._func = func

    def sample(self, points):
        points = as_points(points)
        return np.asarray(self._func(points), dtype=np.float64)
