# conftest.py

import numpy as np
import pytest

from naviflow_grid.preprocessing.grids import FaceCenteredGrid


def zero_domain_walls(velocity):
    """Zero the normal velocity on every domain wall."""
    for axis in range(velocity.ndim):
        data = np.moveaxis(velocity.data[axis], axis, 0)
        data[0] = 0.0
        data[-1] = 0.0
    return velocity


def random_face_grid(rng, resolution, grid_spacing=1.0, closed=True):
    velocity = FaceCenteredGrid(resolution, grid_spacing)
    for axis in range(velocity.ndim):
        velocity.data[axis][...] = rng.uniform(-1.0, 1.0, velocity.data_size(axis))
    if closed:
        zero_domain_walls(velocity)
    return velocity


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_velocity_2d(rng):
    return random_face_grid(rng, (16, 16), 1.0 / 16)


@pytest.fixture
def random_velocity_3d(rng):
    return random_face_grid(rng, (8, 8, 8), 1.0 / 8)
