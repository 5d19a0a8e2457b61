import itertools

import numpy as np

from naviflow_grid.preprocessing.fields import ConstantScalarField, Plane, Sphere
from naviflow_grid.preprocessing.grids import (
    CellCenteredScalarGrid,
    FaceCenteredGrid,
    VertexCenteredScalarGrid,
)
from naviflow_grid.solver.markers import (
    AIR,
    BOUNDARY,
    FLUID,
    MarkerBuilder,
    classify,
    count_markers,
    fluid_everywhere,
    no_boundary,
)


def test_sphere_boundary_marks_cells_within_radius():
    grid = CellCenteredScalarGrid((8, 8, 8), 1.0)
    radius = 2.5
    builder = MarkerBuilder()
    markers = builder.build(grid.data_size, grid.data_position,
                            Sphere([4.0, 4.0, 4.0], radius), fluid_everywhere())

    # cell centers sit at half-integer offsets -3.5 .. 3.5 from the sphere center
    offsets = np.arange(8) + 0.5 - 4.0
    expected = sum(
        1 for dx, dy, dz in itertools.product(offsets, repeat=3)
        if dx * dx + dy * dy + dz * dz <= radius * radius
    )
    assert expected > 0
    assert np.count_nonzero(markers == BOUNDARY) == expected
    assert np.count_nonzero(markers == FLUID) == 512 - expected
    assert markers.dtype == np.int8


def test_classification_precedence(subtests):
    with subtests.test("boundary_wins_over_fluid"):
        labels = classify([-1.0, -1.0, 1.0, 1.0], [-1.0, 1.0, -1.0, 1.0])
        assert labels.tolist() == [BOUNDARY, BOUNDARY, FLUID, AIR]

    with subtests.test("zero_is_inside"):
        assert classify([0.0], [1.0]).tolist() == [BOUNDARY]
        assert classify([1.0], [0.0]).tolist() == [FLUID]

    with subtests.test("defaults"):
        grid = CellCenteredScalarGrid((4, 4))
        markers = MarkerBuilder().build(grid.data_size, grid.data_position,
                                        no_boundary(), fluid_everywhere())
        assert np.all(markers == FLUID)

    with subtests.test("free_surface"):
        grid = VertexCenteredScalarGrid((4, 4), 1.0)
        markers = MarkerBuilder().build(grid.data_size, grid.data_position,
                                        no_boundary(), Plane([0.0, 1.0], [0.0, 2.0]))
        assert count_markers(markers) == {"fluid": 15, "air": 10, "boundary": 0}

    with subtests.test("face_positions"):
        grid = FaceCenteredGrid((4, 4), 1.0)
        markers = MarkerBuilder().build(grid.data_size(0), grid.position_function(0),
                                        Plane([1.0, 0.0], [1.0, 0.0]), fluid_everywhere())
        # u faces sit at x = 0..4; x <= 1 is inside the boundary
        assert np.all(markers[:2] == BOUNDARY)
        assert np.all(markers[2:] == FLUID)


def test_buffer_is_reused_and_grown():
    builder = MarkerBuilder()
    big = CellCenteredScalarGrid((8, 8))
    small = CellCenteredScalarGrid((4, 4))
    bigger = CellCenteredScalarGrid((10, 10))
    boundary, fluid = ConstantScalarField(1.0), ConstantScalarField(-1.0)

    builder.build(big.data_size, big.data_position, boundary, fluid)
    assert builder.allocations == 1
    assert builder.capacity == 64

    markers = builder.build(small.data_size, small.data_position, boundary, fluid)
    assert builder.allocations == 1
    assert markers.shape == (4, 4)

    builder.build(big.data_size, big.data_position, boundary, fluid)
    assert builder.allocations == 1

    markers = builder.build(bigger.data_size, bigger.data_position, boundary, fluid)
    assert builder.allocations == 2
    assert builder.capacity == 100
    assert markers.shape == (10, 10)


def test_markers_are_rebuilt_every_call():
    grid = CellCenteredScalarGrid((4,), 1.0)
    builder = MarkerBuilder()
    first = builder.build(grid.data_size, grid.data_position, Sphere([0.0], 1.0), fluid_everywhere()).copy()
    second = builder.build(grid.data_size, grid.data_position, no_boundary(), fluid_everywhere())
    assert first.tolist() == [BOUNDARY, FLUID, FLUID, FLUID]
    assert second.tolist() == [FLUID] * 4
