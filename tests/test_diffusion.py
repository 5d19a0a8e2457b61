import logging

import numpy as np
import pytest

from naviflow_grid.exceptions import ConfigurationError, GridMismatchError
from naviflow_grid.preprocessing.fields import Plane, Sphere
from naviflow_grid.preprocessing.grids import (
    CellCenteredScalarGrid,
    CellCenteredVectorGrid,
    FaceCenteredGrid,
    VertexCenteredScalarGrid,
)
from naviflow_grid.solver.diffusion import (
    BackwardEulerDiffusionSolver,
    ForwardEulerDiffusionSolver,
    masked_laplacian,
)
from naviflow_grid.solver.markers import AIR, BOUNDARY, FLUID

from conftest import random_face_grid


def diffusion_solvers():
    return {
        "forward_euler": ForwardEulerDiffusionSolver(),
        "backward_euler": BackwardEulerDiffusionSolver(),
    }


def test_uniform_field_is_unchanged(subtests):
    for name, solver in diffusion_solvers().items():
        with subtests.test(name):
            source = CellCenteredScalarGrid((10, 12), 0.5, initial_value=3.25)
            dest = CellCenteredScalarGrid((10, 12), 0.5)
            solver.solve(source, 0.05, 0.1, dest)
            assert np.allclose(dest.data, 3.25)


def test_neumann_diffusion_conserves_the_total(rng, subtests):
    boundary = Sphere([4.0, 4.0], 2.5)
    for name, solver in diffusion_solvers().items():
        for label, kwargs in [("all_fluid", {}), ("with_boundary", {"boundary_sdf": boundary})]:
            with subtests.test(f"{name}_{label}"):
                source = CellCenteredScalarGrid((16, 16), 1.0)
                source.data[...] = rng.uniform(0.0, 1.0, (16, 16))
                dest = CellCenteredScalarGrid((16, 16), 1.0)
                solver.solve(source, 0.2, 1.0, dest, **kwargs)
                fluid = solver.markers[0] == FLUID
                assert np.sum(dest.data[fluid]) == pytest.approx(np.sum(source.data[fluid]), abs=1e-7)
                assert not np.allclose(dest.data, source.data)


def test_non_fluid_samples_keep_their_values(rng, subtests):
    boundary = Sphere([4.0, 4.0], 3.0)
    fluid_sdf = Plane([0.0, 1.0], [0.0, 10.0])
    for name, solver in diffusion_solvers().items():
        source = CellCenteredScalarGrid((16, 16), 1.0)
        source.data[...] = rng.uniform(-1.0, 1.0, (16, 16))
        original = source.data.copy()
        dest = CellCenteredScalarGrid((16, 16), 1.0)
        solver.solve(source, 0.2, 1.0, dest, boundary_sdf=boundary, fluid_sdf=fluid_sdf)
        markers = solver.markers[0]
        assert np.array_equal(source.data, original)

        for label, marker in [("air", AIR), ("boundary", BOUNDARY)]:
            with subtests.test(f"{name}_{label}"):
                assert np.any(markers == marker)
                assert np.array_equal(dest.data[markers == marker], original[markers == marker])
        with subtests.test(f"{name}_fluid"):
            assert np.any(markers == FLUID)
            assert not np.allclose(dest.data[markers == FLUID], original[markers == FLUID])


def test_explicit_stability_bound(caplog):
    def run(dt, steps=500):
        source = CellCenteredScalarGrid((32,), 1.0)
        source.data[...] = np.where(np.arange(32) % 2 == 0, 1.0, -1.0)
        dest = CellCenteredScalarGrid((32,), 1.0)
        solver = ForwardEulerDiffusionSolver()
        for _ in range(steps):
            solver.solve(source, 0.1, dt, dest)
            source, dest = dest, source
        return np.max(np.abs(source.data))

    with caplog.at_level(logging.WARNING):
        assert run(4.9) <= 1.0 + 1e-12
    assert "stability bound" not in caplog.text

    with caplog.at_level(logging.WARNING):
        assert run(5.1) > 100.0
    assert "stability bound" in caplog.text


def test_implicit_diffusion_is_stable_for_large_steps():
    source = CellCenteredScalarGrid((32,), 1.0)
    source.data[...] = np.where(np.arange(32) % 2 == 0, 1.0, -1.0)
    dest = CellCenteredScalarGrid((32,), 1.0)
    solver = BackwardEulerDiffusionSolver()
    for _ in range(20):
        solver.solve(source, 0.1, 1000.0, dest)
        source, dest = dest, source
    assert np.max(np.abs(source.data)) < 1e-3
    assert solver.last_solve_result.converged


def test_implicit_face_solves_reuse_the_system(rng):
    source = random_face_grid(rng, (8, 8), 0.125)
    solver = BackwardEulerDiffusionSolver()
    results = []
    for _ in range(3):
        dest = FaceCenteredGrid((8, 8), 0.125)
        solver.solve(source, 0.1, 1.0, dest)
        results.append(dest)
    assert solver.system.allocations <= source.ndim
    # buffers shared by u (9, 8) and v (8, 9) carry nothing over between solves
    for later in results[1:]:
        assert np.allclose(later.u, results[0].u, atol=1e-12)
        assert np.allclose(later.v, results[0].v, atol=1e-12)


def test_explicit_step_matches_masked_laplacian(rng):
    source = VertexCenteredScalarGrid((6, 7), (0.5, 0.25))
    source.data[...] = rng.standard_normal(source.data_size)
    dest = VertexCenteredScalarGrid((6, 7), (0.5, 0.25))
    solver = ForwardEulerDiffusionSolver()
    solver.solve(source, 0.01, 0.1, dest)
    expected = source.data + 0.001 * masked_laplacian(source.data, solver.markers[0], (0.5, 0.25))
    assert np.allclose(dest.data, expected)


def test_masked_laplacian_of_quadratic():
    x = np.arange(8, dtype=np.float64) * 0.5
    values = x ** 2
    markers = np.full(8, FLUID, dtype=np.int8)
    lap = masked_laplacian(values, markers, (0.5,))
    assert np.allclose(lap[1:-1], 2.0)
    markers[3] = AIR
    lap = masked_laplacian(values, markers, (0.5,))
    assert lap[3] == 0.0
    assert lap[2] == pytest.approx((values[1] - values[2]) / 0.25)


def test_dirichlet_boundary_holds_neighbour_values():
    source = CellCenteredScalarGrid((8,), 1.0, initial_value=0.0)
    source.data[0] = 1.0
    dest = CellCenteredScalarGrid((8,), 1.0)
    boundary = Plane([1.0], [1.0])

    neumann = BackwardEulerDiffusionSolver("neumann")
    neumann.solve(source, 1.0, 1.0, dest, boundary_sdf=boundary)
    assert np.allclose(dest.data[1:], 0.0)

    dirichlet = BackwardEulerDiffusionSolver("dirichlet")
    dirichlet.solve(source, 1.0, 1.0, dest, boundary_sdf=boundary)
    assert dest.data[0] == 1.0
    assert dest.data[1] > 0.0
    assert np.all(np.diff(dest.data[1:]) < 0.0)


def test_vector_grids(subtests):
    boundary = Plane([1.0, 0.0], [1.0, 0.0])
    for name, solver in diffusion_solvers().items():
        with subtests.test(f"{name}_face_centered"):
            source = FaceCenteredGrid((8, 8), 1.0, initial_value=(1.0, -2.0))
            source.u[0, :] = 5.0
            dest = FaceCenteredGrid((8, 8), 1.0)
            solver.solve(source, 0.1, 1.0, dest, boundary_sdf=boundary)
            assert len(solver.markers) == 2
            # u faces at x = 0 and x = 1 are inside the boundary
            assert np.all(dest.u[:2] == source.u[:2])
            assert np.allclose(dest.u[2:], 1.0)
            assert np.allclose(dest.v, -2.0)

        with subtests.test(f"{name}_collocated"):
            source = CellCenteredVectorGrid((8, 8), 1.0, initial_value=(0.5, 0.25))
            dest = CellCenteredVectorGrid((8, 8), 1.0)
            solver.solve(source, 0.1, 1.0, dest)
            assert np.allclose(dest.data, source.data)


def test_invalid_arguments(subtests):
    solver = ForwardEulerDiffusionSolver()
    source = CellCenteredScalarGrid((4, 4))
    dest = CellCenteredScalarGrid((4, 4))
    with subtests.test("negative_coefficient"):
        with pytest.raises(ConfigurationError):
            solver.solve(source, -0.1, 0.1, dest)
    with subtests.test("non_positive_dt"):
        with pytest.raises(ConfigurationError):
            solver.solve(source, 0.1, 0.0, dest)
    with subtests.test("in_place"):
        with pytest.raises(GridMismatchError):
            solver.solve(source, 0.1, 0.1, source)
    with subtests.test("resolution_mismatch"):
        with pytest.raises(GridMismatchError):
            solver.solve(source, 0.1, 0.1, CellCenteredScalarGrid((4, 5)))
    with subtests.test("layout_mismatch"):
        with pytest.raises(GridMismatchError):
            solver.solve(source, 0.1, 0.1, VertexCenteredScalarGrid((4, 4)))
    with subtests.test("unknown_boundary_type"):
        with pytest.raises(ConfigurationError):
            BackwardEulerDiffusionSolver("robin")
