import numpy as np
import pytest

from naviflow_grid.exceptions import ConfigurationError, GridMismatchError
from naviflow_grid.preprocessing.fields import ConstantVectorField, CustomVectorField, Plane
from naviflow_grid.preprocessing.grids import (
    CellCenteredScalarGrid,
    CellCenteredVectorGrid,
    FaceCenteredGrid,
)
from naviflow_grid.solver.advection import CubicSemiLagrangianSolver, SemiLagrangianSolver, back_trace
from naviflow_grid.solver.markers import no_boundary


def test_uniform_quantities_are_unchanged(subtests):
    flow = CustomVectorField(lambda p: np.stack([np.sin(p[..., 1]), np.cos(p[..., 0])], axis=-1))
    for name, solver in [("linear", SemiLagrangianSolver()), ("cubic", CubicSemiLagrangianSolver())]:
        with subtests.test(f"{name}_scalar"):
            source = CellCenteredScalarGrid((12, 12), 0.5, initial_value=2.0)
            dest = CellCenteredScalarGrid((12, 12), 0.5)
            solver.advect(source, flow, 0.3, dest)
            assert np.allclose(dest.data, 2.0)

        with subtests.test(f"{name}_face_centered"):
            source = FaceCenteredGrid((12, 12), 0.5, initial_value=(1.0, -0.5))
            dest = FaceCenteredGrid((12, 12), 0.5)
            solver.advect(source, flow, 0.3, dest)
            assert np.allclose(dest.u, 1.0)
            assert np.allclose(dest.v, -0.5)

        with subtests.test(f"{name}_collocated"):
            source = CellCenteredVectorGrid((12, 12), 0.5, initial_value=(0.25, 0.75))
            dest = CellCenteredVectorGrid((12, 12), 0.5)
            solver.advect(source, flow, 0.3, dest)
            assert np.allclose(dest.data, source.data)


def test_constant_flow_shifts_a_linear_profile(subtests):
    flow = ConstantVectorField([1.0, 0.0])
    for order in (1, 2):
        with subtests.test(f"order_{order}"):
            source = CellCenteredScalarGrid((16, 16), 1.0)
            source.fill(lambda p: p[..., 0])
            dest = CellCenteredScalarGrid((16, 16), 1.0)
            SemiLagrangianSolver(order=order).advect(source, flow, 0.5, dest)
            x = source.data_positions()[..., 0]
            # the first column traces back outside the data and is clamped
            assert np.allclose(dest.data[1:], x[1:] - 0.5)
            assert np.allclose(dest.data[0], 0.5)


def test_long_traces_are_split_into_short_steps():
    # rotation about the domain center: radius is preserved by the midpoint rule
    center = np.array([8.0, 8.0])

    def rotation(p):
        d = p - center
        return np.stack([-d[..., 1], d[..., 0]], axis=-1)

    start = np.array([[12.0, 8.0]])
    end = back_trace(CustomVectorField(rotation), 0.5, 1.0, start, no_boundary(), order=2)
    assert np.linalg.norm(end[0] - center) == pytest.approx(4.0, rel=1e-2)
    assert end[0, 1] < 8.0


def test_back_trace_stops_at_the_boundary():
    boundary = Plane([1.0, 0.0], [5.0, 0.0])
    start = np.array([[6.5, 3.0], [9.0, 1.0]])
    end = back_trace(ConstantVectorField([1.0, 0.0]), 3.0, 1.0, start, boundary)
    assert np.allclose(end[0], [5.0, 3.0])
    assert np.allclose(end[1], [6.0, 1.0])


def test_invalid_arguments(subtests):
    solver = SemiLagrangianSolver()
    source = CellCenteredScalarGrid((4, 4))
    flow = ConstantVectorField([0.0, 0.0])
    with subtests.test("in_place"):
        with pytest.raises(GridMismatchError):
            solver.advect(source, flow, 0.1, source)
    with subtests.test("resolution_mismatch"):
        with pytest.raises(GridMismatchError):
            solver.advect(source, flow, 0.1, CellCenteredScalarGrid((5, 4)))
    with subtests.test("non_positive_dt"):
        with pytest.raises(ConfigurationError):
            solver.advect(source, flow, -0.1, CellCenteredScalarGrid((4, 4)))
    with subtests.test("bad_order"):
        with pytest.raises(ConfigurationError):
            SemiLagrangianSolver(order=3)
