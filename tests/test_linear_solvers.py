import logging

import numpy as np
import pytest

from naviflow_grid.exceptions import ConfigurationError
from naviflow_grid.solver.linear_solver import (
    ConjugateGradientSolver,
    GaussSeidelSolver,
    ICCGSolver,
    JacobiSolver,
    LinearSolveResult,
    PyAMGSolver,
    StencilSystem,
    create_linear_solver,
)


def shifted_laplacian(shape, shift=0.1):
    """Five/seven-point Laplacian plus a diagonal shift: symmetric positive definite."""
    system = StencilSystem(shape)
    system.a_center[...] = 2.0 * len(shape) + shift
    for axis in range(len(shape)):
        plus = [slice(None)] * len(shape)
        plus[axis] = slice(0, -1)
        system.a_plus[axis][tuple(plus)] = -1.0
    return system


def solvers():
    return {
        "jacobi": JacobiSolver(tolerance=1e-10, max_iterations=5000),
        "jacobi_damped": JacobiSolver(tolerance=1e-10, max_iterations=5000, omega=2.0 / 3.0),
        "gauss_seidel_red_black": GaussSeidelSolver(tolerance=1e-10, max_iterations=5000),
        "gauss_seidel_standard": GaussSeidelSolver(tolerance=1e-10, max_iterations=5000,
                                                   method_type="standard"),
        "gauss_seidel_symmetric": GaussSeidelSolver(tolerance=1e-10, max_iterations=5000,
                                                    method_type="symmetric"),
        "sor": GaussSeidelSolver(tolerance=1e-10, max_iterations=5000, omega=1.5),
        "cg": ConjugateGradientSolver(tolerance=1e-10),
        "iccg": ICCGSolver(tolerance=1e-10),
        "amg": PyAMGSolver(tolerance=1e-10),
    }


@pytest.mark.parametrize("shape", [(12, 10), (6, 5, 4)])
def test_all_solvers_recover_the_solution(shape, rng, subtests):
    x_true = rng.standard_normal(shape)
    for name, solver in solvers().items():
        with subtests.test(name):
            system = shifted_laplacian(shape)
            system.b[...] = system.matvec(x_true)
            result = solver.solve(system)
            assert isinstance(result, LinearSolveResult)
            assert result.converged
            assert result.residual < 1e-10
            assert result.iterations >= 1
            assert np.allclose(system.x, x_true, atol=1e-8)


def test_operator_export_matches_matvec(rng):
    system = shifted_laplacian((5, 7))
    system.a_plus[0][2, 3] = -0.25
    matrix = system.to_csr()
    x = rng.standard_normal((5, 7))
    assert np.allclose(matrix @ x.ravel(), system.matvec(x).ravel())
    assert abs(matrix - matrix.T).max() == 0.0


def test_identity_rows(rng, subtests):
    system = shifted_laplacian((8, 8))
    mask = np.zeros((8, 8), dtype=bool)
    mask[2:4, 5] = True
    mask[7, 0] = True
    system.set_identity_rows(mask)
    system.b[...] = rng.standard_normal((8, 8))

    with subtests.test("rows_decoupled"):
        matrix = system.to_csr().toarray()
        flat = np.flatnonzero(mask)
        assert np.all(matrix[flat][:, flat] == np.eye(len(flat)))
        assert np.count_nonzero(matrix[flat]) == len(flat)
        assert np.count_nonzero(matrix[:, flat]) == len(flat)

    with subtests.test("solution_equals_rhs"):
        ICCGSolver(tolerance=1e-10).solve(system)
        assert np.allclose(system.x[mask], system.b[mask])


def test_non_convergence_is_reported_not_raised(caplog):
    system = shifted_laplacian((16, 16))
    system.b[...] = 1.0
    solver = JacobiSolver(tolerance=1e-12, max_iterations=3)
    with caplog.at_level(logging.WARNING):
        result = solver.solve(system)
    assert not result.converged
    assert result.iterations == 3
    assert result.residual > result.tolerance
    assert "did not converge" in caplog.text
    assert solver.get_solver_info()["total_inner_iterations"] == 3


def test_already_converged_and_empty_systems():
    system = shifted_laplacian((4, 4))
    result = ConjugateGradientSolver().solve(system)
    assert result.converged and result.iterations == 0

    empty = StencilSystem()
    assert ICCGSolver().solve(empty).converged


def test_buffers_grow_only_when_needed():
    system = StencilSystem((4, 4))
    system.resize((4, 4))
    assert system.allocations == 1
    system.resize((5, 4))
    assert system.allocations == 2
    assert system.a_plus.shape == (2, 5, 4)

    system.b[...] = 1.0
    system.resize((4, 5))
    system.resize((3, 3))
    assert system.allocations == 2
    assert system.a_center.shape == (3, 3)
    assert np.all(system.b == 0.0)
    assert np.shares_memory(system.x, system.resize((4, 5)).x)


def test_solver_info_tracks_history(rng):
    solver = GaussSeidelSolver(tolerance=1e-8)
    for _ in range(2):
        system = shifted_laplacian((8, 8))
        system.b[...] = rng.standard_normal((8, 8))
        solver.solve(system)
    info = solver.get_solver_info()
    assert len(info["inner_iterations_history"]) == 2
    assert info["total_inner_iterations"] == sum(info["inner_iterations_history"])
    assert 0.0 < info["convergence_rate"] < 1.0
    assert info["method"] == "Red_black"
    history = solver.residual_history
    assert history[-1] == pytest.approx(solver.last_result.residual)
    assert history[-1] < history[0]


def test_invalid_solver_configuration(subtests):
    cases = {
        "negative_tolerance": lambda: JacobiSolver(tolerance=-1.0),
        "zero_iterations": lambda: ICCGSolver(max_iterations=0),
        "sor_out_of_range": lambda: GaussSeidelSolver(omega=2.0),
        "unknown_ordering": lambda: GaussSeidelSolver(method_type="diagonal"),
        "unknown_name": lambda: create_linear_solver("direct"),
    }
    for name, build in cases.items():
        with subtests.test(name):
            with pytest.raises(ConfigurationError):
                build()


def test_factory_forwards_options():
    solver = create_linear_solver("gauss_seidel", omega=1.2, method_type="symmetric")
    assert isinstance(solver, GaussSeidelSolver)
    assert solver.omega == 1.2
    assert isinstance(create_linear_solver(), ICCGSolver)
