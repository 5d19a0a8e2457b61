import numpy as np
import pytest

from naviflow_grid import (
    ConfigurationError,
    FluidProperties,
    FluidSolverConfig,
    GridFluidSolver,
    GridSmokeSolver,
    build_solver,
    load_config,
)
from naviflow_grid.solver.advection import CubicSemiLagrangianSolver
from naviflow_grid.solver.boundary_conditions import FractionalBoundaryConditionSolver
from naviflow_grid.solver.diffusion import BackwardEulerDiffusionSolver, ForwardEulerDiffusionSolver
from naviflow_grid.solver.linear_solver import GaussSeidelSolver, ICCGSolver
from naviflow_grid.solver.pressure_solver import FractionalSinglePhasePressureSolver

CONFIG_YAML = """
grid:
  resolution: [16, 8]
  grid_spacing: 0.0625
physical_properties:
  density: 2.0
  viscosity: 0.01
  gravity: [0.0, -1.0]
time_stepping:
  policy: fixed
advection:
  interpolation: cubic
diffusion:
  method: implicit
  boundary_type: dirichlet
boundary_conditions:
  policy: fractional
  closed_domain: [[false, false], [true, true]]
pressure_solver:
  kind: fractional
  linear_solver: gauss_seidel
  tolerance: 1.0e-6
  max_iterations: 500
  options:
    method_type: symmetric
    omega: 1.5
"""


def test_defaults():
    config = FluidSolverConfig.from_dict({})
    assert config.grid.resolution == (32, 32)
    assert config.pressure_solver.linear_solver == "iccg"
    assert not config.smoke.enabled
    assert FluidSolverConfig.from_dict(None).to_dict() == config.to_dict()

    solver = build_solver(config)
    assert type(solver) is GridFluidSolver
    assert solver.resolution == (32, 32)
    assert isinstance(solver.pressure_solver.linear_solver, ICCGSolver)
    assert isinstance(solver.diffusion_solver, ForwardEulerDiffusionSolver)
    assert solver.use_adaptive_time_stepping


def test_load_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    config = load_config(path)
    assert config.grid.resolution == [16, 8]
    assert config.pressure_solver.options == {"method_type": "symmetric", "omega": 1.5}

    solver = build_solver(config)
    assert solver.resolution == (16, 8)
    assert np.allclose(solver.grid_spacing, 0.0625)
    assert np.allclose(solver.gravity, [0.0, -1.0])
    assert solver.fluid.get_density() == 2.0
    assert solver.viscosity_coefficient == pytest.approx(0.005)
    assert not solver.use_adaptive_time_stepping
    assert isinstance(solver.advection_solver, CubicSemiLagrangianSolver)
    assert solver.velocity.interpolation == "cubic"

    diffusion = solver.diffusion_solver
    assert isinstance(diffusion, BackwardEulerDiffusionSolver)
    assert diffusion.boundary_type == "dirichlet"

    assert isinstance(solver.boundary_condition_solver, FractionalBoundaryConditionSolver)
    assert solver.boundary_condition_solver.closed_domain_flags(2).tolist() == [[False, False], [True, True]]

    pressure = solver.pressure_solver
    assert isinstance(pressure, FractionalSinglePhasePressureSolver)
    assert pressure.density == 2.0
    linear_solver = pressure.linear_solver
    assert isinstance(linear_solver, GaussSeidelSolver)
    assert linear_solver.method_type == "symmetric"
    assert linear_solver.omega == 1.5
    assert linear_solver.tolerance == 1e-6
    assert linear_solver.max_iterations == 500


def test_smoke_configuration():
    solver = build_solver({
        "grid": {"resolution": [8, 8], "grid_spacing": 0.125},
        "smoke": {"enabled": True, "smoke_decay_factor": 0.25},
    })
    assert isinstance(solver, GridSmokeSolver)
    assert solver.smoke_decay_factor == 0.25
    assert set(solver.scalar_fields) == {"density", "temperature"}


def test_invalid_configuration(tmp_path, subtests):
    cases = {
        "unknown_section": {"solver": {}},
        "unknown_key": {"grid": {"cells": [4, 4]}},
        "section_not_mapping": {"grid": [4, 4]},
        "bad_resolution": {"grid": {"resolution": [0, 4]}},
        "bad_spacing": {"grid": {"grid_spacing": -1.0}},
        "bad_density": {"physical_properties": {"density": 0.0}},
        "bad_policy": {"time_stepping": {"policy": "variable"}},
        "bad_cfl": {"time_stepping": {"max_cfl": 0.0}},
        "bad_interpolation": {"advection": {"interpolation": "spline"}},
        "bad_order": {"advection": {"order": 4}},
        "bad_diffusion": {"diffusion": {"method": "crank_nicolson"}},
        "bad_boundary_policy": {"boundary_conditions": {"policy": "sticky"}},
        "bad_pressure_kind": {"pressure_solver": {"kind": "two_phase"}},
        "bad_linear_solver": {"pressure_solver": {"linear_solver": "lu"}},
    }
    for name, data in cases.items():
        with subtests.test(name):
            with pytest.raises(ConfigurationError):
                FluidSolverConfig.from_dict(data)

    with subtests.test("not_a_mapping"):
        with pytest.raises(ConfigurationError):
            FluidSolverConfig.from_dict([1, 2, 3])

    with subtests.test("malformed_yaml"):
        path = tmp_path / "broken.yaml"
        path.write_text("grid: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    with subtests.test("configuration_error_is_value_error"):
        with pytest.raises(ValueError):
            FluidSolverConfig.from_dict({"grid": {"resolution": [0]}})


def test_fluid_properties(subtests):
    with subtests.test("inviscid_default"):
        fluid = FluidProperties()
        assert fluid.get_viscosity() == 0.0
        assert fluid.get_reynolds_number() is None

    with subtests.test("from_reynolds_number"):
        fluid = FluidProperties(density=1.0, reynolds_number=100.0)
        assert fluid.get_viscosity() == pytest.approx(0.01)

    with subtests.test("kinematic_viscosity"):
        assert FluidProperties(density=4.0, viscosity=2.0).get_kinematic_viscosity() == 0.5

    with subtests.test("invalid"):
        with pytest.raises(ConfigurationError):
            FluidProperties(density=-1.0)
        with pytest.raises(ConfigurationError):
            FluidProperties(viscosity=-1.0)
        with pytest.raises(ConfigurationError):
            FluidProperties(reynolds_number=0.0)
