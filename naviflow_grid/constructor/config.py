"""
Solver configuration.

A configuration is a dictionary split into sections, usually read from a
YAML file:

.. code-block:: yaml

    grid:
      resolution: [32, 32]
      grid_spacing: 0.03125
    physical_properties:
      density: 1.0
      viscosity: 0.0
    pressure_solver:
      kind: single_phase
      linear_solver: iccg
      tolerance: 1.0e-8

Every section maps onto a dataclass; unknown sections, keys or option
values raise ``ConfigurationError``.
"""

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import yaml

from ..exceptions import ConfigurationError
from ..solver.advection import CubicSemiLagrangianSolver, SemiLagrangianSolver
from ..solver.boundary_conditions import create_boundary_condition_solver
from ..solver.diffusion import BackwardEulerDiffusionSolver, ForwardEulerDiffusionSolver
from ..solver.linear_solver import create_linear_solver
from ..solver.pressure_solver import create_pressure_solver
from .properties.fluid import FluidProperties

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _check_choice(name, value, choices):
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {list(choices)}, got '{value}'")


@dataclass
class GridConfig:
    resolution: Sequence[int] = (32, 32)
    grid_spacing: Union[Number, Sequence[Number]] = 1.0
    origin: Union[Number, Sequence[Number]] = 0.0

    def validate(self):
        resolution = np.atleast_1d(self.resolution)
        if resolution.size == 0 or np.any(resolution < 1):
            raise ConfigurationError(f"grid.resolution must be positive, got {self.resolution}")
        if np.any(np.asarray(self.grid_spacing, dtype=float) <= 0.0):
            raise ConfigurationError(f"grid.grid_spacing must be positive, got {self.grid_spacing}")


@dataclass
class PhysicalPropertiesConfig:
    density: float = 1.0
    viscosity: float = 0.0
    gravity: Optional[Sequence[float]] = None

    def validate(self):
        if self.density <= 0.0:
            raise ConfigurationError(f"physical_properties.density must be positive, got {self.density}")
        if self.viscosity < 0.0:
            raise ConfigurationError(f"physical_properties.viscosity must be non-negative, got {self.viscosity}")


@dataclass
class TimeSteppingConfig:
    policy: str = "adaptive"
    max_cfl: float = 5.0

    def validate(self):
        _check_choice("time_stepping.policy", self.policy, ("fixed", "adaptive"))
        if self.max_cfl <= 0.0:
            raise ConfigurationError(f"time_stepping.max_cfl must be positive, got {self.max_cfl}")


@dataclass
class AdvectionConfig:
    interpolation: str = "linear"
    order: int = 2

    def validate(self):
        _check_choice("advection.interpolation", self.interpolation, ("linear", "cubic"))
        _check_choice("advection.order", self.order, (1, 2))


@dataclass
class DiffusionConfig:
    method: str = "explicit"
    boundary_type: str = "neumann"
    linear_solver: str = "iccg"
    tolerance: float = 1e-9
    max_iterations: int = 1000

    def validate(self):
        _check_choice("diffusion.method", self.method, ("explicit", "implicit"))
        _check_choice("diffusion.boundary_type", self.boundary_type, ("neumann", "dirichlet"))


@dataclass
class BoundaryConditionConfig:
    policy: str = "blocked"
    closed_domain: Any = True
    extrapolation_depth: int = 5

    def validate(self):
        _check_choice("boundary_conditions.policy", self.policy, ("blocked", "fractional"))
        if self.extrapolation_depth < 0:
            raise ConfigurationError("boundary_conditions.extrapolation_depth must be non-negative")


@dataclass
class PressureSolverConfig:
    kind: str = "single_phase"
    linear_solver: str = "iccg"
    tolerance: float = 1e-8
    max_iterations: int = 1000
    options: Dict[str, Any] = field(default_factory=dict)

    def validate(self):
        _check_choice("pressure_solver.kind", self.kind, ("single_phase", "fractional"))
        _check_choice("pressure_solver.linear_solver", self.linear_solver,
                      ("jacobi", "gauss_seidel", "cg", "iccg", "amg"))


@dataclass
class SmokeConfig:
    enabled: bool = False
    smoke_diffusion_coefficient: float = 0.0
    temperature_diffusion_coefficient: float = 0.0
    buoyancy_smoke_density_factor: float = -0.000625
    buoyancy_temperature_factor: float = 5.0
    smoke_decay_factor: float = 0.001
    temperature_decay_factor: float = 0.001

    def validate(self):
        pass


SECTIONS = {
    "grid": GridConfig,
    "physical_properties": PhysicalPropertiesConfig,
    "time_stepping": TimeSteppingConfig,
    "advection": AdvectionConfig,
    "diffusion": DiffusionConfig,
    "boundary_conditions": BoundaryConditionConfig,
    "pressure_solver": PressureSolverConfig,
    "smoke": SmokeConfig,
}


@dataclass
class FluidSolverConfig:
    """Complete configuration of a grid fluid solver."""

    grid: GridConfig = field(default_factory=GridConfig)
    physical_properties: PhysicalPropertiesConfig = field(default_factory=PhysicalPropertiesConfig)
    time_stepping: TimeSteppingConfig = field(default_factory=TimeSteppingConfig)
    advection: AdvectionConfig = field(default_factory=AdvectionConfig)
    diffusion: DiffusionConfig = field(default_factory=DiffusionConfig)
    boundary_conditions: BoundaryConditionConfig = field(default_factory=BoundaryConditionConfig)
    pressure_solver: PressureSolverConfig = field(default_factory=PressureSolverConfig)
    smoke: SmokeConfig = field(default_factory=SmokeConfig)

    @classmethod
    def from_dict(cls, data):
        """
        Build a configuration from a nested dictionary.

        Missing sections and keys take their defaults.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")
        unknown = set(data) - set(SECTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        sections = {}
        for name, section_class in SECTIONS.items():
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping")
            known = {f.name for f in fields(section_class)}
            bad_keys = set(values) - known
            if bad_keys:
                raise ConfigurationError(f"Unknown keys in section '{name}': {sorted(bad_keys)}")
            sections[name] = section_class(**values)
        config = cls(**sections)
        config.validate()
        return config

    def validate(self):
        for name in SECTIONS:
            getattr(self, name).validate()
        return self

    def to_dict(self):
        return asdict(self)


def load_config(path):
    """Read a YAML configuration file into a ``FluidSolverConfig``."""
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Could not parse configuration file {path}: {exc}")
    logger.debug("Loaded configuration from %s", path)
    return FluidSolverConfig.from_dict(data)


def create_advection_solver(config):
    advection_class = CubicSemiLagrangianSolver if config.interpolation == "cubic" else SemiLagrangianSolver
    return advection_class(order=config.order)


def create_diffusion_solver(config):
    if config.method == "explicit":
        return ForwardEulerDiffusionSolver()
    linear_solver = create_linear_solver(
        config.linear_solver, tolerance=config.tolerance, max_iterations=config.max_iterations)
    return BackwardEulerDiffusionSolver(boundary_type=config.boundary_type, linear_solver=linear_solver)


def create_fluid_properties(config):
    return FluidProperties(density=config.density, viscosity=config.viscosity)


def build_solver(config):
    """
    Construct a ``GridFluidSolver`` (or ``GridSmokeSolver`` when smoke is
    enabled) from a configuration object or dictionary.
    """
    from ..solver.Algorithms import GridFluidSolver, GridSmokeSolver

    if isinstance(config, dict):
        config = FluidSolverConfig.from_dict(config)
    fluid = create_fluid_properties(config.physical_properties)
    pressure_config = config.pressure_solver
    linear_solver = create_linear_solver(
        pressure_config.linear_solver,
        tolerance=pressure_config.tolerance,
        max_iterations=pressure_config.max_iterations,
        **pressure_config.options,
    )
    kwargs = dict(
        grid_spacing=config.grid.grid_spacing,
        origin=config.grid.origin,
        fluid=fluid,
        gravity=config.physical_properties.gravity,
        advection_solver=create_advection_solver(config.advection),
        diffusion_solver=create_diffusion_solver(config.diffusion),
        pressure_solver=create_pressure_solver(pressure_config.kind, linear_solver, fluid.get_density()),
        boundary_condition_solver=create_boundary_condition_solver(
            config.boundary_conditions.policy, config.boundary_conditions.closed_domain),
        use_adaptive_time_stepping=config.time_stepping.policy == "adaptive",
        max_cfl=config.time_stepping.max_cfl,
        closed_domain=config.boundary_conditions.closed_domain,
        extrapolation_depth=config.boundary_conditions.extrapolation_depth,
        interpolation=config.advection.interpolation,
    )
    if config.smoke.enabled:
        smoke = asdict(config.smoke)
        smoke.pop("enabled")
        return GridSmokeSolver(tuple(config.grid.resolution), **smoke, **kwargs)
    return GridFluidSolver(tuple(config.grid.resolution), **kwargs)
