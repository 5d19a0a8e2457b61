"""
Fluid properties including viscosity, density, etc.
"""

from ...exceptions import ConfigurationError


class FluidProperties:
    """
    Class to store and manage fluid properties.
    """

    def __init__(self, density=1.0, viscosity=None, reynolds_number=None,
                 characteristic_velocity=1.0, characteristic_length=1.0):
        """
        Initialize fluid properties.

        Parameters:
        -----------
        density : float
            Fluid density
        viscosity : float, optional
            Dynamic viscosity. If not provided, calculated from the Reynolds
            number, or zero (inviscid) when neither is given.
        reynolds_number : float, optional
            Reynolds number, used when viscosity is not provided
        characteristic_velocity : float, optional
            Characteristic velocity for Reynolds number calculation
        characteristic_length : float, optional
            Characteristic length for Reynolds number calculation
        """
        if density <= 0.0:
            raise ConfigurationError(f"Density must be positive, got {density}")
        self.density = float(density)
        self.characteristic_velocity = characteristic_velocity
        self.characteristic_length = characteristic_length
        self.reynolds_number = reynolds_number

        if viscosity is None:
            if reynolds_number is None:
                viscosity = 0.0
            elif reynolds_number <= 0.0:
                raise ConfigurationError(f"Reynolds number must be positive, got {reynolds_number}")
            else:
                viscosity = self.density * characteristic_velocity * characteristic_length / reynolds_number
        if viscosity < 0.0:
            raise ConfigurationError(f"Viscosity must be non-negative, got {viscosity}")
        self.viscosity = float(viscosity)
        if self.reynolds_number is None and self.viscosity > 0.0:
            self.reynolds_number = self.density * characteristic_velocity * characteristic_length / self.viscosity

    def get_density(self):
        """Get fluid density."""
        return self.density

    def get_viscosity(self):
        """Get dynamic viscosity."""
        return self.viscosity

    def get_kinematic_viscosity(self):
        """Viscosity divided by density, the diffusion coefficient of velocity."""
        return self.viscosity / self.density

    def get_reynolds_number(self):
        """Get Reynolds number (``None`` for an inviscid fluid)."""
        return self.reynolds_number
