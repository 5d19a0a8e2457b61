from .field import (
    Samplable,
    ScalarField,
    VectorField,
    ConstantScalarField,
    ConstantVectorField,
    CustomScalarField,
    CustomVectorField,
)
from .implicit import (
    Sphere,
    Box,
    Plane,
    ImplicitSurfaceSet,
    ComplementField,
    complement,
    is_inside_sdf,
    fraction_inside_sdf,
)
