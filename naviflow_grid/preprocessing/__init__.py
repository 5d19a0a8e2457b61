# Preprocessing module initialization
from .fields import (
    ScalarField,
    VectorField,
    ConstantScalarField,
    ConstantVectorField,
    CustomScalarField,
    CustomVectorField,
    Sphere,
    Box,
    Plane,
    ImplicitSurfaceSet,
    complement,
)
from .grids import (
    CellCenteredScalarGrid,
    VertexCenteredScalarGrid,
    CellCenteredVectorGrid,
    VertexCenteredVectorGrid,
    FaceCenteredGrid,
)
