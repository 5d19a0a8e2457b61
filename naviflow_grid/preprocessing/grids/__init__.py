from .base import Grid
from .scalar_grid import ScalarGrid, CellCenteredScalarGrid, VertexCenteredScalarGrid
from .vector_grid import CollocatedVectorGrid, CellCenteredVectorGrid, VertexCenteredVectorGrid
from .face_centered import FaceCenteredGrid
from .interpolation import sample_linear, sample_cubic, get_sampler
