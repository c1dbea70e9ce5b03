"""
Common modules shared by the planet generation pipeline.

Coordinate Model:
- Density grid samples live in a grid-local frame starting at (0, 0, 0)
- grid_origin (see GridAnchor) maps grid-local coordinates to world space
- Meshes are translated to world space once, after triangulation
"""

from .config import (
    PlanetDescriptor, PlanetInfo, MesherOptions,
    NoiseMapping, GridAnchor, TriangulationMode, OrientationMode,
    DEFAULT_DESCRIPTOR,
)
from .voxel import DensityGrid
from .mesh_ops import (
    Mesh, MeshBuffer, concatenate_meshes, validate_mesh,
    compute_mesh_stats, radial_stats, outward_fraction,
)

__all__ = [
    'PlanetDescriptor', 'PlanetInfo', 'MesherOptions',
    'NoiseMapping', 'GridAnchor', 'TriangulationMode', 'OrientationMode',
    'DEFAULT_DESCRIPTOR',
    'DensityGrid',
    'Mesh', 'MeshBuffer', 'concatenate_meshes', 'validate_mesh',
    'compute_mesh_stats', 'radial_stats', 'outward_fraction',
]
