"""
Planet Generator: Density Field -> Surface Mesh

Samples a signed distance field (sphere + fractal noise) over a regular
grid and extracts a triangle mesh from its zero level set.

Usage:
    planet-generator --config planet.json --mode fan --summary outputs/summary.json
"""

__version__ = "1.0.0"

from .surface_noise import NoiseSynthesizer
from .sampler import sample_density_field, density_at
from .cells import (
    Cube,
    EdgeCrossing,
    cube_at,
    configuration_mask,
    cube_masks,
    active_cube_indices,
    edge_crossings,
)
from .triangulate import triangulate_cube, triangulate_fan, triangulate_quad, extract_canonical
from .build import assemble_mesh, build_planet

__all__ = [
    "NoiseSynthesizer",
    "sample_density_field",
    "density_at",
    "Cube",
    "EdgeCrossing",
    "cube_at",
    "configuration_mask",
    "cube_masks",
    "active_cube_indices",
    "edge_crossings",
    "triangulate_cube",
    "triangulate_fan",
    "triangulate_quad",
    "extract_canonical",
    "assemble_mesh",
    "build_planet",
]
