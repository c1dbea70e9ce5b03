"""
Planet Generation: Density Field -> Mesh

Turn a PlanetDescriptor into a world-space surface mesh plus the planet
summary used for spawning and locomotion.

Algorithm:
P1. Sample the signed distance grid (sphere + fractal noise)
P2. Classify every cube; drop fully inside / fully outside cubes
P3. Intersect crossed edges and triangulate each active cube
P4. Concatenate per-cube triangles in cube order
P5. Translate from the grid-local frame to world space
P6. Derive PlanetInfo (center, radius, spawn position)

The grid is complete and read-only before P2 starts. With workers > 1 the
active cubes are split into contiguous chunks whose meshes are stitched
back in chunk order, so output does not depend on the worker count.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

import numpy as np

from terrain_common.config import (
    MesherOptions,
    OrientationMode,
    PlanetDescriptor,
    PlanetInfo,
    TriangulationMode,
)
from terrain_common.mesh_ops import Mesh, MeshBuffer, concatenate_meshes, validate_mesh
from terrain_common.voxel import DensityGrid

from .cells import active_cube_indices, cube_at, edge_crossings
from .sampler import sample_density_field
from .triangulate import extract_canonical, triangulate_cube

logger = logging.getLogger(__name__)


def _mesh_cubes(
    grid: DensityGrid,
    cube_indices: np.ndarray,
    center_local: np.ndarray,
    options: MesherOptions
) -> Mesh:
    """Triangulate a run of active cubes into one chunk-local mesh."""
    buffer = MeshBuffer()
    use_cube_center = options.orientation is OrientationMode.CUBE_CENTER
    for x, y, z in cube_indices:
        cube = cube_at(grid, x, y, z)
        points = [crossing.point for crossing in edge_crossings(cube)]
        reference = cube.center if use_cube_center else center_local
        triangulate_cube(
            points,
            reference,
            buffer,
            mode=options.triangulation,
            min_edge_length=options.min_edge_length,
        )
    return buffer.build()


def _cube_center_of(grid: DensityGrid):
    """Center of the cube containing a grid-local point."""
    limit = grid.resolution - 2

    def reference(point: np.ndarray) -> np.ndarray:
        index = np.clip(np.floor(point / grid.voxel_size), 0, limit)
        return (index + 0.5) * grid.voxel_size

    return reference


def assemble_mesh(
    grid: DensityGrid,
    center_local: np.ndarray,
    options: Optional[MesherOptions] = None
) -> Mesh:
    """
    Mesh the zero level set of a density grid.

    Args:
        grid: Frozen density grid
        center_local: Planet center in the grid-local frame
        options: Meshing options (defaults if None)

    Returns:
        Mesh in the grid-local frame
    """
    options = options or MesherOptions()
    center_local = np.asarray(center_local, dtype=float)
    if not grid.is_frozen:
        grid.freeze()

    if options.triangulation is TriangulationMode.CANONICAL:
        if options.orientation is OrientationMode.CUBE_CENTER:
            return extract_canonical(grid, _cube_center_of(grid))
        return extract_canonical(grid, lambda point: center_local)

    active = active_cube_indices(grid)
    n_cubes = (grid.resolution - 1) ** 3
    logger.info(f"Triangulating {len(active)} active cubes of {n_cubes} "
                f"(mode={options.triangulation.value}, orientation={options.orientation.value})")
    if len(active) == 0:
        return Mesh.empty()

    if options.workers > 1 and len(active) > 1:
        chunks = np.array_split(active, min(options.workers, len(active)))
        with ThreadPoolExecutor(max_workers=options.workers) as pool:
            parts = list(pool.map(lambda c: _mesh_cubes(grid, c, center_local, options), chunks))
        return concatenate_meshes(parts)

    return _mesh_cubes(grid, active, center_local, options)


def build_planet(
    descriptor: PlanetDescriptor,
    options: Optional[MesherOptions] = None
) -> Tuple[Mesh, PlanetInfo]:
    """
    Generate the planet surface mesh.

    Main entry point for planet generation.

    Args:
        descriptor: Planet configuration
        options: Meshing options (defaults if None)

    Returns:
        (mesh, info) tuple where:
            mesh: world-space Mesh with outward normals
            info: PlanetInfo for spawn and locomotion collaborators
    """
    options = options or MesherOptions()

    logger.info("=" * 60)
    logger.info("Planet Generation")
    logger.info("=" * 60)
    logger.info(f"Radius: {descriptor.radius}, resolution: {descriptor.resolution}, "
                f"world size: {descriptor.world_size}, center: {list(descriptor.world_center)}")

    # ========== P1: Sample density field ==========
    logger.info("\n=== P1: Sample density field ===")
    grid = sample_density_field(descriptor, workers=options.workers)

    # ========== P2-P4: Triangulate ==========
    logger.info("\n=== P2-P4: Triangulate surface ===")
    local_mesh = assemble_mesh(grid, descriptor.local_center, options)

    # ========== P5: Translate to world space ==========
    offset = descriptor.grid_origin
    logger.debug(f"Translating mesh by grid origin {offset.tolist()} "
                 f"(anchor={descriptor.grid_anchor.value})")
    mesh = local_mesh.translated(offset)

    problems = validate_mesh(mesh)
    for problem in problems:
        logger.warning(f"Mesh invariant violated: {problem}")

    # ========== P6: Planet info ==========
    info = PlanetInfo.from_descriptor(descriptor)

    logger.info("\n=== Result ===")
    logger.info(f"Vertices: {mesh.n_vertices}, Triangles: {mesh.n_triangles}")
    logger.info(f"Spawn position: {info.spawn_position.tolist()}")
    if mesh.is_empty:
        logger.warning("Generated mesh is empty")

    return mesh, info
