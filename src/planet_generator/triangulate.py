"""
Triangulation of surface crossings.

Per-cube triangulation is a centroid fan over the cube's edge crossings,
taken in edge index order:

1. Fewer than 3 crossings: nothing
2. Centroid c of all crossings
3. Triangle (c, p_i, p_i+1) for each consecutive pair (wrapping) that is
   further apart than min_edge_length
4. Flat normal = normalized cross(p_i - c, p_i+1 - c)
5. If the normal faces the reference point, negate it and swap the last
   two indices

With exactly 4 crossings a plain quad (p0, p2, p1) + (p2, p3, p1) can be
emitted as well, or instead, depending on TriangulationMode. Quad
triangles carry their own flat normal and are not reoriented.

This is simpler than lookup-table marching cubes and does not produce a
manifold surface. TriangulationMode.CANONICAL runs the lookup-table
algorithm from scikit-image over the whole grid instead.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np
from skimage.measure import marching_cubes

from terrain_common.config import TriangulationMode
from terrain_common.mesh_ops import Mesh, MeshBuffer
from terrain_common.voxel import DensityGrid

logger = logging.getLogger(__name__)

# Squared cross-product length below which a triangle counts as degenerate
DEGENERATE_AREA_EPS = 1e-24


def _unit_normal(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> Optional[np.ndarray]:
    """Normalized cross(b - a, c - a), or None for a degenerate triangle."""
    normal = np.cross(b - a, c - a)
    length_sq = float(np.dot(normal, normal))
    if length_sq <= DEGENERATE_AREA_EPS:
        return None
    return normal / np.sqrt(length_sq)


def _outward(point: np.ndarray, reference: np.ndarray) -> np.ndarray:
    direction = point - reference
    length = np.linalg.norm(direction)
    if length == 0.0:
        return direction
    return direction / length


def triangulate_fan(
    points: Sequence[np.ndarray],
    reference: np.ndarray,
    buffer: MeshBuffer,
    min_edge_length: float = 0.01
) -> int:
    """
    Centroid fan over crossing points, oriented away from reference.

    Returns:
        Number of triangles appended to buffer
    """
    n = len(points)
    if n < 3:
        return 0

    centroid = np.mean(points, axis=0)
    outward = _outward(centroid, np.asarray(reference, dtype=float))

    emitted = 0
    for i in range(n):
        p = points[i]
        q = points[(i + 1) % n]
        if np.linalg.norm(q - p) <= min_edge_length:
            continue
        normal = _unit_normal(centroid, p, q)
        if normal is None:
            continue
        flip = float(np.dot(normal, outward)) < 0.0
        if flip:
            normal = -normal
        buffer.add_triangle(centroid, p, q, normal, flip=flip)
        emitted += 1
    return emitted


def triangulate_quad(points: Sequence[np.ndarray], buffer: MeshBuffer) -> int:
    """
    Two flat triangles directly over four crossing points.

    Returns:
        Number of triangles appended to buffer
    """
    if len(points) != 4:
        return 0

    p0, p1, p2, p3 = points
    emitted = 0
    for a, b, c in ((p0, p2, p1), (p2, p3, p1)):
        normal = _unit_normal(a, b, c)
        if normal is None:
            continue
        buffer.add_triangle(a, b, c, normal)
        emitted += 1
    return emitted


def triangulate_cube(
    points: Sequence[np.ndarray],
    reference: np.ndarray,
    buffer: MeshBuffer,
    mode: TriangulationMode = TriangulationMode.FAN,
    min_edge_length: float = 0.01
) -> int:
    """
    Triangulate one cube's crossing points according to mode.

    Args:
        points: Edge crossing points in edge index order
        reference: Point the surface should face away from
        buffer: Destination for the triangles
        mode: FAN, QUAD or BOTH (CANONICAL is whole-grid, see extract_canonical)
        min_edge_length: Minimum separation of consecutive fan points

    Returns:
        Number of triangles appended to buffer
    """
    if mode is TriangulationMode.CANONICAL:
        raise ValueError("CANONICAL triangulation works on the whole grid, use extract_canonical")

    quad_case = len(points) == 4
    emitted = 0
    if mode is not TriangulationMode.QUAD or not quad_case:
        emitted += triangulate_fan(points, reference, buffer, min_edge_length)
    if mode is not TriangulationMode.FAN and quad_case:
        emitted += triangulate_quad(points, buffer)
    return emitted


def extract_canonical(
    grid: DensityGrid,
    reference_for: Callable[[np.ndarray], np.ndarray]
) -> Mesh:
    """
    Lookup-table marching cubes over the zero level set.

    Triangles are flat shaded (three vertices each) and oriented away
    from reference_for(triangle_centroid).

    Args:
        grid: Sampled density grid
        reference_for: Maps a grid-local point to its orientation reference

    Returns:
        Mesh in grid-local coordinates (empty if the grid has no surface)
    """
    if not grid.intersects_surface():
        logger.warning("Density grid has no sign change, nothing to extract")
        return Mesh.empty()

    spacing = (grid.voxel_size,) * 3
    try:
        verts, faces, _, _ = marching_cubes(
            np.array(grid.data),  # writeable copy, the grid itself is frozen
            level=0.0,
            spacing=spacing,
            allow_degenerate=False
        )
    except (ValueError, RuntimeError) as e:
        logger.warning(f"Marching cubes found no surface: {e}")
        return Mesh.empty()

    verts = verts.astype(np.float64)

    buffer = MeshBuffer()
    skipped = 0
    for face in faces:
        a, b, c = verts[face[0]], verts[face[1]], verts[face[2]]
        normal = _unit_normal(a, b, c)
        if normal is None:
            skipped += 1
            continue
        centroid = (a + b + c) / 3.0
        flip = float(np.dot(normal, _outward(centroid, reference_for(centroid)))) < 0.0
        if flip:
            normal = -normal
        buffer.add_triangle(a, b, c, normal, flip=flip)

    if skipped:
        logger.debug(f"Skipped {skipped} degenerate marching cubes triangles")
    return buffer.build()
