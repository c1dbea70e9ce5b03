"""
Cube classification and edge intersection.

Corner numbering for the cube with minimum corner (x, y, z):

    0: (x,   y,   z)      4: (x,   y+1, z)
    1: (x+1, y,   z)      5: (x+1, y+1, z)
    2: (x+1, y,   z+1)    6: (x+1, y+1, z+1)
    3: (x,   y,   z+1)    7: (x,   y+1, z+1)

Corners 0-3 loop around the bottom face (y), 4-7 around the top (y+1).
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from terrain_common.voxel import DensityGrid

logger = logging.getLogger(__name__)

CORNER_OFFSETS = np.array([
    [0, 0, 0],
    [1, 0, 0],
    [1, 0, 1],
    [0, 0, 1],
    [0, 1, 0],
    [1, 1, 0],
    [1, 1, 1],
    [0, 1, 1],
], dtype=np.int64)

# edge -> (corner, corner)
EDGE_CORNERS = (
    (0, 1), (1, 2), (2, 3), (3, 0),  # bottom loop
    (4, 5), (5, 6), (6, 7), (7, 4),  # top loop
    (0, 4), (1, 5), (2, 6), (3, 7),  # verticals
)

FULLY_OUTSIDE = 0
FULLY_INSIDE = 255


@dataclass(frozen=True)
class Cube:
    """8 corner samples of one grid cube and their grid-local positions."""
    index: tuple
    values: np.ndarray   # (8,)
    corners: np.ndarray  # (8, 3)

    @property
    def center(self) -> np.ndarray:
        return self.corners.mean(axis=0)

    @property
    def mask(self) -> int:
        return configuration_mask(self.values)


@dataclass(frozen=True)
class EdgeCrossing:
    """Point on a cube edge where the field changes sign."""
    edge: int
    point: np.ndarray


def configuration_mask(values: np.ndarray) -> int:
    """8-bit mask with bit i set iff corner i is inside (value > 0)."""
    mask = 0
    for i, value in enumerate(values):
        if value > 0:
            mask |= 1 << i
    return mask


def cube_at(grid: DensityGrid, x: int, y: int, z: int) -> Cube:
    """
    Read the cube whose minimum corner is (x, y, z).

    Requires 0 <= x, y, z < resolution - 1.
    """
    limit = grid.resolution - 1
    if not (0 <= x < limit and 0 <= y < limit and 0 <= z < limit):
        raise IndexError(f"cube ({x}, {y}, {z}) outside grid of {limit}³ cubes")

    indices = CORNER_OFFSETS + (x, y, z)
    values = grid.data[indices[:, 0], indices[:, 1], indices[:, 2]]
    return Cube(index=(x, y, z), values=values, corners=grid.grid_to_local(indices))


def cube_masks(grid: DensityGrid) -> np.ndarray:
    """
    Configuration mask of every cube at once.

    Returns:
        (res-1, res-1, res-1) uint8 array, mask of the cube at [x, y, z]
    """
    inside = grid.data > 0
    n = grid.resolution - 1
    masks = np.zeros((n, n, n), dtype=np.uint8)
    for bit, (dx, dy, dz) in enumerate(CORNER_OFFSETS):
        corner = inside[dx:dx + n, dy:dy + n, dz:dz + n]
        masks |= corner.astype(np.uint8) << bit
    return masks


def active_cube_indices(grid: DensityGrid) -> np.ndarray:
    """
    Minimum corners of all cubes the surface passes through.

    Cubes fully inside or fully outside are dropped here, before any edge
    work. Rows are ordered by x, then y, then z.

    Returns:
        (K, 3) int array
    """
    masks = cube_masks(grid)
    active = (masks != FULLY_OUTSIDE) & (masks != FULLY_INSIDE)
    indices = np.argwhere(active)
    logger.debug(f"{len(indices)} of {masks.size} cubes cross the surface")
    return indices


def edge_crossings(cube: Cube) -> List[EdgeCrossing]:
    """
    Linearly interpolated zero crossings on the cube's 12 edges.

    Crossings are returned in edge index order. An edge whose endpoint
    magnitudes sum to zero is never reported.
    """
    crossings = []
    for edge, (c1, c2) in enumerate(EDGE_CORNERS):
        v1 = cube.values[c1]
        v2 = cube.values[c2]
        if (v1 > 0) == (v2 > 0):
            continue
        denom = abs(v1) + abs(v2)
        if denom == 0.0:
            continue
        t = abs(v1) / denom
        p1 = cube.corners[c1]
        p2 = cube.corners[c2]
        crossings.append(EdgeCrossing(edge=edge, point=p1 + (p2 - p1) * t))
    return crossings
