"""
Density field sampling.

Builds the resolution^3 signed distance grid for a planet:

    sdf(p) = radius + noise(normalize(p - center)) * terrain_height_scale - |p - center|

p is the grid-local position index * voxel_size and center is the planet
center in the grid-local frame (descriptor.local_center).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import numpy as np

from terrain_common.config import PlanetDescriptor
from terrain_common.voxel import DensityGrid

from .surface_noise import NoiseSynthesizer

logger = logging.getLogger(__name__)

# Half-width of the near-surface diagnostic band, in voxels
SURFACE_BAND_VOXELS = 2.0


def _uses_noise(descriptor: PlanetDescriptor) -> bool:
    return descriptor.terrain_height_scale != 0 and descriptor.noise_octaves > 0


def density_at(
    descriptor: PlanetDescriptor,
    local_point: Sequence[float],
    synthesizer: Optional[NoiseSynthesizer] = None
) -> float:
    """
    Signed distance at a single grid-local point.

    At the planet center the direction is undefined, noise is 0 and the
    result is exactly descriptor.radius.
    """
    offset = np.asarray(local_point, dtype=float) - descriptor.local_center
    distance = float(np.linalg.norm(offset))
    effective_radius = descriptor.radius
    if _uses_noise(descriptor):
        synthesizer = synthesizer or NoiseSynthesizer(descriptor)
        effective_radius += synthesizer.sample(offset) * descriptor.terrain_height_scale
    return effective_radius - distance


def _sample_slab(
    descriptor: PlanetDescriptor,
    synthesizer: NoiseSynthesizer,
    x_start: int,
    x_stop: int
) -> np.ndarray:
    """Signed distances for grid rows x_start <= x < x_stop."""
    res = descriptor.resolution
    voxel = descriptor.voxel_size

    xs = np.arange(x_start, x_stop) * voxel
    ys = np.arange(res) * voxel
    xx, yy, zz = np.meshgrid(xs, ys, ys, indexing='ij')
    offsets = np.stack([xx, yy, zz], axis=-1) - descriptor.local_center

    distance = np.linalg.norm(offsets, axis=-1)
    effective_radius = np.full(distance.shape, float(descriptor.radius))
    if _uses_noise(descriptor):
        noise_values = synthesizer.sample_many(offsets.reshape(-1, 3)).reshape(distance.shape)
        effective_radius += noise_values * descriptor.terrain_height_scale

    return effective_radius - distance


def _slab_bounds(resolution: int, n_slabs: int) -> List[tuple]:
    edges = np.linspace(0, resolution, n_slabs + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def sample_density_field(
    descriptor: PlanetDescriptor,
    synthesizer: Optional[NoiseSynthesizer] = None,
    workers: int = 1
) -> DensityGrid:
    """
    Sample the planet's signed distance field over the whole grid.

    Args:
        descriptor: Planet configuration
        synthesizer: Noise source (built from descriptor if None)
        workers: Thread count; the x axis is split into contiguous slabs
                 which are stitched back in index order

    Returns:
        Frozen (read-only) DensityGrid
    """
    synthesizer = synthesizer or NoiseSynthesizer(descriptor)
    res = descriptor.resolution

    logger.info(f"Sampling {res}³ density grid (voxel size {descriptor.voxel_size:.3f})")
    logger.debug(f"Planet center (grid-local): {descriptor.local_center.tolist()}, radius: {descriptor.radius}")
    logger.debug(f"Estimated grid memory: {res ** 3 * 8 / 1e6:.1f} MB")

    if workers > 1 and res > 1:
        slabs = _slab_bounds(res, min(workers, res))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            parts = list(pool.map(lambda b: _sample_slab(descriptor, synthesizer, *b), slabs))
        data = np.concatenate(parts, axis=0)
    else:
        data = _sample_slab(descriptor, synthesizer, 0, res)

    grid = DensityGrid(data=data, voxel_size=descriptor.voxel_size, origin=descriptor.grid_origin)

    counts = grid.classify(SURFACE_BAND_VOXELS)
    logger.info(f"SDF sampled: {counts['inside']} inside, {counts['outside']} outside, "
                f"{counts['near_surface']} near surface")
    if counts["near_surface"] == 0:
        logger.warning("No voxel lies near the planet surface: the sphere does not intersect "
                       "the sampled volume (check radius, world_size and world_center)")

    return grid.freeze()
