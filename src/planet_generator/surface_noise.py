"""
Fractal surface noise for the planet.

The noise value perturbs the sphere radius along a direction from the
planet center:

    effective_radius = radius + sample(direction) * terrain_height_scale

Each octave is one call to Perlin gradient noise (pnoise3 / pnoise2 from
the `noise` package). Octaves are summed raw: each contributes a signed
value in roughly [-1, 1] scaled by its amplitude, with no remapping.
"""

import logging
from typing import Sequence

import noise
import numpy as np

from terrain_common.config import NoiseMapping, PlanetDescriptor

logger = logging.getLogger(__name__)

# Shifts samples away from the lattice origin, where Perlin noise is 0
NOISE_OFFSET = 42.0


class NoiseSynthesizer:
    """
    Scalar surface perturbation for directions from the planet center.

    Deterministic for a given descriptor: same seed, scale, octaves and
    mapping always give the same value.
    """

    def __init__(self, descriptor: PlanetDescriptor):
        self.scale = descriptor.noise_scale
        self.octaves = int(descriptor.noise_octaves)
        self.persistence = descriptor.noise_persistence
        self.lacunarity = descriptor.noise_lacunarity
        self.seed = int(descriptor.noise_seed)
        self.mapping = descriptor.noise_mapping

    def _coherent(self, direction: np.ndarray, frequency: float) -> float:
        if self.mapping is NoiseMapping.PLANAR:
            return noise.pnoise2(
                direction[0] * frequency + NOISE_OFFSET,
                direction[2] * frequency + NOISE_OFFSET,
                base=self.seed,
            )
        return noise.pnoise3(
            direction[0] * frequency + NOISE_OFFSET,
            direction[1] * frequency + NOISE_OFFSET,
            direction[2] * frequency + NOISE_OFFSET,
            base=self.seed,
        )

    def _fractal(self, direction: np.ndarray) -> float:
        value = 0.0
        amplitude = 1.0
        frequency = self.scale
        for _ in range(self.octaves):
            value += self._coherent(direction, frequency) * amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity
        return value

    def sample(self, direction: Sequence[float]) -> float:
        """
        Noise value for a direction (normalized here, any length accepted).

        A zero-length direction (a point exactly at the planet center)
        returns 0.0.
        """
        direction = np.asarray(direction, dtype=float)
        length = np.linalg.norm(direction)
        if length == 0.0 or self.octaves == 0:
            return 0.0
        return self._fractal(direction / length)

    def sample_many(self, offsets: np.ndarray) -> np.ndarray:
        """
        Noise values for a batch of offset vectors from the planet center.

        Args:
            offsets: (N, 3) array, rows need not be normalized

        Returns:
            (N,) array; rows of zero length get 0.0
        """
        offsets = np.asarray(offsets, dtype=float).reshape(-1, 3)
        result = np.zeros(len(offsets))
        if self.octaves == 0:
            return result

        lengths = np.linalg.norm(offsets, axis=1)
        nonzero = np.flatnonzero(lengths > 0.0)
        directions = offsets[nonzero] / lengths[nonzero, None]
        for row, direction in zip(nonzero, directions):
            result[row] = self._fractal(direction)
        return result
