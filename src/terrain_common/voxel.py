"""
Voxel grid utilities for planet generation.

Grid values are signed distances in world units:
positive = inside the planet, negative = outside.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class DensityGrid:
    """
    Dense cubic grid of signed distance samples indexed [x, y, z].

    Sample (x, y, z) sits at grid-local position (x, y, z) * voxel_size.
    origin is the world-space position of sample (0, 0, 0).
    """
    data: np.ndarray  # (res, res, res) float64, C-contiguous
    voxel_size: float
    origin: np.ndarray

    def __post_init__(self):
        self.data = np.ascontiguousarray(self.data, dtype=np.float64)
        self.origin = np.asarray(self.origin, dtype=float)
        if self.data.ndim != 3 or len(set(self.data.shape)) != 1:
            raise ValueError(f"DensityGrid must be cubic, got shape {self.data.shape}")

    @property
    def resolution(self) -> int:
        return self.data.shape[0]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.data.shape

    @property
    def is_frozen(self) -> bool:
        return not self.data.flags.writeable

    def freeze(self) -> "DensityGrid":
        """Mark the samples read-only. Meshing only ever reads a frozen grid."""
        self.data.flags.writeable = False
        return self

    def grid_to_local(self, indices: np.ndarray) -> np.ndarray:
        """Convert grid indices to grid-local coordinates."""
        return np.asarray(indices, dtype=float) * self.voxel_size

    def grid_to_world(self, indices: np.ndarray) -> np.ndarray:
        """Convert grid indices to world coordinates."""
        return self.grid_to_local(indices) + self.origin

    def classify(self, band_voxels: float = 2.0) -> Dict[str, int]:
        """
        Count inside, outside and near-surface samples.

        Near-surface means |sdf| < band_voxels * voxel_size. The counts are
        diagnostics only.
        """
        band = band_voxels * self.voxel_size
        inside = int(np.count_nonzero(self.data > 0))
        return {
            "inside": inside,
            "outside": int(self.data.size - inside),
            "near_surface": int(np.count_nonzero(np.abs(self.data) < band)),
        }

    def intersects_surface(self) -> bool:
        """True if at least one sample is inside and one is not."""
        return bool(self.data.max() > 0 and self.data.min() <= 0)
