"""
Configuration and constants for planet generation.

Coordinate Model:
- The density grid is sampled in a grid-local frame whose origin is (0, 0, 0)
- grid_origin maps that frame into world space (see GridAnchor)
- Mesh vertices are translated by grid_origin after triangulation
"""

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Tuple

import numpy as np


WORLD_UP = (0.0, 1.0, 0.0)


class NoiseMapping(Enum):
    """
    How a direction from the planet center becomes noise coordinates.

    SPHERICAL (default): 3D noise evaluated on the unit direction.
        - Seamless and pole-free over the whole sphere

    PLANAR: 2D noise on the (x, z) components of the direction.
        - Matches the first generation of terrain assets
        - Visibly stretched around the y axis
    """
    SPHERICAL = "spherical"
    PLANAR = "planar"


class GridAnchor(Enum):
    """
    Placement of the sampled grid in world space.

    CENTERED (default): grid spans world_center +/- world_size / 2.
    CORNER: grid starts at world zero, world_center is measured from there.
    """
    CENTERED = "centered"
    CORNER = "corner"


class TriangulationMode(Enum):
    """
    Per-cube triangulation policy.

    FAN: centroid fan over the edge crossings (default)
    QUAD: 4-crossing cubes emit a plain quad, others the fan
    BOTH: fan plus quad for 4-crossing cubes (overlapping geometry)
    CANONICAL: lookup-table marching cubes over the whole grid
    """
    FAN = "fan"
    QUAD = "quad"
    BOTH = "both"
    CANONICAL = "canonical"


class OrientationMode(Enum):
    """
    Reference point used to decide which side of a triangle faces out.

    PLANET_CENTER: normals face away from the planet center (default)
    CUBE_CENTER: normals face away from the center of their own cube
    """
    PLANET_CENTER = "planet_center"
    CUBE_CENTER = "cube_center"


def _as_vec3(value: Any, name: str) -> Tuple[float, float, float]:
    components = tuple(float(c) for c in value)
    if len(components) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise ValueError(f"{name} must be finite, got {components}")
    return components


@dataclass(frozen=True)
class PlanetDescriptor:
    """
    Author-time description of a planet. Constant for a run.

    The grid has resolution^3 samples spaced voxel_size apart, where
    voxel_size = world_size / resolution.
    """

    # Planet shape
    radius: float = 200.0
    resolution: int = 48

    # Surface noise
    noise_scale: float = 0.15
    noise_octaves: int = 3
    terrain_height_scale: float = 15.0
    noise_seed: int = 0
    noise_persistence: float = 0.5
    noise_lacunarity: float = 2.0
    noise_mapping: NoiseMapping = NoiseMapping.SPHERICAL

    # World placement
    world_center: Tuple[float, float, float] = (500.0, 500.0, 500.0)
    world_size: float = 1000.0
    grid_anchor: GridAnchor = GridAnchor.CENTERED

    # Spawn clearance above the highest possible terrain
    spawn_margin: float = 5.0

    def __post_init__(self):
        object.__setattr__(self, "world_center", _as_vec3(self.world_center, "world_center"))
        object.__setattr__(self, "noise_mapping", NoiseMapping(self.noise_mapping))
        object.__setattr__(self, "grid_anchor", GridAnchor(self.grid_anchor))

        if int(self.resolution) != self.resolution or self.resolution < 2:
            raise ValueError(f"resolution must be an integer >= 2, got {self.resolution}")
        if not self.world_size > 0:
            raise ValueError(f"world_size must be positive, got {self.world_size}")
        if self.radius < 0:
            raise ValueError(f"radius must be non-negative, got {self.radius}")
        if int(self.noise_octaves) != self.noise_octaves or self.noise_octaves < 0:
            raise ValueError(f"noise_octaves must be a non-negative integer, got {self.noise_octaves}")
        if self.noise_scale < 0:
            raise ValueError(f"noise_scale must be non-negative, got {self.noise_scale}")

    @property
    def voxel_size(self) -> float:
        return self.world_size / self.resolution

    @property
    def grid_origin(self) -> np.ndarray:
        """World-space position of grid index (0, 0, 0)."""
        if self.grid_anchor is GridAnchor.CORNER:
            return np.zeros(3)
        return np.asarray(self.world_center) - self.world_size * 0.5

    @property
    def local_center(self) -> np.ndarray:
        """Planet center expressed in the grid-local frame."""
        return np.asarray(self.world_center) - self.grid_origin

    @property
    def spawn_position(self) -> np.ndarray:
        height = self.radius + self.terrain_height_scale + self.spawn_margin
        return np.asarray(self.world_center) + np.asarray(WORLD_UP) * height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius": self.radius,
            "resolution": self.resolution,
            "noise_scale": self.noise_scale,
            "noise_octaves": self.noise_octaves,
            "terrain_height_scale": self.terrain_height_scale,
            "noise_seed": self.noise_seed,
            "noise_persistence": self.noise_persistence,
            "noise_lacunarity": self.noise_lacunarity,
            "noise_mapping": self.noise_mapping.value,
            "world_center": list(self.world_center),
            "world_size": self.world_size,
            "grid_anchor": self.grid_anchor.value,
            "spawn_margin": self.spawn_margin,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanetDescriptor":
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown planet settings: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "PlanetDescriptor":
        """Load descriptor from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Save descriptor to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


@dataclass
class MesherOptions:
    """Options for turning a density grid into a mesh."""
    triangulation: TriangulationMode = TriangulationMode.FAN
    orientation: OrientationMode = OrientationMode.PLANET_CENTER

    # Consecutive crossings closer than this do not form a fan triangle
    min_edge_length: float = 0.01

    # Thread pool size for sampling and meshing (1 = run inline)
    workers: int = 1

    def __post_init__(self):
        self.triangulation = TriangulationMode(self.triangulation)
        self.orientation = OrientationMode(self.orientation)
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.min_edge_length < 0:
            raise ValueError(f"min_edge_length must be non-negative, got {self.min_edge_length}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "triangulation": self.triangulation.value,
            "orientation": self.orientation.value,
            "min_edge_length": self.min_edge_length,
            "workers": self.workers,
        }


@dataclass(frozen=True)
class PlanetInfo:
    """
    Read-only planet summary handed to spawn and locomotion code.

    Locomotion treats local_up(point) as the inverse gravity direction
    and altitude(point) as height above the undisplaced sphere.
    """
    center: np.ndarray
    radius: float
    world_size: float
    spawn_position: np.ndarray
    voxel_size: float
    grid_origin: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @classmethod
    def from_descriptor(cls, descriptor: PlanetDescriptor) -> "PlanetInfo":
        return cls(
            center=np.asarray(descriptor.world_center, dtype=float),
            radius=descriptor.radius,
            world_size=descriptor.world_size,
            spawn_position=descriptor.spawn_position,
            voxel_size=descriptor.voxel_size,
            grid_origin=descriptor.grid_origin,
        )

    def local_up(self, point) -> np.ndarray:
        """Unit vector from the planet center towards point (zero at the center)."""
        offset = np.asarray(point, dtype=float) - self.center
        length = np.linalg.norm(offset)
        if length == 0.0:
            return np.zeros(3)
        return offset / length

    def altitude(self, point) -> float:
        return float(np.linalg.norm(np.asarray(point, dtype=float) - self.center) - self.radius)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center": self.center.tolist(),
            "radius": self.radius,
            "world_size": self.world_size,
            "spawn_position": self.spawn_position.tolist(),
            "voxel_size": self.voxel_size,
            "grid_origin": self.grid_origin.tolist(),
        }


# Global default descriptor
DEFAULT_DESCRIPTOR = PlanetDescriptor()
