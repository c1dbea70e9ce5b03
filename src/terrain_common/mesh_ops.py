"""
Mesh operation utilities.

Mesh container, incremental builder, concatenation, invariant checks
and statistics.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np
import trimesh

logger = logging.getLogger(__name__)

NORMAL_TOLERANCE = 1e-6


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class Mesh:
    """
    Indexed triangle mesh with one normal per vertex.

    triangles is a flat index array; every 3 consecutive entries form
    one triangle.
    """
    vertices: np.ndarray   # (N, 3) float64
    triangles: np.ndarray  # (3M,) int64
    normals: np.ndarray    # (N, 3) float64

    def __post_init__(self):
        vertices = np.array(self.vertices, dtype=np.float64).reshape(-1, 3)
        triangles = np.array(self.triangles, dtype=np.int64).reshape(-1)
        normals = np.array(self.normals, dtype=np.float64).reshape(-1, 3)
        object.__setattr__(self, "vertices", _frozen(vertices))
        object.__setattr__(self, "triangles", _frozen(triangles))
        object.__setattr__(self, "normals", _frozen(normals))

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(vertices=np.empty((0, 3)), triangles=np.empty(0, dtype=np.int64), normals=np.empty((0, 3)))

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_triangles(self) -> int:
        return len(self.triangles) // 3

    @property
    def faces(self) -> np.ndarray:
        """(M, 3) view of the triangle indices."""
        return self.triangles.reshape(-1, 3)

    @property
    def is_empty(self) -> bool:
        return self.n_vertices == 0

    def face_centroids(self) -> np.ndarray:
        return self.vertices[self.faces].mean(axis=1)

    def face_normals(self) -> np.ndarray:
        """Per-triangle normal: normal of the triangle's first vertex."""
        return self.normals[self.faces[:, 0]]

    def translated(self, offset: Sequence[float]) -> "Mesh":
        return Mesh(
            vertices=self.vertices + np.asarray(offset, dtype=np.float64),
            triangles=self.triangles,
            normals=self.normals,
        )

    def to_trimesh(self) -> trimesh.Trimesh:
        """Wrap as a trimesh without merging or reordering anything."""
        return trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.faces,
            vertex_normals=self.normals,
            process=False,
        )


class MeshBuffer:
    """
    Append-only mesh builder.

    Every triangle gets its own three vertices carrying the triangle's
    flat normal, so indices are always contiguous and increasing.
    """

    def __init__(self):
        self._vertices: List[np.ndarray] = []
        self._normals: List[np.ndarray] = []
        self._triangles: List[int] = []

    def __len__(self) -> int:
        return len(self._triangles) // 3

    @property
    def n_vertices(self) -> int:
        return len(self._vertices)

    def add_triangle(
        self,
        a: np.ndarray,
        b: np.ndarray,
        c: np.ndarray,
        normal: np.ndarray,
        flip: bool = False
    ) -> None:
        """
        Append triangle (a, b, c) with a shared flat normal.

        Args:
            a, b, c: Vertex positions
            normal: Unit normal for all three vertices
            flip: Emit indices as (a, c, b) instead of (a, b, c)
        """
        start = len(self._vertices)
        self._vertices.extend((a, b, c))
        self._normals.extend((normal, normal, normal))
        if flip:
            self._triangles.extend((start, start + 2, start + 1))
        else:
            self._triangles.extend((start, start + 1, start + 2))

    def build(self) -> Mesh:
        if not self._vertices:
            return Mesh.empty()
        return Mesh(
            vertices=np.vstack(self._vertices),
            triangles=np.asarray(self._triangles, dtype=np.int64),
            normals=np.vstack(self._normals),
        )


def concatenate_meshes(meshes: Sequence[Mesh]) -> Mesh:
    """
    Concatenate meshes in order, offsetting each one's indices by the
    vertex count of everything before it.
    """
    meshes = [m for m in meshes if not m.is_empty]
    if not meshes:
        return Mesh.empty()
    if len(meshes) == 1:
        return meshes[0]

    offsets = np.cumsum([0] + [m.n_vertices for m in meshes[:-1]])
    return Mesh(
        vertices=np.vstack([m.vertices for m in meshes]),
        triangles=np.concatenate([m.triangles + off for m, off in zip(meshes, offsets)]),
        normals=np.vstack([m.normals for m in meshes]),
    )


def validate_mesh(mesh: Mesh) -> List[str]:
    """
    Check mesh invariants.

    Returns:
        List of human-readable problems (empty if the mesh is well formed)
    """
    problems = []
    if len(mesh.triangles) % 3 != 0:
        problems.append(f"triangle index count {len(mesh.triangles)} is not a multiple of 3")
    if len(mesh.normals) != len(mesh.vertices):
        problems.append(f"{len(mesh.normals)} normals for {len(mesh.vertices)} vertices")
    if len(mesh.triangles):
        if mesh.triangles.min() < 0 or mesh.triangles.max() >= len(mesh.vertices):
            problems.append("triangle index out of range")
    if len(mesh.normals):
        lengths = np.linalg.norm(mesh.normals, axis=1)
        bad = int(np.count_nonzero(np.abs(lengths - 1.0) > NORMAL_TOLERANCE))
        if bad:
            problems.append(f"{bad} normals are not unit length")
    return problems


def radial_stats(mesh: Mesh, center: Sequence[float]) -> Dict[str, float]:
    """Min / max / mean vertex distance from center."""
    if mesh.is_empty:
        return {"min": 0.0, "max": 0.0, "mean": 0.0}
    dist = np.linalg.norm(mesh.vertices - np.asarray(center, dtype=float), axis=1)
    return {"min": float(dist.min()), "max": float(dist.max()), "mean": float(dist.mean())}


def outward_fraction(mesh: Mesh, center: Sequence[float]) -> float:
    """Fraction of triangles whose normal points away from center."""
    if mesh.n_triangles == 0:
        return 1.0
    radial = mesh.face_centroids() - np.asarray(center, dtype=float)
    dots = np.einsum("ij,ij->i", mesh.face_normals(), radial)
    return float(np.count_nonzero(dots >= 0.0)) / mesh.n_triangles


def compute_mesh_stats(mesh: Mesh) -> Dict[str, Any]:
    """
    Compute comprehensive mesh statistics.

    Args:
        mesh: Mesh to analyze

    Returns:
        Dictionary of mesh statistics
    """
    if mesh.n_triangles == 0:
        return {
            "n_vertices": mesh.n_vertices,
            "n_faces": 0,
            "bounds": None,
            "extents": None,
            "surface_area": 0.0,
            "is_watertight": False,
            "is_winding_consistent": False,
        }

    tm = mesh.to_trimesh()
    bounds = tm.bounds
    return {
        "n_vertices": mesh.n_vertices,
        "n_faces": mesh.n_triangles,
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist()
        },
        "extents": tm.extents.tolist(),
        "surface_area": float(tm.area),
        "is_watertight": bool(tm.is_watertight),
        "is_winding_consistent": bool(tm.is_winding_consistent),
    }
