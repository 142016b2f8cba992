"""
Mesh Buffer

vertices  : float32 ndarray (N, 3)
triangles : int32   ndarray (M, 3)   indices into vertices
normals   : float32 ndarray (N, 3)   area-weighted, unit length
bounds    : (min, max) corners of the vertex cloud
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from deserver_client.errors import MeshDataError


@dataclass(slots=True)
class MeshBuffer:
    vertices: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray = field(default_factory=lambda: np.empty((0, 3), dtype=np.float32))
    bounds_min: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))
    bounds_max: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float32))

    @classmethod
    def from_flat(cls, flat_vertices: Sequence[float], indices: Sequence[int]) -> MeshBuffer:
        """Build from a flat xyz list and a flat triangle index list.

        Raises:
            MeshDataError: on a ragged vertex list, a partial triangle or an
                index outside the vertex range.
        """
        if len(flat_vertices) % 3 != 0:
            raise MeshDataError(f"Vertex component count {len(flat_vertices)} not divisible by 3")
        if len(indices) % 3 != 0:
            raise MeshDataError(f"Triangle index count {len(indices)} not divisible by 3")

        try:
            vertices = np.asarray(flat_vertices, dtype=np.float32).reshape(-1, 3)
            # Range-checked wide, narrowed to int32 only once known valid
            wide = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
        except (OverflowError, TypeError, ValueError) as e:
            raise MeshDataError(f"Unreadable mesh arrays: {e}") from e
        if wide.size and (wide.min() < 0 or wide.max() >= len(vertices)):
            raise MeshDataError("Triangle index out of range")

        mesh = cls(vertices, wide.astype(np.int32))
        mesh.recalculate_normals()
        mesh.recalculate_bounds()
        return mesh

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.triangles.shape[0])

    def recalculate_normals(self) -> None:
        normals = np.zeros_like(self.vertices)
        if self.triangle_count:
            a = self.vertices[self.triangles[:, 0]]
            b = self.vertices[self.triangles[:, 1]]
            c = self.vertices[self.triangles[:, 2]]
            # Unnormalized cross product weights each face by its area
            face = np.cross(b - a, c - a)
            for corner in range(3):
                np.add.at(normals, self.triangles[:, corner], face)
        length = np.linalg.norm(normals, axis=1, keepdims=True)
        np.divide(normals, length, out=normals, where=length > 0)
        self.normals = normals.astype(np.float32, copy=False)

    def recalculate_bounds(self) -> None:
        if self.vertex_count == 0:
            self.bounds_min = np.zeros(3, dtype=np.float32)
            self.bounds_max = np.zeros(3, dtype=np.float32)
            return
        self.bounds_min = self.vertices.min(axis=0)
        self.bounds_max = self.vertices.max(axis=0)
