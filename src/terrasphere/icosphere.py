"""Icosphere builder — recursive subdivision of a regular icosahedron.

Each pass splits every triangle into four through normalised edge
midpoints.  Midpoints are cached under a symmetric edge key, so the two
triangles sharing an edge reuse one vertex and the mesh never carries
duplicates.  Earlier vertices keep their indices across passes, which
makes a level-*s* sphere's vertex set a prefix of every finer level.

Counts: ``V = 10·4^s + 2`` vertices, ``F = 20·4^s`` triangles.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

_PHI = (1.0 + math.sqrt(5.0)) / 2.0

_BASE_VERTICES: List[Tuple[float, float, float]] = [
    (-1, _PHI, 0), (1, _PHI, 0), (-1, -_PHI, 0), (1, -_PHI, 0),
    (0, -1, _PHI), (0, 1, _PHI), (0, -1, -_PHI), (0, 1, -_PHI),
    (_PHI, 0, -1), (_PHI, 0, 1), (-_PHI, 0, -1), (-_PHI, 0, 1),
]

_BASE_FACES: List[Tuple[int, int, int]] = [
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
]


@dataclass(frozen=True)
class IcoSphere:
    """Unit-sphere topology.

    Attributes
    ----------
    vertices : ndarray, shape (V, 3)
        Unit-length vertex positions.
    indices : ndarray, shape (F, 3)
        Counter-clockwise (outward-facing) triangle vertex indices.
    subdivisions : int
        Number of subdivision passes applied.
    """

    vertices: np.ndarray
    indices: np.ndarray
    subdivisions: int

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def face_count(self) -> int:
        return int(self.indices.shape[0])


def icosphere_vertex_count(subdivisions: int) -> int:
    return 10 * 4 ** subdivisions + 2


def icosphere_face_count(subdivisions: int) -> int:
    return 20 * 4 ** subdivisions


def _normalise(x: float, y: float, z: float) -> Tuple[float, float, float]:
    length = math.sqrt(x * x + y * y + z * z)
    return (x / length, y / length, z / length)


def create_icosphere(subdivisions: int = 3) -> IcoSphere:
    """Build a unit icosphere with *subdivisions* passes.

    Raises ``ValueError`` for a negative level.
    """
    if subdivisions < 0:
        raise ValueError(f"subdivisions must be >= 0, got {subdivisions}")

    verts: List[Tuple[float, float, float]] = [_normalise(*v) for v in _BASE_VERTICES]
    faces: List[Tuple[int, int, int]] = list(_BASE_FACES)
    midpoints: Dict[Tuple[int, int], int] = {}

    def midpoint(a: int, b: int) -> int:
        key = (a, b) if a < b else (b, a)
        idx = midpoints.get(key)
        if idx is not None:
            return idx
        ax, ay, az = verts[a]
        bx, by, bz = verts[b]
        verts.append(_normalise((ax + bx) / 2.0, (ay + by) / 2.0, (az + bz) / 2.0))
        idx = len(verts) - 1
        midpoints[key] = idx
        return idx

    for _ in range(subdivisions):
        new_faces: List[Tuple[int, int, int]] = []
        for a, b, c in faces:
            ab = midpoint(a, b)
            bc = midpoint(b, c)
            ca = midpoint(c, a)
            new_faces.extend(((a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)))
        faces = new_faces

    return IcoSphere(
        vertices=np.array(verts, dtype=np.float64),
        indices=np.array(faces, dtype=np.int64).reshape(-1, 3),
        subdivisions=subdivisions,
    )
