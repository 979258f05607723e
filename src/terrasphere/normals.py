"""Per-vertex normals and Lambert shading.

Functions
---------
- :func:`compute_vertex_normals` — area-weighted normals from triangles
- :func:`shade_from_normal` — ``ambient + (1 − ambient)·max(n·l, 0)``
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .config import DEFAULT_LIGHT_DIR, GLOBE_AMBIENT

_MIN_LENGTH = 1e-12


def compute_vertex_normals(vertices, indices) -> np.ndarray:
    """Accumulate face normals into vertices and normalise.

    Each triangle adds its un-normalised ``(b − a) × (c − a)`` to all
    three of its corners, so larger faces weigh more.  A vertex whose
    sum is zero-length or non-finite (unreferenced, or only touching
    degenerate faces) falls back to its radial direction.

    Parameters
    ----------
    vertices : array_like, shape (N, 3) or (N, 4)
        Positions; a fourth column (elevation) is ignored.
    indices : array_like, shape (M, 3) or (3M,)
        Triangle vertex indices.

    Returns
    -------
    ndarray, shape (N, 3)
    """
    positions = np.asarray(vertices, dtype=np.float64)[:, :3]
    tris = np.asarray(indices, dtype=np.int64).reshape(-1, 3)

    a = positions[tris[:, 0]]
    b = positions[tris[:, 1]]
    c = positions[tris[:, 2]]
    face_normals = np.cross(b - a, c - a)

    normals = np.zeros_like(positions)
    for corner in range(3):
        np.add.at(normals, tris[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1)
    bad = ~np.isfinite(lengths) | (lengths < _MIN_LENGTH)

    radial_len = np.linalg.norm(positions, axis=1)
    radial_len = np.where(radial_len > 0.0, radial_len, 1.0)
    radial = positions / radial_len[:, None]

    safe = np.where(bad, 1.0, lengths)
    return np.where(bad[:, None], radial, normals / safe[:, None])


def shade_from_normal(
    normal,
    light_dir: Sequence[float] = DEFAULT_LIGHT_DIR,
    ambient: float = GLOBE_AMBIENT,
):
    """Lambert brightness with an ambient floor.

    *normal* may be a single ``(x, y, z)`` or an ``(..., 3)`` array;
    neither it nor *light_dir* needs to be unit length.  Returns a float
    or an array of shape ``(...)`` in ``[ambient, 1]``.
    """
    light = np.asarray(light_dir, dtype=np.float64)
    light_len = float(np.linalg.norm(light)) or 1.0
    light = light / light_len

    n = np.asarray(normal, dtype=np.float64)
    length = np.linalg.norm(n, axis=-1)
    length = np.where(length > 0.0, length, 1.0)
    ndotl = np.maximum((n @ light) / length, 0.0)
    shade = ambient + (1.0 - ambient) * ndotl
    return float(shade) if np.ndim(shade) == 0 else shade


def light_from_angles(azimuth: float, altitude: float) -> Tuple[float, float, float]:
    """Light direction from azimuth/altitude in degrees (y is up, z faces the viewer)."""
    az = np.radians(azimuth)
    alt = np.radians(altitude)
    return (
        float(np.cos(alt) * np.sin(az)),
        float(np.sin(alt)),
        float(np.cos(alt) * np.cos(az)),
    )
