"""Globe rendering — perspective 3-D view of a :class:`~terrain.TerrainMesh`.

Functions
---------
- :func:`face_normals` — outward unit normal of every displaced triangle
- :func:`face_colours` — per-triangle shaded RGB from mean elevation
- :func:`render_globe_3d` — matplotlib Poly3DCollection view (PNG)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .colours import TerrainColourConfig, colours_from_elevation_feet
from .config import DEFAULT_LIGHT_DIR, GLOBE_AMBIENT
from .normals import shade_from_normal
from .terrain import TerrainMesh

# Mesh axes are (east, north, front); matplotlib's z is up.  A cyclic
# permutation keeps the handedness.
_MPL_AXES = [2, 0, 1]


def face_normals(mesh: TerrainMesh) -> np.ndarray:
    """Unit ``(F, 3)`` normals of the displaced triangles (outward winding)."""
    p = mesh.positions[mesh.indices]
    n = np.cross(p[:, 1] - p[:, 0], p[:, 2] - p[:, 0])
    length = np.linalg.norm(n, axis=1, keepdims=True)
    return n / np.where(length > 0.0, length, 1.0)


def face_colours(
    mesh: TerrainMesh,
    *,
    light_dir: Sequence[float] = DEFAULT_LIGHT_DIR,
    ambient: float = GLOBE_AMBIENT,
    colour_config: Optional[TerrainColourConfig] = None,
) -> np.ndarray:
    """Shaded ``(F, 3)`` colours in ``[0, 1]``, one per triangle.

    A triangle is coloured by the mean true elevation of its corners and
    shaded by the triangle's own face normal.
    """
    tris = mesh.indices
    mean_elev = mesh.elevation_feet[tris].mean(axis=1)
    base = colours_from_elevation_feet(mean_elev, mesh.sea_level_feet, colour_config)
    shade = shade_from_normal(face_normals(mesh), light_dir, ambient)
    return np.clip(base * np.asarray(shade)[:, None], 0.0, 1.0)


def render_globe_3d(
    mesh: TerrainMesh,
    out_path: Union[str, Path],
    *,
    figsize: Tuple[float, float] = (10, 10),
    dpi: int = 150,
    elev: float = 20.0,
    azim: float = -60.0,
    light_dir: Sequence[float] = DEFAULT_LIGHT_DIR,
    ambient: float = GLOBE_AMBIENT,
    colour_config: Optional[TerrainColourConfig] = None,
) -> Path:
    """Render the displaced terrain mesh with a perspective camera.

    Uses matplotlib's ``Poly3DCollection`` — no OpenGL required.  Keep
    the mesh to five or six subdivisions; every triangle becomes a
    matplotlib polygon.  Returns the output file path.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from mpl_toolkits.mplot3d.art3d import Poly3DCollection

    positions = mesh.positions[:, _MPL_AXES]
    polygons = positions[mesh.indices]
    colours = face_colours(mesh, light_dir=light_dir, ambient=ambient, colour_config=colour_config)

    fig = plt.figure(figsize=figsize, dpi=dpi)
    fig.patch.set_facecolor((0.02, 0.02, 0.06))
    ax = fig.add_subplot(111, projection="3d")
    ax.set_facecolor((0.02, 0.02, 0.06))

    collection = Poly3DCollection(polygons, facecolors=colours, edgecolors="none", linewidths=0.0)
    ax.add_collection3d(collection)

    r = float(np.linalg.norm(mesh.positions, axis=1).max()) * 1.05
    ax.set_xlim(-r, r)
    ax.set_ylim(-r, r)
    ax.set_zlim(-r, r)
    ax.set_box_aspect([1, 1, 1])
    ax.set_proj_type("persp")
    ax.view_init(elev=elev, azim=azim)
    ax.set_axis_off()
    ax.set_title(
        f"Seed {mesh.seed} — {mesh.subdivisions} subdivisions, "
        f"{100.0 * mesh.ocean_fraction:.0f}% ocean",
        color="white",
        fontsize=12,
    )

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return out
