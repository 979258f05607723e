"""Map rendering — per-pixel terrain colour under a map projection.

Every valid pixel of a :class:`~projection.ProjectionSampleGrid` is
turned into a unit direction, run through the same raw signal →
percentile → feet pipeline as the globe (ranked against the shared
reference distribution), coloured relative to sea level and shaded with
the sphere normal under a soft map light.  Output is an ``(H, W, 4)``
``uint8`` RGBA array; pixels outside the projection silhouette are
transparent black.

Functions
---------
- :func:`sample_elevation` — directions → elevation in feet
- :func:`render_projection` — shaded RGBA image for a sample grid
- :func:`save_png` — write an RGBA array with Pillow
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from .colours import TerrainColourConfig, colours_from_elevation_feet, to_rgb8
from .config import DEFAULT_LIGHT_DIR, MAP_AMBIENT, STD_DEVS, TerrainConfig
from .distribution import RawDistribution, percentiles_to_elevation_feet, raw_to_percentiles
from .noise import raw_noise_on_sphere
from .normals import shade_from_normal
from .projection import ProjectionSampleGrid
from .scheduling import BuildToken, ProgressHook
from .simplex import SimplexNoise3D

logger = logging.getLogger(__name__)


def sample_elevation(
    directions: np.ndarray,
    noise: SimplexNoise3D,
    distribution: RawDistribution,
    *,
    std_devs: float = STD_DEVS,
    config: Optional[TerrainConfig] = None,
) -> np.ndarray:
    """Elevation in feet for an ``(..., 3)`` array of unit directions."""
    d = np.asarray(directions, dtype=np.float64)
    raw = raw_noise_on_sphere(d[..., 0], d[..., 1], d[..., 2], noise)
    percentiles = raw_to_percentiles(distribution, raw)
    feet, _ = percentiles_to_elevation_feet(percentiles, std_devs, config=config)
    return feet


def render_projection(
    grid: ProjectionSampleGrid,
    noise: SimplexNoise3D,
    distribution: RawDistribution,
    sea_level_feet: float,
    *,
    lambda0: float = 0.0,
    std_devs: float = STD_DEVS,
    config: Optional[TerrainConfig] = None,
    colour_config: Optional[TerrainColourConfig] = None,
    light_dir: Sequence[float] = DEFAULT_LIGHT_DIR,
    ambient: float = MAP_AMBIENT,
    progress: Optional[ProgressHook] = None,
    token: Optional[BuildToken] = None,
    rows_per_slice: int = 32,
) -> np.ndarray:
    """Render a shaded RGBA image of the terrain through *grid*.

    Parameters
    ----------
    grid : ProjectionSampleGrid
        Precomputed pixel → direction mapping (any projection).
    noise, distribution
        The seed's noise field and shared reference population.
    sea_level_feet : float
    lambda0 : float
        Longitude (radians) at the map centre.
    progress, token
        Called/checked after every slice of *rows_per_slice* rows.

    Returns
    -------
    ndarray of uint8, shape (height, width, 4)
    """
    image = np.zeros((grid.height, grid.width, 4), dtype=np.uint8)
    directions = grid.directions(lambda0)
    label = f"render {grid.projection} {grid.width}x{grid.height}"
    step = max(1, int(rows_per_slice))

    for start in range(0, grid.height, step):
        stop = min(grid.height, start + step)
        mask = grid.valid[start:stop]
        if mask.any():
            dirs = directions[start:stop][mask]
            feet = sample_elevation(dirs, noise, distribution, std_devs=std_devs, config=config)
            colours = colours_from_elevation_feet(feet, sea_level_feet, colour_config)
            shade = shade_from_normal(dirs, light_dir, ambient)
            block = image[start:stop]
            block[mask, :3] = to_rgb8(colours, shade)
            block[mask, 3] = 255
        if token is not None:
            token.check()
        if progress is not None:
            progress(label, stop, grid.height)

    logger.debug("%s lambda0=%.3f done", label, lambda0)
    return image


def save_png(image: np.ndarray, path: Union[str, Path]) -> Path:
    """Write an ``(H, W, 4)`` or ``(H, W, 3)`` uint8 array as a PNG."""
    from PIL import Image

    arr = np.ascontiguousarray(image, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) image, got shape {arr.shape}")
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(arr).save(out)
    return out
