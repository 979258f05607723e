"""Elevation colouring relative to sea level.

Colours are banded by offset from sea level — deep ocean, mid ocean,
shallow ocean, a flat shallow band just below the coast, low land, high
land, rock and snow.  Each transition is a smoothstep between two named
colours over a window whose start/end offsets live in
:class:`TerrainColourConfig`, so the bands can be retuned without
touching the evaluation order.

Functions
---------
- :func:`colour_from_elevation_feet` — single elevation → ``(r, g, b)``
- :func:`colours_from_elevation_feet` — vectorised, ``(N,)`` → ``(N, 3)``
- :func:`to_rgb8` — shaded float colour → ``uint8``
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .noise import smoothstep

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class TerrainColourConfig:
    """Named colours and the feet offsets (relative to sea level) between them."""

    deep_ocean: RGB = (0.05, 0.15, 0.4)
    mid_ocean: RGB = (0.1, 0.3, 0.7)
    shallow_ocean: RGB = (0.2, 0.5, 1.0)
    low_land: RGB = (0.2, 0.36, 0.2)
    high_land: RGB = (0.3, 0.2, 0.1)
    rocky: RGB = (0.4, 0.4, 0.4)
    snow: RGB = (1.0, 1.0, 1.0)

    deep_to_mid_start_offset_feet: float = -25_000
    deep_to_mid_end_offset_feet: float = -15_000
    mid_to_shallow_start_offset_feet: float = -15_000
    mid_to_shallow_end_offset_feet: float = -6_000
    low_to_high_end_offset_feet: float = 12_000
    high_to_rocky_end_offset_feet: float = 17_000
    rocky_to_snow_start_offset_feet: float = 18_000
    rocky_to_snow_end_offset_feet: float = 25_000


TERRAIN_COLOUR_CONFIG = TerrainColourConfig()


def _mix(a: RGB, b: RGB, t: float) -> RGB:
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def colour_from_elevation_feet(
    elevation_feet: float,
    sea_level_feet: float,
    config: Optional[TerrainColourConfig] = None,
) -> RGB:
    """Colour for one elevation.  Bands are tested lowest first.

    Just below sea level (inside the flat shallow band) the result is
    exactly ``shallow_ocean``; at sea level it is exactly ``low_land``,
    the start of the land gradient.
    """
    cfg = config or TERRAIN_COLOUR_CONFIG
    sea = sea_level_feet
    e = elevation_feet

    if e < sea + cfg.deep_to_mid_end_offset_feet:
        t = smoothstep(sea + cfg.deep_to_mid_start_offset_feet, sea + cfg.deep_to_mid_end_offset_feet, e)
        return _mix(cfg.deep_ocean, cfg.mid_ocean, t)

    if e < sea + cfg.mid_to_shallow_end_offset_feet:
        t = smoothstep(sea + cfg.mid_to_shallow_start_offset_feet, sea + cfg.mid_to_shallow_end_offset_feet, e)
        return _mix(cfg.mid_ocean, cfg.shallow_ocean, t)

    if e < sea:
        return cfg.shallow_ocean

    if e < sea + cfg.low_to_high_end_offset_feet:
        t = smoothstep(sea, sea + cfg.low_to_high_end_offset_feet, e)
        return _mix(cfg.low_land, cfg.high_land, t)

    if e < sea + cfg.high_to_rocky_end_offset_feet:
        t = smoothstep(sea + cfg.low_to_high_end_offset_feet, sea + cfg.high_to_rocky_end_offset_feet, e)
        return _mix(cfg.high_land, cfg.rocky, t)

    t = smoothstep(sea + cfg.rocky_to_snow_start_offset_feet, sea + cfg.rocky_to_snow_end_offset_feet, e)
    return _mix(cfg.rocky, cfg.snow, t)


def colours_from_elevation_feet(
    elevation_feet,
    sea_level_feet: float,
    config: Optional[TerrainColourConfig] = None,
) -> np.ndarray:
    """Vectorised :func:`colour_from_elevation_feet`; returns ``(..., 3)``."""
    cfg = config or TERRAIN_COLOUR_CONFIG
    sea = sea_level_feet
    e = np.asarray(elevation_feet, dtype=np.float64)
    out = np.empty(e.shape + (3,), dtype=np.float64)

    def band(a: RGB, b: RGB, lo: float, hi: float) -> np.ndarray:
        t = smoothstep(lo, hi, e)[..., None]
        a_arr = np.asarray(a)
        return a_arr + (np.asarray(b) - a_arr) * t

    # Evaluate from the top down so lower bands overwrite higher ones,
    # matching the scalar early-return order.
    out[...] = band(cfg.rocky, cfg.snow, sea + cfg.rocky_to_snow_start_offset_feet, sea + cfg.rocky_to_snow_end_offset_feet)
    m = e < sea + cfg.high_to_rocky_end_offset_feet
    out[m] = band(cfg.high_land, cfg.rocky, sea + cfg.low_to_high_end_offset_feet, sea + cfg.high_to_rocky_end_offset_feet)[m]
    m = e < sea + cfg.low_to_high_end_offset_feet
    out[m] = band(cfg.low_land, cfg.high_land, sea, sea + cfg.low_to_high_end_offset_feet)[m]
    m = e < sea
    out[m] = np.asarray(cfg.shallow_ocean)
    m = e < sea + cfg.mid_to_shallow_end_offset_feet
    out[m] = band(cfg.mid_ocean, cfg.shallow_ocean, sea + cfg.mid_to_shallow_start_offset_feet, sea + cfg.mid_to_shallow_end_offset_feet)[m]
    m = e < sea + cfg.deep_to_mid_end_offset_feet
    out[m] = band(cfg.deep_ocean, cfg.mid_ocean, sea + cfg.deep_to_mid_start_offset_feet, sea + cfg.deep_to_mid_end_offset_feet)[m]
    return out


def to_rgb8(colours, shade=1.0) -> np.ndarray:
    """Scale float colours by *shade* and round (halves up) to clamped ``uint8``."""
    c = np.asarray(colours, dtype=np.float64)
    s = np.asarray(shade, dtype=np.float64)
    if s.ndim:
        s = s[..., None]
    return np.clip(np.floor(c * s * 255.0 + 0.5), 0, 255).astype(np.uint8)
