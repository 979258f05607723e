"""Globe constants and the :class:`TerrainConfig` bundle.

All elevations are in **feet**.  The module-level constants are the
defaults; :class:`TerrainConfig` groups them so a caller can retune the
elevation range or the visual exaggeration without touching the maths.

Usage
-----
>>> from terrasphere.config import DEFAULT_TERRAIN_CONFIG, load_config
>>> cfg = load_config("my_planet.json")   # overrides only the given keys
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union

# ═══════════════════════════════════════════════════════════════════
# Globe constants (feet)
# ═══════════════════════════════════════════════════════════════════

# Radius of the lowest abyssal plain (~19,685 ft / 6,000 m below sea level).
BASE_ABYSSAL_RADIUS = 20_889_115
# Offset where the elevation distribution peaks (its mode).
BASE_ABYSSAL_FLOOR_ELEVATION = 0
# Everest (~29k ft) plus ocean depth.
HIGHEST_ELEVATION_LIMIT = 48_685
# Below the abyssal radius; the Mariana Trench is ~36,960 ft below sea level.
LOWEST_ELEVATION_LIMIT = -16_404

# Render-only scaling; stats stay in real units.
VISUALIZATION_SCALE = 0.000001
RELIEF_EXAGGERATION = 10

# Half-width of the split-normal mapping, in standard deviations.
STD_DEVS = 4

# Icosphere level every raw distribution is sampled at.  Views of the
# same seed must share it or their sea levels drift apart.
REFERENCE_SUBDIVISIONS = 8

DEFAULT_OCEAN_FRACTION = 0.71

# Lighting
DEFAULT_LIGHT_DIR: Tuple[float, float, float] = (0.35, 0.85, 0.4)
GLOBE_AMBIENT = 0.4
MAP_AMBIENT = 0.72


@dataclass(frozen=True)
class TerrainConfig:
    """Numeric configuration for elevation mapping and mesh displacement.

    Attributes
    ----------
    base_abyssal_radius : float
        Radius (feet) that zero elevation sits at.
    base_abyssal_floor_elevation : float
        Mode of the split-normal elevation distribution (feet).
    highest_elevation_limit, lowest_elevation_limit : float
        Hard clamp for every elevation (feet).
    visualization_scale : float
        Feet → render units.
    relief_exaggeration : float
        Visual multiplier on relief; never applied to the feet values.
    std_devs : float
        Standard-deviation span of the split-normal mapping.
    reference_subdivisions : int
        Icosphere level for the shared raw distribution.
    """

    base_abyssal_radius: float = BASE_ABYSSAL_RADIUS
    base_abyssal_floor_elevation: float = BASE_ABYSSAL_FLOOR_ELEVATION
    highest_elevation_limit: float = HIGHEST_ELEVATION_LIMIT
    lowest_elevation_limit: float = LOWEST_ELEVATION_LIMIT
    visualization_scale: float = VISUALIZATION_SCALE
    relief_exaggeration: float = RELIEF_EXAGGERATION
    std_devs: float = STD_DEVS
    reference_subdivisions: int = REFERENCE_SUBDIVISIONS

    def __post_init__(self) -> None:
        if self.lowest_elevation_limit >= 0:
            raise ValueError("lowest_elevation_limit must be negative")
        if self.highest_elevation_limit <= 0:
            raise ValueError("highest_elevation_limit must be positive")
        if self.std_devs <= 0:
            raise ValueError("std_devs must be > 0")
        if self.reference_subdivisions < 0:
            raise ValueError("reference_subdivisions must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_TERRAIN_CONFIG = TerrainConfig()


def config_from_dict(data: Dict[str, Any], base: TerrainConfig = DEFAULT_TERRAIN_CONFIG) -> TerrainConfig:
    """Return *base* with the keys of *data* overridden.

    Raises ``ValueError`` for keys that are not :class:`TerrainConfig`
    fields.
    """
    known = {f.name for f in fields(TerrainConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}. Available: {sorted(known)}")
    return replace(base, **data)


def load_config(path: Union[str, Path]) -> TerrainConfig:
    """Load a JSON file of overrides on top of the defaults."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return config_from_dict(data)
