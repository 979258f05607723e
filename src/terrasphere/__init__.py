"""terrasphere — procedural planet terrain and map projections.

Public API is organised into layers:

- **Noise** — seeded 3-D simplex noise and the continent/detail signal
- **Elevation** — reference distribution, percentiles, split-normal feet
- **Mesh** — icosphere, displaced terrain mesh, normals and shading
- **Projection** — equirectangular and Winkel Tripel sample grids
- **Views** — per-seed session, map and globe rendering (Pillow/matplotlib)
- **Export** — JSON payload of a terrain mesh
"""

# ── Configuration ───────────────────────────────────────────────────
from .config import (
    BASE_ABYSSAL_FLOOR_ELEVATION,
    BASE_ABYSSAL_RADIUS,
    DEFAULT_OCEAN_FRACTION,
    DEFAULT_TERRAIN_CONFIG,
    HIGHEST_ELEVATION_LIMIT,
    LOWEST_ELEVATION_LIMIT,
    REFERENCE_SUBDIVISIONS,
    RELIEF_EXAGGERATION,
    STD_DEVS,
    VISUALIZATION_SCALE,
    TerrainConfig,
    config_from_dict,
    load_config,
)
from .seeds import SEED_MAX, SEED_MIN, check_seed, is_valid_seed, parse_seed, random_seed

# ── Noise ───────────────────────────────────────────────────────────
from .simplex import SimplexNoise3D
from .noise import fbm_3d, raw_noise_on_sphere, smoothstep

# ── Elevation ───────────────────────────────────────────────────────
from .distribution import (
    ElevationSample,
    RawDistribution,
    build_raw_distribution,
    inverse_normal_cdf,
    percentile_to_elevation_feet,
    percentiles_to_elevation_feet,
    rank_percentiles,
    raw_to_percentile,
    raw_to_percentiles,
    sea_level_feet,
)

# ── Mesh ────────────────────────────────────────────────────────────
from .icosphere import IcoSphere, create_icosphere, icosphere_face_count, icosphere_vertex_count
from .normals import compute_vertex_normals, shade_from_normal
from .colours import (
    TERRAIN_COLOUR_CONFIG,
    TerrainColourConfig,
    colour_from_elevation_feet,
    colours_from_elevation_feet,
)
from .terrain import TerrainMesh, TerrainStats, build_terrain_mesh

# ── Projection ──────────────────────────────────────────────────────
from .projection import (
    ProjectionGridCache,
    ProjectionSampleGrid,
    build_projection_grid,
    winkel_forward,
    winkel_inverse,
)
from .scheduling import BuildSuperseded, BuildToken, BuildTracker

# ── Views ───────────────────────────────────────────────────────────
from .map_render import render_projection, sample_elevation, save_png
from .session import TerrainSession

# ── Export ──────────────────────────────────────────────────────────
from .export import export_terrain_json, export_terrain_payload, validate_terrain_payload

__all__ = [
    # Configuration
    "BASE_ABYSSAL_FLOOR_ELEVATION",
    "BASE_ABYSSAL_RADIUS",
    "DEFAULT_OCEAN_FRACTION",
    "DEFAULT_TERRAIN_CONFIG",
    "HIGHEST_ELEVATION_LIMIT",
    "LOWEST_ELEVATION_LIMIT",
    "REFERENCE_SUBDIVISIONS",
    "RELIEF_EXAGGERATION",
    "STD_DEVS",
    "VISUALIZATION_SCALE",
    "TerrainConfig",
    "config_from_dict",
    "load_config",
    "SEED_MAX",
    "SEED_MIN",
    "check_seed",
    "is_valid_seed",
    "parse_seed",
    "random_seed",
    # Noise
    "SimplexNoise3D",
    "fbm_3d",
    "raw_noise_on_sphere",
    "smoothstep",
    # Elevation
    "ElevationSample",
    "RawDistribution",
    "build_raw_distribution",
    "inverse_normal_cdf",
    "percentile_to_elevation_feet",
    "percentiles_to_elevation_feet",
    "rank_percentiles",
    "raw_to_percentile",
    "raw_to_percentiles",
    "sea_level_feet",
    # Mesh
    "IcoSphere",
    "create_icosphere",
    "icosphere_face_count",
    "icosphere_vertex_count",
    "compute_vertex_normals",
    "shade_from_normal",
    "TERRAIN_COLOUR_CONFIG",
    "TerrainColourConfig",
    "colour_from_elevation_feet",
    "colours_from_elevation_feet",
    "TerrainMesh",
    "TerrainStats",
    "build_terrain_mesh",
    # Projection
    "ProjectionGridCache",
    "ProjectionSampleGrid",
    "build_projection_grid",
    "winkel_forward",
    "winkel_inverse",
    "BuildSuperseded",
    "BuildToken",
    "BuildTracker",
    # Views
    "sample_elevation",
    "render_projection",
    "save_png",
    "TerrainSession",
    # Export
    "export_terrain_json",
    "export_terrain_payload",
    "validate_terrain_payload",
]
