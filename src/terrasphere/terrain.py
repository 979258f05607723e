"""Terrain mesh — the displaced, shaded icosphere behind the 3-D globe.

:func:`build_terrain_mesh` samples the terrain signal at every vertex of
an icosphere, turns each sample into a percentile, maps it to feet and
pushes the vertex out radially.  Ocean vertices are drawn at sea level
(flat water) while their true elevation is kept in
:attr:`TerrainMesh.elevation_feet`.

Usage
-----
>>> from terrasphere import build_raw_distribution, build_terrain_mesh
>>> dist = build_raw_distribution(1234)
>>> mesh = build_terrain_mesh(1234, 0.71, 6, distribution=dist)
>>> mesh.stats.ocean_fraction_actual
0.71...
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from .config import DEFAULT_TERRAIN_CONFIG, TerrainConfig
from .distribution import (
    RawDistribution,
    percentiles_to_elevation_feet,
    rank_percentiles,
    raw_to_percentiles,
    sea_level_feet,
)
from .icosphere import IcoSphere, create_icosphere
from .noise import raw_noise_on_sphere
from .normals import compute_vertex_normals
from .projection import direction_to_lon_lat
from .seeds import check_seed
from .simplex import SimplexNoise3D

logger = logging.getLogger(__name__)


@dataclass
class TerrainStats:
    """Summary statistics of one terrain mesh (all elevations in feet)."""

    total_vertices: int
    count_negative: int
    count_non_negative: int
    count_clamped_low: int
    count_clamped_high: int
    min_elevation_feet: float
    max_elevation_feet: float
    ocean_fraction_actual: float
    mean_ocean_depth_feet: float
    mean_land_height_feet: float
    sea_level_feet: float
    count_abs_z_ge_1: int
    count_abs_z_ge_2: int
    count_abs_z_ge_3: int
    count_abs_z_ge_4: int
    highest_point_lon_deg: Optional[float] = None
    highest_point_lat_deg: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_terrain_stats(
    elevation_feet: np.ndarray,
    z_std: np.ndarray,
    sea_level: float,
    config: TerrainConfig = DEFAULT_TERRAIN_CONFIG,
    directions: Optional[np.ndarray] = None,
) -> TerrainStats:
    """Counts, extremes and ocean/land means for an elevation array.

    With *directions* (one unit vector per sample) the longitude and
    latitude of the highest sample are filled in as well.
    """
    elev = np.asarray(elevation_feet, dtype=np.float64)
    n = int(elev.shape[0])
    abs_z = np.abs(np.asarray(z_std, dtype=np.float64))

    ocean = elev < sea_level
    ocean_count = int(ocean.sum())
    land_count = n - ocean_count

    peak_lon = peak_lat = None
    if directions is not None and n:
        lon, lat = direction_to_lon_lat(*np.asarray(directions, dtype=np.float64)[int(elev.argmax())])
        peak_lon, peak_lat = math.degrees(lon), math.degrees(lat)

    return TerrainStats(
        total_vertices=n,
        count_negative=int((elev < 0).sum()),
        count_non_negative=int((elev >= 0).sum()),
        count_clamped_low=int((elev <= config.lowest_elevation_limit).sum()),
        count_clamped_high=int((elev >= config.highest_elevation_limit).sum()),
        min_elevation_feet=float(elev.min()) if n else float("inf"),
        max_elevation_feet=float(elev.max()) if n else float("-inf"),
        ocean_fraction_actual=ocean_count / n if n else 0.0,
        mean_ocean_depth_feet=float((sea_level - elev[ocean]).mean()) if ocean_count else 0.0,
        mean_land_height_feet=float((elev[~ocean] - sea_level).mean()) if land_count else 0.0,
        sea_level_feet=float(sea_level),
        count_abs_z_ge_1=int((abs_z >= 1).sum()),
        count_abs_z_ge_2=int((abs_z >= 2).sum()),
        count_abs_z_ge_3=int((abs_z >= 3).sum()),
        count_abs_z_ge_4=int((abs_z >= 4).sum()),
        highest_point_lon_deg=peak_lon,
        highest_point_lat_deg=peak_lat,
    )


def displace_vertices(
    unit_vertices: np.ndarray,
    elevation_feet: np.ndarray,
    sea_level: float,
    config: TerrainConfig = DEFAULT_TERRAIN_CONFIG,
) -> np.ndarray:
    """Push unit directions out to ``(base + max(elev, sea)·relief)·scale``."""
    visual = np.maximum(elevation_feet, sea_level)
    radius = (config.base_abyssal_radius + visual * config.relief_exaggeration) * config.visualization_scale
    return unit_vertices * radius[:, None]


@dataclass
class TerrainMesh:
    """A displaced terrain icosphere with per-vertex elevation and normals.

    Attributes
    ----------
    seed : int
    sphere : IcoSphere
        The unit topology the mesh was built on.
    positions : ndarray, shape (N, 3)
        Displaced, render-scaled positions.
    elevation_feet, z_std : ndarray, shape (N,)
    normals : ndarray, shape (N, 3)
    sea_level_feet : float
    ocean_fraction : float
        The requested ocean fraction.
    stats : TerrainStats
    distribution : RawDistribution
        The population the percentiles were ranked against.
    config : TerrainConfig
    """

    seed: int
    sphere: IcoSphere
    positions: np.ndarray
    elevation_feet: np.ndarray
    z_std: np.ndarray
    normals: np.ndarray
    sea_level_feet: float
    ocean_fraction: float
    stats: TerrainStats
    distribution: RawDistribution
    config: TerrainConfig = DEFAULT_TERRAIN_CONFIG

    @property
    def indices(self) -> np.ndarray:
        return self.sphere.indices

    @property
    def vertices(self) -> np.ndarray:
        """Packed ``(N, 4)`` layout: ``x, y, z, elevation_feet``."""
        return np.column_stack([self.positions, self.elevation_feet])

    @property
    def subdivisions(self) -> int:
        return self.sphere.subdivisions

    def apply_ocean_fraction(self, ocean_fraction: float) -> None:
        """Re-flood the mesh in place for a new ocean fraction.

        Elevations and topology are unchanged; sea level, displaced
        positions, normals and stats are recomputed into the existing
        buffers.
        """
        sea = sea_level_feet(ocean_fraction, self.config.std_devs, config=self.config)
        self.positions[...] = displace_vertices(self.sphere.vertices, self.elevation_feet, sea, self.config)
        self.normals[...] = compute_vertex_normals(self.positions, self.sphere.indices)
        self.sea_level_feet = sea
        self.ocean_fraction = ocean_fraction
        self.stats = compute_terrain_stats(
            self.elevation_feet, self.z_std, sea, self.config, directions=self.sphere.vertices,
        )


def build_terrain_mesh(
    seed: int,
    ocean_fraction: float,
    subdivisions: int = 8,
    *,
    distribution: Optional[RawDistribution] = None,
    noise: Optional[SimplexNoise3D] = None,
    sphere: Optional[IcoSphere] = None,
    config: Optional[TerrainConfig] = None,
) -> TerrainMesh:
    """Build a terrain mesh for *seed* with the requested ocean coverage.

    Parameters
    ----------
    seed : int
        Canonical seed (``0 … 2³¹−1``).
    ocean_fraction : float
        Fraction of the surface below sea level, in ``[0, 1]``.
    subdivisions : int
        Icosphere level; a quality knob (≈4× triangles per level).
    distribution : RawDistribution, optional
        Shared reference population.  When given, vertex percentiles are
        looked up against it so this mesh agrees with every other view
        of the seed.  When omitted the mesh ranks its own samples.
    noise : SimplexNoise3D, optional
        Reuse an existing noise field for *seed*.
    sphere : IcoSphere, optional
        Reuse existing topology (must match *subdivisions*).
    config : TerrainConfig, optional

    Returns
    -------
    TerrainMesh
    """
    seed = check_seed(seed)
    cfg = config or DEFAULT_TERRAIN_CONFIG
    noise = noise or SimplexNoise3D(seed)
    if sphere is None or sphere.subdivisions != subdivisions:
        sphere = create_icosphere(subdivisions)

    sea = sea_level_feet(ocean_fraction, cfg.std_devs, config=cfg)

    v = sphere.vertices
    raw = raw_noise_on_sphere(v[:, 0], v[:, 1], v[:, 2], noise)
    if distribution is None:
        percentiles = rank_percentiles(raw)
        distribution = RawDistribution.from_samples(raw, seed=seed, subdivisions=subdivisions)
    else:
        percentiles = raw_to_percentiles(distribution, raw)

    elevation, z_std = percentiles_to_elevation_feet(percentiles, cfg.std_devs, config=cfg)
    positions = displace_vertices(v, elevation, sea, cfg)
    normals = compute_vertex_normals(positions, sphere.indices)
    stats = compute_terrain_stats(elevation, z_std, sea, cfg, directions=v)

    logger.info(
        "terrain mesh seed=%d subdivisions=%d vertices=%d sea_level=%.0fft ocean=%.4f",
        seed, subdivisions, stats.total_vertices, sea, stats.ocean_fraction_actual,
    )
    return TerrainMesh(
        seed=seed,
        sphere=sphere,
        positions=positions,
        elevation_feet=elevation,
        z_std=z_std,
        normals=normals,
        sea_level_feet=sea,
        ocean_fraction=ocean_fraction,
        stats=stats,
        distribution=distribution,
        config=cfg,
    )
