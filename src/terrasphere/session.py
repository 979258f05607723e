"""Per-seed terrain session — shared noise, distribution and view caches.

A :class:`TerrainSession` owns everything derived from one seed that is
expensive to rebuild and safe to share: the noise field, the reference
:class:`~distribution.RawDistribution`, the globe mesh and one
projection grid per map type.  Every view it produces ranks against the
same distribution, so sea level and ocean coverage agree between the
globe and the maps.

Map renders and their projection grids take a token
from the session's :class:`~scheduling.BuildTracker`.  When a newer
request starts before an older one finishes, the older build stops at
its next slice and the session returns ``None`` for it.

Usage
-----
>>> session = TerrainSession(1234, reference_subdivisions=6)
>>> mesh = session.build_globe(0.71, subdivisions=5)
>>> image = session.render_winkel(0.71, height=200, lambda0=0.5)
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from .config import DEFAULT_LIGHT_DIR, DEFAULT_TERRAIN_CONFIG, TerrainConfig
from .distribution import RawDistribution, build_raw_distribution, sea_level_feet
from .map_render import render_projection
from .projection import ProjectionGridCache, flat_map_size, pan_delta_lambda, winkel_size, wrap_two_pi
from .scheduling import BuildSuperseded, BuildTracker, ProgressHook
from .seeds import check_seed
from .simplex import SimplexNoise3D
from .terrain import TerrainMesh, build_terrain_mesh

logger = logging.getLogger(__name__)


class TerrainSession:
    """Caches for one seed.

    Parameters
    ----------
    seed : int
    reference_subdivisions : int, optional
        Icosphere level of the shared reference population.  Defaults to
        ``config.reference_subdivisions``.
    config : TerrainConfig, optional
    """

    def __init__(
        self,
        seed: int,
        *,
        reference_subdivisions: Optional[int] = None,
        config: Optional[TerrainConfig] = None,
    ) -> None:
        self.seed = check_seed(seed)
        self.config = config or DEFAULT_TERRAIN_CONFIG
        if reference_subdivisions is None:
            reference_subdivisions = self.config.reference_subdivisions
        self.reference_subdivisions = reference_subdivisions
        self.noise = SimplexNoise3D(self.seed)
        self.tracker = BuildTracker()
        self.grids = ProjectionGridCache()
        self._distribution: Optional[RawDistribution] = None
        self._globe: Optional[TerrainMesh] = None
        self.lambda0 = 0.0

    def __repr__(self) -> str:
        return f"TerrainSession(seed={self.seed}, reference_subdivisions={self.reference_subdivisions})"

    @property
    def distribution(self) -> RawDistribution:
        """The reference population, built on first use."""
        if self._distribution is None:
            self._distribution = build_raw_distribution(
                self.seed, self.reference_subdivisions, noise=self.noise,
            )
        return self._distribution

    @property
    def globe(self) -> Optional[TerrainMesh]:
        return self._globe

    def sea_level_feet(self, ocean_fraction: float) -> float:
        return sea_level_feet(ocean_fraction, self.config.std_devs, config=self.config)

    # ── globe ───────────────────────────────────────────────────────

    def build_globe(self, ocean_fraction: float, subdivisions: int = 8) -> TerrainMesh:
        """Return the globe mesh for *ocean_fraction*.

        If the cached mesh has the same subdivision level only the sea
        level changes, so it is re-flooded in place instead of rebuilt.
        """
        mesh = self._globe
        if mesh is not None and mesh.subdivisions == subdivisions:
            if mesh.ocean_fraction != ocean_fraction:
                mesh.apply_ocean_fraction(ocean_fraction)
                logger.debug("re-flooded globe to ocean=%.4f", ocean_fraction)
            return mesh

        self._globe = build_terrain_mesh(
            self.seed,
            ocean_fraction,
            subdivisions,
            distribution=self.distribution,
            noise=self.noise,
            config=self.config,
        )
        return self._globe

    # ── maps ────────────────────────────────────────────────────────

    def _render_map(
        self,
        projection: str,
        width: int,
        height: int,
        ocean_fraction: float,
        lambda0: Optional[float],
        progress: Optional[ProgressHook],
        light_dir: Sequence[float],
    ) -> Optional[np.ndarray]:
        if lambda0 is None:
            lambda0 = self.lambda0
        sea = self.sea_level_feet(ocean_fraction)
        token = self.tracker.start(projection)
        try:
            grid = self.grids.get(projection, width, height, progress=progress, token=token)
            return render_projection(
                grid,
                self.noise,
                self.distribution,
                sea,
                lambda0=lambda0,
                std_devs=self.config.std_devs,
                config=self.config,
                light_dir=light_dir,
                progress=progress,
                token=token,
            )
        except BuildSuperseded as exc:
            logger.debug("discarded %s render: %s", projection, exc)
            return None

    def render_flat_map(
        self,
        ocean_fraction: float,
        height: int = 600,
        *,
        lambda0: Optional[float] = None,
        progress: Optional[ProgressHook] = None,
        light_dir: Sequence[float] = DEFAULT_LIGHT_DIR,
    ) -> Optional[np.ndarray]:
        """Equirectangular RGBA map, or ``None`` if superseded.

        *lambda0* defaults to the session's current view centre.
        """
        width, height = flat_map_size(height)
        return self._render_map("equirectangular", width, height, ocean_fraction, lambda0, progress, light_dir)

    def render_winkel(
        self,
        ocean_fraction: float,
        height: int = 600,
        lambda0: Optional[float] = None,
        *,
        progress: Optional[ProgressHook] = None,
        light_dir: Sequence[float] = DEFAULT_LIGHT_DIR,
    ) -> Optional[np.ndarray]:
        """Winkel Tripel RGBA map centred on *lambda0*, or ``None`` if superseded."""
        width, height = winkel_size(height)
        return self._render_map("winkel", width, height, ocean_fraction, lambda0, progress, light_dir)

    def pan(self, dx_px: float, view_width: float) -> float:
        """Move the view centre for a horizontal drag of *dx_px* pixels.

        Returns the new :attr:`lambda0`, wrapped into ``[0, 2π)``.
        """
        self.lambda0 = wrap_two_pi(self.lambda0 + pan_delta_lambda(dx_px, view_width))
        return self.lambda0

    def cancel(self, projection: str) -> None:
        """Supersede any in-flight render of *projection*."""
        self.tracker.cancel(projection)
