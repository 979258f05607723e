"""Map projections — equirectangular and Winkel Tripel.

The globe is sampled per output pixel: each pixel is mapped back to a
``(longitude, latitude)`` and from there to a unit direction, which the
noise/elevation pipeline consumes.  Equirectangular is a closed form.
Winkel Tripel has no closed-form inverse, so it is inverted with a
damped Newton iteration on a numeric Jacobian; pixels that do not
converge (outside the silhouette, or singular) are marked invalid in the
sample grid rather than raising.

Conventions: longitude 0 faces ``+Z``, east is ``+X``, north is ``+Y``.

Functions
---------
- :func:`equirectangular_lon_lat` — pixel centre → ``(lon, lat)``
- :func:`lon_lat_to_direction` / :func:`direction_to_lon_lat`
- :func:`winkel_forward` / :func:`winkel_inverse`
- :func:`build_projection_grid` — cached per-pixel validity + trig
- :class:`ProjectionGridCache` — reuse grids across pans, rebuild on resize
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .scheduling import BuildToken, ProgressHook

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
HALF_PI = math.pi / 2.0

# Winkel Tripel standard parallel: φ₁ = acos(2/π).
PHI1 = math.acos(2.0 / math.pi)
COS_PHI1 = math.cos(PHI1)

WINKEL_MAX_X = (math.pi + 2.0) / 2.0
WINKEL_MAX_Y = HALF_PI
WINKEL_ASPECT = (math.pi + 2.0) / math.pi

# Newton inversion
NEWTON_ITERATIONS = 7
JACOBIAN_STEP = 1e-6
CONVERGED_TOLERANCE = 5e-9
ACCEPT_TOLERANCE = 2e-6
TRUST_REGION = 0.75
SINGULAR_DET = 1e-12
# Forward-reprojection check when building a grid.
SILHOUETTE_TOLERANCE = 2e-3

PROJECTIONS = ("equirectangular", "winkel")

MIN_MAP_HEIGHT = 600
MIN_PREVIEW_HEIGHT = 100
PREVIEW_FRACTION = 0.35


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def wrap_pi(lam: float) -> float:
    """Wrap an angle into ``[−π, π)``."""
    return ((lam + math.pi) % TWO_PI + TWO_PI) % TWO_PI - math.pi


def wrap_two_pi(lam: float) -> float:
    """Wrap an angle into ``[0, 2π)``."""
    lam = lam % TWO_PI
    return lam + TWO_PI if lam < 0 else lam


# ═══════════════════════════════════════════════════════════════════
# Spherical helpers
# ═══════════════════════════════════════════════════════════════════

def _direction_from_trig(sin_lat, cos_lat, sin_lon, cos_lon) -> np.ndarray:
    return np.stack([cos_lat * sin_lon, sin_lat, cos_lat * cos_lon], axis=-1)


def lon_lat_to_direction(lon, lat):
    """Unit direction for longitude/latitude in radians (scalars or arrays)."""
    out = _direction_from_trig(np.sin(lat), np.cos(lat), np.sin(lon), np.cos(lon))
    if out.ndim == 1:
        return (float(out[0]), float(out[1]), float(out[2]))
    return out


def direction_to_lon_lat(x: float, y: float, z: float) -> Tuple[float, float]:
    length = math.sqrt(x * x + y * y + z * z) or 1.0
    lat = math.asin(_clamp(y / length, -1.0, 1.0))
    lon = math.atan2(x, z)
    return lon, lat


def equirectangular_lon_lat(x, y, width: int, height: int):
    """Longitude/latitude at the centre of pixel ``(x, y)`` of a 2:1 map.

    Row 0 is the north edge; column 0 is longitude −π.
    """
    lon = (np.asarray(x) + 0.5) / width * TWO_PI - math.pi
    lat = HALF_PI - (np.asarray(y) + 0.5) / height * math.pi
    if np.ndim(lon) == 0 and np.ndim(lat) == 0:
        return float(lon), float(lat)
    return lon, lat


# ═══════════════════════════════════════════════════════════════════
# Winkel Tripel
# ═══════════════════════════════════════════════════════════════════

def _sinc(x: float) -> float:
    if abs(x) < 1e-6:
        return 1.0 - x * x / 6.0
    return math.sin(x) / x


def winkel_forward(lam: float, phi: float) -> Tuple[float, float]:
    """Project ``(λ, φ)`` in radians to Winkel Tripel ``(x, y)``.

    The mean of the Aitoff projection and an equirectangular projection
    with standard parallel φ₁.
    """
    half_lam = lam / 2.0
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)

    alpha = math.acos(_clamp(cos_phi * math.cos(half_lam), -1.0, 1.0))
    if abs(alpha) < 1e-12:
        x_aitoff = 2.0 * cos_phi * math.sin(half_lam)
        y_aitoff = sin_phi
    else:
        s = _sinc(alpha)
        x_aitoff = 2.0 * cos_phi * math.sin(half_lam) / s
        y_aitoff = sin_phi / s

    return 0.5 * (x_aitoff + lam * COS_PHI1), 0.5 * (y_aitoff + phi)


def winkel_inverse(x: float, y: float) -> Optional[Tuple[float, float]]:
    """Invert :func:`winkel_forward` by Newton–Raphson.

    Returns ``(λ, φ)`` with λ wrapped to ``[−π, π)`` and φ in
    ``[−π/2, π/2]``, or ``None`` when the iteration hits a singular
    Jacobian or fails to converge — which is what happens for points
    outside the map silhouette.
    """
    phi = _clamp(2.0 * y, -HALF_PI, HALF_PI)
    denom = COS_PHI1 + math.cos(phi)
    lam = 2.0 * x / denom if denom != 0.0 else 0.0
    lam = _clamp(lam, -math.pi, math.pi)

    eps = JACOBIAN_STEP
    for _ in range(NEWTON_ITERATIONS):
        fx, fy = winkel_forward(lam, phi)
        rx = fx - x
        ry = fy - y
        if abs(rx) + abs(ry) < CONVERGED_TOLERANCE:
            return wrap_pi(lam), _clamp(phi, -HALF_PI, HALF_PI)

        lx, ly = winkel_forward(lam + eps, phi)
        px, py = winkel_forward(lam, phi + eps)
        dx_dlam = (lx - fx) / eps
        dy_dlam = (ly - fy) / eps
        dx_dphi = (px - fx) / eps
        dy_dphi = (py - fy) / eps

        det = dx_dlam * dy_dphi - dx_dphi * dy_dlam
        if not math.isfinite(det) or abs(det) < SINGULAR_DET:
            return None

        d_lam = (rx * dy_dphi - ry * dx_dphi) / det
        d_phi = (ry * dx_dlam - rx * dy_dlam) / det

        lam = wrap_pi(lam - _clamp(d_lam, -TRUST_REGION, TRUST_REGION))
        phi = _clamp(phi - _clamp(d_phi, -TRUST_REGION, TRUST_REGION), -HALF_PI, HALF_PI)

    fx, fy = winkel_forward(lam, phi)
    if abs(fx - x) + abs(fy - y) < ACCEPT_TOLERANCE:
        return wrap_pi(lam), _clamp(phi, -HALF_PI, HALF_PI)
    return None


def winkel_pixel_to_plane(px: float, py: float, width: int, height: int) -> Tuple[float, float]:
    """Projection-plane coordinates at the centre of pixel ``(px, py)``."""
    u = (px + 0.5) / width
    v = (py + 0.5) / height
    return (u * 2.0 - 1.0) * WINKEL_MAX_X, (1.0 - v * 2.0) * WINKEL_MAX_Y


def pan_delta_lambda(dx_px: float, view_width: float) -> float:
    """Longitude change for a horizontal drag of *dx_px* device pixels.

    Uses the equatorial scale ``x ≈ λ·(1 + cos φ₁)/2``; dragging right
    moves the view west (negative Δλ).
    """
    pixels_per_unit = view_width / (2.0 * WINKEL_MAX_X)
    dx_plane = dx_px / pixels_per_unit
    return -dx_plane * 2.0 / (1.0 + COS_PHI1)


# ═══════════════════════════════════════════════════════════════════
# Output sizes
# ═══════════════════════════════════════════════════════════════════

def flat_map_size(source_height: int) -> Tuple[int, int]:
    """``(width, height)`` of an equirectangular map at least *source_height* tall."""
    height = max(int(source_height), MIN_MAP_HEIGHT)
    return height * 2, height


def winkel_size(quality_height: int) -> Tuple[int, int]:
    """``(width, height)`` of a Winkel Tripel map; height is at least 100."""
    height = max(MIN_PREVIEW_HEIGHT, int(math.floor(quality_height)))
    return int(round(height * WINKEL_ASPECT)), height


def preview_height(full_height: int, fraction: float = PREVIEW_FRACTION) -> int:
    """Height of the low-resolution buffer shown while dragging."""
    scaled = round(full_height * max(0.1, fraction))
    return min(full_height, max(MIN_PREVIEW_HEIGHT, int(scaled)))


# ═══════════════════════════════════════════════════════════════════
# Per-pixel sample grids
# ═══════════════════════════════════════════════════════════════════

@dataclass
class ProjectionSampleGrid:
    """Validity flag and spherical trig per output pixel.

    Longitudes are stored relative to the map centre, so one grid serves
    every pan: :meth:`directions` rotates by ``lambda0`` with the angle
    addition formulas.

    Attributes
    ----------
    projection : str
        ``"equirectangular"`` or ``"winkel"``.
    width, height : int
    valid : ndarray of bool, shape (height, width)
    sin_lat, cos_lat, sin_lon, cos_lon : ndarray, shape (height, width)
    """

    projection: str
    width: int
    height: int
    valid: np.ndarray
    sin_lat: np.ndarray
    cos_lat: np.ndarray
    sin_lon: np.ndarray
    cos_lon: np.ndarray

    @property
    def key(self) -> Tuple[str, int, int]:
        return (self.projection, self.width, self.height)

    @property
    def valid_fraction(self) -> float:
        return float(self.valid.mean()) if self.valid.size else 0.0

    def directions(self, lambda0: float = 0.0) -> np.ndarray:
        """Unit directions ``(height, width, 3)`` for a view centred on *lambda0*.

        Invalid pixels hold zeros.
        """
        s0 = math.sin(lambda0)
        c0 = math.cos(lambda0)
        sin_lon = self.sin_lon * c0 + self.cos_lon * s0
        cos_lon = self.cos_lon * c0 - self.sin_lon * s0
        out = _direction_from_trig(self.sin_lat, self.cos_lat, sin_lon, cos_lon)
        out[~self.valid] = 0.0
        return out


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Grid size must be positive, got {width}x{height}")


def build_projection_grid(
    projection: str,
    width: int,
    height: int,
    *,
    progress: Optional[ProgressHook] = None,
    token: Optional[BuildToken] = None,
    rows_per_slice: int = 16,
) -> ProjectionSampleGrid:
    """Precompute a :class:`ProjectionSampleGrid`.

    Work proceeds in slices of *rows_per_slice* scanlines.  After each
    slice *progress* is called with ``(label, rows_done, height)`` and
    *token* is checked; a superseded token raises
    :class:`~scheduling.BuildSuperseded`.

    Raises
    ------
    ValueError
        Unknown projection or non-positive size.
    """
    if projection not in PROJECTIONS:
        raise ValueError(f"Unknown projection: {projection!r}. Available: {list(PROJECTIONS)}")
    _check_size(width, height)

    shape = (height, width)
    valid = np.zeros(shape, dtype=bool)
    sin_lat = np.zeros(shape)
    cos_lat = np.zeros(shape)
    sin_lon = np.zeros(shape)
    cos_lon = np.zeros(shape)
    label = f"{projection} {width}x{height}"

    row_fn = _equirectangular_rows if projection == "equirectangular" else _winkel_rows
    step = max(1, int(rows_per_slice))
    for start in range(0, height, step):
        stop = min(height, start + step)
        row_fn(start, stop, width, height, valid, sin_lat, cos_lat, sin_lon, cos_lon)
        if token is not None:
            token.check()
        if progress is not None:
            progress(label, stop, height)

    grid = ProjectionSampleGrid(projection, width, height, valid, sin_lat, cos_lat, sin_lon, cos_lon)
    logger.debug("built %s grid, %.1f%% valid", label, 100.0 * grid.valid_fraction)
    return grid


def _equirectangular_rows(start, stop, width, height, valid, sin_lat, cos_lat, sin_lon, cos_lon) -> None:
    xs = np.arange(width)
    lon, _ = equirectangular_lon_lat(xs, 0, width, height)
    for row in range(start, stop):
        _, lat = equirectangular_lon_lat(0, row, width, height)
        valid[row] = True
        sin_lat[row] = math.sin(lat)
        cos_lat[row] = math.cos(lat)
        sin_lon[row] = np.sin(lon)
        cos_lon[row] = np.cos(lon)


def _winkel_rows(start, stop, width, height, valid, sin_lat, cos_lat, sin_lon, cos_lon) -> None:
    for row in range(start, stop):
        for col in range(width):
            px, py = winkel_pixel_to_plane(col, row, width, height)
            inv = winkel_inverse(px, py)
            if inv is None:
                continue
            lam, phi = inv
            fx, fy = winkel_forward(lam, phi)
            if abs(fx - px) + abs(fy - py) > SILHOUETTE_TOLERANCE:
                continue
            valid[row, col] = True
            sin_lat[row, col] = math.sin(phi)
            cos_lat[row, col] = math.cos(phi)
            sin_lon[row, col] = math.sin(lam)
            cos_lon[row, col] = math.cos(lam)


class ProjectionGridCache:
    """Keeps the most recent grid per projection.

    A grid is reused for every request of the same size and replaced on
    resize.

    Usage::

        cache = ProjectionGridCache()
        grid = cache.get("winkel", 982, 600)   # built
        grid = cache.get("winkel", 982, 600)   # reused
    """

    def __init__(self, builder: Callable[..., ProjectionSampleGrid] = build_projection_grid) -> None:
        self._builder = builder
        self._grids: Dict[str, ProjectionSampleGrid] = {}
        self.builds = 0

    def get(
        self,
        projection: str,
        width: int,
        height: int,
        *,
        progress: Optional[ProgressHook] = None,
        token: Optional[BuildToken] = None,
    ) -> ProjectionSampleGrid:
        grid = self._grids.get(projection)
        if grid is not None and grid.width == width and grid.height == height:
            return grid
        grid = self._builder(projection, width, height, progress=progress, token=token)
        self._grids[projection] = grid
        self.builds += 1
        return grid

    def clear(self) -> None:
        self._grids.clear()

    def __contains__(self, key: Tuple[str, int, int]) -> bool:
        grid = self._grids.get(key[0])
        return grid is not None and grid.key == key

    def __len__(self) -> int:
        return len(self._grids)
