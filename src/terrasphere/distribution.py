"""Elevation distribution — percentiles to feet via a split-normal.

The raw terrain signal has no physical scale.  This module ranks raw
samples against a fixed *reference population* (every vertex of a
reference icosphere) and maps the resulting percentile through the
inverse CDF of a split-normal distribution whose two halves span the
ocean-depth and land-height ranges.  Because sea level is the same
mapping applied to the requested ocean fraction, the realised ocean
coverage matches the request up to ``1/N`` of the reference sampling.

Functions
---------
- :func:`inverse_normal_cdf` — Acklam's rational approximation
- :func:`percentile_to_elevation_feet` — split-normal mapping
- :func:`percentiles_to_elevation_feet` — vectorised form
- :func:`sea_level_feet` — elevation cutoff for an ocean fraction
- :func:`build_raw_distribution` — the shared reference population
- :func:`raw_to_percentile` / :func:`raw_to_percentiles` — rank lookup
- :func:`rank_percentiles` — percentiles of a population against itself
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .config import DEFAULT_TERRAIN_CONFIG, REFERENCE_SUBDIVISIONS, STD_DEVS, TerrainConfig
from .icosphere import create_icosphere
from .noise import raw_noise_on_sphere
from .seeds import check_seed
from .simplex import SimplexNoise3D

logger = logging.getLogger(__name__)

# Percentiles are kept this far inside (0, 1) before the inverse CDF.
PERCENTILE_EPSILON = 1e-6


# ═══════════════════════════════════════════════════════════════════
# Inverse normal CDF
# ═══════════════════════════════════════════════════════════════════

_A = (-39.6968302866538, 220.946098424521, -275.928510446969,
      138.357751867269, -30.6647980661472, 2.50662827745924)
_B = (-54.4760987982241, 161.585836858041, -155.698979859887,
      66.8013118877197, -13.2806815528857)
_C = (-0.00778489400243029, -0.322396458041136, -2.40075827716184,
      -2.54973253934373, 4.37466414146497, 2.93816398269878)
_D = (0.00778469570904146, 0.32246712907004, 2.445134137143,
      3.75440866190742)

_P_LOW = 0.02425
_P_HIGH = 1.0 - _P_LOW


def _tail(q: float) -> float:
    c1, c2, c3, c4, c5, c6 = _C
    d1, d2, d3, d4 = _D
    return (((((c1 * q + c2) * q + c3) * q + c4) * q + c5) * q + c6) / (
        (((d1 * q + d2) * q + d3) * q + d4) * q + 1.0
    )


def inverse_normal_cdf(p: float) -> float:
    """Standard normal quantile function (Acklam's approximation).

    Relative error is below ``1.15e-9`` over the whole open interval.

    Raises
    ------
    ValueError
        If *p* is not strictly between 0 and 1.  Callers clamp first.
    """
    if not 0.0 < p < 1.0:
        raise ValueError(f"p must be in (0, 1), got {p!r}")

    if p < _P_LOW:
        return _tail(math.sqrt(-2.0 * math.log(p)))
    if p > _P_HIGH:
        return -_tail(math.sqrt(-2.0 * math.log(1.0 - p)))

    a1, a2, a3, a4, a5, a6 = _A
    b1, b2, b3, b4, b5 = _B
    q = p - 0.5
    r = q * q
    return (((((a1 * r + a2) * r + a3) * r + a4) * r + a5) * r + a6) * q / (
        ((((b1 * r + b2) * r + b3) * r + b4) * r + b5) * r + 1.0
    )


# ═══════════════════════════════════════════════════════════════════
# Split-normal mapping
# ═══════════════════════════════════════════════════════════════════

class ElevationSample(NamedTuple):
    """An elevation in feet plus its standard score (diagnostics only)."""

    elevation_feet: float
    z_std: float


def _split_params(std_devs: float, config: TerrainConfig) -> Tuple[float, float, float]:
    sigma_left = abs(config.lowest_elevation_limit) / std_devs
    sigma_right = config.highest_elevation_limit / std_devs
    w = sigma_left / (sigma_left + sigma_right)
    return sigma_left, sigma_right, w


def percentile_to_elevation_feet(
    p: float,
    std_devs: float = STD_DEVS,
    *,
    config: Optional[TerrainConfig] = None,
) -> ElevationSample:
    """Map a percentile to an elevation through a split-normal inverse CDF.

    The left half (below the mode) has ``σ = |lowest| / std_devs`` and
    the right half ``σ = highest / std_devs``.  The halves are weighted
    by ``w = σ_left / (σ_left + σ_right)`` rather than 50/50, so whichever
    side has more elevation range receives more of the probability mass.

    Parameters
    ----------
    p : float
        Percentile; clamped into ``[ε, 1 − ε]`` first.
    std_devs : float
        Span of the mapping in standard deviations; ``z`` is clamped to
        ``±std_devs``.
    config : TerrainConfig, optional
        Elevation limits and mode.  Defaults to the module constants.

    Returns
    -------
    ElevationSample
        Feet clamped to the configured limits, and the clamped ``z``.
    """
    cfg = config or DEFAULT_TERRAIN_CONFIG
    sigma_left, sigma_right, w = _split_params(std_devs, cfg)

    eps = PERCENTILE_EPSILON
    u = max(eps, min(1.0 - eps, p))

    if u < w:
        u_prime = max(eps, min(0.5 - eps, u / (2.0 * w)))
        sigma = sigma_left
    else:
        u_prime = max(0.5 + eps, min(1.0 - eps, 0.5 + (u - w) / (2.0 * (1.0 - w))))
        sigma = sigma_right

    z = max(-std_devs, min(std_devs, inverse_normal_cdf(u_prime)))
    feet = cfg.base_abyssal_floor_elevation + sigma * z
    feet = max(cfg.lowest_elevation_limit, min(cfg.highest_elevation_limit, feet))
    return ElevationSample(float(feet), float(z))


def percentiles_to_elevation_feet(
    p: np.ndarray,
    std_devs: float = STD_DEVS,
    *,
    config: Optional[TerrainConfig] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorised :func:`percentile_to_elevation_feet`.

    Returns ``(elevation_feet, z_std)`` arrays shaped like *p*.
    """
    cfg = config or DEFAULT_TERRAIN_CONFIG
    sigma_left, sigma_right, w = _split_params(std_devs, cfg)
    eps = PERCENTILE_EPSILON

    u = np.clip(np.asarray(p, dtype=np.float64), eps, 1.0 - eps)
    left = u < w
    u_prime = np.where(
        left,
        np.clip(u / (2.0 * w), eps, 0.5 - eps),
        np.clip(0.5 + (u - w) / (2.0 * (1.0 - w)), 0.5 + eps, 1.0 - eps),
    )
    z = _inverse_normal_cdf_array(u_prime)
    z = np.clip(z, -std_devs, std_devs)
    sigma = np.where(left, sigma_left, sigma_right)
    feet = np.clip(
        cfg.base_abyssal_floor_elevation + sigma * z,
        cfg.lowest_elevation_limit,
        cfg.highest_elevation_limit,
    )
    return feet, z


def _inverse_normal_cdf_array(p: np.ndarray) -> np.ndarray:
    """Acklam's approximation over an array already inside (0, 1)."""
    if np.any((p <= 0.0) | (p >= 1.0)):
        raise ValueError("p must be in (0, 1)")
    a1, a2, a3, a4, a5, a6 = _A
    b1, b2, b3, b4, b5 = _B

    q = p - 0.5
    r = q * q
    central = (((((a1 * r + a2) * r + a3) * r + a4) * r + a5) * r + a6) * q / (
        ((((b1 * r + b2) * r + b3) * r + b4) * r + b5) * r + 1.0
    )

    c1, c2, c3, c4, c5, c6 = _C
    d1, d2, d3, d4 = _D
    tail_p = np.minimum(p, 1.0 - p)
    qt = np.sqrt(-2.0 * np.log(tail_p))
    tail = (((((c1 * qt + c2) * qt + c3) * qt + c4) * qt + c5) * qt + c6) / (
        (((d1 * qt + d2) * qt + d3) * qt + d4) * qt + 1.0
    )

    out = np.where(p < _P_LOW, tail, central)
    return np.where(p > _P_HIGH, -tail, out)


def sea_level_feet(
    ocean_fraction: float,
    std_devs: float = STD_DEVS,
    *,
    config: Optional[TerrainConfig] = None,
) -> float:
    """Elevation below which *ocean_fraction* of the surface lies.

    Raises ``ValueError`` if the fraction is outside ``[0, 1]``.
    """
    if not 0.0 <= ocean_fraction <= 1.0:
        raise ValueError(f"ocean_fraction must be in [0, 1], got {ocean_fraction!r}")
    return percentile_to_elevation_feet(ocean_fraction, std_devs, config=config).elevation_feet


# ═══════════════════════════════════════════════════════════════════
# Raw distribution
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RawDistribution:
    """Ascending-sorted raw samples of one reference sampling.

    The array is read-only; the object is safe to share between every
    view of the same seed.

    Attributes
    ----------
    sorted_raw : ndarray, shape (N,)
    seed : int or None
        Seed the population was sampled from (``None`` if built from an
        arbitrary array).
    subdivisions : int or None
        Reference icosphere level.
    """

    sorted_raw: np.ndarray
    seed: Optional[int] = None
    subdivisions: Optional[int] = None

    def __len__(self) -> int:
        return int(self.sorted_raw.shape[0])

    @classmethod
    def from_samples(cls, samples, *, seed: Optional[int] = None, subdivisions: Optional[int] = None) -> "RawDistribution":
        arr = np.sort(np.asarray(samples, dtype=np.float64).ravel(), kind="stable")
        arr.setflags(write=False)
        return cls(sorted_raw=arr, seed=seed, subdivisions=subdivisions)


def build_raw_distribution(
    seed: int,
    subdivisions: int = REFERENCE_SUBDIVISIONS,
    *,
    noise: Optional[SimplexNoise3D] = None,
) -> RawDistribution:
    """Sample the terrain signal at every vertex of a reference icosphere.

    Build this once per ``(seed, subdivisions)`` and hand the result to
    every view; percentiles (and therefore sea level) are only
    comparable between views that share it.
    """
    seed = check_seed(seed)
    noise = noise or SimplexNoise3D(seed)
    sphere = create_icosphere(subdivisions)
    v = sphere.vertices
    raw = raw_noise_on_sphere(v[:, 0], v[:, 1], v[:, 2], noise)
    dist = RawDistribution.from_samples(raw, seed=seed, subdivisions=subdivisions)
    logger.debug(
        "built raw distribution seed=%d subdivisions=%d samples=%d range=[%.4f, %.4f]",
        seed, subdivisions, len(dist), dist.sorted_raw[0], dist.sorted_raw[-1],
    )
    return dist


def raw_to_percentile(distribution: RawDistribution, raw: float) -> float:
    """Percentile of *raw* within *distribution*: ``(rank + 0.5) / N``.

    *rank* is the left insertion index.  Values at or beyond either end
    map to the outer half-buckets, never to 0 or 1.  An empty
    distribution returns 0.5.
    """
    sorted_raw = distribution.sorted_raw
    n = sorted_raw.shape[0]
    if n == 0:
        return 0.5
    if raw <= sorted_raw[0]:
        return 0.5 / n
    if raw >= sorted_raw[n - 1]:
        return (n - 0.5) / n
    rank = int(np.searchsorted(sorted_raw, raw, side="left"))
    return (min(rank, n - 1) + 0.5) / n


def raw_to_percentiles(distribution: RawDistribution, raw) -> np.ndarray:
    """Vectorised :func:`raw_to_percentile`."""
    sorted_raw = distribution.sorted_raw
    raw = np.asarray(raw, dtype=np.float64)
    n = sorted_raw.shape[0]
    if n == 0:
        return np.full(raw.shape, 0.5)
    rank = np.searchsorted(sorted_raw, raw, side="left")
    rank = np.clip(rank, 0, n - 1)
    rank = np.where(raw >= sorted_raw[n - 1], n - 1, rank)
    return (rank + 0.5) / n


def rank_percentiles(raw) -> np.ndarray:
    """Percentile of each sample within its own population.

    Ties are broken by index order (stable sort), so every sample gets a
    distinct ``(rank + 0.5) / N``.
    """
    raw = np.asarray(raw, dtype=np.float64).ravel()
    n = raw.shape[0]
    order = np.argsort(raw, kind="stable")
    percentiles = np.empty(n, dtype=np.float64)
    percentiles[order] = (np.arange(n) + 0.5) / n
    return percentiles
