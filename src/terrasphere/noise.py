"""Fractal noise composition for spherical terrain.

Every function here operates on ``(x, y, z)`` coordinates — plain floats
or numpy arrays of the same shape — and a :class:`~simplex.SimplexNoise3D`
source.  Scalars come back as ``float``; arrays come back as arrays.

Functions
---------
- :func:`clamp` — clamp a value (or array) into ``[lo, hi]``
- :func:`smoothstep` — cubic Hermite step between two edges
- :func:`fbm_3d` — Fractal Brownian Motion on 3-D coordinates
- :func:`raw_noise_on_sphere` — the continent/detail terrain signal
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .simplex import SimplexNoise3D

# Per-octave domain offset; breaks axis-aligned correlation between octaves.
OCTAVE_OFFSET: Tuple[float, float, float] = (19.1, 47.7, 73.3)

# Continent band
CONTINENT_OCTAVES = 3
CONTINENT_FREQUENCY = 0.65
LAND_MASK_LOW = -0.15
LAND_MASK_HIGH = 0.25

# Detail band
DETAIL_OCTAVES = 6
DETAIL_FREQUENCY = 2.6

CONTINENT_WEIGHT = 0.85
DETAIL_WEIGHT = 0.45
DETAIL_OCEAN_FLOOR = 0.25
EQUATOR_BIAS = 0.15


def _is_scalar(*values) -> bool:
    return all(np.ndim(v) == 0 for v in values)


# ═══════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════

def clamp(value, lo: float, hi: float):
    """Clamp *value* into ``[lo, hi]``; works on floats and arrays."""
    if np.ndim(value) == 0:
        return max(lo, min(hi, float(value)))
    return np.clip(value, lo, hi)


def smoothstep(edge0: float, edge1: float, x):
    """Hermite smoothstep: 0 below *edge0*, 1 above *edge1*, ``3t² − 2t³`` between."""
    t = clamp((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


# ═══════════════════════════════════════════════════════════════════
# Fractal Brownian Motion
# ═══════════════════════════════════════════════════════════════════

def fbm_3d(
    x,
    y,
    z,
    noise: SimplexNoise3D,
    *,
    octaves: int = 6,
    base_frequency: float = 1.0,
):
    """3-D Fractal Brownian Motion over a simplex noise source.

    Sums *octaves* noise evaluations, doubling the frequency and halving
    the amplitude each time, and divides by the summed amplitude so the
    result stays comparable across octave counts.  Octave ``i`` is
    shifted by ``i * OCTAVE_OFFSET``.

    Parameters
    ----------
    x, y, z : float or ndarray
        Sample coordinates (typically a unit direction).
    noise : SimplexNoise3D
        The seeded base noise.
    octaves : int
        Number of noise layers; floored, and at least 1.
    base_frequency : float
        Frequency of the first octave.

    Returns
    -------
    float or ndarray
        Approximately in ``[−1, 1]``.
    """
    scalar = _is_scalar(x, y, z)
    evaluate = noise.sample if scalar else noise.sample_many

    octaves = max(1, int(math.floor(octaves)))
    total = 0.0
    amplitude = 1.0
    amp_sum = 0.0
    freq = base_frequency
    ox, oy, oz = OCTAVE_OFFSET

    for i in range(octaves):
        total = total + amplitude * evaluate(x * freq + i * ox, y * freq + i * oy, z * freq + i * oz)
        amp_sum += amplitude
        amplitude *= 0.5
        freq *= 2.0

    return total / amp_sum


# ═══════════════════════════════════════════════════════════════════
# Continent / detail composition
# ═══════════════════════════════════════════════════════════════════

def raw_noise_on_sphere(x, y, z, noise: SimplexNoise3D):
    """Spatially correlated terrain signal for a direction on the sphere.

    A low-frequency *continent* fBm is turned into a smooth 0..1 land
    mask.  A higher-frequency *detail* fBm is added on top, damped to a
    quarter of its weight in open ocean and at full weight on land.  A
    latitude bias favouring the equator keeps landmass from clustering
    at the poles.

    Returns a value (or array) clamped to ``[−1, 1]``.  The value has no
    absolute meaning; :mod:`distribution` ranks it against a reference
    population.
    """
    continent = fbm_3d(x, y, z, noise, octaves=CONTINENT_OCTAVES, base_frequency=CONTINENT_FREQUENCY)
    mask = smoothstep(LAND_MASK_LOW, LAND_MASK_HIGH, continent)
    detail = fbm_3d(x, y, z, noise, octaves=DETAIL_OCTAVES, base_frequency=DETAIL_FREQUENCY)

    combined = CONTINENT_WEIGHT * continent + DETAIL_WEIGHT * detail * (
        DETAIL_OCEAN_FLOOR + (1.0 - DETAIL_OCEAN_FLOOR) * mask
    )
    equator_bias = EQUATOR_BIAS * (1.0 - np.abs(y))
    result = clamp(combined + equator_bias, -1.0, 1.0)
    return float(result) if np.ndim(result) == 0 else result
