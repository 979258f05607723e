"""Seeded 3-D simplex noise — the base noise source for the globe.

Classic Gustavson-style simplex noise over ℝ³.  The permutation table is
shuffled from the seed with a small linear-congruential generator, so
the same seed always reproduces the same field on every platform.

There is no octave structure here; :mod:`noise` layers several calls
into fractal Brownian motion.

Classes
-------
- :class:`SimplexNoise3D` — ``sample`` (scalar) and ``sample_many``
  (vectorised numpy) evaluation of the same field
"""

from __future__ import annotations

import math
from typing import List

import numpy as np

_F3 = 1.0 / 3.0
_G3 = 1.0 / 6.0

_GRAD3: List[List[int]] = [
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
]
_GRAD3_ARRAY = np.array(_GRAD3, dtype=np.float64)

# Linear-congruential shuffle constants.
_LCG_MUL = 9301
_LCG_INC = 49297
_LCG_MOD = 233280

# Normalisation so the output spans roughly [−1, 1].
_SCALE = 32.0


def _permutation(seed: int) -> List[int]:
    """Fisher–Yates shuffle of ``0..255`` driven by the LCG."""
    p = list(range(256))
    s = int(seed)
    for i in range(255, 0, -1):
        s = (s * _LCG_MUL + _LCG_INC) % _LCG_MOD
        n = int(math.floor(s / _LCG_MOD * (i + 1)))
        p[i], p[n] = p[n], p[i]
    return p


class SimplexNoise3D:
    """Deterministic 3-D simplex noise field.

    Parameters
    ----------
    seed : int
        Construction seed.  Instances built from equal seeds are
        interchangeable; an instance is never mutated after
        construction, so it can be shared freely between renderers.
    """

    __slots__ = ("seed", "_perm", "_perm_array")

    def __init__(self, seed: int = 0) -> None:
        self.seed = int(seed)
        p = _permutation(self.seed)
        self._perm: List[int] = [p[i & 255] for i in range(512)]
        self._perm_array = np.array(self._perm, dtype=np.int64)
        self._perm_array.setflags(write=False)

    @property
    def permutation(self) -> List[int]:
        """The 256-entry shuffled permutation (a copy)."""
        return self._perm[:256]

    def __repr__(self) -> str:
        return f"SimplexNoise3D(seed={self.seed})"

    # ── scalar ──────────────────────────────────────────────────────

    def sample(self, xin: float, yin: float, zin: float) -> float:
        """Evaluate the noise at one point.  Total over finite input.

        Points whose skewed coordinates overflow to infinity evaluate to 0.
        """
        perm = self._perm

        s = (xin + yin + zin) * _F3
        xs, ys, zs = xin + s, yin + s, zin + s
        if not (math.isfinite(xs) and math.isfinite(ys) and math.isfinite(zs)):
            return 0.0
        i = math.floor(xs)
        j = math.floor(ys)
        k = math.floor(zs)
        t = (float(i) + float(j) + float(k)) * _G3
        x0 = xin - (i - t)
        y0 = yin - (j - t)
        z0 = zin - (k - t)

        # Which simplex we are in: order the three offsets.
        if x0 >= y0:
            if y0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
            elif x0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
        else:
            if y0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
            elif x0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

        x1 = x0 - i1 + _G3
        y1 = y0 - j1 + _G3
        z1 = z0 - k1 + _G3
        x2 = x0 - i2 + 2.0 * _G3
        y2 = y0 - j2 + 2.0 * _G3
        z2 = z0 - k2 + 2.0 * _G3
        x3 = x0 - 1.0 + 3.0 * _G3
        y3 = y0 - 1.0 + 3.0 * _G3
        z3 = z0 - 1.0 + 3.0 * _G3

        ii = i & 255
        jj = j & 255
        kk = k & 255
        gi0 = perm[ii + perm[jj + perm[kk]]] % 12
        gi1 = perm[ii + i1 + perm[jj + j1 + perm[kk + k1]]] % 12
        gi2 = perm[ii + i2 + perm[jj + j2 + perm[kk + k2]]] % 12
        gi3 = perm[ii + 1 + perm[jj + 1 + perm[kk + 1]]] % 12

        total = 0.0
        for gi, cx, cy, cz in (
            (gi0, x0, y0, z0),
            (gi1, x1, y1, z1),
            (gi2, x2, y2, z2),
            (gi3, x3, y3, z3),
        ):
            tc = 0.6 - cx * cx - cy * cy - cz * cz
            if tc < 0.0:
                continue
            g = _GRAD3[gi]
            tc *= tc
            total += tc * tc * (g[0] * cx + g[1] * cy + g[2] * cz)

        return _SCALE * total

    __call__ = sample

    # ── vectorised ──────────────────────────────────────────────────

    def sample_many(self, x, y, z) -> np.ndarray:
        """Evaluate the noise at every point of broadcastable arrays.

        Same formula as :meth:`sample`; results agree to floating-point
        rounding.
        """
        xin, yin, zin = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )
        perm = self._perm_array

        s = (xin + yin + zin) * _F3
        skewed = (xin + s, yin + s, zin + s)
        finite = np.isfinite(skewed[0]) & np.isfinite(skewed[1]) & np.isfinite(skewed[2])
        if not finite.all():
            xin, yin, zin = (np.where(finite, a, 0.0) for a in (xin, yin, zin))
            s = np.where(finite, s, 0.0)
        i = np.floor(xin + s)
        j = np.floor(yin + s)
        k = np.floor(zin + s)
        t = (i + j + k) * _G3
        x0 = xin - (i - t)
        y0 = yin - (j - t)
        z0 = zin - (k - t)

        xy = x0 >= y0
        yz = y0 >= z0
        xz = x0 >= z0
        i1 = (xy & (yz | xz)).astype(np.int64)
        j1 = (~xy & yz).astype(np.int64)
        k1 = (~yz & (~xy | ~xz)).astype(np.int64)
        i2 = (xy | (yz & xz)).astype(np.int64)
        j2 = (~xy | yz).astype(np.int64)
        k2 = (~yz | (~xy & ~xz)).astype(np.int64)

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        kk = k.astype(np.int64) & 255

        corners = (
            (x0, y0, z0, 0, 0, 0),
            (x0 - i1 + _G3, y0 - j1 + _G3, z0 - k1 + _G3, i1, j1, k1),
            (x0 - i2 + 2.0 * _G3, y0 - j2 + 2.0 * _G3, z0 - k2 + 2.0 * _G3, i2, j2, k2),
            (x0 - 1.0 + 3.0 * _G3, y0 - 1.0 + 3.0 * _G3, z0 - 1.0 + 3.0 * _G3, 1, 1, 1),
        )

        total = np.zeros(xin.shape, dtype=np.float64)
        for cx, cy, cz, di, dj, dk in corners:
            gi = perm[ii + di + perm[jj + dj + perm[kk + dk]]] % 12
            g = _GRAD3_ARRAY[gi]
            tc = 0.6 - cx * cx - cy * cy - cz * cz
            tc2 = tc * tc
            contrib = tc2 * tc2 * (g[..., 0] * cx + g[..., 1] * cy + g[..., 2] * cz)
            total += np.where(tc < 0.0, 0.0, contrib)

        return _SCALE * np.where(finite, total, 0.0)
