"""Tests for noise.py — fBm and the continent/detail terrain signal."""

from __future__ import annotations

import numpy as np
import pytest

from terrasphere.noise import clamp, fbm_3d, raw_noise_on_sphere, smoothstep
from terrasphere.simplex import SimplexNoise3D


@pytest.fixture
def noise():
    return SimplexNoise3D(1234)


def _unit_directions(n: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    d = rng.normal(size=(n, 3))
    return d / np.linalg.norm(d, axis=1)[:, None]


# ═══════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════


class TestHelpers:
    def test_clamp_scalar(self):
        assert clamp(2.0, -1.0, 1.0) == 1.0
        assert clamp(-2.0, -1.0, 1.0) == -1.0
        assert clamp(0.25, -1.0, 1.0) == 0.25

    def test_clamp_array(self):
        out = clamp(np.array([-3.0, 0.0, 3.0]), -1.0, 1.0)
        assert list(out) == [-1.0, 0.0, 1.0]

    def test_smoothstep_edges(self):
        assert smoothstep(0.0, 1.0, -0.5) == 0.0
        assert smoothstep(0.0, 1.0, 1.5) == 1.0
        assert smoothstep(0.0, 1.0, 0.5) == pytest.approx(0.5)

    def test_smoothstep_cubic(self):
        assert smoothstep(0.0, 2.0, 0.5) == pytest.approx(3 * 0.25 ** 2 - 2 * 0.25 ** 3)


# ═══════════════════════════════════════════════════════════════════
# fBm
# ═══════════════════════════════════════════════════════════════════


class TestFBM3D:
    def test_returns_float(self, noise):
        assert isinstance(fbm_3d(0.1, 0.2, 0.3, noise), float)

    def test_determinism(self, noise):
        a = fbm_3d(0.4, -0.2, 0.9, noise, octaves=5, base_frequency=1.3)
        b = fbm_3d(0.4, -0.2, 0.9, SimplexNoise3D(1234), octaves=5, base_frequency=1.3)
        assert a == b

    def test_single_octave_is_base_noise(self, noise):
        assert fbm_3d(0.3, 0.5, 0.7, noise, octaves=1, base_frequency=2.0) == pytest.approx(
            noise.sample(0.6, 1.0, 1.4)
        )

    def test_octaves_clamped_to_one(self, noise):
        one = fbm_3d(0.3, 0.5, 0.7, noise, octaves=1)
        assert fbm_3d(0.3, 0.5, 0.7, noise, octaves=0) == one
        assert fbm_3d(0.3, 0.5, 0.7, noise, octaves=-4) == one

    def test_fractional_octaves_floored(self, noise):
        assert fbm_3d(0.3, 0.5, 0.7, noise, octaves=2.9) == fbm_3d(0.3, 0.5, 0.7, noise, octaves=2)

    def test_second_octave_offset(self, noise):
        """Octave 1 samples at doubled frequency, shifted by (19.1, 47.7, 73.3)."""
        x, y, z = 0.2, 0.4, 0.6
        expected = (noise.sample(x, y, z) + 0.5 * noise.sample(2 * x + 19.1, 2 * y + 47.7, 2 * z + 73.3)) / 1.5
        assert fbm_3d(x, y, z, noise, octaves=2) == pytest.approx(expected, abs=1e-12)

    def test_normalised_range(self, noise):
        d = _unit_directions(2000)
        vals = fbm_3d(d[:, 0], d[:, 1], d[:, 2], noise, octaves=6, base_frequency=2.6)
        assert np.all(np.abs(vals) <= 1.05)

    def test_array_matches_scalar(self, noise):
        d = _unit_directions(50, seed=3)
        arr = fbm_3d(d[:, 0], d[:, 1], d[:, 2], noise, octaves=4, base_frequency=0.65)
        for p, v in zip(d, arr):
            assert v == pytest.approx(fbm_3d(*p, noise, octaves=4, base_frequency=0.65), abs=1e-12)


# ═══════════════════════════════════════════════════════════════════
# raw_noise_on_sphere
# ═══════════════════════════════════════════════════════════════════


class TestRawNoiseOnSphere:
    def test_returns_float_for_scalars(self, noise):
        assert isinstance(raw_noise_on_sphere(0.0, 1.0, 0.0, noise), float)

    def test_clamped(self, noise):
        d = _unit_directions(5000, seed=4)
        raw = raw_noise_on_sphere(d[:, 0], d[:, 1], d[:, 2], noise)
        assert raw.shape == (5000,)
        assert np.all((raw >= -1.0) & (raw <= 1.0))

    def test_determinism(self, noise):
        a = raw_noise_on_sphere(0.6, 0.0, 0.8, noise)
        b = raw_noise_on_sphere(0.6, 0.0, 0.8, SimplexNoise3D(1234))
        assert a == b

    def test_composition(self, noise):
        x, y, z = 0.0, 0.6, 0.8
        c = fbm_3d(x, y, z, noise, octaves=3, base_frequency=0.65)
        d = fbm_3d(x, y, z, noise, octaves=6, base_frequency=2.6)
        mask = smoothstep(-0.15, 0.25, c)
        expected = 0.85 * c + 0.45 * d * (0.25 + 0.75 * mask) + 0.15 * (1.0 - abs(y))
        expected = max(-1.0, min(1.0, expected))
        assert raw_noise_on_sphere(x, y, z, noise) == pytest.approx(expected, abs=1e-12)

    def test_array_matches_scalar(self, noise):
        d = _unit_directions(40, seed=5)
        arr = raw_noise_on_sphere(d[:, 0], d[:, 1], d[:, 2], noise)
        for p, v in zip(d, arr):
            assert v == pytest.approx(raw_noise_on_sphere(*p, noise), abs=1e-12)
