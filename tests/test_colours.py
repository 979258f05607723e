"""Tests for colours.py — elevation banding relative to sea level."""

from __future__ import annotations

import numpy as np
import pytest

from terrasphere.colours import (
    TERRAIN_COLOUR_CONFIG,
    TerrainColourConfig,
    colour_from_elevation_feet,
    colours_from_elevation_feet,
    to_rgb8,
)

CFG = TERRAIN_COLOUR_CONFIG


class TestColourFromElevation:
    @pytest.mark.parametrize("sea", [0.0, 3250.0, -4000.0])
    def test_just_below_sea_is_shallow(self, sea):
        assert colour_from_elevation_feet(sea - 1, sea) == CFG.shallow_ocean

    @pytest.mark.parametrize("sea", [0.0, 3250.0, -4000.0])
    def test_at_sea_is_low_land(self, sea):
        assert colour_from_elevation_feet(sea, sea) == CFG.low_land

    def test_deep_ocean(self):
        assert colour_from_elevation_feet(-40_000, 0.0) == CFG.deep_ocean

    def test_deep_to_mid_boundary(self):
        """At the end of the deep band the mid→shallow band starts at mid_ocean."""
        assert colour_from_elevation_feet(-15_000, 0.0) == pytest.approx(CFG.mid_ocean)

    def test_shallow_band_is_flat(self):
        for e in (-6_000, -3_000, -1):
            assert colour_from_elevation_feet(e, 0.0) == CFG.shallow_ocean

    def test_snow_cap(self):
        assert colour_from_elevation_feet(30_000, 0.0) == pytest.approx(CFG.snow)

    def test_rocky_plateau(self):
        """Between the rocky band end and the snow start the colour is rock."""
        assert colour_from_elevation_feet(17_500, 0.0) == pytest.approx(CFG.rocky)

    def test_land_gradient_midpoint(self):
        r, g, b = colour_from_elevation_feet(6_000, 0.0)
        lo, hi = CFG.low_land, CFG.high_land
        assert r == pytest.approx((lo[0] + hi[0]) / 2)
        assert g == pytest.approx((lo[1] + hi[1]) / 2)
        assert b == pytest.approx((lo[2] + hi[2]) / 2)

    def test_relative_to_sea_level(self):
        assert colour_from_elevation_feet(1_000, 0.0) == colour_from_elevation_feet(6_000, 5_000)

    def test_custom_config(self):
        cfg = TerrainColourConfig(shallow_ocean=(0.0, 1.0, 0.0))
        assert colour_from_elevation_feet(-10, 0.0, cfg) == (0.0, 1.0, 0.0)


class TestVectorised:
    def test_matches_scalar(self):
        sea = 2_345.0
        elevs = np.linspace(-20_000, 50_000, 1401)
        elevs = np.concatenate([elevs, [sea - 1, sea, sea - 6_000, sea - 15_000, sea + 12_000, sea + 17_000]])
        out = colours_from_elevation_feet(elevs, sea)
        assert out.shape == (elevs.size, 3)
        for e, c in zip(elevs, out):
            np.testing.assert_allclose(c, colour_from_elevation_feet(float(e), sea), atol=1e-12)


class TestToRGB8:
    def test_scales_and_rounds(self):
        out = to_rgb8([(1.0, 0.5, 0.0)], 1.0)
        assert out.dtype == np.uint8
        assert out.tolist() == [[255, 128, 0]]

    def test_clamps(self):
        assert to_rgb8([(2.0, -1.0, 0.5)], 1.0).tolist() == [[255, 0, 128]]

    def test_halves_round_up(self):
        """Exact .5 ties go up even when the lower neighbour is even."""
        targets = np.arange(0, 40, 2) + 0.5
        c = np.repeat((targets / 255.0)[:, None], 3, axis=1)
        ties = c[:, 0] * 255.0 == targets
        assert ties.any()
        out = to_rgb8(c, 1.0)
        np.testing.assert_array_equal(out[ties, 0], (targets[ties] + 0.5).astype(np.uint8))

    def test_per_pixel_shade(self):
        out = to_rgb8(np.ones((2, 3)), np.array([1.0, 0.5]))
        assert out.tolist() == [[255, 255, 255], [128, 128, 128]]
