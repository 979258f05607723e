"""Tests for map_render.py and globe_render.py — maps, globe and PNG output."""

from __future__ import annotations

import numpy as np
import pytest

from terrasphere.config import MAP_AMBIENT
from terrasphere.distribution import build_raw_distribution, sea_level_feet
from terrasphere.map_render import render_projection, sample_elevation, save_png
from terrasphere.projection import build_projection_grid
from terrasphere.simplex import SimplexNoise3D
from terrasphere.terrain import build_terrain_mesh

SEED = 4242


@pytest.fixture(scope="module")
def noise():
    return SimplexNoise3D(SEED)


@pytest.fixture(scope="module")
def dist():
    return build_raw_distribution(SEED, 4)


def flat_map(noise, dist, sea, width, height):
    return render_projection(build_projection_grid("equirectangular", width, height), noise, dist, sea)


class TestSampleElevation:
    def test_maps_agree_with_globe(self, noise, dist):
        """Sampling at the mesh's own directions reproduces the mesh elevations."""
        mesh = build_terrain_mesh(SEED, 0.71, 3, distribution=dist, noise=noise)
        feet = sample_elevation(mesh.sphere.vertices, noise, dist)
        np.testing.assert_array_equal(feet, mesh.elevation_feet)

    def test_keeps_leading_shape(self, noise, dist):
        dirs = np.zeros((4, 5, 3))
        dirs[..., 2] = 1.0
        assert sample_elevation(dirs, noise, dist).shape == (4, 5)


class TestRenderProjection:
    def test_equirectangular_fully_opaque(self, noise, dist):
        image = flat_map(noise, dist, sea_level_feet(0.71), 48, 24)
        assert image.shape == (24, 48, 4)
        assert image.dtype == np.uint8
        assert np.all(image[..., 3] == 255)

    def test_winkel_corners_transparent(self, noise, dist):
        grid = build_projection_grid("winkel", 50, 30)
        image = render_projection(grid, noise, dist, sea_level_feet(0.71))
        assert np.all(image[~grid.valid] == 0)
        assert np.all(image[grid.valid][:, 3] == 255)

    def test_all_ocean_is_blue(self, noise, dist):
        image = flat_map(noise, dist, sea_level_feet(1.0), 32, 16)
        rgb = image[..., :3].astype(int)
        assert np.all(rgb[..., 2] > rgb[..., 0])

    def test_shading_floor(self, noise, dist):
        """With no light contribution every pixel is the unshaded colour times ambient."""
        grid = build_projection_grid("equirectangular", 16, 8)
        dark = render_projection(grid, noise, dist, 0.0, light_dir=(0.0, 0.0, 0.0), ambient=MAP_AMBIENT)
        bright = render_projection(grid, noise, dist, 0.0, light_dir=(0.0, 0.0, 0.0), ambient=1.0)
        assert np.all(dark[..., :3] <= bright[..., :3])

    def test_progress(self, noise, dist):
        grid = build_projection_grid("equirectangular", 8, 70)
        calls = []
        render_projection(grid, noise, dist, 0.0, progress=lambda *a: calls.append(a[1]), rows_per_slice=32)
        assert calls == [32, 64, 70]


class TestSavePNG:
    def test_round_trip(self, tmp_path, noise, dist):
        Image = pytest.importorskip("PIL.Image")
        image = flat_map(noise, dist, sea_level_feet(0.71), 40, 20)
        out = save_png(image, tmp_path / "sub" / "map.png")
        assert out.exists()
        with Image.open(out) as im:
            assert im.size == (40, 20)
            assert im.mode == "RGBA"
            np.testing.assert_array_equal(np.asarray(im), image)

    def test_rejects_bad_shape(self, tmp_path):
        pytest.importorskip("PIL")
        with pytest.raises(ValueError):
            save_png(np.zeros((4, 4), dtype=np.uint8), tmp_path / "bad.png")


class TestGlobeRender:
    def test_face_colours(self, noise, dist):
        from terrasphere.globe_render import face_colours

        mesh = build_terrain_mesh(SEED, 0.71, 2, distribution=dist, noise=noise)
        colours = face_colours(mesh)
        assert colours.shape == (mesh.indices.shape[0], 3)
        assert colours.min() >= 0.0 and colours.max() <= 1.0

    def test_face_normals_point_outward(self, noise, dist):
        from terrasphere.globe_render import face_normals

        mesh = build_terrain_mesh(SEED, 0.71, 2, distribution=dist, noise=noise)
        normals = face_normals(mesh)
        centroids = mesh.positions[mesh.indices].mean(axis=1)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)
        assert np.all(np.einsum("ij,ij->i", normals, centroids) > 0.0)

    def test_faces_shaded_by_face_normal(self, noise, dist):
        from terrasphere.colours import colours_from_elevation_feet
        from terrasphere.globe_render import face_colours, face_normals
        from terrasphere.normals import shade_from_normal

        mesh = build_terrain_mesh(SEED, 0.71, 2, distribution=dist, noise=noise)
        light = (0.2, 0.9, 0.3)
        base = colours_from_elevation_feet(mesh.elevation_feet[mesh.indices].mean(axis=1), mesh.sea_level_feet)
        shade = shade_from_normal(face_normals(mesh), light, 0.4)
        expected = np.clip(base * shade[:, None], 0.0, 1.0)
        np.testing.assert_allclose(face_colours(mesh, light_dir=light, ambient=0.4), expected)

    def test_render_creates_file(self, tmp_path, noise, dist):
        pytest.importorskip("matplotlib")
        from terrasphere.globe_render import render_globe_3d

        mesh = build_terrain_mesh(SEED, 0.71, 2, distribution=dist, noise=noise)
        out = render_globe_3d(mesh, tmp_path / "globe.png", figsize=(3, 3), dpi=50)
        assert out.exists()
        assert out.stat().st_size > 0
