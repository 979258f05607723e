"""Tests for normals.py — vertex normals and Lambert shading."""

from __future__ import annotations

import math

import numpy as np
import pytest

from terrasphere.config import DEFAULT_LIGHT_DIR, GLOBE_AMBIENT
from terrasphere.icosphere import create_icosphere
from terrasphere.normals import compute_vertex_normals, light_from_angles, shade_from_normal


class TestComputeVertexNormals:
    def test_single_triangle_right_hand_rule(self):
        verts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        normals = compute_vertex_normals(verts, np.array([[0, 1, 2]]))
        np.testing.assert_allclose(normals, [[0, 0, 1]] * 3, atol=1e-12)

    def test_reversed_winding_flips(self):
        verts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        normals = compute_vertex_normals(verts, np.array([[0, 2, 1]]))
        np.testing.assert_allclose(normals, [[0, 0, -1]] * 3, atol=1e-12)

    def test_unit_length(self):
        sphere = create_icosphere(2)
        normals = compute_vertex_normals(sphere.vertices, sphere.indices)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-12)

    def test_sphere_normals_are_radial(self):
        sphere = create_icosphere(3)
        normals = compute_vertex_normals(sphere.vertices, sphere.indices)
        dots = np.einsum("ij,ij->i", normals, sphere.vertices)
        assert dots.min() > 0.99

    def test_unreferenced_vertex_falls_back_to_radial(self):
        verts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 3.0, 4.0]])
        normals = compute_vertex_normals(verts, np.array([[0, 1, 2]]))
        np.testing.assert_allclose(normals[3], [0.0, 0.6, 0.8], atol=1e-12)

    def test_degenerate_triangle_falls_back_to_radial(self):
        verts = np.array([[2.0, 0.0, 0.0], [2.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
        normals = compute_vertex_normals(verts, np.array([[0, 1, 2]]))
        np.testing.assert_allclose(normals, [[1, 0, 0]] * 3, atol=1e-12)

    def test_packed_vertices_and_flat_indices(self):
        sphere = create_icosphere(1)
        packed = np.column_stack([sphere.vertices, np.arange(sphere.vertex_count)])
        a = compute_vertex_normals(packed, sphere.indices.ravel())
        b = compute_vertex_normals(sphere.vertices, sphere.indices)
        np.testing.assert_allclose(a, b)


class TestShadeFromNormal:
    def test_facing_light_is_full(self):
        assert shade_from_normal(DEFAULT_LIGHT_DIR) == pytest.approx(1.0)

    def test_facing_away_is_ambient(self):
        away = tuple(-c for c in DEFAULT_LIGHT_DIR)
        assert shade_from_normal(away) == pytest.approx(GLOBE_AMBIENT)

    def test_normal_need_not_be_unit(self):
        assert shade_from_normal((0, 10, 0)) == pytest.approx(shade_from_normal((0, 1, 0)))

    def test_custom_ambient(self):
        assert shade_from_normal((0, -1, 0), (0, 1, 0), ambient=0.72) == pytest.approx(0.72)
        assert shade_from_normal((0, 1, 0), (0, 1, 0), ambient=0.72) == pytest.approx(1.0)

    def test_array_form(self):
        normals = np.array([[0, 1, 0], [0, -1, 0], [1, 0, 0]], dtype=float)
        shades = shade_from_normal(normals, (0, 1, 0), 0.5)
        np.testing.assert_allclose(shades, [1.0, 0.5, 0.5])

    def test_returns_float_for_single_normal(self):
        assert isinstance(shade_from_normal((0.0, 0.0, 1.0)), float)


class TestLightFromAngles:
    def test_overhead(self):
        x, y, z = light_from_angles(0.0, 90.0)
        assert (x, y, z) == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)

    def test_unit_length(self):
        assert math.hypot(*light_from_angles(37.0, 21.0)) == pytest.approx(1.0)
