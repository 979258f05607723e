"""Tests for icosphere.py — recursive icosahedron subdivision."""

from __future__ import annotations

import numpy as np
import pytest

from terrasphere.icosphere import create_icosphere, icosphere_face_count, icosphere_vertex_count


class TestCounts:
    def test_level_zero(self):
        sphere = create_icosphere(0)
        assert sphere.vertex_count == 12
        assert sphere.face_count == 20

    @pytest.mark.parametrize("s", [0, 1, 2, 3, 4])
    def test_formulae(self, s):
        sphere = create_icosphere(s)
        assert sphere.vertex_count == icosphere_vertex_count(s) == 10 * 4 ** s + 2
        assert sphere.face_count == icosphere_face_count(s) == 20 * 4 ** s

    def test_each_pass_quadruples_faces(self):
        counts = [create_icosphere(s).face_count for s in range(4)]
        assert [b // a for a, b in zip(counts, counts[1:])] == [4, 4, 4]

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            create_icosphere(-1)

    def test_dtypes_and_shapes(self):
        sphere = create_icosphere(2)
        assert sphere.vertices.dtype == np.float64
        assert sphere.indices.dtype == np.int64
        assert sphere.vertices.shape == (162, 3)
        assert sphere.indices.shape == (320, 3)
        assert sphere.subdivisions == 2


class TestGeometry:
    def test_unit_length(self):
        v = create_icosphere(3).vertices
        np.testing.assert_allclose(np.linalg.norm(v, axis=1), 1.0, atol=1e-12)

    def test_no_duplicate_vertices(self):
        """Shared edges reuse one midpoint, so no two vertices coincide."""
        v = create_icosphere(3).vertices
        unique = np.unique(np.round(v, 9), axis=0)
        assert unique.shape[0] == v.shape[0]

    def test_every_vertex_referenced(self):
        sphere = create_icosphere(2)
        assert set(np.unique(sphere.indices)) == set(range(sphere.vertex_count))

    def test_faces_wind_outward(self):
        sphere = create_icosphere(2)
        tri = sphere.vertices[sphere.indices]
        normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        centroids = tri.mean(axis=1)
        assert np.all(np.einsum("ij,ij->i", normals, centroids) > 0)

    def test_closed_manifold(self):
        """Every edge is shared by exactly two triangles (V − E + F = 2)."""
        sphere = create_icosphere(2)
        tris = sphere.indices
        edges = np.sort(np.concatenate([tris[:, [0, 1]], tris[:, [1, 2]], tris[:, [2, 0]]]), axis=1)
        _, counts = np.unique(edges, axis=0, return_counts=True)
        assert np.all(counts == 2)
        assert sphere.vertex_count - counts.size + sphere.face_count == 2

    def test_coarse_vertices_are_prefix(self):
        coarse = create_icosphere(1).vertices
        fine = create_icosphere(3).vertices
        np.testing.assert_array_equal(fine[: coarse.shape[0]], coarse)
