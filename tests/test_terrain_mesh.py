from __future__ import annotations

import numpy as np
import pytest

from relief.derived.heights import normalize_heights
from relief.models.grid import GridField, GridHeader
from relief.viewer.mesh import create_terrain_mesh, grid_coordinates, grid_triangles, surface_normals


def _terrain():
    hdr = GridHeader(columns=3, rows=2, x_min=0.0, x_max=90.0, y_min=0.0, y_max=40.0)
    field = GridField(np.array([[0.0, 10.0, 20.0], [30.0, 1e30, 40.0]]))
    hf = normalize_heights(hdr, field, height_scale_factor=0.5, base_offset=1.0)
    return hdr, field, hf


def test_grid_coordinates_put_row_zero_on_y_max():
    hdr, _, _ = _terrain()
    xs, ys = grid_coordinates(hdr)
    assert xs.tolist() == [0.0, 45.0, 90.0]
    assert ys.tolist() == [40.0, 0.0]


def test_terrain_mesh_layout():
    hdr, field, hf = _terrain()
    mesh = create_terrain_mesh(hdr, field, hf)

    assert mesh.num_vertices == 6
    assert mesh.indices.shape == (4, 3)
    assert mesh.vertices.dtype == np.float32
    assert mesh.vertices[0].tolist() == pytest.approx([0.0, 40.0, 1.0])
    assert mesh.vertices[5].tolist() == pytest.approx([90.0, 0.0, 46.0])


def test_null_vertex_is_flat_and_flagged():
    hdr, field, hf = _terrain()
    mesh = create_terrain_mesh(hdr, field, hf)
    null_idx = 1 * hdr.columns + 1
    assert mesh.vertices[null_idx, 2] == pytest.approx(1.0)
    assert mesh.valid[null_idx] == 0.0
    assert mesh.heights[null_idx] == pytest.approx(hf.min_valid)
    assert mesh.valid.sum() == 5


def test_triangles_wind_counter_clockwise_from_above():
    rows, columns = 4, 5
    hdr = GridHeader(columns=columns, rows=rows, x_min=0.0, x_max=4.0, y_min=0.0, y_max=3.0)
    xs, ys = grid_coordinates(hdr)
    gx, gy = np.meshgrid(xs, ys)
    pts = np.stack([gx.reshape(-1), gy.reshape(-1)], axis=1)

    tris = grid_triangles(rows, columns)
    assert len(tris) == (rows - 1) * (columns - 1) * 2
    for a, b, c in tris:
        ab = pts[b] - pts[a]
        ac = pts[c] - pts[a]
        assert ab[0] * ac[1] - ab[1] * ac[0] > 0.0


def test_normals_are_unit_and_point_up():
    z = np.array([[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]])
    n = surface_normals(z, x_step=1.0, y_step=1.0)
    assert np.allclose(np.linalg.norm(n, axis=1), 1.0)
    assert (n[:, 2] > 0.0).all()
    # surface rises towards +X, so normals lean towards -X
    assert (n[:, 0] < 0.0).all()
    assert np.allclose(n[:, 1], 0.0)


def test_bounds_cover_extent_and_heights():
    hdr, field, hf = _terrain()
    lo, hi = create_terrain_mesh(hdr, field, hf).get_bounds()
    assert lo.tolist() == pytest.approx([0.0, 0.0, 1.0])
    assert hi.tolist() == pytest.approx([90.0, 40.0, 46.0])
