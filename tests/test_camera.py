from __future__ import annotations

import numpy as np
import pytest

from relief.viewer.camera import Camera


def test_fit_to_bounds_centres_and_scales_limits():
    cam = Camera()
    cam.fit_to_bounds(np.array([0.0, 0.0, 0.0]), np.array([300.0, 400.0, 0.0]))
    assert cam.target.tolist() == pytest.approx([150.0, 200.0, 0.0])
    assert cam.distance == pytest.approx(750.0)
    assert cam.max_distance == pytest.approx(5000.0)
    assert cam.far > cam.distance
    assert (cam.azimuth, cam.elevation) == (45.0, 30.0)


def test_top_view_looks_straight_down():
    cam = Camera()
    cam.fit_to_bounds(np.zeros(3), np.array([10.0, 10.0, 2.0]), view_mode="top")
    assert cam.elevation == cam.max_elevation
    assert cam.forward_vector[2] < -0.99


def test_unknown_view_mode():
    with pytest.raises(ValueError):
        Camera().apply_view_mode("iso")


def test_zoom_is_clamped():
    cam = Camera(distance=10.0, min_distance=5.0, max_distance=20.0)
    for _ in range(50):
        cam.zoom(1.0)
    assert cam.distance == 5.0
    for _ in range(50):
        cam.zoom(-1.0)
    assert cam.distance == 20.0


def test_orbit_clamps_elevation():
    cam = Camera()
    cam.orbit(10.0, 500.0)
    assert cam.azimuth == 55.0
    assert cam.elevation == cam.max_elevation


def test_view_matrix_maps_target_onto_view_axis():
    cam = Camera(target=np.array([1.0, 2.0, 3.0]), distance=10.0)
    v = cam.get_view_matrix() @ np.array([1.0, 2.0, 3.0, 1.0])
    assert v[0] == pytest.approx(0.0, abs=1e-4)
    assert v[1] == pytest.approx(0.0, abs=1e-4)
    assert v[2] == pytest.approx(-10.0, rel=1e-4)
