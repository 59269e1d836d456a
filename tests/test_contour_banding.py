from __future__ import annotations

import numpy as np
import pytest

from relief.derived.heights import normalize_heights
from relief.models.grid import GridField, GridHeader
from relief.viz.contours import (
    BAND_STOPS,
    CONTOUR_LINE_COLOR,
    NULL_COLOR,
    band_color,
    band_colors,
    band_fill,
    contour_interval,
    contour_levels,
    contour_width,
    is_contour_line,
    legend_entries,
)


def test_band_fill_hits_palette_at_thresholds():
    for t, stop in zip((0.0, 0.2, 0.4, 0.6, 0.8, 1.0), BAND_STOPS):
        assert band_fill(t) == pytest.approx(stop)


def test_band_fill_clamps():
    assert band_fill(-3.0) == pytest.approx(BAND_STOPS[0])
    assert band_fill(7.0) == pytest.approx(BAND_STOPS[-1])


def test_each_band_holds_one_channel():
    for a, b in zip(BAND_STOPS[:-1], BAND_STOPS[1:]):
        assert sum(1 for c in range(3) if a[c] == b[c]) == 1


def test_band_fill_is_linear_within_band():
    mid = band_fill(0.1)
    assert mid == pytest.approx(tuple((a + b) / 2 for a, b in zip(BAND_STOPS[0], BAND_STOPS[1])))


@pytest.mark.parametrize("h", [0.5, 1.0, 1.5, 3.25, 0.05, 1.95, -0.5, -1.95])
def test_line_classification_is_periodic(h):
    interval, width = 2.0, 0.1
    assert is_contour_line(h, interval, width) == is_contour_line(h + interval, interval, width)


def test_lines_at_both_interval_edges():
    assert is_contour_line(4.0, 2.0, 0.1)
    assert is_contour_line(4.05, 2.0, 0.1)
    assert is_contour_line(5.95, 2.0, 0.1)
    assert not is_contour_line(5.0, 2.0, 0.1)
    assert not is_contour_line(5.0, 0.0, 0.1)


def test_band_color_line_and_fill():
    interval = contour_interval(40.0)
    assert interval == 2.0
    assert band_color(4.0, 0.0, 40.0, interval, 0.1) == CONTOUR_LINE_COLOR
    assert band_color(5.0, 0.0, 40.0, interval, 0.1) == pytest.approx(band_fill(5.0 / 40.0))


def test_contour_width_tracks_camera_distance():
    assert contour_width(0.1, 200.0, 100.0) == pytest.approx(0.2)
    assert contour_width(0.1, 50.0, 100.0) == pytest.approx(0.05)
    assert contour_width(0.1, 50.0, 0.0) == 0.1


def test_vectorised_matches_scalar():
    hs = np.array([[0.0, 4.0, 5.0], [13.3, 27.0, 40.0]])
    out = band_colors(hs, 0.0, 40.0, 2.0, 0.1)
    assert out.shape == (2, 3, 3)
    for (r, c), h in np.ndenumerate(hs):
        assert tuple(out[r, c]) == pytest.approx(band_color(h, 0.0, 40.0, 2.0, 0.1), abs=1e-6)


def test_vectorised_marks_null_cells():
    hs = np.array([1.0, 1e30, 3.0])
    out = band_colors(hs, 0.0, 40.0, 2.0, 0.1, valid=np.array([True, False, True]))
    assert tuple(out[1]) == pytest.approx(NULL_COLOR)


def test_contour_levels():
    assert contour_levels(0.0, 40.0, 2.0) == [float(2 * k) for k in range(21)]
    assert contour_levels(1.0, 9.0, 2.0) == [2.0, 4.0, 6.0, 8.0]
    assert contour_levels(3.0, 3.0, 0.0) == [3.0]


def test_legend_entries_span_valid_range():
    hdr = GridHeader(columns=2, rows=2, x_min=0.0, x_max=1.0, y_min=0.0, y_max=1.0)
    hf = normalize_heights(hdr, GridField(np.array([[10.0, 20.0], [30.0, 50.0]])), height_scale_factor=0.3)
    entries = legend_entries(hf, count=5)
    assert [v for v, _ in entries] == pytest.approx([10.0, 20.0, 30.0, 40.0, 50.0])
    assert entries[0][1] == pytest.approx(BAND_STOPS[0])
    assert entries[-1][1] == pytest.approx(BAND_STOPS[-1])


def test_palette_runs_from_dark_blue_to_pale_yellow():
    assert band_fill(0.0) == pytest.approx((0.0, 0.0, 0.5))
    assert band_fill(0.2) == pytest.approx((0.0, 1.0, 1.0))
    assert band_fill(0.4) == pytest.approx((0.0, 0.7, 0.0))
    assert band_fill(0.6) == pytest.approx((1.0, 0.55, 0.0))
    assert band_fill(1.0) == pytest.approx((1.0, 0.95, 0.6))
