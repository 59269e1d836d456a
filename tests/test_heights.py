from __future__ import annotations

import math

import numpy as np
import pytest

from relief.derived.heights import normalize_heights, valid_extrema
from relief.models.grid import GridField, GridHeader
from relief.parser.grid_parser import FormatError, NoValidSamples, ZeroHeightRange


def _header(columns: int = 3, rows: int = 2) -> GridHeader:
    return GridHeader(columns=columns, rows=rows, x_min=0.0, x_max=90.0, y_min=0.0, y_max=40.0)


def test_elevation_endpoints():
    field = GridField(np.array([[0.0, 10.0, 20.0], [30.0, 1e30, 40.0]]))
    hf = normalize_heights(_header(), field, height_scale_factor=0.5, base_offset=2.0)

    assert hf.min_valid == 0.0
    assert hf.max_valid == 40.0
    assert hf.height_range == 40.0
    assert hf.vertical_scale == pytest.approx(90.0 / 40.0 * 0.5)
    assert hf.elevations[0, 0] == 2.0
    assert hf.elevations[1, 2] == pytest.approx(2.0 + 90.0 / 40.0 * 0.5 * 40.0)
    assert hf.top == pytest.approx(47.0)
    assert hf.elevation(20.0) == pytest.approx(2.0 + 20.0 * 1.125)


def test_span_uses_larger_extent():
    hdr = GridHeader(columns=2, rows=2, x_min=0.0, x_max=10.0, y_min=-50.0, y_max=50.0)
    field = GridField(np.array([[0.0, 1.0], [2.0, 4.0]]))
    hf = normalize_heights(hdr, field, height_scale_factor=1.0)
    assert hf.vertical_scale == pytest.approx(100.0 / 4.0)


def test_invalid_samples_sit_exactly_on_base_offset():
    values = np.array([[1.0, 1e30, -1e31], [np.nan, np.inf, 9.0]])
    hf = normalize_heights(_header(), GridField(values), height_scale_factor=0.3, base_offset=7.5)
    for r, c in [(0, 1), (0, 2), (1, 0), (1, 1)]:
        assert hf.elevations[r, c] == 7.5
    assert hf.null_count == 4
    assert hf.valid.tolist() == [[True, False, False], [False, False, True]]
    assert hf.min_valid == 1.0
    assert hf.max_valid == 9.0


def test_contour_interval_is_twentieth_of_range():
    field = GridField(np.array([[100.0, 120.0, 140.0], [160.0, 180.0, 200.0]]))
    hf = normalize_heights(_header(), field, height_scale_factor=0.3)
    assert hf.contour_interval == pytest.approx(5.0)


def test_no_valid_samples_raises():
    field = GridField(np.full((2, 3), 1e30))
    with pytest.raises(NoValidSamples) as exc:
        normalize_heights(_header(), field, height_scale_factor=0.3)
    assert isinstance(exc.value, FormatError)


def test_all_equal_samples_raise_zero_height_range():
    field = GridField(np.full((5, 10), 5.0))
    with pytest.raises(ZeroHeightRange) as exc:
        normalize_heights(_header(10, 5), field, height_scale_factor=0.3)
    assert exc.value.value == 5.0


def test_single_valid_value_among_nulls_is_zero_range():
    field = GridField(np.array([[5.0, 1e30, 5.0], [1e30, 5.0, 1e30]]))
    with pytest.raises(ZeroHeightRange):
        normalize_heights(_header(), field, height_scale_factor=0.3)


@pytest.mark.parametrize("factor", [0.0, -0.1, math.nan])
def test_height_scale_factor_must_be_positive(factor):
    field = GridField(np.array([[0.0, 1.0, 2.0], [3.0, 4.0, 5.0]]))
    with pytest.raises(ValueError):
        normalize_heights(_header(), field, height_scale_factor=factor)


def test_field_shape_must_match_header():
    field = GridField(np.zeros((3, 3)))
    with pytest.raises(ValueError):
        normalize_heights(_header(), field, height_scale_factor=0.3)


def test_elevations_are_read_only():
    field = GridField(np.array([[0.0, 1.0, 2.0], [3.0, 4.0, 5.0]]))
    hf = normalize_heights(_header(), field, height_scale_factor=0.3)
    with pytest.raises(ValueError):
        hf.elevations[0, 0] = 1.0


def test_valid_extrema_ignores_nulls():
    field = GridField(np.array([[-1e30, -3.0, 2.0], [1e30, 8.0, np.nan]]))
    lo, hi, mask = valid_extrema(field, 1e30)
    assert (lo, hi) == (-3.0, 8.0)
    assert int(mask.sum()) == 3
