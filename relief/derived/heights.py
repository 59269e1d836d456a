from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from relief.models.grid import GridField, GridHeader
from relief.models.heights import HeightField
from relief.parser.grid_parser import NoValidSamples, ZeroHeightRange

logger = logging.getLogger(__name__)


CONTOUR_BANDS = 20


def valid_extrema(field: GridField, null_value: float) -> Tuple[float, float, np.ndarray]:
    """
    Min/max over valid samples only.
    Returns: (min_valid, max_valid, valid_mask)
    """
    valid = field.valid_mask(null_value)
    if not valid.any():
        raise NoValidSamples(f"no valid samples: all {field.values.size} samples are null or non-finite")
    vals = field.values[valid]
    return float(vals.min()), float(vals.max()), valid


def normalize_heights(
    header: GridHeader,
    field: GridField,
    height_scale_factor: float,
    base_offset: float = 0.0,
    contour_bands: int = CONTOUR_BANDS,
) -> HeightField:
    """
    Map raw samples to rendering units.

    vertical_scale = span / height_range * height_scale_factor, where span is the
    larger horizontal extent. Valid samples land in [base_offset, base_offset + span * factor];
    null samples sit flat at base_offset.
    """
    factor = float(height_scale_factor)
    if not np.isfinite(factor) or factor <= 0.0:
        raise ValueError(f"height_scale_factor must be > 0, got {height_scale_factor!r}")
    if int(contour_bands) < 1:
        raise ValueError(f"contour_bands must be >= 1, got {contour_bands!r}")
    if field.values.shape != (header.rows, header.columns):
        raise ValueError(f"field shape {field.values.shape} does not match header {header.rows}x{header.columns}")

    min_valid, max_valid, valid = valid_extrema(field, header.null_value)
    height_range = max_valid - min_valid
    if height_range == 0.0:
        raise ZeroHeightRange(f"zero height range: every valid sample equals {min_valid:g}", value=min_valid)

    vertical_scale = header.span / height_range * factor

    elevations = np.full(field.values.shape, float(base_offset), dtype=float)
    elevations[valid] = (field.values[valid] - min_valid) * vertical_scale + base_offset
    elevations.setflags(write=False)
    valid = valid.copy()
    valid.setflags(write=False)

    null_count = int(valid.size - np.count_nonzero(valid))
    logger.debug(
        f"Normalized heights: min={min_valid:g} max={max_valid:g} range={height_range:g} "
        f"scale={vertical_scale:g} null={null_count}"
    )
    return HeightField(
        elevations=elevations,
        valid=valid,
        min_valid=min_valid,
        max_valid=max_valid,
        height_range=height_range,
        vertical_scale=vertical_scale,
        base_offset=float(base_offset),
        height_scale_factor=factor,
        contour_interval=height_range / int(contour_bands),
        null_count=null_count,
    )
