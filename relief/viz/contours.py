from __future__ import annotations

from typing import List, Tuple

import numpy as np

from relief.models.heights import HeightField


RGB = Tuple[float, float, float]

CONTOUR_LINE_COLOR: RGB = (0.12, 0.10, 0.08)
NULL_COLOR: RGB = (0.55, 0.55, 0.55)

# Band edges over normalized height. Between neighbouring stops exactly two
# channels move and the third is held.
BAND_THRESHOLDS: Tuple[float, ...] = (0.0, 0.2, 0.4, 0.6, 0.8, 1.0)
BAND_STOPS: Tuple[RGB, ...] = (
    (0.0, 0.0, 0.5),    # dark blue
    (0.0, 1.0, 1.0),    # cyan
    (0.0, 0.7, 0.0),    # green
    (1.0, 0.55, 0.0),   # orange
    (1.0, 0.8, 0.2),    # yellow
    (1.0, 0.95, 0.6),   # pale yellow
)


def contour_interval(height_range: float, bands: int = 20) -> float:
    return float(height_range) / int(bands)


def contour_width(base_width: float, viewer_distance: float, reference_distance: float) -> float:
    """Line half-width in height units, scaled so lines keep a constant screen thickness."""
    if reference_distance <= 0.0:
        return float(base_width)
    return float(base_width) * (float(viewer_distance) / float(reference_distance))


def is_contour_line(h: float, interval: float, width: float) -> bool:
    if interval <= 0.0:
        return False
    m = float(h) % interval
    return m < width or m > interval - width


def band_fill(normalized: float) -> RGB:
    t = min(max(float(normalized), 0.0), 1.0)
    for k in range(len(BAND_THRESHOLDS) - 1):
        lo, hi = BAND_THRESHOLDS[k], BAND_THRESHOLDS[k + 1]
        if t <= hi or k == len(BAND_THRESHOLDS) - 2:
            u = (t - lo) / (hi - lo)
            a, b = BAND_STOPS[k], BAND_STOPS[k + 1]
            return (
                a[0] + (b[0] - a[0]) * u,
                a[1] + (b[1] - a[1]) * u,
                a[2] + (b[2] - a[2]) * u,
            )
    return BAND_STOPS[-1]


def band_color(h: float, min_valid: float, max_valid: float, interval: float, width: float) -> RGB:
    """Color of one rendered point at raw height `h`."""
    if is_contour_line(h, interval, width):
        return CONTOUR_LINE_COLOR
    height_range = max_valid - min_valid
    normalized = (float(h) - min_valid) / height_range if height_range > 0.0 else 0.0
    return band_fill(normalized)


def band_colors(
    heights: np.ndarray,
    min_valid: float,
    max_valid: float,
    interval: float,
    width: float,
    valid: np.ndarray | None = None,
) -> np.ndarray:
    """Vectorised band_color; returns float32 RGB with a trailing axis of 3."""
    h = np.asarray(heights, dtype=float)
    height_range = max_valid - min_valid
    t = np.clip((h - min_valid) / height_range, 0.0, 1.0) if height_range > 0.0 else np.zeros_like(h)

    stops = np.asarray(BAND_STOPS, dtype=float)
    out = np.empty(h.shape + (3,), dtype=np.float32)
    for c in range(3):
        out[..., c] = np.interp(t, BAND_THRESHOLDS, stops[:, c])

    if interval > 0.0:
        with np.errstate(invalid="ignore"):
            m = np.mod(h, interval)
            line = (m < width) | (m > interval - width)
        out[line] = CONTOUR_LINE_COLOR
    if valid is not None:
        out[~np.asarray(valid, dtype=bool)] = NULL_COLOR
    return out


def contour_levels(min_valid: float, max_valid: float, interval: float) -> List[float]:
    """Multiples of `interval` inside [min_valid, max_valid]."""
    if interval <= 0.0 or max_valid <= min_valid:
        return [float(min_valid)]
    first = np.ceil(min_valid / interval) * interval
    n = int(np.floor((max_valid - first) / interval + 1e-9)) + 1
    return [float(first + k * interval) for k in range(max(n, 0))]


def legend_entries(heights: HeightField, count: int = 6) -> List[Tuple[float, RGB]]:
    """Evenly spaced (raw value, fill color) pairs from min_valid to max_valid."""
    n = max(2, int(count))
    out: List[Tuple[float, RGB]] = []
    for k in range(n):
        t = k / (n - 1)
        out.append((heights.min_valid + t * heights.height_range, band_fill(t)))
    return out
