from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class HeightField:
    # Shape matches the source GridField: [rows][columns], rendering units
    elevations: np.ndarray
    valid: np.ndarray                    # bool mask, same shape

    min_valid: float
    max_valid: float
    height_range: float
    vertical_scale: float
    base_offset: float
    height_scale_factor: float
    contour_interval: float
    null_count: int

    def elevation(self, value: float) -> float:
        """Map one raw sample to rendering units (no null check)."""
        return (float(value) - self.min_valid) * self.vertical_scale + self.base_offset

    @property
    def top(self) -> float:
        return self.elevation(self.max_valid)
