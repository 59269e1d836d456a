from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


NULL_VALUE = 1e30


@dataclass(frozen=True)
class GridHeader:
    columns: int
    rows: int
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    null_value: float = NULL_VALUE
    line_no: int = 0                     # 1-indexed grid info line, 0 when built in code

    @property
    def x_step(self) -> float:
        return (self.x_max - self.x_min) / (self.columns - 1)

    @property
    def y_step(self) -> float:
        return (self.y_max - self.y_min) / (self.rows - 1)

    @property
    def span(self) -> float:
        return max(self.x_max - self.x_min, self.y_max - self.y_min)

    @property
    def sample_count(self) -> int:
        return self.rows * self.columns


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, dtype=float, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class GridField:
    # Shape: [rows][columns], row 0 = first data row after the terminator
    values: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.values, dtype=float)
        if arr.ndim != 2:
            raise ValueError(f"GridField needs a 2D array, got {arr.ndim}D")
        object.__setattr__(self, "values", _frozen(arr))

    @classmethod
    def from_flat(cls, flat: Sequence[float], rows: int, columns: int) -> "GridField":
        arr = np.asarray(flat, dtype=float).reshape(-1)
        if arr.size != int(rows) * int(columns):
            raise ValueError(f"flat size {arr.size} does not match rows*columns={int(rows) * int(columns)}")
        return cls(arr.reshape(int(rows), int(columns)))

    @property
    def rows(self) -> int:
        return int(self.values.shape[0])

    @property
    def columns(self) -> int:
        return int(self.values.shape[1])

    def __getitem__(self, idx):
        return self.values[idx]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridField):
            return NotImplemented
        return self.values.shape == other.values.shape and bool(
            np.array_equal(self.values, other.values, equal_nan=True)
        )

    def flatten(self) -> np.ndarray:
        return self.values.reshape(-1).copy()

    def valid_mask(self, null_value: float = NULL_VALUE) -> np.ndarray:
        """True where a sample is finite and strictly below the null threshold in magnitude."""
        with np.errstate(invalid="ignore"):
            return np.isfinite(self.values) & (np.abs(self.values) < null_value)

    def null_cells(self, null_value: float = NULL_VALUE) -> Tuple[Tuple[int, int], ...]:
        rr, cc = np.nonzero(~self.valid_mask(null_value))
        return tuple((int(r), int(c)) for r, c in zip(rr, cc))

    def null_count(self, null_value: float = NULL_VALUE) -> int:
        return int(np.count_nonzero(~self.valid_mask(null_value)))
