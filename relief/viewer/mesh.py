"""
Relief Terrain Mesh

Triangle mesh built from a normalized height field, ready for GPU upload.
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from relief.models.grid import GridField, GridHeader
from relief.models.heights import HeightField


@dataclass
class Mesh:
    """
    Terrain mesh for OpenGL rendering.

    `heights` carries the raw sample per vertex so banding and contour lines
    are evaluated in data units by the fragment shader.
    """
    vertices: np.ndarray  # Nx3 float32, rendering units
    normals: np.ndarray   # Nx3 float32
    heights: np.ndarray   # N float32, raw sample (min_valid for null cells)
    valid: np.ndarray     # N float32, 1.0 valid / 0.0 null
    indices: np.ndarray   # Mx3 uint32

    # OpenGL buffer IDs (set during upload)
    vao: int = 0
    vbos: Tuple[int, ...] = ()
    ebo: int = 0

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_indices(self) -> int:
        return int(self.indices.size)

    @property
    def uploaded(self) -> bool:
        return self.vao != 0

    def attribute_arrays(self) -> Tuple[Tuple[np.ndarray, int], ...]:
        """(data, components) in vertex attribute location order."""
        return (
            (self.vertices, 3),
            (self.normals, 3),
            (self.heights, 1),
            (self.valid, 1),
        )

    def get_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Get bounding box (min, max)."""
        return self.vertices.min(axis=0), self.vertices.max(axis=0)


def grid_coordinates(header: GridHeader) -> Tuple[np.ndarray, np.ndarray]:
    """X per column and Y per row; row 0 lies on y_max."""
    xs = header.x_min + np.arange(header.columns, dtype=float) * header.x_step
    ys = header.y_max - np.arange(header.rows, dtype=float) * header.y_step
    return xs, ys


def grid_triangles(rows: int, columns: int) -> np.ndarray:
    """Two counter-clockwise (seen from +Z) triangles per cell, row-major vertex order."""
    r, c = np.meshgrid(np.arange(rows - 1), np.arange(columns - 1), indexing="ij")
    i00 = (r * columns + c).reshape(-1)
    i01 = i00 + 1
    i10 = i00 + columns
    i11 = i10 + 1
    # row index grows towards -Y, so (i00, i10, i11) winds counter-clockwise
    tris = np.stack([
        np.stack([i00, i10, i11], axis=1),
        np.stack([i00, i11, i01], axis=1),
    ], axis=1)
    return tris.reshape(-1, 3).astype(np.uint32)


def surface_normals(elevations: np.ndarray, x_step: float, y_step: float) -> np.ndarray:
    z = np.asarray(elevations, dtype=float)
    dz_drow, dz_dcol = np.gradient(z)
    dzdx = dz_dcol / x_step
    dzdy = -dz_drow / y_step
    n = np.stack([-dzdx, -dzdy, np.ones_like(z)], axis=-1)
    n /= np.linalg.norm(n, axis=-1, keepdims=True)
    return n.reshape(-1, 3).astype(np.float32)


def create_terrain_mesh(header: GridHeader, field: GridField, heights: HeightField) -> Mesh:
    """Create the surface mesh: one vertex per sample, null cells flat at base_offset."""
    if field.values.shape != (header.rows, header.columns):
        raise ValueError(f"field shape {field.values.shape} does not match header {header.rows}x{header.columns}")

    xs, ys = grid_coordinates(header)
    gx, gy = np.meshgrid(xs, ys, indexing="xy")
    vertices = np.stack([gx, gy, heights.elevations], axis=-1).reshape(-1, 3).astype(np.float32)

    normals = surface_normals(heights.elevations, header.x_step, header.y_step)

    raw = np.where(heights.valid, field.values, heights.min_valid)

    return Mesh(
        vertices=vertices,
        normals=normals,
        heights=raw.reshape(-1).astype(np.float32),
        valid=heights.valid.reshape(-1).astype(np.float32),
        indices=grid_triangles(header.rows, header.columns),
    )
