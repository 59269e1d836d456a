"""
Relief 3D Camera Controller

Orbit camera for navigating terrain surfaces.
Supports orbit, pan, zoom and the "3d" / "top" view placements.
"""

import math
import numpy as np
from dataclasses import dataclass, field


@dataclass
class Camera:
    """
    Orbit camera around a target point, Z up.

    `distance` is what the contour shader uses to keep line thickness
    constant on screen.
    """
    target: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0]))

    distance: float = 10.0
    azimuth: float = 45.0    # degrees, 0 = looking from +Y
    elevation: float = 30.0  # degrees above the XY plane

    fov: float = 45.0
    near: float = 0.1
    far: float = 1000.0
    aspect: float = 1.0

    min_distance: float = 1.0
    max_distance: float = 500.0
    min_elevation: float = -89.0
    max_elevation: float = 89.0

    @property
    def position(self) -> np.ndarray:
        az = math.radians(self.azimuth)
        el = math.radians(self.elevation)

        x = self.distance * math.cos(el) * math.sin(az)
        y = self.distance * math.cos(el) * math.cos(az)
        z = self.distance * math.sin(el)

        return self.target + np.array([x, y, z])

    @property
    def up_vector(self) -> np.ndarray:
        return np.array([0.0, 0.0, 1.0])

    @property
    def forward_vector(self) -> np.ndarray:
        forward = self.target - self.position
        return forward / np.linalg.norm(forward)

    @property
    def right_vector(self) -> np.ndarray:
        right = np.cross(self.forward_vector, self.up_vector)
        return right / np.linalg.norm(right)

    def orbit(self, delta_azimuth: float, delta_elevation: float):
        self.azimuth += delta_azimuth
        self.elevation = float(np.clip(
            self.elevation + delta_elevation,
            self.min_elevation,
            self.max_elevation
        ))

    def pan(self, delta_x: float, delta_y: float):
        """Move the target in the view plane; deltas are in pixels."""
        right = self.right_vector
        up = np.cross(right, self.forward_vector)

        scale = self.distance * 0.002
        self.target = self.target + right * delta_x * scale + up * delta_y * scale

    def zoom(self, delta: float):
        factor = 1.0 - delta * 0.1
        self.distance = float(np.clip(
            self.distance * factor,
            self.min_distance,
            self.max_distance
        ))

    def fit_to_bounds(self, min_bound: np.ndarray, max_bound: np.ndarray, view_mode: str = "3d"):
        """Centre on the bounding box and rescale distance limits and clip planes to it."""
        min_bound = np.asarray(min_bound, dtype=float)
        max_bound = np.asarray(max_bound, dtype=float)
        center = (min_bound + max_bound) / 2
        size = max(float(np.linalg.norm(max_bound - min_bound)), 1e-6)

        self.target = center
        self.distance = size * 1.5
        self.min_distance = size * 0.05
        self.max_distance = size * 10.0
        self.near = size * 0.01
        self.far = size * 20.0
        self.apply_view_mode(view_mode)

    def apply_view_mode(self, view_mode: str):
        if view_mode == "top":
            self.azimuth = 0.0
            self.elevation = self.max_elevation
        elif view_mode == "3d":
            self.azimuth = 45.0
            self.elevation = 30.0
        else:
            raise ValueError(f"Unknown view mode: {view_mode!r}")

    def get_view_matrix(self) -> np.ndarray:
        """Get 4x4 view matrix."""
        pos = self.position
        target = self.target
        up = self.up_vector

        f = target - pos
        f = f / np.linalg.norm(f)

        s = np.cross(f, up)
        s = s / np.linalg.norm(s)

        u = np.cross(s, f)

        view = np.eye(4, dtype=np.float32)
        view[0, :3] = s
        view[1, :3] = u
        view[2, :3] = -f
        view[0, 3] = -np.dot(s, pos)
        view[1, 3] = -np.dot(u, pos)
        view[2, 3] = np.dot(f, pos)

        return view

    def get_projection_matrix(self) -> np.ndarray:
        """Get 4x4 perspective projection matrix."""
        f = 1.0 / math.tan(math.radians(self.fov) / 2)

        proj = np.zeros((4, 4), dtype=np.float32)
        proj[0, 0] = f / self.aspect
        proj[1, 1] = f
        proj[2, 2] = (self.far + self.near) / (self.near - self.far)
        proj[2, 3] = (2 * self.far * self.near) / (self.near - self.far)
        proj[3, 2] = -1.0

        return proj
