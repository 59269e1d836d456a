"""
Relief 3D Viewer Module

Terrain session state, camera and mesh building. The OpenGL renderer and the
Qt widget live in relief.viewer.renderer / relief.viewer.widget and are not
imported here so the session can be used without a display.
"""

from relief.viewer.camera import Camera
from relief.viewer.mesh import (
    Mesh,
    create_terrain_mesh,
    grid_coordinates,
    grid_triangles,
)
from relief.viewer.session import FrameUniforms, GridSnapshot, ViewerSession

__all__ = [
    "Camera",
    "Mesh",
    "create_terrain_mesh",
    "grid_coordinates",
    "grid_triangles",
    "FrameUniforms",
    "GridSnapshot",
    "ViewerSession",
]
