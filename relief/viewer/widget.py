"""
Relief Qt OpenGL Widget

PySide6 widget that draws the session's terrain with mouse controls.
"""

import logging
from typing import Optional

from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QMouseEvent, QWheelEvent
from PySide6.QtOpenGLWidgets import QOpenGLWidget

from relief.viewer.renderer import Renderer
from relief.viewer.session import GridSnapshot, ViewerSession

logger = logging.getLogger(__name__)


class ReliefGLWidget(QOpenGLWidget):
    """
    OpenGL widget for terrain visualization.

    Mouse controls:
    - Left drag: Orbit camera
    - Middle drag: Pan camera
    - Scroll: Zoom (contour lines keep their screen thickness)
    Keys: F fit, T top view, P perspective view
    """

    camera_changed = Signal(float)  # current camera distance

    def __init__(self, session: Optional[ViewerSession] = None, parent: QWidget = None):
        super().__init__(parent)

        self.renderer = Renderer()
        self.session = session or ViewerSession()
        self.session.on_release = self._release_snapshot

        self._last_mouse_pos = None
        self._mouse_button = None

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMinimumSize(400, 300)

    def initializeGL(self):
        self.renderer.initialize()
        self._sync_mesh()

    def resizeGL(self, width: int, height: int):
        self.renderer.resize(width, height, self.session.camera)

    def paintGL(self):
        self._sync_mesh()
        self.renderer.render(
            self.width(),
            self.height(),
            self.session.camera,
            self.session.frame_uniforms(),
        )

    def _sync_mesh(self):
        snap = self.session.active
        if snap is not None and self.renderer.initialized:
            self.renderer.set_mesh(snap.mesh)

    def _release_snapshot(self, snap: GridSnapshot):
        if not snap.mesh.uploaded:
            return
        self.makeCurrent()
        try:
            self.renderer.release_mesh(snap.mesh)
        finally:
            self.doneCurrent()

    def mousePressEvent(self, event: QMouseEvent):
        self._last_mouse_pos = event.position()
        self._mouse_button = event.button()

    def mouseReleaseEvent(self, event: QMouseEvent):
        self._last_mouse_pos = None
        self._mouse_button = None

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._last_mouse_pos is None:
            return

        pos = event.position()
        dx = pos.x() - self._last_mouse_pos.x()
        dy = pos.y() - self._last_mouse_pos.y()

        if self._mouse_button == Qt.LeftButton:
            self.session.camera.orbit(-dx * 0.5, dy * 0.5)
        elif self._mouse_button == Qt.MiddleButton:
            self.session.camera.pan(-dx, dy)

        self._last_mouse_pos = pos
        self.update()

    def wheelEvent(self, event: QWheelEvent):
        delta = event.angleDelta().y() / 120.0
        self.session.camera.zoom(delta)
        self.camera_changed.emit(self.session.camera.distance)
        self.update()

    def keyPressEvent(self, event):
        key = event.key()

        if key == Qt.Key_F:
            self.fit_view()
        elif key == Qt.Key_T:
            self.set_view_mode("top")
        elif key == Qt.Key_P:
            self.set_view_mode("3d")
        else:
            super().keyPressEvent(event)

    # Public API

    def fit_view(self):
        self.session.reset_camera()
        self.camera_changed.emit(self.session.camera.distance)
        self.update()

    def set_view_mode(self, view_mode: str):
        self.session.set_view_mode(view_mode)
        self.update()

    def set_height_scale(self, factor: float):
        self.session.set_height_scale(factor)
        self.update()
