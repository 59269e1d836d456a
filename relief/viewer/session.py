"""
Relief Viewer Session

Owns everything the viewer shows: the active grid snapshot, the settings
and the camera. A load either replaces the snapshot in one step or raises
and leaves the current one in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from relief.config import ViewerSettings
from relief.models.grid import GridField, GridHeader
from relief.models.heights import HeightField
from relief.models.validation import ValidationReport
from relief.parser.grid_parser import ParsedGrid, parse_grid_text
from relief.parser.pipeline import analyse_grid
from relief.validation.defaults import default_validator
from relief.viewer.camera import Camera
from relief.viewer.mesh import Mesh, create_terrain_mesh
from relief.viz.contours import contour_width

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridSnapshot:
    doc: ParsedGrid
    heights: HeightField
    report: ValidationReport
    mesh: Mesh
    reference_distance: float           # camera distance captured at load
    base_contour_width: float           # height units at reference_distance

    @property
    def header(self) -> GridHeader:
        return self.doc.header

    @property
    def field(self) -> GridField:
        return self.doc.field


@dataclass(frozen=True)
class FrameUniforms:
    min_height: float
    max_height: float
    contour_interval: float
    contour_width: float


class ViewerSession:
    def __init__(
        self,
        settings: Optional[ViewerSettings] = None,
        on_release: Optional[Callable[[GridSnapshot], None]] = None,
    ) -> None:
        self.settings = settings or ViewerSettings()
        self.settings.validate()
        self.camera = Camera()
        self.on_release = on_release
        self._active: Optional[GridSnapshot] = None

    @property
    def active(self) -> Optional[GridSnapshot]:
        return self._active

    # ---------- loading ----------
    def load_text(self, text: str, source_path: str | Path | None = None) -> GridSnapshot:
        doc = parse_grid_text(text, source_path=source_path, marker=self.settings.grid_marker)
        snap = self._build(doc, self.settings, reference_distance=None)
        self._swap(snap)
        logger.info(
            f"Loaded {doc.header.columns}x{doc.header.rows} grid"
            + (f" from {doc.source}" if doc.source else "")
        )
        return snap

    def load_file(self, path: str | Path) -> GridSnapshot:
        p = Path(path).expanduser().resolve()
        text = p.read_text(encoding="utf-8", errors="replace")
        return self.load_text(text, source_path=p)

    # ---------- parameters ----------
    def set_height_scale(self, height_scale_factor: float) -> Optional[GridSnapshot]:
        """Rebuild the active snapshot with a new vertical exaggeration; camera is kept."""
        settings = self.settings.with_changes(height_scale_factor=float(height_scale_factor))
        snap = None
        if self._active is not None:
            snap = self._build(self._active.doc, settings, reference_distance=self._active.reference_distance)
            self._swap(snap)
        self.settings = settings
        return snap

    def set_view_mode(self, view_mode: str) -> None:
        settings = self.settings.with_changes(view_mode=view_mode)
        self.camera.apply_view_mode(view_mode)
        self.settings = settings

    def reset_camera(self) -> None:
        if self._active is None:
            self.camera = Camera()
            return
        lo, hi = self._active.mesh.get_bounds()
        self.camera.fit_to_bounds(lo, hi, self.settings.view_mode)

    # ---------- per frame ----------
    def contour_width(self) -> float:
        if self._active is None:
            return 0.0
        return contour_width(
            self._active.base_contour_width,
            self.camera.distance,
            self._active.reference_distance,
        )

    def frame_uniforms(self) -> Optional[FrameUniforms]:
        snap = self._active
        if snap is None:
            return None
        return FrameUniforms(
            min_height=snap.heights.min_valid,
            max_height=snap.heights.max_valid,
            contour_interval=snap.heights.contour_interval,
            contour_width=self.contour_width(),
        )

    def close(self) -> None:
        prev, self._active = self._active, None
        if prev is not None and self.on_release is not None:
            self.on_release(prev)

    # ---------- internals ----------
    def _build(self, doc: ParsedGrid, settings: ViewerSettings, reference_distance: Optional[float]) -> GridSnapshot:
        heights = analyse_grid(
            doc,
            settings.height_scale_factor,
            base_offset=settings.base_offset,
            contour_bands=settings.contour_bands,
        )
        report = default_validator().run(doc, heights)
        mesh = create_terrain_mesh(doc.header, doc.field, heights)

        if reference_distance is None:
            lo, hi = mesh.get_bounds()
            self.camera.fit_to_bounds(lo, hi, settings.view_mode)
            reference_distance = self.camera.distance

        return GridSnapshot(
            doc=doc,
            heights=heights,
            report=report,
            mesh=mesh,
            reference_distance=float(reference_distance),
            base_contour_width=settings.base_contour_width * heights.height_range,
        )

    def _swap(self, snap: GridSnapshot) -> None:
        prev, self._active = self._active, snap
        if prev is not None and self.on_release is not None:
            self.on_release(prev)
