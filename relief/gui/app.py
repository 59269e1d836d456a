from __future__ import annotations

import logging
import math
import traceback
from pathlib import Path
from typing import Optional, Tuple

from PySide6 import QtCore, QtGui, QtWidgets

from relief.config import HEIGHT_SCALE_MAX, HEIGHT_SCALE_MIN, ViewerSettings, height_scale_bounds
from relief.parser.grid_parser import FormatError
from relief.viewer.session import GridSnapshot, ViewerSession
from relief.viewer.widget import ReliefGLWidget
from relief.viz.contours import legend_entries

logger = logging.getLogger(__name__)


GRID_SUFFIXES = (".grd", ".zmap", ".zmp", ".dat", ".txt")
SCALE_STEPS = 100                        # slider ticks per unit of height_scale_factor


def _fmt(val) -> str:
    if val is None:
        return "-"
    if isinstance(val, float):
        return f"{val:g}"
    return str(val)


def scale_slider_range(height_scale_factor: float) -> Tuple[int, int]:
    lo, hi = height_scale_bounds(height_scale_factor)
    return max(1, math.floor(round(lo * SCALE_STEPS, 6))), math.ceil(round(hi * SCALE_STEPS, 6))


def camera_status_text(distance: float, contour_width: float) -> str:
    return f"Camera distance {distance:.4g}  |  contour half-width {contour_width:.4g}"


class ReliefMainWindow(QtWidgets.QMainWindow):
    def __init__(self, settings: Optional[ViewerSettings] = None) -> None:
        super().__init__()
        self.setWindowTitle("Relief View")
        self.resize(1200, 780)

        self.session = ViewerSession(settings)
        self.current_file: Optional[Path] = None

        self._build_ui()
        self._wire_actions()

        self.setAcceptDrops(True)
        self.status.showMessage("Ready (tip: drag & drop a grid file here)", 5000)

    # ---------- Drag & Drop ----------
    def dragEnterEvent(self, event: QtGui.QDragEnterEvent) -> None:
        md = event.mimeData()
        if md.hasUrls() and any(self._is_grid_url(u) for u in md.urls()):
            event.acceptProposedAction()
            return
        event.ignore()

    def dragMoveEvent(self, event: QtGui.QDragMoveEvent) -> None:
        md = event.mimeData()
        if md.hasUrls() and any(self._is_grid_url(u) for u in md.urls()):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event: QtGui.QDropEvent) -> None:
        md = event.mimeData()
        if not md.hasUrls():
            event.ignore()
            return

        for url in md.urls():
            if not self._is_grid_url(url):
                continue
            p = Path(url.toLocalFile())
            if p.exists() and p.is_file():
                self.load_grid(p)
                event.acceptProposedAction()
                return

        self.status.showMessage("Drop ignored: please drop a local grid file", 5000)
        event.ignore()

    @staticmethod
    def _is_grid_url(url: QtCore.QUrl) -> bool:
        if not url.isLocalFile():
            return False
        p = url.toLocalFile()
        return bool(p) and p.lower().endswith(GRID_SUFFIXES)

    # ---------- UI ----------
    def _build_ui(self) -> None:
        menubar = self.menuBar()
        file_menu = menubar.addMenu("&File")

        self.act_open = QtGui.QAction("&Open grid…", self)
        self.act_open.setShortcut(QtGui.QKeySequence.Open)
        file_menu.addAction(self.act_open)

        file_menu.addSeparator()

        self.act_quit = QtGui.QAction("&Quit", self)
        self.act_quit.setShortcut(QtGui.QKeySequence.Quit)
        file_menu.addAction(self.act_quit)

        view_menu = menubar.addMenu("&View")
        self.act_fit = QtGui.QAction("&Fit to grid", self)
        self.act_fit.setShortcut("F")
        view_menu.addAction(self.act_fit)

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)

        root = QtWidgets.QHBoxLayout(central)
        root.setContentsMargins(10, 10, 10, 10)
        root.setSpacing(10)

        # Left: controls and info
        left = QtWidgets.QVBoxLayout()
        left.setSpacing(10)

        self.lbl_file = QtWidgets.QLabel("No file loaded.\n(Drag & drop a grid file here)")
        self.lbl_file.setWordWrap(True)
        self.lbl_file.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        left.addWidget(self._card("Loaded file", self.lbl_file))

        controls = QtWidgets.QWidget()
        form = QtWidgets.QFormLayout(controls)
        self.sld_scale = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        factor = self.session.settings.height_scale_factor
        if not HEIGHT_SCALE_MIN <= factor <= HEIGHT_SCALE_MAX:
            logger.warning(f"Height scale {factor:g} is outside {HEIGHT_SCALE_MIN:g}-{HEIGHT_SCALE_MAX:g}; widening the slider")
        self.sld_scale.setRange(*scale_slider_range(factor))
        self.sld_scale.setValue(int(round(self.session.settings.height_scale_factor * SCALE_STEPS)))
        self.lbl_scale = QtWidgets.QLabel(_fmt(self.session.settings.height_scale_factor))
        scale_row = QtWidgets.QHBoxLayout()
        scale_row.addWidget(self.sld_scale)
        scale_row.addWidget(self.lbl_scale)
        form.addRow("Height scale", scale_row)

        self.cmb_view = QtWidgets.QComboBox()
        self.cmb_view.addItem("3D", "3d")
        self.cmb_view.addItem("Top", "top")
        self.cmb_view.setCurrentIndex(max(self.cmb_view.findData(self.session.settings.view_mode), 0))
        form.addRow("View", self.cmb_view)
        left.addWidget(self._card("Display", controls))

        self.tbl_meta = self._make_table(["Field", "Value"])
        left.addWidget(self._card("Grid", self.tbl_meta))

        self.tbl_legend = self._make_table(["Height", "Color"])
        left.addWidget(self._card("Legend", self.tbl_legend))

        self.tbl_findings = self._make_table(["Severity", "Rule", "Message"])
        left.addWidget(self._card("Validation findings", self.tbl_findings))

        left_wrap = QtWidgets.QWidget()
        left_wrap.setLayout(left)

        self.gl = ReliefGLWidget(self.session)

        splitter = QtWidgets.QSplitter(QtCore.Qt.Horizontal)
        splitter.addWidget(left_wrap)
        splitter.addWidget(self.gl)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 3)
        root.addWidget(splitter)

        self.status = self.statusBar()
        self.status.showMessage("Ready")

    def _make_table(self, headers) -> QtWidgets.QTableWidget:
        table = QtWidgets.QTableWidget(0, len(headers))
        table.setHorizontalHeaderLabels(headers)
        table.horizontalHeader().setStretchLastSection(True)
        table.verticalHeader().setVisible(False)
        table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        table.setSelectionMode(QtWidgets.QAbstractItemView.NoSelection)
        return table

    def _card(self, title: str, widget: QtWidgets.QWidget) -> QtWidgets.QGroupBox:
        box = QtWidgets.QGroupBox(title)
        lay = QtWidgets.QVBoxLayout(box)
        lay.setContentsMargins(8, 8, 8, 8)
        lay.addWidget(widget)
        return box

    def _wire_actions(self) -> None:
        self.act_open.triggered.connect(self.open_file_dialog)
        self.act_quit.triggered.connect(self.close)
        self.act_fit.triggered.connect(self.gl.fit_view)
        self.sld_scale.valueChanged.connect(self._on_scale_changed)
        self.cmb_view.currentIndexChanged.connect(self._on_view_changed)
        self.gl.camera_changed.connect(self._on_camera_changed)

    # ---------- Actions ----------
    def open_file_dialog(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Open grid file",
            str(Path.cwd()),
            "Grid files (*.grd *.zmap *.zmp *.dat *.txt);;All files (*.*)",
        )
        if not path:
            return
        self.load_grid(Path(path))

    def _on_scale_changed(self, value: int) -> None:
        factor = value / SCALE_STEPS
        self.lbl_scale.setText(_fmt(factor))
        self.gl.set_height_scale(factor)
        if self.session.active is not None:
            self._render_all(self.session.active)

    def _on_view_changed(self, index: int) -> None:
        self.gl.set_view_mode(self.cmb_view.itemData(index))

    def _on_camera_changed(self, distance: float) -> None:
        self.status.showMessage(camera_status_text(distance, self.session.contour_width()), 3000)

    # ---------- Core ----------
    def load_grid(self, path: Path) -> None:
        try:
            snap = self.session.load_file(path)
        except (FormatError, OSError) as e:
            # session keeps the previous grid on screen
            logger.error(f"Failed to load {path}: {e}")
            self._show_error("Failed to load grid", e)
            return

        self.current_file = path
        self._render_all(snap)
        self.gl.update()
        self.status.showMessage("Loaded successfully", 4000)

    def _render_all(self, snap: GridSnapshot) -> None:
        self.lbl_file.setText(str(self.current_file) if self.current_file else "-")
        self._fill_metadata_table(snap)
        self._fill_legend_table(snap)
        self._fill_findings_table(snap)

    # ---------- Rendering helpers ----------
    def _fill_metadata_table(self, snap: GridSnapshot) -> None:
        hdr = snap.header
        hf = snap.heights
        rows = [
            ("Columns x rows", f"{hdr.columns} x {hdr.rows}"),
            ("X range", f"{_fmt(hdr.x_min)} → {_fmt(hdr.x_max)} (step {_fmt(hdr.x_step)})"),
            ("Y range", f"{_fmt(hdr.y_min)} → {_fmt(hdr.y_max)} (step {_fmt(hdr.y_step)})"),
            ("Min height", _fmt(hf.min_valid)),
            ("Max height", _fmt(hf.max_valid)),
            ("Height range", _fmt(hf.height_range)),
            ("Vertical scale", _fmt(hf.vertical_scale)),
            ("Contour interval", _fmt(hf.contour_interval)),
            ("Null cells", _fmt(hf.null_count)),
        ]
        self._set_rows(self.tbl_meta, rows)

    def _fill_legend_table(self, snap: GridSnapshot) -> None:
        self.tbl_legend.setRowCount(0)
        for value, rgb in reversed(legend_entries(snap.heights)):
            r = self.tbl_legend.rowCount()
            self.tbl_legend.insertRow(r)
            self._set_cell(self.tbl_legend, r, 0, _fmt(value))
            swatch = QtWidgets.QTableWidgetItem("")
            swatch.setBackground(QtGui.QColor.fromRgbF(*rgb))
            self.tbl_legend.setItem(r, 1, swatch)

    def _fill_findings_table(self, snap: GridSnapshot) -> None:
        findings = snap.report.findings
        if not findings:
            self._set_rows(self.tbl_findings, [("INFO", "-", "No validation findings were produced.")])
            return
        self._set_rows(self.tbl_findings, [(f.severity, f.id, f.message) for f in findings])

    def _set_rows(self, table: QtWidgets.QTableWidget, rows) -> None:
        table.setRowCount(0)
        for row in rows:
            r = table.rowCount()
            table.insertRow(r)
            for c, text in enumerate(row):
                self._set_cell(table, r, c, str(text))
        table.resizeColumnsToContents()
        table.horizontalHeader().setStretchLastSection(True)

    def _set_cell(self, table: QtWidgets.QTableWidget, r: int, c: int, text: str) -> None:
        item = QtWidgets.QTableWidgetItem(text)
        item.setFlags(item.flags() & ~QtCore.Qt.ItemIsEditable)
        table.setItem(r, c, item)

    # ---------- Error handling ----------
    def _show_error(self, title: str, exc: Exception) -> None:
        msg = QtWidgets.QMessageBox(self)
        msg.setIcon(QtWidgets.QMessageBox.Critical)
        msg.setWindowTitle(title)
        msg.setText(str(exc))
        msg.setDetailedText(traceback.format_exc())
        msg.exec()
        self.status.showMessage(title, 6000)


def run(path: Optional[Path] = None, settings: Optional[ViewerSettings] = None) -> int:
    app = QtWidgets.QApplication([])
    w = ReliefMainWindow(settings)
    w.show()
    if path is not None:
        w.load_grid(Path(path))
    return app.exec()
