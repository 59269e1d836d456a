from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import numpy as np

from relief.config import ViewerSettings, load_settings
from relief.logging_config import setup_logging
from relief.parser.grid_parser import FormatError
from relief.parser.pipeline import ReliefViewResult, parse_and_analyse_grid
from relief.viz.falsecolor import render_relief_plane

logger = logging.getLogger(__name__)


def demo_grid_text(columns: int = 40, rows: int = 30, null_every: int = 97) -> str:
    """Two smooth hills and a basin on a 400 x 300 extent, with sparse null cells."""
    x = np.linspace(0.0, 400.0, columns)
    y = np.linspace(300.0, 0.0, rows)
    gx, gy = np.meshgrid(x, y)
    z = (
        120.0 * np.exp(-((gx - 120.0) ** 2 + (gy - 200.0) ** 2) / 6000.0)
        + 80.0 * np.exp(-((gx - 300.0) ** 2 + (gy - 90.0) ** 2) / 4000.0)
        - 40.0 * np.exp(-((gx - 260.0) ** 2 + (gy - 230.0) ** 2) / 3000.0)
        + 500.0
    )
    flat = z.reshape(-1)
    if null_every > 0:
        flat[::null_every] = 1.0e30

    lines = [
        "! Relief demo grid",
        "@Grid HEADER, GRID, 5",
        "15, 1.0E+30, , 7, 1",
        f"{columns}, {rows}, 0, 400, 0, 300",
        "0.0, 0.0, 0.0",
        "@",
    ]
    for i in range(0, flat.size, 5):
        lines.append(" ".join(f"{v:.7g}" for v in flat[i:i + 5]))
    return "\n".join(lines) + "\n"


def _settings_from_args(args: argparse.Namespace) -> ViewerSettings:
    settings = load_settings(args.config) if args.config else ViewerSettings()
    if getattr(args, "scale", None) is not None:
        settings = settings.with_changes(height_scale_factor=float(args.scale))
    return settings


def _load(args: argparse.Namespace, settings: ViewerSettings) -> ReliefViewResult | int:
    path = Path(args.file).expanduser().resolve()
    if not path.exists():
        print(f"[ERROR] File not found: {path}")
        return 2
    if not path.is_file():
        print(f"[ERROR] Not a file: {path}")
        return 2

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"[ERROR] Cannot read {path}: {e}")
        return 2

    try:
        return parse_and_analyse_grid(
            text,
            settings.height_scale_factor,
            source_path=path,
            base_offset=settings.base_offset,
            contour_bands=settings.contour_bands,
            marker=settings.grid_marker,
        )
    except FormatError as e:
        logger.debug(f"Load failed: {e!r}")
        print(f"[ERROR] {e}")
        return 3


def _cmd_demo(args: argparse.Namespace) -> int:
    outpath = Path(args.out).expanduser().resolve()
    outpath.parent.mkdir(parents=True, exist_ok=True)
    outpath.write_text(demo_grid_text(args.columns, args.rows), encoding="utf-8")
    print(f"Saved demo grid to: {outpath}")
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    res = _load(args, _settings_from_args(args))
    if isinstance(res, int):
        return res

    hdr = res.doc.header
    hf = res.heights
    if args.json:
        payload = {
            "file": res.doc.source,
            "header": {
                "columns": hdr.columns,
                "rows": hdr.rows,
                "x_min": hdr.x_min,
                "x_max": hdr.x_max,
                "y_min": hdr.y_min,
                "y_max": hdr.y_max,
                "x_step": hdr.x_step,
                "y_step": hdr.y_step,
            },
            "heights": {
                "min": hf.min_valid,
                "max": hf.max_valid,
                "range": hf.height_range,
                "vertical_scale": hf.vertical_scale,
                "contour_interval": hf.contour_interval,
                "null_cells": hf.null_count,
            },
            "skipped_tokens": len(res.doc.skipped_tokens),
            "findings": [
                {"id": f.id, "severity": f.severity, "message": f.message} for f in res.report.findings
            ],
        }
        print(json.dumps(payload, indent=2))
        return 0

    print("Relief View")
    print(f"  File: {res.doc.source}")
    print(f"  Grid: {hdr.columns} x {hdr.rows}  X {hdr.x_min:g}..{hdr.x_max:g} (step {hdr.x_step:g})  "
          f"Y {hdr.y_min:g}..{hdr.y_max:g} (step {hdr.y_step:g})")
    print(f"  Heights: min {hf.min_valid:g}  max {hf.max_valid:g}  range {hf.height_range:g}")
    print(f"  Vertical scale: {hf.vertical_scale:g} (factor {hf.height_scale_factor:g})")
    print(f"  Contour interval: {hf.contour_interval:g}")
    print(f"  Null cells: {hf.null_count}")
    s = res.report.summary
    print(f"  Findings: {s['errors']} error(s), {s['warnings']} warning(s), {s['info']} info")
    for f in res.report.findings:
        print(f"    [{f.severity}] {f.id}: {f.message}")
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    res = _load(args, _settings_from_args(args))
    if isinstance(res, int):
        return res

    outdir = Path(args.out).expanduser().resolve()
    out = render_relief_plane(
        header=res.doc.header,
        field=res.doc.field,
        heights=res.heights,
        out_path=outdir / f"{args.stem}.png",
        title=Path(args.file).name,
        with_contours=not args.no_contours,
    )
    print(f"  Saved: {out}")
    return 0


def _cmd_gui(args: argparse.Namespace) -> int:
    # Import here so CLI still works even if PySide6 isn't installed
    from relief.gui.app import run
    path = Path(args.file) if args.file else None
    return int(run(path, _settings_from_args(args)))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="relief")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    p.add_argument("--log-file", default=None, help="Also write logs to this file")
    sub = p.add_subparsers(dest="cmd", required=True)

    demo = sub.add_parser("demo", help="Write a small synthetic grid file to disk.")
    demo.add_argument("--out", default="data/grids/demo.grd", help="Output grid path")
    demo.add_argument("--columns", type=int, default=40)
    demo.add_argument("--rows", type=int, default=30)
    demo.set_defaults(func=_cmd_demo)

    def add_common(sp: argparse.ArgumentParser, file_required: bool = True) -> None:
        if file_required:
            sp.add_argument("file", help="Path to grid file")
        else:
            sp.add_argument("file", nargs="?", default=None, help="Optional grid file to open")
        sp.add_argument("--scale", type=float, default=None, help="Height scale factor (e.g. 0.05-1.0)")
        sp.add_argument("--config", default=None, help="Viewer settings JSON file")

    info = sub.add_parser("info", help="Parse a grid file and print header, heights and findings.")
    add_common(info)
    info.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    info.set_defaults(func=_cmd_info)

    r = sub.add_parser("render", help="Render a shaded, contour-banded PNG of a grid file.")
    add_common(r)
    r.add_argument("--out", default="out", help="Output directory (default: out)")
    r.add_argument("--stem", default="relief", help="Filename stem for outputs")
    r.add_argument("--no-contours", action="store_true", help="Skip contour lines")
    r.set_defaults(func=_cmd_render)

    g = sub.add_parser("gui", help="Launch the interactive 3D viewer.")
    add_common(g, file_required=False)
    g.set_defaults(func=_cmd_gui)

    args = p.parse_args(argv)
    try:
        setup_logging(args.log_level, args.log_file)
        return int(args.func(args))
    except (ValueError, OSError) as e:
        print(f"[ERROR] {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
