from __future__ import annotations

import json
from pathlib import Path

from relief.cli import demo_grid_text, main
from relief.parser.grid_parser import parse_grid_text


def test_demo_text_parses():
    doc = parse_grid_text(demo_grid_text(12, 9, null_every=10))
    assert (doc.header.columns, doc.header.rows) == (12, 9)
    assert len(doc.null_cells) == 11
    assert doc.skipped_tokens == []


def test_cli_demo_writes_file(tmp_path: Path):
    out = tmp_path / "demo.grd"
    rc = main(["demo", "--out", str(out), "--columns", "20", "--rows", "15"])
    assert rc == 0
    assert out.exists()
    assert parse_grid_text(out.read_text(encoding="utf-8")).header.sample_count == 300


def test_cli_info_json(tmp_path: Path, capsys):
    grid = tmp_path / "demo.grd"
    assert main(["demo", "--out", str(grid)]) == 0
    capsys.readouterr()

    rc = main(["info", str(grid), "--json", "--scale", "0.5"])
    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["header"]["columns"] == 40
    assert payload["header"]["x_step"] > 0
    assert payload["heights"]["null_cells"] > 0
    assert payload["heights"]["contour_interval"] == payload["heights"]["range"] / 20
    assert any(f["id"] == "RELIEF_DATA_NULL_CELLS" for f in payload["findings"])


def test_cli_info_text(tmp_path: Path, capsys):
    grid = tmp_path / "demo.grd"
    main(["demo", "--out", str(grid)])
    rc = main(["info", str(grid)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Grid: 40 x 30" in out
    assert "Null cells:" in out


def test_cli_info_missing_file(tmp_path: Path):
    assert main(["info", str(tmp_path / "missing.grd")]) == 2


def test_cli_info_format_error(tmp_path: Path, capsys):
    bad = tmp_path / "bad.grd"
    bad.write_text("@Grid\nfoo\n10, 5, 0, 90, 0, 40\n@\n1 2 3\n", encoding="utf-8")
    rc = main(["info", str(bad)])
    assert rc == 3
    out = capsys.readouterr().out
    assert "count mismatch" in out
    assert "bad.grd" in out


def test_cli_rejects_bad_scale(tmp_path: Path):
    grid = tmp_path / "demo.grd"
    main(["demo", "--out", str(grid)])
    assert main(["info", str(grid), "--scale", "-1"]) == 2


def test_cli_render_png(tmp_path: Path):
    grid = tmp_path / "demo.grd"
    main(["demo", "--out", str(grid)])
    rc = main(["render", str(grid), "--out", str(tmp_path / "out"), "--stem", "view"])
    assert rc == 0
    png = tmp_path / "out" / "view.png"
    assert png.exists()
    assert png.stat().st_size > 0


def test_cli_unknown_log_level(tmp_path: Path, capsys):
    grid = tmp_path / "demo.grd"
    main(["demo", "--out", str(grid)])
    capsys.readouterr()
    assert main(["--log-level", "LOUD", "info", str(grid)]) == 2
    assert "[ERROR] Unknown log level: LOUD" in capsys.readouterr().out


def test_cli_unwritable_log_file(tmp_path: Path, capsys):
    grid = tmp_path / "demo.grd"
    main(["demo", "--out", str(grid)])
    capsys.readouterr()
    # a directory cannot be opened as the log file
    assert main(["--log-file", str(tmp_path), "info", str(grid)]) == 2
    assert "[ERROR]" in capsys.readouterr().out


def test_cli_unreadable_grid_file(tmp_path: Path, capsys, monkeypatch):
    grid = tmp_path / "demo.grd"
    main(["demo", "--out", str(grid)])
    capsys.readouterr()

    def denied(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_text", denied)
    assert main(["info", str(grid)]) == 2
    out = capsys.readouterr().out
    assert "[ERROR] Cannot read" in out
    assert "Permission denied" in out
