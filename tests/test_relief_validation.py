from __future__ import annotations

from relief.parser.grid_parser import parse_grid_text
from relief.parser.pipeline import parse_and_analyse_grid
from relief.validation import default_validator


HEADER = "@Grid\nfoo\n4, 3, 0, 30, 0, 20\n@\n"


def test_clean_grid_has_only_height_summary():
    res = parse_and_analyse_grid(HEADER + "1 2 3 4\n5 6 7 8\n9 10 11 12\n")
    assert [f.id for f in res.report.findings] == ["RELIEF_HEIGHT_SUMMARY"]
    assert res.report.ok
    assert res.report.by_id("RELIEF_HEIGHT_SUMMARY").evidence["range"] == 11.0


def test_null_cells_and_skipped_tokens_reported():
    res = parse_and_analyse_grid(HEADER + "1 2 3 4\n5 x 6 7 8\n9 10 11 1e30\n")
    ids = [f.id for f in res.report.findings]
    assert ids == ["RELIEF_DATA_SKIPPED_TOKENS", "RELIEF_DATA_NULL_CELLS", "RELIEF_HEIGHT_SUMMARY"]

    skipped = res.report.by_id("RELIEF_DATA_SKIPPED_TOKENS")
    assert skipped.severity == "WARN"
    assert skipped.evidence["tokens"] == ["x"]
    assert skipped.line_refs == [6]

    nulls = res.report.by_id("RELIEF_DATA_NULL_CELLS")
    assert nulls.cells == [(2, 3)]
    assert res.report.summary == {"errors": 0, "warnings": 1, "info": 2}


def test_mostly_null_and_nan_warnings():
    doc = parse_grid_text(HEADER + "1e30 1e30 1e30 1e30\n1e30 nan 1e30 1e30\n1 2 3 4\n")
    report = default_validator().run(doc)
    ids = {f.id for f in report.findings}
    assert {"RELIEF_DATA_MOSTLY_NULL", "RELIEF_DATA_NAN_INF", "RELIEF_DATA_NULL_CELLS"} <= ids
    assert "RELIEF_HEIGHT_SUMMARY" not in ids


def test_anisotropic_cells_warning():
    doc = parse_grid_text("@Grid\nfoo\n3, 2, 0, 1000, 0, 2\n@\n1 2 3\n4 5 6\n")
    report = default_validator().run(doc)
    finding = report.by_id("RELIEF_HDR_CELL_ASPECT")
    assert finding is not None
    assert finding.line_refs == [3]
