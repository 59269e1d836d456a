from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relief.derived.heights import CONTOUR_BANDS, normalize_heights
from relief.models.heights import HeightField
from relief.models.validation import ValidationReport
from relief.parser.grid_parser import GRID_MARKER, FormatError, ParsedGrid, parse_grid_text
from relief.validation.defaults import default_validator


@dataclass(frozen=True)
class ReliefViewResult:
    doc: ParsedGrid
    heights: HeightField
    report: ValidationReport


def parse_and_analyse_grid(
    text: str,
    height_scale_factor: float = 0.3,
    *,
    source_path: str | Path | None = None,
    base_offset: float = 0.0,
    contour_bands: int = CONTOUR_BANDS,
    marker: str = GRID_MARKER,
) -> ReliefViewResult:
    """Parse, normalize and validate one document. Any FormatError propagates unchanged."""
    doc = parse_grid_text(text, source_path=source_path, marker=marker)
    heights = analyse_grid(doc, height_scale_factor, base_offset=base_offset, contour_bands=contour_bands)
    report = default_validator().run(doc, heights)
    return ReliefViewResult(doc=doc, heights=heights, report=report)


def analyse_grid(
    doc: ParsedGrid,
    height_scale_factor: float,
    *,
    base_offset: float = 0.0,
    contour_bands: int = CONTOUR_BANDS,
) -> HeightField:
    try:
        return normalize_heights(
            doc.header,
            doc.field,
            height_scale_factor,
            base_offset=base_offset,
            contour_bands=contour_bands,
        )
    except FormatError as e:
        if e.filename is None and doc.source is not None:
            e.filename = doc.source
        raise
