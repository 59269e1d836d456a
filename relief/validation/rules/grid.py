from __future__ import annotations

from typing import List, Optional

import numpy as np

from relief.models.heights import HeightField
from relief.models.validation import ValidationFinding
from relief.parser.grid_parser import ParsedGrid


MAX_LISTED_CELLS = 50


class RuleSkippedTokens:
    id = "RELIEF_DATA_SKIPPED_TOKENS"

    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]:
        if not doc.skipped_tokens:
            return []
        first = doc.skipped_tokens[:5]
        return [
            ValidationFinding(
                id=self.id,
                severity="WARN",
                title="Unparsable sample tokens",
                message=(
                    f"{len(doc.skipped_tokens)} token(s) in the data section were not numbers and were skipped; "
                    "the remaining sample count still matched the header."
                ),
                evidence={"count": len(doc.skipped_tokens), "tokens": [sk.token for sk in first]},
                line_refs=sorted({sk.line_no for sk in doc.skipped_tokens}),
                suggested_fix="Check the exporter for stray text in the data section.",
            )
        ]


class RuleNonFiniteSamples:
    id = "RELIEF_DATA_NAN_INF"

    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]:
        n = int(np.count_nonzero(~np.isfinite(doc.field.values)))
        if n == 0:
            return []
        return [
            ValidationFinding(
                id=self.id,
                severity="WARN",
                title="NaN/Inf samples",
                message="Data section contains NaN or Infinity values; they are treated as null cells.",
                evidence={"count": n},
                line_refs=[doc.data_line_span],
            )
        ]


class RuleNullMajority:
    id = "RELIEF_DATA_MOSTLY_NULL"

    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]:
        total = doc.header.sample_count
        nulls = doc.field.null_count(doc.header.null_value)
        if total == 0 or nulls * 2 <= total:
            return []
        return [
            ValidationFinding(
                id=self.id,
                severity="WARN",
                title="Grid is mostly null",
                message=f"{nulls} of {total} samples are null; the rendered surface is mostly flat fallback.",
                evidence={"null": nulls, "total": total, "fraction": nulls / total},
                line_refs=[doc.data_line_span],
            )
        ]


class RuleExtentAspect:
    id = "RELIEF_HDR_CELL_ASPECT"

    def __init__(self, max_ratio: float = 10.0) -> None:
        self.max_ratio = float(max_ratio)

    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]:
        hdr = doc.header
        ratio = max(hdr.x_step, hdr.y_step) / min(hdr.x_step, hdr.y_step)
        if ratio <= self.max_ratio:
            return []
        return [
            ValidationFinding(
                id=self.id,
                severity="WARN",
                title="Strongly anisotropic cells",
                message=f"Cell size differs by a factor of {ratio:.1f} between X and Y.",
                evidence={"x_step": hdr.x_step, "y_step": hdr.y_step, "ratio": ratio},
                line_refs=[hdr.line_no],
                suggested_fix="Verify the order of the columns/rows fields in the grid info line.",
            )
        ]


class RuleNullCells:
    id = "RELIEF_DATA_NULL_CELLS"

    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]:
        cells = doc.null_cells
        if not cells:
            return []
        return [
            ValidationFinding(
                id=self.id,
                severity="INFO",
                title="Null cells",
                message=f"{len(cells)} cell(s) are at or above the null threshold and are drawn flat at the base level.",
                evidence={"count": len(cells), "null_value": doc.header.null_value},
                line_refs=[doc.data_line_span],
                cells=list(cells[:MAX_LISTED_CELLS]),
            )
        ]


class RuleHeightSummary:
    id = "RELIEF_HEIGHT_SUMMARY"

    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]:
        if heights is None:
            return []
        return [
            ValidationFinding(
                id=self.id,
                severity="INFO",
                title="Height range",
                message=f"Valid heights span {heights.min_valid:g} to {heights.max_valid:g}.",
                evidence={
                    "min": heights.min_valid,
                    "max": heights.max_valid,
                    "range": heights.height_range,
                    "vertical_scale": heights.vertical_scale,
                    "contour_interval": heights.contour_interval,
                },
            )
        ]
