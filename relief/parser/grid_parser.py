from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from relief.models.grid import NULL_VALUE, GridField, GridHeader

logger = logging.getLogger(__name__)


GRID_MARKER = "@Grid"
TERMINATOR = "@"
HEADER_FIELDS = ("columns", "rows", "x_min", "x_max", "y_min", "y_max")


@dataclass
class FormatError(Exception):
    message: str
    line_no: Optional[int] = None
    filename: Optional[str] = None

    def _prefix(self) -> str:
        prefix = f"{self.filename}: " if self.filename else ""
        if self.line_no is not None:
            prefix += f"Line {self.line_no}: "
        return prefix

    def __str__(self) -> str:
        return f"{self._prefix()}{self.message}"


@dataclass
class MissingTerminator(FormatError):
    message: str = "missing terminator"


@dataclass
class MissingGridInfo(FormatError):
    message: str = "missing grid info"


@dataclass
class InsufficientFields(FormatError):
    message: str = "insufficient fields"
    found: int = 0


@dataclass
class InvalidHeader(FormatError):
    message: str = "invalid grid header"
    field_name: str = ""


@dataclass
class CountMismatch(FormatError):
    message: str = "count mismatch"
    expected: int = 0
    actual: int = 0

    def __str__(self) -> str:
        return f"{self._prefix()}{self.message}: expected {self.expected} samples, found {self.actual}"


@dataclass
class NoValidSamples(FormatError):
    message: str = "no valid samples"


@dataclass
class ZeroHeightRange(FormatError):
    message: str = "zero height range"
    value: float = 0.0


@dataclass(frozen=True)
class SkippedToken:
    token: str
    line_no: int


@dataclass(frozen=True)
class SampleStream:
    values: List[float]
    skipped: List[SkippedToken]
    line_span: Tuple[int, int]           # (start_line_no, end_line_no), inclusive; (0, 0) if empty


@dataclass(frozen=True)
class ParsedGrid:
    header: GridHeader
    field: GridField
    skipped_tokens: List[SkippedToken]
    terminator_line_no: int
    data_line_span: Tuple[int, int]
    source: Optional[str] = None

    @property
    def null_cells(self) -> Tuple[Tuple[int, int], ...]:
        return self.field.null_cells(self.header.null_value)


_NUM_RE = re.compile(r"^[+-]?((\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?|inf(inity)?|nan)$", re.IGNORECASE)


def parse_number(tok: str) -> Optional[float]:
    """Return the float value of `tok`, or None when it is not a number."""
    if not _NUM_RE.match(tok):
        return None
    return float(tok)


def find_terminator(lines: List[str]) -> int:
    for idx0, ln in enumerate(lines):
        if ln.strip() == TERMINATOR:
            return idx0
    raise MissingTerminator()


def _find_marker(lines: List[str], stop_idx0: int, marker: str) -> Optional[int]:
    # ZMAP-style exporters write the marker as "@GRID", "@Grid" or "@grid"
    marker_u = marker.upper()
    for idx0 in range(stop_idx0):
        if lines[idx0].strip().upper().startswith(marker_u):
            return idx0
    return None


def _as_count(value: float, name: str, line_no: int) -> int:
    if not math.isfinite(value) or value != int(value):
        raise InvalidHeader(f"{name} must be an integer, got {value!r}", line_no=line_no, field_name=name)
    count = int(value)
    if count <= 1:
        raise InvalidHeader(f"{name} must be > 1, got {count}", line_no=line_no, field_name=name)
    return count


def _check_extent(lo: float, hi: float, lo_name: str, hi_name: str, line_no: int) -> None:
    if not (math.isfinite(lo) and math.isfinite(hi)):
        bad = lo_name if not math.isfinite(lo) else hi_name
        raise InvalidHeader(f"{bad} is not a finite number", line_no=line_no, field_name=bad)
    if hi <= lo:
        raise InvalidHeader(f"{hi_name} ({hi:g}) must be greater than {lo_name} ({lo:g})", line_no=line_no, field_name=hi_name)


def extract_header(lines: List[str], marker: str = GRID_MARKER) -> Tuple[GridHeader, int]:
    """
    Locate the terminator and the grid info line, and build the header.
    Returns: (header, terminator_idx0)

    Fields are positional: columns, rows, x_min, x_max, y_min, y_max. A token that
    does not parse becomes NaN here and is rejected by the invariant checks below.
    """
    term_idx0 = find_terminator(lines)

    marker_idx0 = _find_marker(lines, term_idx0, marker)
    if marker_idx0 is None:
        raise MissingGridInfo()

    info_idx0 = marker_idx0 + 2
    if info_idx0 >= term_idx0:
        raise MissingGridInfo("missing grid info: header ends before the grid info line", line_no=marker_idx0 + 1)
    line_no = info_idx0 + 1

    toks = [t.strip() for t in lines[info_idx0].split(",")]
    toks = [t for t in toks if t]
    if len(toks) < len(HEADER_FIELDS):
        raise InsufficientFields(line_no=line_no, found=len(toks))

    nums = []
    for t in toks[: len(HEADER_FIELDS)]:
        v = parse_number(t)
        nums.append(math.nan if v is None else v)

    columns = _as_count(nums[0], "columns", line_no)
    rows = _as_count(nums[1], "rows", line_no)
    x_min, x_max, y_min, y_max = nums[2:6]
    _check_extent(x_min, x_max, "x_min", "x_max", line_no)
    _check_extent(y_min, y_max, "y_min", "y_max", line_no)

    header = GridHeader(
        columns=columns,
        rows=rows,
        x_min=x_min,
        x_max=x_max,
        y_min=y_min,
        y_max=y_max,
        null_value=NULL_VALUE,
        line_no=line_no,
    )
    return header, term_idx0


def parse_sample_stream(lines: List[str], start_idx0: int) -> SampleStream:
    """
    Read whitespace separated samples from lines[start_idx0:] in encounter order.
    Unparsable tokens are recorded and skipped; they only shrink the count.
    """
    values: List[float] = []
    skipped: List[SkippedToken] = []
    start_line_no = 0
    end_line_no = 0

    for idx0 in range(start_idx0, len(lines)):
        s = lines[idx0].strip()
        if not s:
            continue
        if not start_line_no:
            start_line_no = idx0 + 1
        end_line_no = idx0 + 1
        for tok in s.split():
            v = parse_number(tok)
            if v is None:
                skipped.append(SkippedToken(token=tok, line_no=idx0 + 1))
                continue
            values.append(v)

    if skipped:
        logger.warning(f"Skipped {len(skipped)} unparsable sample token(s); first at line {skipped[0].line_no}: '{skipped[0].token}'")
        for sk in skipped:
            logger.debug(f"Unparsable token '{sk.token}' on line {sk.line_no}")

    return SampleStream(values=values, skipped=skipped, line_span=(start_line_no, end_line_no))


def parse_grid_text(
    text: str,
    source_path: str | Path | None = None,
    marker: str = GRID_MARKER,
) -> ParsedGrid:
    src = Path(source_path).expanduser().resolve() if source_path is not None else None
    try:
        lines = [ln.rstrip("\r\n") for ln in text.splitlines()]
        header, term_idx0 = extract_header(lines, marker=marker)

        stream = parse_sample_stream(lines, term_idx0 + 1)
        expected = header.sample_count
        if len(stream.values) != expected:
            raise CountMismatch(
                expected=expected,
                actual=len(stream.values),
                line_no=stream.line_span[1] or (term_idx0 + 1),
            )

        field = GridField.from_flat(stream.values, header.rows, header.columns)
        logger.debug(f"Parsed {header.columns}x{header.rows} grid ({expected} samples, {field.null_count(header.null_value)} null)")
        return ParsedGrid(
            header=header,
            field=field,
            skipped_tokens=stream.skipped,
            terminator_line_no=term_idx0 + 1,
            data_line_span=stream.line_span,
            source=str(src) if src is not None else None,
        )
    except FormatError as e:
        if e.filename is None and src is not None:
            e.filename = str(src)
        raise


def load_grid_file(path: str | Path, marker: str = GRID_MARKER) -> ParsedGrid:
    p = Path(path).expanduser().resolve()
    text = p.read_text(encoding="utf-8", errors="replace")
    return parse_grid_text(text, source_path=p, marker=marker)
