from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union


Severity = Literal["ERROR", "WARN", "INFO"]
LineRef = Union[int, Tuple[int, int]]
CellRef = Tuple[int, int]                # (row, col)


@dataclass(frozen=True)
class ValidationFinding:
    id: str
    severity: Severity
    title: str
    message: str
    evidence: Dict[str, Any]
    line_refs: List[LineRef] = field(default_factory=list)
    cells: List[CellRef] = field(default_factory=list)
    suggested_fix: Optional[str] = None


@dataclass(frozen=True)
class ValidationReport:
    findings: List[ValidationFinding]

    @property
    def summary(self) -> Dict[str, int]:
        counts = {"errors": 0, "warnings": 0, "info": 0}
        key = {"ERROR": "errors", "WARN": "warnings", "INFO": "info"}
        for f in self.findings:
            counts[key[f.severity]] += 1
        return counts

    @property
    def ok(self) -> bool:
        return self.summary["errors"] == 0

    def by_id(self, finding_id: str) -> Optional[ValidationFinding]:
        for f in self.findings:
            if f.id == finding_id:
                return f
        return None
