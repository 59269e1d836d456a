from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

from relief.models.heights import HeightField
from relief.models.validation import ValidationFinding, ValidationReport
from relief.parser.grid_parser import ParsedGrid


class Rule(Protocol):
    id: str
    def evaluate(self, doc: ParsedGrid, heights: Optional[HeightField]) -> List[ValidationFinding]: ...


@dataclass
class Validator:
    rules: List[Rule]

    def run(self, doc: ParsedGrid, heights: Optional[HeightField] = None) -> ValidationReport:
        findings: List[ValidationFinding] = []
        for rule in self.rules:
            findings.extend(rule.evaluate(doc, heights))
        # stable ordering: severity then id
        sev_order = {"ERROR": 0, "WARN": 1, "INFO": 2}
        findings.sort(key=lambda f: (sev_order.get(f.severity, 99), f.id))
        return ValidationReport(findings=findings)
