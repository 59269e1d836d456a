"""
Relief Validation Module

Validation engine and rules for parsed elevation grids.
"""

from relief.validation.engine import Validator, Rule
from relief.validation.defaults import default_validator
from relief.models.validation import ValidationFinding, ValidationReport

__all__ = [
    "Validator",
    "Rule",
    "ValidationFinding",
    "ValidationReport",
    "default_validator",
]
