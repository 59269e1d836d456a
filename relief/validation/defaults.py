from __future__ import annotations

from relief.validation.engine import Validator
from relief.validation.rules.grid import (
    RuleExtentAspect,
    RuleNullCells,
    RuleNonFiniteSamples,
    RuleSkippedTokens,
    RuleNullMajority,
    RuleHeightSummary,
)


def default_validator() -> Validator:
    """Create validator with all default rules."""
    return Validator(
        rules=[
            # Warnings
            RuleNullMajority(),
            RuleSkippedTokens(),
            RuleNonFiniteSamples(),
            RuleExtentAspect(),
            # Info
            RuleNullCells(),
            RuleHeightSummary(),
        ]
    )
