"""Single-year profitability check on legacy validation results."""

from box3_validator.box3.profitability import (
    LegacyOverrides,
    ProfitabilityCheck,
    ValidationResult,
    calculate_profitability,
)

__all__ = [
    "LegacyOverrides",
    "ProfitabilityCheck",
    "ValidationResult",
    "calculate_profitability",
]
