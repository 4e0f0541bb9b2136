"""Deterministic helpers: amount normalization, rate tables, overrides."""

from box3_validator.tools.amounts import extract_amount, format_currency
from box3_validator.tools.overrides import apply_manual_overrides
from box3_validator.tools.rates import RateLookup, RateTables, load_rate_tables, rate_for

__all__ = [
    "extract_amount",
    "format_currency",
    "apply_manual_overrides",
    "RateLookup",
    "RateTables",
    "load_rate_tables",
    "rate_for",
]
