"""Pydantic schemas for the Box 3 validator."""

from box3_validator.schemas.blueprint import (
    ActualReturn,
    Box3Blueprint,
    DataPoint,
    ManualOverride,
    TaxAuthorityYearData,
    YearSummary,
)
from box3_validator.schemas.results import (
    CalculationPolicy,
    DossierAnalysis,
    NextStep,
    PersonRefund,
    RefundSummary,
    YearCalculation,
    YearMissingItem,
)
from box3_validator.schemas.state import AnalysisState

__all__ = [
    "ActualReturn",
    "Box3Blueprint",
    "DataPoint",
    "ManualOverride",
    "TaxAuthorityYearData",
    "YearSummary",
    "CalculationPolicy",
    "DossierAnalysis",
    "NextStep",
    "PersonRefund",
    "RefundSummary",
    "YearCalculation",
    "YearMissingItem",
    "AnalysisState",
]
