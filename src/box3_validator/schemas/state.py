"""LangGraph state for the dossier analysis graph."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from box3_validator.schemas.blueprint import Box3Blueprint
from box3_validator.schemas.results import (
    ActualReturnEstimate,
    CalculationPolicy,
    NextStep,
    PersonRefund,
    RefundSummary,
    YearCalculation,
    YearInput,
)
from box3_validator.tools.rates import RateTables


class AnalysisState(BaseModel):
    """State passed between the calculation nodes.

    The blueprint already has manual overrides merged in. Each node only
    adds its own output; nothing upstream is modified.
    """

    # --- Input ---
    blueprint: Box3Blueprint
    policy: CalculationPolicy = Field(default_factory=CalculationPolicy)
    rates: RateTables = Field(default_factory=RateTables)

    # --- Aggregator Output ---
    year_inputs: dict[str, YearInput] = Field(
        default_factory=dict,
        description="Per-year inputs keyed by tax year",
    )

    # --- Estimator Output ---
    estimates: dict[str, ActualReturnEstimate] = Field(default_factory=dict)

    # --- Comparator Output ---
    years: dict[str, YearCalculation] = Field(default_factory=dict)

    # --- Allocator / Netting / Classifier Output ---
    persons: list[PersonRefund] = Field(default_factory=list)
    refund: Optional[RefundSummary] = None
    next_step: Optional[NextStep] = None

    status: Literal[
        "initialized",
        "aggregated",
        "estimated",
        "compared",
        "allocated",
        "netted",
        "complete",
    ] = Field(default="initialized", description="Last completed stage")
