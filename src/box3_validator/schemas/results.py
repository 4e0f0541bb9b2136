"""Derived calculation results exposed to the surrounding UI."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from box3_validator.config import Settings
from box3_validator.schemas.blueprint import (
    ActualReturn,
    BankSavingsAsset,
    Debt,
    InvestmentAsset,
    OtherAsset,
    RealEstateAsset,
    YearStatus,
)


class CalculationPolicy(BaseModel):
    """Tunable constants of the calculation, usually taken from settings."""

    cost_per_year: float = 250.0
    minimum_profitable_amount: float = 250.0
    default_tax_rate: float = 0.31
    default_savings_rate: float = 0.001
    allocation_tolerance: float = 5.0
    allocation_min: float = 5.0
    allocation_max: float = 95.0
    cap_refund_at_tax_assessed: bool = True

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "CalculationPolicy":
        return cls(
            cost_per_year=app_settings.cost_per_year,
            minimum_profitable_amount=app_settings.minimum_profitable_amount,
            default_tax_rate=app_settings.default_tax_rate,
            default_savings_rate=app_settings.default_savings_rate,
            allocation_tolerance=app_settings.allocation_tolerance,
            allocation_min=app_settings.allocation_min,
            allocation_max=app_settings.allocation_max,
            cap_refund_at_tax_assessed=app_settings.cap_refund_at_tax_assessed,
        )


class YearMissingItem(BaseModel):
    """A gap in the dossier that blocks an exact calculation."""

    year: str
    description: str
    source: Literal["blueprint", "inferred"] = "blueprint"


class YearInput(BaseModel):
    """Everything the calculation needs for one tax year (aggregator output)."""

    year: str
    bank_savings: list[BankSavingsAsset] = Field(default_factory=list)
    investments: list[InvestmentAsset] = Field(default_factory=list)
    real_estate: list[RealEstateAsset] = Field(default_factory=list)
    other_assets: list[OtherAsset] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)

    total_assets_jan_1: float = 0.0
    deemed_return: Optional[float] = Field(
        None,
        description="Forfaitair rendement according to the tax authority",
    )
    tax_assessed: Optional[float] = Field(
        None,
        description="Box 3 tax assessed for the household",
    )
    precomputed_actual_return: Optional[float] = Field(
        None,
        description="actual_return.total from the blueprint summary, used when no asset figures exist",
    )
    status: YearStatus = "incomplete"
    explicit_missing: list[YearMissingItem] = Field(default_factory=list)

    @property
    def asset_count(self) -> int:
        return (
            len(self.bank_savings)
            + len(self.investments)
            + len(self.real_estate)
            + len(self.other_assets)
        )


class ActualReturnEstimate(BaseModel):
    """Best-effort actual return of one year (estimator output)."""

    year: str
    actual_return: ActualReturn
    has_unknown_interest: bool = False
    estimated_interest: float = 0.0
    savings_rate: float
    savings_rate_found: bool = True
    missing_items: list[YearMissingItem] = Field(default_factory=list)
    banks_needed: list[str] = Field(
        default_factory=list,
        description="Banks whose interest statement is missing",
    )


class YearCalculation(BaseModel):
    """Indicative refund of one tax year (comparator output)."""

    year: str
    total_assets_jan_1: float = 0.0
    actual_return: ActualReturn
    deemed_return: Optional[float] = None
    difference: Optional[float] = Field(
        None,
        description="deemed - actual; positive is favourable to the taxpayer",
    )
    tax_rate: float
    tax_rate_found: bool = True
    theoretical_refund: float = 0.0
    indicative_refund: float = 0.0
    tax_assessed: Optional[float] = None
    is_profitable: bool = False
    estimated: bool = False
    has_calculation: bool = False
    status: YearStatus = "incomplete"
    missing_items: list[YearMissingItem] = Field(default_factory=list)
    banks_needed: list[str] = Field(default_factory=list)


class PersonRefund(BaseModel):
    """Share of the refund attributed to one person."""

    person_id: str
    role: Literal["taxpayer", "fiscal_partner"]
    name: Optional[str] = None
    refund_per_year: dict[str, float] = Field(default_factory=dict)
    allocation_used: dict[str, float] = Field(
        default_factory=dict,
        description="Allocation percentage applied per year",
    )
    default_allocation_years: list[str] = Field(
        default_factory=list,
        description="Years where stored allocations were missing or implausible",
    )
    total_refund: float = 0.0
    is_profitable: bool = False


class RefundSummary(BaseModel):
    """Household refund before and after advisory costs."""

    gross_refund: float = 0.0
    years_count: int = 0
    cost_per_year: float = 0.0
    total_cost: float = 0.0
    net_refund: float = 0.0
    estimated: bool = False
    is_profitable: bool = False


NextAction = Literal[
    "request_documents",
    "file_objection",
    "await_client_info",
    "close_not_profitable",
]


class NextStep(BaseModel):
    """Recommended next action for the dossier."""

    action: NextAction
    label: str
    description: str
    objection_count: int = 0
    banks_needed: list[str] = Field(default_factory=list)


class DossierAnalysis(BaseModel):
    """Complete derived view of one dossier."""

    years: dict[str, YearCalculation] = Field(default_factory=dict)
    persons: list[PersonRefund] = Field(default_factory=list)
    refund: RefundSummary = Field(default_factory=RefundSummary)
    next_step: NextStep
    has_partner: bool = False
    total_tax_assessed: float = 0.0

    @property
    def missing_items(self) -> list[YearMissingItem]:
        return [item for year in self.years.values() for item in year.missing_items]

    @property
    def has_unknown_interest(self) -> bool:
        return any(year.estimated for year in self.years.values())
