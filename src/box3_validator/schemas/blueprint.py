"""Box 3 blueprint schemas (the dossier JSON produced by the extraction pipeline).

Every money field accepts a bare number, a numeric string or a data point
with source tracking. Read them through ``tools.amounts.extract_amount``.
Unknown keys are kept so a blueprint survives a load/dump cycle.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DataPoint(BaseModel):
    """A single extracted value with source tracking."""

    model_config = ConfigDict(extra="allow")

    amount: Optional[float] = None
    value: Optional[float] = None
    source_doc_id: Optional[str] = None
    source_type: Optional[str] = None
    source_snippet: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    requires_validation: Optional[bool] = None


AmountField = Optional[Union[DataPoint, float, str]]


class _BlueprintModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Person(_BlueprintModel):
    """Taxpayer or fiscal partner."""

    id: str = "tp_01"
    name: Optional[str] = None
    bsn_masked: Optional[str] = None
    date_of_birth: Optional[str] = None
    email: Optional[str] = None


class FiscalPartnerRef(_BlueprintModel):
    has_partner: bool = False
    id: Optional[str] = None
    name: Optional[str] = None
    bsn_masked: Optional[str] = None
    date_of_birth: Optional[str] = None


class FiscalEntity(_BlueprintModel):
    taxpayer: Person = Field(default_factory=Person)
    fiscal_partner: FiscalPartnerRef = Field(default_factory=FiscalPartnerRef)


class YearlyFigures(_BlueprintModel):
    """Figures of one asset or debt for one tax year."""

    value_jan_1: AmountField = None
    value_dec_31: AmountField = None
    # Older blueprints store the Jan 1 bank balance under this key
    balance_jan1: AmountField = None

    # Bank savings / other assets
    interest_received: AmountField = None
    currency_result: AmountField = None
    income_received: AmountField = None

    # Investments
    dividend_received: AmountField = None
    realized_gains: AmountField = None
    deposits: AmountField = None
    withdrawals: AmountField = None
    transaction_costs: AmountField = None

    # Real estate
    woz_value: AmountField = None
    rental_income_gross: AmountField = None
    maintenance_costs: AmountField = None
    property_tax: AmountField = None
    insurance: AmountField = None
    other_costs: AmountField = None

    # Debts
    interest_paid: AmountField = None


class Asset(_BlueprintModel):
    """Common fields of all Box 3 asset classes."""

    id: str
    description: str = ""
    owner_id: str = "tp_01"
    ownership_percentage: float = 100.0
    country: Optional[str] = None
    yearly_data: dict[str, YearlyFigures] = Field(default_factory=dict)

    @field_validator("yearly_data", mode="before")
    @classmethod
    def stringify_years(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(year): figures for year, figures in v.items()}
        return v


class BankSavingsAsset(Asset):
    bank_name: Optional[str] = None
    account_masked: Optional[str] = None
    is_joint_account: bool = False
    is_green_investment: bool = False


class InvestmentAsset(Asset):
    institution: Optional[str] = None
    account_masked: Optional[str] = None
    type: str = "other"


class RealEstateAsset(Asset):
    address: Optional[str] = None
    type: str = "other"


class OtherAsset(Asset):
    type: str = "other"


class Debt(Asset):
    lender: Optional[str] = None
    debt_type: str = "other"


class Assets(_BlueprintModel):
    bank_savings: list[BankSavingsAsset] = Field(default_factory=list)
    investments: list[InvestmentAsset] = Field(default_factory=list)
    real_estate: list[RealEstateAsset] = Field(default_factory=list)
    other_assets: list[OtherAsset] = Field(default_factory=list)


class TaxAuthorityPersonData(_BlueprintModel):
    """Per-person figures from the tax return or assessment."""

    allocation_percentage: Optional[float] = None
    total_assets_box3: Optional[float] = None
    total_debts_box3: Optional[float] = None
    exempt_amount: Optional[float] = None
    taxable_base: Optional[float] = None
    deemed_return: Optional[float] = None
    tax_assessed: Optional[float] = None


class TaxAuthorityHouseholdTotals(_BlueprintModel):
    total_assets_gross: Optional[float] = None
    total_debts: Optional[float] = None
    net_assets: Optional[float] = None
    total_exempt: Optional[float] = None
    taxable_base: Optional[float] = None
    deemed_return: Optional[float] = None
    total_tax_assessed: Optional[float] = None


class TaxAuthorityYearData(_BlueprintModel):
    source_doc_id: Optional[str] = None
    document_type: Optional[str] = None
    document_date: Optional[str] = None
    per_person: dict[str, TaxAuthorityPersonData] = Field(default_factory=dict)
    household_totals: TaxAuthorityHouseholdTotals = Field(
        default_factory=TaxAuthorityHouseholdTotals
    )


class MissingItem(_BlueprintModel):
    field: Optional[str] = None
    description: str
    severity: Optional[str] = None
    action: Optional[str] = None


class ActualReturn(BaseModel):
    """Actual return of a tax year, split by source.

    ``bank_interest`` includes ``bank_interest_estimated``.
    """

    bank_interest: Optional[float] = None
    bank_interest_estimated: Optional[float] = None
    dividends: Optional[float] = None
    investment_gain: Optional[float] = None
    rental_income_net: Optional[float] = None
    other_assets_income: Optional[float] = None
    debt_interest_paid: Optional[float] = None
    total: Optional[float] = None


class CalculatedTotals(_BlueprintModel):
    total_assets_jan_1: Optional[float] = None
    actual_return: Optional[ActualReturn] = None
    deemed_return_from_tax_authority: Optional[float] = None
    difference: Optional[float] = None
    indicative_refund: Optional[float] = None
    is_profitable: Optional[bool] = None


YearStatus = Literal["no_data", "incomplete", "ready_for_calculation", "complete"]


class YearSummary(_BlueprintModel):
    status: YearStatus = "incomplete"
    completeness: dict[str, str] = Field(default_factory=dict)
    missing_items: list[Union[MissingItem, str]] = Field(default_factory=list)
    calculated_totals: Optional[CalculatedTotals] = None


class ManualOverride(_BlueprintModel):
    """A user correction addressed by a dotted blueprint path."""

    id: Optional[str] = None
    field_path: str
    original_value: Optional[Union[float, str]] = None
    override_value: Union[float, str, None] = None
    reason: str = ""
    created_at: Optional[str] = None
    created_by: Optional[str] = None


class Box3Blueprint(_BlueprintModel):
    """Structured facts of one Box 3 dossier."""

    schema_version: Optional[str] = None
    tax_years: list[str] = Field(default_factory=list)
    fiscal_entity: FiscalEntity = Field(default_factory=FiscalEntity)
    assets: Assets = Field(default_factory=Assets)
    debts: list[Debt] = Field(default_factory=list)
    tax_authority_data: dict[str, TaxAuthorityYearData] = Field(default_factory=dict)
    year_summaries: dict[str, YearSummary] = Field(default_factory=dict)
    manual_overrides: list[ManualOverride] = Field(default_factory=list)

    @field_validator("tax_years", mode="before")
    @classmethod
    def stringify_tax_years(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(year) for year in v]
        return v

    @field_validator("tax_authority_data", "year_summaries", mode="before")
    @classmethod
    def stringify_year_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(year): data for year, data in v.items()}
        return v

    @property
    def has_partner(self) -> bool:
        return self.fiscal_entity.fiscal_partner.has_partner

    @property
    def taxpayer_id(self) -> str:
        return self.fiscal_entity.taxpayer.id

    @property
    def partner_id(self) -> Optional[str]:
        partner = self.fiscal_entity.fiscal_partner
        if not partner.has_partner:
            return None
        return partner.id or "fp_01"
