"""Single-year profitability check on the legacy validation-result format.

Older dossiers were validated into a flat ``gevonden_data`` structure instead
of a blueprint. This check compares the actual return found there with the
taxable Box 3 income from the tax return (used as the deemed return).
"""

import logging
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from box3_validator.config import settings
from box3_validator.tools.rates import RateTables, load_rate_tables, rate_for

logger = logging.getLogger(__name__)


class _LegacyModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ReturnInputs(_LegacyModel):
    """``gevonden_data.werkelijk_rendement_input``"""

    bank_interest: Optional[float] = Field(None, alias="bank_rente_ontvangen")
    investments_start: Optional[float] = Field(None, alias="beleggingen_waarde_1jan")
    investments_end: Optional[float] = Field(None, alias="beleggingen_waarde_31dec")
    dividend: Optional[float] = Field(None, alias="beleggingen_dividend")
    mutations_found: bool = Field(False, alias="beleggingen_mutaties_gevonden")
    debt_interest: Optional[float] = Field(None, alias="schulden_rente_betaald")


class AuthorityBox3(_LegacyModel):
    """``gevonden_data.fiscus_box3``"""

    taxable_income: Optional[float] = Field(None, alias="belastbaar_inkomen_na_drempel")


class GeneralData(_LegacyModel):
    tax_year: Optional[Union[str, int]] = Field(None, alias="belastingjaar")


class FoundData(_LegacyModel):
    """``gevonden_data``"""

    general: Optional[GeneralData] = Field(None, alias="algemeen")
    return_inputs: Optional[ReturnInputs] = Field(None, alias="werkelijk_rendement_input")
    authority: Optional[AuthorityBox3] = Field(None, alias="fiscus_box3")


class ValidationResult(_LegacyModel):
    found_data: Optional[FoundData] = Field(None, alias="gevonden_data")
    tax_year: Optional[Union[str, int]] = Field(None, alias="belastingjaar")

    def resolved_tax_year(self) -> Optional[str]:
        raw = None
        if self.found_data and self.found_data.general:
            raw = self.found_data.general.tax_year
        if raw is None:
            raw = self.tax_year
        return str(raw) if raw is not None else None


class ExtraValues(_LegacyModel):
    """Manually entered values that replace extracted ones."""

    bank_interest: Optional[float] = Field(None, alias="bank_rente_ontvangen")
    investments_start: Optional[float] = Field(None, alias="beleggingen_waarde_1jan")
    investments_end: Optional[float] = Field(None, alias="beleggingen_waarde_31dec")
    dividend: Optional[float] = Field(None, alias="beleggingen_dividend")
    debt_interest: Optional[float] = Field(None, alias="schulden_rente_betaald")


class LegacyOverrides(_LegacyModel):
    extra_values: Optional[ExtraValues] = Field(None, alias="extraValues")


class ProfitabilityCheck(BaseModel):
    """Outcome of the single-year check."""

    bank_interest: Optional[float] = None
    investments_start: Optional[float] = None
    investments_end: Optional[float] = None
    dividend: Optional[float] = None
    mutations_found: bool = False
    debt_interest: Optional[float] = None
    taxable_income: Optional[float] = None

    actual_return: Optional[float] = None
    deemed_return: Optional[float] = None
    difference: Optional[float] = None
    indicative_refund: Optional[float] = None
    is_profitable: Optional[bool] = Field(
        None,
        description="None when there was not enough data to decide",
    )
    missing: list[str] = Field(default_factory=list)
    tax_rate: float
    tax_year: Optional[str] = None

    @property
    def price_result(self) -> Optional[float]:
        """Change in investment value (without deposit/withdrawal correction)."""
        if self.investments_start is None or self.investments_end is None:
            return None
        return self.investments_end - self.investments_start


def _pick(override: Optional[float], extracted: Optional[float]) -> Optional[float]:
    return override if override is not None else extracted


def calculate_profitability(
    result: Union[ValidationResult, dict],
    tax_year: Optional[Union[str, int]] = None,
    manual_overrides: Optional[Union[LegacyOverrides, dict]] = None,
    rates: Optional[RateTables] = None,
    default_tax_rate: Optional[float] = None,
) -> ProfitabilityCheck:
    """Check whether a single-year claim is worth pursuing (kansrijk).

    Manual values take precedence over extracted ones. The actual return is
    interest + dividend + price result - debt interest; it is only computed
    when interest, dividend or both investment values are known. A
    comparison needs a positive taxable income from the tax return.

    Args:
        result: Legacy validation result (model or raw dict)
        tax_year: Tax year; defaults to the year found in the result
        manual_overrides: Legacy overrides with ``extraValues``
        rates: Rate tables (default: bundled tables)
        default_tax_rate: Rate used for unknown years (default: settings)

    Returns:
        ProfitabilityCheck with the comparison and what is still missing
    """
    if isinstance(result, dict):
        result = ValidationResult.model_validate(result)
    if isinstance(manual_overrides, dict):
        manual_overrides = LegacyOverrides.model_validate(manual_overrides)

    year = str(tax_year) if tax_year is not None else result.resolved_tax_year()
    rates = rates or load_rate_tables()
    tax_rate = rate_for(
        rates.tax_rates,
        year,
        default_tax_rate if default_tax_rate is not None else settings.default_tax_rate,
    )

    found = result.found_data or FoundData()
    inputs = found.return_inputs or ReturnInputs()
    authority = found.authority or AuthorityBox3()
    extra = (manual_overrides.extra_values if manual_overrides else None) or ExtraValues()

    check = ProfitabilityCheck(
        bank_interest=_pick(extra.bank_interest, inputs.bank_interest),
        investments_start=_pick(extra.investments_start, inputs.investments_start),
        investments_end=_pick(extra.investments_end, inputs.investments_end),
        dividend=_pick(extra.dividend, inputs.dividend),
        mutations_found=inputs.mutations_found,
        debt_interest=_pick(extra.debt_interest, inputs.debt_interest),
        taxable_income=authority.taxable_income,
        tax_rate=tax_rate.rate,
        tax_year=year,
    )

    # What is missing for a complete calculation
    if check.bank_interest is None:
        check.missing.append("Ontvangen bankrente")
    if check.investments_start is None and check.investments_end is not None:
        check.missing.append("Beginwaarde beleggingen (1 jan)")
    if check.investments_end is None and check.investments_start is not None:
        check.missing.append("Eindwaarde beleggingen (31 dec)")
    if (
        check.investments_start is not None
        and check.investments_end is not None
        and not check.mutations_found
    ):
        check.missing.append("Stortingen/onttrekkingen beleggingen")
    if check.taxable_income is None:
        check.missing.append("Belastbaar inkomen uit aangifte")

    actual = 0.0
    has_data = False
    if check.bank_interest is not None:
        actual += check.bank_interest
        has_data = True
    if check.dividend is not None:
        actual += check.dividend
        has_data = True
    if check.price_result is not None:
        actual += check.price_result
        has_data = True
    if check.debt_interest is not None:
        actual -= check.debt_interest

    if not has_data:
        logger.info(f"Not enough data to compute the actual return for {year}")
        return check

    check.actual_return = actual

    if check.taxable_income is not None and check.taxable_income > 0:
        check.deemed_return = check.taxable_income
        check.difference = check.deemed_return - actual
        if check.difference > 0:
            check.indicative_refund = check.difference * tax_rate.rate
            check.is_profitable = True
        else:
            check.indicative_refund = 0.0
            check.is_profitable = False

        logger.info(
            f"Profitability {year}: deemed €{check.deemed_return:,.2f}, "
            f"actual €{actual:,.2f}, refund €{check.indicative_refund:,.2f}"
        )

    return check
