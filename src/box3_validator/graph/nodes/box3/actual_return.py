"""Actual return estimator node and logic for one Box 3 tax year.

This module contains both the LangGraph node and the calculation logic.
"""

import logging
from typing import Optional

from box3_validator.schemas.blueprint import ActualReturn, YearlyFigures
from box3_validator.schemas.results import (
    ActualReturnEstimate,
    CalculationPolicy,
    YearInput,
    YearMissingItem,
)
from box3_validator.schemas.state import AnalysisState
from box3_validator.tools.amounts import extract_amount, is_recorded, round_money
from box3_validator.tools.rates import RateTables, rate_for

logger = logging.getLogger(__name__)

MISSING_BANK_INTEREST = "bankrente ontbreekt"
MISSING_DIVIDEND = "dividend ontbreekt"
MISSING_RENTAL_INCOME = "huurinkomsten ontbreken"

_RENTAL_COST_FIELDS = ("maintenance_costs", "property_tax", "insurance", "other_costs")


def _balance_jan_1(figures: YearlyFigures) -> Optional[float]:
    balance = extract_amount(figures.value_jan_1)
    if balance is None:
        balance = extract_amount(figures.balance_jan1)
    return balance


def _sum_field(figures_list: list[YearlyFigures], field_name: str) -> tuple[float, bool]:
    """Sum one income field over assets; also report whether any was known."""
    total = 0.0
    known = False
    for figures in figures_list:
        amount = extract_amount(getattr(figures, field_name))
        if amount is not None:
            total += amount
            known = True
    return total, known


def estimate_actual_return(
    year_input: YearInput,
    rates: RateTables,
    policy: Optional[CalculationPolicy] = None,
) -> ActualReturnEstimate:
    """Calculate a best-effort actual return for one tax year.

    Bank interest that was not recorded is estimated as the Jan 1 balance
    times the year's average savings rate, whatever the account currency or
    country. Dividends, gains, rent and other income are never estimated.

    An asset class with records but no income of its kind yields a missing
    item; a class without records never does.

    Args:
        year_input: Aggregated inputs of the year
        rates: Rate tables (average savings rates are used here)
        policy: Calculation constants (default savings rate)

    Returns:
        ActualReturnEstimate with the split return and inferred gaps
    """
    policy = policy or CalculationPolicy()
    year = year_input.year
    savings_rate = rate_for(rates.average_savings_rates, year, policy.default_savings_rate)

    # Bank savings: recorded interest, or balance x average rate
    known_interest = 0.0
    estimated_interest = 0.0
    has_unknown_interest = False
    has_known_interest = False
    banks_needed: list[str] = []

    for asset in year_input.bank_savings:
        figures = asset.yearly_data[year]
        if is_recorded(figures.interest_received):
            known_interest += extract_amount(figures.interest_received) or 0.0
            has_known_interest = True
            continue

        has_unknown_interest = True
        bank_label = asset.bank_name or asset.description or asset.id
        if bank_label not in banks_needed:
            banks_needed.append(bank_label)

        balance = _balance_jan_1(figures)
        if balance and balance > 0:
            estimated_interest += balance * savings_rate.rate

    investment_figures = [a.yearly_data[year] for a in year_input.investments]
    dividends, dividends_known = _sum_field(investment_figures, "dividend_received")
    gains, gains_known = _sum_field(investment_figures, "realized_gains")

    # Real estate: gross rent minus whatever costs are known
    rental_net = 0.0
    rental_known = False
    rental_gross_total = 0.0
    for asset in year_input.real_estate:
        figures = asset.yearly_data[year]
        gross = extract_amount(figures.rental_income_gross)
        if gross is None:
            continue
        rental_known = True
        rental_gross_total += gross
        costs = sum(extract_amount(getattr(figures, f)) or 0.0 for f in _RENTAL_COST_FIELDS)
        rental_net += gross - costs

    other_figures = [a.yearly_data[year] for a in year_input.other_assets]
    other_income, other_income_known = _sum_field(other_figures, "income_received")
    other_interest, other_interest_known = _sum_field(other_figures, "interest_received")
    other_income += other_interest
    other_income_known = other_income_known or other_interest_known

    debt_interest, debt_interest_known = _sum_field(
        [d.yearly_data[year] for d in year_input.debts], "interest_paid"
    )

    total_bank_interest = known_interest + estimated_interest
    total = total_bank_interest + dividends + gains + rental_net + other_income - debt_interest

    # Nothing to compute from: fall back on the summary total, if any
    if year_input.asset_count == 0 and not year_input.debts:
        if year_input.precomputed_actual_return is not None:
            total = year_input.precomputed_actual_return
            logger.debug(f"{year}: no asset figures, using blueprint actual return €{total:,.2f}")

    missing: list[YearMissingItem] = []
    if has_unknown_interest:
        if not has_known_interest:
            missing.append(YearMissingItem(year=year, description=MISSING_BANK_INTEREST, source="inferred"))
        else:
            # Some accounts are known: name the ones still missing
            for bank in banks_needed:
                missing.append(
                    YearMissingItem(year=year, description=f"{MISSING_BANK_INTEREST} ({bank})", source="inferred")
                )
    if year_input.investments and dividends == 0:
        missing.append(YearMissingItem(year=year, description=MISSING_DIVIDEND, source="inferred"))
    if year_input.real_estate and rental_gross_total == 0:
        missing.append(YearMissingItem(year=year, description=MISSING_RENTAL_INCOME, source="inferred"))

    actual_return = ActualReturn(
        bank_interest=round_money(total_bank_interest) if year_input.bank_savings else None,
        bank_interest_estimated=round_money(estimated_interest) if has_unknown_interest else None,
        dividends=round_money(dividends) if dividends_known else None,
        investment_gain=round_money(gains) if gains_known else None,
        rental_income_net=round_money(rental_net) if rental_known else None,
        other_assets_income=round_money(other_income) if other_income_known else None,
        debt_interest_paid=round_money(debt_interest) if debt_interest_known else None,
        total=round_money(total),
    )

    if has_unknown_interest:
        logger.info(
            f"{year}: estimated €{estimated_interest:,.2f} bank interest "
            f"at {savings_rate.rate:.2%} for {', '.join(banks_needed)}"
        )
    logger.info(f"{year}: actual return €{total:,.2f}")

    return ActualReturnEstimate(
        year=year,
        actual_return=actual_return,
        has_unknown_interest=has_unknown_interest,
        estimated_interest=round_money(estimated_interest),
        savings_rate=savings_rate.rate,
        savings_rate_found=savings_rate.found,
        missing_items=missing,
        banks_needed=banks_needed,
    )


def actual_return_node(state: AnalysisState) -> dict:
    """LangGraph node that estimates the actual return of every year."""
    logger.info("Running actual return estimation node")

    estimates = {
        year: estimate_actual_return(year_input, state.rates, state.policy)
        for year, year_input in state.year_inputs.items()
    }
    return {"estimates": estimates, "status": "estimated"}
