"""Deemed-return comparison node and logic.

Compares the actual return of a year with the deemed (forfaitair) return the
tax authority used and derives the indicative refund.
"""

import logging
from typing import Iterable, Optional

from box3_validator.schemas.results import (
    ActualReturnEstimate,
    CalculationPolicy,
    YearCalculation,
    YearInput,
)
from box3_validator.schemas.state import AnalysisState
from box3_validator.tools.amounts import round_money
from box3_validator.tools.rates import RateTables, rate_for

logger = logging.getLogger(__name__)


def compare_with_deemed_return(
    year_input: YearInput,
    estimate: ActualReturnEstimate,
    rates: RateTables,
    policy: Optional[CalculationPolicy] = None,
) -> YearCalculation:
    """Compute the indicative refund of one tax year.

    difference = deemed return - actual return
    refund     = max(0, difference x tax rate), capped at the tax assessed

    Without a deemed return there is nothing to compare: the refund is 0 and
    ``has_calculation`` stays False.

    Args:
        year_input: Aggregated inputs (deemed return, tax assessed, status)
        estimate: Actual return of the same year
        rates: Rate tables (tax rates are used here)
        policy: Calculation constants (default tax rate, refund cap)

    Returns:
        YearCalculation for the year
    """
    policy = policy or CalculationPolicy()
    year = year_input.year
    tax_rate = rate_for(rates.tax_rates, year, policy.default_tax_rate)
    actual_total = estimate.actual_return.total or 0.0

    calculation = YearCalculation(
        year=year,
        actual_return=estimate.actual_return,
        total_assets_jan_1=year_input.total_assets_jan_1,
        deemed_return=year_input.deemed_return,
        tax_rate=tax_rate.rate,
        tax_rate_found=tax_rate.found,
        tax_assessed=year_input.tax_assessed,
        estimated=estimate.has_unknown_interest,
        status=year_input.status,
        missing_items=year_input.explicit_missing + estimate.missing_items,
        banks_needed=list(estimate.banks_needed),
    )

    if year_input.deemed_return is None:
        logger.info(f"{year}: no deemed return available, refund unknown")
        return calculation

    difference = year_input.deemed_return - actual_total
    theoretical = max(0.0, difference * tax_rate.rate)

    refund = theoretical
    if (
        policy.cap_refund_at_tax_assessed
        and year_input.tax_assessed is not None
        and year_input.tax_assessed > 0
        and refund > year_input.tax_assessed
    ):
        logger.info(
            f"{year}: refund €{refund:,.2f} capped at assessed tax "
            f"€{year_input.tax_assessed:,.2f}"
        )
        refund = year_input.tax_assessed

    calculation.difference = round_money(difference)
    calculation.theoretical_refund = round_money(theoretical)
    calculation.indicative_refund = round_money(refund)
    calculation.is_profitable = calculation.indicative_refund > 0
    calculation.has_calculation = True

    logger.info(
        f"{year}: deemed €{year_input.deemed_return:,.2f} - actual €{actual_total:,.2f} "
        f"= €{difference:,.2f}, refund (@ {tax_rate.rate * 100:.0f}%) "
        f"{'~' if calculation.estimated else ''}€{refund:,.2f}"
    )
    return calculation


def gross_refund(years: Iterable[YearCalculation]) -> float:
    """Household gross refund: the sum of the yearly refunds."""
    return round_money(sum(year.indicative_refund for year in years))


def comparison_node(state: AnalysisState) -> dict:
    """LangGraph node that compares actual and deemed return per year."""
    logger.info("Running deemed return comparison node")

    years = {}
    for year, year_input in state.year_inputs.items():
        estimate = state.estimates.get(year)
        if estimate is None:
            logger.error(f"No actual return estimate for {year}, skipping")
            continue
        years[year] = compare_with_deemed_return(year_input, estimate, state.rates, state.policy)

    return {"years": years, "status": "compared"}
