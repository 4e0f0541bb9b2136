"""Cost netting node: gross refund minus the advisory fee per tax year."""

import logging
from typing import Optional

from box3_validator.graph.nodes.box3.comparison import gross_refund
from box3_validator.schemas.results import CalculationPolicy, RefundSummary, YearCalculation
from box3_validator.schemas.state import AnalysisState
from box3_validator.tools.amounts import round_money

logger = logging.getLogger(__name__)


def net_refund(
    years: dict[str, YearCalculation],
    policy: Optional[CalculationPolicy] = None,
) -> RefundSummary:
    """Net the household refund against the per-year fee.

    net = gross - distinct_years x cost_per_year

    The net result may be negative. The dossier is profitable when the gross
    refund exceeds the minimum profitable amount and the net result is
    positive.

    Args:
        years: Year calculations keyed by tax year
        policy: Fee and threshold constants

    Returns:
        RefundSummary with gross, cost and net refund
    """
    policy = policy or CalculationPolicy()
    gross = gross_refund(years.values())
    years_count = len(years)
    total_cost = round_money(years_count * policy.cost_per_year)
    net = round_money(gross - total_cost)

    summary = RefundSummary(
        gross_refund=gross,
        years_count=years_count,
        cost_per_year=policy.cost_per_year,
        total_cost=total_cost,
        net_refund=net,
        estimated=any(year.estimated for year in years.values()),
        is_profitable=gross > policy.minimum_profitable_amount and net > 0,
    )

    logger.info(
        f"Refund: gross €{gross:,.2f} - costs {years_count} x €{policy.cost_per_year:,.2f} "
        f"= net €{net:,.2f} ({'profitable' if summary.is_profitable else 'not profitable'})"
    )
    return summary


def cost_netting_node(state: AnalysisState) -> dict:
    """LangGraph node that computes the household net refund."""
    return {"refund": net_refund(state.years, state.policy), "status": "netted"}
