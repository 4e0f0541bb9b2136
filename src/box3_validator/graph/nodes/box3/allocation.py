"""Fiscal partner allocation of the Box 3 refund.

The tax return records how the household's Box 3 base was divided between
the taxpayer and the fiscal partner (``allocation_percentage`` per person).
A refund follows that same division, so each person files their own
objection for their own share.

Stored allocations are only trusted when they look like a real division:
- both percentages present
- together within ``allocation_tolerance`` of 100
- each strictly between ``allocation_min`` and ``allocation_max``

Anything else is discarded in favour of the default split: 50/50 with a
partner, 100/0 without one. Accepted percentages are scaled to sum to
exactly 100 so the person shares add up to the year's refund.
"""

import logging
from typing import Optional

from box3_validator.schemas.blueprint import Box3Blueprint, TaxAuthorityYearData
from box3_validator.schemas.results import CalculationPolicy, PersonRefund, YearCalculation
from box3_validator.schemas.state import AnalysisState
from box3_validator.tools.amounts import round_money

logger = logging.getLogger(__name__)


def is_plausible_allocation(
    taxpayer_pct: Optional[float],
    partner_pct: Optional[float],
    policy: Optional[CalculationPolicy] = None,
) -> bool:
    """Check whether stored partner percentages can be trusted."""
    policy = policy or CalculationPolicy()
    if taxpayer_pct is None or partner_pct is None:
        return False
    if abs(taxpayer_pct + partner_pct - 100) > policy.allocation_tolerance:
        return False
    return all(
        policy.allocation_min < pct < policy.allocation_max
        for pct in (taxpayer_pct, partner_pct)
    )


def resolve_allocation(
    authority: Optional[TaxAuthorityYearData],
    taxpayer_id: str,
    partner_id: Optional[str],
    policy: Optional[CalculationPolicy] = None,
) -> tuple[float, float, bool]:
    """Determine the allocation for one year.

    Returns:
        (taxpayer_pct, partner_pct, used_default)
    """
    if partner_id is None:
        return 100.0, 0.0, False

    taxpayer_pct = partner_pct = None
    if authority is not None:
        taxpayer_data = authority.per_person.get(taxpayer_id)
        partner_data = authority.per_person.get(partner_id)
        taxpayer_pct = taxpayer_data.allocation_percentage if taxpayer_data else None
        partner_pct = partner_data.allocation_percentage if partner_data else None

    if not is_plausible_allocation(taxpayer_pct, partner_pct, policy):
        if taxpayer_pct is not None or partner_pct is not None:
            logger.info(
                f"Ignoring implausible allocation {taxpayer_pct}/{partner_pct}, using 50/50"
            )
        return 50.0, 50.0, True

    total = taxpayer_pct + partner_pct
    return taxpayer_pct * 100 / total, partner_pct * 100 / total, False


def allocate_refunds(
    years: dict[str, YearCalculation],
    blueprint: Box3Blueprint,
    policy: Optional[CalculationPolicy] = None,
) -> list[PersonRefund]:
    """Split every year's refund between taxpayer and fiscal partner.

    Args:
        years: Year calculations keyed by tax year
        blueprint: Dossier (fiscal entity and tax authority allocations)
        policy: Plausibility thresholds

    Returns:
        One PersonRefund for the taxpayer, plus one for the partner if present
    """
    policy = policy or CalculationPolicy()
    entity = blueprint.fiscal_entity
    partner_id = blueprint.partner_id

    taxpayer = PersonRefund(
        person_id=blueprint.taxpayer_id,
        role="taxpayer",
        name=entity.taxpayer.name,
    )
    partner = None
    if partner_id is not None:
        partner = PersonRefund(
            person_id=partner_id,
            role="fiscal_partner",
            name=entity.fiscal_partner.name,
        )

    for year, calculation in years.items():
        taxpayer_pct, partner_pct, used_default = resolve_allocation(
            blueprint.tax_authority_data.get(year),
            taxpayer.person_id,
            partner_id,
            policy,
        )

        year_refund = calculation.indicative_refund
        taxpayer_share = round_money(year_refund * taxpayer_pct / 100)
        taxpayer.refund_per_year[year] = taxpayer_share
        taxpayer.allocation_used[year] = taxpayer_pct
        if used_default:
            taxpayer.default_allocation_years.append(year)

        if partner is not None:
            # Remainder, so the two shares add up to the year refund exactly
            partner.refund_per_year[year] = round_money(year_refund - taxpayer_share)
            partner.allocation_used[year] = partner_pct
            if used_default:
                partner.default_allocation_years.append(year)

    persons = [taxpayer] if partner is None else [taxpayer, partner]
    for person in persons:
        person.total_refund = round_money(sum(person.refund_per_year.values()))
        person.is_profitable = person.total_refund > 0
        logger.info(
            f"{person.role} {person.person_id}: refund €{person.total_refund:,.2f}"
        )

    return persons


def allocation_node(state: AnalysisState) -> dict:
    """LangGraph node that splits the refund per person."""
    logger.info("Running partner allocation node")
    return {
        "persons": allocate_refunds(state.years, state.blueprint, state.policy),
        "status": "allocated",
    }
