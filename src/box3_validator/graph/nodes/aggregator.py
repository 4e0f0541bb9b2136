"""Tax year aggregator node: splits the blueprint into per-year inputs."""

import logging
from typing import Optional, TypeVar

from box3_validator.schemas.blueprint import Asset, Box3Blueprint, MissingItem
from box3_validator.schemas.results import YearInput, YearMissingItem
from box3_validator.schemas.state import AnalysisState
from box3_validator.tools.amounts import extract_amount

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=Asset)


def collect_tax_years(blueprint: Box3Blueprint) -> list[str]:
    """Return the declared tax years of a dossier, ascending.

    Years come from ``tax_years``, ``year_summaries`` and
    ``tax_authority_data`` combined.
    """
    years = set(blueprint.tax_years)
    years.update(blueprint.year_summaries.keys())
    years.update(blueprint.tax_authority_data.keys())
    return sorted(years)


def _with_figures(items: list[A], year: str) -> list[A]:
    return [item for item in items if year in item.yearly_data]


def _deemed_return(blueprint: Box3Blueprint, year: str) -> Optional[float]:
    """Deemed return for a year, by order of preference.

    1. household total from the tax authority
    2. sum of per-person deemed returns
    3. the figure in the blueprint year summary
    """
    authority = blueprint.tax_authority_data.get(year)
    if authority is not None:
        if authority.household_totals.deemed_return is not None:
            return authority.household_totals.deemed_return

        per_person = [
            p.deemed_return for p in authority.per_person.values() if p.deemed_return is not None
        ]
        if per_person:
            return sum(per_person)

    summary = blueprint.year_summaries.get(year)
    if summary is not None and summary.calculated_totals is not None:
        return summary.calculated_totals.deemed_return_from_tax_authority

    return None


def _tax_assessed(blueprint: Box3Blueprint, year: str) -> Optional[float]:
    authority = blueprint.tax_authority_data.get(year)
    if authority is None:
        return None
    if authority.household_totals.total_tax_assessed is not None:
        return authority.household_totals.total_tax_assessed
    per_person = [
        p.tax_assessed for p in authority.per_person.values() if p.tax_assessed is not None
    ]
    return sum(per_person) if per_person else None


def _explicit_missing(blueprint: Box3Blueprint, year: str) -> list[YearMissingItem]:
    summary = blueprint.year_summaries.get(year)
    if summary is None:
        return []

    items = []
    for item in summary.missing_items:
        description = item.description if isinstance(item, MissingItem) else str(item)
        if description.strip():
            items.append(YearMissingItem(year=year, description=description, source="blueprint"))
    return items


def build_year_input(blueprint: Box3Blueprint, year: str) -> YearInput:
    """Gather the assets, debts and tax authority figures of one tax year."""
    year_input = YearInput(
        year=year,
        bank_savings=_with_figures(blueprint.assets.bank_savings, year),
        investments=_with_figures(blueprint.assets.investments, year),
        real_estate=_with_figures(blueprint.assets.real_estate, year),
        other_assets=_with_figures(blueprint.assets.other_assets, year),
        debts=_with_figures(blueprint.debts, year),
        deemed_return=_deemed_return(blueprint, year),
        tax_assessed=_tax_assessed(blueprint, year),
        explicit_missing=_explicit_missing(blueprint, year),
    )

    total_assets = 0.0
    for asset in (
        year_input.bank_savings
        + year_input.investments
        + year_input.real_estate
        + year_input.other_assets
    ):
        figures = asset.yearly_data[year]
        value = extract_amount(figures.value_jan_1)
        if value is None:
            value = extract_amount(figures.balance_jan1)
        if value is None:
            value = extract_amount(figures.woz_value)
        total_assets += value or 0.0
    year_input.total_assets_jan_1 = total_assets

    summary = blueprint.year_summaries.get(year)
    if summary is not None:
        year_input.status = summary.status
        totals = summary.calculated_totals
        if totals is not None and totals.actual_return is not None:
            year_input.precomputed_actual_return = totals.actual_return.total
    elif year in blueprint.tax_authority_data:
        year_input.status = "ready_for_calculation"

    return year_input


def aggregate_tax_years(blueprint: Box3Blueprint) -> dict[str, YearInput]:
    """Build the per-year inputs for every declared tax year."""
    years = collect_tax_years(blueprint)
    logger.info(f"Aggregating {len(years)} tax year(s): {', '.join(years) or 'none'}")

    year_inputs = {}
    for year in years:
        year_input = build_year_input(blueprint, year)
        logger.debug(
            f"{year}: {year_input.asset_count} asset(s), "
            f"assets Jan 1 €{year_input.total_assets_jan_1:,.2f}, "
            f"deemed return {year_input.deemed_return}"
        )
        year_inputs[year] = year_input
    return year_inputs


def aggregate_node(state: AnalysisState) -> dict:
    """LangGraph node that builds the per-year inputs."""
    return {
        "year_inputs": aggregate_tax_years(state.blueprint),
        "status": "aggregated",
    }
