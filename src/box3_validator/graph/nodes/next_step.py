"""Next-step classifier: recommends what staff should do with a dossier."""

import logging
from typing import Iterable

from box3_validator.schemas.results import NextStep, RefundSummary, YearCalculation
from box3_validator.schemas.state import AnalysisState
from box3_validator.tools.amounts import format_currency

logger = logging.getLogger(__name__)


def classify_next_step(
    years: Iterable[YearCalculation],
    refund: RefundSummary,
    has_partner: bool,
) -> NextStep:
    """Map the dossier state to a recommended next action.

    Evaluated in order:
    1. any year with missing items      -> request documents
    2. profitable refund                -> file objection(s)
    3. any year still incomplete        -> await client info
    4. otherwise                        -> close, not profitable
    """
    years = list(years)
    missing = [item for year in years for item in year.missing_items]

    if missing:
        banks_needed: list[str] = []
        for year in years:
            for bank in year.banks_needed:
                if bank not in banks_needed:
                    banks_needed.append(bank)
        description = f"Vraag {len(missing)} ontbrekend(e) stuk(ken) op bij de klant"
        if banks_needed:
            description += f" (jaaropgaven van {', '.join(banks_needed)})"
        return NextStep(
            action="request_documents",
            label="Documenten opvragen",
            description=description,
            banks_needed=banks_needed,
        )

    if refund.is_profitable:
        count = 2 if has_partner else 1
        return NextStep(
            action="file_objection",
            label="Bezwaar indienen",
            description=(
                f"Dien {count} verzoek{'en' if count > 1 else ''} werkelijk rendement in; "
                f"netto voordeel {format_currency(refund.net_refund, refund.estimated)}"
            ),
            objection_count=count,
        )

    if any(year.status == "incomplete" for year in years):
        return NextStep(
            action="await_client_info",
            label="Wachten op klant",
            description="Nog niet alle jaren zijn compleet; wacht op aanvullende informatie",
        )

    return NextStep(
        action="close_not_profitable",
        label="Dossier afsluiten",
        description=(
            f"Niet kansrijk: teruggave {format_currency(refund.gross_refund, refund.estimated)} "
            f"weegt niet op tegen de kosten van {format_currency(refund.total_cost)}"
        ),
    )


def next_step_node(state: AnalysisState) -> dict:
    """LangGraph node that picks the recommended next action."""
    refund = state.refund or RefundSummary()
    step = classify_next_step(state.years.values(), refund, state.blueprint.has_partner)
    logger.info(f"Next step: {step.action} ({step.description})")
    return {"next_step": step, "status": "complete"}
