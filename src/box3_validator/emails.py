"""Follow-up e-mail drafting for analyzed dossiers.

Three variants (Dutch, HTML body):
- request_docs:   documents are missing, shows the estimated refund
- profitable:     calculation complete, offers to file the objection
- not_profitable: refund does not outweigh the costs
"""

import logging
from datetime import datetime, timezone
from html import escape
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from box3_validator.schemas.results import CalculationPolicy, DossierAnalysis

logger = logging.getLogger(__name__)

EmailType = Literal["request_docs", "profitable", "not_profitable"]
EMAIL_TYPES = ("auto", "request_docs", "profitable", "not_profitable")

DEFAULT_SALUTATION = "heer/mevrouw"


class FollowUpEmail(BaseModel):
    """A drafted e-mail ready for review by staff."""

    email_type: EmailType
    subject: str
    body: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def determine_email_type(
    analysis: DossierAnalysis,
    policy: Optional[CalculationPolicy] = None,
) -> EmailType:
    """Pick the e-mail variant that fits the dossier."""
    policy = policy or CalculationPolicy()
    if analysis.missing_items:
        return "request_docs"
    if analysis.refund.gross_refund > policy.minimum_profitable_amount:
        return "profitable"
    return "not_profitable"


def year_range(years: list[str]) -> str:
    """``2021-2023`` for several years, ``2023`` for one."""
    if not years:
        return ""
    if len(years) == 1:
        return years[0]
    numbers = [int(year) for year in years]
    return f"{min(numbers)}-{max(numbers)}"


def _euro(value: float) -> str:
    return f"€{round(value)},-"


def _cost_line(cost_per_year: float, years_count: int) -> str:
    line = f"<li><strong>Kosten:</strong> {_euro(cost_per_year)} per belastingjaar"
    if years_count > 1:
        line += f" (totaal {_euro(cost_per_year * years_count)} voor {years_count} jaren)"
    return line + "</li>"


def _tax_paid_sentence(total_tax_assessed: float) -> str:
    if round(total_tax_assessed) <= 0:
        return ""
    return f"U heeft <strong>{_euro(total_tax_assessed)}</strong> Box 3 belasting betaald. "


def _missing_list_html(analysis: DossierAnalysis) -> str:
    by_year: dict[str, list[str]] = {}
    for item in analysis.missing_items:
        by_year.setdefault(item.year, []).append(item.description)

    parts = []
    for year, descriptions in by_year.items():
        bullets = "".join(f"<li>{escape(d)}</li>" for d in descriptions)
        if len(analysis.years) > 1:
            parts.append(f"<p><strong>{year}:</strong></p><ul>{bullets}</ul>")
        else:
            parts.append(f"<ul>{bullets}</ul>")
    return "".join(parts)


def _request_docs_body(
    first_name: str,
    period: str,
    analysis: DossierAnalysis,
    policy: CalculationPolicy,
) -> str:
    years_count = len(analysis.years)
    refund = round(analysis.refund.gross_refund)
    net = refund - round(policy.cost_per_year * years_count)

    estimate = ""
    if refund > 0:
        estimate = (
            f"<p>Op basis van onze eerste analyse schatten wij uw teruggave op "
            f"<strong>{_euro(refund)}</strong>. Let op: de definitieve teruggaaf hangt af "
            f"van uw daadwerkelijk rendement.</p>\n\n"
        )
    net_line = ""
    if net > 0:
        net_line = (
            f"<li><strong>Geschat netto voordeel:</strong> {_euro(net)} "
            f"(teruggave minus kosten)</li>\n"
        )
    per_year = " per jaar" if years_count > 1 else ""

    return (
        f"<p>Beste {first_name},</p>\n\n"
        f"<p>Goed nieuws! Wij hebben uw aangifte inkomstenbelasting {period} gecontroleerd "
        f"en zien een mogelijkheid voor teruggave van Box 3 belasting.</p>\n\n"
        f"<p>{_tax_paid_sentence(analysis.total_tax_assessed)}De <strong>Hoge Raad</strong> "
        f"heeft bepaald dat u niet meer belasting hoeft te betalen dan uw <strong>werkelijk "
        f"behaalde rendement</strong>. Dit betekent dat als uw daadwerkelijke rente en "
        f"dividend lager was dan wat de Belastingdienst veronderstelde, u recht heeft op "
        f"teruggave.</p>\n\n"
        f"{estimate}"
        f"<p>Om de exacte teruggave te berekenen hebben wij nog de volgende jaaropgaven "
        f"nodig:</p>\n\n"
        f"{_missing_list_html(analysis)}\n\n"
        f"<ul>\n"
        f"<li><strong>Service:</strong> Opstellen en indienen van het officiële verzoek tot "
        f"toepassing werkelijk rendement</li>\n"
        f"{_cost_line(policy.cost_per_year, years_count)}\n"
        f"{net_line}"
        f"</ul>\n\n"
        f"<p><em>Het netto voordeel kan variëren op basis van het vastgestelde werkelijk "
        f"rendement.</em></p>\n\n"
        f"<ol>\n"
        f"<li>Na akkoord en aanlevering van de jaaropgaven maken wij het dossier definitief</li>\n"
        f"<li>U ontvangt een factuur van {_euro(policy.cost_per_year)}{per_year}</li>\n"
        f"<li>Na betaling dienen wij het formele verzoek in bij de Belastingdienst</li>\n"
        f"</ol>\n\n"
        f"<p>U kunt de documenten eenvoudig als bijlage bij een reply op deze email sturen "
        f"of uploaden via uw persoonlijke dossier.</p>\n\n"
        f"<p><strong>Wilt u doorgaan?</strong> Stuur ons de gevraagde jaaropgaven en wij "
        f"zetten de factuur voor u klaar.</p>\n\n"
        f"<p>Met vriendelijke groet,</p>"
    )


def _profitable_body(
    first_name: str,
    period: str,
    analysis: DossierAnalysis,
    policy: CalculationPolicy,
) -> str:
    years_count = len(analysis.years)
    refund = round(analysis.refund.gross_refund)
    net = refund - round(policy.cost_per_year * years_count)
    per_year = " per jaar" if years_count > 1 else ""

    return (
        f"<p>Beste {first_name},</p>\n\n"
        f"<p>Goed nieuws! Wij hebben uw aangifte inkomstenbelasting {period} gecontroleerd "
        f"en de berekening is compleet.</p>\n\n"
        f"<p>{_tax_paid_sentence(analysis.total_tax_assessed)}De <strong>Hoge Raad</strong> "
        f"heeft bepaald dat u niet meer belasting hoeft te betalen dan uw <strong>werkelijk "
        f"behaalde rendement</strong>. Uw werkelijke rendement was lager dan wat de "
        f"Belastingdienst veronderstelde.</p>\n\n"
        f"<p><strong>Berekende teruggave: {_euro(refund)}</strong></p>\n\n"
        f"<p>Dit bedrag is gebaseerd op het verschil tussen uw werkelijke rendement en het "
        f"forfaitaire rendement dat de Belastingdienst heeft gehanteerd.</p>\n\n"
        f"<ul>\n"
        f"<li><strong>Service:</strong> Opstellen en indienen van het officiële verzoek tot "
        f"toepassing werkelijk rendement</li>\n"
        f"{_cost_line(policy.cost_per_year, years_count)}\n"
        f"<li><strong>Netto voordeel:</strong> {_euro(net)} (teruggave minus kosten)</li>\n"
        f"</ul>\n\n"
        f"<ol>\n"
        f"<li>U geeft akkoord om door te gaan</li>\n"
        f"<li>U ontvangt een factuur van {_euro(policy.cost_per_year)}{per_year}</li>\n"
        f"<li>Na betaling dienen wij het formele verzoek in bij de Belastingdienst</li>\n"
        f"</ol>\n\n"
        f"<p><strong>Wilt u doorgaan?</strong> Reageer op deze email met uw akkoord en wij "
        f"zetten de factuur voor u klaar.</p>\n\n"
        f"<p>Met vriendelijke groet,</p>"
    )


def _not_profitable_body(
    first_name: str,
    period: str,
    analysis: DossierAnalysis,
    policy: CalculationPolicy,
) -> str:
    refund = round(analysis.refund.gross_refund)
    tax_paid = ""
    if round(analysis.total_tax_assessed) > 0:
        tax_paid = (
            f"<p>U heeft <strong>{_euro(analysis.total_tax_assessed)}</strong> Box 3 "
            f"belasting betaald.</p>\n\n"
        )

    if refund > 0:
        outcome = (
            f"<p>De mogelijke teruggave bedraagt circa <strong>{_euro(refund)}</strong>. "
            f"De kosten voor het indienen van een verzoek bedragen "
            f"{_euro(policy.cost_per_year)} per jaar. Omdat de teruggave lager is dan de "
            f"kosten, raden wij af om door te gaan.</p>"
        )
    else:
        outcome = (
            "<p>Op basis van de gegevens is er geen teruggave te verwachten. Uw werkelijke "
            "rendement ligt niet lager dan het forfaitaire rendement dat de Belastingdienst "
            "heeft gehanteerd.</p>"
        )

    return (
        f"<p>Beste {first_name},</p>\n\n"
        f"<p>Wij hebben uw aangifte inkomstenbelasting {period} gecontroleerd op "
        f"mogelijkheden voor teruggave van Box 3 belasting.</p>\n\n"
        f"{tax_paid}"
        f"<p>Helaas is een verzoek tot toepassing werkelijk rendement in uw situatie "
        f"<strong>niet rendabel</strong>.</p>\n\n"
        f"{outcome}\n\n"
        f"<p>Het verzoek werkelijk rendement is gebaseerd op het verschil tussen uw "
        f"<strong>daadwerkelijke rente en dividend</strong> en het <strong>forfaitaire "
        f"rendement</strong> dat de Belastingdienst hanteert. In uw geval ligt uw werkelijke "
        f"rendement niet significant lager dan het forfaitaire rendement.</p>\n\n"
        f"<p>Mocht uw situatie in de toekomst veranderen (bijvoorbeeld door lagere "
        f"rendementen op spaargeld), dan kunt u altijd opnieuw contact met ons opnemen.</p>\n\n"
        f"<p>Heeft u vragen over deze beoordeling? Wij lichten het graag toe.</p>\n\n"
        f"<p>Met vriendelijke groet,</p>"
    )


_SUBJECTS = {
    "request_docs": "Box 3 {period} - goed nieuws over mogelijke teruggave",
    "profitable": "Box 3 {period} - uw teruggave is berekend",
    "not_profitable": "Box 3 {period} - onze beoordeling",
}

_BODIES = {
    "request_docs": _request_docs_body,
    "profitable": _profitable_body,
    "not_profitable": _not_profitable_body,
}


def draft_follow_up_email(
    analysis: DossierAnalysis,
    client_name: Optional[str] = None,
    email_type: str = "auto",
    policy: Optional[CalculationPolicy] = None,
) -> FollowUpEmail:
    """Draft the follow-up e-mail for an analyzed dossier.

    Args:
        analysis: Result of Box3Analyzer.analyze
        client_name: Full client name; the first word is used as salutation
        email_type: "auto" or one of request_docs, profitable, not_profitable
        policy: Cost and threshold constants

    Returns:
        FollowUpEmail with subject, HTML body and metadata

    Raises:
        ValueError: If email_type is not a known variant
    """
    if email_type not in EMAIL_TYPES:
        raise ValueError(
            f"Unknown email type '{email_type}', expected one of {', '.join(EMAIL_TYPES)}"
        )

    policy = policy or CalculationPolicy()
    chosen = determine_email_type(analysis, policy) if email_type == "auto" else email_type

    name = (client_name or "").strip() or DEFAULT_SALUTATION
    first_name = escape(name.split()[0])
    period = year_range(sorted(analysis.years))

    email = FollowUpEmail(
        email_type=chosen,
        subject=_SUBJECTS[chosen].format(period=period),
        body=_BODIES[chosen](first_name, period, analysis, policy),
        metadata={
            "year_range": period,
            "total_indicative_refund": analysis.refund.gross_refund,
            "estimated": analysis.refund.estimated,
            "missing_items_count": len(analysis.missing_items),
            "minimum_profitable_amount": policy.minimum_profitable_amount,
        },
    )
    logger.info(
        f"Drafted {chosen} e-mail for {period} "
        f"(refund €{analysis.refund.gross_refund:,.2f}, "
        f"{len(analysis.missing_items)} missing items)"
    )
    return email
