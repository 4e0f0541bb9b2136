"""Display utilities for consistent formatting of analysis results."""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from box3_validator.box3.profitability import ProfitabilityCheck
from box3_validator.schemas.results import DossierAnalysis, NextStep, PersonRefund, YearCalculation
from box3_validator.tools.rates import RateTables

console = Console()


def _money(value: Optional[float], estimated: bool = False) -> str:
    if value is None:
        return "unknown"
    return f"{'~' if estimated else ''}{value:,.2f}"


def print_years_table(years: dict[str, YearCalculation], title: str = "Box 3 per year") -> None:
    """Print the per-year comparison of actual and deemed return.

    Args:
        years: Year calculations keyed by tax year
        title: Table title (default: "Box 3 per year")
    """
    if not years:
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Year", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Deemed (€)", justify="right")
    table.add_column("Actual (€)", justify="right")
    table.add_column("Difference (€)", justify="right")
    table.add_column("Rate", justify="right", style="dim")
    table.add_column("Tax paid (€)", justify="right", style="dim")
    table.add_column("Refund (€)", justify="right", style="bold")
    table.add_column("Missing", style="yellow", no_wrap=False)

    for year in sorted(years):
        calc = years[year]
        rate = f"{calc.tax_rate * 100:.0f}%"
        if not calc.tax_rate_found:
            rate += "*"
        refund_text = Text(
            _money(calc.indicative_refund, calc.estimated) if calc.has_calculation else "unknown",
            style="bold green" if calc.is_profitable else "",
        )
        table.add_row(
            year,
            calc.status,
            _money(calc.deemed_return),
            _money(calc.actual_return.total, calc.estimated),
            _money(calc.difference),
            rate,
            _money(calc.tax_assessed),
            refund_text,
            "\n".join(item.description for item in calc.missing_items),
        )

    console.print(table)


def print_persons_table(persons: list[PersonRefund], title: str = "Refund per person") -> None:
    """Print each person's share of the refund and the allocation used."""
    if not persons:
        return

    years = sorted({year for person in persons for year in person.refund_per_year})

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Person", style="cyan")
    table.add_column("Role", style="green")
    for year in years:
        table.add_column(f"{year} (€)", justify="right")
    table.add_column("Total (€)", justify="right", style="bold")

    for person in persons:
        cells = []
        for year in years:
            share = _money(person.refund_per_year.get(year))
            pct = person.allocation_used.get(year)
            if pct is not None:
                share += f" ({pct:.0f}%{'*' if year in person.default_allocation_years else ''})"
            cells.append(share)
        table.add_row(
            person.name or person.person_id,
            person.role,
            *cells,
            _money(person.total_refund),
        )

    console.print(table)


def print_next_step(step: NextStep) -> None:
    """Print the recommended next action."""
    style = {
        "request_documents": "yellow",
        "file_objection": "green",
        "await_client_info": "blue",
        "close_not_profitable": "red",
    }[step.action]
    console.print(f"\n[bold {style}]{step.label}[/bold {style}]: {step.description}")


def print_analysis(analysis: DossierAnalysis) -> None:
    """Print the complete analysis of a dossier."""
    print_years_table(analysis.years)
    print_persons_table(analysis.persons)

    refund = analysis.refund
    console.print("\n[bold cyan]Box 3 refund[/bold cyan]")
    console.print(f"  Gross refund: [green]€{_money(refund.gross_refund, refund.estimated)}[/green]")
    console.print(
        f"  Costs:        €{refund.total_cost:,.2f} "
        f"({refund.years_count} x €{refund.cost_per_year:,.2f})"
    )
    net_style = "green" if refund.net_refund > 0 else "red"
    console.print(
        f"  Net refund:   [{net_style}]€{_money(refund.net_refund, refund.estimated)}[/{net_style}]"
    )
    if refund.estimated:
        console.print("  [dim]~ estimated: bank interest is unknown for at least one year[/dim]")

    print_next_step(analysis.next_step)


def print_profitability(check: ProfitabilityCheck) -> None:
    """Print the outcome of a single-year profitability check."""
    console.print(f"\n[bold blue]Profitability {check.tax_year or ''}[/bold blue]")
    console.print(f"  Actual return: €{_money(check.actual_return)}")
    console.print(f"  Deemed return: €{_money(check.deemed_return)}")
    console.print(f"  Refund (@ {check.tax_rate * 100:.0f}%): €{_money(check.indicative_refund)}")
    if check.is_profitable is None:
        console.print("  [yellow]Not enough data to decide[/yellow]")
    elif check.is_profitable:
        console.print("  [bold green]Kansrijk[/bold green]")
    else:
        console.print("  [red]Niet kansrijk[/red]")
    if check.missing:
        console.print(f"\n[yellow]Missing ({len(check.missing)}):[/yellow]")
        for item in check.missing:
            console.print(f"  • {item}")


def print_rates_table(rates: RateTables, year: Optional[str] = None) -> None:
    """Print the bundled rate tables, optionally for one year only."""
    years = sorted(
        set(rates.tax_rates) | set(rates.average_savings_rates) | set(rates.deemed_return_rates)
    )
    if year is not None:
        years = [y for y in years if y == year]

    table = Table(title="Box 3 rates", show_header=True, header_style="bold magenta")
    table.add_column("Year", style="cyan")
    table.add_column("Tax rate", justify="right", style="bold")
    table.add_column("Savings rate", justify="right")
    table.add_column("Deemed savings", justify="right", style="dim")
    table.add_column("Deemed investments", justify="right", style="dim")
    table.add_column("Deemed debts", justify="right", style="dim")
    table.add_column("Exempt (€)", justify="right", style="dim")

    def pct(value: Optional[float], digits: int = 2) -> str:
        return f"{value * 100:.{digits}f}%" if value is not None else "—"

    def deemed_pct(value: float) -> str:
        return f"{value:.2f}%"

    for y in years:
        deemed = rates.deemed_return_rates.get(y)
        table.add_row(
            y,
            pct(rates.tax_rates.get(y), 0),
            pct(rates.average_savings_rates.get(y)),
            deemed_pct(deemed.savings) if deemed else "—",
            deemed_pct(deemed.investments) if deemed else "—",
            deemed_pct(deemed.debts) if deemed else "—",
            f"{deemed.exempt_amount:,.0f}" if deemed else "—",
        )

    console.print(table)
