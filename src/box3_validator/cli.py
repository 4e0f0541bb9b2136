"""Command-line interface for the Box 3 validator."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from box3_validator import __version__
from box3_validator.analyzer import BlueprintError, Box3Analyzer, load_overrides, read_json
from box3_validator.box3.profitability import calculate_profitability
from box3_validator.config import settings
from box3_validator.display_utils import (
    print_analysis,
    print_profitability,
    print_rates_table,
)
from box3_validator.emails import draft_follow_up_email
from box3_validator.schemas.results import CalculationPolicy
from box3_validator.tools.rates import load_rate_tables

# Setup logging (on stderr so --json output stays parseable)
log_console = Console(stderr=True)
logging.basicConfig(
    level=settings.log_level,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, console=log_console)],
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="box3-validator",
    help="Box 3 Validator - refund calculation for Dutch wealth tax objections",
    add_completion=False,
)
console = Console()


@app.command()
def analyze(
    blueprint: Path = typer.Argument(..., help="Blueprint JSON file of the dossier"),
    overrides: Optional[Path] = typer.Option(None, "--overrides", "-o", help="JSON file with manual overrides"),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
    email: Optional[str] = typer.Option(
        None, "--email", "-e", help="Draft a follow-up e-mail (auto, request_docs, profitable, not_profitable)"
    ),
    client: Optional[str] = typer.Option(None, "--client", "-c", help="Client name for the e-mail salutation"),
):
    """Calculate the refund, partner split and next step for a dossier."""
    analyzer = Box3Analyzer()

    try:
        extra = load_overrides(overrides) if overrides else None
        analysis = analyzer.analyze(blueprint, extra)
        drafted = (
            draft_follow_up_email(analysis, client, email, CalculationPolicy.from_settings(settings))
            if email
            else None
        )
    except ValueError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(1)

    if as_json:
        payload = {"analysis": analysis.model_dump(mode="json")}
        if drafted is not None:
            payload["email"] = drafted.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    console.print(f"\n[bold blue]Dossier: {blueprint.name}[/bold blue]\n")
    print_analysis(analysis)

    if drafted is not None:
        console.print(f"\n[bold cyan]E-mail ({drafted.email_type})[/bold cyan]")
        console.print(f"[bold]Subject:[/bold] {drafted.subject}\n")
        console.print(drafted.body, markup=False, highlight=False)


@app.command()
def check(
    validation_result: Path = typer.Argument(..., help="Legacy validation result JSON file"),
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Tax year (default: year in the file)"),
    overrides: Optional[Path] = typer.Option(None, "--overrides", "-o", help="JSON file with extraValues"),
):
    """Single-year profitability check on a legacy validation result."""
    try:
        data = _read_json_object(validation_result)
        manual = _read_json_object(overrides) if overrides else None
        result = calculate_profitability(data, year, manual)
    except ValueError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(1)

    print_profitability(result)


@app.command()
def rates(
    year: Optional[str] = typer.Option(None, "--year", "-y", help="Only show this tax year"),
):
    """Show the tax, savings and deemed return rates per year."""
    tables = load_rate_tables()
    if year is not None and year not in tables.tax_rates:
        console.print(
            f"[yellow]No tax rate for {year}; the default of "
            f"{settings.default_tax_rate * 100:.0f}% would be used[/yellow]"
        )
    print_rates_table(tables, year)


@app.command()
def version():
    """Show the version."""
    console.print(f"box3-validator {__version__}")


def _read_json_object(path: Path) -> dict:
    data = read_json(path)
    if not isinstance(data, dict):
        raise BlueprintError(f"Expected a JSON object in {path}")
    return data


if __name__ == "__main__":
    app()
