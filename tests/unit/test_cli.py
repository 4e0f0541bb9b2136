"""Unit tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from box3_validator import __version__
from box3_validator.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner):
    """Test the version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_analyze_prints_next_step(runner, write_json, complete_blueprint):
    """Test the rich output of a profitable dossier."""
    result = runner.invoke(app, ["analyze", str(write_json(complete_blueprint))])

    assert result.exit_code == 0
    assert "Bezwaar indienen" in result.output


def test_analyze_json_with_email(runner, write_json, complete_blueprint):
    """Test JSON output including a drafted e-mail."""
    path = write_json(complete_blueprint)

    result = runner.invoke(app, ["analyze", str(path), "--json", "--email", "auto", "--client", "Jan"])

    assert result.exit_code == 0
    assert '"gross_refund": 1178.0' in result.output
    assert '"action": "file_objection"' in result.output
    assert '"email_type": "profitable"' in result.output


def test_analyze_with_overrides_file(runner, write_json, complete_blueprint):
    """Test that an overrides file changes the result."""
    blueprint = write_json(complete_blueprint)
    overrides = write_json(
        {
            "overrides": [
                {
                    "field_path": "tax_authority_data.2022.household_totals.deemed_return",
                    "override_value": 1300,
                }
            ]
        },
        name="overrides.json",
    )

    result = runner.invoke(app, ["analyze", str(blueprint), "-o", str(overrides), "--json"])

    assert result.exit_code == 0
    assert '"gross_refund": 31.0' in result.output
    assert '"action": "close_not_profitable"' in result.output


def test_analyze_missing_file(runner, tmp_path):
    """Test that a missing blueprint exits with code 1."""
    result = runner.invoke(app, ["analyze", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_analyze_invalid_blueprint(runner, write_json):
    """Test that a blueprint that is not an object exits with code 1."""
    result = runner.invoke(app, ["analyze", str(write_json([1, 2, 3]))])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_analyze_unknown_email_type(runner, write_json, complete_blueprint):
    """Test that an unknown e-mail type is reported as an error."""
    result = runner.invoke(
        app, ["analyze", str(write_json(complete_blueprint)), "--email", "reminder"]
    )

    assert result.exit_code == 1
    assert "Unknown email type" in result.output


def test_check_command(runner, write_json):
    """Test the legacy profitability check."""
    path = write_json(
        {
            "gevonden_data": {
                "algemeen": {"belastingjaar": "2022"},
                "werkelijk_rendement_input": {"bank_rente_ontvangen": 100},
                "fiscus_box3": {"belastbaar_inkomen_na_drempel": 2000},
            }
        },
        name="validation.json",
    )

    result = runner.invoke(app, ["check", str(path)])

    assert result.exit_code == 0
    assert "Kansrijk" in result.output


def test_rates_command(runner):
    """Test the rates table for one year and the default-rate warning."""
    result = runner.invoke(app, ["rates", "--year", "2023"])
    assert result.exit_code == 0
    assert "32%" in result.output

    result = runner.invoke(app, ["rates", "--year", "2030"])
    assert result.exit_code == 0
    assert "No tax rate for 2030" in result.output
