"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from box3_validator.schemas.results import CalculationPolicy
from box3_validator.tools.rates import RateTables, load_rate_tables


@pytest.fixture
def rates() -> RateTables:
    """Bundled Box 3 rate tables."""
    return load_rate_tables()


@pytest.fixture
def policy() -> CalculationPolicy:
    """Default calculation constants (cost 250, minimum 250, 5/95 bounds)."""
    return CalculationPolicy()


@pytest.fixture
def complete_blueprint() -> dict:
    """Couple, one complete year (2022).

    Deemed return 5000, dividends 1200, rate 31% -> refund 1178, split 60/40.
    """
    return {
        "schema_version": "2.0",
        "tax_years": ["2022"],
        "fiscal_entity": {
            "taxpayer": {"id": "tp_01", "name": "Jan de Vries"},
            "fiscal_partner": {"has_partner": True, "id": "fp_01", "name": "Anna de Vries"},
        },
        "assets": {
            "investments": [
                {
                    "id": "inv_1",
                    "description": "Beleggingsrekening DEGIRO",
                    "institution": "DEGIRO",
                    "yearly_data": {
                        "2022": {
                            "value_jan_1": {"amount": 80000, "source_doc_id": "doc_2"},
                            "dividend_received": {"amount": 1200, "source_doc_id": "doc_2"},
                        }
                    },
                }
            ]
        },
        "tax_authority_data": {
            "2022": {
                "document_type": "aanslag_definitief",
                "per_person": {
                    "tp_01": {"allocation_percentage": 60},
                    "fp_01": {"allocation_percentage": 40},
                },
                "household_totals": {"deemed_return": 5000, "total_tax_assessed": 2000},
            }
        },
    }


@pytest.fixture
def incomplete_blueprint(complete_blueprint: dict) -> dict:
    """The complete dossier plus 2023, where the bank interest is unknown.

    2023: balance 20000 at 1.00% -> 200 estimated interest, deemed 1000,
    rate 32% -> refund 256, stored allocation 0/100 (implausible) -> 50/50.
    """
    blueprint = complete_blueprint
    blueprint["tax_years"] = ["2022", "2023"]
    blueprint["assets"]["bank_savings"] = [
        {
            "id": "bank_1",
            "description": "Spaarrekening",
            "bank_name": "ABN AMRO",
            "yearly_data": {"2023": {"value_jan_1": 20000}},
        }
    ]
    blueprint["tax_authority_data"]["2023"] = {
        "per_person": {
            "tp_01": {"allocation_percentage": 0},
            "fp_01": {"allocation_percentage": 100},
        },
        "household_totals": {"deemed_return": 1000, "total_tax_assessed": 3000},
    }
    return blueprint


@pytest.fixture
def not_profitable_blueprint() -> dict:
    """Single taxpayer, deemed 1300 vs. actual 1200 -> refund 31."""
    return {
        "tax_years": [2022],
        "fiscal_entity": {"taxpayer": {"id": "tp_01", "name": "Piet Jansen"}},
        "assets": {
            "bank_savings": [
                {
                    "id": "bank_1",
                    "bank_name": "ING",
                    "yearly_data": {
                        "2022": {"value_jan_1": 60000, "interest_received": {"amount": 1200}}
                    },
                }
            ]
        },
        "tax_authority_data": {"2022": {"household_totals": {"deemed_return": 1300}}},
    }


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON document to a temporary file and return its path."""

    def _write(data, name: str = "blueprint.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
