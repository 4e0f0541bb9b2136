"""Unit tests for the tax year aggregator."""

from box3_validator.graph.nodes.aggregator import (
    aggregate_tax_years,
    build_year_input,
    collect_tax_years,
)
from box3_validator.schemas.blueprint import Box3Blueprint


def test_collect_tax_years_union_sorted():
    """Test that years from all sources are combined and sorted."""
    blueprint = Box3Blueprint.model_validate(
        {
            "tax_years": [2023],
            "year_summaries": {"2021": {"status": "complete"}},
            "tax_authority_data": {2022: {}},
        }
    )
    assert collect_tax_years(blueprint) == ["2021", "2022", "2023"]


def test_build_year_input_splits_assets(incomplete_blueprint):
    """Test that only assets with figures for the year are included."""
    blueprint = Box3Blueprint.model_validate(incomplete_blueprint)

    year_2022 = build_year_input(blueprint, "2022")
    assert len(year_2022.investments) == 1
    assert year_2022.bank_savings == []
    assert year_2022.total_assets_jan_1 == 80000.0
    assert year_2022.deemed_return == 5000
    assert year_2022.tax_assessed == 2000
    assert year_2022.status == "ready_for_calculation"

    year_2023 = build_year_input(blueprint, "2023")
    assert year_2023.investments == []
    assert len(year_2023.bank_savings) == 1
    assert year_2023.total_assets_jan_1 == 20000.0


def test_deemed_return_from_per_person_sum():
    """Test the per-person fallback for deemed return and tax assessed."""
    blueprint = Box3Blueprint.model_validate(
        {
            "tax_authority_data": {
                "2021": {
                    "per_person": {
                        "tp_01": {"deemed_return": 1200, "tax_assessed": 372},
                        "fp_01": {"deemed_return": 800, "tax_assessed": 248},
                    }
                }
            }
        }
    )
    year_input = build_year_input(blueprint, "2021")
    assert year_input.deemed_return == 2000
    assert year_input.tax_assessed == 620


def test_year_summary_values():
    """Test that summary status, missing items and totals are carried over."""
    blueprint = Box3Blueprint.model_validate(
        {
            "year_summaries": {
                "2020": {
                    "status": "incomplete",
                    "missing_items": [
                        "Jaaropgave ING ontbreekt",
                        {"description": "WOZ-beschikking", "severity": "high"},
                        "  ",
                    ],
                    "calculated_totals": {
                        "deemed_return_from_tax_authority": 900,
                        "actual_return": {"total": 150},
                    },
                }
            }
        }
    )
    year_input = build_year_input(blueprint, "2020")
    assert year_input.status == "incomplete"
    assert year_input.deemed_return == 900
    assert year_input.precomputed_actual_return == 150
    assert [item.description for item in year_input.explicit_missing] == [
        "Jaaropgave ING ontbreekt",
        "WOZ-beschikking",
    ]
    assert all(item.source == "blueprint" for item in year_input.explicit_missing)


def test_year_without_any_data():
    """Test a declared year without tax authority data or summary."""
    blueprint = Box3Blueprint.model_validate({"tax_years": ["2019"]})
    year_inputs = aggregate_tax_years(blueprint)
    assert list(year_inputs) == ["2019"]
    assert year_inputs["2019"].deemed_return is None
    assert year_inputs["2019"].status == "incomplete"
    assert year_inputs["2019"].asset_count == 0
