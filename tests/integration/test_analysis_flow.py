"""Integration tests for the analysis graph and the analyzer."""

import pytest

from box3_validator.analyzer import BlueprintError, Box3Analyzer, load_blueprint, load_overrides
from box3_validator.config import Settings
from box3_validator.graph import create_analysis_graph
from box3_validator.graph.nodes.aggregator import aggregate_node
from box3_validator.schemas.blueprint import Box3Blueprint
from box3_validator.schemas.results import CalculationPolicy
from box3_validator.schemas.state import AnalysisState


def test_aggregate_node_accepts_state(complete_blueprint):
    """Test that a node returns a dict of state updates."""
    state = AnalysisState(blueprint=Box3Blueprint.model_validate(complete_blueprint))

    result = aggregate_node(state)

    assert isinstance(result, dict)
    assert result["status"] == "aggregated"
    assert list(result["year_inputs"]) == ["2022"]


def test_graph_runs_all_stages(complete_blueprint, rates):
    """Test the compiled graph end to end."""
    graph = create_analysis_graph()

    result = graph.invoke(
        {
            "blueprint": Box3Blueprint.model_validate(complete_blueprint),
            "policy": CalculationPolicy(),
            "rates": rates,
        }
    )

    assert result["status"] == "complete"
    assert result["years"]["2022"].indicative_refund == pytest.approx(1178.0)
    assert result["refund"].net_refund == pytest.approx(928.0)
    assert result["next_step"].action == "file_objection"


def test_analyze_complete_couple(complete_blueprint):
    """Test a complete dossier: refund 1178 split 60/40, two objections."""
    analysis = Box3Analyzer().analyze(complete_blueprint)

    assert analysis.has_partner
    assert analysis.total_tax_assessed == 2000
    assert analysis.refund.gross_refund == pytest.approx(1178.0)
    assert analysis.refund.total_cost == pytest.approx(250.0)
    assert analysis.refund.net_refund == pytest.approx(928.0)
    assert not analysis.refund.estimated

    taxpayer, partner = analysis.persons
    assert taxpayer.total_refund == pytest.approx(706.8)
    assert partner.total_refund == pytest.approx(471.2)

    assert analysis.next_step.action == "file_objection"
    assert analysis.next_step.objection_count == 2


def test_analyze_incomplete_couple(incomplete_blueprint):
    """Test estimated interest, default allocation and a document request."""
    analysis = Box3Analyzer().analyze(incomplete_blueprint)

    year_2023 = analysis.years["2023"]
    assert year_2023.estimated
    assert year_2023.total_assets_jan_1 == pytest.approx(20000.0)
    assert analysis.years["2022"].total_assets_jan_1 == pytest.approx(80000.0)
    assert year_2023.actual_return.bank_interest_estimated == pytest.approx(200.0)
    assert year_2023.indicative_refund == pytest.approx(256.0)

    assert analysis.refund.gross_refund == pytest.approx(1434.0)
    assert analysis.refund.net_refund == pytest.approx(934.0)
    assert analysis.refund.estimated
    assert analysis.has_unknown_interest

    taxpayer, partner = analysis.persons
    assert taxpayer.refund_per_year["2023"] == pytest.approx(128.0)
    assert partner.refund_per_year["2023"] == pytest.approx(128.0)
    assert taxpayer.default_allocation_years == ["2023"]
    assert taxpayer.total_refund + partner.total_refund == pytest.approx(1434.0)

    assert analysis.next_step.action == "request_documents"
    assert analysis.next_step.banks_needed == ["ABN AMRO"]
    assert [item.description for item in analysis.missing_items] == ["bankrente ontbreekt"]


def test_analyze_with_interest_override(incomplete_blueprint):
    """Test that entering the missing interest completes the dossier."""
    analysis = Box3Analyzer().analyze(
        incomplete_blueprint,
        [
            {
                "field_path": "assets.bank_savings.bank_1.yearly_data.2023.interest_received",
                "override_value": 150,
                "reason": "Jaaropgave ABN AMRO ontvangen",
            }
        ],
    )

    assert not analysis.refund.estimated
    assert analysis.years["2023"].indicative_refund == pytest.approx((1000 - 150) * 0.32)
    assert analysis.missing_items == []
    assert analysis.next_step.action == "file_objection"


def test_analyze_not_profitable(not_profitable_blueprint):
    """Test a dossier where the costs exceed the refund."""
    analysis = Box3Analyzer().analyze(not_profitable_blueprint)

    assert not analysis.has_partner
    assert len(analysis.persons) == 1
    assert analysis.refund.gross_refund == pytest.approx(31.0)
    assert analysis.refund.net_refund == pytest.approx(-219.0)
    assert not analysis.refund.is_profitable
    assert analysis.next_step.action == "close_not_profitable"


def test_analyze_with_custom_settings(complete_blueprint):
    """Test that settings drive the calculation policy."""
    app_settings = Settings(COST_PER_YEAR=1000, MINIMUM_PROFITABLE_AMOUNT=2000)

    analysis = Box3Analyzer(app_settings).analyze(complete_blueprint)

    assert analysis.refund.net_refund == pytest.approx(178.0)
    assert not analysis.refund.is_profitable
    assert analysis.next_step.action == "close_not_profitable"


def test_empty_blueprint():
    """Test that an empty dossier produces an empty analysis."""
    analysis = Box3Analyzer().analyze({})

    assert analysis.years == {}
    assert analysis.refund.gross_refund == 0.0
    assert analysis.next_step.action == "close_not_profitable"


def test_load_blueprint_from_file(write_json, complete_blueprint):
    """Test loading a stored blueprint record from disk."""
    path = write_json({"id": "bp_1", "version": 3, "blueprint": complete_blueprint})

    blueprint = load_blueprint(path)

    assert blueprint.tax_years == ["2022"]
    assert blueprint.partner_id == "fp_01"


def test_load_blueprint_errors(write_json, tmp_path):
    """Test the loading errors."""
    with pytest.raises(BlueprintError):
        load_blueprint(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(BlueprintError):
        load_blueprint(bad)

    with pytest.raises(BlueprintError):
        load_blueprint({"assets": {"bank_savings": "none"}})

    with pytest.raises(BlueprintError):
        load_overrides(write_json({"overrides": {"field_path": "x"}}, name="overrides.json"))


def test_analyze_requests_missing_bank_next_to_known_bank():
    """Test that one unknown account still triggers a document request."""
    blueprint = {
        "tax_years": ["2023"],
        "fiscal_entity": {"taxpayer": {"id": "tp_01"}},
        "assets": {
            "bank_savings": [
                {
                    "id": "b1",
                    "bank_name": "ING",
                    "yearly_data": {"2023": {"value_jan_1": 10000, "interest_received": {"amount": 50}}},
                },
                {"id": "b2", "bank_name": "ABN AMRO", "yearly_data": {"2023": {"value_jan_1": 200000}}},
            ]
        },
        "tax_authority_data": {"2023": {"household_totals": {"deemed_return": 10000}}},
    }

    analysis = Box3Analyzer().analyze(blueprint)

    assert analysis.years["2023"].estimated
    assert analysis.next_step.action == "request_documents"
    assert analysis.next_step.banks_needed == ["ABN AMRO"]
    assert [item.description for item in analysis.missing_items] == ["bankrente ontbreekt (ABN AMRO)"]


def test_stored_override_clearing_a_figure(incomplete_blueprint):
    """Test that a stored override with a null value is applied, not rejected."""
    incomplete_blueprint["assets"]["investments"][0]["yearly_data"]["2022"]["realized_gains"] = 300
    incomplete_blueprint["manual_overrides"] = [
        {
            "field_path": "assets.investments.inv_1.yearly_data.2022.realized_gains",
            "override_value": None,
            "reason": "Geen verkopen in 2022",
        }
    ]

    analysis = Box3Analyzer().analyze(incomplete_blueprint)

    assert analysis.years["2022"].actual_return.investment_gain is None
    assert analysis.years["2022"].indicative_refund == pytest.approx(1178.0)
