"""Unit tests for follow-up e-mail drafting."""

import pytest

from box3_validator.analyzer import Box3Analyzer
from box3_validator.emails import determine_email_type, draft_follow_up_email, year_range


@pytest.fixture
def analyzer() -> Box3Analyzer:
    return Box3Analyzer()


def test_year_range():
    """Test single and multi-year ranges."""
    assert year_range(["2023"]) == "2023"
    assert year_range(["2021", "2023", "2022"]) == "2021-2023"
    assert year_range([]) == ""


def test_request_docs_email(analyzer, incomplete_blueprint):
    """Test the request-docs variant for a dossier with missing interest."""
    analysis = analyzer.analyze(incomplete_blueprint)

    email = draft_follow_up_email(analysis, "Jan de Vries")

    assert email.email_type == "request_docs"
    assert email.subject == "Box 3 2022-2023 - goed nieuws over mogelijke teruggave"
    assert email.body.startswith("<p>Beste Jan,</p>")
    assert "U heeft <strong>€5000,-</strong> Box 3 belasting betaald." in email.body
    assert "schatten wij uw teruggave op <strong>€1434,-</strong>" in email.body
    assert "<p><strong>2023:</strong></p><ul><li>bankrente ontbreekt</li></ul>" in email.body
    assert "(totaal €500,- voor 2 jaren)" in email.body
    assert "<strong>Geschat netto voordeel:</strong> €934,-" in email.body
    assert email.metadata["missing_items_count"] == 1
    assert email.metadata["estimated"] is True


def test_profitable_email(analyzer, complete_blueprint):
    """Test the profitable variant for a complete dossier."""
    analysis = analyzer.analyze(complete_blueprint)

    email = draft_follow_up_email(analysis, "Jan de Vries")

    assert email.email_type == "profitable"
    assert email.subject == "Box 3 2022 - uw teruggave is berekend"
    assert "Berekende teruggave: €1178,-" in email.body
    assert "<strong>Netto voordeel:</strong> €928,-" in email.body
    assert "totaal" not in email.body
    assert email.metadata["year_range"] == "2022"


def test_not_profitable_email(analyzer, not_profitable_blueprint):
    """Test the not-profitable variant and the default salutation."""
    analysis = analyzer.analyze(not_profitable_blueprint)

    email = draft_follow_up_email(analysis)

    assert email.email_type == "not_profitable"
    assert email.subject == "Box 3 2022 - onze beoordeling"
    assert email.body.startswith("<p>Beste heer/mevrouw,</p>")
    assert "circa <strong>€31,-</strong>" in email.body
    assert "belasting betaald" not in email.body


def test_explicit_email_type(analyzer, not_profitable_blueprint):
    """Test that an explicit type overrides the automatic choice."""
    analysis = analyzer.analyze(not_profitable_blueprint)

    assert determine_email_type(analysis) == "not_profitable"
    email = draft_follow_up_email(analysis, "Piet Jansen", email_type="profitable")
    assert email.email_type == "profitable"


def test_unknown_email_type(analyzer, not_profitable_blueprint):
    """Test that an unknown type raises."""
    analysis = analyzer.analyze(not_profitable_blueprint)

    with pytest.raises(ValueError):
        draft_follow_up_email(analysis, email_type="reminder")


def test_client_name_is_escaped(analyzer, not_profitable_blueprint):
    """Test that the salutation cannot inject markup."""
    analysis = analyzer.analyze(not_profitable_blueprint)

    email = draft_follow_up_email(analysis, "<b>Piet</b> Jansen")

    assert "Beste &lt;b&gt;Piet&lt;/b&gt;," in email.body
