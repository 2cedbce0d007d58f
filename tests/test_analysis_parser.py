import logging

import pytest

from rehearsal.modules.llm_boundary.parsers import (
    DEFAULT_OBSERVATION,
    DEFAULT_PRODUCTION_NOTES,
    DEFAULT_SUGGESTIONS,
    default_analysis,
    parse_analysis_response,
    parse_production_notes,
)

WELL_FORMED = """AWKWARDNESS_SCORE: 88
COMPLEXITY_RATING: 42
OPTIMALITY_SCORE: 91

DIALOGUE_QUALITY: 77
PREPARATION_LEVEL: 95
AWKWARDNESS_AUTHENTICITY: 64
STATISTICAL_CREDIBILITY: 51

NATHAN_OBSERVATION: This script has the texture of rehearsal attempt 12. Promising.

IMPROVEMENT_SUGGESTIONS:
- Build a replica of the kitchen
- Time every pause to the tenth of a second
- Hire an actor to play the cat
- Laminate the flowchart
- Rehearse the silence
- Rehearse the rehearsal
"""


def test_well_formed_block_yields_labeled_values() -> None:
    parsed = parse_analysis_response(WELL_FORMED)
    values = parsed.as_values()
    assert values["awkwardness_score"] == 88
    assert values["complexity_rating"] == 42
    assert values["optimality_score"] == 91
    assert values["breakdown"] == {
        "dialogue_quality": 77,
        "preparation_level": 95,
        "awkwardness_authenticity": 64,
        "statistical_credibility": 51,
    }
    assert values["nathan_observation"] == "This script has the texture of rehearsal attempt 12. Promising."
    assert values["improvement_suggestions"][0] == "Build a replica of the kitchen"
    assert len(values["improvement_suggestions"]) == 5
    assert parsed.missing_fields() == []


def test_malformed_block_falls_back_to_flagged_defaults(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        parsed = parse_analysis_response("The model rambled about coffee and forgot the format.")
    assert parsed == default_analysis()
    values = parsed.as_values()
    assert (values["awkwardness_score"], values["complexity_rating"], values["optimality_score"]) == (73, 67, 81)
    assert values["breakdown"] == {
        "dialogue_quality": 75,
        "preparation_level": 68,
        "awkwardness_authenticity": 82,
        "statistical_credibility": 45,
    }
    assert values["nathan_observation"] == DEFAULT_OBSERVATION
    assert values["improvement_suggestions"] == list(DEFAULT_SUGGESTIONS)
    assert len(parsed.missing_fields()) == 9
    assert "missing fields" in caplog.text


def test_partial_block_flags_only_absent_fields() -> None:
    parsed = parse_analysis_response("AWKWARDNESS_SCORE: 12\nNATHAN_OBSERVATION:   \n")
    assert parsed.awkwardness_score.value == 12
    assert parsed.awkwardness_score.present is True
    assert parsed.nathan_observation.present is False
    assert parsed.nathan_observation.value == DEFAULT_OBSERVATION
    assert "awkwardness_score" not in parsed.missing_fields()
    assert "complexity_rating" in parsed.missing_fields()


def test_production_notes_take_dash_lines_up_to_five() -> None:
    text = "Here you go:\n- one\n- two\n-three\n- four\n- five\n- six\n"
    assert parse_production_notes(text) == ["one", "two", "three", "four", "five"]


def test_production_notes_default_when_no_dash_lines() -> None:
    assert parse_production_notes("No list here.") == list(DEFAULT_PRODUCTION_NOTES)
    assert parse_production_notes("") == list(DEFAULT_PRODUCTION_NOTES)
