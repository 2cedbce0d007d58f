import logging
import random

import pytest

from rehearsal.modules.engine.service import (
    CONFIDENCE_CAP,
    NATHAN_NOTES,
    InvalidChoiceError,
    export_history,
    flowchart_summary,
    make_choice,
    start_scenario,
)
from rehearsal.modules.engine.state import RehearsalState
from rehearsal.modules.scenarios.schemas import Scenario
from rehearsal.modules.scenarios.service import get_scenario
from rehearsal.utils.errors import ValidationError


def _inline_scenario(scenes: list[dict]) -> Scenario:
    return Scenario.model_validate(
        {
            "id": "inline",
            "title": "Inline Practice",
            "description": "Built in the test",
            "character": {"name": "Robin", "avatar": "🙂"},
            "scenes": scenes,
        }
    )


def test_start_enters_intro_and_counts_attempt() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    view = start_scenario(state, scenario, rng=random.Random(1))

    assert view.scene_id == "intro"
    assert view.character_name == "Alex"
    assert len(view.choices) == 3
    assert view.choices[0].impact_description == "+2 empathy, +1 trust"
    assert state.status == "active"
    assert state.attempts == {"friend-checkin": 1}
    assert state.stats.total() == 0


def test_successful_path_records_breakthrough_and_summary() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    rng = random.Random(7)
    start_scenario(state, scenario, rng=rng)

    first = make_choice(state, scenario, 0, rng=rng)
    assert first.scene is not None and first.scene.scene_id == "opening_up"
    assert first.ended is False
    assert len(state.breakthroughs) == 1
    assert state.breakthroughs[0].description == "Breakthrough moment in Checking on a Friend"

    second = make_choice(state, scenario, 0, rng=rng)
    assert second.ended is True
    assert state.status == "ended"
    assert state.outcome == "success"
    summary = second.summary
    assert summary is not None
    assert summary.success is True
    assert (summary.empathy, summary.trust, summary.effectiveness) == (5, 3, 1)
    assert summary.total_score == 9
    assert summary.max_score == 30
    assert summary.choices_made == 2
    assert summary.breakthroughs == 1
    assert summary.rehearsal_confidence == 15
    assert summary.nathan_note in NATHAN_NOTES
    assert summary.report.startswith("REHEARSAL SUCCESSFUL - DETAILED ANALYSIS")


def test_neutral_end_completes_without_success() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    start_scenario(state, scenario)
    make_choice(state, scenario, 1)
    result = make_choice(state, scenario, 1)

    assert result.ended is True
    assert state.outcome == "complete"
    assert result.summary is not None and result.summary.success is False
    assert state.stats.model_dump() == {"empathy": 0, "trust": 0, "effectiveness": 1}
    assert result.summary.report.startswith("REHEARSAL COMPLETE")


def test_history_is_append_only_and_matches_choice_count() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    start_scenario(state, scenario)
    make_choice(state, scenario, 1)
    snapshot = [item.model_dump() for item in state.history]
    make_choice(state, scenario, 0)

    assert len(state.history) == 2
    assert [item.model_dump() for item in state.history[:1]] == snapshot
    assert state.history[0].scene == "intro"
    assert state.history[0].impact == {"empathy": -1, "effectiveness": 1}
    assert state.history[1].scene == "deflect"


def test_unresolved_next_ends_run_as_failure_without_raising(caplog: pytest.LogCaptureFixture) -> None:
    scenario = _inline_scenario(
        [
            {
                "id": "intro",
                "text": "Start",
                "choices": [{"text": "Walk into the void", "impact": {"trust": 1}, "next": "nowhere"}],
            }
        ]
    )
    state = RehearsalState()
    start_scenario(state, scenario)
    with caplog.at_level(logging.ERROR):
        result = make_choice(state, scenario, 0)

    assert result.ended is True
    assert result.scene is None
    assert state.outcome == "failure"
    assert state.end_reason == "unresolved_next"
    assert state.stats.trust == 1
    assert "Unresolved scene reference" in caplog.text


def test_success_sentinel_and_end_choice_finish_successfully() -> None:
    scenario = _inline_scenario(
        [
            {
                "id": "intro",
                "text": "Start",
                "choices": [
                    {"text": "Say the right thing", "next": "success"},
                    {"text": "Wrap it up kindly", "isEnd": True},
                ],
            }
        ]
    )
    for index in (0, 1):
        state = RehearsalState()
        start_scenario(state, scenario)
        result = make_choice(state, scenario, index)
        assert result.ended is True
        assert state.outcome == "success"


def test_invalid_choice_index_is_rejected() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    start_scenario(state, scenario)
    with pytest.raises(InvalidChoiceError) as exc_info:
        make_choice(state, scenario, 9)
    assert exc_info.value.code == "INVALID_CHOICE"
    assert exc_info.value.status_code == 400
    assert state.history == []


def test_choice_after_end_is_rejected() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    start_scenario(state, scenario)
    make_choice(state, scenario, 2)
    assert state.status == "ended"
    with pytest.raises(InvalidChoiceError):
        make_choice(state, scenario, 0)


def test_restart_resets_run_but_keeps_attempts() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    for _ in range(8):
        start_scenario(state, scenario)
        make_choice(state, scenario, 2)

    assert state.attempts["friend-checkin"] == 8
    assert state.summary is not None
    assert state.summary.rehearsal_confidence == CONFIDENCE_CAP

    start_scenario(state, scenario)
    assert state.history == []
    assert state.summary is None
    assert state.status == "active"


def test_start_without_scenes_is_rejected() -> None:
    scenario = _inline_scenario([{"id": "only", "text": "One scene", "isEnd": True}])
    scenario.scenes = []
    with pytest.raises(ValidationError) as exc_info:
        start_scenario(RehearsalState(), scenario)
    assert exc_info.value.code == "NO_START_SCENE"


def test_flowchart_and_export_reflect_history() -> None:
    scenario = get_scenario("friend-checkin")
    state = RehearsalState()
    start_scenario(state, scenario)
    make_choice(state, scenario, 1)

    chart = flowchart_summary(state)
    assert chart["paths_explored"] == 1
    assert chart["current_branch_depth"] == "deflect"
    assert chart["unique_decisions"] == 1

    exported = export_history(state)
    assert exported["scenario_id"] == "friend-checkin"
    assert len(exported["history"]) == 1
    assert exported["attempts"] == {"friend-checkin": 1}
    assert exported["summary"] is None
