from __future__ import annotations

import logging
import random

from rehearsal.modules.engine.schemas import ChoiceResult, ChoiceView, SceneView
from rehearsal.modules.engine.state import (
    MAX_TOTAL_SCORE,
    Breakthrough,
    HistoryEntry,
    PlayerStats,
    RehearsalState,
    RehearsalSummary,
    apply_impact,
    describe_impact,
)
from rehearsal.modules.scenarios.schemas import SUCCESS_SENTINEL, Scenario, Scene
from rehearsal.modules.scenarios.service import find_start_scene
from rehearsal.utils.errors import ValidationError
from rehearsal.utils.time import utc_now_iso

logger = logging.getLogger(__name__)

MEMORY_ACCURACY = 87.3
CONFIDENCE_PER_ATTEMPT = 15
CONFIDENCE_CAP = 95
FLOWCHART_NOTE = "I once mapped 247 possible conversation branches for a single 'Hello'. You're doing great."

NATHAN_NOTES = (
    "This conversation structure mirrors episode 47 of my show, but with less awkward silence.",
    "Notice how the dialogue branches create exactly 1,024 possible outcomes? That's not a coincidence.",
    "In my experience, rehearsing conversations reduces real-world anxiety by approximately 73.4%.",
    "The key insight here is that every conversation is performance art, whether you realize it or not.",
    "I once rehearsed ordering coffee 127 times. This feels more important than that.",
    "Statistical analysis suggests you're developing genuine conversational confidence.",
    "Remember: in real life, there are no do-overs. But here, you can practice until perfect.",
)

COMMENTARY_TEMPLATES = (
    "Choice {choice_count} of attempt {attempts}. Each decision creates a new timeline.",
    "You've discovered {choice_count} of approximately 1,024 possible conversation nodes.",
    "Interesting choice. In my experience, that works {percent}% of the time.",
    "Notice how their body language changed? (If this were real, I mean.)",
    "This path reminds me of rehearsal attempt #{episode} from the show.",
    "Statistical analysis shows this approach has a {percent}% success rate.",
)


class InvalidChoiceError(ValidationError):
    def __init__(self, message: str, details: object = None):
        super().__init__(message, details, code="INVALID_CHOICE")


def _rng(rng: random.Random | None) -> random.Random:
    return rng or random.Random()


def _attempts(state: RehearsalState, scenario: Scenario) -> int:
    return int(state.attempts.get(scenario.id) or 1)


def scene_view(scenario: Scenario, scene: Scene) -> SceneView:
    return SceneView(
        scenario_id=scenario.id,
        scene_id=scene.id,
        text=scene.text,
        dialogue=scene.dialogue,
        mood=scene.mood,
        character_name=scenario.character.name,
        character_avatar=scenario.character.avatar,
        choices=[
            ChoiceView(
                index=idx,
                text=choice.text,
                description=choice.description,
                impact=choice.impact.model_dump(exclude_unset=True) if choice.impact else None,
                impact_description=describe_impact(choice.impact),
            )
            for idx, choice in enumerate(scene.choices)
        ],
        is_breakthrough=scene.is_breakthrough,
        is_end=scene.is_end,
    )


def current_scene_view(state: RehearsalState, scenario: Scenario) -> SceneView | None:
    scene = scenario.scene_by_id(state.current_scene)
    if scene is None:
        return None
    return scene_view(scenario, scene)


def _render_report(summary: RehearsalSummary) -> str:
    lines = [
        f"REHEARSAL {'SUCCESSFUL' if summary.success else 'COMPLETE'} - DETAILED ANALYSIS",
        "",
        f"Scenario: {summary.scenario_title}",
        f"Attempt Number: {summary.attempt_number}",
        f"Total Score: {summary.total_score}/{summary.max_score}",
        f"Empathy: {summary.empathy}/10",
        f"Trust: {summary.trust}/10",
        f"Effectiveness: {summary.effectiveness}/10",
        f"Conversations Completed: {summary.choices_made}",
        f"Breakthroughs Achieved: {summary.breakthroughs}",
        "",
        "STATISTICAL ANALYSIS:",
        f"Memory Accuracy: {summary.memory_accuracy}%",
        f"Rehearsal Confidence Level: {summary.rehearsal_confidence}%",
        "",
        "NATHAN'S NOTES:",
        summary.nathan_note,
    ]
    return "\n".join(lines)


def finalize(
    state: RehearsalState,
    scenario: Scenario,
    *,
    success: bool,
    end_reason: str | None = None,
    rng: random.Random | None = None,
) -> RehearsalSummary:
    attempts = _attempts(state, scenario)
    stats = state.stats
    if end_reason is None:
        end_reason = "success" if success else "completed"
    if success:
        outcome = "success"
    elif end_reason == "unresolved_next":
        outcome = "failure"
    else:
        outcome = "complete"

    summary = RehearsalSummary(
        success=success,
        outcome=outcome,
        end_reason=end_reason,
        scenario_id=scenario.id,
        scenario_title=scenario.title,
        attempt_number=attempts,
        total_score=stats.total(),
        max_score=MAX_TOTAL_SCORE,
        empathy=stats.empathy,
        trust=stats.trust,
        effectiveness=stats.effectiveness,
        choices_made=len(state.history),
        breakthroughs=len(state.breakthroughs),
        memory_accuracy=MEMORY_ACCURACY,
        rehearsal_confidence=min(attempts * CONFIDENCE_PER_ATTEMPT, CONFIDENCE_CAP),
        nathan_note=_rng(rng).choice(NATHAN_NOTES),
        report="",
    )
    summary.report = _render_report(summary)

    state.status = "ended"
    state.outcome = outcome
    state.end_reason = end_reason
    state.summary = summary
    state.ended_at = utc_now_iso()
    return summary


def _enter_scene(
    state: RehearsalState,
    scenario: Scenario,
    scene: Scene,
    *,
    rng: random.Random | None,
) -> SceneView:
    state.current_scene = scene.id
    if scene.is_breakthrough:
        state.breakthroughs.append(
            Breakthrough(
                scenario=scenario.id,
                scene=scene.id,
                timestamp=utc_now_iso(),
                description=f"Breakthrough moment in {scenario.title}",
            )
        )
    if scene.is_end:
        finalize(state, scenario, success=scene.outcome == SUCCESS_SENTINEL, rng=rng)
    return scene_view(scenario, scene)


def start_scenario(
    state: RehearsalState,
    scenario: Scenario,
    *,
    rng: random.Random | None = None,
) -> SceneView:
    """Reset the run for ``scenario`` and enter its start scene.

    Attempt counts survive the reset so a retry raises the confidence figure.
    """
    start = find_start_scene(scenario)
    if start is None:
        raise ValidationError(f"scenario '{scenario.id}' has no starting scene", code="NO_START_SCENE")

    state.scenario_id = scenario.id
    state.stats = PlayerStats()
    state.history = []
    state.breakthroughs = []
    state.status = "active"
    state.outcome = None
    state.end_reason = None
    state.summary = None
    state.started_at = utc_now_iso()
    state.ended_at = None
    state.attempts[scenario.id] = int(state.attempts.get(scenario.id) or 0) + 1
    return _enter_scene(state, scenario, start, rng=rng)


def _commentary(state: RehearsalState, scenario: Scenario, rng: random.Random) -> str:
    template = rng.choice(COMMENTARY_TEMPLATES)
    return template.format(
        choice_count=len(state.history),
        attempts=_attempts(state, scenario),
        percent=rng.randint(70, 99),
        episode=rng.randint(1, 100),
    )


def make_choice(
    state: RehearsalState,
    scenario: Scenario,
    choice_index: int,
    *,
    rng: random.Random | None = None,
) -> ChoiceResult:
    rng = _rng(rng)
    if state.status != "active" or state.scenario_id != scenario.id:
        raise InvalidChoiceError("rehearsal is not active", {"status": state.status})
    scene = scenario.scene_by_id(state.current_scene)
    if scene is None:
        raise InvalidChoiceError("current scene is missing", {"scene": state.current_scene})
    if not 0 <= int(choice_index) < len(scene.choices):
        raise InvalidChoiceError(
            "choice index out of range",
            {"choice_index": choice_index, "available": len(scene.choices)},
        )

    choice = scene.choices[int(choice_index)]
    state.history.append(
        HistoryEntry(
            scene=scene.id,
            choice=choice.text,
            impact=choice.impact.model_dump(exclude_unset=True) if choice.impact else None,
            timestamp=utc_now_iso(),
        )
    )
    apply_impact(state.stats, choice.impact)
    commentary = _commentary(state, scenario, rng)

    next_id = str(choice.next or "")
    next_scene = scenario.scene_by_id(next_id)
    view: SceneView | None = None
    if next_scene is not None:
        view = _enter_scene(state, scenario, next_scene, rng=rng)
    elif next_id == SUCCESS_SENTINEL or choice.is_end:
        finalize(state, scenario, success=True, rng=rng)
    else:
        logger.error(
            "Unresolved scene reference scenario=%s scene=%s next=%r",
            scenario.id,
            scene.id,
            next_id,
        )
        finalize(state, scenario, success=False, end_reason="unresolved_next", rng=rng)

    return ChoiceResult(
        choice=choice.text,
        impact_description=describe_impact(choice.impact),
        commentary=commentary,
        stats=state.stats.model_copy(),
        scene=view,
        ended=state.status == "ended",
        summary=state.summary,
    )


def flowchart_summary(state: RehearsalState) -> dict:
    unique = {item.choice for item in state.history}
    return {
        "paths_explored": len(state.history),
        "current_branch_depth": state.current_scene,
        "unique_decisions": len(unique),
        "nathan_note": FLOWCHART_NOTE,
    }


def export_history(state: RehearsalState) -> dict:
    return {
        "scenario_id": state.scenario_id,
        "status": state.status,
        "outcome": state.outcome,
        "stats": state.stats.model_dump(),
        "history": [item.model_dump() for item in state.history],
        "breakthroughs": [item.model_dump() for item in state.breakthroughs],
        "attempts": dict(state.attempts),
        "summary": state.summary.model_dump() if state.summary else None,
        "exported_at": utc_now_iso(),
    }
