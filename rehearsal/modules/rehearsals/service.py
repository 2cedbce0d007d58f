from __future__ import annotations

import logging
import random

from sqlalchemy.orm import Session

from rehearsal.db.models import RehearsalSession
from rehearsal.modules.analytics.service import track_event
from rehearsal.modules.engine.service import (
    current_scene_view,
    export_history,
    flowchart_summary,
    make_choice,
    start_scenario,
)
from rehearsal.modules.engine.state import RehearsalState
from rehearsal.modules.rehearsals.schemas import RehearsalChoiceResponse, RehearsalOut
from rehearsal.modules.scenarios.schemas import Scenario
from rehearsal.modules.scenarios.service import get_scenario
from rehearsal.utils.errors import NotFoundError
from rehearsal.utils.ids import parse_uuid

logger = logging.getLogger(__name__)


def _load(db: Session, rehearsal_id: str) -> RehearsalSession:
    row = db.get(RehearsalSession, parse_uuid(rehearsal_id, "Rehearsal"))
    if row is None:
        raise NotFoundError("Rehearsal")
    return row


def _save(row: RehearsalSession, state: RehearsalState) -> None:
    row.scenario_id = str(state.scenario_id)
    row.status = state.status
    row.state_json = state.to_json()


def _to_out(row: RehearsalSession, state: RehearsalState, scenario: Scenario) -> RehearsalOut:
    return RehearsalOut(
        rehearsal_id=str(row.id),
        scenario_id=scenario.id,
        scenario_title=scenario.title,
        status=state.status,
        outcome=state.outcome,
        end_reason=state.end_reason,
        attempt_number=int(state.attempts.get(scenario.id) or 0),
        stats=state.stats,
        scene=current_scene_view(state, scenario),
        choices_made=len(state.history),
        breakthroughs=list(state.breakthroughs),
        summary=state.summary,
    )


def _track_progress(state: RehearsalState, scenario: Scenario, *, breakthroughs_before: int) -> None:
    for item in state.breakthroughs[breakthroughs_before:]:
        track_event("breakthrough_achieved", {"scenario": scenario.id, "scene": item.scene})
    if state.status == "ended" and state.summary is not None:
        track_event(
            "session_complete",
            {
                "scenario": scenario.id,
                "success": state.summary.success,
                "stats": state.stats.model_dump(),
            },
        )


def start_rehearsal(
    db: Session,
    scenario_id: str,
    *,
    rehearsal_id: str | None = None,
    rng: random.Random | None = None,
) -> RehearsalOut:
    scenario = get_scenario(scenario_id)
    if rehearsal_id:
        row = _load(db, rehearsal_id)
        state = RehearsalState.from_json(row.state_json)
    else:
        row = RehearsalSession(scenario_id=scenario.id)
        db.add(row)
        state = RehearsalState()

    start_scenario(state, scenario, rng=rng)
    _save(row, state)
    db.commit()
    db.refresh(row)
    logger.info(
        "Rehearsal started id=%s scenario=%s attempt=%d",
        row.id,
        scenario.id,
        state.attempts.get(scenario.id, 0),
    )

    track_event("scenario_selected", {"scenario": scenario.id, "difficulty": scenario.difficulty})
    _track_progress(state, scenario, breakthroughs_before=0)
    return _to_out(row, state, scenario)


def get_rehearsal(db: Session, rehearsal_id: str) -> RehearsalOut:
    row = _load(db, rehearsal_id)
    state = RehearsalState.from_json(row.state_json)
    return _to_out(row, state, get_scenario(row.scenario_id))


def choose(
    db: Session,
    rehearsal_id: str,
    choice_index: int,
    *,
    rng: random.Random | None = None,
) -> RehearsalChoiceResponse:
    row = _load(db, rehearsal_id)
    state = RehearsalState.from_json(row.state_json)
    scenario = get_scenario(row.scenario_id)
    breakthroughs_before = len(state.breakthroughs)

    result = make_choice(state, scenario, choice_index, rng=rng)
    _save(row, state)
    db.commit()

    track_event(
        "choice_made",
        {
            "scenario": scenario.id,
            "scene": state.history[-1].scene,
            "choice": result.choice,
            "impact": state.history[-1].impact,
        },
    )
    _track_progress(state, scenario, breakthroughs_before=breakthroughs_before)
    return RehearsalChoiceResponse(rehearsal=_to_out(row, state, scenario), result=result)


def get_flowchart(db: Session, rehearsal_id: str) -> dict:
    row = _load(db, rehearsal_id)
    return flowchart_summary(RehearsalState.from_json(row.state_json))


def export_rehearsal(db: Session, rehearsal_id: str) -> dict:
    row = _load(db, rehearsal_id)
    payload = export_history(RehearsalState.from_json(row.state_json))
    payload["rehearsal_id"] = str(row.id)
    return payload
