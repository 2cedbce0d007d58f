from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from rehearsal.db.session import get_db
from rehearsal.modules.rehearsals.schemas import RehearsalChoiceRequest, RehearsalStartRequest
from rehearsal.modules.rehearsals.service import (
    choose,
    export_rehearsal,
    get_flowchart,
    get_rehearsal,
    start_rehearsal,
)
from rehearsal.utils.envelope import current_request_id, success_response

router = APIRouter(prefix="/api/rehearsals", tags=["rehearsals"])


@router.post("", status_code=status.HTTP_201_CREATED)
def start_rehearsal_api(
    payload: RehearsalStartRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    out = start_rehearsal(db, payload.scenario_id, rehearsal_id=payload.rehearsal_id)
    return success_response(
        out.model_dump(mode="json"),
        "Rehearsal started",
        request_id=current_request_id(request),
        nathan_note=f"Rehearsal attempt #{out.attempt_number}. Nathan is taking notes.",
    )


@router.get("/{rehearsal_id}")
def get_rehearsal_api(rehearsal_id: str, request: Request, db: Session = Depends(get_db)) -> dict:
    out = get_rehearsal(db, rehearsal_id)
    return success_response(out.model_dump(mode="json"), "Rehearsal retrieved", request_id=current_request_id(request))


@router.post("/{rehearsal_id}/choices")
def make_choice_api(
    rehearsal_id: str,
    payload: RehearsalChoiceRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    out = choose(db, rehearsal_id, payload.choice_index)
    return success_response(
        out.model_dump(mode="json"),
        "Rehearsal complete" if out.result.ended else "Choice recorded",
        request_id=current_request_id(request),
        nathan_note=out.result.commentary,
    )


@router.get("/{rehearsal_id}/flowchart")
def flowchart_api(rehearsal_id: str, request: Request, db: Session = Depends(get_db)) -> dict:
    return success_response(
        get_flowchart(db, rehearsal_id),
        "Conversation flowchart analysis",
        request_id=current_request_id(request),
    )


@router.get("/{rehearsal_id}/export")
def export_api(rehearsal_id: str, request: Request, db: Session = Depends(get_db)) -> dict:
    return success_response(
        export_rehearsal(db, rehearsal_id),
        "Rehearsal history exported",
        request_id=current_request_id(request),
    )
