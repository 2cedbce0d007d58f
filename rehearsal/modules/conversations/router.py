from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from rehearsal.db.session import get_db
from rehearsal.modules.conversations.schemas import ConversationMessageRequest, ConversationStartRequest
from rehearsal.modules.conversations.service import (
    end_conversation,
    get_conversation,
    post_message,
    start_conversation,
)
from rehearsal.utils.envelope import current_request_id, success_response

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.post("/start", status_code=status.HTTP_201_CREATED)
def start_conversation_api(
    payload: ConversationStartRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    out = start_conversation(db, payload.scenario_id)
    return success_response(
        out.model_dump(),
        "Conversation started",
        request_id=current_request_id(request),
    )


@router.post("/{conversation_id}/messages")
def post_message_api(
    conversation_id: str,
    payload: ConversationMessageRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    out = post_message(db, conversation_id, payload.message)
    return success_response(
        out.model_dump(),
        "Crisis resources provided" if out.is_crisis else "Message received",
        request_id=current_request_id(request),
    )


@router.get("/{conversation_id}")
def get_conversation_api(
    conversation_id: str,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    out = get_conversation(db, conversation_id)
    return success_response(out.model_dump(), "Conversation retrieved", request_id=current_request_id(request))


@router.post("/{conversation_id}/end")
def end_conversation_api(
    conversation_id: str,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    out = end_conversation(db, conversation_id)
    return success_response(
        out.model_dump(),
        "Conversation ended",
        request_id=current_request_id(request),
        nathan_note="Nathan has filed this conversation for further review",
    )
