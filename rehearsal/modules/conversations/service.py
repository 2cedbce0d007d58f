from __future__ import annotations

import logging
import random
import uuid

from sqlalchemy.orm import Session

from rehearsal.db.models import Conversation
from rehearsal.modules.conversations.responder import generate_feedback, generate_response
from rehearsal.modules.conversations.schemas import (
    ConversationEndResponse,
    ConversationMessageOut,
    ConversationOut,
    ConversationReplyResponse,
    ConversationScenarioOut,
    ConversationStartResponse,
)
from rehearsal.modules.scenarios.service import get_scenario
from rehearsal.utils.errors import ConflictError, NotFoundError, ValidationError
from rehearsal.utils.ids import parse_uuid
from rehearsal.utils.time import elapsed_ms, to_iso, utc_now_iso, utc_now_naive

logger = logging.getLogger(__name__)

STATE_ACTIVE = "active"
STATE_COMPLETED = "completed"


def _message(role: str, content: str, *, is_crisis: bool = False) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "role": role,
        "content": content,
        "timestamp": utc_now_iso(),
        "is_crisis": is_crisis,
    }


def _load(db: Session, conversation_id: str) -> Conversation:
    row = db.get(Conversation, parse_uuid(conversation_id, "Conversation"))
    if row is None:
        raise NotFoundError("Conversation")
    return row


def _to_out(row: Conversation) -> ConversationOut:
    return ConversationOut(
        id=str(row.id),
        scenario_id=row.scenario_id,
        state=row.state,
        messages=[ConversationMessageOut.model_validate(item) for item in (row.messages or [])],
        started_at=to_iso(row.started_at) or "",
        ended_at=to_iso(row.ended_at),
    )


def start_conversation(db: Session, scenario_id: str) -> ConversationStartResponse:
    scenario = get_scenario(scenario_id)
    if scenario.persona is None:
        raise ValidationError(
            f"scenario '{scenario.id}' does not support free-text practice",
            code="NO_CONVERSATION_PERSONA",
        )

    row = Conversation(scenario_id=scenario.id, state=STATE_ACTIVE, messages=[])
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Conversation started id=%s scenario=%s", row.id, scenario.id)

    return ConversationStartResponse(
        conversation_id=str(row.id),
        scenario=ConversationScenarioOut(
            id=scenario.id,
            title=scenario.title,
            description=scenario.description,
            initial_message=scenario.persona.initial_message,
        ),
        initial_response=scenario.persona.initial_response,
    )


def post_message(
    db: Session,
    conversation_id: str,
    message: str,
    *,
    rng: random.Random | None = None,
) -> ConversationReplyResponse:
    row = _load(db, conversation_id)
    content = str(message or "").strip()
    if not content:
        raise ValidationError("Message cannot be empty", code="EMPTY_MESSAGE")
    if row.state != STATE_ACTIVE:
        raise ConflictError("conversation has already ended", code="CONVERSATION_ENDED")

    scenario = get_scenario(row.scenario_id)
    reply = generate_response(scenario.persona, content, rng=rng)
    user_msg = _message("user", content)
    if reply.is_crisis:
        reply_msg = _message("system", reply.content, is_crisis=True)
        logger.warning("Crisis resources sent conversation=%s scenario=%s", row.id, row.scenario_id)
    else:
        reply_msg = _message("ai", reply.content)

    # JSON columns are not mutation-tracked; assign a fresh list.
    row.messages = [*(row.messages or []), user_msg, reply_msg]
    db.commit()

    return ConversationReplyResponse(
        response=ConversationMessageOut.model_validate(reply_msg),
        is_crisis=reply.is_crisis,
        crisis_resources=reply.crisis_resources,
    )


def get_conversation(db: Session, conversation_id: str) -> ConversationOut:
    return _to_out(_load(db, conversation_id))


def end_conversation(db: Session, conversation_id: str) -> ConversationEndResponse:
    row = _load(db, conversation_id)
    if row.state != STATE_COMPLETED:
        row.state = STATE_COMPLETED
        row.ended_at = utc_now_naive()
        db.commit()

    messages = list(row.messages or [])
    duration = elapsed_ms(row.started_at, row.ended_at or utc_now_naive())
    feedback = generate_feedback(
        [item.get("content", "") for item in messages if item.get("role") == "user"],
        duration_s=duration / 1000,
    )
    scenario = get_scenario(row.scenario_id)
    logger.info("Conversation ended id=%s messages=%d", row.id, len(messages))

    return ConversationEndResponse(
        feedback=feedback,
        conversation_summary={
            "duration_ms": duration,
            "message_count": len(messages),
            "scenario": scenario.title,
        },
    )
