from __future__ import annotations

import logging
import math
import random
from typing import Iterable

from pydantic import BaseModel, Field

from rehearsal.modules.scenarios.schemas import ConversationPersona

logger = logging.getLogger(__name__)

CRISIS_KEYWORDS = (
    "suicide",
    "kill myself",
    "end it all",
    "not worth living",
    "better off dead",
    "hurt myself",
    "self harm",
    "cutting",
    "overdose",
    "end my life",
    "no point in living",
    "worthless",
    "hopeless",
    "give up",
    "can't go on",
    "want to die",
)

CRISIS_RESOURCES = {
    "national": "988",
    "crisis": "741741",
    "trevor": "1-866-488-7386",
    "international": "https://findahelpline.com",
}

CRISIS_MESSAGE = (
    "I notice you mentioned something concerning. Your safety is the most important thing right now. "
    "Please consider reaching out to crisis resources."
)

GENERIC_REPLIES = (
    "I appreciate you saying that.",
    "That's helpful to hear.",
    "Can you tell me more about that?",
    "I'm glad we're talking about this.",
)

EMPATHY_MARKERS = ("sorry", "understand", "feel")
SOLUTION_MARKERS = ("should", "try", "maybe")
FEEDBACK_EMPATHY_WORDS = ("sorry", "understand", "feel", "sounds difficult", "here for you", "care")

NEUTRAL_SCORE = 5
MAX_SCORE = 10
EMPATHY_WORD_BONUS = 0.5
QUESTION_BONUS = 1.5
STRENGTH_THRESHOLD = 7
ENGAGED_MESSAGE_COUNT = 5


class ResponderReply(BaseModel):
    content: str
    category: str
    is_crisis: bool = False
    crisis_resources: dict[str, str] | None = Field(default=None)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def detect_crisis(message: str) -> bool:
    lowered = str(message or "").lower()
    return any(keyword in lowered for keyword in CRISIS_KEYWORDS)


def classify_message(message: str) -> str:
    lowered = str(message or "").lower()
    if any(marker in lowered for marker in EMPATHY_MARKERS):
        return "empathy"
    if "?" in lowered:
        return "questions"
    if any(marker in lowered for marker in SOLUTION_MARKERS):
        return "solutions"
    return "general"


def generate_response(
    persona: ConversationPersona | None,
    message: str,
    *,
    rng: random.Random | None = None,
) -> ResponderReply:
    if detect_crisis(message):
        logger.warning("Crisis language detected in practice message")
        return ResponderReply(
            content=CRISIS_MESSAGE,
            category="crisis",
            is_crisis=True,
            crisis_resources=dict(CRISIS_RESOURCES),
        )

    category = classify_message(message)
    patterns = persona.patterns if persona is not None else {}
    candidates = patterns.get(category) or list(GENERIC_REPLIES)
    return ResponderReply(content=(rng or random).choice(candidates), category=category)


def generate_feedback(user_messages: Iterable[str], *, duration_s: float = 0.0) -> dict:
    messages = [str(item or "") for item in user_messages]
    if not messages:
        return {
            "overall": NEUTRAL_SCORE,
            "empathy": NEUTRAL_SCORE,
            "questions": NEUTRAL_SCORE,
            "areas": ["Try to engage more in the conversation"],
        }

    empathy_raw = float(NEUTRAL_SCORE)
    for content in messages:
        lowered = content.lower()
        for word in FEEDBACK_EMPATHY_WORDS:
            if word in lowered:
                empathy_raw += EMPATHY_WORD_BONUS
    empathy_score = min(MAX_SCORE, _round_half_up(empathy_raw))

    question_count = sum(1 for content in messages if "?" in content)
    question_score = min(float(MAX_SCORE), NEUTRAL_SCORE + question_count * QUESTION_BONUS)
    overall = _round_half_up((empathy_score + question_score) / 2)

    strengths: list[str] = []
    improvements: list[str] = []
    if empathy_score >= STRENGTH_THRESHOLD:
        strengths.append("Excellent use of empathetic language")
    else:
        improvements.append("Try to use more validating and empathetic phrases")
    if question_score >= STRENGTH_THRESHOLD:
        strengths.append("Great use of open-ended questions")
    else:
        improvements.append("Ask more open-ended questions to encourage sharing")
    if len(messages) >= ENGAGED_MESSAGE_COUNT:
        strengths.append("Good engagement and conversation length")

    return {
        "overall": overall,
        "empathy": empathy_score,
        "questions": _round_half_up(question_score),
        "strengths": strengths,
        "improvements": improvements,
        "message_count": len(messages),
        "conversation_length_s": round(float(duration_s), 3),
    }
