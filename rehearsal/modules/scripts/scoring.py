from __future__ import annotations

import math
import random
import re

BASE_LEVEL = 20
MAX_LEVEL = 100
MAX_WORD_BONUS = 20
WORDS_PER_POINT = 50
ENHANCEMENT_BONUS = 5

# (phrases, points per occurrence); matched as literal substrings of the lowercased text
PHRASE_WEIGHTS = (
    (("um", "uh", "so...", "actually", "interesting"), 2),
    (("plan", "strategy", "calculated", "rehearse", "practice"), 3),
    (("percent", "%", "study", "research", "data"), 4),
)
# case-sensitive on the raw text
KEYWORD_BONUSES = (
    (("flowchart", "diagram"), 10),
    (("replica", "build"), 12),
    (("147", "73"), 8),
)

RANK_THRESHOLDS = (
    (100, "Aspiring Rehearser"),
    (300, "Dedicated Practicer"),
    (600, "Script Methodologist"),
    (1000, "Nathan Apprentice"),
    (1500, "Master Rehearser"),
)
TOP_RANK = "Nathan Fielder Level"

MIN_REHEARSAL_COUNT = 47
OPTIMAL_REHEARSAL_COUNT = 147

QUICK_OBSERVATIONS = (
    "This script captures the precise awkwardness of human interaction.",
    "I see potential for at least 47 different blocking variations.",
    "The dialogue authenticity is 73.4% - within acceptable parameters.",
    "Consider adding more statistical references for credibility.",
    "This reminds me of rehearsal attempt #147 from season 2.",
    "The preparation level shows proper Nathan methodology.",
)
QUICK_SUGGESTIONS = (
    "Add more specific timing for awkward pauses",
    "Include backup dialogue for when the first option fails",
    "Consider building a scale model of the location",
    "Research actual statistics to make fake ones more believable",
    "Plan for 12 different emotional reactions from other person",
    "Document the documentation process",
)


def calculate_nathan_level(text: str, enhancements: list[str] | tuple[str, ...] = ()) -> int:
    raw = str(text or "")
    lowered = raw.lower()

    level = BASE_LEVEL
    word_count = len(re.split(r"\s+", raw))
    level += min(MAX_WORD_BONUS, word_count // WORDS_PER_POINT)

    for phrases, weight in PHRASE_WEIGHTS:
        for phrase in phrases:
            level += lowered.count(phrase) * weight

    level += len(enhancements or ()) * ENHANCEMENT_BONUS

    for keywords, bonus in KEYWORD_BONUSES:
        if any(keyword in raw for keyword in keywords):
            level += bonus

    return max(0, min(MAX_LEVEL, level))


def calculate_scripting_rank(script_count: int, avg_level: float) -> str:
    score = script_count * 10 + avg_level
    for threshold, rank in RANK_THRESHOLDS:
        if score < threshold:
            return rank
    return TOP_RANK


def calculate_rehearsal_count(complexity: int, rng: random.Random | None = None) -> int:
    rng = rng or random
    return max(MIN_REHEARSAL_COUNT, 73 + complexity * 2 + rng.randrange(50))


def quick_analysis(text: str, enhancements: list[str], rng: random.Random | None = None) -> dict:
    """Heuristic analysis attached to create and detail responses; no LLM round trip."""
    rng = rng or random
    raw = str(text or "")
    count = len(enhancements or [])

    awkwardness = min(100, 47 + count * 13 + rng.randrange(20))
    complexity = int(math.floor(len(raw) / 100 + count * 5 + rng.random() * 15))
    rehearsal_count = 73 + complexity * 2 + rng.randrange(50)

    return {
        "awkwardness_score": awkwardness,
        "rehearsal_count": rehearsal_count,
        "complexity_rating": complexity,
        "nathan_observation": rng.choice(QUICK_OBSERVATIONS),
        "improvement_suggestions": list(QUICK_SUGGESTIONS[: 3 + rng.randrange(3)]),
        "optimality_score": max(0, 100 - abs(rehearsal_count - OPTIMAL_REHEARSAL_COUNT)),
    }
