from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from typing import Any

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
MAX_PRODUCTION_NOTES = 5

DEFAULT_OBSERVATION = (
    "This script shows promise but needs more statistical backing and at least 47 additional rehearsals."
)
DEFAULT_SUGGESTIONS = (
    "Add more specific timing for awkward pauses",
    "Include backup dialogue for when the first option fails",
    "Consider building a scale model of the location",
)
DEFAULT_PRODUCTION_NOTES = (
    "Build 1:1 scale replica of conversation location in controlled environment",
    "Hire professional actors to play all potential responses, including 47 variations of 'hmm'",
    "Create detailed timing charts for optimal pause lengths (3.7 seconds proven most effective)",
    "Install hidden cameras to document the documentation process",
    "Prepare 147 backup conversation starters in case of total social breakdown",
)

# label -> (field name, default)
_SCORE_LABELS = {
    "AWKWARDNESS_SCORE": ("awkwardness_score", 73),
    "COMPLEXITY_RATING": ("complexity_rating", 67),
    "OPTIMALITY_SCORE": ("optimality_score", 81),
    "DIALOGUE_QUALITY": ("dialogue_quality", 75),
    "PREPARATION_LEVEL": ("preparation_level", 68),
    "AWKWARDNESS_AUTHENTICITY": ("awkwardness_authenticity", 82),
    "STATISTICAL_CREDIBILITY": ("statistical_credibility", 45),
}

_OBSERVATION_RE = re.compile(r"NATHAN_OBSERVATION:[ \t]*(.*?)[ \t]*(?=\n|\Z)")
_SUGGESTIONS_RE = re.compile(r"IMPROVEMENT_SUGGESTIONS:\s*((?:\n?-.*)+)")
_DASH_PREFIX_RE = re.compile(r"^-\s*")


@dataclass(frozen=True)
class ParsedField:
    value: Any
    present: bool


@dataclass(frozen=True)
class ParsedAnalysis:
    awkwardness_score: ParsedField
    complexity_rating: ParsedField
    optimality_score: ParsedField
    dialogue_quality: ParsedField
    preparation_level: ParsedField
    awkwardness_authenticity: ParsedField
    statistical_credibility: ParsedField
    nathan_observation: ParsedField
    improvement_suggestions: ParsedField

    def as_values(self) -> dict:
        return {
            "awkwardness_score": self.awkwardness_score.value,
            "complexity_rating": self.complexity_rating.value,
            "optimality_score": self.optimality_score.value,
            "nathan_observation": self.nathan_observation.value,
            "improvement_suggestions": list(self.improvement_suggestions.value),
            "breakdown": {
                "dialogue_quality": self.dialogue_quality.value,
                "preparation_level": self.preparation_level.value,
                "awkwardness_authenticity": self.awkwardness_authenticity.value,
                "statistical_credibility": self.statistical_credibility.value,
            },
        }

    def missing_fields(self) -> list[str]:
        return [item.name for item in fields(self) if not getattr(self, item.name).present]


def _dash_lines(block: str) -> list[str]:
    return [_DASH_PREFIX_RE.sub("", line.strip()).strip() for line in block.split("\n") if line.strip().startswith("-")]


def default_analysis() -> ParsedAnalysis:
    values: dict[str, ParsedField] = {name: ParsedField(default, False) for name, default in _SCORE_LABELS.values()}
    values["nathan_observation"] = ParsedField(DEFAULT_OBSERVATION, False)
    values["improvement_suggestions"] = ParsedField(list(DEFAULT_SUGGESTIONS), False)
    return ParsedAnalysis(**values)


def parse_analysis_response(text: str) -> ParsedAnalysis:
    raw = str(text or "")
    values: dict[str, ParsedField] = {}
    for label, (name, default) in _SCORE_LABELS.items():
        match = re.search(rf"{label}:\s*(\d+)", raw)
        values[name] = ParsedField(int(match.group(1)), True) if match else ParsedField(default, False)

    observation = _OBSERVATION_RE.search(raw)
    observation_text = observation.group(1).strip() if observation else ""
    values["nathan_observation"] = (
        ParsedField(observation_text, True) if observation_text else ParsedField(DEFAULT_OBSERVATION, False)
    )

    suggestions_block = _SUGGESTIONS_RE.search(raw)
    suggestions = _dash_lines(suggestions_block.group(1)) if suggestions_block else []
    suggestions = [item for item in suggestions if item]
    values["improvement_suggestions"] = (
        ParsedField(suggestions[:MAX_SUGGESTIONS], True)
        if suggestions
        else ParsedField(list(DEFAULT_SUGGESTIONS), False)
    )

    parsed = ParsedAnalysis(**values)
    missing = parsed.missing_fields()
    if missing:
        logger.warning("Analysis response missing fields, using defaults: %s", ", ".join(missing))
    return parsed


def parse_production_notes(text: str) -> list[str]:
    notes = [item for item in _dash_lines(str(text or "")) if item]
    if not notes:
        logger.warning("Production notes response had no dash-prefixed lines, using defaults")
        return list(DEFAULT_PRODUCTION_NOTES)
    return notes[:MAX_PRODUCTION_NOTES]
