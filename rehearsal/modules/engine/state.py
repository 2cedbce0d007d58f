from __future__ import annotations

from typing import Literal, Mapping

from pydantic import BaseModel, Field

from rehearsal.modules.scenarios.schemas import STAT_NAMES, StatImpact

STAT_MIN = 0
STAT_MAX = 10
MAX_TOTAL_SCORE = STAT_MAX * len(STAT_NAMES)

RunStatus = Literal["idle", "active", "ended"]
RunOutcome = Literal["success", "complete", "failure"]


class PlayerStats(BaseModel):
    empathy: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX)
    trust: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX)
    effectiveness: int = Field(default=STAT_MIN, ge=STAT_MIN, le=STAT_MAX)

    def total(self) -> int:
        return self.empathy + self.trust + self.effectiveness


class HistoryEntry(BaseModel):
    scene: str
    choice: str
    impact: dict[str, int] | None = None
    timestamp: str


class Breakthrough(BaseModel):
    scenario: str
    scene: str
    timestamp: str
    description: str


class RehearsalSummary(BaseModel):
    success: bool
    outcome: RunOutcome
    end_reason: str
    scenario_id: str
    scenario_title: str
    attempt_number: int
    total_score: int
    max_score: int = MAX_TOTAL_SCORE
    empathy: int
    trust: int
    effectiveness: int
    choices_made: int
    breakthroughs: int
    memory_accuracy: float
    rehearsal_confidence: int
    nathan_note: str
    report: str


class RehearsalState(BaseModel):
    scenario_id: str | None = None
    current_scene: str | None = None
    stats: PlayerStats = Field(default_factory=PlayerStats)
    history: list[HistoryEntry] = Field(default_factory=list)
    breakthroughs: list[Breakthrough] = Field(default_factory=list)
    status: RunStatus = "idle"
    outcome: RunOutcome | None = None
    end_reason: str | None = None
    attempts: dict[str, int] = Field(default_factory=dict)
    summary: RehearsalSummary | None = None
    started_at: str | None = None
    ended_at: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_json(cls, raw: Mapping | None) -> "RehearsalState":
        return cls.model_validate(dict(raw or {}))


def clamp_stat(value: int | float) -> int:
    return int(max(STAT_MIN, min(STAT_MAX, float(value))))


def _impact_items(impact: StatImpact | Mapping | None) -> dict[str, int]:
    if impact is None:
        return {}
    raw = impact.model_dump() if isinstance(impact, StatImpact) else dict(impact)
    out: dict[str, int] = {}
    for key, value in raw.items():
        try:
            out[str(key)] = int(value)
        except (TypeError, ValueError):
            continue
    return out


def apply_impact(stats: PlayerStats, impact: StatImpact | Mapping | None) -> PlayerStats:
    for key, delta in _impact_items(impact).items():
        if key not in STAT_NAMES:
            continue
        setattr(stats, key, clamp_stat(getattr(stats, key) + delta))
    return stats


def describe_impact(impact: StatImpact | Mapping | None) -> str:
    parts: list[str] = []
    for key, value in _impact_items(impact).items():
        if value > 0:
            parts.append(f"+{value} {key}")
        elif value < 0:
            parts.append(f"{value} {key}")
    return ", ".join(parts)
