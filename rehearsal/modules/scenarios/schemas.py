from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Difficulty = Literal["beginner", "intermediate", "advanced"]
AuditSeverity = Literal["error", "warning"]

STAT_NAMES = ("empathy", "trust", "effectiveness")
SUCCESS_SENTINEL = "success"
START_SCENE_ID = "intro"


class StatImpact(BaseModel):
    model_config = ConfigDict(extra="forbid")

    empathy: int = 0
    trust: int = 0
    effectiveness: int = 0


class SceneChoice(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    text: str = Field(min_length=1)
    description: str | None = None
    impact: StatImpact | None = None
    next: str | None = None
    is_end: bool = Field(default=False, alias="isEnd")


class Scene(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    dialogue: str | None = None
    mood: str | None = None
    choices: list[SceneChoice] = Field(default_factory=list)
    is_breakthrough: bool = Field(default=False, alias="isBreakthrough")
    is_end: bool = Field(default=False, alias="isEnd")
    outcome: str | None = None


class ScenarioCharacter(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1)
    avatar: str | None = None
    initial_mood: str | None = Field(default=None, alias="initialMood")
    background: str | None = None


class ConversationPersona(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    initial_message: str = Field(min_length=1, alias="initialMessage")
    ai_persona: str = Field(min_length=1, alias="aiPersona")
    initial_response: str = Field(min_length=1, alias="initialResponse")
    patterns: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("patterns")
    @classmethod
    def drop_empty_buckets(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        cleaned: dict[str, list[str]] = {}
        for bucket, replies in value.items():
            kept = [str(item).strip() for item in replies if str(item).strip()]
            if kept:
                cleaned[str(bucket).strip()] = kept
        return cleaned


class Scenario(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    difficulty: Difficulty = "intermediate"
    character: ScenarioCharacter
    scenes: list[Scene] = Field(min_length=1)
    persona: ConversationPersona | None = None

    def scene_by_id(self, scene_id: str | None) -> Scene | None:
        if not scene_id:
            return None
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        return None


class ScenarioAuditIssue(BaseModel):
    code: str
    severity: AuditSeverity
    scenario_id: str
    path: str
    message: str


class ScenarioSummaryOut(BaseModel):
    id: str
    title: str
    description: str
    difficulty: Difficulty
    avatar: str | None = None
    character_name: str
    scene_count: int
    free_text_practice: bool
