from __future__ import annotations

from pydantic import BaseModel, Field

from rehearsal.modules.engine.state import PlayerStats, RehearsalSummary


class ChoiceView(BaseModel):
    index: int
    text: str
    description: str | None = None
    impact: dict[str, int] | None = None
    impact_description: str = ""


class SceneView(BaseModel):
    scenario_id: str
    scene_id: str
    text: str
    dialogue: str | None = None
    mood: str | None = None
    character_name: str
    character_avatar: str | None = None
    choices: list[ChoiceView] = Field(default_factory=list)
    is_breakthrough: bool = False
    is_end: bool = False


class ChoiceResult(BaseModel):
    choice: str
    impact_description: str
    commentary: str
    stats: PlayerStats
    scene: SceneView | None = None
    ended: bool = False
    summary: RehearsalSummary | None = None
