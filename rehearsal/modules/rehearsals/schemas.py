from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from rehearsal.modules.engine.schemas import ChoiceResult, SceneView
from rehearsal.modules.engine.state import Breakthrough, PlayerStats, RehearsalSummary


class RehearsalStartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenario_id: str = Field(min_length=1, alias="scenarioId")
    rehearsal_id: str | None = Field(default=None, alias="rehearsalId")


class RehearsalChoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    choice_index: int = Field(ge=0, alias="choiceIndex")


class RehearsalOut(BaseModel):
    rehearsal_id: str
    scenario_id: str
    scenario_title: str
    status: str
    outcome: str | None = None
    end_reason: str | None = None
    attempt_number: int
    stats: PlayerStats
    scene: SceneView | None = None
    choices_made: int
    breakthroughs: list[Breakthrough] = Field(default_factory=list)
    summary: RehearsalSummary | None = None


class RehearsalChoiceResponse(BaseModel):
    rehearsal: RehearsalOut
    result: ChoiceResult
