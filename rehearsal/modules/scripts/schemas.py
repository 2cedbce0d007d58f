from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from rehearsal.modules.llm_boundary.schemas import AnalysisBreakdown, EnhancementType

ScriptStatus = Literal["DRAFT", "IN_PROGRESS", "COMPLETED", "ARCHIVED"]

MIN_SCRIPT_CHARS = 10
MAX_SCRIPT_CHARS = 10000


class StoryboardFrame(BaseModel):
    emoji: str
    description: str


class ScriptCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    original_script: str = Field(min_length=MIN_SCRIPT_CHARS, max_length=MAX_SCRIPT_CHARS, alias="originalScript")
    template: str | None = None
    enhancements: list[str] = Field(default_factory=list)


class ScriptUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    original_script: str | None = Field(
        default=None,
        min_length=MIN_SCRIPT_CHARS,
        max_length=MAX_SCRIPT_CHARS,
        alias="originalScript",
    )
    enhanced_script: str | None = Field(default=None, alias="enhancedScript")
    enhancements: list[str] | None = None
    production_notes: list[str] | None = Field(default=None, alias="productionNotes")
    storyboard_frames: list[StoryboardFrame] | None = Field(default=None, alias="storyboardFrames")
    status: ScriptStatus | None = None


class ScriptEnhanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    enhancement_type: EnhancementType = Field(alias="enhancementType")
    intensity: float = Field(default=7, ge=1, le=10)
    context: str | None = Field(default=None, max_length=2000)


class QuickAnalysisOut(BaseModel):
    awkwardness_score: int
    rehearsal_count: int
    complexity_rating: int
    nathan_observation: str
    improvement_suggestions: list[str]
    optimality_score: int


class ScriptOut(BaseModel):
    id: str
    title: str
    original_script: str
    enhanced_script: str | None = None
    template: str
    enhancements: list[str] = Field(default_factory=list)
    nathan_level: int
    draft_number: int
    production_notes: list[str] = Field(default_factory=list)
    storyboard_frames: list[StoryboardFrame] = Field(default_factory=list)
    status: str
    created_at: str
    updated_at: str


class ScriptListItem(BaseModel):
    id: str
    title: str
    template: str
    nathan_level: int
    draft_number: int
    status: str
    created_at: str
    updated_at: str
    preview: str


class PaginationOut(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class UserScriptStats(BaseModel):
    total_scripts: int
    average_nathan_level: int
    total_drafts: int
    scripting_rank: str


class ScriptListResponse(BaseModel):
    scripts: list[ScriptListItem]
    pagination: PaginationOut
    user_stats: UserScriptStats


class ScriptDetailResponse(BaseModel):
    script: ScriptOut
    analysis: QuickAnalysisOut


class EnhancementOut(BaseModel):
    type: str
    intensity: float
    ai_model: str
    processing_time_ms: int
    mode: str


class ScriptEnhanceResponse(BaseModel):
    enhanced_script: str
    enhancement: EnhancementOut
    script: ScriptOut


class ScriptAnalysisOut(BaseModel):
    awkwardness_score: int
    complexity_rating: int
    optimality_score: int
    rehearsal_count: int
    nathan_observation: str
    improvement_suggestions: list[str]
    breakdown: AnalysisBreakdown
    missing_fields: list[str] = Field(default_factory=list)
    ai_model: str
    mode: str


class ProductionNotesResponse(BaseModel):
    production_notes: list[str]
    script: ScriptOut
