from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

EnhancementType = Literal["awkwardness", "overthinking", "preparation", "diagrams", "statistics", "replicas"]
ENHANCEMENT_TYPES: tuple[str, ...] = get_args(EnhancementType)


def format_intensity(value: float) -> str:
    return f"{value:g}"


class EnhancementRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    original_script: str = Field(min_length=1)
    enhancement_type: EnhancementType
    intensity: float = Field(default=7, ge=1, le=10)
    context: str | None = None
    existing_enhancements: list[str] = Field(default_factory=list)


class EnhancementResult(BaseModel):
    content: str
    model: str
    processing_time_ms: int = Field(ge=0)
    level_increase: int = Field(ge=0)
    mode: Literal["online", "offline"] = "online"


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    script: str = Field(min_length=1)
    template: str = "custom"
    enhancements: list[str] = Field(default_factory=list)
    nathan_level: int = Field(default=0, ge=0, le=100)


class AnalysisBreakdown(BaseModel):
    dialogue_quality: int
    preparation_level: int
    awkwardness_authenticity: int
    statistical_credibility: int


class AnalysisResult(BaseModel):
    awkwardness_score: int
    complexity_rating: int
    optimality_score: int
    nathan_observation: str
    improvement_suggestions: list[str] = Field(max_length=5)
    breakdown: AnalysisBreakdown
    missing_fields: list[str] = Field(default_factory=list)
    model: str
    mode: Literal["online", "offline"] = "online"
