from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ConversationStartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scenario_id: str = Field(min_length=1, alias="scenarioId")


class ConversationMessageRequest(BaseModel):
    message: str = Field(default="", max_length=5000)


class ConversationMessageOut(BaseModel):
    id: str
    role: str
    content: str
    timestamp: str
    is_crisis: bool = False


class ConversationScenarioOut(BaseModel):
    id: str
    title: str
    description: str
    initial_message: str


class ConversationStartResponse(BaseModel):
    conversation_id: str
    scenario: ConversationScenarioOut
    initial_response: str


class ConversationReplyResponse(BaseModel):
    response: ConversationMessageOut
    is_crisis: bool
    crisis_resources: dict[str, str] | None = None


class ConversationOut(BaseModel):
    id: str
    scenario_id: str
    state: str
    messages: list[ConversationMessageOut]
    started_at: str
    ended_at: str | None = None


class ConversationEndResponse(BaseModel):
    feedback: dict
    conversation_summary: dict
