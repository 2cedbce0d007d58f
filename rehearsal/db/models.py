import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rehearsal.db.base import Base
from rehearsal.db.types import GUID, JSONText, JSONType
from rehearsal.utils.time import utc_now_naive


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255), default="")
    role: Mapped[str] = mapped_column(String(32), default="user")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, index=True)


class Script(Base):
    __tablename__ = "scripts"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    original_script: Mapped[str] = mapped_column(Text)
    enhanced_script: Mapped[str | None] = mapped_column(Text, nullable=True)
    template: Mapped[str] = mapped_column(String(128), default="custom", index=True)
    enhancements: Mapped[list] = mapped_column(JSONText, default=list)
    nathan_level: Mapped[int] = mapped_column(Integer, default=0, index=True)
    draft_number: Mapped[int] = mapped_column(Integer, default=1)
    production_notes: Mapped[list] = mapped_column(JSONText, default=list)
    storyboard_frames: Mapped[list] = mapped_column(JSONText, default=list)
    status: Mapped[str] = mapped_column(String(32), default="DRAFT", index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, onupdate=utc_now_naive, index=True)


class ScriptEnhancement(Base):
    __tablename__ = "script_enhancements"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    script_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("scripts.id"), index=True)
    enhancement_type: Mapped[str] = mapped_column(String(32), index=True)
    intensity: Mapped[float] = mapped_column(Float, default=7)
    ai_model: Mapped[str] = mapped_column(String(128), default="")
    processing_time_ms: Mapped[int] = mapped_column(Integer, default=0)
    nathan_level_before: Mapped[int] = mapped_column(Integer, default=0)
    nathan_level_after: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, index=True)


class ScriptAnalysis(Base):
    __tablename__ = "script_analyses"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    script_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("scripts.id"), index=True)
    awkwardness_score: Mapped[int] = mapped_column(Integer, default=0)
    complexity_rating: Mapped[int] = mapped_column(Integer, default=0)
    optimality_score: Mapped[int] = mapped_column(Integer, default=0)
    suggestions: Mapped[list] = mapped_column(JSONText, default=list)
    nathan_observation: Mapped[str] = mapped_column(Text, default="")
    missing_fields: Mapped[list] = mapped_column(JSONText, default=list)
    ai_model: Mapped[str] = mapped_column(String(128), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, index=True)


class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    scenario_id: Mapped[str] = mapped_column(String(128), index=True)
    state: Mapped[str] = mapped_column(String(32), default="active", index=True)
    messages: Mapped[list] = mapped_column(JSONType, default=list)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, index=True)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class RehearsalSession(Base):
    __tablename__ = "rehearsal_sessions"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    scenario_id: Mapped[str] = mapped_column(String(128), index=True)
    status: Mapped[str] = mapped_column(String(32), default="active", index=True)
    state_json: Mapped[dict] = mapped_column(JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, onupdate=utc_now_naive, index=True)
