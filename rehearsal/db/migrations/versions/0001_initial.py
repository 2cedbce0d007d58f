"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from rehearsal.db.types import GUID


revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"], unique=False)

    op.create_table(
        "scripts",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("original_script", sa.Text(), nullable=False),
        sa.Column("enhanced_script", sa.Text(), nullable=True),
        sa.Column("template", sa.String(length=128), nullable=False),
        sa.Column("enhancements", sa.Text(), nullable=True),
        sa.Column("nathan_level", sa.Integer(), nullable=False),
        sa.Column("draft_number", sa.Integer(), nullable=False),
        sa.Column("production_notes", sa.Text(), nullable=True),
        sa.Column("storyboard_frames", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_scripts_user_id", "scripts", ["user_id"], unique=False)
    op.create_index("ix_scripts_template", "scripts", ["template"], unique=False)
    op.create_index("ix_scripts_nathan_level", "scripts", ["nathan_level"], unique=False)
    op.create_index("ix_scripts_status", "scripts", ["status"], unique=False)
    op.create_index("ix_scripts_created_at", "scripts", ["created_at"], unique=False)
    op.create_index("ix_scripts_updated_at", "scripts", ["updated_at"], unique=False)

    op.create_table(
        "script_enhancements",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("script_id", GUID(), sa.ForeignKey("scripts.id"), nullable=False),
        sa.Column("enhancement_type", sa.String(length=32), nullable=False),
        sa.Column("intensity", sa.Float(), nullable=False),
        sa.Column("ai_model", sa.String(length=128), nullable=False),
        sa.Column("processing_time_ms", sa.Integer(), nullable=False),
        sa.Column("nathan_level_before", sa.Integer(), nullable=False),
        sa.Column("nathan_level_after", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_script_enhancements_script_id", "script_enhancements", ["script_id"], unique=False)
    op.create_index(
        "ix_script_enhancements_enhancement_type", "script_enhancements", ["enhancement_type"], unique=False
    )
    op.create_index("ix_script_enhancements_created_at", "script_enhancements", ["created_at"], unique=False)

    op.create_table(
        "script_analyses",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("script_id", GUID(), sa.ForeignKey("scripts.id"), nullable=False),
        sa.Column("awkwardness_score", sa.Integer(), nullable=False),
        sa.Column("complexity_rating", sa.Integer(), nullable=False),
        sa.Column("optimality_score", sa.Integer(), nullable=False),
        sa.Column("suggestions", sa.Text(), nullable=True),
        sa.Column("nathan_observation", sa.Text(), nullable=False),
        sa.Column("missing_fields", sa.Text(), nullable=True),
        sa.Column("ai_model", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_script_analyses_script_id", "script_analyses", ["script_id"], unique=False)
    op.create_index("ix_script_analyses_created_at", "script_analyses", ["created_at"], unique=False)

    op.create_table(
        "conversations",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("scenario_id", sa.String(length=128), nullable=False),
        sa.Column("state", sa.String(length=32), nullable=False),
        sa.Column("messages", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_conversations_scenario_id", "conversations", ["scenario_id"], unique=False)
    op.create_index("ix_conversations_state", "conversations", ["state"], unique=False)
    op.create_index("ix_conversations_started_at", "conversations", ["started_at"], unique=False)

    op.create_table(
        "rehearsal_sessions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("scenario_id", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("state_json", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_rehearsal_sessions_scenario_id", "rehearsal_sessions", ["scenario_id"], unique=False)
    op.create_index("ix_rehearsal_sessions_status", "rehearsal_sessions", ["status"], unique=False)
    op.create_index("ix_rehearsal_sessions_created_at", "rehearsal_sessions", ["created_at"], unique=False)
    op.create_index("ix_rehearsal_sessions_updated_at", "rehearsal_sessions", ["updated_at"], unique=False)


def downgrade() -> None:
    op.drop_table("rehearsal_sessions")
    op.drop_table("conversations")
    op.drop_table("script_analyses")
    op.drop_table("script_enhancements")
    op.drop_table("scripts")
    op.drop_table("users")
