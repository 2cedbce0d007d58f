from __future__ import annotations

import logging
import random
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rehearsal.db.models import Script, ScriptAnalysis, ScriptEnhancement
from rehearsal.modules.llm_boundary.schemas import AnalysisRequest, EnhancementRequest, format_intensity
from rehearsal.modules.llm_boundary.service import get_ai_service
from rehearsal.modules.scripts.schemas import (
    EnhancementOut,
    PaginationOut,
    ProductionNotesResponse,
    QuickAnalysisOut,
    ScriptAnalysisOut,
    ScriptCreate,
    ScriptDetailResponse,
    ScriptEnhanceRequest,
    ScriptEnhanceResponse,
    ScriptListItem,
    ScriptListResponse,
    ScriptOut,
    ScriptUpdate,
    UserScriptStats,
)
from rehearsal.modules.scripts.scoring import (
    calculate_nathan_level,
    calculate_rehearsal_count,
    calculate_scripting_rank,
    quick_analysis,
)
from rehearsal.utils.errors import NotFoundError
from rehearsal.utils.ids import parse_uuid
from rehearsal.utils.time import to_iso

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "custom"
DEFAULT_STATUS = "DRAFT"
PREVIEW_CHARS = 200
ENHANCE_LEVEL_STEP = 5
MAX_NATHAN_LEVEL = 100


class ScriptNotFoundError(NotFoundError):
    def __init__(self, script_id: str):
        self.script_id = script_id
        super().__init__(
            "Script",
            code="SCRIPT_NOT_FOUND",
            nathan_message="Nathan couldn't locate this script in his meticulously organized filing system",
        )


def _load_owned(db: Session, script_id: str, user_id: uuid.UUID) -> Script:
    try:
        row_id = parse_uuid(script_id, "Script")
    except NotFoundError as exc:
        raise ScriptNotFoundError(script_id) from exc
    row = db.get(Script, row_id)
    # another user's script is reported the same as a missing one
    if row is None or row.user_id != user_id:
        raise ScriptNotFoundError(script_id)
    return row


def _to_out(row: Script) -> ScriptOut:
    return ScriptOut(
        id=str(row.id),
        title=row.title,
        original_script=row.original_script,
        enhanced_script=row.enhanced_script,
        template=row.template,
        enhancements=list(row.enhancements or []),
        nathan_level=int(row.nathan_level or 0),
        draft_number=int(row.draft_number or 1),
        production_notes=list(row.production_notes or []),
        storyboard_frames=list(row.storyboard_frames or []),
        status=row.status,
        created_at=to_iso(row.created_at) or "",
        updated_at=to_iso(row.updated_at) or "",
    )


def _to_list_item(row: Script) -> ScriptListItem:
    return ScriptListItem(
        id=str(row.id),
        title=row.title,
        template=row.template,
        nathan_level=int(row.nathan_level or 0),
        draft_number=int(row.draft_number or 1),
        status=row.status,
        created_at=to_iso(row.created_at) or "",
        updated_at=to_iso(row.updated_at) or "",
        preview=row.original_script[:PREVIEW_CHARS] + "...",
    )


def _quick(row: Script, rng: random.Random | None) -> QuickAnalysisOut:
    return QuickAnalysisOut(**quick_analysis(row.original_script, list(row.enhancements or []), rng))


def create_script(
    db: Session,
    user_id: uuid.UUID,
    payload: ScriptCreate,
    *,
    rng: random.Random | None = None,
) -> ScriptDetailResponse:
    enhancements = list(payload.enhancements)
    row = Script(
        user_id=user_id,
        title=payload.title,
        original_script=payload.original_script,
        template=payload.template or DEFAULT_TEMPLATE,
        enhancements=enhancements,
        nathan_level=calculate_nathan_level(payload.original_script, enhancements),
        draft_number=1,
        production_notes=[],
        storyboard_frames=[],
        status=DEFAULT_STATUS,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Script created id=%s user=%s level=%s", row.id, user_id, row.nathan_level)
    return ScriptDetailResponse(script=_to_out(row), analysis=_quick(row, rng))


def list_scripts(
    db: Session,
    user_id: uuid.UUID,
    *,
    template: str | None = None,
    status: str | None = None,
    min_nathan_level: int | None = None,
    max_nathan_level: int | None = None,
    limit: int = 20,
    offset: int = 0,
) -> ScriptListResponse:
    conditions = [Script.user_id == user_id]
    if template:
        conditions.append(Script.template == template)
    if status:
        conditions.append(Script.status == status)
    if min_nathan_level is not None:
        conditions.append(Script.nathan_level >= min_nathan_level)
    if max_nathan_level is not None:
        conditions.append(Script.nathan_level <= max_nathan_level)

    rows = db.execute(
        select(Script)
        .where(*conditions)
        .order_by(Script.updated_at.desc(), Script.created_at.desc())
        .limit(limit)
        .offset(offset)
    ).scalars().all()
    total = int(db.execute(select(func.count()).select_from(Script).where(*conditions)).scalar_one())

    return ScriptListResponse(
        scripts=[_to_list_item(row) for row in rows],
        pagination=PaginationOut(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
        user_stats=user_script_stats(db, user_id),
    )


def user_script_stats(db: Session, user_id: uuid.UUID) -> UserScriptStats:
    total, avg_level, drafts = db.execute(
        select(
            func.count(Script.id),
            func.avg(Script.nathan_level),
            func.sum(Script.draft_number),
        ).where(Script.user_id == user_id)
    ).one()
    avg = float(avg_level or 0)
    return UserScriptStats(
        total_scripts=int(total or 0),
        average_nathan_level=int(avg + 0.5),
        total_drafts=int(drafts or 0),
        scripting_rank=calculate_scripting_rank(int(total or 0), avg),
    )


def get_script(
    db: Session,
    user_id: uuid.UUID,
    script_id: str,
    *,
    rng: random.Random | None = None,
) -> ScriptDetailResponse:
    row = _load_owned(db, script_id, user_id)
    return ScriptDetailResponse(script=_to_out(row), analysis=_quick(row, rng))


def update_script(db: Session, user_id: uuid.UUID, script_id: str, payload: ScriptUpdate) -> ScriptOut:
    row = _load_owned(db, script_id, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "title" in changes:
        row.title = payload.title
    if "original_script" in changes:
        row.original_script = payload.original_script
    if "enhanced_script" in changes:
        row.enhanced_script = payload.enhanced_script
    if "enhancements" in changes:
        row.enhancements = list(payload.enhancements or [])
        row.nathan_level = calculate_nathan_level(row.original_script, row.enhancements)
    if "production_notes" in changes:
        row.production_notes = list(payload.production_notes or [])
    if "storyboard_frames" in changes:
        row.storyboard_frames = [frame.model_dump() for frame in payload.storyboard_frames or []]
    if "status" in changes:
        row.status = payload.status
    if "original_script" in changes or "enhanced_script" in changes:
        row.draft_number = int(row.draft_number or 1) + 1

    db.commit()
    db.refresh(row)
    return _to_out(row)


def enhance_script(db: Session, user_id: uuid.UUID, script_id: str, payload: ScriptEnhanceRequest) -> ScriptEnhanceResponse:
    row = _load_owned(db, script_id, user_id)
    level_before = int(row.nathan_level or 0)

    result = get_ai_service().enhance_script(
        EnhancementRequest(
            original_script=row.original_script,
            enhancement_type=payload.enhancement_type,
            intensity=payload.intensity,
            context=payload.context
            or f"Mental health scenario with {format_intensity(payload.intensity)}/10 Nathan Fielder awkwardness",
            existing_enhancements=list(row.enhancements or []),
        )
    )

    row.enhanced_script = result.content
    row.draft_number = int(row.draft_number or 1) + 1
    row.nathan_level = min(MAX_NATHAN_LEVEL, level_before + ENHANCE_LEVEL_STEP)
    db.add(
        ScriptEnhancement(
            script_id=row.id,
            enhancement_type=payload.enhancement_type,
            intensity=payload.intensity,
            ai_model=result.model,
            processing_time_ms=result.processing_time_ms,
            nathan_level_before=level_before,
            nathan_level_after=row.nathan_level,
        )
    )
    db.commit()
    db.refresh(row)
    logger.info(
        "Script enhanced id=%s type=%s level=%s->%s mode=%s",
        row.id,
        payload.enhancement_type,
        level_before,
        row.nathan_level,
        result.mode,
    )

    return ScriptEnhanceResponse(
        enhanced_script=result.content,
        enhancement=EnhancementOut(
            type=payload.enhancement_type,
            intensity=payload.intensity,
            ai_model=result.model,
            processing_time_ms=result.processing_time_ms,
            mode=result.mode,
        ),
        script=_to_out(row),
    )


def analyze_script(
    db: Session,
    user_id: uuid.UUID,
    script_id: str,
    *,
    rng: random.Random | None = None,
) -> ScriptAnalysisOut:
    row = _load_owned(db, script_id, user_id)
    result = get_ai_service().analyze_script(
        AnalysisRequest(
            script=row.enhanced_script or row.original_script,
            template=row.template,
            enhancements=list(row.enhancements or []),
            nathan_level=int(row.nathan_level or 0),
        )
    )

    db.add(
        ScriptAnalysis(
            script_id=row.id,
            awkwardness_score=result.awkwardness_score,
            complexity_rating=result.complexity_rating,
            optimality_score=result.optimality_score,
            suggestions=list(result.improvement_suggestions),
            nathan_observation=result.nathan_observation,
            missing_fields=list(result.missing_fields),
            ai_model=result.model,
        )
    )
    db.commit()

    return ScriptAnalysisOut(
        awkwardness_score=result.awkwardness_score,
        complexity_rating=result.complexity_rating,
        optimality_score=result.optimality_score,
        rehearsal_count=calculate_rehearsal_count(result.complexity_rating, rng),
        nathan_observation=result.nathan_observation,
        improvement_suggestions=list(result.improvement_suggestions),
        breakdown=result.breakdown,
        missing_fields=list(result.missing_fields),
        ai_model=result.model,
        mode=result.mode,
    )


def generate_production_notes(db: Session, user_id: uuid.UUID, script_id: str) -> ProductionNotesResponse:
    row = _load_owned(db, script_id, user_id)
    notes = get_ai_service().generate_production_notes(
        row.enhanced_script or row.original_script,
        list(row.enhancements or []),
    )
    row.production_notes = list(notes)
    db.commit()
    db.refresh(row)
    return ProductionNotesResponse(production_notes=list(notes), script=_to_out(row))


def delete_script(db: Session, user_id: uuid.UUID, script_id: str) -> dict:
    row = _load_owned(db, script_id, user_id)
    title = row.title
    row_id = row.id
    try:
        db.execute(delete(ScriptEnhancement).where(ScriptEnhancement.script_id == row_id))
        db.execute(delete(ScriptAnalysis).where(ScriptAnalysis.script_id == row_id))
        db.delete(row)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Script delete rolled back id=%s", row_id)
        raise
    return {"deleted_script_id": str(row_id), "title": title}
