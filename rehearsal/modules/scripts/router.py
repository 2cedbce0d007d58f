from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from rehearsal.db.session import get_db
from rehearsal.modules.auth.deps import CurrentUser, get_current_user
from rehearsal.modules.scripts.schemas import ScriptCreate, ScriptEnhanceRequest, ScriptUpdate
from rehearsal.modules.scripts.service import (
    analyze_script,
    create_script,
    delete_script,
    enhance_script,
    generate_production_notes,
    get_script,
    list_scripts,
    update_script,
)
from rehearsal.modules.scripts.templates import list_templates
from rehearsal.utils.envelope import current_request_id, success_response

router = APIRouter(prefix="/api/scripts", tags=["scripts"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_script_api(
    payload: ScriptCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = create_script(db, user.id, payload)
    return success_response(
        out.model_dump(mode="json"),
        f'Script "{out.script.title}" created with {out.script.nathan_level}% Nathan Fielder authenticity.',
        request_id=current_request_id(request),
    )


@router.get("")
def list_scripts_api(
    request: Request,
    template: str | None = None,
    status_filter: str | None = Query(default=None, alias="status"),
    min_nathan_level: int | None = Query(default=None, ge=0, le=100),
    max_nathan_level: int | None = Query(default=None, ge=0, le=100),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = list_scripts(
        db,
        user.id,
        template=template,
        status=status_filter,
        min_nathan_level=min_nathan_level,
        max_nathan_level=max_nathan_level,
        limit=limit,
        offset=offset,
    )
    return success_response(
        out.model_dump(mode="json"),
        f"Found {len(out.scripts)} scripts. Nathan would be proud of your productivity.",
        request_id=current_request_id(request),
    )


@router.get("/templates")
def list_templates_api(request: Request, user: CurrentUser = Depends(get_current_user)) -> dict:
    return success_response(
        {"templates": list_templates()},
        "All templates loaded. Nathan has personally tested each one 147 times.",
        request_id=current_request_id(request),
    )


@router.get("/{script_id}")
def get_script_api(
    script_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = get_script(db, user.id, script_id)
    return success_response(
        out.model_dump(mode="json"),
        f"Script analysis complete. Nathan has {len(out.analysis.improvement_suggestions)} suggestions.",
        request_id=current_request_id(request),
    )


@router.put("/{script_id}")
def update_script_api(
    script_id: str,
    payload: ScriptUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = update_script(db, user.id, script_id, payload)
    return success_response(
        {"script": out.model_dump(mode="json")},
        f"Script updated to draft #{out.draft_number}. Nathan recommends at least 47 more revisions.",
        request_id=current_request_id(request),
    )


@router.post("/{script_id}/enhance")
def enhance_script_api(
    script_id: str,
    payload: ScriptEnhanceRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = enhance_script(db, user.id, script_id, payload)
    return success_response(
        out.model_dump(mode="json"),
        f"Script enhanced with {payload.enhancement_type}. Nathan level increased to {out.script.nathan_level}%.",
        request_id=current_request_id(request),
    )


@router.post("/{script_id}/analyze")
def analyze_script_api(
    script_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = analyze_script(db, user.id, script_id)
    return success_response(
        {"analysis": out.model_dump(mode="json")},
        out.nathan_observation,
        request_id=current_request_id(request),
    )


@router.post("/{script_id}/production-notes")
def production_notes_api(
    script_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = generate_production_notes(db, user.id, script_id)
    return success_response(
        out.model_dump(mode="json"),
        f"{len(out.production_notes)} production notes filed.",
        request_id=current_request_id(request),
    )


@router.delete("/{script_id}")
def delete_script_api(
    script_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    out = delete_script(db, user.id, script_id)
    return success_response(
        {"deleted_script_id": out["deleted_script_id"]},
        f'Script "{out["title"]}" deleted. Nathan believes in fresh starts.',
        request_id=current_request_id(request),
    )
