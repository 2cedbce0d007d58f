from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request

from rehearsal.config import settings
from rehearsal.utils.errors import RehearsalError
from rehearsal.utils.time import utc_now_iso

REQUEST_ID_HEADER = "X-Request-Id"


def new_request_id() -> str:
    return uuid.uuid4().hex


def current_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _metadata(*, request_id: str | None, nathan_note: str | None) -> dict:
    return {
        "timestamp": utc_now_iso(),
        "request_id": request_id,
        "nathan_note": nathan_note,
        "version": settings.app_version,
    }


def success_response(
    data: Any,
    message: str = "Operation successful",
    *,
    request_id: str | None = None,
    nathan_note: str | None = None,
) -> dict:
    return {
        "success": True,
        "message": message,
        "data": data,
        "metadata": _metadata(request_id=request_id, nathan_note=nathan_note),
    }


def error_response(
    code: str,
    message: str,
    *,
    details: Any = None,
    request_id: str | None = None,
    nathan_note: str | None = None,
    summary: str | None = None,
) -> dict:
    return {
        "success": False,
        "message": summary or message,
        "error": {"code": code, "message": message, "details": details},
        "metadata": _metadata(
            request_id=request_id,
            nathan_note=nathan_note or "Nathan encountered an unplanned scenario",
        ),
    }


def rehearsal_error_response(exc: RehearsalError, *, request_id: str | None = None) -> dict:
    return error_response(
        exc.code,
        exc.message,
        details=exc.details,
        request_id=request_id,
        nathan_note=exc.nathan_message,
        summary=exc.nathan_message,
    )
