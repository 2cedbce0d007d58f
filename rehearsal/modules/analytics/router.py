from __future__ import annotations

from fastapi import APIRouter, Request

from rehearsal.modules.analytics.service import get_analytics_summary
from rehearsal.utils.envelope import current_request_id, success_response

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/summary")
def analytics_summary(request: Request) -> dict:
    return success_response(
        get_analytics_summary(),
        "Analytics summary retrieved",
        request_id=current_request_id(request),
    )
