from __future__ import annotations

from fastapi import APIRouter, Request

from rehearsal.modules.scenarios.service import get_scenario, list_scenario_summaries
from rehearsal.utils.envelope import current_request_id, success_response

router = APIRouter(prefix="/api/scenarios", tags=["scenarios"])


@router.get("")
def list_scenarios_api(request: Request) -> dict:
    items = [item.model_dump() for item in list_scenario_summaries()]
    return success_response(
        items,
        "Scenarios retrieved successfully",
        request_id=current_request_id(request),
        nathan_note=f"Nathan has prepared {len(items)} rehearsal scenarios",
    )


@router.get("/{scenario_id}")
def get_scenario_api(scenario_id: str, request: Request) -> dict:
    scenario = get_scenario(scenario_id)
    return success_response(
        scenario.model_dump(),
        "Scenario retrieved successfully",
        request_id=current_request_id(request),
    )
