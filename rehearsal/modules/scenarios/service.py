from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from rehearsal.config import settings
from rehearsal.modules.scenarios.schemas import (
    START_SCENE_ID,
    SUCCESS_SENTINEL,
    Scenario,
    ScenarioAuditIssue,
    ScenarioSummaryOut,
    Scene,
)
from rehearsal.utils.errors import ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_SCENARIOS_PATH = Path(__file__).resolve().parent / "data" / "scenarios.json"


class ScenarioNotFoundError(NotFoundError):
    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(
            f"Scenario {scenario_id}",
            code="SCENARIO_NOT_FOUND",
            nathan_message=f"Nathan has no rehearsal plan filed under '{scenario_id}'",
        )


class ScenarioValidationError(ConfigurationError):
    def __init__(self, issues: list[ScenarioAuditIssue]):
        self.issues = issues
        lines = [f"{item.scenario_id}:{item.path}: {item.message}" for item in issues]
        super().__init__(
            f"scenario catalog has {len(issues)} error(s): " + "; ".join(lines),
            details=[item.model_dump() for item in issues],
        )


def _issue(*, code: str, severity: str, scenario_id: str, path: str, message: str) -> ScenarioAuditIssue:
    return ScenarioAuditIssue(
        code=code,
        severity=severity,  # type: ignore[arg-type]
        scenario_id=scenario_id,
        path=path,
        message=message,
    )


def find_start_scene(scenario: Scenario) -> Scene | None:
    return scenario.scene_by_id(START_SCENE_ID) or (scenario.scenes[0] if scenario.scenes else None)


def _adjacency(scenario: Scenario, scene_ids: set[str]) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for scene in scenario.scenes:
        edges: list[str] = []
        for choice in scene.choices:
            nxt = str(choice.next or "")
            if nxt in scene_ids and nxt not in edges:
                edges.append(nxt)
        out[scene.id] = edges
    return out


def _reachable(start_id: str, adjacency: dict[str, list[str]]) -> set[str]:
    visited: set[str] = set()
    stack = [start_id]
    while stack:
        scene_id = stack.pop()
        if scene_id in visited:
            continue
        visited.add(scene_id)
        for nxt in adjacency.get(scene_id, []):
            if nxt not in visited:
                stack.append(nxt)
    return visited


def audit_scenario(scenario: Scenario) -> list[ScenarioAuditIssue]:
    issues: list[ScenarioAuditIssue] = []
    seen: set[str] = set()
    for idx, scene in enumerate(scenario.scenes):
        if scene.id in seen:
            issues.append(
                _issue(
                    code="DUPLICATE_SCENE_ID",
                    severity="error",
                    scenario_id=scenario.id,
                    path=f"scenes[{idx}].id",
                    message=f"scene id '{scene.id}' is declared more than once",
                )
            )
        seen.add(scene.id)

    start = find_start_scene(scenario)
    if start is None:
        issues.append(
            _issue(
                code="NO_START_SCENE",
                severity="error",
                scenario_id=scenario.id,
                path="scenes",
                message="scenario has no scenes to start from",
            )
        )
        return issues

    for s_idx, scene in enumerate(scenario.scenes):
        if not scene.is_end and not scene.choices:
            issues.append(
                _issue(
                    code="DEAD_END_SCENE",
                    severity="warning",
                    scenario_id=scenario.id,
                    path=f"scenes[{s_idx}]",
                    message=f"scene '{scene.id}' has no choices and is not marked as an end",
                )
            )
        for c_idx, choice in enumerate(scene.choices):
            nxt = str(choice.next or "")
            if choice.is_end or nxt == SUCCESS_SENTINEL or nxt in seen:
                continue
            issues.append(
                _issue(
                    code="DANGLING_NEXT",
                    severity="error",
                    scenario_id=scenario.id,
                    path=f"scenes[{s_idx}].choices[{c_idx}].next",
                    message=f"choice '{choice.text}' points to unknown scene '{nxt}'",
                )
            )

    reachable = _reachable(start.id, _adjacency(scenario, seen))
    for s_idx, scene in enumerate(scenario.scenes):
        if scene.id not in reachable:
            issues.append(
                _issue(
                    code="UNREACHABLE_SCENE",
                    severity="warning",
                    scenario_id=scenario.id,
                    path=f"scenes[{s_idx}]",
                    message=f"scene '{scene.id}' cannot be reached from '{start.id}'",
                )
            )
    return issues


def parse_catalog(raw: object, *, strict: bool = True) -> dict[str, Scenario]:
    if isinstance(raw, dict):
        items = []
        for key, value in raw.items():
            entry = dict(value) if isinstance(value, dict) else {}
            entry.setdefault("id", key)
            items.append(entry)
    elif isinstance(raw, list):
        items = list(raw)
    else:
        raise ConfigurationError("scenario catalog must be a JSON object or list")

    catalog: dict[str, Scenario] = {}
    errors: list[ScenarioAuditIssue] = []
    for entry in items:
        try:
            scenario = Scenario.model_validate(entry)
        except PydanticValidationError as exc:
            raise ConfigurationError("scenario catalog entry is malformed", details=exc.errors()) from exc
        for issue in audit_scenario(scenario):
            if issue.severity == "error":
                errors.append(issue)
            else:
                logger.warning("scenario audit %s %s: %s", issue.code, issue.scenario_id, issue.message)
        catalog[scenario.id] = scenario

    if errors and strict:
        raise ScenarioValidationError(errors)
    return catalog


@lru_cache(maxsize=4)
def _load_cached(path_str: str) -> dict[str, Scenario]:
    path = Path(path_str)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"cannot read scenario catalog at {path}", details=str(exc)) from exc
    catalog = parse_catalog(raw)
    logger.info("Loaded %d scenarios from %s", len(catalog), path)
    return catalog


def load_scenarios(path: str | Path | None = None) -> dict[str, Scenario]:
    resolved = path or settings.scenarios_path or DEFAULT_SCENARIOS_PATH
    return _load_cached(str(Path(resolved).resolve()))


def clear_scenario_cache() -> None:
    _load_cached.cache_clear()


def get_scenario(scenario_id: str) -> Scenario:
    scenario = load_scenarios().get(str(scenario_id or "").strip())
    if scenario is None:
        raise ScenarioNotFoundError(str(scenario_id))
    return scenario


def summarize_scenario(scenario: Scenario) -> ScenarioSummaryOut:
    return ScenarioSummaryOut(
        id=scenario.id,
        title=scenario.title,
        description=scenario.description,
        difficulty=scenario.difficulty,
        avatar=scenario.character.avatar,
        character_name=scenario.character.name,
        scene_count=len(scenario.scenes),
        free_text_practice=scenario.persona is not None,
    )


def list_scenario_summaries() -> list[ScenarioSummaryOut]:
    return [summarize_scenario(item) for item in load_scenarios().values()]
