from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

import httpx
import typer

app = typer.Typer(help="The Rehearsal AI CLI")
rehearse_app = typer.Typer(help="Scenario rehearsal commands")
talk_app = typer.Typer(help="Free-text conversation practice")
scripts_app = typer.Typer(help="Director's studio script commands")
app.add_typer(rehearse_app, name="rehearse")
app.add_typer(talk_app, name="talk")
app.add_typer(scripts_app, name="scripts")

DEFAULT_BACKEND_URL = "http://127.0.0.1:3000"
STATE_PATH = Path(__file__).resolve().parent / ".state.json"
GET_MAX_ATTEMPTS = 3
GET_RETRY_BACKOFF_S = 0.35


def load_state(path: Path = STATE_PATH) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}


def save_state(data: dict[str, Any], path: Path = STATE_PATH) -> None:
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2))


def remember(key: str, value: Any, path: Path = STATE_PATH) -> None:
    state = load_state(path)
    state[key] = value
    save_state(state, path)


def backend_url() -> str:
    return os.getenv("BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/")


def auth_headers(token: str | None = None) -> dict[str, str]:
    value = str(token if token is not None else os.getenv("REHEARSAL_TOKEN", "")).strip()
    return {"Authorization": f"Bearer {value}"} if value else {}


def request(
    method: str,
    endpoint: str,
    *,
    json_body: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    url = f"{backend_url()}{endpoint}"
    with httpx.Client(timeout=30.0) as client:
        return client.request(method, url, json=json_body, params=params, headers=headers)


def get_with_retry(endpoint: str, *, headers: dict[str, str] | None = None) -> httpx.Response:
    for attempt in range(1, GET_MAX_ATTEMPTS + 1):
        try:
            return request("GET", endpoint, headers=headers)
        except httpx.RequestError as exc:
            if attempt == GET_MAX_ATTEMPTS:
                typer.echo(f"GET {endpoint} failed after {attempt} attempts: network error ({exc})")
                raise typer.Exit(code=1) from exc
            time.sleep(GET_RETRY_BACKOFF_S * attempt)
    raise typer.Exit(code=1)


def envelope_error(resp: httpx.Response) -> tuple[str | None, str | None]:
    try:
        payload = resp.json()
    except ValueError:
        return None, None
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return None, None
    code = error.get("code")
    message = error.get("message")
    return (code if isinstance(code, str) else None, message if isinstance(message, str) else None)


def envelope_data(resp: httpx.Response, action: str) -> Any:
    if resp.status_code >= 400:
        code, message = envelope_error(resp)
        if code:
            typer.echo(f"{action} failed ({resp.status_code} {code}): {message}")
        else:
            typer.echo(f"{action} failed ({resp.status_code}): {resp.text}")
        raise typer.Exit(code=1)
    try:
        payload = resp.json()
    except ValueError:
        typer.echo(resp.text)
        raise typer.Exit(code=1)
    note = (payload.get("metadata") or {}).get("nathan_note")
    if note:
        typer.echo(f"nathan: {note}")
    return payload.get("data")


def _resolve(key: str, value: str | None) -> str:
    if value:
        return value
    saved = load_state().get(key)
    if not saved:
        raise typer.BadParameter(f"No {key} provided and none saved in client/.state.json")
    return str(saved)


def _print_scene(scene: dict[str, Any] | None) -> None:
    if not scene:
        return
    typer.echo(f"[{scene.get('scene_id')}] {scene.get('text')}")
    if scene.get("dialogue"):
        typer.echo(f"{scene.get('character_avatar')} {scene.get('character_name')}: \"{scene.get('dialogue')}\"")
    for choice in scene.get("choices", []):
        typer.echo(f"  {choice.get('index')}: {choice.get('text')} ({choice.get('impact_description')})")


def _print_rehearsal(body: dict[str, Any]) -> None:
    stats = body.get("stats") or {}
    typer.echo(f"rehearsal_id: {body.get('rehearsal_id')}")
    typer.echo(f"scenario: {body.get('scenario_title')} attempt #{body.get('attempt_number')}")
    typer.echo(
        f"status: {body.get('status')} empathy={stats.get('empathy')} "
        f"trust={stats.get('trust')} effectiveness={stats.get('effectiveness')}"
    )
    if body.get("status") == "ended":
        summary = body.get("summary") or {}
        typer.echo(f"outcome: {body.get('outcome')} score={summary.get('total_score')}/{summary.get('max_score')}")
        return
    _print_scene(body.get("scene"))


@app.command()
def ping() -> None:
    data = envelope_data(get_with_retry("/api/health"), "ping")
    typer.echo(f"ok: {data}")


@app.command()
def scenarios() -> None:
    data = envelope_data(get_with_retry("/api/scenarios"), "scenarios")
    for item in data or []:
        typer.echo(f"{item.get('avatar')} {item.get('id')}: {item.get('title')} ({item.get('difficulty')})")


@rehearse_app.command("start")
def rehearse_start(
    scenario_id: str = typer.Argument(..., help="Scenario id"),
    fresh: bool = typer.Option(False, "--fresh", help="Do not reuse the saved rehearsal"),
) -> None:
    payload: dict[str, Any] = {"scenario_id": scenario_id}
    saved = load_state().get("rehearsal_id")
    if saved and not fresh:
        payload["rehearsal_id"] = saved
    data = envelope_data(request("POST", "/api/rehearsals", json_body=payload), "rehearse start")
    remember("rehearsal_id", data.get("rehearsal_id"))
    _print_rehearsal(data)


@rehearse_app.command("choose")
def rehearse_choose(
    index: int = typer.Argument(..., help="Choice index from the current scene"),
    rehearsal_id: str | None = typer.Option(None, "--rehearsal-id"),
) -> None:
    rid = _resolve("rehearsal_id", rehearsal_id)
    data = envelope_data(
        request("POST", f"/api/rehearsals/{rid}/choices", json_body={"choice_index": index}),
        "rehearse choose",
    )
    result = data.get("result") or {}
    typer.echo(f"impact: {result.get('impact_description')}")
    _print_rehearsal(data.get("rehearsal") or {})


@rehearse_app.command("show")
def rehearse_show(rehearsal_id: str | None = typer.Option(None, "--rehearsal-id")) -> None:
    rid = _resolve("rehearsal_id", rehearsal_id)
    _print_rehearsal(envelope_data(get_with_retry(f"/api/rehearsals/{rid}"), "rehearse show") or {})


@rehearse_app.command("export")
def rehearse_export(
    rehearsal_id: str | None = typer.Option(None, "--rehearsal-id"),
    output: Path | None = typer.Option(None, "--output", help="Write the export to this file"),
) -> None:
    rid = _resolve("rehearsal_id", rehearsal_id)
    data = envelope_data(get_with_retry(f"/api/rehearsals/{rid}/export"), "rehearse export")
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if output is None:
        typer.echo(text)
        return
    output.write_text(text)
    typer.echo(f"exported to {output}")


@talk_app.command("start")
def talk_start(scenario_id: str = typer.Argument(..., help="Scenario id")) -> None:
    data = envelope_data(
        request("POST", "/api/conversations/start", json_body={"scenario_id": scenario_id}),
        "talk start",
    )
    remember("conversation_id", data.get("conversation_id"))
    scenario = data.get("scenario") or {}
    typer.echo(f"conversation_id: {data.get('conversation_id')}")
    typer.echo(f"you: {scenario.get('initial_message')}")
    typer.echo(f"them: {data.get('initial_response')}")


@talk_app.command("say")
def talk_say(
    message: str = typer.Argument(..., help="What you say"),
    conversation_id: str | None = typer.Option(None, "--conversation-id"),
) -> None:
    cid = _resolve("conversation_id", conversation_id)
    data = envelope_data(
        request("POST", f"/api/conversations/{cid}/messages", json_body={"message": message}),
        "talk say",
    )
    reply = data.get("response") or {}
    typer.echo(f"them: {reply.get('content')}")
    if data.get("is_crisis"):
        for name, line in (data.get("crisis_resources") or {}).items():
            typer.echo(f"  {name}: {line}")


@talk_app.command("end")
def talk_end(conversation_id: str | None = typer.Option(None, "--conversation-id")) -> None:
    cid = _resolve("conversation_id", conversation_id)
    data = envelope_data(request("POST", f"/api/conversations/{cid}/end"), "talk end")
    feedback = data.get("feedback") or {}
    typer.echo(
        f"overall={feedback.get('overall')} empathy={feedback.get('empathy')} questions={feedback.get('questions')}"
    )
    for line in feedback.get("strengths", []):
        typer.echo(f"  + {line}")
    for line in feedback.get("improvements", feedback.get("areas", [])):
        typer.echo(f"  - {line}")


@scripts_app.command("create")
def scripts_create(
    title: str = typer.Option(..., "--title"),
    file: Path = typer.Option(..., "--file", exists=True, readable=True, help="Script text file"),
    template: str | None = typer.Option(None, "--template"),
    token: str | None = typer.Option(None, "--token", help="Bearer token, defaults to $REHEARSAL_TOKEN"),
) -> None:
    payload: dict[str, Any] = {"title": title, "original_script": file.read_text()}
    if template:
        payload["template"] = template
    data = envelope_data(
        request("POST", "/api/scripts", json_body=payload, headers=auth_headers(token)),
        "scripts create",
    )
    script = data.get("script") or {}
    remember("script_id", script.get("id"))
    typer.echo(f"script_id: {script.get('id')} nathan_level={script.get('nathan_level')}%")


@scripts_app.command("enhance")
def scripts_enhance(
    enhancement_type: str = typer.Argument(..., help="awkwardness, overthinking, preparation, diagrams, statistics or replicas"),
    intensity: float = typer.Option(7, "--intensity", min=1, max=10),
    script_id: str | None = typer.Option(None, "--script-id"),
    token: str | None = typer.Option(None, "--token"),
) -> None:
    sid = _resolve("script_id", script_id)
    data = envelope_data(
        request(
            "POST",
            f"/api/scripts/{sid}/enhance",
            json_body={"enhancement_type": enhancement_type, "intensity": intensity},
            headers=auth_headers(token),
        ),
        "scripts enhance",
    )
    typer.echo(data.get("enhanced_script"))
    script = data.get("script") or {}
    typer.echo(f"draft #{script.get('draft_number')} nathan_level={script.get('nathan_level')}%")


@scripts_app.command("analyze")
def scripts_analyze(
    script_id: str | None = typer.Option(None, "--script-id"),
    token: str | None = typer.Option(None, "--token"),
) -> None:
    sid = _resolve("script_id", script_id)
    data = envelope_data(
        request("POST", f"/api/scripts/{sid}/analyze", headers=auth_headers(token)),
        "scripts analyze",
    )
    analysis = data.get("analysis") or {}
    typer.echo(
        f"awkwardness={analysis.get('awkwardness_score')} complexity={analysis.get('complexity_rating')} "
        f"optimality={analysis.get('optimality_score')} rehearsals={analysis.get('rehearsal_count')}"
    )
    for line in analysis.get("improvement_suggestions", []):
        typer.echo(f"  - {line}")
    if analysis.get("missing_fields"):
        typer.echo(f"defaults used for: {', '.join(analysis['missing_fields'])}")


if __name__ == "__main__":
    app()
