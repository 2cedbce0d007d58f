import uuid

from fastapi.testclient import TestClient

from rehearsal.main import app


def _start(client: TestClient, **extra) -> dict:
    resp = client.post("/api/rehearsals", json={"scenarioId": "friend-checkin", **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_start_rehearsal_returns_first_scene() -> None:
    client = TestClient(app)
    body = _start(client)
    data = body["data"]
    assert data["status"] == "active"
    assert data["attempt_number"] == 1
    assert data["scene"]["scene_id"] == "intro"
    assert data["stats"] == {"empathy": 0, "trust": 0, "effectiveness": 0}
    assert body["metadata"]["nathan_note"].startswith("Rehearsal attempt #1")


def test_choices_progress_to_successful_end() -> None:
    client = TestClient(app)
    rid = _start(client)["data"]["rehearsal_id"]

    first = client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 0})
    assert first.status_code == 200
    first_data = first.json()["data"]
    assert first_data["rehearsal"]["scene"]["scene_id"] == "opening_up"
    assert len(first_data["rehearsal"]["breakthroughs"]) == 1
    assert first.json()["metadata"]["nathan_note"] == first_data["result"]["commentary"]

    second = client.post(f"/api/rehearsals/{rid}/choices", json={"choice_index": 0})
    body = second.json()
    assert body["message"] == "Rehearsal complete"
    rehearsal = body["data"]["rehearsal"]
    assert rehearsal["status"] == "ended"
    assert rehearsal["outcome"] == "success"
    assert rehearsal["summary"]["total_score"] == 9

    fetched = client.get(f"/api/rehearsals/{rid}").json()["data"]
    assert fetched["choices_made"] == 2
    assert fetched["summary"]["success"] is True


def test_invalid_choice_and_choice_after_end() -> None:
    client = TestClient(app)
    rid = _start(client)["data"]["rehearsal_id"]

    bad = client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 7})
    assert bad.status_code == 400
    assert bad.json()["error"]["code"] == "INVALID_CHOICE"

    negative = client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": -1})
    assert negative.status_code == 400
    assert negative.json()["error"]["code"] == "VALIDATION_ERROR"

    client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 2})
    late = client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 0})
    assert late.status_code == 400


def test_restart_with_rehearsal_id_counts_attempts() -> None:
    client = TestClient(app)
    rid = _start(client)["data"]["rehearsal_id"]
    client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 2})

    again = _start(client, rehearsalId=rid)["data"]
    assert again["rehearsal_id"] == rid
    assert again["attempt_number"] == 2
    assert again["choices_made"] == 0
    assert again["status"] == "active"


def test_flowchart_and_export() -> None:
    client = TestClient(app)
    rid = _start(client)["data"]["rehearsal_id"]
    client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 1})

    chart = client.get(f"/api/rehearsals/{rid}/flowchart").json()["data"]
    assert chart["paths_explored"] == 1
    assert chart["current_branch_depth"] == "deflect"

    exported = client.get(f"/api/rehearsals/{rid}/export").json()["data"]
    assert exported["rehearsal_id"] == rid
    assert exported["history"][0]["scene"] == "intro"
    assert exported["attempts"] == {"friend-checkin": 1}


def test_unknown_rehearsal_and_scenario() -> None:
    client = TestClient(app)
    assert client.get(f"/api/rehearsals/{uuid.uuid4()}").status_code == 404
    resp = client.post("/api/rehearsals", json={"scenarioId": "ghost"})
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "SCENARIO_NOT_FOUND"


def test_rehearsal_routes_feed_analytics() -> None:
    client = TestClient(app)
    rid = _start(client)["data"]["rehearsal_id"]
    client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 0})
    client.post(f"/api/rehearsals/{rid}/choices", json={"choiceIndex": 0})

    summary = client.get("/api/analytics/summary").json()["data"]
    assert summary["event_counts"] == {
        "scenario_selected": 1,
        "choice_made": 2,
        "breakthrough_achieved": 1,
        "session_complete": 1,
    }
    assert summary["success_rate"] == 1.0
    assert summary["most_attempted_scenario"] == "friend-checkin"
    assert summary["average_stats"] == {"empathy": 5.0, "trust": 3.0, "effectiveness": 1.0}
