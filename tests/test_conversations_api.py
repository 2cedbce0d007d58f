import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from rehearsal.main import app
from rehearsal.modules.conversations.responder import CRISIS_RESOURCES


def _start(client: TestClient, scenario_id: str = "friend-checkin") -> str:
    resp = client.post("/api/conversations/start", json={"scenarioId": scenario_id})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["conversation_id"]


def test_start_returns_persona_opening() -> None:
    client = TestClient(app)
    resp = client.post("/api/conversations/start", json={"scenario_id": "friend-checkin"})
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["scenario"]["title"] == "Checking on a Friend"
    assert data["initial_response"] == "Hey... I'm okay I guess. Just been really busy with work lately."
    uuid.UUID(data["conversation_id"])


def test_start_unknown_scenario_is_404() -> None:
    client = TestClient(app)
    resp = client.post("/api/conversations/start", json={"scenarioId": "ghost"})
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "SCENARIO_NOT_FOUND"


def test_message_roundtrip_appends_user_and_ai_messages() -> None:
    client = TestClient(app)
    cid = _start(client)

    resp = client.post(f"/api/conversations/{cid}/messages", json={"message": "How are you doing, really?"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["is_crisis"] is False
    assert data["response"]["role"] == "ai"

    convo = client.get(f"/api/conversations/{cid}").json()["data"]
    assert [item["role"] for item in convo["messages"]] == ["user", "ai"]
    assert convo["messages"][0]["content"] == "How are you doing, really?"
    assert convo["state"] == "active"


def test_crisis_message_returns_resources_as_system_message() -> None:
    client = TestClient(app)
    cid = _start(client)

    resp = client.post(f"/api/conversations/{cid}/messages", json={"message": "I feel hopeless"})
    body = resp.json()
    assert body["message"] == "Crisis resources provided"
    assert body["data"]["is_crisis"] is True
    assert body["data"]["crisis_resources"] == CRISIS_RESOURCES
    assert body["data"]["response"]["role"] == "system"


def test_crisis_log_names_conversation_without_message_text(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(app)
    cid = _start(client)

    with caplog.at_level(logging.WARNING, logger="rehearsal.modules.conversations.service"):
        client.post(f"/api/conversations/{cid}/messages", json={"message": "I feel hopeless about my secret"})

    assert f"conversation={cid}" in caplog.text
    assert "secret" not in caplog.text


def test_empty_message_is_rejected() -> None:
    client = TestClient(app)
    cid = _start(client)
    resp = client.post(f"/api/conversations/{cid}/messages", json={"message": "   "})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "EMPTY_MESSAGE"


def test_end_returns_feedback_and_blocks_new_messages() -> None:
    client = TestClient(app)
    cid = _start(client)
    client.post(f"/api/conversations/{cid}/messages", json={"message": "I'm sorry, that sounds difficult. What happened?"})

    resp = client.post(f"/api/conversations/{cid}/end")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["feedback"]["message_count"] == 1
    assert data["conversation_summary"]["message_count"] == 2
    assert data["conversation_summary"]["scenario"] == "Checking on a Friend"

    again = client.post(f"/api/conversations/{cid}/end")
    assert again.status_code == 200

    blocked = client.post(f"/api/conversations/{cid}/messages", json={"message": "one more thing"})
    assert blocked.status_code == 409
    assert blocked.json()["error"]["code"] == "CONVERSATION_ENDED"


def test_unknown_or_malformed_conversation_id_is_404() -> None:
    client = TestClient(app)
    assert client.get(f"/api/conversations/{uuid.uuid4()}").status_code == 404
    assert client.get("/api/conversations/not-a-uuid").status_code == 404
