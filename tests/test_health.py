from fastapi.testclient import TestClient

from rehearsal.main import app


def test_health_reports_offline_mode_and_catalog_size() -> None:
    client = TestClient(app)
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"
    assert body["data"]["llm_mode"] == "offline"
    assert body["data"]["scenarios"] == 9
    assert body["metadata"]["version"] == "1.0.0"
    assert body["metadata"]["request_id"]


def test_health_echoes_request_id_header() -> None:
    client = TestClient(app)
    resp = client.get("/api/health", headers={"X-Request-Id": "req-147"})
    assert resp.headers["X-Request-Id"] == "req-147"
    assert resp.json()["metadata"]["request_id"] == "req-147"


def test_lifespan_loads_catalog_when_schema_exists() -> None:
    with TestClient(app) as client:
        resp = client.get("/api/health")
    assert resp.status_code == 200
