from __future__ import annotations

import asyncio

import httpx
import pytest

from rehearsal.modules.llm_boundary import client


class _FakeResponse:
    def __init__(self, *, status_code: int, payload: dict | None = None):
        self.status_code = status_code
        self._payload = payload or {}
        self.request = httpx.Request("POST", "https://llm.test/v1/chat/completions")

    def json(self) -> dict:
        return self._payload


class _FakeAsyncClient:
    scenarios: list[object] = []
    requests: list[dict] = []

    def __init__(self, *, timeout):
        self.timeout = timeout

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def post(self, url: str, *, headers: dict, json: dict):
        _FakeAsyncClient.requests.append({"url": url, "headers": headers, "json": json})
        if not _FakeAsyncClient.scenarios:
            raise RuntimeError("no fake scenario configured")
        outcome = _FakeAsyncClient.scenarios.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _make_payload(content: str) -> dict:
    return {"choices": [{"message": {"content": content}}]}


def _call(**overrides) -> str:
    kwargs = {
        "api_key": "k",
        "base_url": "https://llm.test/v1/",
        "path": "/chat/completions",
        "model": "m",
        "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}, {"role": "tool"}],
        "temperature": 0.8,
        "max_tokens": 2000,
        "timeout_s": 5.0,
    }
    kwargs.update(overrides)
    return asyncio.run(client.call_chat_completions_text(**kwargs))


@pytest.fixture(autouse=True)
def _fake_httpx(monkeypatch: pytest.MonkeyPatch) -> None:
    _FakeAsyncClient.scenarios = []
    _FakeAsyncClient.requests = []
    monkeypatch.setattr(client.httpx, "AsyncClient", _FakeAsyncClient)

    async def _no_sleep(_delay: float) -> None:
        return None

    monkeypatch.setattr(client.asyncio, "sleep", _no_sleep)


def test_posts_bearer_request_to_chat_completions_endpoint() -> None:
    _FakeAsyncClient.scenarios = [_FakeResponse(status_code=200, payload=_make_payload("enhanced"))]

    assert _call() == "enhanced"

    assert len(_FakeAsyncClient.requests) == 1
    req = _FakeAsyncClient.requests[0]
    assert req["url"] == "https://llm.test/v1/chat/completions"
    assert req["headers"]["Authorization"] == "Bearer k"
    assert req["headers"]["Content-Type"] == "application/json"
    assert req["json"] == {
        "model": "m",
        "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}],
        "temperature": 0.8,
        "max_tokens": 2000,
    }


def test_single_attempt_by_default() -> None:
    _FakeAsyncClient.scenarios = [
        _FakeResponse(status_code=500),
        _FakeResponse(status_code=200, payload=_make_payload("never reached")),
    ]
    with pytest.raises(client.LLMCallError, match="after 1 attempt"):
        _call()
    assert len(_FakeAsyncClient.requests) == 1


def test_bounded_retry_recovers_from_transport_error() -> None:
    _FakeAsyncClient.scenarios = [
        httpx.ConnectError("boom"),
        _FakeResponse(status_code=200, payload=_make_payload("second time lucky")),
    ]
    assert _call(max_attempts=3) == "second time lucky"
    assert len(_FakeAsyncClient.requests) == 2


def test_empty_content_counts_as_failure() -> None:
    _FakeAsyncClient.scenarios = [
        _FakeResponse(status_code=200, payload=_make_payload("   ")),
        _FakeResponse(status_code=200, payload={"choices": []}),
    ]
    with pytest.raises(client.LLMCallError):
        _call(max_attempts=2)
    assert len(_FakeAsyncClient.requests) == 2


def test_extract_message_content_rejects_missing_fields() -> None:
    with pytest.raises(client.LLMCallError):
        client.extract_message_content({})
    assert client.extract_message_content(_make_payload("ok")) == "ok"
