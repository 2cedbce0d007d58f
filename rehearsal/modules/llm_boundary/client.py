from __future__ import annotations

import asyncio
import logging
from typing import Literal, TypedDict

import httpx

logger = logging.getLogger(__name__)

RETRY_DELAYS_S = (0.2, 0.5)


class ChatCompletionMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class LLMCallError(RuntimeError):
    pass


def _normalize_messages(messages: list[dict]) -> list[ChatCompletionMessage]:
    normalized: list[ChatCompletionMessage] = []
    for item in messages:
        if not isinstance(item, dict):
            continue
        role = str(item.get("role") or "").strip().lower()
        content = str(item.get("content") or "")
        if role not in {"system", "user", "assistant"}:
            continue
        normalized.append({"role": role, "content": content})
    return normalized


def _endpoint_url(*, base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


async def _post_chat_completions(
    *,
    api_key: str,
    endpoint_url: str,
    model: str,
    messages: list[ChatCompletionMessage],
    temperature: float,
    max_tokens: int,
    timeout_s: float,
) -> dict:
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    timeout = httpx.Timeout(timeout_s)
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.post(endpoint_url, headers=headers, json=payload)
    if response.status_code != 200:
        raise httpx.HTTPStatusError(
            f"chat/completions non-200: {response.status_code}",
            request=response.request,
            response=response,
        )
    return response.json()


def extract_message_content(data: dict) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LLMCallError("missing choices[0].message.content") from exc
    if not isinstance(content, str) or not content.strip():
        raise LLMCallError("empty model content")
    return content


async def call_chat_completions_text(
    *,
    api_key: str,
    base_url: str,
    path: str,
    model: str,
    messages: list[dict],
    temperature: float,
    max_tokens: int,
    timeout_s: float,
    max_attempts: int = 1,
) -> str:
    normalized = _normalize_messages(messages)
    if not normalized:
        normalized = [{"role": "user", "content": ""}]
    endpoint = _endpoint_url(base_url=base_url, path=path)

    attempts = max(1, int(max_attempts))
    last_error: Exception | None = None
    for attempt in range(attempts):
        try:
            data = await _post_chat_completions(
                api_key=api_key,
                endpoint_url=endpoint,
                model=model,
                messages=normalized,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout_s=timeout_s,
            )
            return extract_message_content(data)
        except (httpx.HTTPError, ValueError, LLMCallError) as exc:
            last_error = exc
            logger.warning("chat completions attempt %d/%d failed: %s", attempt + 1, attempts, exc)
            if attempt >= attempts - 1:
                break
            pause_idx = min(attempt, len(RETRY_DELAYS_S) - 1)
            await asyncio.sleep(RETRY_DELAYS_S[pause_idx])
    raise LLMCallError(f"chat completions failed after {attempts} attempt(s): {last_error}")
