from __future__ import annotations

import pytest

from rehearsal.config import settings
from rehearsal.modules.llm_boundary import service as ai_service
from rehearsal.modules.llm_boundary.client import LLMCallError
from rehearsal.modules.llm_boundary.errors import LLMUnavailableError
from rehearsal.modules.llm_boundary.parsers import DEFAULT_PRODUCTION_NOTES
from rehearsal.modules.llm_boundary.schemas import AnalysisRequest, EnhancementRequest
from rehearsal.modules.llm_boundary.service import OFFLINE_MODEL, AIEnhancementService

SCRIPT = "Hi Sam. I wanted to check in. How have you been feeling lately?"


def _online(monkeypatch: pytest.MonkeyPatch, reply: str | Exception) -> list[dict]:
    settings.llm_api_key = "test-key"
    settings.llm_base_url = "https://llm.test/v1"
    settings.llm_model = "rehearsal-model"
    calls: list[dict] = []

    async def _fake_call(**kwargs) -> str:
        calls.append(kwargs)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(ai_service, "call_chat_completions_text", _fake_call)
    return calls


def test_offline_enhancement_is_deterministic() -> None:
    service = AIEnhancementService()
    request = EnhancementRequest(original_script=SCRIPT, enhancement_type="awkwardness", intensity=7)
    first = service.enhance_script(request)
    second = service.enhance_script(request)

    assert service.mode() == "offline"
    assert first.mode == "offline"
    assert first.model == OFFLINE_MODEL
    assert first.content == second.content
    assert SCRIPT in first.content
    assert "[AWKWARD PAUSE - 3.6 seconds]" in first.content
    assert first.level_increase == 10


@pytest.mark.parametrize(("intensity", "increase"), [(1, 1), (4, 6), (10, 15)])
def test_level_increase_is_floor_of_intensity_times_one_and_a_half(intensity: int, increase: int) -> None:
    result = AIEnhancementService().enhance_script(
        EnhancementRequest(original_script=SCRIPT, enhancement_type="diagrams", intensity=intensity)
    )
    assert result.level_increase == increase


def test_offline_analysis_parses_every_field() -> None:
    result = AIEnhancementService().analyze_script(
        AnalysisRequest(script=SCRIPT, template="custom", enhancements=["awkwardness"], nathan_level=40)
    )
    assert result.mode == "offline"
    assert result.missing_fields == []
    assert 0 <= result.awkwardness_score <= 100
    assert result.nathan_observation.startswith("I read all")
    assert len(result.improvement_suggestions) == 3


def test_offline_production_notes_mention_enhancements() -> None:
    notes = AIEnhancementService().generate_production_notes(SCRIPT, ["diagrams"])
    assert len(notes) == 5
    assert "diagrams" in notes[0]
    assert notes[1:] == list(DEFAULT_PRODUCTION_NOTES[1:])


def test_online_enhancement_uses_profile_sampling(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _online(monkeypatch, "ENHANCED SCRIPT")
    result = AIEnhancementService().enhance_script(
        EnhancementRequest(original_script=SCRIPT, enhancement_type="statistics", intensity=4)
    )

    assert result.content == "ENHANCED SCRIPT"
    assert result.model == "rehearsal-model"
    assert result.mode == "online"
    assert len(calls) == 1
    call = calls[0]
    assert call["api_key"] == "test-key"
    assert call["base_url"] == "https://llm.test/v1"
    assert call["path"] == "/chat/completions"
    assert (call["temperature"], call["max_tokens"]) == (0.8, 2000)
    assert call["max_attempts"] == 1
    assert SCRIPT in call["messages"][1]["content"]


def test_online_analysis_reports_missing_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    _online(monkeypatch, "AWKWARDNESS_SCORE: 91\nNATHAN_OBSERVATION: Needs a replica.\n")
    result = AIEnhancementService().analyze_script(AnalysisRequest(script=SCRIPT))

    assert result.awkwardness_score == 91
    assert result.nathan_observation == "Needs a replica."
    assert result.complexity_rating == 67
    assert "complexity_rating" in result.missing_fields
    assert "awkwardness_score" not in result.missing_fields


def test_online_failure_raises_llm_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    _online(monkeypatch, LLMCallError("chat completions failed after 1 attempt(s): timeout"))
    with pytest.raises(LLMUnavailableError) as exc_info:
        AIEnhancementService().generate_production_notes(SCRIPT, [])
    assert exc_info.value.code == "LLM_UNAVAILABLE"
    assert exc_info.value.status_code == 503


def test_fractional_intensity_is_kept_and_floored_for_level_increase() -> None:
    service = AIEnhancementService()
    result = service.enhance_script(
        EnhancementRequest(original_script=SCRIPT, enhancement_type="replicas", intensity=7.5)
    )
    assert result.level_increase == 11
    assert "INTENSITY 7.5/10" in result.content
    assert "built over 7.5 weekends" in result.content

    whole = service.enhance_script(EnhancementRequest(original_script=SCRIPT, enhancement_type="replicas", intensity=7))
    assert "INTENSITY 7/10" in whole.content
