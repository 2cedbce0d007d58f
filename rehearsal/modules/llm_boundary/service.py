from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from time import perf_counter

from rehearsal.config import settings
from rehearsal.modules.llm_boundary.client import LLMCallError, call_chat_completions_text
from rehearsal.modules.llm_boundary.errors import LLMUnavailableError
from rehearsal.modules.llm_boundary.parsers import (
    DEFAULT_PRODUCTION_NOTES,
    parse_analysis_response,
    parse_production_notes,
)
from rehearsal.modules.llm_boundary.prompt_profiles import (
    ANALYSIS_PROFILE_ID,
    ENHANCEMENT_PROFILE_IDS,
    PRODUCTION_NOTES_PROFILE_ID,
    get_profile,
    render_prompt,
)
from rehearsal.modules.llm_boundary.schemas import (
    AnalysisRequest,
    AnalysisResult,
    EnhancementRequest,
    EnhancementResult,
    format_intensity,
)

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"
OFFLINE_MODEL = "offline-rehearsal"
LEVEL_INCREASE_FACTOR = 1.5

_OFFLINE_ENHANCEMENT_LINES = {
    "awkwardness": "[AWKWARD PAUSE - {pause} seconds] (I count the ceiling tiles. There are 47.)",
    "overthinking": "(Internal monologue: I have prepared for 47 different outcomes. This is outcome 12.)",
    "preparation": "(Backup plan B is laminated and in my left pocket. Plan C is in the car.)",
    "diagrams": "(I gesture to flowchart 3 of {intensity}: 'If they say hmm, proceed to box F.')",
    "statistics": "(Studies show this line succeeds {percent}% of the time in controlled rehearsal.)",
    "replicas": "(This conversation was rehearsed in a 1:1 replica built over {intensity} weekends.)",
}


@dataclass(frozen=True)
class _LLMChannelConfig:
    api_key: str
    base_url: str
    path: str
    model: str
    timeout_s: float
    max_attempts: int


def _elapsed_ms(started: float) -> int:
    return max(0, int((perf_counter() - started) * 1000))


class AIEnhancementService:
    def mode(self) -> str:
        return "online" if self._is_real_mode() else "offline"

    def enhance_script(self, request: EnhancementRequest) -> EnhancementResult:
        started = perf_counter()
        profile_id = ENHANCEMENT_PROFILE_IDS[request.enhancement_type]
        system_prompt, user_prompt = render_prompt(
            profile_id,
            slots={
                "original_script": request.original_script,
                "intensity": format_intensity(request.intensity),
                "awkwardness_percent": format_intensity(request.intensity * 10),
            },
        )
        if self._is_real_mode():
            content = self._complete(profile_id, system_prompt=system_prompt, user_prompt=user_prompt)
            model = self._clean(settings.llm_model)
        else:
            content = self._fake_enhancement(request)
            model = OFFLINE_MODEL

        return EnhancementResult(
            content=content,
            model=model,
            processing_time_ms=_elapsed_ms(started),
            level_increase=int(math.floor(request.intensity * LEVEL_INCREASE_FACTOR)),
            mode=self.mode(),
        )

    def analyze_script(self, request: AnalysisRequest) -> AnalysisResult:
        system_prompt, user_prompt = render_prompt(
            ANALYSIS_PROFILE_ID,
            slots={
                "script": request.script,
                "template": request.template,
                "nathan_level": request.nathan_level,
                "enhancements": ", ".join(request.enhancements) or "None",
            },
        )
        if self._is_real_mode():
            raw_text = self._complete(ANALYSIS_PROFILE_ID, system_prompt=system_prompt, user_prompt=user_prompt)
            model = self._clean(settings.llm_model)
        else:
            raw_text = self._fake_analysis_text(request)
            model = OFFLINE_MODEL

        parsed = parse_analysis_response(raw_text)
        return AnalysisResult(
            **parsed.as_values(),
            missing_fields=parsed.missing_fields(),
            model=model,
            mode=self.mode(),
        )

    def generate_production_notes(self, script: str, enhancement_types: list[str]) -> list[str]:
        system_prompt, user_prompt = render_prompt(
            PRODUCTION_NOTES_PROFILE_ID,
            slots={"script": script, "enhancement_types": ", ".join(enhancement_types) or "None"},
        )
        if self._is_real_mode():
            raw_text = self._complete(
                PRODUCTION_NOTES_PROFILE_ID,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
            )
        else:
            raw_text = self._fake_production_notes_text(enhancement_types)
        return parse_production_notes(raw_text)

    def _complete(self, profile_id: str, *, system_prompt: str, user_prompt: str) -> str:
        profile = get_profile(profile_id)
        channel = self._resolve_channel()
        try:
            return asyncio.run(
                call_chat_completions_text(
                    api_key=channel.api_key,
                    base_url=channel.base_url,
                    path=channel.path,
                    model=channel.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=profile.temperature,
                    max_tokens=profile.max_tokens,
                    timeout_s=channel.timeout_s,
                    max_attempts=channel.max_attempts,
                )
            )
        except LLMCallError as exc:
            logger.error("LLM call failed profile=%s: %s", profile_id, exc)
            raise LLMUnavailableError(str(exc), {"profile_id": profile_id}) from exc

    def _resolve_channel(self) -> _LLMChannelConfig:
        return _LLMChannelConfig(
            api_key=self._clean(settings.llm_api_key),
            base_url=self._clean(settings.llm_base_url),
            path=CHAT_COMPLETIONS_PATH,
            model=self._clean(settings.llm_model),
            timeout_s=float(settings.llm_timeout_s),
            max_attempts=max(1, int(settings.llm_max_attempts)),
        )

    @staticmethod
    def _is_real_mode() -> bool:
        return bool(str(settings.llm_api_key or "").strip())

    @staticmethod
    def _clean(value: object) -> str:
        return str(value or "").strip()

    @staticmethod
    def _fake_enhancement(request: EnhancementRequest) -> str:
        intensity = format_intensity(request.intensity)
        line = _OFFLINE_ENHANCEMENT_LINES[request.enhancement_type].format(
            pause=f"{1.0 + request.intensity * 0.37:.1f}",
            intensity=intensity,
            percent=format_intensity(60 + request.intensity * 3),
        )
        header = f"[{request.enhancement_type.upper()} ENHANCEMENT - INTENSITY {intensity}/10]"
        body = request.original_script.strip()
        parts = [header, "", body, "", line]
        if request.context:
            parts.append(f"(Context noted for rehearsal: {' '.join(request.context.split())})")
        return "\n".join(parts)

    @staticmethod
    def _fake_analysis_text(request: AnalysisRequest) -> str:
        words = len(request.script.split())
        level = request.nathan_level
        boost = min(20, len(request.enhancements) * 4)

        def score(base: int, spread: int) -> int:
            return max(0, min(100, base + (words + spread) % 17 + boost + level // 10))

        suggestions = [
            "Add more specific timing for awkward pauses",
            "Include backup dialogue for when the first option fails",
            "Consider building a scale model of the location",
        ]
        if not request.enhancements:
            suggestions.append("Try at least one enhancement before the next rehearsal")
        return "\n".join(
            [
                f"AWKWARDNESS_SCORE: {score(50, 3)}",
                f"COMPLEXITY_RATING: {score(45, 5)}",
                f"OPTIMALITY_SCORE: {score(55, 7)}",
                "",
                f"DIALOGUE_QUALITY: {score(52, 11)}",
                f"PREPARATION_LEVEL: {score(40, 13)}",
                f"AWKWARDNESS_AUTHENTICITY: {score(58, 2)}",
                f"STATISTICAL_CREDIBILITY: {score(30, 9)}",
                "",
                f"NATHAN_OBSERVATION: I read all {words} words of this {request.template} script twice. "
                "It needs at least 47 more rehearsals before it is ready for a real conversation.",
                "",
                "IMPROVEMENT_SUGGESTIONS:",
                *[f"- {item}" for item in suggestions],
            ]
        )

    @staticmethod
    def _fake_production_notes_text(enhancement_types: list[str]) -> str:
        notes = list(DEFAULT_PRODUCTION_NOTES)
        if enhancement_types:
            notes[0] = f"Rehearse the {', '.join(enhancement_types)} beats in a 1:1 scale replica before filming"
        return "\n".join(f"- {item}" for item in notes)


_ai_service: AIEnhancementService | None = None


def get_ai_service() -> AIEnhancementService:
    global _ai_service
    if _ai_service is None:
        _ai_service = AIEnhancementService()
    return _ai_service
