from __future__ import annotations

from rehearsal.utils.errors import AIServiceError


class LLMUnavailableError(AIServiceError):
    """Raised when model output cannot be obtained."""

    def __init__(self, message: str, details: object = None):
        super().__init__(message, details)
        self.code = "LLM_UNAVAILABLE"
