from __future__ import annotations

from typing import Any


class RehearsalError(Exception):
    """Application error carrying an HTTP status, a machine code and a user-facing note."""

    default_code = "INTERNAL_ERROR"
    default_status = 500

    def __init__(
        self,
        code: str | None = None,
        message: str = "",
        status_code: int | None = None,
        nathan_message: str | None = None,
        details: Any = None,
    ):
        self.code = str(code or self.default_code)
        self.message = str(message or self.code)
        self.status_code = int(status_code or self.default_status)
        self.nathan_message = str(nathan_message or self.message)
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RehearsalError):
    default_code = "VALIDATION_ERROR"
    default_status = 400

    def __init__(self, message: str, details: Any = None, *, code: str | None = None):
        super().__init__(
            code,
            message,
            nathan_message=f"Nathan requires proper input validation: {message}",
            details=details,
        )


class AuthenticationError(RehearsalError):
    default_code = "AUTHENTICATION_ERROR"
    default_status = 401

    def __init__(self, message: str = "Authentication failed", *, code: str | None = None):
        super().__init__(
            code,
            message,
            nathan_message=f"Nathan's security protocol detected unauthorized access: {message}",
        )


class AuthorizationError(RehearsalError):
    default_code = "AUTHORIZATION_ERROR"
    default_status = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            None,
            message,
            nathan_message=f"Nathan's access control system denied permission: {message}",
        )


class NotFoundError(RehearsalError):
    default_code = "NOT_FOUND"
    default_status = 404

    def __init__(self, resource: str = "Resource", *, code: str | None = None, nathan_message: str | None = None):
        self.resource = resource
        super().__init__(
            code,
            f"{resource} not found",
            nathan_message=nathan_message or f"Nathan's filing system couldn't locate: {resource}",
        )


class ConflictError(RehearsalError):
    default_code = "CONFLICT_ERROR"
    default_status = 409

    def __init__(self, message: str, details: Any = None, *, code: str | None = None):
        super().__init__(
            code,
            message,
            nathan_message=f"Nathan detected a conflict in the system: {message}",
            details=details,
        )


class RateLimitError(RehearsalError):
    default_code = "RATE_LIMIT_ERROR"
    default_status = 429

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(None, message, nathan_message=f"Nathan's rate limiting protocol activated: {message}")


class DatabaseError(RehearsalError):
    default_code = "DATABASE_ERROR"
    default_status = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(
            None,
            message,
            nathan_message=f"Nathan's database filing system encountered an error: {message}",
            details=details,
        )


class ExternalServiceError(RehearsalError):
    default_code = "EXTERNAL_SERVICE_ERROR"
    default_status = 502

    def __init__(self, service: str, message: str, details: Any = None):
        super().__init__(
            None,
            f"{service} service error: {message}",
            nathan_message=f"Nathan's integration with {service} failed: {message}",
            details=details,
        )


class ConfigurationError(RehearsalError):
    default_code = "CONFIGURATION_ERROR"
    default_status = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(
            None,
            message,
            nathan_message=f"Nathan's system configuration is incomplete: {message}",
            details=details,
        )


class AIServiceError(RehearsalError):
    default_code = "AI_SERVICE_ERROR"
    default_status = 503

    def __init__(self, message: str, details: Any = None):
        super().__init__(
            None,
            message,
            nathan_message=f"Nathan's AI enhancement system encountered an error: {message}",
            details=details,
        )


def error_message(exc: object) -> str:
    if isinstance(exc, BaseException):
        return str(exc) or exc.__class__.__name__
    if isinstance(exc, str):
        return exc
    return "Unknown error occurred"


def wrap(exc: BaseException, code: str = "UNKNOWN_ERROR") -> RehearsalError:
    if isinstance(exc, RehearsalError):
        return exc
    message = error_message(exc)
    return RehearsalError(
        code,
        message,
        500,
        f"Nathan encountered an unplanned scenario: {message}",
    )
