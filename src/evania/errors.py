"""Domain error taxonomy.

Every rejection carries a machine-readable ``kind`` and a human-readable
message. ``setup_error_handlers`` renders them as JSON.
"""

from __future__ import annotations

from typing import Any


class EvaniaError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: str = "INTERNAL"
    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:  # noqa: ANN401
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.kind, **self.context}


class InvalidInputError(EvaniaError, ValueError):
    """Missing or malformed identifiers or fields. Not retryable as-is."""

    kind = "INVALID_INPUT"
    status_code = 400


class NotFoundError(EvaniaError):
    """Referenced entity does not exist or is not owned by the caller."""

    kind = "NOT_FOUND"
    status_code = 404


class RateLimitedError(EvaniaError):
    """Quest cooldown is active; retry after ``retry_after_seconds``."""

    kind = "RATE_LIMITED"
    status_code = 429

    def __init__(self, message: str, retry_after_seconds: int) -> None:
        super().__init__(message, retry_after_seconds=retry_after_seconds)
        self.retry_after_seconds = retry_after_seconds


class LimitReachedError(EvaniaError):
    """Routine daily target already met for the current local date."""

    kind = "LIMIT_REACHED"
    status_code = 400


class ConflictError(EvaniaError):
    """Duplicate unique identity (e.g. an email that is already registered)."""

    kind = "CONFLICT"
    status_code = 409


class UnauthorizedError(EvaniaError):
    """Identity could not be resolved or credentials are wrong."""

    kind = "UNAUTHORIZED"
    status_code = 401


class StorageUnavailableError(EvaniaError):
    """The atomic write failed and was rolled back. Transient."""

    kind = "STORAGE_UNAVAILABLE"
    status_code = 503
