"""Custom exceptions for centralized error handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFoundError(AppError):
    """Resource not found."""

    def __init__(self, message: str = "Not found", details: Any | None = None) -> None:
        super().__init__(code="not_found", message=message, status_code=404, details=details)


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", details: Any | None = None) -> None:
        super().__init__(code="validation_error", message=message, status_code=400, details=details)


class ConflictError(AppError):
    """Conflict (e.g., unique constraint)."""

    def __init__(self, message: str = "Conflict", details: Any | None = None) -> None:
        super().__init__(code="conflict", message=message, status_code=409, details=details)


class InvalidCountError(AppError):
    """Winner count is not a positive integer."""

    def __init__(self, message: str = "Winner count must be a positive integer", details: Any | None = None) -> None:
        super().__init__(code="invalid_count", message=message, status_code=400, details=details)


class InsufficientPoolError(AppError):
    """Fewer eligible participants than requested winners."""

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            code="insufficient_pool",
            message=f"Not enough eligible participants ({available}) for {requested} winners ({available} < {requested})",
            status_code=409,
            details={"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class DrawInProgressError(AppError):
    """A draw session is already running."""

    def __init__(self, message: str = "A draw is already in progress", details: Any | None = None) -> None:
        super().__init__(code="draw_in_progress", message=message, status_code=409, details=details)


class NoActiveDrawError(AppError):
    """Nothing to cancel."""

    def __init__(self, message: str = "No draw is waiting to be revealed", details: Any | None = None) -> None:
        super().__init__(code="no_active_draw", message=message, status_code=409, details=details)


class PersistenceFailureError(AppError):
    """Winner state could not be written; nothing was committed."""

    def __init__(self, message: str = "Failed to persist draw results", details: Any | None = None) -> None:
        super().__init__(code="persistence_failure", message=message, status_code=500, details=details)
