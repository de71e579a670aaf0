"""Domain error taxonomy.

Services raise these; the handlers in ``golong.middleware.error_handler``
turn them into ``{"error": ...}`` JSON responses with the matching status.
"""

from __future__ import annotations

from typing import Any


class GoLongError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, **extra: Any) -> None:  # noqa: ANN401
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationFailed(GoLongError):
    status_code = 400


class Unauthorized(GoLongError):
    status_code = 401


class Forbidden(GoLongError):
    status_code = 403


class NotFound(GoLongError):
    status_code = 404


class Conflict(GoLongError):
    status_code = 409


class OperationFailed(GoLongError):
    """A multi-step write failed part-way; the message names the failed step."""

    status_code = 500
