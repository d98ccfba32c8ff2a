"""Failure taxonomy for the game handler. Each error knows its HTTP status and response body."""

from __future__ import annotations

from typing import Any


class PongError(Exception):
    """Base class for errors surfaced to clients as `{success: false, error}`."""

    status_code = 500

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": str(self)}


class StoreUnavailable(PongError):
    """Redis could not be reached, refused our credentials, or dropped the connection."""

    status_code = 503

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or "Unknown Redis error"
        super().__init__("Redis connection unavailable")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["detail"] = self.detail
        return payload


class SessionNotFound(PongError):
    """The session expired or never existed."""

    status_code = 404

    def __init__(self, session_id: str | None) -> None:
        self.session_id = session_id
        super().__init__("Session not found")


class InvalidAction(PongError):
    status_code = 400

    def __init__(self, message: str = "Invalid action") -> None:
        super().__init__(message)


class UnhandledFailure(PongError):
    """Generic 500 body; the underlying exception is only logged."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__("Internal server error")
