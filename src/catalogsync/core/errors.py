"""HTTP-facing exception hierarchy rendered by the API layer."""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any


class CoreError(Exception):
    """Base exception carrying the JSON error body returned to callers."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        error: str = "Internal error",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.error = error
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable ``{error, message}`` body."""

        payload: dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class SyncFailedError(CoreError):
    """Raised when a sync run aborts before the index could be reconciled."""

    def __init__(
        self,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            error="Could not sync data",
            details=details,
        )


class ConflictError(CoreError):
    """Raised when a request conflicts with a run already in flight."""

    def __init__(
        self,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=HTTPStatus.CONFLICT,
            error="Sync already running",
            details=details,
        )
