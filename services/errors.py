from __future__ import annotations

from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    """Base for every error an operation reports back to the caller.

    ``status`` is the HTTP-like status code used by the request surface and
    ``body()`` the JSON-shaped error payload.
    """

    status: int = 500

    def __init__(self, message: str, *, details: Optional[List[Dict[str, Any]]] = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra

    def body(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            out["details"] = self.details
        out.update(self.extra)
        return out


class ValidationFailed(ServiceError):
    status = 400

    def __init__(self, errors) -> None:
        super().__init__(
            "Validation failed",
            details=[{"field": e.field, "message": e.message} for e in errors],
        )
        self.errors = list(errors)


class TransitionError(ServiceError):
    status = 400

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class Unauthorized(ServiceError):
    status = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class Forbidden(ServiceError):
    status = 403


class NotFound(ServiceError):
    status = 404


class Conflict(ServiceError):
    status = 409


class UpstreamFailure(ServiceError):
    """A collaborator (AI, OCR, storage) failed; the cause stays in the server log."""

    status = 500
