"""
Service Exceptions

Every error the API reports on purpose is a StatusCodeError. The handlers
registered in ``pizza_service.main`` turn them into ``{"message": ...}``
JSON bodies with the carried status code.
"""

from typing import Any, Optional

__all__ = [
    "StatusCodeError",
    "Unauthenticated",
    "Forbidden",
    "ValidationError",
    "NotFound",
    "DependencyFailure",
]


class StatusCodeError(Exception):
    """Base class for errors that map directly onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        # Additional top-level response fields, e.g. followLinkToEndChaos
        self.extra = {key: value for key, value in extra.items() if value is not None}

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, **self.extra}


class Unauthenticated(StatusCodeError):
    """Missing, malformed, revoked or invalid bearer token."""
    status_code = 401

    def __init__(self, message: str = "unauthorized", **extra: Any):
        super().__init__(message, **extra)


class Forbidden(StatusCodeError):
    """Authenticated, but the caller's roles do not allow the action."""
    status_code = 403


class ValidationError(StatusCodeError):
    """Request body or query is missing required or well-formed values."""
    status_code = 400


class NotFound(StatusCodeError):
    status_code = 404


class DependencyFailure(StatusCodeError):
    """The pizza factory or the data layer could not complete the request."""
    status_code = 500
