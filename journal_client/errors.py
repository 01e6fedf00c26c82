"""Exception taxonomy for classified API failures."""

from __future__ import annotations

from typing import Any, Dict, Optional, Type


class ApiError(Exception):
    """A non-success response from the journal API."""

    def __init__(self, status_code: int, payload: Any = None, message: Optional[str] = None):
        self.status_code = status_code
        self.payload = payload
        self.message = message or _message_from(payload) or f"Request failed with status {status_code}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"


class UnauthorizedError(ApiError):
    """401: the credential is missing or no longer valid."""


class ForbiddenError(ApiError):
    """403: the account may not perform this action."""


class RateLimitedError(ApiError):
    """429 after every retry was used."""


class ServerError(ApiError):
    """5xx from the service."""


class ValidationError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class ClientError(ApiError):
    """Any other 4xx response."""


class EmptyNoteError(ValueError):
    """Raised when an explicit save is attempted on blank content."""


_STATUS_MAP: Dict[int, Type[ApiError]] = {
    400: ValidationError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitedError,
}


def error_for_status(status_code: int, payload: Any = None) -> ApiError:
    """Map a status code to the matching ApiError instance."""
    if 500 <= status_code < 600:
        return ServerError(status_code, payload)
    error_type = _STATUS_MAP.get(status_code, ClientError)
    return error_type(status_code, payload)


def _message_from(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return None
