from __future__ import annotations

from typing import Any, Optional


ErrorResponse = dict[str, Any]


class EnvatoError(Exception):
    """Base class for all errors raised by this package."""


class HttpError(EnvatoError):
    """Raised when the API answers with an abnormal status code."""

    def __init__(self, message: str, code: int, response: Optional[ErrorResponse] = None) -> None:
        super().__init__(message)
        self.code = code
        self.response = response

    def __str__(self) -> str:
        detail = ""
        if self.response:
            detail = self.response.get("description") or self.response.get("error") or ""
        base = f"{self.args[0]} ({self.code})"
        return f"{base}: {detail}" if detail else base


class BadRequestError(HttpError):
    """A parameter or argument is invalid."""

    def __init__(self, response: Optional[ErrorResponse] = None) -> None:
        super().__init__("Bad Request", 400, response)


class UnauthorizedError(HttpError):
    """The bearer token is malformed or missing."""

    def __init__(self, response: Optional[ErrorResponse] = None) -> None:
        super().__init__("Unauthorized", 401, response)


class AccessDeniedError(HttpError):
    """The token is invalid, expired, or lacks the permission for the request."""

    def __init__(self, response: Optional[ErrorResponse] = None) -> None:
        super().__init__("Access Denied", 403, response)


class NotFoundError(HttpError):
    """The requested resource or endpoint does not exist.

    Lookup endpoints such as "sale by code" catch this and return None instead.
    """

    def __init__(self, response: Optional[ErrorResponse] = None) -> None:
        super().__init__("Not Found", 404, response)


class TooManyRequestsError(HttpError):
    """Rate limited. Only surfaces when automatic rate limit handling is disabled."""

    def __init__(self, response: Optional[ErrorResponse] = None) -> None:
        super().__init__("Too Many Requests", 429, response)


class ServerError(HttpError):
    """The API failed internally, usually an outage or maintenance."""

    def __init__(self, response: Optional[ErrorResponse] = None) -> None:
        super().__init__("Server Error", 500, response)


class OAuthError(EnvatoError):
    """Raised when generating or renewing a token through OAuth fails."""

    def __init__(self, message: str, http: Optional[HttpError] = None) -> None:
        super().__init__(message)
        self.http = http


class ResponseDecodeError(EnvatoError):
    """A successful response carried a body that is not valid JSON."""


class ExecutorTimeoutError(EnvatoError):
    """A queued executor returned without resolving, rejecting or retrying in time."""


__all__ = [
    "ErrorResponse",
    "EnvatoError",
    "HttpError",
    "BadRequestError",
    "UnauthorizedError",
    "AccessDeniedError",
    "NotFoundError",
    "TooManyRequestsError",
    "ServerError",
    "OAuthError",
    "ResponseDecodeError",
    "ExecutorTimeoutError",
]
