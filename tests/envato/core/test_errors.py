from __future__ import annotations

import pytest

from envato.core.errors import (
    AccessDeniedError,
    BadRequestError,
    EnvatoError,
    HttpError,
    NotFoundError,
    OAuthError,
    ServerError,
    TooManyRequestsError,
    UnauthorizedError,
)


@pytest.mark.parametrize(
    "error_cls, code, message",
    [
        (BadRequestError, 400, "Bad Request"),
        (UnauthorizedError, 401, "Unauthorized"),
        (AccessDeniedError, 403, "Access Denied"),
        (NotFoundError, 404, "Not Found"),
        (TooManyRequestsError, 429, "Too Many Requests"),
        (ServerError, 500, "Server Error"),
    ],
)
def test_status_errors_carry_code_and_message(error_cls, code, message):
    err = error_cls()
    assert isinstance(err, HttpError)
    assert isinstance(err, EnvatoError)
    assert err.code == code
    assert err.response is None
    assert str(err) == f"{message} ({code})"


def test_http_error_str_includes_description():
    err = NotFoundError({"error": "not_found", "description": "No sale belonging to the current user found"})
    assert str(err) == "Not Found (404): No sale belonging to the current user found"


def test_http_error_str_falls_back_to_error_field():
    err = AccessDeniedError({"error": "forbidden"})
    assert str(err) == "Access Denied (403): forbidden"
    assert err.response == {"error": "forbidden"}


def test_oauth_error_keeps_http_cause():
    http = BadRequestError({"error": "invalid_grant"})
    err = OAuthError("The given code was invalid or expired", http=http)
    assert err.http is http
    assert str(err) == "The given code was invalid or expired"
