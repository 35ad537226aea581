from __future__ import annotations

from datetime import datetime

import pytest

from envato.core.domain.models import RawResponse
from envato.core.errors import (
	HttpError,
	NotFoundError,
	ResponseDecodeError,
	ServerError,
	TooManyRequestsError,
)
from envato.infra.response_classifier import classify, decode_body, get_http_error


def test_classify_ok_decodes_json_body():
	resp = classify(RawResponse(200, {"Content-Type": "application/json"}, b'{"id": 1, "name": "Item"}'))
	assert resp.ok
	assert resp.status_code == 200
	assert resp.body == {"id": 1, "name": "Item"}
	assert resp.status_error is None


def test_classify_empty_success_body_is_none():
	resp = classify(RawResponse(204, {}, b""))
	assert resp.ok
	assert resp.body is None


def test_classify_invalid_json_on_success_raises():
	with pytest.raises(ResponseDecodeError):
		classify(RawResponse(200, {}, b"<html>oops</html>"))


def test_classify_error_status_maps_to_error_class():
	resp = classify(RawResponse(404, {}, b'{"error": "not found", "description": "No such sale"}'))
	assert not resp.ok
	assert isinstance(resp.status_error, NotFoundError)
	assert resp.status_error.response == {"error": "not found", "description": "No such sale"}


def test_classify_error_status_with_unparseable_body():
	resp = classify(RawResponse(500, {}, b"Internal Server Error"))
	assert isinstance(resp.status_error, ServerError)
	assert resp.body is None
	assert resp.status_error.response is None


def test_classify_headers_are_case_insensitive():
	resp = classify(RawResponse(429, {"Retry-After": "30"}, b"{}"))
	assert isinstance(resp.status_error, TooManyRequestsError)
	assert resp.headers.get("retry-after") == "30"


def test_unknown_error_status_uses_reason_phrase():
	err = get_http_error(418, "I'm a teapot", None)
	assert type(err) is HttpError
	assert err.code == 418
	assert str(err) == "I'm a teapot (418)"


def test_success_range_has_no_error():
	assert get_http_error(200, "OK", {}) is None
	assert get_http_error(201, "Created", {}) is None


def test_decode_body_coerces_date_fields():
	body = decode_body(
		b'{"sold_at": "2024-01-02T03:04:05+10:00", "supported_until": "2024-07-01T00:00:00+10:00",'
		b' "last_update": "2023-12-01", "month": "2024-01-01", "name": "2024-01-01"}'
	)
	assert isinstance(body["sold_at"], datetime)
	assert body["sold_at"].year == 2024
	assert isinstance(body["supported_until"], datetime)
	assert isinstance(body["last_update"], datetime)
	assert isinstance(body["month"], datetime)
	assert body["name"] == "2024-01-01"


def test_decode_body_leaves_unparseable_or_empty_dates():
	body = decode_body(b'{"updated_at": "not a date", "created_at": "", "date": null, "last_id": 5}')
	assert body == {"updated_at": "not a date", "created_at": "", "date": None, "last_id": 5}


def test_decode_body_coerces_nested_objects():
	body = decode_body(b'{"matches": [{"published_at": "2020-05-05"}]}')
	assert isinstance(body["matches"][0]["published_at"], datetime)
