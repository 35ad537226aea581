from __future__ import annotations

import json
from typing import Any, Optional

import httpx
from dateutil import parser as date_parser

from ..core.domain.models import FetchResponse, RawResponse
from ..core.errors import (
	AccessDeniedError,
	BadRequestError,
	ErrorResponse,
	HttpError,
	NotFoundError,
	ResponseDecodeError,
	ServerError,
	TooManyRequestsError,
	UnauthorizedError,
)

_ERRORS_BY_STATUS: dict[int, type[HttpError]] = {
	400: BadRequestError,
	401: UnauthorizedError,
	403: AccessDeniedError,
	404: NotFoundError,
	429: TooManyRequestsError,
	500: ServerError,
}

_DATE_KEYS = ("month", "date")


def _is_date_key(key: str) -> bool:
	return key.endswith("_at") or key.endswith("_until") or key.startswith("last_") or key in _DATE_KEYS


def _coerce_date(value: Any) -> Any:
	if not value or not isinstance(value, str):
		return value
	try:
		return date_parser.parse(value)
	except (ValueError, OverflowError):
		return value


def _coerce_dates(obj: dict[str, Any]) -> dict[str, Any]:
	for key, value in obj.items():
		if _is_date_key(key):
			obj[key] = _coerce_date(value)
	return obj


def decode_body(content: bytes) -> Any:
	"""Decode a JSON body, turning date-like fields into datetime objects.

	Fields ending in ``_at``/``_until``, starting with ``last_``, or named ``month``/``date``
	are parsed when their value is a non-empty string that reads as a date.
	Raises ValueError if content is not valid JSON.
	"""
	return json.loads(content, object_hook=_coerce_dates)


def get_http_error(status_code: int, reason: str, body: Any) -> Optional[HttpError]:
	if 200 <= status_code < 300:
		return None
	response: Optional[ErrorResponse] = body if isinstance(body, dict) else None
	error_cls = _ERRORS_BY_STATUS.get(status_code)
	if error_cls is not None:
		return error_cls(response)
	return HttpError(reason or "Unknown error", status_code, response)


def classify(raw: RawResponse) -> FetchResponse:
	"""Turn a raw transport response into a decoded, classified FetchResponse.

	Headers are wrapped for case-insensitive lookup.
	"""
	body: Any = None
	if raw.content.strip():
		try:
			body = decode_body(raw.content)
		except ValueError as e:
			if 200 <= raw.status_code < 300:
				raise ResponseDecodeError(f"Error parsing OK response: {e}") from e
			body = None

	return FetchResponse(
		status_code=raw.status_code,
		headers=httpx.Headers(raw.headers),
		body=body,
		status_error=get_http_error(raw.status_code, raw.reason, body),
	)
