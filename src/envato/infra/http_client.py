from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from ..config.settings import DEFAULT_USER_AGENT
from ..core.domain.models import FetchRequest, RawResponse
from ..shared.url import clean_params

logger = logging.getLogger(__name__)


def apply_user_agent(headers: Mapping[str, str], default: str = DEFAULT_USER_AGENT) -> dict[str, str]:
    """Return a copy of headers that carries a non-empty User-Agent."""
    result = dict(headers)
    for name in list(result):
        if name.lower() == "user-agent":
            if not result[name]:
                result[name] = default
            return result
    result["User-Agent"] = default
    return result


class HttpxTransport:
    def __init__(
        self,
        timeout_seconds: float = 20.0,
        base_headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers=dict(base_headers or {}),
            follow_redirects=True,
            max_redirects=10,
        )

    async def send(self, request: FetchRequest) -> RawResponse:
        headers = apply_user_agent(request.headers)
        data: Optional[dict[str, Any]] = None
        if request.form is not None:
            data = clean_params(request.form)
            headers["Content-Type"] = "application/x-www-form-urlencoded"

        logger.debug(f"{request.method} {request.url}")
        resp = await self._client.request(request.method, request.url, headers=headers, data=data)
        logger.debug(f"{request.method} {request.url} -> {resp.status_code}")
        return RawResponse(
            status_code=resp.status_code,
            headers=resp.headers,
            content=resp.content,
            reason=resp.reason_phrase,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
