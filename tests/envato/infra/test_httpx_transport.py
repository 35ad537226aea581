from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import pytest

from envato.config.settings import DEFAULT_USER_AGENT
from envato.core.domain.models import FetchRequest
from envato.infra.http_client import HttpxTransport, apply_user_agent


def _transport(handler) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client=client)


def test_apply_user_agent_adds_default():
    assert apply_user_agent({}) == {"User-Agent": DEFAULT_USER_AGENT}


def test_apply_user_agent_keeps_custom_value_case_insensitively():
    assert apply_user_agent({"user-agent": "My app"}) == {"user-agent": "My app"}


def test_apply_user_agent_replaces_empty_value():
    assert apply_user_agent({"User-Agent": ""}, "fallback") == {"User-Agent": "fallback"}


@pytest.mark.asyncio
async def test_send_get_returns_raw_response():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True}, headers={"X-Test": "1"})

    transport = _transport(handler)
    raw = await transport.send(FetchRequest("GET", "https://api.envato.com/whoami", {"Authorization": "Bearer t"}))
    await transport.aclose()

    assert raw.status_code == 200
    assert json.loads(raw.content) == {"ok": True}
    assert raw.headers["x-test"] == "1"
    assert raw.reason == "OK"
    assert seen[0].headers["Authorization"] == "Bearer t"
    assert seen[0].headers["User-Agent"] == DEFAULT_USER_AGENT


@pytest.mark.asyncio
async def test_send_form_is_url_encoded_without_none_values():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, content=b"")

    transport = _transport(handler)
    raw = await transport.send(
        FetchRequest("POST", "https://api.envato.com/token", {}, {"grant_type": "x", "skip": None, "flag": True})
    )
    await transport.aclose()

    assert raw.status_code == 201
    request = seen[0]
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert parse_qs(request.content.decode()) == {"grant_type": ["x"], "flag": ["true"]}


@pytest.mark.asyncio
async def test_send_propagates_network_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    transport = _transport(handler)
    with pytest.raises(httpx.ConnectError):
        await transport.send(FetchRequest("GET", "https://api.envato.com/whoami"))
    await transport.aclose()


def test_default_client_follows_redirects():
    transport = HttpxTransport()
    assert transport._client.follow_redirects is True
    assert transport._client.max_redirects == 10
