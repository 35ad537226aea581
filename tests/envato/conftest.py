"""tests/envato/conftest.py

Common fixtures for the entire test suite.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Callable, Mapping, Optional

import pytest
from typer.testing import CliRunner

from envato.core.domain.models import FetchRequest, RawResponse


class FakeClock:
    """Manually advanced clock. Sleepers wake only when advance() passes their deadline."""

    def __init__(self, start: float = 1000.0) -> None:
        self._now = start
        self._waiters: list[tuple[float, asyncio.Future[None]]] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append((self._now + seconds, fut))
        await fut

    @property
    def sleepers(self) -> int:
        return len(self._waiters)

    async def advance(self, seconds: float) -> None:
        """Move time forward and wake due sleepers in deadline order (ties in arrival order)."""
        self._now += seconds
        for entry in sorted(self._waiters, key=lambda waiter: waiter[0]):
            deadline, fut = entry
            if deadline <= self._now:
                self._waiters.remove(entry)
                if not fut.done():
                    fut.set_result(None)
        await drain()


async def drain(turns: int = 20) -> None:
    """Let every ready task run until the loop goes quiet."""
    for _ in range(turns):
        await asyncio.sleep(0)


def make_response(
    status_code: int = 200,
    payload: Any = None,
    headers: Optional[Mapping[str, str]] = None,
    content: Optional[bytes] = None,
) -> RawResponse:
    if content is None:
        content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    return RawResponse(status_code=status_code, headers=dict(headers or {}), content=content)


class StubTransport:
    """Transport that answers from a handler and records every request."""

    def __init__(self, handler: Callable[[FetchRequest], Any]) -> None:
        self.handler = handler
        self.requests: list[FetchRequest] = []
        self.closed = False

    async def send(self, request: FetchRequest) -> RawResponse:
        self.requests.append(request)
        result = self.handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ENVATO_* variables from the developer's shell out of the tests."""
    import os

    for name in list(os.environ):
        if name.startswith("ENVATO_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def respond():
    return make_response


@pytest.fixture
def stub_transport():
    """Factory: build a StubTransport from a handler or a list of responses served in order."""

    def _factory(handler_or_responses) -> StubTransport:
        if callable(handler_or_responses):
            return StubTransport(handler_or_responses)
        responses = list(handler_or_responses)

        def _next(_: FetchRequest) -> RawResponse:
            return responses.pop(0)

        return StubTransport(_next)

    return _factory


@pytest.fixture
def settle():
    """Awaitable helper that lets queued tasks run."""
    return drain
