from __future__ import annotations

import pytest

from envato.core.errors import NotFoundError, ServerError
from envato.shared.utils import find, parse_retry_after, scope, token_preview


async def _raise(error):
    raise error


async def _value(value):
    return value


@pytest.mark.asyncio
async def test_find_returns_value():
    assert await find(_value({"id": 1})) == {"id": 1}


@pytest.mark.asyncio
async def test_find_turns_404_into_none():
    assert await find(_raise(NotFoundError())) is None


@pytest.mark.asyncio
async def test_find_propagates_other_errors():
    with pytest.raises(ServerError):
        await find(_raise(ServerError()))


def test_scope_unwraps_key():
    assert scope("popular", {"popular": {"items_last_week": []}}) == {"items_last_week": []}


def test_scope_rejects_non_objects():
    with pytest.raises(TypeError):
        scope("popular", [1, 2])


def test_scope_missing_key_raises_keyerror():
    with pytest.raises(KeyError):
        scope("popular", {})


@pytest.mark.parametrize(
    "value, expected",
    [
        ("30", 30),
        (" 12", 12),
        ("30.5", 30),
        ("0", 0),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("Wed, 21 Oct 2015 07:28:00 GMT", 0),
    ],
)
def test_parse_retry_after(value, expected):
    assert parse_retry_after(value) == expected


def test_token_preview():
    assert token_preview(None) == "<none>"
    assert token_preview("short") == "***"
    assert token_preview("abcdefghijkl") == "abcdefgh..."
