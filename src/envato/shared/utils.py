from __future__ import annotations

import re
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from ..core.errors import HttpError

T = TypeVar("T")

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


async def find(awaitable: Awaitable[T]) -> Optional[T]:
    """Await a lookup and return None instead of raising on 404.

    All other errors propagate unchanged.
    """
    try:
        return await awaitable
    except HttpError as e:
        if e.code == 404:
            return None
        raise


def scope(key: str, data: Any) -> Any:
    """Unwrap the single top-level key most v1 endpoints nest their payload under."""
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a JSON object to unwrap '{key}', got {type(data).__name__}")
    return data[key]


def parse_retry_after(value: Optional[str]) -> int:
    """Parse a Retry-After header as whole seconds; 0 when missing or unparseable.

    Only leading digits count, so "30" and "30.5" both give 30.
    """
    if value is None:
        return 0
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else 0


def token_preview(token: Optional[str]) -> str:
    if not token:
        return "<none>"
    return f"{token[:8]}..." if len(token) > 8 else "***"
