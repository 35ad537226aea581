from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..errors import HttpError


@dataclass(frozen=True)
class FetchRequest:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    form: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes = b""
    reason: str = ""


@dataclass(frozen=True)
class FetchResponse:
    status_code: int
    headers: Mapping[str, str]
    body: Any = None
    status_error: Optional[HttpError] = None

    @property
    def ok(self) -> bool:
        return self.status_error is None


@dataclass(frozen=True)
class RefreshedToken:
    token: str
    expiration: datetime


@dataclass(frozen=True)
class Identity:
    user_id: int
    scopes: tuple[str, ...] = field(default_factory=tuple)
    ttl: int = 0
    client_id: Optional[str] = None
