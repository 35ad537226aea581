from __future__ import annotations

from typing import Protocol

from ..domain.models import FetchRequest, RawResponse


class TransportPort(Protocol):
    async def send(self, request: FetchRequest) -> RawResponse:
        """Perform one HTTP request.

        Low-level failures (DNS, connection reset, timeouts) propagate as raised exceptions.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
