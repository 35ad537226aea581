from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...core.domain.enums import MarketName
from ...shared import url
from ...shared.utils import scope

if TYPE_CHECKING:
    from ..api import EnvatoClient


class StatsEndpoints:
    """General statistics about the marketplaces."""

    def __init__(self, client: "EnvatoClient") -> None:
        self._client = client

    async def get_total_users(self) -> int:
        data = await self._client.get(url.build("/v1/market/total-users.json"))
        return int(scope("total_users", scope("total-users", data)))

    async def get_total_items(self) -> int:
        data = await self._client.get(url.build("/v1/market/total-items.json"))
        return int(scope("total_items", scope("total-items", data)))

    async def get_files_per_category(self, site: MarketName | str) -> list[dict[str, Any]]:
        return scope(
            "number-of-files",
            await self._client.get(url.prepare("/v1/market/number-of-files:%s.json", site)),
        )
