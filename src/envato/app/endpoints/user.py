from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ...core.domain.enums import MarketName
from ...shared import url
from ...shared.utils import find, scope

if TYPE_CHECKING:
    from ..api import EnvatoClient


class UserEndpoints:
    """Endpoints for public details about users, plus the token owner's collections."""

    def __init__(self, client: "EnvatoClient") -> None:
        self._client = client

    async def get_collections(self) -> list[dict[str, Any]]:
        return scope("collections", await self._client.get(url.build("/v3/market/user/collections")))

    async def get_private_collection(self, id: int) -> Optional[dict[str, Any]]:
        """Return a private collection of the token owner, or None if it does not exist."""
        return await find(self._client.get(url.build("/v3/market/user/collection", {"id": id})))

    async def get_account_details(self, username: str) -> dict[str, Any]:
        return scope("user", await self._client.get(url.prepare("/v1/market/user:%s.json", username)))

    async def get_badges(self, username: str) -> list[dict[str, Any]]:
        return scope("user-badges", await self._client.get(url.prepare("/v1/market/user-badges:%s.json", username)))

    async def get_items_by_site(self, username: str) -> list[dict[str, Any]]:
        return scope(
            "user-items-by-site",
            await self._client.get(url.prepare("/v1/market/user-items-by-site:%s.json", username)),
        )

    async def get_new_items(self, username: str, site: MarketName | str) -> list[dict[str, Any]]:
        return scope(
            "new-files-from-user",
            await self._client.get(url.prepare("/v1/market/new-files-from-user:%s,%s.json", username, site)),
        )
