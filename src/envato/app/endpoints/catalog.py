from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ...core.domain.enums import MarketName
from ...shared import url
from ...shared.utils import scope

if TYPE_CHECKING:
    from ..api import EnvatoClient


class CatalogEndpoints:
    """Endpoints for browsing the marketplace catalog."""

    def __init__(self, client: "EnvatoClient") -> None:
        self._client = client

    async def get_collection(self, id: int, page: Optional[int] = None) -> dict[str, Any]:
        """Return details of, and items contained within, a public collection."""
        return await self._client.get(url.build("/v3/market/catalog/collection", {"id": id, "page": page}))

    async def get_item(self, id: int) -> dict[str, Any]:
        """Return all details of a particular item."""
        return await self._client.get(url.build("/v3/market/catalog/item", {"id": id}))

    async def get_item_version(self, id: int) -> dict[str, Any]:
        """Return the latest available version of a theme/plugin.

        This is the endpoint WordPress authors use to check whether an update is available.
        """
        return await self._client.get(url.build("/v3/market/catalog/item-version", {"id": id}))

    async def search_items(self, **options: Any) -> dict[str, Any]:
        """Search items on the marketplaces.

        Common options: term, site, category, tags, platform, price_min, price_max,
        rating_min, date, page (max 60), page_size (max 100), sort_by, sort_direction,
        username. Booleans are sent as "true"/"false" and None values are dropped.
        """
        return await self._client.get(url.build("/v1/discovery/search/search/item", options))

    async def search_comments(
        self,
        item_id: int | str,
        *,
        term: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        sort_by: Optional[str] = None,
    ) -> dict[str, Any]:
        """Search the comments on an item. sort_by is one of relevance, newest, oldest."""
        return await self._client.get(url.build("/v1/discovery/search/search/comment", {
            "item_id": item_id,
            "term": term,
            "page": page,
            "page_size": page_size,
            "sort_by": sort_by,
        }))

    async def get_popular_items(self, site: MarketName | str) -> dict[str, Any]:
        return scope("popular", await self._client.get(url.prepare("/v1/market/popular:%s.json", site)))

    async def get_categories(self, site: MarketName | str) -> list[dict[str, Any]]:
        return scope("categories", await self._client.get(url.prepare("/v1/market/categories:%s.json", site)))

    async def get_item_prices(self, id: int) -> list[dict[str, Any]]:
        """Return available licenses and prices for the item."""
        return scope("item-prices", await self._client.get(url.prepare("/v1/market/item-prices:%d.json", id)))

    async def get_new_files(self, site: MarketName | str, category: str) -> list[dict[str, Any]]:
        """New files recently uploaded to a category of a site."""
        return scope(
            "new-files",
            await self._client.get(url.prepare("/v1/market/new-files:%s,%s.json", site, category)),
        )

    async def get_features(self, site: MarketName | str) -> dict[str, Any]:
        return scope("features", await self._client.get(url.prepare("/v1/market/features:%s.json", site)))

    async def get_random_new_files(self, site: MarketName | str) -> list[dict[str, Any]]:
        # Despite the name the API returns these newest first
        return scope(
            "random-new-files",
            await self._client.get(url.prepare("/v1/market/random-new-files:%s.json", site)),
        )
