from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ...shared import url
from ...shared.utils import find, scope

if TYPE_CHECKING:
    from ..api import EnvatoClient


class PrivateEndpoints:
    """Endpoints for private details about the token's user (author and buyer data).

    These require a token with the matching permissions.
    """

    def __init__(self, client: "EnvatoClient") -> None:
        self._client = client

    async def get_sales(self, page: Optional[int] = None) -> list[dict[str, Any]]:
        """List the author's sales, newest first."""
        return await self._client.get(url.build("/v3/market/author/sales", {"page": page}))

    async def get_sale(self, code: str) -> Optional[dict[str, Any]]:
        """Look up a sale by purchase code. Returns None when the code is unknown."""
        return await find(self._client.get(url.build("/v3/market/author/sale", {"code": code})))

    async def get_purchases(
        self,
        *,
        filter_by: Optional[str] = None,
        page: Optional[int] = None,
        include_all_item_details: Optional[bool] = None,
    ) -> dict[str, Any]:
        """List the buyer's purchases. filter_by is wordpress-themes or wordpress-plugins."""
        return await self._client.get(url.build("/v3/market/buyer/list-purchases", {
            "filter_by": filter_by,
            "page": page,
            "include_all_item_details": include_all_item_details,
        }))

    async def get_purchases_from_app_creator(self, page: Optional[int] = None) -> dict[str, Any]:
        return await self._client.get(url.build("/v3/market/buyer/purchases", {"page": page}))

    async def get_purchase(self, code: str) -> Optional[dict[str, Any]]:
        """Look up one of the buyer's purchases by code. Returns None when not found."""
        return await find(self._client.get(url.build("/v3/market/buyer/purchase", {"code": code})))

    async def get_account_details(self) -> dict[str, Any]:
        return scope("account", await self._client.get(url.build("/v1/market/private/user/account.json")))

    async def get_username(self) -> str:
        return scope("username", await self._client.get(url.build("/v1/market/private/user/username.json")))

    async def get_email(self) -> str:
        return scope("email", await self._client.get(url.build("/v1/market/private/user/email.json")))

    async def get_monthly_sales(self) -> list[dict[str, Any]]:
        return scope(
            "earnings-and-sales-by-month",
            await self._client.get(url.build("/v1/market/private/user/earnings-and-sales-by-month.json")),
        )

    async def get_statement(
        self,
        *,
        page: Optional[int] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        type: Optional[str] = None,
        site: Optional[str] = None,
    ) -> dict[str, Any]:
        """Return the user's statement. Dates use the YYYY-MM-DD format."""
        return await self._client.get(url.build("/v3/market/user/statement", {
            "page": page,
            "from_date": from_date,
            "to_date": to_date,
            "type": type,
            "site": site,
        }))

    async def get_download_link(
        self,
        *,
        item_id: Optional[int] = None,
        purchase_code: Optional[str] = None,
        shorten_url: Optional[bool] = None,
    ) -> str:
        return scope("download_url", await self._client.get(url.build("/v3/market/buyer/download", {
            "item_id": item_id,
            "purchase_code": purchase_code,
            "shorten_url": shorten_url,
        })))
