from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from ..config.settings import DEFAULT_USER_AGENT
from ..config.urls import get_authorization_url, get_token_url
from ..core.domain.models import FetchRequest, RawResponse, RefreshedToken
from ..core.errors import OAuthError
from ..core.ports.transport_port import TransportPort
from ..infra.http_client import HttpxTransport
from ..infra.response_classifier import get_http_error
from ..infra.schemas import OAuthErrorPayload, TokenPayload
from ..shared.url import build

if TYPE_CHECKING:
    from .api import EnvatoClient

logger = logging.getLogger(__name__)


def _expiration_from(expires_in: int) -> datetime:
    # One second ahead of the server deadline
    return datetime.now(timezone.utc) + timedelta(seconds=expires_in) - timedelta(seconds=1)


class OAuth:
    """Helper for the authorization code flow and access token renewal.

    Example:
        oauth = OAuth(client_id="my-app", client_secret="secret", redirect_uri="https://example.com/cb")
        print(oauth.get_redirect_url())

        # After the user comes back with ?code=...
        client = await oauth.get_client(code)
        client.on("renew", lambda refreshed: store(refreshed.token))
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        user_agent: Optional[str] = None,
        transport: Optional[TransportPort] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.user_agent = user_agent
        self._owns_transport = transport is None
        self._transport: TransportPort = transport or HttpxTransport()

    def get_redirect_url(self) -> str:
        """Return the URL users must visit to authorize the application."""
        return build(get_authorization_url(), {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        })

    async def get_client(self, code: str, **client_options: Any) -> "EnvatoClient":
        """Exchange a single-use authorization code for a ready-to-use client.

        The client carries the access token, refresh token, expiration and this helper,
        so it renews its own token when it expires.

        Raises:
            OAuthError: If the code is invalid/expired or the API answers unexpectedly.
        """
        from .api import EnvatoClient

        payload = await self._request_token({
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        })
        if self.user_agent and "user_agent" not in client_options:
            client_options["user_agent"] = self.user_agent
        return EnvatoClient(
            payload.access_token,
            refresh_token=payload.refresh_token,
            expiration=_expiration_from(payload.expires_in),
            oauth=self,
            **client_options,
        )

    async def renew(self, client: "EnvatoClient") -> RefreshedToken:
        """Generate a new access token from the client's refresh token."""
        if not client.refresh_token:
            raise OAuthError("A refresh token is required to renew the access token")

        payload = await self._request_token({
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": client.refresh_token,
        }, renewing=True)
        logger.debug("Access token renewed via refresh token")
        return RefreshedToken(token=payload.access_token, expiration=_expiration_from(payload.expires_in))

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.aclose()

    async def _request_token(self, form: dict[str, str], *, renewing: bool = False) -> TokenPayload:
        request = FetchRequest(
            method="POST",
            url=get_token_url(),
            headers={"User-Agent": self.user_agent or DEFAULT_USER_AGENT},
            form=form,
        )
        raw = await self._transport.send(request)
        suffix = " when renewing token" if renewing else ""

        if raw.status_code != 200:
            raise self._error_from(raw, suffix)

        text = raw.content.decode("utf-8", errors="replace")
        try:
            return TokenPayload.model_validate_json(raw.content)
        except ValidationError as e:
            raise OAuthError(f"Unexpected response from API{suffix}: \n{text}") from e

    @staticmethod
    def _error_from(raw: RawResponse, suffix: str) -> OAuthError:
        body: Any = None
        try:
            body = json.loads(raw.content)
        except ValueError:
            pass
        http = get_http_error(raw.status_code, raw.reason, body)

        if isinstance(body, dict):
            details = OAuthErrorPayload.model_validate(body)
            if details.error == "invalid_grant":
                return OAuthError("The given code was invalid or expired", http=http)
            if details.error_description:
                return OAuthError(details.error_description, http=http)
        return OAuthError(f"Got unexpected status code ({raw.status_code}){suffix}", http=http)
