from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from dependency_injector import providers

from .container import Container
from .endpoints import CatalogEndpoints, PrivateEndpoints, StatsEndpoints, UserEndpoints
from ..config.settings import ClientSettings
from ..core.domain.models import FetchRequest, Identity
from ..core.events import EventEmitter, Listener
from ..core.ports.clock_port import ClockPort
from ..core.ports.transport_port import TransportPort
from ..core.queue import RequestQueue
from ..infra.response_classifier import classify
from ..infra.schemas import IdentityPayload
from ..shared.url import build, join
from ..shared.utils import parse_retry_after, token_preview

if TYPE_CHECKING:
    from .oauth import OAuth

logger = logging.getLogger(__name__)

Expiration = Union[datetime, int, float, None]


def _to_datetime(expiration: Expiration) -> Optional[datetime]:
    if expiration is None:
        return None
    if isinstance(expiration, datetime):
        return expiration if expiration.tzinfo else expiration.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(float(expiration), tz=timezone.utc)


class EnvatoClient:
    """Asynchronous client for the Envato Market API.

    Every request goes through a RequestQueue that caps concurrent requests and, when
    rate limited, pauses all requests until the limit ends and then retries the blocked
    ones transparently.

    Events (subscribe with ``on``):
        - "ratelimit": duration (ms) of a new rate limit window
        - "resume": the rate limit window ended
        - "renew": a RefreshedToken after automatic OAuth renewal
        - "debug": (error, response) after every HTTP call

    Example:
        # Personal token
        async with EnvatoClient("my-personal-token") as client:
            identity = await client.get_identity()
            item = await client.catalog.get_item(2833226)

        # Settings from ENVATO_* environment variables
        async with EnvatoClient() as client:
            sales = await client.private.get_sales()

        # Tune the queue
        async with EnvatoClient("token", concurrency=1, handle_rate_limits=False) as client:
            client.on("ratelimit", lambda ms: print(f"Paused for {ms} ms"))
            await client.get("/v1/market/total-items.json")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        settings: Optional[ClientSettings] = None,
        user_agent: Optional[str] = None,
        concurrency: Optional[int] = None,
        handle_rate_limits: Optional[bool] = None,
        refresh_token: Optional[str] = None,
        expiration: Expiration = None,
        oauth: Optional["OAuth"] = None,
        transport: Optional[TransportPort] = None,
        clock: Optional[ClockPort] = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Personal token or OAuth access token. If None, uses ENVATO_TOKEN.
            settings: Complete settings object. Keyword overrides below are applied on top.
            user_agent: Briefly describes your application (e.g. "License activation for my themes").
            concurrency: Maximum simultaneous requests (default 3). 0 executes every request immediately.
            handle_rate_limits: If True (default), rate limited requests are deferred and retried.
                                If False, they raise TooManyRequestsError.
            refresh_token: OAuth refresh token used to renew the access token automatically.
            expiration: When the access token expires, as a datetime or epoch seconds.
            oauth: OAuth helper with the credentials used to create the session. Required for renewal.
            transport: Custom transport (mainly for tests). The client does not close injected transports.
            clock: Custom clock for the queue's deferral windows.

        Raises:
            ValueError: If no token is provided either directly or through the environment.
        """
        overrides: dict[str, Any] = {}
        if token is not None:
            overrides["token"] = token
        if user_agent is not None:
            overrides["user_agent"] = user_agent
        if concurrency is not None:
            overrides["concurrency"] = concurrency
        if handle_rate_limits is not None:
            overrides["handle_rate_limits"] = handle_rate_limits

        if settings is None:
            settings = ClientSettings(**overrides)
        elif overrides:
            settings = settings.model_copy(update=overrides)

        if not settings.token:
            raise ValueError("A token is required. Pass it explicitly or set ENVATO_TOKEN.")

        self.settings = settings
        self._token: str = settings.token
        self._refresh_token = refresh_token
        self._expiration = _to_datetime(expiration)
        self._concurrency = settings.concurrency
        self._oauth = oauth

        self._container = Container()
        self._container.config.from_pydantic(settings)
        if clock is not None:
            self._container.clock.override(providers.Object(clock))
        self._owns_transport = transport is None
        if transport is not None:
            self._container.transport.override(providers.Object(transport))

        self._transport: TransportPort = self._container.transport()
        self._queue: RequestQueue = self._container.queue(concurrency=lambda: self._concurrency)
        self._events = EventEmitter()
        self._renew_lock = asyncio.Lock()

        # Forward queue events
        self._queue.on("ratelimit", lambda duration: self._events.emit("ratelimit", duration))
        self._queue.on("resume", lambda: self._events.emit("resume"))

        self.catalog = CatalogEndpoints(self)
        self.private = PrivateEndpoints(self)
        self.user = UserEndpoints(self)
        self.stats = StatsEndpoints(self)

        logger.debug(f"Client created (token={token_preview(self._token)}, concurrency={self._concurrency})")

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    @property
    def token(self) -> str:
        """The current access token, either an OAuth access token or a personal token."""
        return self._token

    @token.setter
    def token(self, token: str) -> None:
        self._token = token

    @property
    def refresh_token(self) -> Optional[str]:
        """The OAuth refresh token, or None if the session has none."""
        return self._refresh_token

    @refresh_token.setter
    def refresh_token(self, token: Optional[str]) -> None:
        self._refresh_token = token

    @property
    def expiration(self) -> Optional[datetime]:
        """When the current token expires (UTC), or None if unknown."""
        return self._expiration

    @expiration.setter
    def expiration(self, expiration: Expiration) -> None:
        self._expiration = _to_datetime(expiration)

    @property
    def expired(self) -> bool:
        """True once the expiration has passed. Always False without an expiration."""
        if self._expiration is None:
            return False
        return self._expiration < datetime.now(timezone.utc)

    @property
    def ttl(self) -> Optional[float]:
        """Seconds until the token expires (negative once expired), or None without an expiration."""
        if self._expiration is None:
            return None
        return (self._expiration - datetime.now(timezone.utc)).total_seconds()

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @concurrency.setter
    def concurrency(self, value: int) -> None:
        if value < 0:
            raise ValueError("concurrency must be >= 0")
        self._concurrency = value

    @property
    def handle_rate_limits(self) -> bool:
        return self.settings.handle_rate_limits

    @property
    def queue(self) -> RequestQueue:
        return self._queue

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> Listener:
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        return self._events.once(event, listener)

    def off(self, event: str, listener: Optional[Listener] = None) -> None:
        self._events.off(event, listener)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def get_identity(self) -> Identity:
        """Return the identity of the current token: account id, scopes and remaining ttl."""
        payload = IdentityPayload.model_validate(await self.get("/whoami"))
        return Identity(
            user_id=payload.user_id,
            scopes=tuple(payload.scopes),
            ttl=payload.ttl,
            client_id=payload.client_id,
        )

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Send a GET request to path (e.g. "/v3/market/catalog/item?id=1") and return the decoded body."""
        if params:
            path = build(path, params)
        return await self._fetch("GET", path)

    async def post(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Send a POST request with params as a form body."""
        return await self._fetch("POST", path, params)

    async def put(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self._fetch("PUT", path, params)

    async def patch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self._fetch("PATCH", path, params)

    async def delete(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self._fetch("DELETE", path, params)

    def uri(self, path: str) -> str:
        return join(self.settings.base_url, path)

    async def _fetch(self, method: str, path: str, form: Optional[Mapping[str, Any]] = None) -> Any:
        url = self.uri(path)

        async def executor(resolve, reject, retry) -> None:
            await self._renew_if_expired()

            request = FetchRequest(method=method, url=url, headers=self._headers(), form=form)
            try:
                raw = await self._transport.send(request)
            except Exception as e:
                self._events.emit("debug", e, None)
                raise

            response = classify(raw)
            self._events.emit("debug", None, response)

            if response.status_code == 429 and self.handle_rate_limits:
                retry_after = parse_retry_after(response.headers.get("retry-after"))
                logger.info(f"{method} {path} rate limited (retry-after={retry_after}s); rescheduling")
                # A missing or zero Retry-After falls back to the queue's default window
                retry(retry_after or None)
                return

            if response.status_error is not None:
                reject(response.status_error)
                return

            resolve(response.body)

        return await self._queue.push(executor)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "User-Agent": self.settings.user_agent,
        }

    async def _renew_if_expired(self) -> None:
        if not (self.expired and self._oauth is not None and self._refresh_token):
            return
        async with self._renew_lock:
            if not self.expired:
                return
            refreshed = await self._oauth.renew(self)
            self._token = refreshed.token
            self._expiration = _to_datetime(refreshed.expiration)
            logger.info(f"Access token renewed (expires at {self._expiration.isoformat()})")
            self._events.emit("renew", refreshed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP transport if the client created it.

        Example:
            client = EnvatoClient("token")
            try:
                await client.get_identity()
            finally:
                await client.aclose()
        """
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "EnvatoClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = [
    "EnvatoClient",
    "ClientSettings",
]
