from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .urls import API_BASE_URL

DEFAULT_USER_AGENT = "Envato.py (https://pypi.org/project/envato-client/)"


class ClientSettings(BaseSettings):
    """Client configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the ENVATO_ prefix.
    For example:
        - ENVATO_TOKEN=xxxx
        - ENVATO_CONCURRENCY=5
        - ENVATO_HANDLE_RATE_LIMITS=false

    Alternatively, settings can be passed programmatically:
        client = EnvatoClient(settings=ClientSettings(token="xxxx", concurrency=1))
    """

    model_config = SettingsConfigDict(
        env_prefix="ENVATO_",
        case_sensitive=False,
        extra="forbid",
    )

    token: Optional[str] = Field(
        default=None,
        description="Personal token or OAuth access token sent as the bearer credential",
    )

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User agent briefly describing the application (e.g. 'License activation for my themes')",
    )

    concurrency: int = Field(
        default=3,
        ge=0,
        description="Maximum simultaneous requests. 0 disables throttling and executes requests immediately",
    )

    handle_rate_limits: bool = Field(
        default=True,
        description="Retry rate limited requests after the limit ends instead of raising TooManyRequestsError",
    )

    base_url: str = Field(
        default=API_BASE_URL,
        description="Root URL of the marketplace API",
    )

    timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-request HTTP timeout in seconds",
    )

    default_retry_after_seconds: float = Field(
        default=65.0,
        ge=0,
        description="Deferral window used when a rate limit response carries no usable Retry-After",
    )

    settle_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Reject queued work that returns without settling after this many seconds. None disables it",
    )
