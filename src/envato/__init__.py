"""envato package: app/core/infra/shared.

Expose the asynchronous API client, OAuth helper and error types at the package level.
"""

from .app.api import ClientSettings, EnvatoClient
from .app.oauth import OAuth
from .core.domain.enums import MarketDomain, MarketName
from .core.domain.models import Identity, RefreshedToken
from .core.errors import (
    AccessDeniedError,
    BadRequestError,
    EnvatoError,
    ExecutorTimeoutError,
    HttpError,
    NotFoundError,
    OAuthError,
    ResponseDecodeError,
    ServerError,
    TooManyRequestsError,
    UnauthorizedError,
)
from .core.queue import RequestQueue

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "EnvatoClient",
    "ClientSettings",
    "OAuth",
    "RequestQueue",
    "Identity",
    "RefreshedToken",
    "MarketName",
    "MarketDomain",
    "EnvatoError",
    "HttpError",
    "BadRequestError",
    "UnauthorizedError",
    "AccessDeniedError",
    "NotFoundError",
    "TooManyRequestsError",
    "ServerError",
    "OAuthError",
    "ResponseDecodeError",
    "ExecutorTimeoutError",
]
