from __future__ import annotations

from dependency_injector import containers, providers

from ..config.settings import ClientSettings
from ..core.ports.clock_port import SystemClock
from ..core.queue import RequestQueue
from ..infra.http_client import HttpxTransport


class Container(containers.DeclarativeContainer):
	config = providers.Configuration(pydantic_settings=[ClientSettings()])

	clock = providers.Singleton(SystemClock)

	# Closed explicitly by the owning client (EnvatoClient.aclose)
	transport = providers.Singleton(
		HttpxTransport,
		timeout_seconds=config.timeout_seconds,
	)

	# The owning client passes concurrency as a callable so changes apply on the next admission
	queue = providers.Factory(
		RequestQueue,
		clock=clock,
		default_retry_after=config.default_retry_after_seconds,
		settle_timeout=config.settle_timeout,
	)
