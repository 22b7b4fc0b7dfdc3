"""
Named HTTP client registry.

Each named client has its own base address, outgoing request handler and
retry policy. Clients are registered once at startup; the registry is then
frozen and handed to every component that issues outbound requests.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import httpx

from ..exceptions import (
    ClientNotRegisteredError,
    ClientRegistrationError,
    ConfigurationError,
    MissingBaseAddressError,
)
from ..retry import AsyncRetryTransport, RetryPolicy

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], httpx.AsyncBaseTransport]


@dataclass(frozen=True)
class NamedClientConfig:
    """Configuration of a single named client."""

    name: str
    base_url: str | None
    handler: httpx.Auth | None
    retry_policy: RetryPolicy
    timeout: float = 120.0


class ClientRegistry:
    """
    Registry of named outbound HTTP clients.

    Clients are built lazily on first use and shared by all callers of the
    same name. httpx clients are safe to use from concurrent tasks.
    """

    def __init__(self, transport_factory: TransportFactory | None = None):
        """
        Initialize an empty registry.

        Args:
            transport_factory: Builds the network transport wrapped by each
                client's retry transport (default: httpx.AsyncHTTPTransport)
        """
        self._transport_factory = transport_factory or httpx.AsyncHTTPTransport
        self._configs: dict[str, NamedClientConfig] = {}
        self._clients: dict[str, httpx.AsyncClient] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        base_url: str | None,
        handler: httpx.Auth | None,
        retry_policy: RetryPolicy,
        timeout: float = 120.0,
    ) -> NamedClientConfig:
        """
        Register a named client.

        Args:
            name: Unique client name
            base_url: Absolute base address, or None for no base address
            handler: Outgoing request handler (authentication)
            retry_policy: Retry policy applied to every request of this client
            timeout: Request timeout in seconds

        Returns:
            The stored client configuration
        """
        if self._frozen:
            raise ClientRegistrationError(
                f"Cannot register '{name}': client registry is frozen"
            )
        if name in self._configs:
            raise ClientRegistrationError(f"Client '{name}' is already registered")

        if base_url is not None:
            try:
                url = httpx.URL(base_url)
            except httpx.InvalidURL as e:
                raise ConfigurationError(
                    f"Invalid base address for client '{name}': {base_url!r}"
                ) from e
            if not url.is_absolute_url:
                raise ConfigurationError(
                    f"Base address for client '{name}' must be absolute, got {base_url!r}"
                )

        config = NamedClientConfig(
            name=name,
            base_url=base_url,
            handler=handler,
            retry_policy=retry_policy,
            timeout=timeout,
        )
        self._configs[name] = config
        logger.info(
            f"Registered HTTP client '{name}' "
            f"({base_url or 'no base address'}, "
            f"{retry_policy.max_retries} retries every {retry_policy.delay * 1000:.0f}ms)"
        )
        return config

    def freeze(self) -> None:
        """Close registration. Further `register` calls raise."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def names(self) -> list[str]:
        return list(self._configs)

    def get_config(self, name: str) -> NamedClientConfig:
        try:
            return self._configs[name]
        except KeyError:
            raise ClientNotRegisteredError(name) from None

    def get_client(self, name: str) -> httpx.AsyncClient:
        """Return the shared client registered under `name`."""
        client = self._clients.get(name)
        if client is None:
            client = self._build_client(self.get_config(name))
            self._clients[name] = client
        return client

    def _build_client(self, config: NamedClientConfig) -> httpx.AsyncClient:
        transport = AsyncRetryTransport(self._transport_factory(), config.retry_policy)
        event_hooks = {}
        if config.base_url is None:
            event_hooks["request"] = [_require_absolute_url(config.name)]
        return httpx.AsyncClient(
            base_url=config.base_url or "",
            auth=config.handler,
            timeout=config.timeout,
            transport=transport,
            event_hooks=event_hooks,
        )

    async def aclose(self) -> None:
        """Close every client created so far."""
        clients, self._clients = self._clients, {}
        for client in clients.values():
            await client.aclose()


def _require_absolute_url(client_name: str):
    async def hook(request: httpx.Request) -> None:
        if not request.url.is_absolute_url:
            raise MissingBaseAddressError(client_name, str(request.url))

    return hook
