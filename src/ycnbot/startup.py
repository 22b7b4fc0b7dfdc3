"""
Application composition root.

Builds the named AI provider clients, the chat-completion services and the
model picker from settings, and returns them in an immutable `AppContext`
that is passed explicitly to whatever needs them.
"""

import logging
from dataclasses import dataclass

from .config import Settings
from .http import AzureOpenAIClientHandler, ClientRegistry, OpenAIClientHandler
from .http.registry import TransportFactory
from .retry import RetryPolicy
from .secret_store import SecretStoreFactory, preload_secrets
from .services import (
    AZURE_OPENAI_CLIENT,
    OPENAI_CLIENT,
    AzureChatCompletionService,
    ChatCompletionService,
    ChatModelPickerService,
    OpenAIChatCompletionService,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    """Everything the application needs to talk to the AI providers."""

    settings: Settings
    clients: ClientRegistry
    completion_services: tuple[ChatCompletionService, ...]
    model_picker: ChatModelPickerService

    async def aclose(self) -> None:
        await self.clients.aclose()


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def register_ai_clients(registry: ClientRegistry, settings: Settings) -> None:
    """Register the OpenAI and Azure OpenAI named clients."""
    registry.register(
        OPENAI_CLIENT,
        settings.openai_base_url,
        OpenAIClientHandler(settings.openai_api_key, settings.openai_organization),
        RetryPolicy.transient_http_errors(),
        timeout=settings.request_timeout,
    )
    registry.register(
        AZURE_OPENAI_CLIENT,
        settings.azure_openai_base_url,
        AzureOpenAIClientHandler(
            settings.azure_openai_api_key, settings.azure_openai_api_version
        ),
        RetryPolicy.transient_http_errors(),
        timeout=settings.request_timeout,
    )


def build_context(
    settings: Settings | None = None,
    *,
    store_factory: SecretStoreFactory | None = None,
    transport_factory: TransportFactory | None = None,
) -> AppContext:
    """
    Build the application context.

    Args:
        settings: Settings to use (default: loaded from the environment)
        store_factory: Builds the external secret store, used in production
            when a certificate thumbprint is configured (default: Azure Key Vault)
        transport_factory: Builds the network transport under each named
            client's retry transport

    Returns:
        The assembled, immutable application context
    """
    if settings is None:
        settings = Settings()

    settings = preload_secrets(settings, store_factory)

    registry = ClientRegistry(transport_factory)
    register_ai_clients(registry, settings)
    registry.freeze()

    # Azure first: a model deployed on both is served by the Azure deployment.
    services: tuple[ChatCompletionService, ...] = (
        AzureChatCompletionService(registry, settings.azure_openai_deployments),
        OpenAIChatCompletionService(registry, settings.openai_models),
    )

    logger.info(
        f"Application context ready ({settings.environment}): "
        f"clients={registry.names}"
    )

    return AppContext(
        settings=settings,
        clients=registry,
        completion_services=services,
        model_picker=ChatModelPickerService(services),
    )
