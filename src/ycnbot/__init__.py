"""
YCNBot - AI provider clients.

Named OpenAI / Azure OpenAI HTTP clients with a transient-error retry policy,
the chat-completion services that use them, and the composition root.
"""

from .config import Settings
from .exceptions import (
    ChatClientError,
    RateLimitError,
    ConnectionError,
    TimeoutError,
    AuthenticationError,
    ModelNotFoundError,
    InvalidRequestError,
    ServerError,
    ConfigurationError,
    MissingBaseAddressError,
    ClientRegistrationError,
    ClientNotRegisteredError,
)
from .http import (
    AzureOpenAIClientHandler,
    ClientRegistry,
    NamedClientConfig,
    OpenAIClientHandler,
)
from .retry import AsyncRetryTransport, RetryPolicy, RetryTransport
from .services import (
    AzureChatCompletionService,
    ChatCompletionService,
    ChatModelPickerService,
    Message,
    OpenAIChatCompletionService,
    Role,
)
from .startup import AppContext, build_context, configure_logging

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    # Composition root
    "AppContext",
    "build_context",
    "configure_logging",
    # Named clients
    "ClientRegistry",
    "NamedClientConfig",
    "OpenAIClientHandler",
    "AzureOpenAIClientHandler",
    # Services
    "ChatCompletionService",
    "OpenAIChatCompletionService",
    "AzureChatCompletionService",
    "ChatModelPickerService",
    "Message",
    "Role",
    # Exceptions
    "ChatClientError",
    "RateLimitError",
    "ConnectionError",
    "TimeoutError",
    "AuthenticationError",
    "ModelNotFoundError",
    "InvalidRequestError",
    "ServerError",
    "ConfigurationError",
    "MissingBaseAddressError",
    "ClientRegistrationError",
    "ClientNotRegisteredError",
    # Retry
    "RetryPolicy",
    "RetryTransport",
    "AsyncRetryTransport",
]
