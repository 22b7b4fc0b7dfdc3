"""
YCNBot - Named HTTP Clients.

Registry of named outbound clients and the provider authentication handlers.
"""

from .handlers import AzureOpenAIClientHandler, OpenAIClientHandler
from .registry import ClientRegistry, NamedClientConfig

__all__ = [
    "AzureOpenAIClientHandler",
    "OpenAIClientHandler",
    "ClientRegistry",
    "NamedClientConfig",
]
