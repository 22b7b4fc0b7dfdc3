"""
YCNBot - Exception Hierarchy.

Chat-completion outcome errors and configuration errors.
"""

from .base import (
    ChatClientError,
    RateLimitError,
    ConnectionError,
    TimeoutError,
    AuthenticationError,
    ModelNotFoundError,
    InvalidRequestError,
    ServerError,
    error_for_response,
    error_for_transport_failure,
    ConfigurationError,
    MissingBaseAddressError,
    ClientRegistrationError,
    ClientNotRegisteredError,
)

__all__ = [
    "ChatClientError",
    "RateLimitError",
    "ConnectionError",
    "TimeoutError",
    "AuthenticationError",
    "ModelNotFoundError",
    "InvalidRequestError",
    "ServerError",
    "error_for_response",
    "error_for_transport_failure",
    "ConfigurationError",
    "MissingBaseAddressError",
    "ClientRegistrationError",
    "ClientNotRegisteredError",
]
