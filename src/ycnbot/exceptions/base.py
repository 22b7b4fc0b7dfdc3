"""
Exception classes for chat-completion and client configuration errors.

A `ChatClientError` describes the final outcome of a chat-completion call,
after the named client has spent its retry budget: the response the
provider ended with, or the transport failure that ended the last attempt.
Configuration errors are raised while wiring the named clients, or when a
request cannot be routed at all.
"""

import httpx


class ChatClientError(Exception):
    """Base exception for all chat-completion errors."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        response: httpx.Response | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.response = response

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None

    def __str__(self) -> str:
        text = self.message
        if self.provider:
            text = f"[{self.provider}] {text}"
        if self.status_code:
            text = f"{text} (status: {self.status_code})"
        return text


class RateLimitError(ChatClientError):
    """The provider still answered 429 on the last allowed attempt."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ConnectionError(ChatClientError):
    """The last attempt failed at the transport level (refused, reset, dropped)."""

    def __init__(self, message: str = "Connection failed", **kwargs):
        super().__init__(message, **kwargs)


class TimeoutError(ChatClientError):
    """The last attempt timed out."""

    def __init__(self, message: str = "Request timed out", **kwargs):
        super().__init__(message, **kwargs)


class AuthenticationError(ChatClientError):
    """The provider rejected the credentials (401/403)."""

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, **kwargs)


class ModelNotFoundError(ChatClientError):
    """No provider serves the model, or the provider does not know it (404)."""

    def __init__(self, message: str = "Model not found", model: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.model = model


class InvalidRequestError(ChatClientError):
    """The provider rejected the request body (400/422)."""

    def __init__(self, message: str = "Invalid request", **kwargs):
        super().__init__(message, **kwargs)


class ServerError(ChatClientError):
    """The provider failed with a 5xx status."""

    def __init__(self, message: str = "Server error", **kwargs):
        super().__init__(message, **kwargs)


def _parse_retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def error_for_response(
    response: httpx.Response,
    *,
    provider: str,
    model: str | None = None,
) -> ChatClientError:
    """
    Build the exception describing a final non-success response.

    Args:
        response: The response the named client returned
        provider: Provider name for the message
        model: Model (or deployment) the request was for

    Returns:
        The matching `ChatClientError` subclass, or `ChatClientError` itself
        for statuses with no dedicated class
    """
    status = response.status_code
    if status in (401, 403):
        return AuthenticationError("Invalid API key", provider=provider, response=response)
    if status == 404:
        return ModelNotFoundError(
            f"Model not found: {model}", model=model, provider=provider, response=response
        )
    if status in (400, 422):
        return InvalidRequestError(
            f"Invalid request: {response.text}", provider=provider, response=response
        )
    if status == 429:
        return RateLimitError(
            retry_after=_parse_retry_after(response), provider=provider, response=response
        )
    if status >= 500:
        return ServerError(f"Server error: {response.text}", provider=provider, response=response)
    return ChatClientError(f"Unexpected response: {status}", provider=provider, response=response)


def error_for_transport_failure(exc: httpx.TransportError, *, provider: str) -> ChatClientError:
    """Build the exception describing a transport failure on the last attempt."""
    if isinstance(exc, httpx.TimeoutException):
        return TimeoutError(f"Request timed out: {exc}", provider=provider)
    return ConnectionError(f"Failed to reach {provider}: {exc}", provider=provider)


class ConfigurationError(Exception):
    """Raised when the application or a named client is misconfigured."""


class MissingBaseAddressError(ConfigurationError):
    """Raised when a relative URL is sent through a client with no base address."""

    def __init__(self, client_name: str, url: str):
        super().__init__(
            f"Client '{client_name}' has no base address configured; "
            f"cannot send relative URL '{url}'"
        )
        self.client_name = client_name
        self.url = url


class ClientRegistrationError(ConfigurationError):
    """Raised when a named client cannot be registered."""


class ClientNotRegisteredError(ConfigurationError):
    """Raised when a named client is requested that was never registered."""

    def __init__(self, name: str):
        super().__init__(f"No HTTP client registered under the name '{name}'")
        self.name = name
