"""
Base chat-completion service.

Services issue OpenAI-compatible chat-completion requests through a named
client from the registry. Retries happen inside the named client; a service
only turns the final outcome into a result or a domain exception.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncGenerator, Sequence

import httpx

from ..exceptions import (
    ChatClientError,
    ModelNotFoundError,
    error_for_response,
    error_for_transport_failure,
)
from ..http import ClientRegistry

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """One chat turn as sent to the completions endpoint."""

    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)


class ChatCompletionService(ABC):
    """
    Abstract base class for chat-completion services.

    Subclasses name the registry client they use, the models they serve and
    the path of their completions endpoint.
    """

    def __init__(self, clients: ClientRegistry, models: Sequence[str]):
        """
        Initialize the service.

        Args:
            clients: Registry holding this service's named client
            models: Models (or deployments) this service can serve
        """
        self.clients = clients
        self.models = list(models)

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name for logging."""
        ...

    @property
    @abstractmethod
    def client_name(self) -> str:
        """Return the registry name of the client this service uses."""
        ...

    @abstractmethod
    def _completions_path(self, model: str) -> str:
        """Return the completions endpoint, relative to the client's base address."""
        ...

    @abstractmethod
    def _build_payload(self, messages: list[dict], model: str, stream: bool) -> dict:
        ...

    @property
    def default_model(self) -> str | None:
        return self.models[0] if self.models else None

    @property
    def client(self) -> httpx.AsyncClient:
        return self.clients.get_client(self.client_name)

    def supports(self, model: str) -> bool:
        """Check if this service serves the given model."""
        return model in self.models

    def _resolve_model(self, model: str | None) -> str:
        model = model or self.default_model
        if not model:
            raise ModelNotFoundError(
                "No model requested and no default configured",
                provider=self.provider_name,
            )
        return model

    def _payload(
        self, messages: Sequence[Message], model: str, stream: bool, max_tokens: int | None
    ) -> dict:
        payload = self._build_payload([m.to_dict() for m in messages], model, stream)
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    async def complete(
        self,
        messages: Sequence[Message],
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Generate a chat completion (non-streaming).

        Args:
            messages: The conversation so far
            model: Model to use (defaults to the first configured model)
            max_tokens: Upper bound on generated tokens, provider default if None

        Returns:
            The assistant message content

        Raises:
            ChatClientError: The final attempt failed, see `error_for_response`
                and `error_for_transport_failure`
        """
        model = self._resolve_model(model)
        payload = self._payload(messages, model, stream=False, max_tokens=max_tokens)

        try:
            response = await self.client.post(self._completions_path(model), json=payload)
        except httpx.TransportError as e:
            logger.error(f"[{self.provider_name}] Request failed: {e}")
            raise error_for_transport_failure(e, provider=self.provider_name) from e

        if response.status_code != 200:
            logger.warning(
                f"[{self.provider_name}] Completion failed with status {response.status_code}"
            )
            raise error_for_response(response, provider=self.provider_name, model=model)

        data = response.json()
        return data["choices"][0]["message"]["content"]

    async def complete_stream(
        self,
        messages: Sequence[Message],
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> AsyncGenerator[str, None]:
        """
        Generate a streaming chat completion.

        Yields:
            Content deltas as they arrive
        """
        model = self._resolve_model(model)
        payload = self._payload(messages, model, stream=True, max_tokens=max_tokens)

        logger.info(f"[{self.provider_name}] Starting stream with model: {model}")

        try:
            async with self.client.stream(
                "POST", self._completions_path(model), json=payload
            ) as response:
                if response.status_code != 200:
                    await response.aread()
                    logger.warning(
                        f"[{self.provider_name}] Stream failed with status {response.status_code}"
                    )
                    raise error_for_response(response, provider=self.provider_name, model=model)

                async for line in response.aiter_lines():
                    if not line.startswith("data: "):
                        continue
                    data_str = line[6:]
                    if data_str.strip() == "[DONE]":
                        return
                    try:
                        data = json.loads(data_str)
                    except json.JSONDecodeError:
                        continue
                    choices = data.get("choices") or []
                    if choices:
                        content = choices[0].get("delta", {}).get("content")
                        if content:
                            yield content
        except httpx.TransportError as e:
            logger.error(f"[{self.provider_name}] Stream failed: {e}")
            raise error_for_transport_failure(e, provider=self.provider_name) from e

    async def health_check(self) -> bool:
        """
        Check if the provider answers a one-token completion.

        Provider failures report False. Configuration errors, such as a client
        without a base address, propagate.
        """
        if not self.default_model:
            logger.warning(f"[{self.provider_name}] No models configured")
            return False
        try:
            await self.complete([Message.user("ping")], max_tokens=1)
            return True
        except ChatClientError as e:
            logger.debug(f"[{self.provider_name}] Health check failed: {e}")
            return False
