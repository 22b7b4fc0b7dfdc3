"""
OpenAI chat-completion service.
"""

from typing import Sequence

from .base import ChatCompletionService
from ..http import ClientRegistry

OPENAI_CLIENT = "OpenAIClient"


class OpenAIChatCompletionService(ChatCompletionService):
    """Chat completions against the OpenAI API through the "OpenAIClient" client."""

    def __init__(
        self,
        clients: ClientRegistry,
        models: Sequence[str] = ("gpt-3.5-turbo", "gpt-4"),
        temperature: float | None = None,
    ):
        super().__init__(clients, models)
        self.temperature = temperature

    @property
    def provider_name(self) -> str:
        return "OpenAI"

    @property
    def client_name(self) -> str:
        return OPENAI_CLIENT

    def _completions_path(self, model: str) -> str:
        return "chat/completions"

    def _build_payload(self, messages: list[dict], model: str, stream: bool) -> dict:
        payload = {"model": model, "messages": messages, "stream": stream}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload
