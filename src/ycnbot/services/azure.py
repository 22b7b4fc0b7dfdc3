"""
Azure OpenAI chat-completion service.

Azure hosts each model behind a named deployment; the deployment name takes
the place of the model name and is part of the request path.
"""

from typing import Sequence
from urllib.parse import quote

from .base import ChatCompletionService
from ..http import ClientRegistry

AZURE_OPENAI_CLIENT = "AzureOpenAIClient"


class AzureChatCompletionService(ChatCompletionService):
    """Chat completions against Azure OpenAI through the "AzureOpenAIClient" client."""

    def __init__(
        self,
        clients: ClientRegistry,
        deployments: Sequence[str] = (),
        temperature: float | None = None,
    ):
        super().__init__(clients, deployments)
        self.temperature = temperature

    @property
    def provider_name(self) -> str:
        return "AzureOpenAI"

    @property
    def client_name(self) -> str:
        return AZURE_OPENAI_CLIENT

    def _completions_path(self, model: str) -> str:
        return f"openai/deployments/{quote(model, safe='')}/chat/completions"

    def _build_payload(self, messages: list[dict], model: str, stream: bool) -> dict:
        # The deployment selects the model; Azure ignores a "model" field.
        payload = {"messages": messages, "stream": stream}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload
