"""
Model picker: routes a requested model to the service that serves it.
"""

import logging
from typing import Sequence

from .base import ChatCompletionService
from ..exceptions import ModelNotFoundError

logger = logging.getLogger(__name__)


class ChatModelPickerService:
    """Select a chat-completion service by model name."""

    def __init__(self, services: Sequence[ChatCompletionService]):
        self.services = tuple(services)

    def pick(self, model: str) -> ChatCompletionService:
        """
        Return the first service that serves `model`.

        Raises:
            ModelNotFoundError: If no service serves the model
        """
        for service in self.services:
            if service.supports(model):
                logger.debug(f"Model {model} routed to {service.provider_name}")
                return service
        raise ModelNotFoundError(f"No service configured for model: {model}", model=model)

    def models(self) -> list[str]:
        """List every model served, in service order, without duplicates."""
        seen: dict[str, None] = {}
        for service in self.services:
            for model in service.models:
                seen.setdefault(model, None)
        return list(seen)
