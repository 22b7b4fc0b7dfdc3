"""
YCNBot - Chat Completion Services.

Provider services issuing chat completions through the named clients.
"""

from .base import ChatCompletionService, Message, Role
from .azure import AZURE_OPENAI_CLIENT, AzureChatCompletionService
from .openai import OPENAI_CLIENT, OpenAIChatCompletionService
from .picker import ChatModelPickerService

__all__ = [
    "ChatCompletionService",
    "Message",
    "Role",
    "AZURE_OPENAI_CLIENT",
    "AzureChatCompletionService",
    "OPENAI_CLIENT",
    "OpenAIChatCompletionService",
    "ChatModelPickerService",
]
