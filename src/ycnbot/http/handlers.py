"""
Outgoing request handlers for the AI provider clients.

Each handler attaches provider-specific authentication to a request before
it reaches the retry transport.
"""

import logging
from typing import Generator

import httpx

logger = logging.getLogger(__name__)


class OpenAIClientHandler(httpx.Auth):
    """Bearer-token authentication for the OpenAI API."""

    def __init__(self, api_key: str | None, organization: str | None = None):
        self.api_key = api_key
        self.organization = organization
        if not api_key:
            logger.warning("OpenAI API key not configured; requests will be unauthenticated")

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self.api_key:
            request.headers["Authorization"] = f"Bearer {self.api_key}"
        if self.organization:
            request.headers["OpenAI-Organization"] = self.organization
        yield request


class AzureOpenAIClientHandler(httpx.Auth):
    """
    API-key authentication for Azure OpenAI.

    Also pins the `api-version` query parameter, which every Azure OpenAI
    data-plane call requires, unless the caller already set one.
    """

    def __init__(self, api_key: str | None, api_version: str):
        self.api_key = api_key
        self.api_version = api_version
        if not api_key:
            logger.warning("Azure OpenAI API key not configured; requests will be unauthenticated")

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self.api_key:
            request.headers["api-key"] = self.api_key
        if "api-version" not in request.url.params:
            request.url = request.url.copy_merge_params({"api-version": self.api_version})
        yield request
