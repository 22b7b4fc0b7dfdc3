"""
Retry loop and the httpx transports that apply it.

The loop only decides whether to send a request again. Responses and
exceptions reach the caller exactly as the inner transport produced them.
"""

import asyncio
import time
from typing import Awaitable, Callable, Union

import httpx

from .policy import RetryPolicy

Outcome = Union[httpx.Response, Exception]
OnRetry = Callable[[int, Outcome, float], None]


def send_with_retry(
    send: Callable[[httpx.Request], httpx.Response],
    request: httpx.Request,
    policy: RetryPolicy,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> httpx.Response:
    """
    Send a request, retrying transient failures with a constant delay.

    Args:
        send: Callable performing a single attempt
        request: The request to send; its body must be replayable
        policy: Retry policy to apply
        on_retry: Optional callback(attempt, outcome, delay) called before each wait
        sleep: Blocking sleep function

    Returns:
        The first non-retryable response, or the last response once the
        retry budget is exhausted
    """
    for attempt in range(policy.max_attempts):
        is_last = attempt >= policy.max_retries
        try:
            response = send(request)
        except Exception as e:
            if is_last or not policy.should_retry_exception(e):
                raise
            outcome: Outcome = e
        else:
            if is_last or not policy.should_retry_response(response):
                return response
            response.close()
            outcome = response

        if on_retry:
            on_retry(attempt, outcome, policy.delay)
        sleep(policy.delay)

    raise RuntimeError("Retry loop exited unexpectedly")


async def async_send_with_retry(
    send: Callable[[httpx.Request], Awaitable[httpx.Response]],
    request: httpx.Request,
    policy: RetryPolicy,
    on_retry: OnRetry | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """
    Async variant of `send_with_retry`.

    Cancellation is never retried: it propagates out of an in-flight
    attempt or out of the delay immediately.
    """
    for attempt in range(policy.max_attempts):
        is_last = attempt >= policy.max_retries
        try:
            response = await send(request)
        except Exception as e:
            if is_last or not policy.should_retry_exception(e):
                raise
            outcome: Outcome = e
        else:
            if is_last or not policy.should_retry_response(response):
                return response
            await response.aclose()
            outcome = response

        if on_retry:
            on_retry(attempt, outcome, policy.delay)
        await sleep(policy.delay)

    raise RuntimeError("Retry loop exited unexpectedly")


class RetryTransport(httpx.BaseTransport):
    """Synchronous transport applying a retry policy around an inner transport."""

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        policy: RetryPolicy | None = None,
        on_retry: OnRetry | None = None,
    ):
        self.transport = transport or httpx.HTTPTransport()
        self.policy = policy or RetryPolicy.transient_http_errors()
        self.on_retry = on_retry

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return send_with_retry(
            self.transport.handle_request, request, self.policy, self.on_retry
        )

    def close(self) -> None:
        self.transport.close()


class AsyncRetryTransport(httpx.AsyncBaseTransport):
    """Async transport applying a retry policy around an inner transport."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        policy: RetryPolicy | None = None,
        on_retry: OnRetry | None = None,
    ):
        self.transport = transport or httpx.AsyncHTTPTransport()
        self.policy = policy or RetryPolicy.transient_http_errors()
        self.on_retry = on_retry

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await async_send_with_retry(
            self.transport.handle_async_request, request, self.policy, self.on_retry
        )

    async def aclose(self) -> None:
        await self.transport.aclose()
