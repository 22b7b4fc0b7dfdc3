"""Tests for retry module - behavior focused."""

import asyncio
import time

import httpx
import pytest

from ycnbot.retry import (
    AsyncRetryTransport,
    RetryPolicy,
    RetryTransport,
    async_send_with_retry,
    send_with_retry,
)


# --- Helpers ---


class ScriptedHandler:
    """MockTransport handler replaying a script of responses/exceptions."""

    def __init__(self, script):
        self.script = list(script)
        self.calls: list[float] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(time.monotonic())
        step = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step, request=request, text=f"attempt {len(self.calls)}")


def make_request() -> httpx.Request:
    return httpx.Request("POST", "https://api.test/chat/completions", json={"q": 1})


# --- Policy ---


class TestRetryPolicy:
    """Test RetryPolicy behavior."""

    def test_default_policy_matches_provider_clients(self):
        """Defaults are 5 retries, 20ms apart, on 429."""
        policy = RetryPolicy()

        assert policy.max_retries == 5
        assert policy.max_attempts == 6
        assert policy.delay == 0.02
        assert policy == RetryPolicy.transient_http_errors()

    def test_should_retry_rate_limit_status(self):
        policy = RetryPolicy()
        assert policy.should_retry_response(httpx.Response(429)) is True

    @pytest.mark.parametrize("status_code", [200, 400, 401, 404, 500, 503])
    def test_should_not_retry_other_statuses(self, status_code):
        """Only 429 triggers a retry; server errors propagate immediately."""
        policy = RetryPolicy()
        assert policy.should_retry_response(httpx.Response(status_code)) is False

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("refused"),
            httpx.ReadError("connection reset by peer"),
            httpx.ReadTimeout("timed out"),
            httpx.ConnectTimeout("timed out"),
            httpx.RemoteProtocolError("peer closed connection"),
        ],
    )
    def test_should_retry_transient_transport_errors(self, exc):
        assert RetryPolicy().should_retry_exception(exc) is True

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.UnsupportedProtocol("missing scheme"),
            ValueError("bad"),
        ],
    )
    def test_should_not_retry_other_exceptions(self, exc):
        assert RetryPolicy().should_retry_exception(exc) is False

    def test_policy_is_immutable(self):
        policy = RetryPolicy()
        with pytest.raises(AttributeError):
            policy.max_retries = 1  # type: ignore[misc]

    def test_rejects_negative_values(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)
        with pytest.raises(ValueError):
            RetryPolicy(delay=-0.1)

    def test_no_retry_preset_has_single_attempt(self):
        assert RetryPolicy.no_retry().max_attempts == 1


# --- Retry loop ---


class TestSendWithRetry:
    """Test the synchronous retry loop."""

    def test_returns_success_after_rate_limits(self):
        """429 on attempts 1-5 and 200 on attempt 6 returns the 200."""
        handler = ScriptedHandler([429] * 5 + [200])
        transport = httpx.MockTransport(handler)
        delays: list[float] = []

        response = send_with_retry(
            transport.handle_request, make_request(), RetryPolicy(), sleep=delays.append
        )

        assert response.status_code == 200
        assert len(handler.calls) == 6
        assert delays == [0.02] * 5

    def test_non_retryable_status_returned_unchanged(self):
        """404 on attempt 1 is returned as-is after a single attempt."""
        handler = ScriptedHandler([404])
        transport = httpx.MockTransport(handler)
        delays: list[float] = []

        response = send_with_retry(
            transport.handle_request, make_request(), RetryPolicy(), sleep=delays.append
        )

        assert response.status_code == 404
        response.read()
        assert response.text == "attempt 1"
        assert len(handler.calls) == 1
        assert delays == []

    def test_exhausted_budget_returns_last_response(self):
        """429 on all 6 attempts returns the 6th response, no 7th attempt."""
        handler = ScriptedHandler([429] * 10)
        transport = httpx.MockTransport(handler)

        response = send_with_retry(
            transport.handle_request, make_request(), RetryPolicy(), sleep=lambda _: None
        )

        assert response.status_code == 429
        response.read()
        assert response.text == "attempt 6"
        assert len(handler.calls) == 6

    def test_on_retry_receives_attempt_and_outcome(self):
        handler = ScriptedHandler([429, httpx.ConnectError("reset"), 200])
        transport = httpx.MockTransport(handler)
        seen = []

        send_with_retry(
            transport.handle_request,
            make_request(),
            RetryPolicy(),
            on_retry=lambda attempt, outcome, delay: seen.append((attempt, outcome, delay)),
            sleep=lambda _: None,
        )

        assert [attempt for attempt, _, _ in seen] == [0, 1]
        assert isinstance(seen[0][1], httpx.Response)
        assert seen[0][1].status_code == 429
        assert isinstance(seen[1][1], httpx.ConnectError)
        assert all(delay == 0.02 for _, _, delay in seen)


class TestAsyncSendWithRetry:
    """Test the async retry loop."""

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self):
        """Connection resets and timeouts are retried until success."""
        handler = ScriptedHandler(
            [httpx.ReadError("connection reset"), httpx.ReadTimeout("slow"), 200]
        )
        transport = httpx.MockTransport(handler)

        response = await async_send_with_retry(
            transport.handle_async_request, make_request(), RetryPolicy()
        )

        assert response.status_code == 200
        assert len(handler.calls) == 3

    @pytest.mark.asyncio
    async def test_last_transport_error_propagates_untouched(self):
        """After 6 failed attempts, the 6th exception is raised as-is."""
        errors = [httpx.ConnectError(f"refused {i}") for i in range(6)]
        handler = ScriptedHandler(errors)
        transport = httpx.MockTransport(handler)

        with pytest.raises(httpx.ConnectError) as exc_info:
            await async_send_with_retry(
                transport.handle_async_request, make_request(), RetryPolicy()
            )

        assert exc_info.value is errors[-1]
        assert len(handler.calls) == 6

    @pytest.mark.asyncio
    async def test_non_transient_error_not_retried(self):
        handler = ScriptedHandler([httpx.UnsupportedProtocol("no scheme"), 200])
        transport = httpx.MockTransport(handler)

        with pytest.raises(httpx.UnsupportedProtocol):
            await async_send_with_retry(
                transport.handle_async_request, make_request(), RetryPolicy()
            )

        assert len(handler.calls) == 1

    @pytest.mark.asyncio
    async def test_no_retry_policy_makes_single_attempt(self):
        handler = ScriptedHandler([429, 200])
        transport = httpx.MockTransport(handler)

        response = await async_send_with_retry(
            transport.handle_async_request, make_request(), RetryPolicy.no_retry()
        )

        assert response.status_code == 429
        assert len(handler.calls) == 1

    @pytest.mark.asyncio
    async def test_cancellation_aborts_during_delay(self):
        """Cancelling the caller stops the loop without waiting out the delay."""
        handler = ScriptedHandler([429])
        transport = httpx.MockTransport(handler)
        policy = RetryPolicy(max_retries=5, delay=10.0)

        task = asyncio.create_task(
            async_send_with_retry(transport.handle_async_request, make_request(), policy)
        )
        while not handler.calls:
            await asyncio.sleep(0)
        started = time.monotonic()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert time.monotonic() - started < 1.0
        assert len(handler.calls) == 1


# --- Transports ---


class TestRetryTransport:
    """Test the transports through real httpx clients."""

    def test_sync_transport_retries_rate_limit(self):
        handler = ScriptedHandler([429, 429, 200])
        transport = RetryTransport(httpx.MockTransport(handler), RetryPolicy(delay=0))

        with httpx.Client(transport=transport, base_url="https://api.test") as client:
            response = client.get("/models")

        assert response.status_code == 200
        assert len(handler.calls) == 3

    @pytest.mark.asyncio
    async def test_async_transport_spaces_attempts_by_delay(self):
        """Six attempts, each started at least 20ms after the previous one."""
        handler = ScriptedHandler([429] * 5 + [200])
        transport = AsyncRetryTransport(httpx.MockTransport(handler))

        async with httpx.AsyncClient(transport=transport, base_url="https://api.test") as client:
            response = await client.post("/chat/completions", json={"q": 1})

        assert response.status_code == 200
        assert len(handler.calls) == 6
        gaps = [b - a for a, b in zip(handler.calls, handler.calls[1:])]
        assert all(gap >= 0.019 for gap in gaps)

    @pytest.mark.asyncio
    async def test_request_body_is_resent_on_retry(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.read())
            return httpx.Response(429 if len(bodies) < 3 else 200)

        transport = AsyncRetryTransport(httpx.MockTransport(handler), RetryPolicy(delay=0))

        async with httpx.AsyncClient(transport=transport) as client:
            await client.post("https://api.test/chat/completions", json={"prompt": "hi"})

        assert len(bodies) == 3
        assert len(set(bodies)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_do_not_interfere(self):
        """Each concurrent caller observes only its own attempt sequence."""
        attempts: dict[str, int] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            caller = request.headers["X-Caller"]
            attempts[caller] = attempts.get(caller, 0) + 1
            # Caller i is rate limited i % 4 times before succeeding.
            if attempts[caller] <= int(caller) % 4:
                return httpx.Response(429)
            return httpx.Response(200, json={"caller": caller, "attempts": attempts[caller]})

        transport = AsyncRetryTransport(httpx.MockTransport(handler))

        async with httpx.AsyncClient(transport=transport, base_url="https://api.test") as client:
            responses = await asyncio.gather(
                *(client.get("/models", headers={"X-Caller": str(i)}) for i in range(12))
            )

        for i, response in enumerate(responses):
            assert response.status_code == 200
            body = response.json()
            assert body["caller"] == str(i)
            assert body["attempts"] == i % 4 + 1
            assert attempts[str(i)] == i % 4 + 1

    @pytest.mark.asyncio
    async def test_aclose_closes_inner_transport(self):
        closed = []

        class Inner(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                return httpx.Response(200)

            async def aclose(self):
                closed.append(True)

        transport = AsyncRetryTransport(Inner())
        await transport.aclose()

        assert closed == [True]
