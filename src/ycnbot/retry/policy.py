"""
Retry policy definition for outbound HTTP requests.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple, Type

import httpx

# Transport faults expected to succeed on a second try: timeouts, connection
# failures/resets and a peer dropping the connection mid-response.
TRANSIENT_TRANSPORT_ERRORS: Tuple[Type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry policy shared by every request of a named client.

    Attributes:
        max_retries: Additional attempts after the first one (default: 5)
        delay: Constant wait between attempts in seconds (default: 0.02)
        retryable_status_codes: Response status codes that trigger a retry
        retryable_exceptions: Transport exceptions that trigger a retry
    """

    max_retries: int = 5
    delay: float = 0.02
    retryable_status_codes: FrozenSet[int] = field(
        default_factory=lambda: frozenset({429})
    )
    retryable_exceptions: Tuple[Type[Exception], ...] = TRANSIENT_TRANSPORT_ERRORS

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")

    @property
    def max_attempts(self) -> int:
        """Total number of attempts per logical call."""
        return self.max_retries + 1

    def should_retry_response(self, response: httpx.Response) -> bool:
        """Check if the given response should trigger a retry."""
        return response.status_code in self.retryable_status_codes

    def should_retry_exception(self, exc: BaseException) -> bool:
        """Check if the given transport failure should trigger a retry."""
        return isinstance(exc, self.retryable_exceptions)

    @classmethod
    def transient_http_errors(cls) -> "RetryPolicy":
        """Preset attached to the AI provider clients: 5 retries, 20ms apart, on 429."""
        return cls(max_retries=5, delay=0.02)

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        """Preset for no retry (single attempt only)."""
        return cls(max_retries=0)
