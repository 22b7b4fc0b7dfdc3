"""
YCNBot - Retry Logic.

Constant-delay retry of transient HTTP failures for the named AI clients.
"""

from .policy import RetryPolicy, TRANSIENT_TRANSPORT_ERRORS
from .transport import (
    AsyncRetryTransport,
    RetryTransport,
    async_send_with_retry,
    send_with_retry,
)

__all__ = [
    "RetryPolicy",
    "TRANSIENT_TRANSPORT_ERRORS",
    "AsyncRetryTransport",
    "RetryTransport",
    "async_send_with_retry",
    "send_with_retry",
]
