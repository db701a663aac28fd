"""HTTP fetch layer with bounded retry and structured failure reporting.

This module provides:
- A synchronous and an asyncio fetch client with a fixed retry budget
- Constant pause between attempts, cancellable through a token
- A typed terminal error carrying the last failure and the attempt history
- httpx-backed transports and header/URL redaction for logs

The process-wide client and ``fetcher`` helper live in
``resilient_fetch.fetch.default``.
"""

from resilient_fetch.fetch.async_client import AsyncResilientFetchClient
from resilient_fetch.fetch.cancel import CancellationToken
from resilient_fetch.fetch.client import ResilientFetchClient
from resilient_fetch.fetch.constants import (
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    FETCH_ERROR_NAME,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)
from resilient_fetch.fetch.errors import (
    FetchCanceledError,
    FetchDecodeError,
    FetchError,
    TransportError,
)
from resilient_fetch.fetch.models import (
    FailureDescriptor,
    FetchOptions,
    FetchRequest,
    RetryObserver,
    RetryPolicy,
)
from resilient_fetch.fetch.redact import redact_headers, redact_url_credentials
from resilient_fetch.fetch.transport import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    Transport,
    TransportOptions,
    TransportResponse,
)


__all__ = [
    # Clients
    "ResilientFetchClient",
    "AsyncResilientFetchClient",
    "CancellationToken",
    # Models
    "FetchRequest",
    "FetchOptions",
    "FailureDescriptor",
    "RetryPolicy",
    "RetryObserver",
    # Errors
    "FetchError",
    "FetchDecodeError",
    "FetchCanceledError",
    "TransportError",
    # Transports
    "Transport",
    "AsyncTransport",
    "TransportOptions",
    "TransportResponse",
    "HttpxTransport",
    "AsyncHttpxTransport",
    # Constants
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_DELAY_MS",
    "FETCH_ERROR_NAME",
    "HTTP_STATUS_OK_MIN",
    "HTTP_STATUS_OK_MAX",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
