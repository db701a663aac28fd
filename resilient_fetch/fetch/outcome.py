"""Classification of attempt outcomes, shared by the sync and async clients."""

import contextlib

import structlog
from pydantic import JsonValue

from resilient_fetch.fetch.errors import FetchDecodeError, FetchError
from resilient_fetch.fetch.models import (
    FailureDescriptor,
    FetchRequest,
    RetryObserver,
    RetryPolicy,
)
from resilient_fetch.fetch.redact import redact_url_credentials
from resilient_fetch.fetch.transport import TransportResponse


def invalid_policy_error(request: FetchRequest, policy: RetryPolicy) -> FetchError:
    """Build the error for a policy that allows no attempts.

    Args:
        request: Request that was about to be sent.
        policy: Offending policy.

    Returns:
        FetchError with no HTTP fields and zero attempts.
    """
    return FetchError(
        message=f"Invalid retry policy: max_attempts={policy.max_attempts} (must be >= 1)",
        url=request.url,
        body_sent=request.body_for_diagnostics(),
    )


def decode_success(response: TransportResponse, request_url: str) -> JsonValue:
    """Decode the body of a 2xx response.

    Args:
        response: Successful response.
        request_url: URL that was requested, used if the response has none.

    Returns:
        Decoded JSON value.

    Raises:
        FetchDecodeError: If the body is not valid JSON.
    """
    try:
        return response.json()
    except ValueError as e:
        raise FetchDecodeError(
            url=response.url or request_url,
            status=response.status,
            text=response.text(),
        ) from e


def describe_response(
    attempt: int,
    response: TransportResponse,
    request: FetchRequest,
) -> FailureDescriptor:
    """Describe a non-2xx response.

    Args:
        attempt: 1-based attempt number.
        response: Failed response.
        request: Request that produced it.

    Returns:
        FailureDescriptor with the response's fields.
    """
    return FailureDescriptor(
        attempt=attempt,
        status=response.status,
        status_text=response.status_text or None,
        url=response.url or request.url,
        body_sent=request.body_for_diagnostics(),
        message=response.text(),
    )


def describe_transport_error(
    attempt: int,
    error: Exception,
    request: FetchRequest,
) -> FailureDescriptor:
    """Describe a network-level failure.

    Args:
        attempt: 1-based attempt number.
        error: Exception raised by the transport.
        request: Request being sent.

    Returns:
        FailureDescriptor without status fields.
    """
    return FailureDescriptor(
        attempt=attempt,
        url=request.url,
        body_sent=request.body_for_diagnostics(),
        message=str(error) or type(error).__name__,
    )


def safe_bind(
    log: structlog.stdlib.BoundLogger,
    **fields: object,
) -> structlog.stdlib.BoundLogger:
    """Bind context to a logger, keeping the unbound logger if binding fails."""
    try:
        return log.bind(**fields)
    except Exception:  # noqa: BLE001
        return log


def safe_log(
    log: structlog.stdlib.BoundLogger,
    level: str,
    event: str,
    **fields: object,
) -> None:
    """Emit a log record, ignoring any failure of the log sink.

    Args:
        log: Logger to emit through.
        level: Method name on the logger ("warning", "error", ...).
        event: Event name.
        **fields: Structured fields.
    """
    with contextlib.suppress(Exception):
        getattr(log, level)(event, **fields)


def log_failure(log: structlog.stdlib.BoundLogger, failure: FailureDescriptor) -> None:
    """Report one failed attempt at error level."""
    fields = failure.to_log_fields()
    if failure.url:
        fields["url"] = redact_url_credentials(failure.url)
    safe_log(log, "error", "fetch_attempt_failed", **fields)


def notify_observer(
    observer: RetryObserver | None,
    failure: FailureDescriptor,
    log: structlog.stdlib.BoundLogger,
) -> None:
    """Invoke the retry observer; its errors never reach the retry loop.

    Args:
        observer: Optional observer callback.
        failure: Failure that triggers the retry.
        log: Logger for observer errors.
    """
    if observer is None:
        return
    try:
        observer(failure)
    except Exception as e:  # noqa: BLE001
        safe_log(
            log,
            "warning",
            "fetch_retry_observer_failed",
            attempt=failure.attempt,
            error=str(e),
        )
