"""Synchronous HTTP fetch client with bounded retry."""

import time
from collections.abc import Callable

import structlog
from pydantic import JsonValue

from resilient_fetch.fetch.cancel import CancellationToken
from resilient_fetch.fetch.constants import DEFAULT_TIMEOUT_SECONDS
from resilient_fetch.fetch.errors import FetchCanceledError, FetchError
from resilient_fetch.fetch.models import (
    FailureDescriptor,
    FetchRequest,
    RetryObserver,
    RetryPolicy,
)
from resilient_fetch.fetch.outcome import (
    decode_success,
    describe_response,
    describe_transport_error,
    invalid_policy_error,
    log_failure,
    notify_observer,
    safe_bind,
    safe_log,
)
from resilient_fetch.fetch.redact import redact_headers, redact_url_credentials
from resilient_fetch.fetch.transport import (
    NETWORK_ERRORS,
    HttpxTransport,
    Transport,
    TransportOptions,
)


logger = structlog.get_logger()


class ResilientFetchClient:
    """HTTP client that retries failed calls on a fixed schedule.

    Every non-2xx response and every network-level failure counts as a
    failed attempt. Failed attempts are logged and retried after a constant
    pause until the policy's attempt budget runs out; the last failure is
    then raised as FetchError.

    The client holds no per-call state, so one instance may serve
    concurrent calls from several threads.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        policy: RetryPolicy | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Callable performing one HTTP exchange. Defaults to
                an httpx-backed transport.
            policy: Default retry policy for calls that pass none.
            log: Logger receiving retry and failure records.
            timeout_seconds: Per-attempt transport timeout.
            sleep: Function used for the pause between attempts when no
                cancellation token is given.
        """
        self._transport = transport or HttpxTransport()
        self._policy = policy or RetryPolicy()
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._log = safe_bind(log or logger, component="fetch")

    @property
    def policy(self) -> RetryPolicy:
        """Default retry policy of this client."""
        return self._policy

    def fetch(
        self,
        request: FetchRequest,
        policy: RetryPolicy | None = None,
        *,
        on_retry: RetryObserver | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> JsonValue:
        """Send a request, retrying failures, and decode the JSON reply.

        Args:
            request: Request to send.
            policy: Retry policy for this call; the client default if None.
            on_retry: Observer called with the failure before each retry.
            cancel_token: Token that aborts the call between attempts.

        Returns:
            Decoded JSON body of the first 2xx response.

        Raises:
            FetchError: If every attempt failed, or the policy allows none.
            FetchDecodeError: If a 2xx response body is not valid JSON.
            FetchCanceledError: If the token was cancelled.
        """
        policy = policy if policy is not None else self._policy
        log = safe_bind(
            self._log,
            method=request.method,
            request_url=redact_url_credentials(request.url),
        )

        if not policy.is_valid:
            error = invalid_policy_error(request, policy)
            safe_log(
                log,
                "error",
                "fetch_invalid_policy",
                max_attempts=policy.max_attempts,
            )
            raise error

        options = TransportOptions.from_request(request, self._timeout_seconds)
        safe_log(
            log,
            "debug",
            "fetch_start",
            headers=redact_headers(request.headers),
            max_attempts=policy.max_attempts,
            delay_ms=policy.delay_ms,
        )

        failures: list[FailureDescriptor] = []
        remaining = policy.max_attempts
        while remaining > 0:
            attempt = len(failures) + 1
            if cancel_token is not None and cancel_token.cancelled:
                raise FetchCanceledError(request.url, attempts=len(failures))

            try:
                response = self._transport(request.url, options)
            except NETWORK_ERRORS as e:
                failure = describe_transport_error(attempt, e, request)
            else:
                if response.ok:
                    result = decode_success(response, request.url)
                    safe_log(
                        log,
                        "info",
                        "fetch_complete",
                        status=response.status,
                        attempts=attempt,
                    )
                    return result
                failure = describe_response(attempt, response, request)

            failures.append(failure)
            log_failure(log, failure)

            remaining -= 1
            if remaining == 0:
                error = FetchError.from_failures(failures)
                safe_log(log, "error", "fetch_exhausted", attempts=error.attempts)
                raise error

            safe_log(
                log,
                "warning",
                "fetch_retry",
                attempt=attempt,
                remaining=remaining,
                delay_ms=policy.delay_ms,
            )
            notify_observer(on_retry, failure, log)
            self._pause(policy.delay_seconds, cancel_token, request.url, attempt)

        # Unreachable: the loop either returns or raises.
        raise FetchError.from_failures(failures)

    def _pause(
        self,
        seconds: float,
        cancel_token: CancellationToken | None,
        url: str,
        attempts: int,
    ) -> None:
        """Wait between attempts, aborting if the token is cancelled.

        Raises:
            FetchCanceledError: If the token was cancelled during the wait.
        """
        if cancel_token is None:
            self._sleep(seconds)
            return
        if cancel_token.wait(seconds):
            raise FetchCanceledError(url, attempts=attempts)
