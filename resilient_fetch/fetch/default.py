"""Process-wide client and the one-call ``fetcher`` helper."""

from threading import Lock

from pydantic import JsonValue

from resilient_fetch.fetch.client import ResilientFetchClient
from resilient_fetch.fetch.models import FetchOptions, FetchRequest
from resilient_fetch.fetch.transport import HttpxTransport
from resilient_fetch.settings import FetchSettings, get_settings


_default_client: ResilientFetchClient | None = None
_lock = Lock()


def build_client(settings: FetchSettings) -> ResilientFetchClient:
    """Build a client from settings.

    Args:
        settings: Fetch settings.

    Returns:
        Client using an httpx transport and the settings' retry policy.
    """
    return ResilientFetchClient(
        transport=HttpxTransport(user_agent=settings.user_agent),
        policy=settings.retry_policy(),
        timeout_seconds=settings.timeout_seconds,
    )


def get_default_client() -> ResilientFetchClient:
    """Get the process-wide client, building it on first use."""
    global _default_client  # noqa: PLW0603
    with _lock:
        if _default_client is None:
            _default_client = build_client(get_settings())
        return _default_client


def reset_default_client() -> None:
    """Drop the process-wide client (primarily for testing)."""
    global _default_client  # noqa: PLW0603
    with _lock:
        _default_client = None


def fetcher(
    url: str,
    options: FetchOptions | None = None,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    client: ResilientFetchClient | None = None,
) -> JsonValue:
    """Fetch a URL and decode its JSON body, retrying failures.

    Args:
        url: URL to fetch.
        options: Retry count, pause, retry callback, and body. Defaults to
            12 attempts with a 2000 ms pause.
        method: HTTP method.
        headers: Request headers.
        client: Client to use instead of the process-wide one.

    Returns:
        Decoded JSON body.

    Raises:
        FetchError: If every attempt failed.
        FetchDecodeError: If a 2xx response body is not valid JSON.
    """
    options = options or FetchOptions()
    request = FetchRequest(
        url=url,
        method=method,
        headers=headers or {},
        body=options.body,
    )
    return (client or get_default_client()).fetch(
        request,
        options.to_policy(),
        on_retry=options.callback,
    )
