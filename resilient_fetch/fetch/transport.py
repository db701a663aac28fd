"""Transport collaborators for the resilient fetch clients.

A transport performs exactly one network exchange and returns a normalized
response. Network-level failures surface as TransportError; HTTP error
statuses are returned, never raised.
"""

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx
from pydantic import JsonValue

from resilient_fetch.fetch.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)
from resilient_fetch.fetch.errors import TransportError
from resilient_fetch.fetch.models import FetchRequest


@dataclass(frozen=True)
class TransportOptions:
    """Wire-level options for one exchange.

    Attributes:
        method: HTTP method.
        headers: Request headers.
        content: Encoded request body.
        timeout_seconds: Per-exchange timeout.
    """

    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_request(
        cls,
        request: FetchRequest,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "TransportOptions":
        """Encode a FetchRequest for the wire.

        JSON bodies are serialized and get a JSON content type unless the
        caller set one.

        Args:
            request: Request to encode.
            timeout_seconds: Per-exchange timeout.

        Returns:
            TransportOptions for the request.
        """
        headers = dict(request.headers)
        body = request.body
        content: bytes | None
        if body is None:
            content = None
        elif isinstance(body, bytes):
            content = body
        elif isinstance(body, str):
            content = body.encode("utf-8")
        else:
            content = json.dumps(body).encode("utf-8")
            headers.setdefault("content-type", "application/json")
        return cls(
            method=request.method,
            headers=headers,
            content=content,
            timeout_seconds=timeout_seconds,
        )


@dataclass(frozen=True)
class TransportResponse:
    """Normalized response returned by a transport.

    Attributes:
        status: HTTP status code.
        status_text: HTTP reason phrase.
        url: Resolved URL after redirects.
        headers: Response headers (lower-cased names).
        content: Raw response body.
        encoding: Text encoding of the body.
    """

    status: int
    status_text: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""
    encoding: str = "utf-8"

    @property
    def ok(self) -> bool:
        """Check if the status is in the success range (2xx)."""
        return HTTP_STATUS_OK_MIN <= self.status < HTTP_STATUS_OK_MAX

    def text(self) -> str:
        """Decode the body as text."""
        return self.content.decode(self.encoding, errors="replace")

    def json(self) -> JsonValue:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        decoded: JsonValue = json.loads(self.text())
        return decoded

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "TransportResponse":
        """Normalize an httpx response.

        Args:
            response: Response whose body has been read.

        Returns:
            Equivalent TransportResponse.
        """
        return cls(
            status=response.status_code,
            status_text=response.reason_phrase,
            url=str(response.url),
            headers={k.lower(): v for k, v in response.headers.items()},
            content=response.content,
            encoding=response.encoding or "utf-8",
        )


Transport = Callable[[str, TransportOptions], TransportResponse]
AsyncTransport = Callable[[str, TransportOptions], Awaitable[TransportResponse]]

# Exceptions a transport may raise for a failed exchange; each costs one attempt
NETWORK_ERRORS: tuple[type[Exception], ...] = (
    TransportError,
    httpx.TransportError,
    OSError,
)


def _default_headers(user_agent: str, options: TransportOptions) -> dict[str, str]:
    headers = {"user-agent": user_agent, "accept": "application/json"}
    headers.update(options.headers)
    return headers


class HttpxTransport:
    """Synchronous transport backed by httpx.

    Uses the injected client when given; otherwise opens a short-lived
    client per exchange.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Optional shared httpx client.
            user_agent: User-Agent header sent unless the request sets one.
        """
        self._client = client
        self._user_agent = user_agent

    def __call__(self, url: str, options: TransportOptions) -> TransportResponse:
        """Perform one exchange.

        Args:
            url: Request URL.
            options: Wire-level options.

        Returns:
            Normalized response, whatever its status.

        Raises:
            TransportError: On connection, timeout, or protocol failures.
        """
        headers = _default_headers(self._user_agent, options)
        try:
            if self._client is not None:
                response = self._client.request(
                    options.method,
                    url,
                    headers=headers,
                    content=options.content,
                    timeout=options.timeout_seconds,
                )
            else:
                with httpx.Client(
                    timeout=options.timeout_seconds,
                    follow_redirects=True,
                ) as client:
                    response = client.request(
                        options.method,
                        url,
                        headers=headers,
                        content=options.content,
                    )
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise TransportError(msg, url=url) from e
        except httpx.HTTPError as e:
            msg = f"Request failed: {e}"
            raise TransportError(msg, url=url) from e
        return TransportResponse.from_httpx(response)


class AsyncHttpxTransport:
    """Asynchronous transport backed by httpx.AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Optional shared async httpx client.
            user_agent: User-Agent header sent unless the request sets one.
        """
        self._client = client
        self._user_agent = user_agent

    async def __call__(
        self, url: str, options: TransportOptions
    ) -> TransportResponse:
        """Perform one exchange.

        Args:
            url: Request URL.
            options: Wire-level options.

        Returns:
            Normalized response, whatever its status.

        Raises:
            TransportError: On connection, timeout, or protocol failures.
        """
        headers = _default_headers(self._user_agent, options)
        try:
            if self._client is not None:
                response = await self._client.request(
                    options.method,
                    url,
                    headers=headers,
                    content=options.content,
                    timeout=options.timeout_seconds,
                )
            else:
                async with httpx.AsyncClient(
                    timeout=options.timeout_seconds,
                    follow_redirects=True,
                ) as client:
                    response = await client.request(
                        options.method,
                        url,
                        headers=headers,
                        content=options.content,
                    )
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise TransportError(msg, url=url) from e
        except httpx.HTTPError as e:
            msg = f"Request failed: {e}"
            raise TransportError(msg, url=url) from e
        return TransportResponse.from_httpx(response)
