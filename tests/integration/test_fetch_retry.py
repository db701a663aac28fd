"""Integration tests for retries against a local HTTP server."""

import json
import socket
import threading
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, HTTPServer

import httpx
import pytest

from resilient_fetch.fetch.client import ResilientFetchClient
from resilient_fetch.fetch.errors import FetchDecodeError, FetchError
from resilient_fetch.fetch.models import FetchRequest, RetryPolicy
from resilient_fetch.fetch.transport import HttpxTransport


def get_server_url(server: HTTPServer, path: str = "/resource") -> str:
    """Get the URL for a test server.

    Args:
        server: The HTTP server instance.
        path: The URL path.

    Returns:
        Complete URL for the server.
    """
    host, port = server.server_address[0], server.server_address[1]
    if isinstance(host, bytes):
        host = host.decode("utf-8")
    return f"http://{host}:{port}{path}"


class FlakyHandler(BaseHTTPRequestHandler):
    """Returns 500 for the first N requests, then a JSON body."""

    request_count: int = 0
    error_count: int = 2
    received_bodies: list[bytes] = []

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def _respond(self) -> None:
        FlakyHandler.request_count += 1
        length = int(self.headers.get("Content-Length") or 0)
        FlakyHandler.received_bodies.append(self.rfile.read(length))

        if FlakyHandler.request_count <= FlakyHandler.error_count:
            body = b'{"err":"boom"}'
            self.send_response(500)
        else:
            body = json.dumps({"ok": True, "count": self.request_count}).encode()
            self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:  # noqa: N802
        """Handle GET requests."""
        self._respond()

    def do_POST(self) -> None:  # noqa: N802
        """Handle POST requests."""
        self._respond()


class HtmlHandler(BaseHTTPRequestHandler):
    """Returns 200 with a non-JSON body."""

    request_count: int = 0

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def do_GET(self) -> None:  # noqa: N802
        """Handle GET requests."""
        HtmlHandler.request_count += 1
        body = b"<html>maintenance</html>"
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def _serve(handler: type[BaseHTTPRequestHandler]) -> Generator[HTTPServer]:
    server = HTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def flaky_server() -> Generator[HTTPServer]:
    """Start a server that fails twice before succeeding."""
    FlakyHandler.request_count = 0
    FlakyHandler.error_count = 2
    FlakyHandler.received_bodies = []
    yield from _serve(FlakyHandler)


@pytest.fixture
def html_server() -> Generator[HTTPServer]:
    """Start a server that answers 200 with HTML."""
    HtmlHandler.request_count = 0
    yield from _serve(HtmlHandler)


@pytest.fixture
def client() -> ResilientFetchClient:
    """Create a client with a real httpx transport."""
    return ResilientFetchClient(
        transport=HttpxTransport(client=httpx.Client(trust_env=False)),
        timeout_seconds=5.0,
    )


class TestRetryAgainstServer:
    """Retry behavior over real sockets."""

    def test_recovers_after_server_errors(
        self, client: ResilientFetchClient, flaky_server: HTTPServer
    ) -> None:
        """Two 500s then 200: three requests and the final body."""
        url = get_server_url(flaky_server)

        result = client.fetch(
            FetchRequest(url=url), RetryPolicy(max_attempts=3, delay_ms=0)
        )

        assert result == {"ok": True, "count": 3}
        assert FlakyHandler.request_count == 3

    def test_exhausted_budget(
        self, client: ResilientFetchClient, flaky_server: HTTPServer
    ) -> None:
        """Budget smaller than the failure streak raises the last 500."""
        FlakyHandler.error_count = 10
        url = get_server_url(flaky_server, "/items")

        with pytest.raises(FetchError) as exc_info:
            client.fetch(
                FetchRequest(url=url, method="POST", body={"name": "garden"}),
                RetryPolicy(max_attempts=3, delay_ms=10),
            )

        error = exc_info.value
        assert FlakyHandler.request_count == 3
        assert error.status == 500
        assert error.status_text == "Internal Server Error"
        assert error.url == url
        assert error.body_sent == {"name": "garden"}
        assert error.message == '{"err":"boom"}'
        assert all(
            json.loads(body) == {"name": "garden"}
            for body in FlakyHandler.received_bodies
        )

    def test_html_success_not_retried(
        self, client: ResilientFetchClient, html_server: HTTPServer
    ) -> None:
        """A 200 with an HTML body is a decode error after one request."""
        with pytest.raises(FetchDecodeError):
            client.fetch(
                FetchRequest(url=get_server_url(html_server)),
                RetryPolicy(max_attempts=3, delay_ms=0),
            )

        assert HtmlHandler.request_count == 1

    def test_connection_refused(self, client: ResilientFetchClient) -> None:
        """A closed port yields a FetchError without status fields."""
        with socket.socket() as sock:
            sock.bind(("127.0.0.1", 0))
            port = sock.getsockname()[1]
        url = f"http://127.0.0.1:{port}/nothing"

        with pytest.raises(FetchError) as exc_info:
            client.fetch(FetchRequest(url=url), RetryPolicy(max_attempts=2, delay_ms=0))

        assert exc_info.value.status is None
        assert exc_info.value.url == url
        assert exc_info.value.attempts == 2
