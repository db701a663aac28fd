"""Shared fixtures for the resilient fetch tests."""

import json
from collections.abc import Callable, Generator, Iterable

import pytest
import structlog

from resilient_fetch.fetch.default import reset_default_client
from resilient_fetch.fetch.transport import TransportOptions, TransportResponse


Outcome = TransportResponse | Exception


class ScriptedTransport:
    """Transport that plays back a fixed sequence of outcomes.

    Once the script runs out, the last outcome repeats. Exceptions in the
    script are raised instead of returned.
    """

    def __init__(self, outcomes: Iterable[Outcome]) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, TransportOptions]] = []

    def _next(self, url: str, options: TransportOptions) -> TransportResponse:
        self.calls.append((url, options))
        outcome = self._outcomes[min(len(self.calls), len(self._outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def __call__(self, url: str, options: TransportOptions) -> TransportResponse:
        return self._next(url, options)


class AsyncScriptedTransport(ScriptedTransport):
    """Coroutine flavour of ScriptedTransport."""

    async def __call__(  # type: ignore[override]
        self, url: str, options: TransportOptions
    ) -> TransportResponse:
        return self._next(url, options)


def make_response(
    status: int,
    body: object = None,
    status_text: str = "",
    url: str = "https://api.example.com/items",
) -> TransportResponse:
    """Build a TransportResponse; non-bytes/str bodies are JSON encoded."""
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = json.dumps(body).encode("utf-8")
    return TransportResponse(
        status=status,
        status_text=status_text,
        url=url,
        content=content,
    )


@pytest.fixture
def response() -> Callable[..., TransportResponse]:
    """Factory for transport responses."""
    return make_response


@pytest.fixture
def scripted() -> type[ScriptedTransport]:
    """Factory for scripted sync transports."""
    return ScriptedTransport


@pytest.fixture
def async_scripted() -> type[AsyncScriptedTransport]:
    """Factory for scripted async transports."""
    return AsyncScriptedTransport


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None]:
    """Undo logging configuration and the process-wide client after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    reset_default_client()
