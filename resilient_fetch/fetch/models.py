"""Data models for the resilient fetch layer."""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

from resilient_fetch.fetch.constants import DEFAULT_DELAY_MS, DEFAULT_MAX_ATTEMPTS


RequestBody = bytes | str | dict[str, JsonValue] | list[JsonValue]


class FetchRequest(BaseModel):
    """A single outbound HTTP request.

    Header names are case-insensitive and stored lower-cased.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(min_length=1, description="Target URL")]
    method: Annotated[str, Field(min_length=1)] = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: RequestBody | None = None

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case the HTTP method."""
        return v.upper()

    @field_validator("headers")
    @classmethod
    def normalize_headers(cls, v: dict[str, str]) -> dict[str, str]:
        """Lower-case header names, rejecting names that collide."""
        normalized: dict[str, str] = {}
        for key, value in v.items():
            name = key.lower()
            if name in normalized:
                msg = f"Duplicate header (case-insensitive): '{key}'"
                raise ValueError(msg)
            normalized[name] = value
        return normalized

    def header(self, name: str) -> str | None:
        """Look up a header value by case-insensitive name.

        Args:
            name: Header name.

        Returns:
            Header value, or None if not set.
        """
        return self.headers.get(name.lower())

    def body_for_diagnostics(self) -> JsonValue:
        """Decode the request body for inclusion in failure reports.

        JSON payloads are decoded into values; anything that is not JSON is
        kept as text so the report still shows what was sent.

        Returns:
            Decoded body, or None when the request has no body.
        """
        if self.body is None:
            return None
        if isinstance(self.body, dict | list):
            return self.body
        text = (
            self.body.decode("utf-8", errors="replace")
            if isinstance(self.body, bytes)
            else self.body
        )
        try:
            decoded: JsonValue = json.loads(text)
        except ValueError:
            return text
        return decoded


class RetryPolicy(BaseModel):
    """Retry budget for one logical fetch call.

    The pause between attempts is constant. ``max_attempts`` is deliberately
    unconstrained here: a non-positive budget is a configuration error that
    the client reports as a FetchError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay_ms: Annotated[int, Field(ge=0)] = DEFAULT_DELAY_MS

    @property
    def delay_seconds(self) -> float:
        """Pause between attempts in seconds."""
        return self.delay_ms / 1000.0

    @property
    def is_valid(self) -> bool:
        """Check whether at least one attempt is allowed."""
        return self.max_attempts >= 1


class FailureDescriptor(BaseModel):
    """Diagnostic record of one failed attempt.

    All HTTP fields are optional because network-level failures (refused
    connection, timeout) never produce a response.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attempt: Annotated[int, Field(ge=1, description="1-based attempt number")]
    status: int | None = Field(default=None, description="HTTP status code")
    status_text: str | None = Field(default=None, description="Reason phrase")
    url: str | None = Field(default=None, description="Resolved response URL")
    body_sent: JsonValue = Field(default=None, description="Request body sent")
    message: str = Field(default="", description="Response text or error text")

    def to_log_fields(self) -> dict[str, JsonValue]:
        """Convert to keyword fields for a structured log record.

        Returns:
            Dictionary of log field name to value.
        """
        return {
            "attempt": self.attempt,
            "status": self.status,
            "status_text": self.status_text,
            "url": self.url,
            "body_sent": self.body_sent,
            "message": self.message,
        }


RetryObserver = Callable[[FailureDescriptor], None]


@dataclass(frozen=True)
class FetchOptions:
    """Caller-facing options for a one-shot fetch.

    Attributes:
        retries: Number of attempts allowed.
        pause_ms: Pause between attempts in milliseconds.
        callback: Observer invoked with the failure before each retry.
        body: Optional request body.
    """

    retries: int = DEFAULT_MAX_ATTEMPTS
    pause_ms: int = DEFAULT_DELAY_MS
    callback: RetryObserver | None = None
    body: RequestBody | None = None

    def to_policy(self) -> RetryPolicy:
        """Build the retry policy these options describe."""
        return RetryPolicy(max_attempts=self.retries, delay_ms=self.pause_ms)
