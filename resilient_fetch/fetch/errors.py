"""Error types for the resilient fetch layer."""

from pydantic import JsonValue

from resilient_fetch.fetch.constants import FETCH_ERROR_NAME
from resilient_fetch.fetch.models import FailureDescriptor


class FetchError(Exception):
    """Terminal failure of a fetch call.

    Raised once the retry budget is exhausted (built from the last observed
    failure) or when the retry policy allows no attempts at all. Carries
    enough context to reproduce the failing call without the original
    request object.

    Attributes:
        message: Response text of the last attempt, or a description of the
            configuration error.
        status: HTTP status code of the last attempt.
        status_text: Reason phrase of the last attempt.
        url: Resolved URL of the last attempt.
        body_sent: Request body, decoded for diagnostics.
        attempts: Number of attempts made.
        history: Every failure observed, oldest first.
    """

    name = FETCH_ERROR_NAME

    def __init__(
        self,
        message: str,
        status: int | None = None,
        status_text: str | None = None,
        url: str | None = None,
        body_sent: JsonValue = None,
        attempts: int = 0,
        history: tuple[FailureDescriptor, ...] = (),
    ) -> None:
        """Initialize the fetch error.

        Args:
            message: Human-readable error message.
            status: HTTP status code, if a response was received.
            status_text: HTTP reason phrase, if a response was received.
            url: Request or resolved response URL.
            body_sent: Request body that was sent.
            attempts: Number of transport calls made.
            history: Failure descriptors of all attempts.
        """
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.url = url
        self.body_sent = body_sent
        self.attempts = attempts
        self.history = history

    @classmethod
    def from_failures(cls, failures: list[FailureDescriptor]) -> "FetchError":
        """Build the terminal error from the failures of an exhausted call.

        Args:
            failures: Failure descriptors in attempt order; must not be empty.

        Returns:
            FetchError reflecting the last failure.
        """
        last = failures[-1]
        return cls(
            message=last.message,
            status=last.status,
            status_text=last.status_text,
            url=last.url,
            body_sent=last.body_sent,
            attempts=len(failures),
            history=tuple(failures),
        )

    def to_dict(self) -> dict[str, JsonValue]:
        """Convert error to dictionary for logging/serialization.

        The field set and key spelling are fixed so downstream log consumers
        can match records byte for byte.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "name": self.name,
            "status": self.status,
            "statusText": self.status_text,
            "url": self.url,
            "bodySent": self.body_sent,
        }


class FetchDecodeError(ValueError):
    """A successful (2xx) response whose body is not valid JSON.

    Never retried and never wrapped in FetchError.
    """

    def __init__(self, url: str, status: int, text: str) -> None:
        """Initialize the decode error.

        Args:
            url: Resolved response URL.
            status: HTTP status code of the response.
            text: Raw response text.
        """
        self.url = url
        self.status = status
        self.text = text
        super().__init__(f"Response from {url} ({status}) is not valid JSON")


class FetchCanceledError(Exception):
    """Raised when a fetch call is canceled before it completes."""

    def __init__(self, url: str, attempts: int) -> None:
        """Initialize the cancellation error.

        Args:
            url: Request URL.
            attempts: Number of attempts made before cancellation.
        """
        self.url = url
        self.attempts = attempts
        super().__init__(f"Fetch of {url} canceled after {attempts} attempt(s)")


class TransportError(Exception):
    """Network-level failure raised by a transport (refused, timed out, ...)."""

    def __init__(self, message: str, url: str | None = None) -> None:
        """Initialize the transport error.

        Args:
            message: Description of the failure.
            url: URL being requested, if known.
        """
        super().__init__(message)
        self.url = url
