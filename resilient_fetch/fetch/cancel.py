"""Cancellation token shared between a caller and a running fetch."""

import threading


class CancellationToken:
    """Thread-safe, one-way cancellation flag.

    A fetch checks the token before each attempt and waits on it during the
    pause between attempts, so cancel() cuts a pause short.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        """Check whether cancel() has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds`` or until cancelled.

        Args:
            seconds: Maximum time to wait.

        Returns:
            True if the token was cancelled.
        """
        return self._event.wait(timeout=seconds)
