"""Cooperative cancellation for background jobs."""

import threading
from typing import Callable, Optional


class CancelToken:
    """
    Cancellation flag handed through a job's call chain.

    The token is cancelled when cancel() was called on it, or when the
    optional still_wanted probe (typically a read of a persisted flag)
    returns False.
    """

    def __init__(self, still_wanted: Optional[Callable[[], bool]] = None):
        self._event = threading.Event()
        self._still_wanted = still_wanted

    def cancel(self):
        self._event.set()

    def bind(self, still_wanted: Callable[[], bool]) -> "CancelToken":
        """Attach the persisted-flag probe. Returns self."""
        self._still_wanted = still_wanted
        return self

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._still_wanted is not None and not self._still_wanted():
            return True
        return False

    def sleep(self, seconds: float) -> bool:
        """
        Wait up to seconds, waking early on cancel().

        Returns:
            True if the token is cancelled after the wait
        """
        if seconds > 0:
            self._event.wait(seconds)
        return self.cancelled
