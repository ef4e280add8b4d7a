"""Cooperative cancellation shared across a synchronization run."""

import threading

from .errors import SyncCancelledError


class CancellationToken:
    """Thread-safe cancellation flag.

    A single token is threaded through every operation that can block on the
    filesystem. Workers check it at the start of each iteration and before
    each retry attempt; in-flight file operations are allowed to finish.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.is_cancelled
        True
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise SyncCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise SyncCancelledError()
