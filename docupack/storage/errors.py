"""Typed exception hierarchy for storage-related errors.

This module defines the root SyncError used across docupack together with
the errors raised by the storage layer. All exceptions include descriptive
messages with context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all docupack errors.

    Use this to catch any application-level error from the packer.
    """
    pass


class StorageError(SyncError):
    """Base exception for all storage-related errors."""
    pass


class RetryExhaustedError(StorageError):
    """Raised when a transient I/O failure persists after all retries."""

    def __init__(self, operation: str, attempts: int, reason: Optional[str] = None):
        message = f"I/O operation '{operation}' failed after {attempts} attempt(s)"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.operation = operation
        self.attempts = attempts
        self.reason = reason


class SyncCancelledError(SyncError):
    """Raised when a run observes a cancellation request.

    Cancellation is a clean, requested stop and is reported separately from
    failures.
    """

    def __init__(self, message: str = "Operation was cancelled"):
        super().__init__(message)
