"""Retry logic with exponential backoff for transient filesystem errors.

This module provides retry functionality for file reads, writes and deletes
that can fail momentarily (a file locked by an editor, a share violation,
an antivirus scanner holding a handle). Transient failures are retried with
exponential backoff (2s, 4s, 8s, 16s with the default policy); permanent
errors such as a missing file and all non-I/O errors fail fast.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .cancellation import CancellationToken
from .errors import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# OSError subclasses that will not go away by waiting
PERMANENT_OS_ERRORS = (
    FileNotFoundError,
    IsADirectoryError,
    NotADirectoryError,
    FileExistsError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration passed explicitly to the content store.

    Attributes:
        max_attempts: Total number of attempts, including the first one
        backoff_base: Base of the exponential backoff; the delay before
                      retry n (1-based) is backoff_base ** n seconds.
                      Use 0 for retries without sleeping.
    """
    max_attempts: int = 5
    backoff_base: float = 2.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.backoff_base < 0:
            raise ValueError(f"backoff_base must not be negative, got {self.backoff_base}")

    def delay_for(self, retry_num: int) -> float:
        """Return the sleep duration before the given retry (1-based)."""
        return float(self.backoff_base ** retry_num)


def is_transient_error(exception: BaseException) -> bool:
    """Check if an exception represents a transient I/O failure.

    Args:
        exception: The exception to check

    Returns:
        True for OSError subclasses worth retrying, False otherwise
    """
    if not isinstance(exception, OSError):
        return False
    return not isinstance(exception, PERMANENT_OS_ERRORS)


def retry_on_transient(
    func: Callable[..., T],
    *args,
    policy: Optional[RetryPolicy] = None,
    cancel_token: Optional[CancellationToken] = None,
    sleep: Callable[[float], None] = time.sleep,
    operation: Optional[str] = None,
    **kwargs,
) -> T:
    """Run a function, retrying transient I/O errors with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        policy: Retry configuration (defaults to RetryPolicy())
        cancel_token: Checked before every attempt
        sleep: Sleep function, injectable for tests
        operation: Label used in log and error messages
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        RetryExhaustedError: If the transient failure persists after all attempts
        SyncCancelledError: If cancellation is observed before an attempt
        Other exceptions: Passed through immediately without retry

    Example:
        >>> text = retry_on_transient(path.read_text, policy=RetryPolicy(), operation="read")
    """
    policy = policy or RetryPolicy()
    label = operation or getattr(func, '__name__', repr(func))

    for attempt in range(1, policy.max_attempts + 1):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        try:
            return func(*args, **kwargs)
        except OSError as e:
            if not is_transient_error(e):
                raise

            if attempt >= policy.max_attempts:
                logger.error(
                    f"{label}: {type(e).__name__} persisted after "
                    f"{policy.max_attempts} attempt(s), giving up"
                )
                raise RetryExhaustedError(label, policy.max_attempts, str(e)) from e

            wait_time = policy.delay_for(attempt)
            logger.info(
                f"catch {type(e).__name__}, retrying... ({attempt}) "
                f"{label} in {wait_time:g}s"
            )
            if wait_time > 0:
                sleep(wait_time)

    # max_attempts >= 1 guarantees the loop returns or raises
    raise RetryExhaustedError(label, policy.max_attempts)
