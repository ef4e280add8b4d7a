"""Storage layer for docupack.

This package provides the retry executor, cooperative cancellation and the
content store through which every file read, write and delete is routed.
"""

from .cancellation import CancellationToken
from .content_store import ContentStore, content_hash
from .errors import (
    SyncError,
    StorageError,
    RetryExhaustedError,
    SyncCancelledError,
)
from .retry_logic import RetryPolicy, retry_on_transient, is_transient_error

__all__ = [
    'CancellationToken',
    'ContentStore',
    'content_hash',
    'SyncError',
    'StorageError',
    'RetryExhaustedError',
    'SyncCancelledError',
    'RetryPolicy',
    'retry_on_transient',
    'is_transient_error',
]
