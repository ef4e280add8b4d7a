"""Artifact and document I/O routed through the retry executor.

Every read, write and delete performed during a run goes through
ContentStore so that transient filesystem failures are retried uniformly
and cancellation is observed before each attempt.
"""

import hashlib
import logging
import os
import threading
import time
from typing import Callable, Optional

from .cancellation import CancellationToken
from .retry_logic import RetryPolicy, retry_on_transient

logger = logging.getLogger(__name__)


def content_hash(text: str) -> str:
    """Return the SHA-1 hex digest of the UTF-8 encoding of text."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class ContentStore:
    """Reads and writes UTF-8 text files with retry on transient errors.

    Text is read and written with newline translation disabled so that the
    bytes on disk are exactly the bytes that get hashed.

    Attributes:
        policy: RetryPolicy applied to every operation
        cancel_token: Optional CancellationToken checked before each attempt
        write_count: Number of completed writes since construction

    Example:
        >>> store = ContentStore(RetryPolicy(max_attempts=3, backoff_base=0))
        >>> store.write_text("out/a.json", '{"title":"X"}')
        >>> store.read_text("out/a.json")
        '{"title":"X"}'
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        cancel_token: Optional[CancellationToken] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy or RetryPolicy()
        self.cancel_token = cancel_token
        self._sleep = sleep
        self._lock = threading.Lock()
        self._write_count = 0

    @property
    def write_count(self) -> int:
        with self._lock:
            return self._write_count

    def _retry(self, func: Callable, *args, operation: str):
        return retry_on_transient(
            func,
            *args,
            policy=self.policy,
            cancel_token=self.cancel_token,
            sleep=self._sleep,
            operation=operation,
        )

    def read_text(self, path: str) -> str:
        """Read a whole file as text.

        A leading UTF-8 byte order mark is dropped.

        Args:
            path: File to read

        Returns:
            File content

        Raises:
            FileNotFoundError: If the file does not exist
            RetryExhaustedError: If a transient failure persists
        """
        logger.debug(f"read file: {path}")
        return self._retry(_read, path, operation=f"read {path}")

    def write_text(self, path: str, text: str) -> None:
        """Write text to a file, creating missing parent directories.

        Args:
            path: Destination file, truncated if it exists
            text: Content to write

        Raises:
            RetryExhaustedError: If a transient failure persists
        """
        logger.debug(f"write file: {path}")
        target_dir = os.path.dirname(path)
        if target_dir and not os.path.isdir(target_dir):
            logger.debug(f"create new directory: {target_dir}")
            self._retry(_makedirs, target_dir, operation=f"create directory {target_dir}")

        self._retry(_write, path, text, operation=f"write {path}")
        with self._lock:
            self._write_count += 1

    def delete_file(self, path: str) -> None:
        """Delete a single file.

        Raises:
            FileNotFoundError: If the file does not exist
            RetryExhaustedError: If a transient failure persists
        """
        logger.debug(f"delete file: {path}")
        self._retry(os.remove, path, operation=f"delete {path}")

    def remove_dir_if_empty(self, path: str) -> bool:
        """Remove a directory that holds no files and no subdirectories.

        Args:
            path: Directory to check

        Returns:
            True if the directory was removed, False if it is missing or not empty
        """
        if not os.path.isdir(path):
            return False

        with os.scandir(path) as entries:
            if any(True for _ in entries):
                return False

        logger.debug(f"delete empty directory: {path}")
        self._retry(os.rmdir, path, operation=f"remove directory {path}")
        return True


def _read(path: str) -> str:
    with open(path, 'r', encoding='utf-8-sig', newline='') as f:
        return f.read()


def _write(path: str, text: str) -> None:
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(text)


def _makedirs(path: str) -> None:
    os.makedirs(path, exist_ok=True)
