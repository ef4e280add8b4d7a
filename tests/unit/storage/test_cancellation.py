"""Unit tests for storage.cancellation module."""

import threading

import pytest

from docupack.storage.cancellation import CancellationToken
from docupack.storage.errors import SyncCancelledError, SyncError


class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_initially_not_cancelled(self):
        token = CancellationToken()
        assert token.is_cancelled is False
        token.raise_if_cancelled()

    def test_cancel_sets_flag(self):
        token = CancellationToken()
        token.cancel()
        assert token.is_cancelled is True

    def test_cancel_is_idempotent(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.is_cancelled is True

    def test_raise_if_cancelled(self):
        """raise_if_cancelled raises a SyncError subclass once cancelled."""
        token = CancellationToken()
        token.cancel()

        with pytest.raises(SyncCancelledError) as exc_info:
            token.raise_if_cancelled()

        assert isinstance(exc_info.value, SyncError)
        assert "cancelled" in str(exc_info.value)

    def test_cancel_visible_across_threads(self):
        """A cancel from another thread is observed."""
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()

        assert token.is_cancelled is True
