"""Unit tests for storage.retry_logic module."""

import errno

import pytest
from unittest.mock import MagicMock

from docupack.storage.cancellation import CancellationToken
from docupack.storage.errors import RetryExhaustedError, SyncCancelledError
from docupack.storage.retry_logic import (
    RetryPolicy,
    is_transient_error,
    retry_on_transient,
)


class TestRetryPolicy:
    """Test cases for RetryPolicy."""

    def test_defaults(self):
        """Default policy allows 5 attempts with base 2."""
        policy = RetryPolicy()
        assert policy.max_attempts == 5
        assert policy.backoff_base == 2.0

    def test_delay_grows_exponentially(self):
        """Delay before retry n is base ** n."""
        policy = RetryPolicy()
        assert [policy.delay_for(n) for n in range(1, 5)] == [2.0, 4.0, 8.0, 16.0]

    def test_zero_base_means_no_delay(self):
        """A zero base yields zero delay."""
        assert RetryPolicy(backoff_base=0).delay_for(3) == 0.0

    def test_rejects_zero_attempts(self):
        """max_attempts below 1 is rejected."""
        with pytest.raises(ValueError, match="max_attempts"):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_base(self):
        """Negative backoff base is rejected."""
        with pytest.raises(ValueError, match="backoff_base"):
            RetryPolicy(backoff_base=-1)


class TestIsTransientError:
    """Test cases for is_transient_error function."""

    def test_permission_error_is_transient(self):
        assert is_transient_error(PermissionError(errno.EACCES, "locked")) is True

    def test_generic_os_error_is_transient(self):
        assert is_transient_error(OSError(errno.EBUSY, "busy")) is True

    def test_file_not_found_is_permanent(self):
        assert is_transient_error(FileNotFoundError("missing")) is False

    def test_is_a_directory_is_permanent(self):
        assert is_transient_error(IsADirectoryError("dir")) is False

    def test_non_io_error_is_not_transient(self):
        assert is_transient_error(ValueError("bad")) is False


class TestRetryOnTransient:
    """Test cases for retry_on_transient function."""

    def test_success_on_first_attempt(self):
        """Result is returned without sleeping when the first call succeeds."""
        func = MagicMock(return_value="ok")
        sleep = MagicMock()

        result = retry_on_transient(func, "a", key="b", sleep=sleep)

        assert result == "ok"
        func.assert_called_once_with("a", key="b")
        sleep.assert_not_called()

    def test_retries_transient_error_with_backoff(self):
        """Transient errors are retried with exponential delays."""
        error = PermissionError(errno.EACCES, "locked")
        func = MagicMock(side_effect=[error, error, "ok"])
        sleep = MagicMock()

        result = retry_on_transient(func, policy=RetryPolicy(), sleep=sleep)

        assert result == "ok"
        assert func.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [2.0, 4.0]

    def test_raises_retry_exhausted_after_max_attempts(self):
        """Persistent transient errors surface as RetryExhaustedError."""
        error = OSError(errno.EBUSY, "busy")
        func = MagicMock(side_effect=error)
        sleep = MagicMock()

        with pytest.raises(RetryExhaustedError) as exc_info:
            retry_on_transient(
                func, policy=RetryPolicy(max_attempts=3), sleep=sleep, operation="write x"
            )

        assert func.call_count == 3
        assert sleep.call_count == 2
        assert exc_info.value.attempts == 3
        assert exc_info.value.operation == "write x"
        assert exc_info.value.__cause__ is error

    def test_single_attempt_policy_does_not_sleep(self):
        """With max_attempts=1 the first failure is final."""
        func = MagicMock(side_effect=OSError(errno.EBUSY, "busy"))
        sleep = MagicMock()

        with pytest.raises(RetryExhaustedError):
            retry_on_transient(func, policy=RetryPolicy(max_attempts=1), sleep=sleep)

        func.assert_called_once()
        sleep.assert_not_called()

    def test_permanent_error_propagates_immediately(self):
        """FileNotFoundError is not retried."""
        func = MagicMock(side_effect=FileNotFoundError("missing"))
        sleep = MagicMock()

        with pytest.raises(FileNotFoundError):
            retry_on_transient(func, sleep=sleep)

        func.assert_called_once()
        sleep.assert_not_called()

    def test_non_io_error_propagates_immediately(self):
        """Non-OSError exceptions are not retried."""
        func = MagicMock(side_effect=ValueError("bad"))

        with pytest.raises(ValueError):
            retry_on_transient(func, sleep=MagicMock())

        func.assert_called_once()

    def test_zero_backoff_skips_sleep(self):
        """A zero delay does not call sleep at all."""
        error = OSError(errno.EBUSY, "busy")
        func = MagicMock(side_effect=[error, "ok"])
        sleep = MagicMock()

        retry_on_transient(func, policy=RetryPolicy(backoff_base=0), sleep=sleep)

        sleep.assert_not_called()

    def test_cancelled_token_prevents_first_attempt(self):
        """No attempt is made once cancellation was requested."""
        token = CancellationToken()
        token.cancel()
        func = MagicMock()

        with pytest.raises(SyncCancelledError):
            retry_on_transient(func, cancel_token=token, sleep=MagicMock())

        func.assert_not_called()

    def test_cancellation_observed_before_retry(self):
        """Cancellation requested during backoff stops further attempts."""
        token = CancellationToken()
        func = MagicMock(side_effect=OSError(errno.EBUSY, "busy"))

        def cancel_while_sleeping(_seconds):
            token.cancel()

        with pytest.raises(SyncCancelledError):
            retry_on_transient(func, cancel_token=token, sleep=cancel_while_sleeping)

        func.assert_called_once()
