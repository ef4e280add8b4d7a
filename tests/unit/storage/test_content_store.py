"""Unit tests for storage.content_store module."""

import errno
import os

import pytest
from unittest.mock import patch

from docupack.storage.cancellation import CancellationToken
from docupack.storage.content_store import ContentStore, content_hash
from docupack.storage.errors import RetryExhaustedError, SyncCancelledError
from docupack.storage.retry_logic import RetryPolicy


class TestContentHash:
    """Test cases for content_hash function."""

    def test_known_digest(self):
        """Digest is the SHA-1 of the UTF-8 bytes."""
        assert content_hash("") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"

    def test_different_text_different_hash(self):
        assert content_hash('{"a":1}') != content_hash('{"a":2}')


class TestReadWrite:
    """Test cases for ContentStore reads and writes."""

    def test_write_creates_parent_directories(self, store, tmp_path):
        """Missing parent directories are created on write."""
        target = tmp_path / "a" / "b" / "c.json"

        store.write_text(str(target), '{"x":1}')

        assert target.read_text(encoding="utf-8") == '{"x":1}'

    def test_write_count_increments(self, store, tmp_path):
        """Every completed write is counted."""
        store.write_text(str(tmp_path / "one.json"), "1")
        store.write_text(str(tmp_path / "two.json"), "2")

        assert store.write_count == 2

    def test_read_strips_byte_order_mark(self, store, tmp_path):
        """A leading UTF-8 BOM is not part of the returned text."""
        target = tmp_path / "doc.md"
        target.write_bytes(b"\xef\xbb\xbf---\ntitle: X\n---\n")

        assert store.read_text(str(target)) == "---\ntitle: X\n---\n"

    def test_newlines_preserved(self, store, tmp_path):
        """CRLF sequences round-trip unchanged."""
        target = tmp_path / "doc.json"
        store.write_text(str(target), "a\r\nb")

        assert target.read_bytes() == b"a\r\nb"
        assert store.read_text(str(target)) == "a\r\nb"

    def test_read_missing_file_raises_file_not_found(self, store, tmp_path):
        with pytest.raises(FileNotFoundError):
            store.read_text(str(tmp_path / "missing.json"))

    def test_transient_write_failure_is_retried(self, store, tmp_path):
        """A write failing once with a transient error succeeds on retry."""
        target = tmp_path / "doc.json"
        real_open = open
        calls = []

        def flaky_open(path, *args, **kwargs):
            if str(path) == str(target) and not calls:
                calls.append(path)
                raise PermissionError(errno.EACCES, "locked")
            return real_open(path, *args, **kwargs)

        with patch("builtins.open", side_effect=flaky_open):
            store.write_text(str(target), "ok")

        assert target.read_text(encoding="utf-8") == "ok"
        assert store.write_count == 1

    def test_persistent_failure_raises_retry_exhausted(self, tmp_path):
        """A write that keeps failing surfaces RetryExhaustedError."""
        store = ContentStore(RetryPolicy(max_attempts=2, backoff_base=0))

        with patch("builtins.open", side_effect=PermissionError(errno.EACCES, "locked")):
            with pytest.raises(RetryExhaustedError):
                store.write_text(str(tmp_path / "doc.json"), "x")

        assert store.write_count == 0

    def test_cancelled_store_does_not_write(self, tmp_path):
        token = CancellationToken()
        token.cancel()
        store = ContentStore(RetryPolicy(backoff_base=0), cancel_token=token)

        with pytest.raises(SyncCancelledError):
            store.write_text(str(tmp_path / "doc.json"), "x")

        assert not (tmp_path / "doc.json").exists()


class TestDeletion:
    """Test cases for file deletion and directory pruning."""

    def test_delete_file(self, store, tmp_path):
        target = tmp_path / "doc.json"
        target.write_text("x")

        store.delete_file(str(target))

        assert not target.exists()

    def test_delete_missing_file_raises_file_not_found(self, store, tmp_path):
        with pytest.raises(FileNotFoundError):
            store.delete_file(str(tmp_path / "missing.json"))

    def test_remove_empty_directory(self, store, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        assert store.remove_dir_if_empty(str(empty)) is True
        assert not empty.exists()

    def test_keep_directory_with_file(self, store, tmp_path):
        full = tmp_path / "full"
        full.mkdir()
        (full / "doc.json").write_text("x")

        assert store.remove_dir_if_empty(str(full)) is False
        assert full.exists()

    def test_keep_directory_with_subdirectory(self, store, tmp_path):
        parent = tmp_path / "parent"
        (parent / "child").mkdir(parents=True)

        assert store.remove_dir_if_empty(str(parent)) is False
        assert os.path.isdir(parent / "child")

    def test_missing_directory_returns_false(self, store, tmp_path):
        assert store.remove_dir_if_empty(str(tmp_path / "missing")) is False
