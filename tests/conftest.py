"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import pytest

from docupack.storage.content_store import ContentStore
from docupack.storage.retry_logic import RetryPolicy


@pytest.fixture
def fast_policy():
    """Retry policy that retries without sleeping."""
    return RetryPolicy(max_attempts=3, backoff_base=0)


@pytest.fixture
def store(fast_policy):
    """ContentStore that never sleeps between retries."""
    return ContentStore(fast_policy)


@pytest.fixture
def write_document():
    """Return a helper writing a document and creating parent directories."""
    def _write(path, text):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        return path
    return _write
