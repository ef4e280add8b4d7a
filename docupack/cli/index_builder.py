"""Aggregate index.json rebuilt from every current artifact.

Artifacts are read in parallel and arrive in completion order, which varies
from run to run. The converter sorts the (reference, content) pairs before
serializing, so identical artifact sets always yield a byte-identical
index.json, and the hash comparison against the existing index suppresses
the write.
"""

import logging
import os
from typing import List, Optional, Tuple

from docupack.cli.conversion_pipeline import default_max_workers, run_in_pool
from docupack.content_converter.json_converter import JsonConverter
from docupack.file_mapper.comparison_builder import build_comparison_records
from docupack.file_mapper.models import ComparisonRecord
from docupack.file_mapper.tree_scanner import (
    INDEX_FILE_NAME,
    TreeScanner,
    index_exclude_patterns,
)
from docupack.storage.cancellation import CancellationToken
from docupack.storage.content_store import ContentStore, content_hash

logger = logging.getLogger(__name__)


def document_reference(record: ComparisonRecord) -> str:
    """Return the slash-separated reference of an artifact, e.g. 'api/intro'."""
    relative_dir = record.relative_dir.replace(os.sep, "/").replace("\\", "/")
    if not relative_dir:
        return record.base_name
    return f"{relative_dir}/{record.base_name}"


class IndexBuilder:
    """Rebuilds index.json from the artifacts in the destination tree.

    Example:
        >>> builder = IndexBuilder(store)
        >>> builder.rebuild_index("./json", "./json-index")
        True
    """

    def __init__(
        self,
        store: ContentStore,
        converter: Optional[JsonConverter] = None,
        scanner: Optional[TreeScanner] = None,
        max_workers: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.store = store
        self.converter = converter or JsonConverter()
        self.scanner = scanner or TreeScanner()
        self.max_workers = max_workers or default_max_workers()
        self.cancel_token = cancel_token

    def rebuild_index(self, destination_root: str, index_root: str) -> bool:
        """Rebuild index.json if its content would change.

        Args:
            destination_root: Directory holding the JSON artifacts
            index_root: Directory receiving index.json (created if absent).
                        When it lies inside destination_root, index.json
                        itself is not indexed.

        Returns:
            True if index.json was written, False if it was already current
            or there are no artifacts

        Raises:
            SyncCancelledError: If cancellation is observed
            RetryExhaustedError: If an I/O failure persists after retries
        """
        logger.info(f"generate {INDEX_FILE_NAME} to index directory: {index_root}")
        index_file_path = os.path.join(index_root, INDEX_FILE_NAME)

        artifact_paths = self.scanner.destination_items(
            destination_root, index_exclude_patterns(destination_root, index_root)
        )
        if not artifact_paths:
            logger.warning(f"there is no converted json file: {destination_root}")
            return False

        records = build_comparison_records(artifact_paths, destination_root)
        artifacts: List[Tuple[str, str]] = []
        run_in_pool(self._read_artifact, records, self.max_workers, artifacts.append)

        index_text = self.converter.build_index(artifacts)

        if os.path.exists(index_file_path):
            logger.debug(f"{INDEX_FILE_NAME} is already generated, check hash to detect diff")
            original_hash = content_hash(self.store.read_text(index_file_path))
            if original_hash == content_hash(index_text):
                logger.info(f"data is not changed, skip generating {INDEX_FILE_NAME}")
                return False

        self.store.write_text(index_file_path, index_text)
        logger.info(f"{INDEX_FILE_NAME} written with {len(artifacts)} entries")
        return True

    def _read_artifact(self, record: ComparisonRecord) -> Tuple[str, str]:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()
        return document_reference(record), self.store.read_text(record.full_path)
