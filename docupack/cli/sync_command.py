"""Synchronization orchestration for CLI.

This module provides the SyncCommand class that sequences one run:

    validate -> scan source -> scan destination -> (both empty: stop)
    -> build comparison records -> detect changes -> delete -> update
    -> add -> [rebuild index]

Each stage is fail-fast and nothing is rolled back: a fatal error or a
cancellation can leave the destination tree partially updated, and the
next run converges it again.
"""

import logging
import os
from datetime import datetime
from typing import Optional, Sequence

from docupack.cli.change_detector import ChangeDetector
from docupack.cli.conversion_pipeline import (
    DEFAULT_WORKER_RATIO,
    ConversionPipeline,
    default_max_workers,
)
from docupack.cli.deletion_handler import DeletionHandler
from docupack.cli.errors import UsageError
from docupack.cli.index_builder import IndexBuilder
from docupack.cli.models import ConversionStatus, ExitCode, SyncSummary
from docupack.cli.output import OutputHandler
from docupack.content_converter.errors import FrontmatterError
from docupack.content_converter.json_converter import JsonConverter
from docupack.file_mapper.comparison_builder import build_comparison_records
from docupack.file_mapper.errors import ConfigError, FilesystemError
from docupack.file_mapper.models import ComparisonRecord
from docupack.file_mapper.tree_scanner import TreeScanner, index_exclude_patterns
from docupack.storage.cancellation import CancellationToken
from docupack.storage.content_store import ContentStore
from docupack.storage.errors import RetryExhaustedError, SyncCancelledError, SyncError
from docupack.storage.retry_logic import RetryPolicy

logger = logging.getLogger(__name__)


class SyncCommand:
    """Orchestrates a complete synchronization run.

    Coordinates TreeScanner, ChangeDetector, DeletionHandler,
    ConversionPipeline and IndexBuilder. All components share a single
    ContentStore and CancellationToken.

    Example:
        >>> sync_cmd = SyncCommand(output_handler=OutputHandler())
        >>> exit_code = sync_cmd.run("./docs", "./json", index_dir="./json-index")
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        retry_policy: Optional[RetryPolicy] = None,
        worker_ratio: float = DEFAULT_WORKER_RATIO,
        cancel_token: Optional[CancellationToken] = None,
        store: Optional[ContentStore] = None,
        scanner: Optional[TreeScanner] = None,
        change_detector: Optional[ChangeDetector] = None,
        converter: Optional[JsonConverter] = None,
    ):
        """Initialize sync command with dependencies.

        Args:
            output_handler: OutputHandler for terminal output (optional)
            retry_policy: RetryPolicy for file operations (ignored if store is given)
            worker_ratio: Fraction of logical CPUs used by worker pools
            cancel_token: Shared CancellationToken (optional)
            store: ContentStore for all file I/O (optional)
            scanner: TreeScanner for tree enumeration (optional)
            change_detector: ChangeDetector for diffing (optional)
            converter: JsonConverter for document conversion (optional)
        """
        self.output_handler = output_handler or OutputHandler()
        self.cancel_token = cancel_token or CancellationToken()
        self.store = store or ContentStore(retry_policy, cancel_token=self.cancel_token)
        self.scanner = scanner or TreeScanner()
        self.change_detector = change_detector or ChangeDetector()

        converter = converter or JsonConverter()
        max_workers = default_max_workers(worker_ratio)
        self.pipeline = ConversionPipeline(
            self.store, converter, max_workers=max_workers, cancel_token=self.cancel_token
        )
        self.deletion_handler = DeletionHandler(self.store)
        self.index_builder = IndexBuilder(
            self.store,
            converter,
            scanner=self.scanner,
            max_workers=max_workers,
            cancel_token=self.cancel_token,
        )

    def run(
        self,
        source: Optional[str],
        destination: Optional[str],
        index_dir: Optional[str] = None,
        changed_since: Optional[datetime] = None,
    ) -> ExitCode:
        """Execute a synchronization run and report the result.

        This is the error boundary of a run: every exception is reported
        here and translated to an exit code.

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            summary = self.synchronize(source, destination, index_dir, changed_since)
            self.output_handler.print_summary(summary)
            self.output_handler.success("Convert process is successfully completed!")
            return ExitCode.SUCCESS

        except UsageError as e:
            logger.error(f"Usage error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.USAGE_ERROR

        except SyncCancelledError:
            logger.warning("Synchronization cancelled")
            self.output_handler.warning(
                "Cancelled. The destination may be partially updated; run again to converge."
            )
            return ExitCode.CANCELLED

        except RetryExhaustedError as e:
            logger.error(f"I/O error: {e}")
            self.output_handler.error(f"I/O error: {e}")
            return ExitCode.GENERAL_ERROR

        except FrontmatterError as e:
            logger.error(f"Conversion error: {e}")
            self.output_handler.error(f"Conversion error: {e}")
            return ExitCode.GENERAL_ERROR

        except (ConfigError, FilesystemError) as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except SyncError as e:
            logger.error(f"Sync error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during sync")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def synchronize(
        self,
        source: Optional[str],
        destination: Optional[str],
        index_dir: Optional[str] = None,
        changed_since: Optional[datetime] = None,
    ) -> SyncSummary:
        """Bring the destination tree in line with the source tree.

        Args:
            source: A single Markdown document or a directory of documents
            destination: Directory of JSON artifacts (created if absent)
            index_dir: Directory for index.json; None skips the index rebuild
            changed_since: Matched documents modified before this instant are
                           left untouched

        Returns:
            SyncSummary with counts of the applied changes

        Raises:
            UsageError: If required paths are missing (nothing is touched)
            SyncCancelledError: If cancellation is observed
            RetryExhaustedError: If an I/O failure persists after retries
            FrontmatterError: If a document has malformed frontmatter
        """
        self._validate(source, destination, index_dir)
        summary = SyncSummary()

        updates = self.scanner.source_items(source)
        input_root = source
        if os.path.isfile(source):
            input_root = os.path.dirname(os.path.abspath(source))
        updated_records = build_comparison_records(updates, input_root)

        destination = os.path.abspath(destination)
        index_excludes = index_exclude_patterns(destination, index_dir)
        self._check_index_collision(updated_records, index_excludes)

        logger.info(f"target destination directory: {destination}")
        current_items = self.scanner.destination_items(destination, index_excludes)

        if not updates and not current_items:
            logger.warning(f"no directory or file to convert: {source}")
            return summary

        current_records = build_comparison_records(current_items, destination)
        tasks = self.change_detector.detect_changes(
            current_records, updated_records, destination, changed_since
        )

        deleted = [t for t in tasks if t.status is ConversionStatus.DELETED]
        confirming = [t for t in tasks if t.status is ConversionStatus.CONFIRMING]
        added = [t for t in tasks if t.status is ConversionStatus.ADDED]

        self.cancel_token.raise_if_cancelled()
        summary.deleted_count = self.deletion_handler.delete_artifacts(deleted)

        self.cancel_token.raise_if_cancelled()
        update_result = self.pipeline.update_confirming(confirming)
        summary.updated_count = update_result.written
        summary.unchanged_count = update_result.unchanged
        summary.skipped_count += update_result.skipped

        self.cancel_token.raise_if_cancelled()
        add_result = self.pipeline.create_added(added)
        summary.added_count = add_result.written
        summary.skipped_count += add_result.skipped

        if index_dir:
            self.cancel_token.raise_if_cancelled()
            summary.index_written = self.index_builder.rebuild_index(destination, index_dir)

        logger.info(
            f"Sync complete: {summary.added_count} added, {summary.updated_count} updated, "
            f"{summary.deleted_count} deleted, {summary.unchanged_count} unchanged, "
            f"{summary.skipped_count} skipped"
        )
        return summary

    @staticmethod
    def _validate(source: Optional[str], destination: Optional[str], index_dir: Optional[str]) -> None:
        if source is None or not source.strip():
            raise UsageError("input option should be set", "source")
        if destination is None or not destination.strip():
            raise UsageError("output option should be set", "output")
        if not os.path.exists(source):
            raise UsageError(f"no such file or directory: {source}", "source")
        if os.path.isfile(destination):
            raise UsageError(f"not a directory: {destination}", "output")
        if index_dir is not None and os.path.isfile(index_dir):
            raise UsageError(f"not a directory: {index_dir}", "index-dir")

    @staticmethod
    def _check_index_collision(
        updated_records: Sequence[ComparisonRecord],
        index_excludes: Sequence[str],
    ) -> None:
        """Reject a document whose artifact would land on the aggregate index.

        Raises:
            UsageError: If a source document maps to the index.json path
        """
        for pattern in index_excludes:
            index_key = (
                os.path.dirname(pattern).replace("/", os.sep),
                os.path.splitext(os.path.basename(pattern))[0],
            )
            for record in updated_records:
                if record.key == index_key:
                    raise UsageError(
                        f"document {record.full_path} would overwrite the index {pattern}",
                        "index-dir",
                    )
