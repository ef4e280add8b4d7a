"""Bounded-parallel conversion of Markdown documents to JSON artifacts.

This module executes ADDED and CONFIRMING tasks produced by ChangeDetector
on a thread pool. ADDED artifacts are written unconditionally; CONFIRMING
artifacts are rewritten only when the SHA-1 hash of the freshly converted
JSON differs from the hash of the artifact on disk, so re-running against
unchanged documents performs no writes at all.
"""

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from docupack.cli.models import (
    ConversionOutcome,
    ConversionStatus,
    ConversionTask,
    PipelineResult,
)
from docupack.content_converter.json_converter import JsonConverter
from docupack.storage.cancellation import CancellationToken
from docupack.storage.content_store import ContentStore, content_hash

logger = logging.getLogger(__name__)

DEFAULT_WORKER_RATIO = 0.75


def default_max_workers(ratio: float = DEFAULT_WORKER_RATIO) -> int:
    """Return ceil(ratio x logical CPU count), at least 1."""
    return max(1, math.ceil((os.cpu_count() or 1) * ratio))


def run_in_pool(
    worker: Callable,
    items: Sequence,
    max_workers: int,
    on_result: Callable[[object], None],
) -> None:
    """Run worker over items on a thread pool, feeding results to on_result.

    on_result is called from the calling thread only, so it may mutate
    state without locking. On the first failure (including cancellation
    raised by a worker) every task still queued is cancelled, running tasks
    are allowed to finish, and the error propagates.
    """
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(worker, item) for item in items]
        try:
            for future in as_completed(futures):
                on_result(future.result())
        except BaseException:
            for future in futures:
                future.cancel()
            raise


class ConversionPipeline:
    """Converts documents and writes artifacts in parallel.

    Attributes:
        store: ContentStore used for every read and write
        converter: JsonConverter turning Markdown into JSON text
        max_workers: Size of the worker pool
        cancel_token: Optional CancellationToken checked by every worker

    Example:
        >>> pipeline = ConversionPipeline(store, JsonConverter())
        >>> result = pipeline.create_added(added_tasks)
        >>> print(f"{result.written} artifact(s) created")
    """

    def __init__(
        self,
        store: ContentStore,
        converter: Optional[JsonConverter] = None,
        max_workers: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.store = store
        self.converter = converter or JsonConverter()
        self.max_workers = max_workers or default_max_workers()
        self.cancel_token = cancel_token
        logger.debug(f"set max workers to {self.max_workers}")

    def create_added(self, tasks: Sequence[ConversionTask]) -> PipelineResult:
        """Create artifacts for documents that have none yet."""
        if not tasks:
            logger.info("No target files found to add")
            return PipelineResult()

        logger.info(f"{len(tasks)} target files found to add")
        return self.process(tasks)

    def update_confirming(self, tasks: Sequence[ConversionTask]) -> PipelineResult:
        """Rewrite artifacts whose converted content has changed."""
        if not tasks:
            logger.info("No target files found to check updates")
            return PipelineResult()

        logger.info(f"{len(tasks)} target files found to check updates")
        return self.process(tasks)

    def process(self, tasks: Sequence[ConversionTask]) -> PipelineResult:
        """Process ADDED and CONFIRMING tasks on the worker pool.

        Args:
            tasks: Tasks to process; processing order is unspecified

        Returns:
            PipelineResult with the count of each outcome

        Raises:
            SyncCancelledError: If cancellation is observed
            RetryExhaustedError: If an I/O failure persists after retries
            FrontmatterError: If a document has malformed frontmatter
        """
        result = PipelineResult()
        if tasks:
            run_in_pool(self._process_task, tasks, self.max_workers, result.record)
        logger.info(
            f"Conversion complete: {result.written} written, "
            f"{result.unchanged} unchanged, {result.skipped} skipped"
        )
        return result

    def _process_task(self, task: ConversionTask) -> ConversionOutcome:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()

        if task.status is ConversionStatus.ADDED:
            return self._create(task)
        elif task.status is ConversionStatus.CONFIRMING:
            return self._update_if_changed(task)
        elif task.status is ConversionStatus.DELETED:
            raise ValueError(f"DELETED task cannot be converted: {task.artifact_path}")
        raise ValueError(f"Unknown conversion status: {task.status!r}")

    def _convert(self, task: ConversionTask) -> Optional[str]:
        markdown_text = self.store.read_text(task.source_path)
        return self.converter.convert(markdown_text, task.source_path)

    def _create(self, task: ConversionTask) -> ConversionOutcome:
        json_text = self._convert(task)
        if json_text is None:
            return ConversionOutcome.SKIPPED

        self.store.write_text(task.artifact_path, json_text)
        return ConversionOutcome.WRITTEN

    def _update_if_changed(self, task: ConversionTask) -> ConversionOutcome:
        json_text = self._convert(task)
        if json_text is None:
            return ConversionOutcome.SKIPPED

        try:
            original_hash = content_hash(self.store.read_text(task.artifact_path))
        except FileNotFoundError:
            logger.warning(f"artifact disappeared during run, recreating: {task.artifact_path}")
            original_hash = None

        if original_hash == content_hash(json_text):
            logger.debug(f"data is not changed, skip: {task.artifact_path}")
            return ConversionOutcome.UNCHANGED

        self.store.write_text(task.artifact_path, json_text)
        return ConversionOutcome.WRITTEN
