"""Deletion sweep for artifacts whose source document is gone.

After an artifact is deleted, its immediate parent directory is removed if
it no longer holds any files or subdirectories. Only that one level is
pruned: a chain of now-empty ancestors above it is left in place. This
includes the destination root, which the next destination scan recreates.
"""

import logging
import os
from typing import Sequence

from docupack.cli.models import ConversionStatus, ConversionTask
from docupack.storage.content_store import ContentStore

logger = logging.getLogger(__name__)


class DeletionHandler:
    """Removes destination artifacts for DELETED tasks.

    Example:
        >>> handler = DeletionHandler(store)
        >>> deleted = handler.delete_artifacts(deleted_tasks)
        >>> print(f"Deleted {deleted} artifact(s)")
    """

    def __init__(self, store: ContentStore):
        self.store = store

    def delete_artifacts(self, tasks: Sequence[ConversionTask]) -> int:
        """Delete the artifacts of DELETED tasks and prune emptied directories.

        Args:
            tasks: DELETED tasks from ChangeDetector

        Returns:
            Number of artifacts deleted

        Raises:
            ValueError: If a task is not a DELETED task
            RetryExhaustedError: If an I/O failure persists after retries
        """
        if not tasks:
            logger.info("No target files found to delete")
            return 0

        logger.info(f"{len(tasks)} target files found to delete")

        deleted = 0
        for task in tasks:
            if task.status is not ConversionStatus.DELETED:
                raise ValueError(
                    f"Only DELETED tasks can be swept, got {task.status.value}: {task.artifact_path}"
                )

            artifact_path = task.artifact_path
            try:
                self.store.delete_file(artifact_path)
            except FileNotFoundError:
                logger.warning(f"File {artifact_path} does not exist, skipping")
                continue
            deleted += 1

            parent_dir = os.path.dirname(artifact_path)
            if self.store.remove_dir_if_empty(parent_dir):
                logger.debug(f"Removed empty directory {parent_dir}")

        logger.info(f"Artifact deletion complete: {deleted} deleted")
        return deleted
