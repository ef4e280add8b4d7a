"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures,
following the patterns established in docupack/file_mapper/models.py.
"""

import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from docupack.file_mapper.tree_scanner import ARTIFACT_EXTENSION


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): Fatal error (exhausted retries, invalid frontmatter, ...)
    - USAGE_ERROR (2): Missing or invalid required paths; nothing was touched
    - CANCELLED (130): Run stopped on request (Ctrl-C)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    CANCELLED = 130


class ConversionStatus(Enum):
    """What a run must do for one comparison key.

    - ADDED: Key exists only in the source tree (create the artifact)
    - DELETED: Key exists only in the destination tree (remove the artifact)
    - CONFIRMING: Key exists in both trees (rewrite only if content changed)
    """
    ADDED = "added"
    DELETED = "deleted"
    CONFIRMING = "confirming"


class ConversionOutcome(Enum):
    """Result of processing one ADDED or CONFIRMING task."""
    WRITTEN = "written"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ConversionTask:
    """A unit of work produced by the change detector.

    Attributes:
        base_name: Document/artifact name without extension
        relative_dir: Directory relative to the tree roots ("" at the root)
        output_root: Destination directory
        status: ConversionStatus of this key
        source_path: Markdown document to convert (None for DELETED tasks)

    Example:
        >>> task = ConversionTask("intro", "api", "/out", ConversionStatus.ADDED, "/src/api/intro.md")
        >>> task.artifact_path
        '/out/api/intro.json'
    """
    base_name: str
    relative_dir: str
    output_root: str
    status: ConversionStatus
    source_path: Optional[str] = None

    @property
    def artifact_path(self) -> str:
        return os.path.join(
            self.output_root,
            self.relative_dir,
            f"{self.base_name}.{ARTIFACT_EXTENSION}",
        )


@dataclass
class PipelineResult:
    """Counts of task outcomes for one pipeline fan-out."""
    written: int = 0
    unchanged: int = 0
    skipped: int = 0

    def record(self, outcome: ConversionOutcome) -> None:
        if outcome is ConversionOutcome.WRITTEN:
            self.written += 1
        elif outcome is ConversionOutcome.UNCHANGED:
            self.unchanged += 1
        elif outcome is ConversionOutcome.SKIPPED:
            self.skipped += 1
        else:
            raise ValueError(f"Unknown conversion outcome: {outcome!r}")


@dataclass
class SyncSummary:
    """Summary of a synchronization run for display to user.

    Attributes:
        added_count: Artifacts created for new documents
        updated_count: Existing artifacts rewritten because content changed
        unchanged_count: Matched documents whose artifact was already current
        skipped_count: Documents without frontmatter (no artifact produced)
        deleted_count: Artifacts removed because their document is gone
        index_written: True if index.json was (re)written

    Example:
        >>> summary = SyncSummary(added_count=2, deleted_count=1)
        >>> summary.converted_count
        2
    """
    added_count: int = 0
    updated_count: int = 0
    unchanged_count: int = 0
    skipped_count: int = 0
    deleted_count: int = 0
    index_written: bool = False

    @property
    def converted_count(self) -> int:
        return self.added_count + self.updated_count
