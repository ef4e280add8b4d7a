"""Data models for file mapper.

This module defines the data models used to compare the source and
destination trees and to configure a run. All models use dataclasses for
clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from docupack.storage.retry_logic import RetryPolicy


@dataclass(frozen=True)
class ComparisonRecord:
    """A discovered file described relative to the root it was found under.

    The pair (relative_dir, base_name) is the comparison key: two records
    with equal keys are the same logical document regardless of which tree
    they came from.

    Attributes:
        full_path: Absolute path of the file
        root_dir: Root directory the file was discovered under
        relative_dir: Directory of the file relative to root_dir ("" at the root)
        base_name: File name without its extension
    """
    full_path: str
    root_dir: str
    relative_dir: str
    base_name: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.relative_dir, self.base_name)


@dataclass
class SyncConfig:
    """Overall run configuration.

    Loaded from an optional YAML file and overridden by command-line options.

    Attributes:
        source: Source Markdown file or directory
        output_dir: Destination directory for JSON artifacts
        index_dir: Directory for index.json (None skips the index rebuild)
        changed_since: Only re-check matched documents modified at/after this instant
        retry: RetryPolicy applied to every file operation
        worker_ratio: Fraction of logical CPUs used for worker pools
    """
    source: Optional[str] = None
    output_dir: Optional[str] = None
    index_dir: Optional[str] = None
    changed_since: Optional[datetime] = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    worker_ratio: float = 0.75
